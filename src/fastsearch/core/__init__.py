"""
Core primitives: errors, logging, settings, term handling, and the lookup engine.

Tags:
    fast-search, core
"""
