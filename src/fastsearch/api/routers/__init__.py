"""API routers package.

Tags:
    fast-search, api, routers
"""
