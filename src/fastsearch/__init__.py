"""
fast-search: prefix autocomplete over a static vocabulary.

Quick start::

    from fastsearch.core.lookup import LookupEngine, OrderedIndexBackend
    from fastsearch.index.ordered import InMemoryOrderedIndex

    engine = LookupEngine(OrderedIndexBackend(InMemoryOrderedIndex(["APP*", "APPLE*"])))
    engine.lookup("ap").results   # ['APP', 'APPLE']
"""

__version__ = "0.2.0"
