"""
Vocabulary stores behind the lookup engine.

- :mod:`fastsearch.index.ordered`: rank/range stores (memory, Redis)
- :mod:`fastsearch.index.keystore`: prefix-listing stores (memory, SQLite, Cloudflare KV)
- :mod:`fastsearch.index.factory`: build stores and engines from settings
- :mod:`fastsearch.index.loader`: bulk vocabulary loading
"""
