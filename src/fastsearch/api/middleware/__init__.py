"""API middleware package.

Manifesto:
    Cross-cutting concerns (request IDs, timing, error mapping) belong in
    middleware so the search router stays focused on lookups.

Tags:
    fast-search, api, middleware
"""
