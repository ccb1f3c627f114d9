"""Service Layer - imperative shell around the pure core.

Invariants:
    - Services own IO (DB sessions, registry lookups); core/ stays pure
    - Every store mutation is followed by a cache invalidation

Design Decisions:
    - Store, cache and resolver are plain classes wired by FastAPI dependencies
"""
