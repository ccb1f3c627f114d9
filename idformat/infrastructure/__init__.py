"""Infrastructure Layer - database access and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All database failures are mapped to DatabaseError (core/errors.py)
"""
