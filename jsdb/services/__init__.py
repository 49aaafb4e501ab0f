"""Services Layer — query builder and command dispatch.

Invariants:
    - Services talk to disk only through DocumentStore
    - Command dispatch uses an explicit dict mapping (no getattr lookup)
"""
