"""Service Layer — imperative shell around the pure core.

Invariants:
    - Services own mutable state (graphs, drag sessions) and logging
    - Validation is delegated to core/enforce_* functions
"""
