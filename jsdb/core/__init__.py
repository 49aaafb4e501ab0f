"""Core Layer — pure domain logic, no IO, no filesystem, no logging setup.

Invariants:
    - No module in core/ imports from services/, schemas/ or infrastructure/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: condition evaluation and
      envelopes are testable without touching disk
"""
