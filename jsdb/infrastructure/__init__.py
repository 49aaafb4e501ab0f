"""Infrastructure Layer — filesystem storage, locking, and logging setup.

Invariants:
    - Every OSError and JSON decode failure is translated to a JsdbError here
    - Nothing above this layer opens files directly
"""
