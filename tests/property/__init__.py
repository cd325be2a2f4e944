# tests/property/__init__.py
"""Property-based tests for morphic.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of: validity composes with AND,
valid nodes survive a materialize-then-cast round trip, and path expansion
accounts for every field it is given.
"""
