# tests/fixtures/__init__.py
"""Shared fixture schemas for morphic tests.

Available helpers:
- build_registry: fresh SchemaRegistry with the order domain registered
"""

from tests.fixtures.schemas import build_registry

__all__ = [
    "build_registry",
]
