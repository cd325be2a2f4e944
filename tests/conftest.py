# tests/conftest.py
"""Shared test fixtures and helpers.

Fixture schemas live in tests/fixtures/schemas.py; every test gets a fresh
registry so registration in one test never leaks into another.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from morphic.core.casting import Caster
from morphic.core.registry import SchemaRegistry
from morphic.morph import Morph
from tests.fixtures.schemas import build_registry

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Registry fixtures
# =============================================================================


@pytest.fixture
def registry() -> SchemaRegistry:
    return build_registry()


@pytest.fixture
def caster(registry: SchemaRegistry) -> Caster:
    return Caster(registry)


@pytest.fixture
def morph(registry: SchemaRegistry) -> Morph:
    return Morph(registry)
