"""Core engine: registry, casting, walking, validation, filtering, materialization.

Configuration and logging setup live in morphic.core.config and
morphic.core.logging and are not re-exported here.
"""

from morphic.core.casting import Caster
from morphic.core.filtering import deep_filter_by_schema_fields, filter_by_schema_fields, map_from_instance
from morphic.core.materialize import (
    applied_changes,
    collect_errors,
    materialize,
    materialize_or_raise,
    traverse_errors,
)
from morphic.core.paths import expand_path, split_whitelist
from morphic.core.registry import SchemaRegistry
from morphic.core.scalars import PydanticScalarCaster, ScalarCaster, ScalarCastResult
from morphic.core.validation import (
    add_error,
    validate_change,
    validate_inclusion,
    validate_length,
    validate_nested,
    validate_number,
    validate_required,
)
from morphic.core.walker import walk

__all__ = [
    "Caster",
    "PydanticScalarCaster",
    "ScalarCastResult",
    "ScalarCaster",
    "SchemaRegistry",
    "add_error",
    "applied_changes",
    "collect_errors",
    "deep_filter_by_schema_fields",
    "expand_path",
    "filter_by_schema_fields",
    "map_from_instance",
    "materialize",
    "materialize_or_raise",
    "split_whitelist",
    "traverse_errors",
    "validate_change",
    "validate_inclusion",
    "validate_length",
    "validate_nested",
    "validate_number",
    "validate_required",
    "walk",
]
