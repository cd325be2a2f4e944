"""Shared contracts for cross-boundary data types.

All dataclasses, enums, sentinels and exceptions that cross module
boundaries are defined here.

This package is a LEAF MODULE with no outbound dependencies to core.
Settings classes are NOT re-exported here - import them from
morphic.core.config.

Import patterns:
    from morphic.contracts import ChangeNode, SchemaDescriptor, embeds_many
    from morphic.core.config import MorphSettings
"""

from morphic.contracts.change_node import (
    ChangeNode,
    FieldError,
    MissingNode,
    is_node_list,
    value_valid,
)
from morphic.contracts.enums import (
    Cardinality,
    ChangeAction,
    OnReplace,
    RelationKind,
)
from morphic.contracts.errors import (
    InvalidChangeNodeError,
    InvalidPathError,
    InvalidValidatorError,
    MorphError,
    RelationReplaceError,
    SchemaDefinitionError,
    UnknownSchemaError,
)
from morphic.contracts.results import MaterializeResult
from morphic.contracts.schema import (
    RelationMeta,
    SchemaDescriptor,
    SchemaIntrospection,
    embeds_many,
    embeds_one,
    has_many,
    has_one,
    through,
)
from morphic.contracts.sentinels import MISSING, NOT_LOADED, MissingSentinel, NotLoaded

__all__ = [  # Grouped by category for readability
    # change_node
    "ChangeNode",
    "FieldError",
    "MissingNode",
    "is_node_list",
    "value_valid",
    # enums
    "Cardinality",
    "ChangeAction",
    "OnReplace",
    "RelationKind",
    # errors
    "InvalidChangeNodeError",
    "InvalidPathError",
    "InvalidValidatorError",
    "MorphError",
    "RelationReplaceError",
    "SchemaDefinitionError",
    "UnknownSchemaError",
    # results
    "MaterializeResult",
    # schema
    "RelationMeta",
    "SchemaDescriptor",
    "SchemaIntrospection",
    "embeds_many",
    "embeds_one",
    "has_many",
    "has_one",
    "through",
    # sentinels
    "MISSING",
    "NOT_LOADED",
    "MissingSentinel",
    "NotLoaded",
]
