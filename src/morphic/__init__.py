"""
morphic: schema-driven casting, validation and filtering of loosely-typed data.

Raw payloads are cast into change nodes that carry proposed changes,
field-level errors and validity; validators walk nested (one- and
many-relation) paths; valid nodes materialize into typed instances.
"""

from morphic.contracts import (
    NOT_LOADED,
    ChangeAction,
    ChangeNode,
    FieldError,
    InvalidChangeNodeError,
    InvalidPathError,
    InvalidValidatorError,
    MaterializeResult,
    MissingNode,
    MorphError,
    OnReplace,
    RelationReplaceError,
    SchemaDefinitionError,
    SchemaDescriptor,
    UnknownSchemaError,
    embeds_many,
    embeds_one,
    has_many,
    has_one,
    through,
)
from morphic.core.registry import SchemaRegistry
from morphic.morph import Morph

__version__ = "0.1.0"

__all__ = [
    "NOT_LOADED",
    "ChangeAction",
    "ChangeNode",
    "FieldError",
    "InvalidChangeNodeError",
    "InvalidPathError",
    "InvalidValidatorError",
    "MaterializeResult",
    "MissingNode",
    "Morph",
    "MorphError",
    "OnReplace",
    "RelationReplaceError",
    "SchemaDefinitionError",
    "SchemaDescriptor",
    "SchemaRegistry",
    "UnknownSchemaError",
    "embeds_many",
    "embeds_one",
    "has_many",
    "has_one",
    "through",
]
