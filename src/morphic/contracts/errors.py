"""Exceptions raised by morphic.

Validation failures are NOT exceptions: they accumulate as FieldError
entries on change nodes. Everything here signals a caller defect (a bad
path, a broken visitor, an unregistered schema) or the explicit raising API.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from morphic.contracts.change_node import ChangeNode


class MorphError(Exception):
    """Base class for all morphic exceptions."""


class SchemaDefinitionError(MorphError):
    """Raised when a schema descriptor is internally inconsistent.

    Examples: a name declared both as a scalar and as a relation, a
    primary key that is not a scalar field, or on_replace=update on a
    many-relation.
    """


class UnknownSchemaError(MorphError, KeyError):
    """Raised when a schema has not been registered with the introspection."""

    def __init__(self, schema: Any) -> None:
        self.schema = schema
        name = getattr(schema, "__qualname__", repr(schema))
        super().__init__(f"Schema {name} is not registered")

    def __str__(self) -> str:
        # KeyError.__str__ would wrap the message in quotes
        return str(self.args[0])


class InvalidPathError(MorphError):
    """Raised when a path does not lead through nested change nodes.

    The walker requires every segment of the path to name a field of the
    schema at that depth, and every intermediate segment to hold a nested
    change node (or a list of them).
    """

    def __init__(self, message: str, *, field: str | None = None, schema: Any = None) -> None:
        self.field = field
        self.schema = schema
        super().__init__(message)


class InvalidValidatorError(MorphError):
    """Raised when a validation visitor does not return a change node."""

    def __init__(self, returned: Any = None) -> None:
        self.returned = returned
        super().__init__("Validation functions are expected to take a change node and to return one")


class RelationReplaceError(MorphError):
    """Raised when incoming data would replace relation members under on_replace=raise."""

    def __init__(self, relation: str, schema: Any) -> None:
        self.relation = relation
        self.schema = schema
        name = getattr(schema, "__qualname__", repr(schema))
        super().__init__(
            f"You are attempting to change relation {relation!r} of {name} but the on_replace "
            f"policy of this relation is set to 'raise'. Existing members not present in the "
            f"incoming data would be discarded. Declare the relation with on_replace='delete', "
            f"'mark_as_invalid' or (for one-relations) 'update' to allow this."
        )


class InvalidChangeNodeError(MorphError):
    """Raised by the raising materialize API when the change node is invalid.

    Attributes:
        node: The invalid change node (inspect node.errors and nested nodes)
    """

    def __init__(self, node: ChangeNode, message: str) -> None:
        self.node = node
        super().__init__(message)
