"""All kinds, cardinalities, actions and policies used across module boundaries.

These are StrEnums so they compare equal to their string values and render
readably in error messages and log events.
"""

from enum import StrEnum


class Cardinality(StrEnum):
    """How many members a relation holds."""

    ONE = "one"
    MANY = "many"


class RelationKind(StrEnum):
    """Kind of a relation declared on a schema.

    Values:
        EMBEDDED_ONE / EMBEDDED_MANY: Owned nested values with no independent identity
        ASSOCIATED_ONE / ASSOCIATED_MANY: Owned by reference (their own schema/table)
        THROUGH: Derived via a chain of other relations; read-only, never cast
    """

    EMBEDDED_ONE = "embedded_one"
    EMBEDDED_MANY = "embedded_many"
    ASSOCIATED_ONE = "associated_one"
    ASSOCIATED_MANY = "associated_many"
    THROUGH = "through"

    @property
    def is_embedded(self) -> bool:
        return self in (RelationKind.EMBEDDED_ONE, RelationKind.EMBEDDED_MANY)

    @property
    def is_associated(self) -> bool:
        return self in (RelationKind.ASSOCIATED_ONE, RelationKind.ASSOCIATED_MANY)

    @property
    def is_through(self) -> bool:
        return self is RelationKind.THROUGH


class ChangeAction(StrEnum):
    """What a change node will do to the instance it wraps.

    Root nodes carry no action. Nested nodes are tagged by the caster:
    INSERT for new members, UPDATE for matched existing members, REPLACE for
    existing members discarded under an on_replace=delete policy.
    """

    INSERT = "insert"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"

    @property
    def is_removal(self) -> bool:
        return self in (ChangeAction.REPLACE, ChangeAction.DELETE)


class OnReplace(StrEnum):
    """Policy for existing relation members that incoming data does not keep.

    Values:
        RAISE: Raise RelationReplaceError (caller must send matching members)
        MARK_AS_INVALID: Record an "is invalid" error on the parent field
        DELETE: Keep discarded members in the changes as REPLACE nodes
        UPDATE: Update the existing member in place (one-relations only)
    """

    RAISE = "raise"
    MARK_AS_INVALID = "mark_as_invalid"
    DELETE = "delete"
    UPDATE = "update"
