# src/morphic/core/validation.py
"""Validators over change-node trees.

validate_required() and validate_nested() route through the walker, so
both handle one- and many-relations the same way and both compose validity
with AND.

The field helpers (validate_number, validate_length, ...) work on one node
and only inspect values present in its changes; fields the caller did not
send are never reported.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable, Sequence
from functools import partial
from typing import Any

from morphic.contracts.change_node import ChangeNode, FieldError, MissingNode
from morphic.contracts.sentinels import MISSING, NOT_LOADED
from morphic.core.paths import expand_path
from morphic.core.walker import check_segment, walk

BLANK_MESSAGE = "can't be blank"


def _scalar_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _relation_blank(value: Any) -> bool:
    if value is None or value is NOT_LOADED or value is MISSING:
        return True
    if isinstance(value, ChangeNode):
        return value.is_removal
    if isinstance(value, (list, tuple)):
        return all(isinstance(m, ChangeNode) and m.is_removal for m in value)
    return False


def _field_blank(node: ChangeNode, name: str) -> bool:
    check_segment(node, name)
    if node.descriptor.is_scalar(name):
        return _scalar_blank(node.get_field(name))
    return _relation_blank(node.get_field(name))


def _require(node: ChangeNode, fields: Iterable[str], message: str) -> ChangeNode:
    for name in fields:
        if _field_blank(node, name):
            node = node.with_error(name, message, validation="required")
    return node


def _required_visitor(target: ChangeNode | MissingNode, *, fields: tuple[str, ...], message: str) -> ChangeNode:
    if isinstance(target, MissingNode):
        # Nothing to descend into: the relation itself is what's missing
        parent = target.parent
        if _field_blank(parent, target.field):
            return parent.with_error(target.field, message, validation="required")
        return parent
    return _require(target, fields, message)


def validate_required(root: ChangeNode, spec: Any, message: str = BLANK_MESSAGE) -> ChangeNode:
    """Require fields at any depth.

    A scalar is blank when its effective value (the change if one is
    recorded, else the base value) is None or a whitespace-only string. A
    relation is blank when that value is None, NOT_LOADED, an empty list,
    or a list whose members are all being removed.

    Args:
        root: Root change node
        spec: Path spec, e.g. ["reference", ("line_items", ["sku"])]
        message: Error message for blank fields

    Returns:
        New root with a {"validation": "required"} error per blank field

    Raises:
        InvalidPathError: If a field is not declared by its schema, or is a
            through relation
    """
    for prefix, fields in expand_path(spec):
        if not prefix:
            root = _require(root, fields, message)
        else:
            root = walk(
                root,
                prefix,
                partial(_required_visitor, fields=fields, message=message),
                descend_unchanged=True,
            )
    return root


def validate_nested(root: ChangeNode, path: Sequence[str], visitor: Callable[[ChangeNode], ChangeNode]) -> ChangeNode:
    """Run a validation function on the node(s) at the end of path.

    Branches that are absent from the changes are left untouched. The
    function must return a ChangeNode.

    Example:
        validate_nested(node, ["line_items", "note"], lambda n: validate_length(n, "body", maximum=140))
    """

    def _visit(target: ChangeNode | MissingNode) -> ChangeNode:
        if isinstance(target, MissingNode):
            return target.parent
        return visitor(target)

    return walk(root, path, _visit)


def add_error(node: ChangeNode, field: str, message: str, **metadata: Any) -> ChangeNode:
    return node.with_error(field, message, **metadata)


def validate_change(
    node: ChangeNode,
    field: str,
    validator: Callable[[str, Any], Iterable[tuple[str, str] | FieldError]],
) -> ChangeNode:
    """Run validator(field, value) when field has a non-None change.

    The validator returns (field, message) pairs or FieldErrors; an empty
    result means the value is acceptable.
    """
    value = node.get_change(field, MISSING)
    if value is MISSING or value is None:
        return node
    for error in validator(field, value):
        if isinstance(error, FieldError):
            node = node.with_error(error.field, error.message, **error.metadata)
        else:
            name, message = error
            node = node.with_error(name, message)
    return node


_NUMBER_CHECKS: tuple[tuple[str, Callable[[Any, Any], bool], str], ...] = (
    ("less_than", lambda v, n: v < n, "must be less than {number}"),
    ("greater_than", lambda v, n: v > n, "must be greater than {number}"),
    ("less_than_or_equal_to", lambda v, n: v <= n, "must be less than or equal to {number}"),
    ("greater_than_or_equal_to", lambda v, n: v >= n, "must be greater than or equal to {number}"),
    ("equal_to", lambda v, n: v == n, "must be equal to {number}"),
    ("not_equal_to", lambda v, n: v != n, "must be not equal to {number}"),
)


def validate_number(node: ChangeNode, field: str, *, message: str | None = None, **bounds: Any) -> ChangeNode:
    """Check a numeric change against bounds.

    Accepted bounds: less_than, greater_than, less_than_or_equal_to,
    greater_than_or_equal_to, equal_to, not_equal_to. Only the first
    failing bound is reported.

    Raises:
        ValueError: On an unknown bound name
    """
    unknown = set(bounds) - {kind for kind, _, _ in _NUMBER_CHECKS}
    if unknown:
        raise ValueError(f"Unknown number bounds: {sorted(unknown)}")

    value = node.get_change(field, MISSING)
    if value is MISSING or value is None:
        return node
    for kind, check, default_message in _NUMBER_CHECKS:
        if kind not in bounds:
            continue
        number = bounds[kind]
        if not check(value, number):
            return node.with_error(field, message or default_message, validation="number", kind=kind, number=number)
    return node


def _length(value: Any) -> tuple[int, str] | None:
    if isinstance(value, str):
        return len(value), "string"
    if isinstance(value, (list, tuple)):
        live = [m for m in value if not (isinstance(m, ChangeNode) and m.is_removal)]
        return len(live), "list"
    if isinstance(value, (dict, bytes)):
        return len(value), "map" if isinstance(value, dict) else "binary"
    return None


_LENGTH_MESSAGES: dict[tuple[str, str], str] = {
    ("string", "is"): "should be {count} character(s)",
    ("string", "min"): "should be at least {count} character(s)",
    ("string", "max"): "should be at most {count} character(s)",
    ("binary", "is"): "should be {count} byte(s)",
    ("binary", "min"): "should be at least {count} byte(s)",
    ("binary", "max"): "should be at most {count} byte(s)",
}
_ITEM_MESSAGES: dict[str, str] = {
    "is": "should have {count} item(s)",
    "min": "should have at least {count} item(s)",
    "max": "should have at most {count} item(s)",
}


def validate_length(
    node: ChangeNode,
    field: str,
    *,
    exact: int | None = None,
    minimum: int | None = None,
    maximum: int | None = None,
    message: str | None = None,
) -> ChangeNode:
    """Check the length of a string, bytes, list or many-relation change.

    Members of a many-relation that are being removed do not count.
    """
    value = node.get_change(field, MISSING)
    if value is MISSING or value is None:
        return node
    measured = _length(value)
    if measured is None:
        return node
    length, kind = measured
    for bound, count, failed in (
        ("is", exact, exact is not None and length != exact),
        ("min", minimum, minimum is not None and length < minimum),
        ("max", maximum, maximum is not None and length > maximum),
    ):
        if failed:
            default = _LENGTH_MESSAGES.get((kind, bound), _ITEM_MESSAGES[bound])
            return node.with_error(field, message or default, validation="length", kind=bound, count=count, type=kind)
    return node


def validate_inclusion(node: ChangeNode, field: str, values: Collection[Any], message: str = "is invalid") -> ChangeNode:
    value = node.get_change(field, MISSING)
    if value is MISSING or value is None:
        return node
    if value not in values:
        return node.with_error(field, message, validation="inclusion", enum=list(values))
    return node
