# src/morphic/core/materialize.py
"""Materialization: valid change node -> typed instance.

materialize() never raises on invalid data; it returns the invalid node
inside a MaterializeResult so callers can inspect every error at every
depth. materialize_or_raise() is the fatal variant for callers that treat
invalid input as a bug.

Members of a many-relation that are being removed (action replace/delete)
are left out of the materialized list.
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from pprint import pformat
from typing import Any

import structlog

from morphic.contracts.change_node import ChangeNode, FieldError, is_node_list
from morphic.contracts.errors import InvalidChangeNodeError
from morphic.contracts.results import MaterializeResult

slog = structlog.get_logger(__name__)

ErrorPath = tuple[str | int, ...]


def _flatten(node: ChangeNode) -> Any:
    values: dict[str, Any] = {}
    for name, value in node.changes.items():
        if isinstance(value, ChangeNode):
            values[name] = None if value.is_removal else _flatten(value)
        elif is_node_list(value):
            values[name] = [_flatten(member) for member in value if not member.is_removal]
        elif node.descriptor.is_relation(name) and isinstance(value, tuple):
            values[name] = list(value)
        else:
            values[name] = value
    return node.descriptor.apply(node.base, values)


def materialize(node: ChangeNode) -> MaterializeResult:
    """Flatten a valid node into its typed instance.

    Returns:
        MaterializeResult.ok(instance) if node.valid, else
        MaterializeResult.error(node)
    """
    if not node.valid:
        slog.debug("materialize_rejected", schema=node.descriptor.name, error_count=len(collect_errors(node)))
        return MaterializeResult.error(node)
    return MaterializeResult.ok(_flatten(node))


def applied_changes(node: ChangeNode) -> dict[str, Any]:
    """Changes as plain data: nested nodes become their own change dicts."""
    applied: dict[str, Any] = {}
    for name, value in node.changes.items():
        if isinstance(value, ChangeNode):
            applied[name] = applied_changes(value)
        elif is_node_list(value):
            applied[name] = [applied_changes(member) for member in value]
        else:
            applied[name] = value
    return applied


def traverse_errors(node: ChangeNode, message: Callable[[FieldError], Any] | None = None) -> dict[str, Any]:
    """Nested mapping of error messages.

    Own errors map field -> [messages]. A nested one-relation with errors
    maps to its own error mapping; a many-relation maps to a list with one
    mapping per member (empty for members without errors). Relations
    without any nested errors are omitted.

    Args:
        message: Renders one FieldError; defaults to FieldError.render,
            which fills {placeholders} from the error metadata
    """
    render = message if message is not None else FieldError.render
    errors: dict[str, Any] = {}
    for error in node.errors:
        errors.setdefault(error.field, []).append(render(error))
    for name, value in node.changes.items():
        if name in errors:
            continue
        if isinstance(value, ChangeNode):
            nested = traverse_errors(value, render)
            if nested:
                errors[name] = nested
        elif is_node_list(value):
            members = [traverse_errors(member, render) for member in value]
            if any(members):
                errors[name] = members
    return errors


def collect_errors(node: ChangeNode, prefix: ErrorPath = ()) -> list[tuple[ErrorPath, FieldError]]:
    """Flat list of (path, error); list positions appear as ints in the path."""
    collected: list[tuple[ErrorPath, FieldError]] = [((*prefix, e.field), e) for e in node.errors]
    for name, value in node.changes.items():
        if isinstance(value, ChangeNode):
            collected.extend(collect_errors(value, (*prefix, name)))
        elif is_node_list(value):
            for index, member in enumerate(value):
                collected.extend(collect_errors(member, (*prefix, name, index)))
    return collected


def _section(title: str, body: str) -> str:
    return f"{title}\n\n{textwrap.indent(body, '    ')}"


def describe_invalid(node: ChangeNode) -> str:
    """Human-readable report of an invalid node for exception messages."""
    return "\n\n".join(
        [
            "could not materialize because change node is invalid.",
            _section("Errors", pformat(traverse_errors(node))),
            _section("Applied changes", pformat(applied_changes(node))),
            _section("Params", pformat(dict(node.params or {}))),
            _section("Change node", node.render()),
        ]
    )


def materialize_or_raise(node: ChangeNode) -> Any:
    """Flatten a valid node or raise.

    Raises:
        InvalidChangeNodeError: If the node is invalid; the message renders
            the errors, applied changes, params and node tree
    """
    result = materialize(node)
    if not result.is_ok:
        raise InvalidChangeNodeError(node, describe_invalid(node))
    return result.value
