# src/morphic/core/walker.py
"""Nested-tree walker: apply a visitor at the end of a path.

walk() descends through a change-node tree along a path of field names,
keeping a zipper of (field, parent) breadcrumbs. When the path is
exhausted the visitor runs on the node found there, and the result is
merged back toward the root one breadcrumb at a time.

Merging goes through ChangeNode.with_change, so every ancestor's validity
becomes (its previous validity AND the child's). A nested fix never makes
an invalid ancestor valid; a nested failure always invalidates every
ancestor.

A segment holding a list of nodes (a many-relation) fans out: the rest of
the path is walked independently for every member. Members being removed
(action replace/delete) are passed through untouched.

A node with no changes stops the walk unless descend_unchanged is set.

A segment that is absent from the changes, or holds None, cannot be
descended into. The visitor then receives MissingNode(field, parent,
remaining) and its return value replaces the parent.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

import structlog

from morphic.contracts.change_node import ChangeNode, MissingNode, is_node_list
from morphic.contracts.errors import InvalidPathError, InvalidValidatorError
from morphic.contracts.sentinels import MISSING

slog = structlog.get_logger(__name__)

Visitor = Callable[[ChangeNode | MissingNode], ChangeNode]
Breadcrumbs = list[tuple[str, ChangeNode]]


def _visit(visitor: Visitor, target: ChangeNode | MissingNode) -> ChangeNode:
    result = visitor(target)
    if not isinstance(result, ChangeNode):
        raise InvalidValidatorError(result)
    # A visitor cannot revalidate what was already invalid
    original = target.parent if isinstance(target, MissingNode) else target
    if not original.valid:
        result = result.invalidated()
    return result


def _retreat(crumbs: Breadcrumbs, node: ChangeNode) -> ChangeNode:
    for name, parent in reversed(crumbs):
        node = parent.with_change(name, node)
    return node


def check_segment(node: ChangeNode, name: str) -> None:
    descriptor = node.descriptor
    if descriptor.is_scalar(name) or descriptor.is_castable(name):
        return
    if descriptor.is_relation(name):
        raise InvalidPathError(
            f"{name!r} is a through relation of {descriptor.name}; through relations are never cast",
            field=name,
            schema=descriptor.schema,
        )
    raise InvalidPathError(
        f"{name!r} is not a field of {descriptor.name}",
        field=name,
        schema=descriptor.schema,
    )


def _walk(root: ChangeNode, path: tuple[str, ...], visitor: Visitor, descend_unchanged: bool) -> ChangeNode:
    crumbs: Breadcrumbs = []
    node = root
    for index, name in enumerate(path):
        check_segment(node, name)
        if not node.changes and not descend_unchanged:
            slog.debug("walk_short_circuit", schema=node.descriptor.name, field=name)
            return _retreat(crumbs, node)

        remaining = path[index + 1 :]
        value = node.changes.get(name, MISSING)

        if value is MISSING or value is None:
            return _retreat(crumbs, _visit(visitor, MissingNode(name, node, remaining)))

        if isinstance(value, ChangeNode):
            crumbs.append((name, node))
            node = value
            continue

        if isinstance(value, (tuple, list)):
            if not value:
                return _retreat(crumbs, node)
            if not is_node_list(value):
                raise InvalidPathError(
                    f"Path segment {name!r} of {node.descriptor.name} points to a list that isn't made of change nodes",
                    field=name,
                    schema=node.schema,
                )
            members = tuple(_fan_out(member, remaining, visitor, descend_unchanged) for member in value)
            return _retreat(crumbs, node.with_change(name, members))

        raise InvalidPathError(
            f"Path segment {name!r} of {node.descriptor.name} points to a change that isn't a nested change node",
            field=name,
            schema=node.schema,
        )

    return _retreat(crumbs, _visit(visitor, node))


def _fan_out(member: ChangeNode, remaining: tuple[str, ...], visitor: Visitor, descend_unchanged: bool) -> ChangeNode:
    if member.is_removal:
        return member
    if not remaining:
        return _visit(visitor, member)
    return _walk(member, remaining, visitor, descend_unchanged)


def walk(
    root: ChangeNode,
    path: Sequence[str],
    visitor: Visitor,
    *,
    descend_unchanged: bool = False,
) -> ChangeNode:
    """Apply visitor at the end of path and merge the result back to root.

    Args:
        root: Root of the change-node tree
        path: Field names leading to nested change nodes
        visitor: Called with the node(s) at the end of the path, or with a
            MissingNode when a segment has no nested node. Must return a
            ChangeNode.
        descend_unchanged: Keep walking through nodes that have no changes
            instead of returning them as they are; the visitor then sees a
            MissingNode for the next segment.

    Returns:
        The rebuilt root

    Raises:
        InvalidPathError: Empty path, unknown or through field, or a segment
            that holds something other than nested change nodes
        InvalidValidatorError: The visitor returned something else
    """
    path = (path,) if isinstance(path, str) else tuple(path)
    if not path:
        raise InvalidPathError("You must provide at least one field in the path")
    return _walk(root, path, visitor, descend_unchanged)
