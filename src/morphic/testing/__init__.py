# src/morphic/testing/__init__.py
"""Test infrastructure for morphic.

Factories for constructing descriptors and change nodes with sensible
defaults. When a contract type's constructor changes, update the factory
here; tests that use factories need no changes.

Usage:
    from morphic.testing import make_schema, make_node, make_error

    Item = make_schema("Item", {"id": int | None, "sku": str | None})
    node = make_node(Item, {"sku": "X-1"})
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from morphic.contracts.change_node import ChangeNode, FieldError
from morphic.contracts.enums import ChangeAction
from morphic.contracts.schema import RelationMeta, SchemaDescriptor

# =============================================================================
# Schemas
# =============================================================================


def make_schema(
    name: str,
    fields: Mapping[str, Any],
    *,
    relations: Mapping[str, RelationMeta] | None = None,
    primary_key: str | None = "id",
    aliases: Mapping[str, str] | None = None,
) -> SchemaDescriptor:
    """Build a synthetic dataclass schema and its descriptor.

    Scalars default to None. One-relations default to None, many-relations
    to an empty list.

    Usage:
        Item = make_schema("Item", {"id": int | None, "sku": str | None})
        Box = make_schema("Box", {"label": str | None}, relations={"items": embeds_many(Item.schema)})
    """
    relations = dict(relations or {})
    spec: list[tuple[str, Any, Any]] = [(n, t, dataclasses.field(default=None)) for n, t in fields.items()]
    for rel_name, meta in relations.items():
        if meta.is_many:
            spec.append((rel_name, list[Any], dataclasses.field(default_factory=list)))
        else:
            spec.append((rel_name, Any, dataclasses.field(default=None)))
    schema = dataclasses.make_dataclass(name, spec, frozen=True)
    return SchemaDescriptor(
        schema=schema,
        fields=dict(fields),
        relations=relations,
        primary_key=primary_key if primary_key in fields else None,
        aliases=aliases or {},
    )


# =============================================================================
# Change nodes
# =============================================================================


def make_error(field: str, message: str = "is invalid", **metadata: Any) -> FieldError:
    """Build a single FieldError."""
    return FieldError(field, message, metadata)


def make_node(
    descriptor: SchemaDescriptor,
    changes: Mapping[str, Any] | None = None,
    *,
    base: Any = None,
    valid: bool | None = None,
    errors: tuple[FieldError, ...] = (),
    action: ChangeAction | None = None,
) -> ChangeNode:
    """Build a ChangeNode directly, bypassing the caster.

    valid defaults to "no errors and every nested node valid". valid=False
    invalidates a node that has no errors; valid=True cannot be combined
    with errors, and nested validity always carries over.

    Raises:
        ValueError: If valid=True is passed together with errors

    Usage:
        node = make_node(Item, {"sku": "X"})
        bad = make_node(Item, {"sku": None}, errors=(make_error("sku"),))
    """
    if valid is True and errors:
        raise ValueError("make_node() cannot build a valid node that carries errors")
    changes = dict(changes or {})
    if base is None:
        base = descriptor.default_instance()
    node = ChangeNode(descriptor, base, action=action)
    for name, value in changes.items():
        node = node.with_change(name, value)
    for error in errors:
        node = node.with_error(error.field, error.message, **error.metadata)
    if valid is False:
        node = node.invalidated()
    return node
