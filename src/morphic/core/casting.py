# src/morphic/core/casting.py
"""Recursive caster: raw data + schema (or instance) -> ChangeNode tree.

Casting never raises on bad data. Scalar failures and rejected relation
values become FieldErrors; the node is marked invalid and every other
field is still cast. The only exceptions are caller defects:

- raw data that is neither a mapping nor a dataclass instance (TypeError)
- an unregistered schema (UnknownSchemaError)
- replacing relation members under on_replace=raise (RelationReplaceError)

Fields missing from the raw data are left out of the changes, so the same
call serves inserts and partial updates.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

import structlog

from morphic.contracts.change_node import ChangeNode
from morphic.contracts.enums import ChangeAction, OnReplace
from morphic.contracts.errors import RelationReplaceError, UnknownSchemaError
from morphic.contracts.schema import RelationMeta, SchemaDescriptor, SchemaIntrospection
from morphic.contracts.sentinels import NOT_LOADED
from morphic.core.paths import split_whitelist
from morphic.core.scalars import PydanticScalarCaster, ScalarCaster

slog = structlog.get_logger(__name__)


def is_instance(value: Any) -> bool:
    """True for dataclass instances (not dataclass types)."""
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def project(introspection: SchemaIntrospection, raw: Any) -> dict[str, Any]:
    """Turn raw input into a plain dict.

    - mappings are copied
    - instances of a known schema use that schema's fields (throughs included)
    - other dataclass instances are projected shallowly

    Raises:
        TypeError: For anything else
    """
    if isinstance(raw, Mapping):
        return dict(raw)
    schema = introspection.schema_of(raw)
    if schema is not None:
        descriptor = introspection.descriptor(schema)
        return {name: descriptor.read(raw, name) for name in descriptor.all_fields}
    if is_instance(raw):
        return {f.name: getattr(raw, f.name) for f in dataclasses.fields(raw)}
    raise TypeError(f"Cannot cast a {type(raw).__name__}: expected a mapping or a dataclass instance")


def _is_member(value: Any) -> bool:
    return isinstance(value, Mapping) or is_instance(value)


class Caster:
    """Builds change-node trees.

    Example:
        caster = Caster(registry)
        node = caster.cast({"reference": "A-1", "line_items": [{"sku": "X"}]}, Order)
        node.valid  # True
    """

    def __init__(
        self,
        introspection: SchemaIntrospection,
        scalar_caster: ScalarCaster | None = None,
        *,
        invalid_message: str = "is invalid",
    ) -> None:
        self._introspection = introspection
        self._scalars = scalar_caster if scalar_caster is not None else PydanticScalarCaster(invalid_message=invalid_message)
        self._invalid_message = invalid_message

    def cast(self, raw: Any, schema_or_instance: Any, whitelist: Any = None) -> ChangeNode:
        """Cast raw data against a schema or onto an existing instance.

        Args:
            raw: Mapping or dataclass instance
            schema_or_instance: Schema type (inserts start from its default
                instance) or an instance of a registered schema (updates)
            whitelist: Optional spec of fields to cast; None casts every
                castable field

        Returns:
            Root ChangeNode (action None)
        """
        descriptor, base = self._resolve_target(schema_or_instance)
        node = self._cast(raw, descriptor, base, whitelist, None)
        slog.debug(
            "cast_complete",
            schema=descriptor.name,
            valid=node.valid,
            changed_fields=len(node.changes),
            error_count=len(node.errors),
        )
        return node

    def _resolve_target(self, schema_or_instance: Any) -> tuple[SchemaDescriptor, Any]:
        if isinstance(schema_or_instance, type):
            descriptor = self._introspection.descriptor(schema_or_instance)
            return descriptor, descriptor.default_instance()
        schema = self._introspection.schema_of(schema_or_instance)
        if schema is None:
            raise UnknownSchemaError(type(schema_or_instance))
        return self._introspection.descriptor(schema), schema_or_instance

    def _effective_fields(self, descriptor: SchemaDescriptor, whitelist: Any) -> tuple[tuple[str, ...], dict[str, Any]]:
        if whitelist is None:
            return descriptor.castable_fields, {}
        names, nested = split_whitelist(whitelist)
        wanted: set[str] = set()
        nested_by_field: dict[str, Any] = {}
        for raw_name in (*names, *nested):
            name = descriptor.resolve_name(raw_name)
            if name is not None:
                wanted.add(name)
                if raw_name in nested:
                    nested_by_field[name] = nested[raw_name]
        return tuple(f for f in descriptor.castable_fields if f in wanted), nested_by_field

    def _cast(
        self,
        raw: Any,
        descriptor: SchemaDescriptor,
        base: Any,
        whitelist: Any,
        action: ChangeAction | None,
    ) -> ChangeNode:
        params = project(self._introspection, raw)
        present = descriptor.resolve_mapping({k: v for k, v in params.items() if v is not NOT_LOADED})

        for name in descriptor.throughs:
            if name in present:
                slog.debug("through_relation_dropped", schema=descriptor.name, field=name)

        fields, nested = self._effective_fields(descriptor, whitelist)
        node = ChangeNode(descriptor, base, params=params, action=action)
        for name in fields:
            if name not in present:
                continue
            if descriptor.is_scalar(name):
                node = self._cast_scalar(node, name, present[name])
            else:
                node = self._cast_relation(node, name, present[name], nested.get(name))
        return node

    def _cast_scalar(self, node: ChangeNode, name: str, raw: Any) -> ChangeNode:
        descriptor = node.descriptor
        result = self._scalars.cast(raw, descriptor.fields[name])
        if not result.ok:
            return node.with_error(name, result.message or self._invalid_message, **result.metadata)
        if result.value == descriptor.read(node.base, name):
            return node
        return node.with_change(name, result.value)

    def _cast_relation(self, node: ChangeNode, name: str, raw: Any, whitelist: Any) -> ChangeNode:
        meta = node.descriptor.relation(name)
        target = self._introspection.descriptor(meta.target)
        existing = node.descriptor.read(node.base, name)
        if existing is NOT_LOADED:
            existing = None
        if meta.is_many:
            return self._cast_many(node, name, meta, target, raw, existing or (), whitelist)
        return self._cast_one(node, name, meta, target, raw, existing, whitelist)

    def _incoming_key(self, target: SchemaDescriptor, raw: Any) -> Any:
        """Cast primary key of an incoming member, or None when absent/uncastable."""
        pk = target.primary_key
        if pk is None:
            return None
        if isinstance(raw, Mapping):
            value = target.resolve_mapping(raw).get(pk)
        else:
            value = getattr(raw, pk, None)
        if value is None:
            return None
        result = self._scalars.cast(value, target.fields[pk])
        return result.value if result.ok else None

    def _cast_one(
        self,
        node: ChangeNode,
        name: str,
        meta: RelationMeta,
        target: SchemaDescriptor,
        raw: Any,
        existing: Any,
        whitelist: Any,
    ) -> ChangeNode:
        if raw is None:
            if existing is None:
                return node
            return self._replace_one(node, name, meta, target, existing, None, whitelist)
        if not _is_member(raw):
            return node.with_error(name, self._invalid_message, type="map", validation="relation")
        if existing is None:
            member = self._cast(raw, target, target.default_instance(), whitelist, ChangeAction.INSERT)
            return node.with_change(name, member)

        matches = target.primary_key is None or self._incoming_key(target, raw) == target.read(existing, target.primary_key)
        if matches or meta.on_replace is OnReplace.UPDATE:
            member = self._cast(raw, target, existing, whitelist, ChangeAction.UPDATE)
            if member.valid and not member.changes:
                return node
            return node.with_change(name, member)
        return self._replace_one(node, name, meta, target, existing, raw, whitelist)

    def _replace_one(
        self,
        node: ChangeNode,
        name: str,
        meta: RelationMeta,
        target: SchemaDescriptor,
        existing: Any,
        raw: Any,
        whitelist: Any,
    ) -> ChangeNode:
        policy = meta.on_replace
        if policy is OnReplace.RAISE:
            raise RelationReplaceError(name, node.schema)
        if policy is OnReplace.MARK_AS_INVALID:
            return node.with_error(name, self._invalid_message, type="map", validation="replace")

        slog.debug("relation_member_replaced", schema=node.descriptor.name, field=name, policy=str(policy))
        if raw is None:
            return node.with_change(name, None)
        member = self._cast(raw, target, target.default_instance(), whitelist, ChangeAction.INSERT)
        return node.with_change(name, member)

    def _cast_many(
        self,
        node: ChangeNode,
        name: str,
        meta: RelationMeta,
        target: SchemaDescriptor,
        raw: Any,
        existing: Any,
        whitelist: Any,
    ) -> ChangeNode:
        if not isinstance(raw, (list, tuple)) or not all(_is_member(entry) for entry in raw):
            return node.with_error(name, self._invalid_message, type="list", validation="relation")

        pk = target.primary_key
        current = list(existing)
        by_key: dict[Any, int] = {}
        if pk is not None:
            for index, member in enumerate(current):
                key = target.read(member, pk)
                if key is not None:
                    by_key.setdefault(key, index)

        kept: set[Any] = set()
        matched: set[int] = set()
        members: list[ChangeNode] = []
        for entry in raw:
            key = self._incoming_key(target, entry)
            if key is not None and key in by_key and key not in kept:
                kept.add(key)
                matched.add(by_key[key])
                members.append(self._cast(entry, target, current[by_key[key]], whitelist, ChangeAction.UPDATE))
            else:
                members.append(self._cast(entry, target, target.default_instance(), whitelist, ChangeAction.INSERT))

        leftovers = [m for index, m in enumerate(current) if index not in matched]
        if leftovers:
            policy = meta.on_replace
            if policy is OnReplace.RAISE:
                raise RelationReplaceError(name, node.schema)
            if policy is OnReplace.MARK_AS_INVALID:
                return node.with_error(name, self._invalid_message, type="list", validation="replace")
            slog.debug(
                "relation_members_replaced",
                schema=node.descriptor.name,
                field=name,
                replaced_count=len(leftovers),
            )
            members.extend(ChangeNode(target, member, action=ChangeAction.REPLACE) for member in leftovers)

        unchanged = all(m.action is ChangeAction.UPDATE and m.valid and not m.changes for m in members)
        if unchanged:
            return node
        return node.with_change(name, tuple(members))
