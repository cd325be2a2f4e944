"""Filtering arbitrary data down to the fields a schema declares.

deep_filter_by_schema_fields() recurses through embeds and associations
using each relation's target schema. Through relations cannot be resolved
to a target, so their values pass through as-is, unless a value is itself
an instance of a registered schema: then it is filtered by its own schema.

Output keys are always field names, even when the input used aliases.
NOT_LOADED placeholders pass through, or become None with
filter_not_loaded=True.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from morphic.contracts.schema import SchemaDescriptor, SchemaIntrospection
from morphic.contracts.sentinels import NOT_LOADED
from morphic.core.casting import is_instance, project

_TIMESTAMP_FIELDS: tuple[str, ...] = ("inserted_at", "updated_at")


def filter_by_schema_fields(
    introspection: SchemaIntrospection,
    data: Any,
    schema: Any,
    *,
    filter_not_loaded: bool = False,
    filter_relations: bool = False,
) -> dict[str, Any]:
    """Keep only the keys of data that name a field of schema. Not recursive.

    Args:
        filter_not_loaded: Replace NOT_LOADED values with None
        filter_relations: Drop relation fields too, keeping scalars only
    """
    descriptor = introspection.descriptor(schema)
    filtered: dict[str, Any] = {}
    for name, value in descriptor.resolve_mapping(project(introspection, data)).items():
        if filter_relations and descriptor.is_relation(name):
            continue
        if value is NOT_LOADED and filter_not_loaded:
            value = None
        filtered[name] = value
    return filtered


def deep_filter_by_schema_fields(
    introspection: SchemaIntrospection,
    data: Any,
    schema: Any,
    *,
    filter_not_loaded: bool = False,
) -> dict[str, Any]:
    """Recursively keep only the fields schema and its relations declare.

    Example:
        deep_filter_by_schema_fields(registry, {"reference": "A-1", "junk": 1}, Order)
        # {"reference": "A-1"}
    """
    return _DeepFilter(introspection, filter_not_loaded).filter(data, introspection.descriptor(schema))


class _DeepFilter:
    def __init__(self, introspection: SchemaIntrospection, filter_not_loaded: bool) -> None:
        self._introspection = introspection
        self._filter_not_loaded = filter_not_loaded

    def filter(self, data: Any, descriptor: SchemaDescriptor) -> dict[str, Any]:
        filtered: dict[str, Any] = {}
        for name, value in descriptor.resolve_mapping(project(self._introspection, data)).items():
            if value is NOT_LOADED:
                filtered[name] = None if self._filter_not_loaded else value
            elif value is None or descriptor.is_scalar(name):
                filtered[name] = value
            else:
                meta = descriptor.relation(name)
                if meta.kind.is_through:
                    filtered[name] = self._through(value)
                else:
                    filtered[name] = self._relation(value, self._introspection.descriptor(meta.target))
        return filtered

    def _relation(self, value: Any, target: SchemaDescriptor) -> Any:
        if isinstance(value, Mapping) or is_instance(value):
            return self.filter(value, target)
        if isinstance(value, (list, tuple)):
            return [self.filter(v, target) if isinstance(v, Mapping) or is_instance(v) else v for v in value]
        return value

    def _through(self, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [self._through(v) for v in value]
        schema = self._introspection.schema_of(value)
        if schema is None:
            return value
        return self.filter(value, self._introspection.descriptor(schema))


def map_from_instance(instance: Any, *, exclude_timestamps: bool = False, exclude_id: bool = False) -> dict[str, Any]:
    """Shallow dict of a dataclass instance's fields.

    Args:
        exclude_timestamps: Drop inserted_at / updated_at
        exclude_id: Drop the id field

    Raises:
        TypeError: If instance is not a dataclass instance
    """
    if not is_instance(instance):
        raise TypeError(f"Expected a dataclass instance, got {type(instance).__name__}")
    dropped: set[str] = set()
    if exclude_timestamps:
        dropped.update(_TIMESTAMP_FIELDS)
    if exclude_id:
        dropped.add("id")
    return {f.name: getattr(instance, f.name) for f in dataclasses.fields(instance) if f.name not in dropped}
