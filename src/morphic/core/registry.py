"""SchemaRegistry: explicit, injectable schema introspection.

There is no global registry. Callers build one (usually at import time),
register their schemas, and pass it to the engine. Several registries can
coexist, which keeps synthetic test schemas isolated.

Registration is not thread-safe. Lookups are read-only and safe for
concurrent use once registration is complete.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

import structlog

from morphic.contracts.errors import SchemaDefinitionError, UnknownSchemaError
from morphic.contracts.schema import RelationMeta, SchemaDescriptor

slog = structlog.get_logger(__name__)


class SchemaRegistry:
    """Maps schema types to their descriptors.

    Example:
        registry = SchemaRegistry()
        registry.register(
            Order,
            relations={"line_items": embeds_many(LineItem, on_replace="delete")},
        )
        registry.descriptor(Order).embeds  # ("line_items",)
    """

    def __init__(self) -> None:
        self._descriptors: dict[type, SchemaDescriptor] = {}

    def register(
        self,
        schema: type,
        *,
        relations: Mapping[str, RelationMeta] | None = None,
        primary_key: str | None = "id",
        aliases: Mapping[str, str] | None = None,
        exclude: tuple[str, ...] = (),
        factory: Callable[[], Any] | None = None,
    ) -> SchemaDescriptor:
        """Describe a dataclass and register it.

        Returns:
            The registered descriptor

        Raises:
            SchemaDefinitionError: If the schema is already registered or inconsistent
        """
        descriptor = SchemaDescriptor.from_dataclass(
            schema,
            relations=relations,
            primary_key=primary_key,
            aliases=aliases,
            exclude=exclude,
            factory=factory,
        )
        return self.add(descriptor)

    def add(self, descriptor: SchemaDescriptor) -> SchemaDescriptor:
        """Register a prebuilt descriptor."""
        if descriptor.schema in self._descriptors:
            raise SchemaDefinitionError(f"Schema {descriptor.name} is already registered")
        self._descriptors[descriptor.schema] = descriptor
        slog.debug(
            "schema_registered",
            schema=descriptor.name,
            fields=len(descriptor.fields),
            relations=len(descriptor.relations),
        )
        return descriptor

    def descriptor(self, schema: Any) -> SchemaDescriptor:
        """Descriptor for a schema type.

        Raises:
            UnknownSchemaError: If the schema is not registered
        """
        try:
            return self._descriptors[schema]
        except (KeyError, TypeError):
            raise UnknownSchemaError(schema) from None

    def schema_of(self, value: Any) -> type | None:
        schema = type(value)
        if schema in self._descriptors:
            return schema
        return None

    def descriptor_of(self, value: Any) -> SchemaDescriptor | None:
        """Descriptor of an instance's schema, or None for unregistered values."""
        return self._descriptors.get(type(value))

    def fields(self, schema: Any) -> tuple[str, ...]:
        return tuple(self.descriptor(schema).fields)

    def relations(self, schema: Any) -> Mapping[str, RelationMeta]:
        return self.descriptor(schema).relations

    def default_instance(self, schema: Any) -> Any:
        return self.descriptor(schema).default_instance()

    def check_targets(self) -> None:
        """Verify every relation target is registered.

        Call once registration is complete; casting an unregistered target
        would otherwise fail only when data for that relation arrives.

        Raises:
            UnknownSchemaError: For the first unregistered target found
        """
        for descriptor in self._descriptors.values():
            for meta in descriptor.relations.values():
                if meta.target is not None:
                    self.descriptor(meta.target)

    def __contains__(self, schema: object) -> bool:
        return schema in self._descriptors

    def __iter__(self) -> Iterator[type]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)
