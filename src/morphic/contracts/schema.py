"""Schema descriptors: the read-only lookup table every operation consumes.

A schema is a dataclass type. Its descriptor records:
- fields: scalar field name -> declared type (handed to the scalar caster)
- relations: relation name -> RelationMeta (kind, target, cardinality, on_replace)
- primary_key: scalar used to match incoming relation members to existing ones
- aliases: raw key -> field name, for payload keys that are not identifiers

Name resolution is an allow-list lookup. Raw keys are only ever compared
against names the descriptor already knows; nothing from the payload is
turned into a field name.
"""

from __future__ import annotations

import dataclasses
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from morphic.contracts.enums import Cardinality, OnReplace, RelationKind
from morphic.contracts.errors import SchemaDefinitionError

_KIND_CARDINALITY: dict[RelationKind, Cardinality] = {
    RelationKind.EMBEDDED_ONE: Cardinality.ONE,
    RelationKind.EMBEDDED_MANY: Cardinality.MANY,
    RelationKind.ASSOCIATED_ONE: Cardinality.ONE,
    RelationKind.ASSOCIATED_MANY: Cardinality.MANY,
}


@dataclass(frozen=True, slots=True)
class RelationMeta:
    """Metadata for one relation of a schema.

    Attributes:
        kind: Embedded, associated or through
        target: Target schema type (None for throughs, which cannot be resolved)
        cardinality: ONE or MANY. Derived from kind; throughs must declare it
        on_replace: Policy for existing members the incoming data does not keep
        through: Relation chain a through-relation is derived from (informational)
    """

    kind: RelationKind
    target: type | None = None
    cardinality: Cardinality | None = None
    on_replace: OnReplace = OnReplace.RAISE
    through: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        kind = RelationKind(self.kind)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "on_replace", OnReplace(self.on_replace))

        if kind.is_through:
            if self.cardinality is None:
                raise SchemaDefinitionError("Through relations must declare their cardinality")
            object.__setattr__(self, "cardinality", Cardinality(self.cardinality))
            return

        if self.target is None:
            raise SchemaDefinitionError(f"Relation of kind '{kind}' requires a target schema")

        derived = _KIND_CARDINALITY[kind]
        if self.cardinality is not None and Cardinality(self.cardinality) is not derived:
            raise SchemaDefinitionError(f"Relation of kind '{kind}' has cardinality '{derived}', not '{self.cardinality}'")
        object.__setattr__(self, "cardinality", derived)

        if self.on_replace is OnReplace.UPDATE and derived is Cardinality.MANY:
            raise SchemaDefinitionError("on_replace='update' is only valid for one-relations")

    @property
    def is_many(self) -> bool:
        return self.cardinality is Cardinality.MANY


def embeds_one(target: type, *, on_replace: OnReplace | str = OnReplace.RAISE) -> RelationMeta:
    """Shorthand for an embedded one-relation."""
    return RelationMeta(RelationKind.EMBEDDED_ONE, target, on_replace=OnReplace(on_replace))


def embeds_many(target: type, *, on_replace: OnReplace | str = OnReplace.RAISE) -> RelationMeta:
    """Shorthand for an embedded many-relation."""
    return RelationMeta(RelationKind.EMBEDDED_MANY, target, on_replace=OnReplace(on_replace))


def has_one(target: type, *, on_replace: OnReplace | str = OnReplace.RAISE) -> RelationMeta:
    """Shorthand for an associated one-relation."""
    return RelationMeta(RelationKind.ASSOCIATED_ONE, target, on_replace=OnReplace(on_replace))


def has_many(target: type, *, on_replace: OnReplace | str = OnReplace.RAISE) -> RelationMeta:
    """Shorthand for an associated many-relation."""
    return RelationMeta(RelationKind.ASSOCIATED_MANY, target, on_replace=OnReplace(on_replace))


def through(*chain: str, cardinality: Cardinality | str = Cardinality.MANY) -> RelationMeta:
    """Shorthand for a through-relation derived from a chain of relations."""
    return RelationMeta(RelationKind.THROUGH, cardinality=Cardinality(cardinality), through=tuple(chain))


@dataclass(frozen=True, slots=True)
class SchemaDescriptor:
    """Immutable description of a schema.

    Uses frozen dataclass pattern. Lookup indices are computed once in
    __post_init__ so every name check is O(1).

    Attributes:
        schema: The dataclass type instances of this schema are built from
        fields: Scalar field name -> declared type
        relations: Relation name -> RelationMeta
        primary_key: Scalar field identifying relation members (None = no identity)
        aliases: Raw payload key -> field name
        factory: Zero-argument callable building the default instance
    """

    schema: type
    fields: Mapping[str, Any]
    relations: Mapping[str, RelationMeta] = field(default_factory=dict)
    primary_key: str | None = None
    aliases: Mapping[str, str] = field(default_factory=dict)
    factory: Callable[[], Any] | None = None

    # Computed indices - populated in __post_init__
    _embeds: tuple[str, ...] = field(default=(), repr=False, compare=False)
    _associations: tuple[str, ...] = field(default=(), repr=False, compare=False)
    _throughs: tuple[str, ...] = field(default=(), repr=False, compare=False)
    _original_names: Mapping[str, str] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Freeze the mappings and build lookup indices.

        Raises:
            SchemaDefinitionError: If the description is inconsistent
        """
        if not dataclasses.is_dataclass(self.schema) or not isinstance(self.schema, type):
            raise SchemaDefinitionError(f"Schema {self.schema!r} must be a dataclass type")

        fields = MappingProxyType(dict(self.fields))
        relations = MappingProxyType(dict(self.relations))
        aliases = MappingProxyType(dict(self.aliases))

        overlap = set(fields) & set(relations)
        if overlap:
            raise SchemaDefinitionError(
                f"{self.schema.__qualname__}: names declared both as scalar fields and relations: {sorted(overlap)}"
            )

        if self.primary_key is not None and self.primary_key not in fields:
            raise SchemaDefinitionError(f"{self.schema.__qualname__}: primary key '{self.primary_key}' is not a scalar field")

        for alias, name in aliases.items():
            if name not in fields and name not in relations:
                raise SchemaDefinitionError(f"{self.schema.__qualname__}: alias '{alias}' points to unknown field '{name}'")
            if alias in fields or alias in relations:
                raise SchemaDefinitionError(f"{self.schema.__qualname__}: alias '{alias}' shadows a declared field")

        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "relations", relations)
        object.__setattr__(self, "aliases", aliases)
        object.__setattr__(self, "_embeds", tuple(n for n, m in relations.items() if m.kind.is_embedded))
        object.__setattr__(self, "_associations", tuple(n for n, m in relations.items() if m.kind.is_associated))
        object.__setattr__(self, "_throughs", tuple(n for n, m in relations.items() if m.kind.is_through))
        object.__setattr__(self, "_original_names", MappingProxyType({name: alias for alias, name in aliases.items()}))

    @classmethod
    def from_dataclass(
        cls,
        schema: type,
        *,
        relations: Mapping[str, RelationMeta] | None = None,
        primary_key: str | None = "id",
        aliases: Mapping[str, str] | None = None,
        exclude: tuple[str, ...] = (),
        factory: Callable[[], Any] | None = None,
    ) -> SchemaDescriptor:
        """Describe a dataclass: every field not named in `relations` is a scalar.

        Declared scalar types are read from the dataclass annotations.
        `primary_key` is dropped when the dataclass has no such field.
        """
        if not dataclasses.is_dataclass(schema):
            raise SchemaDefinitionError(f"Schema {schema!r} must be a dataclass type")

        relations = dict(relations or {})
        hints = typing.get_type_hints(schema)
        scalars = {
            f.name: hints[f.name] for f in dataclasses.fields(schema) if f.name not in relations and f.name not in exclude
        }
        return cls(
            schema=schema,
            fields=scalars,
            relations=relations,
            primary_key=primary_key if primary_key in scalars else None,
            aliases=aliases or {},
            factory=factory,
        )

    @property
    def name(self) -> str:
        return self.schema.__qualname__

    @property
    def embeds(self) -> tuple[str, ...]:
        return self._embeds

    @property
    def associations(self) -> tuple[str, ...]:
        return self._associations

    @property
    def throughs(self) -> tuple[str, ...]:
        return self._throughs

    @property
    def castable_fields(self) -> tuple[str, ...]:
        """Scalars, embeds and associations: everything the caster may change."""
        return (*self.fields, *self._embeds, *self._associations)

    @property
    def all_fields(self) -> tuple[str, ...]:
        """Every declared name, throughs included."""
        return (*self.fields, *self.relations)

    def is_scalar(self, name: str) -> bool:
        return name in self.fields

    def is_relation(self, name: str) -> bool:
        return name in self.relations

    def is_castable(self, name: str) -> bool:
        if name in self.fields:
            return True
        meta = self.relations.get(name)
        return meta is not None and not meta.kind.is_through

    def relation(self, name: str) -> RelationMeta:
        """Get RelationMeta by name.

        Raises:
            KeyError: If the schema has no such relation
        """
        return self.relations[name]

    def resolve_name(self, key: Any) -> str | None:
        """Resolve a raw payload key to a declared field name.

        Returns None for keys the schema does not declare (including
        non-string keys), so unknown input is dropped rather than rejected.
        """
        if not isinstance(key, str):
            return None
        if key in self.fields or key in self.relations:
            return str(key)
        return self.aliases.get(key)

    def resolve_mapping(self, data: Mapping[Any, Any]) -> dict[str, Any]:
        """Re-key a raw mapping by field name, dropping unknown keys.

        When a field appears both under its own name and under an alias,
        the value under its own name wins.
        """
        resolved: dict[str, Any] = {}
        aliased: dict[str, Any] = {}
        for key, value in data.items():
            name = self.resolve_name(key)
            if name is None:
                continue
            if name == key:
                resolved[name] = value
            else:
                aliased.setdefault(name, value)
        for name, value in aliased.items():
            resolved.setdefault(name, value)
        return resolved

    def original_name(self, name: str) -> str:
        """Payload key for a field: its alias if one was declared, else the name."""
        return self._original_names.get(name, name)

    def default_instance(self) -> Any:
        factory = self.factory if self.factory is not None else self.schema
        return factory()

    def owns(self, value: Any) -> bool:
        return type(value) is self.schema

    def read(self, instance: Any, name: str) -> Any:
        return getattr(instance, name)

    def apply(self, instance: Any, values: Mapping[str, Any]) -> Any:
        """Return a copy of instance with values applied."""
        if not values:
            return instance
        return dataclasses.replace(instance, **values)


@runtime_checkable
class SchemaIntrospection(Protocol):
    """Lookup of schema descriptors.

    Implementations must be pure for any registered schema and safe for
    concurrent reads.
    """

    def descriptor(self, schema: Any) -> SchemaDescriptor:
        """Descriptor for a schema type.

        Raises:
            UnknownSchemaError: If the schema is not known
        """
        ...

    def schema_of(self, value: Any) -> type | None:
        """Schema type of an instance, or None if the value is not a schema instance."""
        ...
