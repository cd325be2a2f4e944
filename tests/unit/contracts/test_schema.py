# tests/unit/contracts/test_schema.py
"""Tests for RelationMeta, the relation shorthands and SchemaDescriptor."""

from dataclasses import dataclass, field

import pytest

from morphic.contracts import (
    Cardinality,
    ChangeAction,
    OnReplace,
    RelationKind,
    RelationMeta,
    SchemaDefinitionError,
    SchemaDescriptor,
    embeds_many,
    embeds_one,
    has_many,
    has_one,
    through,
)


@dataclass(frozen=True)
class Part:
    id: int | None = None
    name: str | None = None


@dataclass(frozen=True)
class Machine:
    id: int | None = None
    serial: str | None = None
    parts: list[Part] = field(default_factory=list)
    spare: Part | None = None
    suppliers: list[str] = field(default_factory=list)
    secret: str | None = None


class TestRelationMeta:
    """RelationMeta validation and shorthands."""

    @pytest.mark.parametrize(
        ("meta", "kind", "cardinality"),
        [
            (embeds_one(Part), RelationKind.EMBEDDED_ONE, Cardinality.ONE),
            (embeds_many(Part), RelationKind.EMBEDDED_MANY, Cardinality.MANY),
            (has_one(Part), RelationKind.ASSOCIATED_ONE, Cardinality.ONE),
            (has_many(Part), RelationKind.ASSOCIATED_MANY, Cardinality.MANY),
            (through("parts", "supplier"), RelationKind.THROUGH, Cardinality.MANY),
        ],
    )
    def test_shorthands(self, meta: RelationMeta, kind: RelationKind, cardinality: Cardinality) -> None:
        assert meta.kind is kind
        assert meta.cardinality is cardinality
        assert meta.is_many is (cardinality is Cardinality.MANY)

    def test_default_policy_is_raise(self) -> None:
        assert embeds_many(Part).on_replace is OnReplace.RAISE

    def test_policy_from_string(self) -> None:
        assert has_many(Part, on_replace="delete").on_replace is OnReplace.DELETE

    def test_update_rejected_on_many(self) -> None:
        with pytest.raises(SchemaDefinitionError, match="only valid for one-relations"):
            embeds_many(Part, on_replace="update")

    def test_update_allowed_on_one(self) -> None:
        assert has_one(Part, on_replace="update").on_replace is OnReplace.UPDATE

    def test_target_required(self) -> None:
        with pytest.raises(SchemaDefinitionError, match="requires a target"):
            RelationMeta(RelationKind.EMBEDDED_ONE)

    def test_conflicting_cardinality_rejected(self) -> None:
        with pytest.raises(SchemaDefinitionError):
            RelationMeta(RelationKind.EMBEDDED_ONE, Part, cardinality=Cardinality.MANY)

    def test_through_requires_cardinality(self) -> None:
        with pytest.raises(SchemaDefinitionError, match="must declare their cardinality"):
            RelationMeta(RelationKind.THROUGH)

    def test_through_chain_recorded(self) -> None:
        meta = through("parts", "supplier", cardinality="one")

        assert meta.through == ("parts", "supplier")
        assert meta.cardinality is Cardinality.ONE
        assert meta.target is None

    def test_unknown_policy_rejected(self) -> None:
        with pytest.raises(ValueError):
            has_many(Part, on_replace="nuke")


class TestEnums:
    """Enum helpers."""

    def test_removal_actions(self) -> None:
        assert [a for a in ChangeAction if a.is_removal] == [ChangeAction.REPLACE, ChangeAction.DELETE]

    def test_kind_groups(self) -> None:
        assert RelationKind.EMBEDDED_MANY.is_embedded
        assert RelationKind.ASSOCIATED_ONE.is_associated
        assert RelationKind.THROUGH.is_through
        assert not RelationKind.THROUGH.is_embedded

    def test_string_values(self) -> None:
        assert OnReplace.MARK_AS_INVALID == "mark_as_invalid"


def _machine(**kwargs: object) -> SchemaDescriptor:
    return SchemaDescriptor.from_dataclass(
        Machine,
        relations={
            "parts": embeds_many(Part, on_replace="delete"),
            "spare": has_one(Part),
            "suppliers": through("parts", "supplier"),
        },
        **kwargs,  # type: ignore[arg-type]
    )


class TestSchemaDescriptor:
    """Descriptor construction and lookups."""

    def test_from_dataclass_splits_fields(self) -> None:
        descriptor = _machine()

        assert descriptor.fields == {"id": int | None, "serial": str | None, "secret": str | None}
        assert descriptor.primary_key == "id"
        assert descriptor.embeds == ("parts",)
        assert descriptor.associations == ("spare",)
        assert descriptor.throughs == ("suppliers",)
        assert descriptor.castable_fields == ("id", "serial", "secret", "parts", "spare")
        assert descriptor.all_fields == ("id", "serial", "secret", "parts", "spare", "suppliers")
        assert descriptor.name == "Machine"

    def test_exclude(self) -> None:
        descriptor = _machine(exclude=("secret",))

        assert "secret" not in descriptor.fields
        assert descriptor.resolve_name("secret") is None

    def test_missing_primary_key_dropped(self) -> None:
        assert _machine(primary_key="uuid").primary_key is None

    def test_predicates(self) -> None:
        descriptor = _machine()

        assert descriptor.is_scalar("serial")
        assert descriptor.is_relation("suppliers")
        assert descriptor.is_castable("parts")
        assert not descriptor.is_castable("suppliers")
        assert not descriptor.is_castable("nope")

    def test_relation_lookup(self) -> None:
        descriptor = _machine()

        assert descriptor.relation("spare").target is Part
        with pytest.raises(KeyError):
            descriptor.relation("serial")

    def test_resolve_name(self) -> None:
        descriptor = _machine(aliases={"serialNo": "serial"})

        assert descriptor.resolve_name("serial") == "serial"
        assert descriptor.resolve_name("serialNo") == "serial"
        assert descriptor.resolve_name("unknown") is None
        assert descriptor.resolve_name(3) is None
        assert descriptor.original_name("serial") == "serialNo"
        assert descriptor.original_name("id") == "id"

    def test_resolve_mapping_prefers_exact_name(self) -> None:
        descriptor = _machine(aliases={"serialNo": "serial"})

        resolved = descriptor.resolve_mapping({"serialNo": "alias", "serial": "exact", "x": 1})

        assert resolved == {"serial": "exact"}

    def test_default_instance_and_apply(self) -> None:
        descriptor = _machine()
        machine = descriptor.default_instance()

        assert machine == Machine()
        assert descriptor.apply(machine, {}) is machine
        assert descriptor.apply(machine, {"serial": "S-1"}) == Machine(serial="S-1")
        assert descriptor.owns(machine)
        assert not descriptor.owns(Part())
        assert descriptor.read(machine, "parts") == []

    @pytest.mark.parametrize(
        ("kwargs", "match"),
        [
            ({"fields": {"id": int}, "relations": {"id": embeds_one(Part)}}, "both as scalar fields and relations"),
            ({"fields": {"name": str}, "primary_key": "id"}, "primary key 'id' is not a scalar field"),
            ({"fields": {"name": str}, "aliases": {"n": "nope"}}, "points to unknown field"),
            ({"fields": {"name": str, "id": int}, "aliases": {"id": "name"}}, "shadows a declared field"),
        ],
    )
    def test_inconsistent_descriptor_rejected(self, kwargs: dict[str, object], match: str) -> None:
        with pytest.raises(SchemaDefinitionError, match=match):
            SchemaDescriptor(schema=Part, **kwargs)  # type: ignore[arg-type]

    def test_non_dataclass_rejected(self) -> None:
        with pytest.raises(SchemaDefinitionError, match="must be a dataclass"):
            SchemaDescriptor(schema=dict, fields={})
        with pytest.raises(SchemaDefinitionError, match="must be a dataclass"):
            SchemaDescriptor.from_dataclass(dict)
