# src/morphic/morph.py
"""Morph: the public facade.

Binds a schema registry, a scalar caster and settings, and exposes the
whole cast -> validate -> materialize flow plus the filters.

Example:
    registry = SchemaRegistry()
    registry.register(Order, relations={"line_items": embeds_many(LineItem)})
    morph = Morph.from_config(registry, Path("morphic.yaml"))
    morph.configure_logging()

    node = morph.generate_change_node(payload, Order)
    node = morph.validate_required(node, ["reference", ("line_items", ["sku"])])
    result = morph.into_instance(node)
    if result.is_ok:
        order = result.value
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from morphic.contracts.change_node import ChangeNode
from morphic.contracts.results import MaterializeResult
from morphic.contracts.schema import SchemaIntrospection
from morphic.core import filtering, validation
from morphic.core.casting import Caster
from morphic.core.config import MorphSettings, load_settings
from morphic.core.logging import configure_logging
from morphic.core.materialize import materialize, materialize_or_raise
from morphic.core.scalars import PydanticScalarCaster, ScalarCaster


class Morph:
    """Schema-driven casting, validation and filtering."""

    def __init__(
        self,
        introspection: SchemaIntrospection,
        *,
        settings: MorphSettings | None = None,
        scalar_caster: ScalarCaster | None = None,
    ) -> None:
        self._introspection = introspection
        self._settings = settings if settings is not None else MorphSettings()
        if scalar_caster is None:
            scalar_caster = PydanticScalarCaster(
                strict=self._settings.strict_scalars,
                invalid_message=self._settings.invalid_message,
            )
        self._caster = Caster(introspection, scalar_caster, invalid_message=self._settings.invalid_message)

    @classmethod
    def from_config(cls, introspection: SchemaIntrospection, config_path: Path) -> Morph:
        """Build a Morph from a YAML settings file (MORPHIC_* env overrides apply)."""
        return cls(introspection, settings=load_settings(config_path))

    @property
    def introspection(self) -> SchemaIntrospection:
        return self._introspection

    @property
    def settings(self) -> MorphSettings:
        return self._settings

    def configure_logging(self) -> None:
        """Apply the logging block of these settings to structlog and stdlib logging."""
        configure_logging(self._settings.logging)

    # Casting

    def generate_change_node(self, data: Any, schema_or_instance: Any, whitelist: Any = None) -> ChangeNode:
        """Cast data against a schema, or onto an existing instance."""
        return self._caster.cast(data, schema_or_instance, whitelist)

    def cast_to_instance(self, data: Any, schema: Any, whitelist: Any = None) -> MaterializeResult:
        return materialize(self.generate_change_node(data, schema, whitelist))

    def cast_to_instance_or_raise(self, data: Any, schema: Any, whitelist: Any = None) -> Any:
        """Cast and materialize, raising InvalidChangeNodeError on invalid data."""
        return materialize_or_raise(self.generate_change_node(data, schema, whitelist))

    def update_instance(self, instance: Any, data: Any, whitelist: Any = None) -> MaterializeResult:
        return self.cast_to_instance(data, instance, whitelist)

    def update_instance_or_raise(self, instance: Any, data: Any, whitelist: Any = None) -> Any:
        return self.cast_to_instance_or_raise(data, instance, whitelist)

    # Materializing

    def into_instance(self, node: ChangeNode) -> MaterializeResult:
        return materialize(node)

    def into_instance_or_raise(self, node: ChangeNode) -> Any:
        return materialize_or_raise(node)

    # Validation

    def validate_required(self, node: ChangeNode, spec: Any, message: str | None = None) -> ChangeNode:
        return validation.validate_required(node, spec, message or self._settings.blank_message)

    def validate_nested(
        self,
        node: ChangeNode,
        path: Sequence[str],
        visitor: Callable[[ChangeNode], ChangeNode],
    ) -> ChangeNode:
        return validation.validate_nested(node, path, visitor)

    # Filtering

    def filter_by_schema_fields(
        self,
        data: Any,
        schema: Any,
        *,
        filter_not_loaded: bool | None = None,
        filter_relations: bool = False,
    ) -> dict[str, Any]:
        if filter_not_loaded is None:
            filter_not_loaded = self._settings.filter_not_loaded
        return filtering.filter_by_schema_fields(
            self._introspection,
            data,
            schema,
            filter_not_loaded=filter_not_loaded,
            filter_relations=filter_relations,
        )

    def deep_filter_by_schema_fields(self, data: Any, schema: Any, *, filter_not_loaded: bool | None = None) -> dict[str, Any]:
        if filter_not_loaded is None:
            filter_not_loaded = self._settings.filter_not_loaded
        return filtering.deep_filter_by_schema_fields(
            self._introspection,
            data,
            schema,
            filter_not_loaded=filter_not_loaded,
        )

    @staticmethod
    def map_from_instance(instance: Any, *, exclude_timestamps: bool = False, exclude_id: bool = False) -> dict[str, Any]:
        return filtering.map_from_instance(instance, exclude_timestamps=exclude_timestamps, exclude_id=exclude_id)
