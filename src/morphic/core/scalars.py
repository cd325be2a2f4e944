"""Scalar casting: raw value + declared type -> typed value or failure.

Coercion semantics belong to pydantic. A TypeAdapter is built once per
declared type and reused; lax mode (the default) accepts the usual
string forms ("42", "2024-01-05", "12.50"), strict mode does not.

Failures are returned, never raised. The caster surfaces the message and
metadata verbatim as a FieldError.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError


@dataclass(frozen=True, slots=True)
class ScalarCastResult:
    """Outcome of one scalar cast.

    Use the factory methods to create instances.
    """

    ok: bool
    value: Any = None
    message: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, value: Any) -> ScalarCastResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, message: str, **metadata: Any) -> ScalarCastResult:
        return cls(ok=False, message=message, metadata=metadata)


class ScalarCaster(Protocol):
    """The cast primitive used for every scalar field."""

    def cast(self, raw: Any, declared_type: Any) -> ScalarCastResult: ...


def type_name(declared_type: Any) -> str:
    name = getattr(declared_type, "__name__", None)
    if isinstance(name, str) and not getattr(declared_type, "__args__", None):
        return name
    return repr(declared_type).replace("typing.", "")


class PydanticScalarCaster:
    """ScalarCaster backed by pydantic TypeAdapters.

    None always casts to None regardless of the declared type: a field is
    cleared by sending null, and "must not be null" is the required
    validator's job.
    """

    def __init__(self, *, strict: bool = False, invalid_message: str = "is invalid") -> None:
        self._strict = strict
        self._invalid_message = invalid_message
        self._adapters: dict[Any, TypeAdapter[Any]] = {}

    @property
    def strict(self) -> bool:
        return self._strict

    def _adapter(self, declared_type: Any) -> TypeAdapter[Any]:
        try:
            adapter = self._adapters.get(declared_type)
        except TypeError:
            # Unhashable annotation; build uncached
            return TypeAdapter(declared_type)
        if adapter is None:
            adapter = TypeAdapter(declared_type)
            self._adapters[declared_type] = adapter
        return adapter

    def cast(self, raw: Any, declared_type: Any) -> ScalarCastResult:
        if raw is None:
            return ScalarCastResult.success(None)
        try:
            value = self._adapter(declared_type).validate_python(raw, strict=self._strict)
        except ValidationError as exc:
            errors = exc.errors(include_url=False)
            return ScalarCastResult.failure(
                self._invalid_message,
                type=type_name(declared_type),
                validation="cast",
                detail=errors[0]["msg"] if errors else str(exc),
            )
        return ScalarCastResult.success(value)
