# src/morphic/contracts/change_node.py
"""Change nodes: base instance + proposed changes + validity + errors.

A ChangeNode is immutable. Every "mutation" (adding a change, adding an
error) returns a new node. Validity composes with AND only: no helper on
this class can turn an invalid node valid again.

Values in `changes`:
- scalar fields hold the cast value (None allowed)
- one-relations hold a ChangeNode, or None when the member is cleared
- many-relations hold a tuple of ChangeNodes, in input order
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from morphic.contracts.enums import ChangeAction
from morphic.contracts.schema import SchemaDescriptor
from morphic.contracts.sentinels import MISSING


class _KeepPlaceholders(dict[str, Any]):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


@dataclass(frozen=True, slots=True)
class FieldError:
    """One accumulated validation failure.

    Attributes:
        field: Field name on the node that carries the error
        message: Human-readable message; may contain {key} placeholders
        metadata: Structured detail, e.g. {"validation": "required"}
    """

    field: str
    message: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def validation(self) -> str | None:
        return self.metadata.get("validation")

    def render(self) -> str:
        """Message with {key} placeholders filled from metadata.

        Unknown placeholders are left as-is; a message that is not a valid
        format string is returned unchanged.
        """
        try:
            return self.message.format_map(_KeepPlaceholders(self.metadata))
        except (ValueError, IndexError, AttributeError, KeyError, TypeError):
            return self.message


def is_node_list(value: Any) -> bool:
    """True for a non-empty tuple/list made only of change nodes."""
    return isinstance(value, (tuple, list)) and bool(value) and all(isinstance(v, ChangeNode) for v in value)


def value_valid(value: Any) -> bool:
    """Validity contributed by one entry of `changes`."""
    if isinstance(value, ChangeNode):
        return value.valid
    if is_node_list(value):
        return all(member.valid for member in value)
    return True


@dataclass(frozen=True, slots=True)
class ChangeNode:
    """The unit of work for one schema instance.

    Attributes:
        descriptor: Schema descriptor of the wrapped instance
        base: Pre-existing typed instance (default instance for inserts)
        changes: Field name -> proposed value (read-only mapping)
        errors: Accumulated FieldErrors, in order
        valid: False once anything failed; never flips back to True
        action: insert/update/replace/delete for nested nodes, None at the root
        params: The projected raw input the node was cast from
    """

    descriptor: SchemaDescriptor = field(repr=False)
    base: Any
    changes: Mapping[str, Any] = field(default_factory=dict)
    errors: tuple[FieldError, ...] = ()
    valid: bool = True
    action: ChangeAction | None = None
    params: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "changes", MappingProxyType(dict(self.changes)))
        object.__setattr__(self, "errors", tuple(self.errors))
        if self.action is not None:
            object.__setattr__(self, "action", ChangeAction(self.action))

    @property
    def schema(self) -> type:
        return self.descriptor.schema

    @property
    def is_removal(self) -> bool:
        """True for members a many-relation is discarding (replace/delete)."""
        return self.action is not None and self.action.is_removal

    def has_change(self, name: str) -> bool:
        return name in self.changes

    def get_change(self, name: str, default: Any = None) -> Any:
        return self.changes.get(name, default)

    def get_field(self, name: str) -> Any:
        """Effective value: the change if one is recorded, else the base value."""
        value = self.changes.get(name, MISSING)
        if value is not MISSING:
            return value
        return self.descriptor.read(self.base, name)

    def errors_for(self, name: str) -> tuple[FieldError, ...]:
        return tuple(e for e in self.errors if e.field == name)

    def with_change(self, name: str, value: Any) -> ChangeNode:
        """Record (or overwrite) a change.

        The new node's validity is the AND of this node's validity and the
        validity of `value` (a node, or every node of a node list).
        """
        changes = dict(self.changes)
        changes[name] = value
        return replace(self, changes=changes, valid=self.valid and value_valid(value))

    def without_change(self, name: str) -> ChangeNode:
        if name not in self.changes:
            return self
        changes = dict(self.changes)
        del changes[name]
        return replace(self, changes=changes)

    def with_error(self, name: str, message: str, **metadata: Any) -> ChangeNode:
        """Append a FieldError and mark the node invalid."""
        error = FieldError(name, message, metadata)
        return replace(self, errors=(*self.errors, error), valid=False)

    def with_action(self, action: ChangeAction | None) -> ChangeNode:
        return replace(self, action=action)

    def invalidated(self) -> ChangeNode:
        if not self.valid:
            return self
        return replace(self, valid=False)

    def nested(self) -> Iterator[tuple[str, ChangeNode]]:
        """Yield (field, node) for every nested change node, lists flattened."""
        for name, value in self.changes.items():
            if isinstance(value, ChangeNode):
                yield name, value
            elif is_node_list(value):
                for member in value:
                    yield name, member

    def render(self) -> str:
        """Indented, human-readable rendering of the node tree."""
        return "\n".join(self._render_lines(0))

    def _render_lines(self, depth: int) -> list[str]:
        pad = "  " * depth
        head = f"{pad}<{self.descriptor.name} {'valid' if self.valid else 'invalid'}"
        if self.action is not None:
            head += f" action={self.action}"
        lines = [head + ">"]
        for name, value in self.changes.items():
            if isinstance(value, ChangeNode):
                lines.append(f"{pad}  {name}:")
                lines.extend(value._render_lines(depth + 2))
            elif is_node_list(value):
                lines.append(f"{pad}  {name}: [{len(value)} members]")
                for member in value:
                    lines.extend(member._render_lines(depth + 2))
            else:
                lines.append(f"{pad}  {name}: {value!r}")
        for error in self.errors:
            lines.append(f"{pad}  ! {error.field}: {error.render()}")
        return lines


@dataclass(frozen=True, slots=True)
class MissingNode:
    """Handed to walker visitors when a path segment has no nested node.

    The segment was either absent from the parent's changes or held None.
    Whatever the visitor returns replaces `parent` in the tree.

    Attributes:
        field: The path segment that was absent
        parent: Node that should have held the nested change
        remaining: Path segments after `field` that could not be visited
    """

    field: str
    parent: ChangeNode
    remaining: tuple[str, ...] = ()
