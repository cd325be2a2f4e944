"""Result types for terminal operations.

MaterializeResult is what the materializer hands back: either the typed
value or the invalid change node, never both.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from morphic.contracts.change_node import ChangeNode


@dataclass(frozen=True, slots=True)
class MaterializeResult:
    """Outcome of materializing a change node.

    Use the factory methods to create instances.

    status uses Literal["ok", "error"], not an enum, so results can be
    matched with plain string comparison.
    """

    status: Literal["ok", "error"]
    value: Any = None
    node: ChangeNode | None = None

    def __post_init__(self) -> None:
        if self.status == "error" and self.node is None:
            raise ValueError("MaterializeResult with status='error' MUST carry the invalid node")

    @classmethod
    def ok(cls, value: Any) -> MaterializeResult:
        return cls(status="ok", value=value)

    @classmethod
    def error(cls, node: ChangeNode) -> MaterializeResult:
        return cls(status="error", node=node)

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"
