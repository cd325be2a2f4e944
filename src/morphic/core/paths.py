"""Path expansion for whitelists and validation specs.

A spec is a list mixing bare field names and (field, nested) pairs, where
nested is a bare name or a further spec:

    ["reference", ("line_items", ["sku", ("note", "body")]), ("shipping_address", "city")]

A mapping is accepted anywhere a list is; its items are read as pairs in
insertion order.

expand_path() flattens a spec into (path_prefix, fields) pairs. The
emission order is fixed:

    expand_path(["thing", ("thing", [("okay", "then"), ("if", "yes")]), ("and", "another")])
    == [(("thing", "if"), ("yes",)),
        (("thing", "okay"), ("then",)),
        ((), ("thing",)),
        (("and",), ("another",))]

- Top level is read left to right. Bare names accumulate in a pending run;
  each pair emits its own expansion and then flushes the pending run as
  ((), run). Whatever is pending at the end is flushed last.
- Inside a pair, all bare names at that level form one pair (emitted
  first), and nested pairs are expanded last to first.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any, TypeAlias

Path: TypeAlias = tuple[str, ...]
ExpandedPath: TypeAlias = list[tuple[Path, Path]]


def _entries(spec: Any) -> Iterator[str | tuple[str, Any]]:
    """Yield bare names and (field, nested) pairs from a spec.

    Raises:
        TypeError: On anything that is not a name, a pair, a list or a mapping
    """
    if isinstance(spec, Mapping):
        for key, nested in spec.items():
            yield _pair(key, nested)
        return
    if isinstance(spec, str) or not isinstance(spec, Sequence):
        raise TypeError(f"A path spec must be a list or a mapping, got {type(spec).__name__}")
    for entry in spec:
        if isinstance(entry, str):
            yield entry
        elif isinstance(entry, tuple) and len(entry) == 2:
            yield _pair(*entry)
        elif isinstance(entry, Mapping):
            for key, nested in entry.items():
                yield _pair(key, nested)
        else:
            raise TypeError(f"Path spec entries must be field names or (field, nested) pairs, got {entry!r}")


def _pair(name: Any, nested: Any) -> tuple[str, Any]:
    if not isinstance(name, str):
        raise TypeError(f"Field names in a path spec must be strings, got {name!r}")
    if isinstance(nested, tuple) and len(nested) == 2 and isinstance(nested[0], str):
        # A lone nested pair: ("thing", ("okay", "then"))
        nested = [nested]
    return name, nested


def _partition(nested: Any) -> tuple[list[str], list[tuple[str, Any]]]:
    names: list[str] = []
    pairs: list[tuple[str, Any]] = []
    for entry in _entries(nested):
        if isinstance(entry, str):
            names.append(entry)
        else:
            pairs.append(entry)
    return names, pairs


def _expand_pair(prefix: Path, name: str, nested: Any) -> ExpandedPath:
    path = (*prefix, name)
    if isinstance(nested, str):
        return [(path, (nested,))]
    names, pairs = _partition(nested)
    expanded: ExpandedPath = []
    if names:
        expanded.append((path, tuple(names)))
    for field, deeper in reversed(pairs):
        expanded.extend(_expand_pair(path, field, deeper))
    return expanded


def expand_path(spec: Any) -> ExpandedPath:
    """Flatten a nested spec into (path_prefix, fields) pairs.

    Args:
        spec: Mixed list (or mapping) of names and (field, nested) pairs

    Returns:
        Pairs in emission order (see module docstring)

    Raises:
        TypeError: If the spec is malformed
    """
    expanded: ExpandedPath = []
    pending: list[str] = []
    for entry in _entries(spec):
        if isinstance(entry, str):
            pending.append(entry)
            continue
        expanded.extend(_expand_pair((), *entry))
        if pending:
            expanded.append(((), tuple(pending)))
            pending = []
    if pending:
        expanded.append(((), tuple(pending)))
    return expanded


def split_whitelist(spec: Any) -> tuple[tuple[str, ...], dict[str, list[Any]]]:
    """Split a whitelist one level deep.

    Returns:
        (names, nested): bare names in order, and relation -> nested whitelist
        for every pair. A bare nested name becomes a one-element whitelist;
        repeated pairs for one relation are concatenated.

    Raises:
        TypeError: If the spec is malformed
    """
    names: list[str] = []
    nested: dict[str, list[Any]] = {}
    for entry in _entries(spec):
        if isinstance(entry, str):
            names.append(entry)
            continue
        name, inner = entry
        bucket = nested.setdefault(name, [])
        if isinstance(inner, str):
            bucket.append(inner)
        else:
            bucket.extend(_entries(inner))
    return tuple(names), nested

