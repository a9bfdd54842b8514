"""Readable names for integer enumerations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class IntName:
    """Pairs an integer value with its display name."""

    value: int
    name: str


def string_name(i: int, names: Sequence[IntName], go_syntax_pre: str, go_syntax: bool) -> str:
    """Name ``i`` from ``names``, falling back to "<nearest smaller>+<offset>".

    ``names`` is assumed to be sorted by value.
    """
    prefix = go_syntax_pre if go_syntax else ""
    for entry in names:
        if entry.value == i:
            return prefix + entry.name

    for entry in reversed(names):
        if entry.value < i:
            return f"{prefix}{entry.name}+{i - entry.value}"

    return str(i)