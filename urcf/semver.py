"""Semantic version parsing and comparison."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import Optional, Union

_DIGITS = re.compile(r"[0-9]+")
_UINT64_LIMIT = 1 << 64


class SemanticVersionError(ValueError):
    """Raised for malformed or incomparable versions."""


class DetailCompareResult(IntFlag):
    NO_DIFFERENT = 0
    MAJOR_LT = 1 << 1
    MAJOR_GT = 1 << 2
    MINOR_LT = 1 << 3
    MINOR_GT = 1 << 4
    PATCH_LT = 1 << 5
    PATCH_GT = 1 << 6
    PRE_RELEASE_LT = 1 << 7
    PRE_RELEASE_GT = 1 << 8
    BUILD_LT = 1 << 9
    BUILD_GT = 1 << 10


class CompareResult(IntEnum):
    SAME = 0
    GT = 1
    LT = 2


def _parse_uint(text: str) -> Optional[int]:
    if not _DIGITS.fullmatch(text):
        return None
    value = int(text)
    if value >= _UINT64_LIMIT:
        return None
    return value


def _array_compare(this: tuple[str, ...], other: tuple[str, ...]) -> int:
    # An empty list (no pre-release) ranks above a non-empty one.
    if not this and other:
        return 1
    if this and not other:
        return -1
    for mine, theirs in zip(this, other):
        a, b = _parse_uint(mine), _parse_uint(theirs)
        if a is not None and b is not None:
            return (a > b) - (a < b)
        if mine != theirs:
            return -1 if mine < theirs else 1
    return (len(this) > len(other)) - (len(this) < len(other))


@dataclass(frozen=True)
class SemanticVersion:
    """A version such as ``1.2.3-rc.1+build.5``."""

    major: int = 0
    minor: int = 0
    patch: int = 0
    pre_release: tuple[str, ...] = field(default_factory=tuple)
    build: tuple[str, ...] = field(default_factory=tuple)
    valid: bool = True

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release:
            text += "-" + ".".join(self.pre_release)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    def detail_compare(self, other: "SemanticVersion") -> DetailCompareResult:
        """Per-component comparison flags of ``self`` against ``other``."""
        if not self.valid or not other.valid:
            raise SemanticVersionError("invalid SemanticVersion can't compare")
        result = DetailCompareResult.NO_DIFFERENT
        pairs = (
            (self.major, other.major, DetailCompareResult.MAJOR_LT, DetailCompareResult.MAJOR_GT),
            (self.minor, other.minor, DetailCompareResult.MINOR_LT, DetailCompareResult.MINOR_GT),
            (self.patch, other.patch, DetailCompareResult.PATCH_LT, DetailCompareResult.PATCH_GT),
        )
        for mine, theirs, lt, gt in pairs:
            if mine < theirs:
                result |= lt
            elif mine > theirs:
                result |= gt

        cr = _array_compare(self.pre_release, other.pre_release)
        if cr < 0:
            result |= DetailCompareResult.PRE_RELEASE_LT
        elif cr > 0:
            result |= DetailCompareResult.PRE_RELEASE_GT

        cr = _array_compare(self.build, other.build)
        if cr < 0:
            result |= DetailCompareResult.BUILD_LT
        elif cr > 0:
            result |= DetailCompareResult.BUILD_GT
        return result

    def compare(self, other: "SemanticVersion") -> CompareResult:
        """Precedence comparison; build metadata is ignored."""
        result = self.detail_compare(other)
        order = (
            (DetailCompareResult.MAJOR_LT, DetailCompareResult.MAJOR_GT),
            (DetailCompareResult.MINOR_LT, DetailCompareResult.MINOR_GT),
            (DetailCompareResult.PATCH_LT, DetailCompareResult.PATCH_GT),
            (DetailCompareResult.PRE_RELEASE_LT, DetailCompareResult.PRE_RELEASE_GT),
        )
        for lt, gt in order:
            if result & lt:
                return CompareResult.LT
            if result & gt:
                return CompareResult.GT
        return CompareResult.SAME

    def compatible(self, other: "SemanticVersion") -> bool:
        """Same major version and ``self``'s minor not above ``other``'s."""
        result = self.detail_compare(other)
        if result & (DetailCompareResult.MAJOR_LT | DetailCompareResult.MAJOR_GT):
            return False
        return not result & DetailCompareResult.MINOR_GT

    def to_json(self) -> str:
        return json.dumps(str(self))

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "SemanticVersion":
        """Decode a JSON string; an unparsable version yields an invalid zero version."""
        value = json.loads(data)
        if not isinstance(value, str):
            raise SemanticVersionError("semantic version must be a JSON string")
        try:
            return parse_semver(value)
        except SemanticVersionError:
            return cls(valid=False)


def _component(text: str) -> int:
    value = _parse_uint(text)
    if value is None:
        raise SemanticVersionError(f"invalid version number {text!r}")
    return value & 0xFFFFFFFF


def parse_semver(ver: str) -> SemanticVersion:
    """Parse ``ver``; a string without dots gives an invalid (uncomparable) version."""
    build: tuple[str, ...] = ()
    pre_release: tuple[str, ...] = ()

    core, plus, rest = ver.partition("+")
    if plus:
        build = tuple(rest.split("."))
    core, dash, rest = core.partition("-")
    if dash:
        pre_release = tuple(rest.split("."))

    parts = core.split(".", 2)
    if len(parts) == 3:
        patch = _component(parts[2])
        minor = _component(parts[1])
        major = _component(parts[0])
        return SemanticVersion(major, minor, patch, pre_release, build, True)
    if len(parts) != 1:
        raise SemanticVersionError("semantic version format error")
    return SemanticVersion(0, 0, 0, pre_release, build, False)