"""The manifest describing a plugin package."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Union


class Architecture(str, Enum):
    ALL = "ALL"
    X86 = "X86"
    X86_64 = "X86_64"
    ARM = "ARM"
    AARCH64 = "AArch64"
    MIPS = "MIPS"
    IA_64 = "IA-64"


@dataclass(frozen=True)
class Package:
    name: str = ""
    version: str = ""


@dataclass(frozen=True)
class License:
    name: str = ""
    path: str = ""


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise TypeError(f"expected a scalar, got {value!r}")


def _items(value: Any) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"expected a list, got {value!r}")
    return value


def _mapping(value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"expected a mapping, got {value!r}")
    return value


def _packages(value: Any) -> tuple[Package, ...]:
    return tuple(
        Package(_text(m.get("name")), _text(m.get("version")))
        for m in map(_mapping, _items(value))
    )


def _architecture(value: Any) -> Union[Architecture, str]:
    text = _text(value)
    try:
        return Architecture(text)
    except ValueError:
        return text


@dataclass(frozen=True)
class PluginManifest:
    name: str = ""
    desc: str = ""
    version: str = ""
    architecture: Union[Architecture, str] = ""
    os: str = ""
    homepage: str = ""
    maintainer: str = ""
    checksum: str = ""
    enter_point: str = ""
    conffiles: tuple[str, ...] = ()
    deps: tuple[Package, ...] = ()
    sys_deps: tuple[Package, ...] = ()
    licenses: tuple[License, ...] = ()
    pre_install: tuple[str, ...] = ()
    post_install: tuple[str, ...] = ()
    cover_file: str = ""
    webs_dir: str = ""

    @classmethod
    def from_mapping(cls, data: Any) -> "PluginManifest":
        """Build a manifest from parsed YAML; missing keys take empty values."""
        if not isinstance(data, Mapping):
            raise TypeError("plugin manifest must be a mapping")
        return cls(
            name=_text(data.get("name")),
            desc=_text(data.get("desc")),
            version=_text(data.get("version")),
            architecture=_architecture(data.get("architecture")),
            os=_text(data.get("os")),
            homepage=_text(data.get("homepage")),
            maintainer=_text(data.get("maintainer")),
            checksum=_text(data.get("checksum")),
            enter_point=_text(data.get("enter-point")),
            conffiles=tuple(_text(v) for v in _items(data.get("conffiles"))),
            deps=_packages(data.get("deps")),
            sys_deps=_packages(data.get("sys-deps")),
            licenses=tuple(
                License(_text(m.get("name")), _text(m.get("desc")))
                for m in map(_mapping, _items(data.get("licenses")))
            ),
            pre_install=tuple(_text(v) for v in _items(data.get("pre-install"))),
            post_install=tuple(_text(v) for v in _items(data.get("post-install"))),
            cover_file=_text(data.get("cover-file")),
            webs_dir=_text(data.get("webs-dir")),
        )