"""The engine-wide configuration held in a YAML file."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Union

import yaml

from urcf.lifecycle import InitHelper, LifecycleError

_SYS_KEYS = (
    ("work-path", "work_path"),
    ("database-path", "database_path"),
    ("plugin-path", "plugin_path"),
    ("plugin-webs", "plugin_webs"),
)


@dataclass(frozen=True)
class Rpc:
    port: int = 8228


@dataclass(frozen=True)
class Sys:
    work_path: str = "./"
    database_path: str = "./database"
    plugin_path: str = "./plugin"
    plugin_webs: str = ""


@dataclass(frozen=True)
class GlobalConfig:
    rpc: Rpc = field(default_factory=Rpc)
    sys: Sys = field(default_factory=Sys)

    def to_mapping(self) -> dict[str, Any]:
        return {
            "rpc": {"port": self.rpc.port},
            "sys": {key: getattr(self.sys, attr) for key, attr in _SYS_KEYS},
        }


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a mapping")
    return data


def _port(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFFFF:
        raise ValueError(f"invalid rpc port {value!r}")
    return value


def _text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {value!r}")
    return value


def _merge(config: GlobalConfig, data: Any) -> GlobalConfig:
    """Overlay parsed YAML onto ``config``; absent keys keep their values."""
    if data is None:
        return config
    data = _require_mapping(data, "configuration")
    rpc, sys_part = config.rpc, config.sys
    rpc_data = data.get("rpc")
    if rpc_data is not None:
        rpc_data = _require_mapping(rpc_data, "rpc")
        if "port" in rpc_data:
            rpc = replace(rpc, port=_port(rpc_data["port"]))
    sys_data = data.get("sys")
    if sys_data is not None:
        sys_data = _require_mapping(sys_data, "sys")
        updates = {attr: _text(sys_data[key]) for key, attr in _SYS_KEYS if key in sys_data}
        sys_part = replace(sys_part, **updates)
    return GlobalConfig(rpc, sys_part)


class GlobalConfigService(InitHelper):
    """Loads the global configuration from a file and writes it back."""

    def __init__(self) -> None:
        super().__init__()
        self._config = GlobalConfig()
        self._path: Optional[Union[str, "os.PathLike[str]"]] = None
        self._lock = threading.RLock()

    def initialize(self, *args: Any) -> None:
        """Read the YAML file named by the first argument."""
        if not args:
            raise TypeError("initialize requires the configuration file path")
        path = args[0]

        def load() -> None:
            with open(path, encoding="utf-8") as handle:
                data = yaml.safe_load(handle)
            with self._lock:
                self._config = _merge(self._config, data)
                self._path = path

        return self.call_initialize(load)

    def uninitialize(self, *args: Any) -> None:
        def release() -> None:
            with self._lock:
                self._path = None

        return self.call_uninitialize(release)

    def get(self) -> GlobalConfig:
        with self._lock:
            return self._config

    def write(self, config: GlobalConfig) -> None:
        """Replace the configuration and save it to the loaded file."""
        with self._lock:
            self._config = config
            if self._path is None:
                raise LifecycleError("configuration file is not open")
            text = yaml.safe_dump(config.to_mapping(), sort_keys=False)
            with open(self._path, "w", encoding="utf-8") as handle:
                handle.write(text)