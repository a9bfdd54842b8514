"""Hierarchical, dot-separated configuration keys backed by a repository."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Protocol

from urcf.lifecycle import InitHelper

START_OF_2018 = datetime(2018, 1, 1, tzinfo=timezone.utc)
ROOT_KEY = "_urcf_root_"


class KeyNotFoundError(LookupError):
    """Raised when a configuration key does not exist."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__("configuration: key not exist")


@dataclass
class Config:
    """One stored configuration entry; ``expires`` of None means never."""

    key: str
    value: Any = None
    create_time: datetime = START_OF_2018
    update_time: datetime = START_OF_2018
    expires: Optional[timedelta] = None


class _ConfigRepository(Protocol):
    def find_all(self) -> list[Config]: ...

    def insert_config(self, config: Config) -> None: ...

    def delete_config_by_key(self, key: str) -> int: ...


class _MemoryRepository:
    """Keeps configuration entries in memory, keyed by their full key."""

    def __init__(self) -> None:
        self._configs: dict[str, Config] = {}

    def find_all(self) -> list[Config]:
        return [replace(config) for config in self._configs.values()]

    def insert_config(self, config: Config) -> None:
        self._configs[config.key] = replace(config)

    def delete_config_by_key(self, key: str) -> int:
        """Remove the entry stored under ``key``; returns how many were removed."""
        if key not in self._configs:
            return 0
        del self._configs[key]
        return 1


class ConfigNode:
    """A node of the configuration tree; children are keyed by full path."""

    def __init__(
        self,
        config: Config,
        parent: Optional["ConfigNode"],
        service: "ConfigurationService",
    ) -> None:
        self.config = config
        self.parent = parent
        self._service = service
        self._children: dict[str, ConfigNode] = {}

    @property
    def key(self) -> str:
        return self.config.key

    @property
    def value(self) -> Any:
        return self.config.value

    def _child_key(self, key: str) -> str:
        if self.parent is None:
            return key
        return f"{self.config.key}.{key}"

    def get(self, key: str) -> "ConfigNode":
        """Look up ``key`` relative to this node."""
        return self._service.get(self._child_key(key))

    def get_all(self) -> list["ConfigNode"]:
        """Direct children of this node."""
        return list(self._children.values())

    def has_child(self) -> bool:
        return bool(self._children)

    def put(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key`` relative to this node."""
        self._service.put(self._child_key(key), value)

    def delete(self, key: str) -> "ConfigNode":
        """Remove ``key`` relative to this node."""
        return self._service.delete(self._child_key(key))


class ConfigurationService(InitHelper):
    """Tree view over configuration entries, kept in step with a repository."""

    def __init__(self, repo: Optional[_ConfigRepository] = None) -> None:
        super().__init__()
        self._repo: _ConfigRepository = repo if repo is not None else _MemoryRepository()
        self._lock = threading.RLock()
        self._root = ConfigNode(Config(ROOT_KEY), None, self)
        self.synced = False
        self.sync()

    def initialize(self, *args: Any) -> None:
        return self.call_initialize(lambda: None)

    def uninitialize(self, *args: Any) -> None:
        return self.call_uninitialize(lambda: None)

    def sync(self) -> None:
        """Load every stored entry into the tree."""
        with self._lock:
            for conf in self._repo.find_all():
                parts = conf.key.split(".")
                node = self._root
                prefix = ""
                for index, part in enumerate(parts):
                    path = prefix + part
                    last = index == len(parts) - 1
                    child = node._children.get(path)
                    if child is not None:
                        if last:
                            child.config = conf
                    else:
                        child = ConfigNode(conf if last else Config(path), node, self)
                        node._children[path] = child
                    node = child
                    prefix = path + "."
            self.synced = True

    def get_root(self) -> ConfigNode:
        return self._root

    def _find(self, key: str) -> ConfigNode:
        node = self._root
        prefix = ""
        for part in key.split("."):
            path = prefix + part
            child = node._children.get(path)
            if child is None:
                raise KeyNotFoundError(key)
            node = child
            prefix = path + "."
        return node

    def get(self, key: str) -> ConfigNode:
        """Node for the full dotted ``key``."""
        with self._lock:
            return self._find(key)

    def put(self, key: str, value: Any) -> None:
        """Set ``key`` to ``value``, creating placeholder parents as needed."""
        parts = key.split(".")
        now = datetime.now(timezone.utc)
        with self._lock:
            node = self._root
            prefix = ""
            for index, part in enumerate(parts):
                path = prefix + part
                last = index == len(parts) - 1
                child = node._children.get(path)
                if child is not None:
                    if last:
                        child.config.value = value
                        self._repo.insert_config(child.config)
                else:
                    if last:
                        config = Config(key, value, now, now)
                        self._repo.insert_config(config)
                    else:
                        config = Config(path)
                    child = ConfigNode(config, node, self)
                    node._children[path] = child
                node = child
                prefix = path + "."

    def delete(self, key: str) -> ConfigNode:
        """Remove ``key`` from the tree and the repository; returns the removed node."""
        with self._lock:
            node = self._find(key)
            if node.parent is not None:
                node.parent._children.pop(key, None)
            self._repo.delete_config_by_key(key)
            return node