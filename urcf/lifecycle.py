"""Guarded initialise/uninitialise transitions shared by services."""

from __future__ import annotations

import threading
from typing import Callable, TypeVar

T = TypeVar("T")


class LifecycleError(RuntimeError):
    """Raised when a service is initialised or uninitialised twice."""


class InitHelper:
    """Makes sure a service's set-up and tear-down each run only once in turn.

    The state flips even if the supplied callable raises, so a failed
    initialisation still counts as an initialisation.
    """

    def __init__(self) -> None:
        self._initialized = False
        self._init_lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def call_initialize(self, func: Callable[[], T]) -> T:
        """Run ``func`` if the service is not initialised yet."""
        with self._init_lock:
            if self._initialized:
                raise LifecycleError("already initialize")
            try:
                return func()
            finally:
                self._initialized = True

    def call_uninitialize(self, func: Callable[[], T]) -> T:
        """Run ``func`` if the service is currently initialised."""
        with self._init_lock:
            if not self._initialized:
                raise LifecycleError("already uninitialize")
            try:
                return func()
            finally:
                self._initialized = False