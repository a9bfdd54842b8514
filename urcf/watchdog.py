"""Watching managed processes and reporting the ones that die."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any

from urcf.lifecycle import InitHelper

_log = logging.getLogger(__name__)


@dataclass(eq=False)
class _Dog:
    proc: Any
    events: "queue.Queue[tuple[str, Any]]" = field(default_factory=queue.Queue)
    lock: threading.Lock = field(default_factory=threading.Lock)
    stopping: bool = False

    def mark_stopping(self) -> bool:
        """Set the stopping flag; False if it was already set."""
        with self.lock:
            if self.stopping:
                return False
            self.stopping = True
            return True


class WatchDog(InitHelper):
    """Waits on watched processes and queues those that exit unexpectedly.

    A watched ``proc`` needs a ``name`` and a ``process`` whose ``wait()``
    blocks until it exits.
    """

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self._watched: dict[str, _Dog] = {}
        self._deaths: "queue.Queue[Any]" = queue.Queue()

    def initialize(self, *args: Any) -> None:
        return self.call_initialize(lambda: None)

    def uninitialize(self, *args: Any) -> None:
        return self.call_uninitialize(lambda: None)

    def start_watch(self, proc: Any) -> None:
        """Begin watching ``proc``; a second watch on the same name is ignored."""
        with self._lock:
            if proc.name in self._watched:
                _log.warning("A watcher for this process already exists.")
                return
            dog = _Dog(proc)
            self._watched[proc.name] = dog
        threading.Thread(target=self._wait_target, args=(dog,), daemon=True).start()
        threading.Thread(target=self._watch, args=(dog,), daemon=True).start()

    def stop_watch(self, proc: Any) -> None:
        """Stop watching ``proc`` without reporting its exit."""
        with self._lock:
            dog = self._watched.get(proc.name)
            if dog is None:
                raise LookupError("process not watching")
            _log.info("Exiting watcher on proc %s", proc.name)
            if not dog.mark_stopping():
                raise RuntimeError("watch is stopping")
            del self._watched[proc.name]
        dog.events.put(("stop", None))

    def deaths(self) -> "queue.Queue[Any]":
        """Queue receiving every watched process that exited."""
        return self._deaths

    @staticmethod
    def _wait_target(dog: _Dog) -> None:
        _log.info("Starting watcher on process %s", dog.proc.name)
        try:
            state = dog.proc.process.wait()
        except Exception as exc:  # the exit is still reported
            state = exc
        if dog.mark_stopping():
            dog.events.put(("exit", state))

    def _watch(self, dog: _Dog) -> None:
        try:
            kind, state = dog.events.get()
            if kind == "exit":
                _log.info("Proc %s is dead, advising master...", dog.proc.name)
                _log.info("State is %s", state)
                self._deaths.put(dog.proc)
        finally:
            with self._lock:
                if self._watched.get(dog.proc.name) is dog:
                    del self._watched[dog.proc.name]