import queue
import threading
from types import SimpleNamespace

import pytest

from urcf.lifecycle import LifecycleError
from urcf.watchdog import WatchDog


class _FakeProcess:
    def __init__(self):
        self._exited = threading.Event()

    def exit(self):
        self._exited.set()

    def wait(self):
        self._exited.wait()
        return 0


def _proc(name):
    return SimpleNamespace(name=name, process=_FakeProcess())


def test_exited_process_is_reported():
    dog = WatchDog()
    proc = _proc("worker")
    dog.start_watch(proc)
    proc.process.exit()
    assert dog.deaths().get(timeout=5) is proc


def test_stopped_watch_does_not_report():
    dog = WatchDog()
    proc = _proc("worker")
    dog.start_watch(proc)
    dog.stop_watch(proc)
    proc.process.exit()
    with pytest.raises(queue.Empty):
        dog.deaths().get(timeout=0.3)


def test_stop_unwatched_process_raises():
    dog = WatchDog()
    with pytest.raises(LookupError):
        dog.stop_watch(_proc("nobody"))


def test_stop_twice_raises():
    dog = WatchDog()
    proc = _proc("worker")
    dog.start_watch(proc)
    dog.stop_watch(proc)
    with pytest.raises(LookupError):
        dog.stop_watch(proc)


def test_duplicate_watch_reports_once():
    dog = WatchDog()
    proc = _proc("worker")
    dog.start_watch(proc)
    dog.start_watch(proc)
    proc.process.exit()
    assert dog.deaths().get(timeout=5) is proc
    with pytest.raises(queue.Empty):
        dog.deaths().get(timeout=0.3)


def test_watch_can_restart_after_stop():
    dog = WatchDog()
    first = _proc("worker")
    dog.start_watch(first)
    dog.stop_watch(first)
    second = _proc("worker")
    dog.start_watch(second)
    second.process.exit()
    assert dog.deaths().get(timeout=5) is second


def test_lifecycle_rejects_double_initialize():
    dog = WatchDog()
    dog.initialize()
    with pytest.raises(LifecycleError):
        dog.initialize()
    dog.uninitialize()
    with pytest.raises(LifecycleError):
        dog.uninitialize()