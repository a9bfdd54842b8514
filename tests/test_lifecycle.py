import threading

import pytest

from urcf.lifecycle import InitHelper, LifecycleError


def test_initialize_returns_result_and_blocks_second_call():
    helper = InitHelper()
    assert helper.call_initialize(lambda: 42) == 42
    assert helper.initialized is True
    with pytest.raises(LifecycleError, match="already initialize"):
        helper.call_initialize(lambda: 1)


def test_uninitialize_before_initialize_fails():
    helper = InitHelper()
    with pytest.raises(LifecycleError, match="already uninitialize"):
        helper.call_uninitialize(lambda: None)


def test_full_cycle_can_repeat():
    helper = InitHelper()
    calls = []
    helper.call_initialize(lambda: calls.append("init"))
    helper.call_uninitialize(lambda: calls.append("uninit"))
    helper.call_initialize(lambda: calls.append("init"))
    assert calls == ["init", "uninit", "init"]
    assert helper.initialized is True


def test_failing_initialize_still_marks_initialized():
    helper = InitHelper()

    def boom():
        raise ValueError("boom")

    with pytest.raises(ValueError):
        helper.call_initialize(boom)
    with pytest.raises(LifecycleError):
        helper.call_initialize(lambda: None)


def test_concurrent_initialize_runs_once():
    helper = InitHelper()
    barrier = threading.Barrier(8)
    results = []
    failures = []

    def worker():
        barrier.wait()
        try:
            results.append(helper.call_initialize(lambda: "ran"))
        except LifecycleError:
            failures.append(1)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == ["ran"]
    assert len(failures) == 7
    assert helper.initialized is True