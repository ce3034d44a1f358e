"""Tests for ConditionWaiter."""

from __future__ import annotations

import threading
import time

import pytest

from sitelink_controller.utils.errors import (
    ConditionFailedError,
    StoreError,
    ValidationError,
    WaitTimeoutError,
)
from sitelink_controller.utils.retry import PRODUCTION_PROFILE, TEST_PROFILE
from sitelink_controller.waiter import ConditionWaiter, validate_wait

from conftest import FakeObjectStore

READY_TRUE = {"type": "Ready", "status": "True", "reason": "Ready", "message": "OK"}
READY_FALSE = {"type": "Ready", "status": "False", "reason": "Error", "message": "link broken"}
READY_UNKNOWN = {"type": "Ready", "status": "Unknown", "reason": "Pending", "message": "connecting"}
CONFIGURED_TRUE = {"type": "Configured", "status": "True", "reason": "Configured", "message": "OK"}


def _later(delay: float, func, *args) -> threading.Timer:
    timer = threading.Timer(delay, func, args=args)
    timer.daemon = True
    timer.start()
    return timer


class TestValidateWait:
    """Test wait request validation."""

    def test_valid(self) -> None:
        assert validate_wait("ready", 60, PRODUCTION_PROFILE) == []

    def test_timeout_below_floor(self) -> None:
        assert validate_wait("ready", 0, PRODUCTION_PROFILE) == [
            "timeout is not valid: duration must not be less than 10s; got 0s"
        ]

    def test_unknown_status(self) -> None:
        assert validate_wait("created", 60, PRODUCTION_PROFILE) == [
            "status is not valid: value created not allowed. It should be one of this options: [ready configured none]"
        ]

    def test_none_skips_timeout(self) -> None:
        assert validate_wait("none", 0, PRODUCTION_PROFILE) == []


class TestWaitShortCircuit:
    """Test waits that never reach the store."""

    def test_none_milestone_does_not_access_store(self, store: FakeObjectStore) -> None:
        ConditionWaiter(store, "Link", PRODUCTION_PROFILE).wait("test", "missing", "none", 0)

        assert store.gets == 0

    def test_invalid_timeout(self, store: FakeObjectStore) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ConditionWaiter(store, "Link", PRODUCTION_PROFILE).wait("test", "my-link", "ready", 0)

        assert str(exc_info.value) == "timeout is not valid: duration must not be less than 10s; got 0s"
        assert store.gets == 0

    def test_invalid_milestone(self, store: FakeObjectStore) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ConditionWaiter(store, "Link", PRODUCTION_PROFILE).wait("test", "my-link", "created", 60)

        assert "value created not allowed" in str(exc_info.value)
        assert store.gets == 0


class TestWaitOutcomes:
    """Test the terminal outcomes of a wait."""

    def test_ready_returns_immediately(self, store: FakeObjectStore) -> None:
        store.add("Link", "my-link", conditions=[READY_TRUE])

        start = time.monotonic()
        ConditionWaiter(store, "Link", TEST_PROFILE).wait("test", "my-link", "ready", 5)

        assert time.monotonic() - start < 1
        assert store.gets == 1

    def test_configured_milestone(self, store: FakeObjectStore) -> None:
        store.add("Link", "my-link", conditions=[READY_UNKNOWN, CONFIGURED_TRUE])

        ConditionWaiter(store, "Link", TEST_PROFILE).wait("test", "my-link", "configured", 5)

    def test_false_fails_without_waiting(self, store: FakeObjectStore) -> None:
        store.add("Link", "my-link", conditions=[READY_FALSE])

        start = time.monotonic()
        with pytest.raises(ConditionFailedError) as exc_info:
            ConditionWaiter(store, "Link", TEST_PROFILE).wait("test", "my-link", "ready", 5)

        assert time.monotonic() - start < 1
        assert exc_info.value.reason == "Error"
        assert exc_info.value.message == "link broken"

    def test_missing_object_times_out(self, store: FakeObjectStore) -> None:
        """A link that never appears is polled until the deadline."""
        start = time.monotonic()
        with pytest.raises(WaitTimeoutError) as exc_info:
            ConditionWaiter(store, "Link", TEST_PROFILE).wait("test", "my-link", "ready", 0.3)

        elapsed = time.monotonic() - start
        assert 0.3 <= elapsed < 2
        assert exc_info.value.not_found
        assert not exc_info.value.cancelled
        assert "not found" in str(exc_info.value)
        assert store.gets >= 2

    def test_unknown_then_true(self, store: FakeObjectStore) -> None:
        store.add("Link", "my-link", conditions=[READY_UNKNOWN])
        _later(0.15, store.set_conditions, "Link", "my-link", [READY_TRUE])

        ConditionWaiter(store, "Link", TEST_PROFILE).wait("test", "my-link", "ready", 5)

        assert store.gets >= 2

    def test_appears_then_ready(self, store: FakeObjectStore) -> None:
        """Not-found is transient while the object is being created."""
        _later(0.15, store.add, "Link", "my-link", "test", None, [READY_TRUE])

        ConditionWaiter(store, "Link", TEST_PROFILE).wait("test", "my-link", "ready", 5)

    def test_unknown_times_out_with_last_state(self, store: FakeObjectStore) -> None:
        store.add("Link", "my-link", conditions=[READY_UNKNOWN])

        with pytest.raises(WaitTimeoutError) as exc_info:
            ConditionWaiter(store, "Link", TEST_PROFILE).wait("test", "my-link", "ready", 0.2)

        assert not exc_info.value.not_found
        assert exc_info.value.last_state == "last observed Ready=Unknown (Pending: connecting)"

    def test_latest_condition_wins(self, store: FakeObjectStore) -> None:
        store.add("Link", "my-link", conditions=[READY_FALSE, READY_TRUE])

        ConditionWaiter(store, "Link", TEST_PROFILE).wait("test", "my-link", "ready", 5)

    def test_stale_generation_is_ignored(self, store: FakeObjectStore) -> None:
        """A condition computed for an older generation does not end the wait."""
        store.add(
            "Link", "my-link",
            conditions=[dict(READY_FALSE, observedGeneration=1)],
            generation=2,
        )

        with pytest.raises(WaitTimeoutError) as exc_info:
            ConditionWaiter(store, "Link", TEST_PROFILE).wait("test", "my-link", "ready", 0.2)

        assert "current generation is 2" in exc_info.value.last_state

    def test_current_generation_is_used(self, store: FakeObjectStore) -> None:
        store.add(
            "Link", "my-link",
            conditions=[dict(READY_TRUE, observedGeneration=2)],
            generation=2,
        )

        ConditionWaiter(store, "Link", TEST_PROFILE).wait("test", "my-link", "ready", 5)

    def test_cancelled(self, store: FakeObjectStore) -> None:
        store.add("Link", "my-link", conditions=[READY_UNKNOWN])
        stop = threading.Event()
        _later(0.1, stop.set)

        start = time.monotonic()
        with pytest.raises(WaitTimeoutError) as exc_info:
            ConditionWaiter(store, "Link", TEST_PROFILE).wait("test", "my-link", "ready", 30, stop=stop)

        assert time.monotonic() - start < 5
        assert exc_info.value.cancelled
        assert str(exc_info.value).startswith("cancelled after")

    def test_store_error_propagates(self) -> None:
        store = FakeObjectStore(error="forbidden")

        with pytest.raises(StoreError, match="forbidden"):
            ConditionWaiter(store, "Link", TEST_PROFILE).wait("test", "my-link", "ready", 5)


class TestParallelWaits:
    """Test independent waits in parallel threads."""

    def test_each_wait_keeps_its_own_deadline(self, store: FakeObjectStore) -> None:
        store.add("Link", "fast", conditions=[READY_UNKNOWN])
        store.add("Link", "slow", conditions=[READY_UNKNOWN])
        _later(0.1, store.set_conditions, "Link", "fast", [READY_TRUE])
        waiter = ConditionWaiter(store, "Link", TEST_PROFILE)
        outcomes: dict[str, str] = {}

        def run(name: str, timeout: float) -> None:
            try:
                waiter.wait("test", name, "ready", timeout)
                outcomes[name] = "ready"
            except WaitTimeoutError:
                outcomes[name] = "timeout"

        threads = [
            threading.Thread(target=run, args=("fast", 5)),
            threading.Thread(target=run, args=("slow", 0.3)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(10)

        assert outcomes == {"fast": "ready", "slow": "timeout"}
