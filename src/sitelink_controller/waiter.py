"""Poll an object's status conditions until a milestone is reached."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from . import metrics
from .constants import (
    EVENT_REASON_WAIT_FAILED,
    EVENT_REASON_WAIT_SUCCEEDED,
    EVENT_REASON_WAIT_TIMEOUT,
    MILESTONE_NONE,
    STATUS_FALSE,
    STATUS_TRUE,
    WAIT_STATUS_TYPES,
)
from .logging import log_resource_event
from .models import ManagedResource
from .services.kube.base import ObjectStore
from .tracing import trace_span
from .utils.conditions import condition_type_for, describe_condition, is_stale, latest_condition
from .utils.errors import ConditionFailedError, NotFoundError, ValidationError, WaitTimeoutError
from .utils.retry import PRODUCTION_PROFILE, RetryProfile
from .utils.validation import OptionValidator, TimeoutValidator

logger = logging.getLogger(__name__)


def validate_wait(milestone: str, timeout: float, profile: RetryProfile) -> list[str]:
    """Return validation problems for a wait request, empty when valid.

    The timeout is not checked when the milestone is ``none``.
    """
    problems = []
    ok, reason = OptionValidator(WAIT_STATUS_TYPES).evaluate(milestone)
    if not ok:
        problems.append(f"status is not valid: {reason}")
    if milestone != MILESTONE_NONE:
        ok, reason = TimeoutValidator(profile.minimum_timeout).evaluate(timeout)
        if not ok:
            problems.append(f"timeout is not valid: {reason}")
    return problems


class ConditionWaiter:
    """Wait for a condition on one kind of resource.

    Each call to :meth:`wait` keeps its own deadline; the only shared state
    is the immutable retry profile, so waits may run in parallel threads.
    """

    def __init__(
        self,
        store: ObjectStore,
        kind: str,
        profile: RetryProfile = PRODUCTION_PROFILE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.kind = kind
        self.profile = profile
        self.clock = clock

    def wait(
        self,
        namespace: str,
        name: str,
        milestone: str,
        timeout: float,
        stop: threading.Event | None = None,
    ) -> None:
        """Block until ``name`` reaches ``milestone``.

        Args:
            namespace: Namespace of the resource
            name: Name of the resource
            milestone: "ready", "configured" or "none"
            timeout: Seconds to wait before giving up
            stop: Optional event that cancels the wait when set

        Raises:
            ValidationError: Unknown milestone or timeout below the floor
            ConditionFailedError: The condition was reported False
            WaitTimeoutError: Deadline passed or the wait was cancelled
            StoreError: Any store failure other than not-found
        """
        if milestone == MILESTONE_NONE:
            return

        problems = validate_wait(milestone, timeout, self.profile)
        if problems:
            raise ValidationError(problems)

        start = self.clock()
        result = "error"
        try:
            with trace_span("wait", kind=self.kind,
                            attributes={"resource.name": name, "wait.milestone": milestone}):
                self._poll(namespace, name, milestone, timeout, stop or threading.Event(), start)
            result = "success"
            log_resource_event(
                logger, self.kind, name, namespace,
                event="wait", reason=EVENT_REASON_WAIT_SUCCEEDED,
                message=f"{self.kind} is {milestone}",
            )
        except ConditionFailedError as e:
            result = "failed"
            log_resource_event(
                logger, self.kind, name, namespace,
                event="wait", reason=EVENT_REASON_WAIT_FAILED, message=str(e),
                level=logging.WARNING,
            )
            raise
        except WaitTimeoutError as e:
            result = "cancelled" if e.cancelled else "timeout"
            log_resource_event(
                logger, self.kind, name, namespace,
                event="wait", reason=EVENT_REASON_WAIT_TIMEOUT, message=str(e),
                level=logging.WARNING,
            )
            raise
        finally:
            metrics.wait_total.labels(kind=self.kind, milestone=milestone, result=result).inc()
            metrics.wait_duration_seconds.labels(kind=self.kind, milestone=milestone).observe(
                self.clock() - start
            )

    def _poll(
        self,
        namespace: str,
        name: str,
        milestone: str,
        timeout: float,
        stop: threading.Event,
        start: float,
    ) -> None:
        condition_type = condition_type_for(milestone)
        deadline = start + timeout
        last_state = f"{condition_type} condition never observed"
        not_found = False

        while True:
            try:
                resource = ManagedResource.from_dict(self.store.get(self.kind, namespace, name))
            except NotFoundError as e:
                # The object may not have been created yet
                not_found = True
                last_state = str(e)
            else:
                not_found = False
                condition = latest_condition(resource.conditions, condition_type)
                if condition is None:
                    last_state = f"{condition_type} condition never observed"
                elif is_stale(condition, resource.generation):
                    last_state = (
                        f"{describe_condition(condition)} for generation "
                        f"{condition.observed_generation}, current generation is {resource.generation}"
                    )
                elif condition.status == STATUS_TRUE:
                    return
                elif condition.status == STATUS_FALSE:
                    raise ConditionFailedError(
                        self.kind, name, milestone, condition.reason, condition.message
                    )
                else:
                    last_state = describe_condition(condition)

            remaining = deadline - self.clock()
            if remaining <= 0:
                raise WaitTimeoutError(
                    self.kind, name, milestone, self.clock() - start, last_state,
                    not_found=not_found,
                )
            if stop.wait(min(self.profile.poll_interval, remaining)):
                raise WaitTimeoutError(
                    self.kind, name, milestone, self.clock() - start, last_state,
                    not_found=not_found, cancelled=True,
                )
