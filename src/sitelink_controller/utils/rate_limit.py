"""Rate limiting for Kubernetes API calls."""

from __future__ import annotations

import os
import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from .. import metrics

_F = TypeVar("_F", bound=Callable[..., Any])

_K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))

_k8s_last_call_time: float = 0.0
_lock = threading.Lock()


def rate_limit_k8s(func: _F) -> _F:
    """Decorator enforcing a minimum interval between Kubernetes API calls.

    The limiter is process-wide and shared by every thread.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _k8s_last_call_time
        min_interval = 1.0 / _K8S_RATE_LIMIT_PER_SECOND
        with _lock:
            current_time = time.time()
            time_since_last_call = current_time - _k8s_last_call_time
            if time_since_last_call < min_interval:
                metrics.rate_limit_hits_total.labels(api_type="k8s").inc()
                time.sleep(min_interval - time_since_last_call)
            _k8s_last_call_time = time.time()
        return func(*args, **kwargs)

    return wrapper  # type: ignore
