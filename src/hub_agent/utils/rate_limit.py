"""Rate limiting utilities for Kubernetes API calls."""

from __future__ import annotations

import os
import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from .. import metrics

_F = TypeVar("_F", bound=Callable[..., Any])

# Rate limit configuration
_K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))

# Reconcilers run their passes in worker threads
_k8s_lock = threading.Lock()
_k8s_last_call_time: float = 0.0


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API writes.

    Spaces calls at least 1/K8S_RATE_LIMIT_PER_SECOND seconds apart across
    every reconciler of the process.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _k8s_last_call_time
        min_interval = 1.0 / _K8S_RATE_LIMIT_PER_SECOND

        with _k8s_lock:
            time_since_last_call = time.monotonic() - _k8s_last_call_time
            if time_since_last_call < min_interval:
                metrics.rate_limit_hits_total.labels(api_type="k8s").inc()
                time.sleep(min_interval - time_since_last_call)
            _k8s_last_call_time = time.monotonic()

        return func(*args, **kwargs)

    return wrapper  # type: ignore
