"""Rate limiting utilities for API calls."""

from __future__ import annotations

import os
import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

_F = TypeVar("_F", bound=Callable[..., Any])

# Rate limit configuration
_K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))
_S3_RATE_LIMIT_PER_SECOND = float(os.getenv("S3_RATE_LIMIT_PER_SECOND", "5.0"))


class _Throttle:
    """Enforce a minimum interval between calls sharing this throttle."""

    def __init__(self, per_second: float) -> None:
        self.min_interval = 1.0 / per_second if per_second > 0 else 0.0
        self.last_call_time = 0.0
        self._lock = threading.Lock()

    def wait(self) -> None:
        with self._lock:
            time_since_last_call = time.monotonic() - self.last_call_time
            if time_since_last_call < self.min_interval:
                time.sleep(self.min_interval - time_since_last_call)
            self.last_call_time = time.monotonic()


_k8s_throttle = _Throttle(_K8S_RATE_LIMIT_PER_SECOND)
_s3_throttle = _Throttle(_S3_RATE_LIMIT_PER_SECOND)


def _throttled(throttle: _Throttle, func: _F) -> _F:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        throttle.wait()
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API calls."""
    return _throttled(_k8s_throttle, func)


def rate_limit_s3(func: _F) -> _F:
    """Decorator to rate limit S3 API calls.

    All S3 calls made by the operator share one throttle, so concurrent
    reconciles of different buckets cannot overwhelm the endpoint.
    """
    return _throttled(_s3_throttle, func)


def handle_rate_limit_error(e: Exception, attempt: int = 0, max_retries: int = 3) -> bool:
    """Check if an API exception is a rate limit error and back off.

    Args:
        e: Exception raised by the Kubernetes client
        attempt: Number of retries already made for this call
        max_retries: Maximum number of retries

    Returns:
        True if the caller should retry, False otherwise
    """
    status = getattr(e, "status", None)
    # Kubernetes API rate limit errors typically return 429 or 503
    if status == 429 or (status == 503 and "rate limit" in str(e).lower()):
        if attempt < max_retries:
            # Exponential backoff: 1s, 2s, 4s
            time.sleep(2**attempt)
            return True
    return False
