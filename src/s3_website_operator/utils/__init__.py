"""Utility functions for the S3 Website Operator."""

from .cache import (
    get_cached_object,
    invalidate_cache,
    make_cache_key,
    set_cached_object,
)
from .conditions import (
    clear_condition,
    get_condition,
    set_apply_failed_condition,
    set_drift_detected_condition,
    set_provider_not_ready_condition,
    set_ready_condition,
    set_unsupported_target_condition,
    update_condition,
)
from .events import emit_event
from .rate_limit import handle_rate_limit_error, rate_limit_k8s, rate_limit_s3
from .secrets import get_secret_value, get_secret_values

__all__ = [
    "update_condition",
    "clear_condition",
    "get_condition",
    "set_ready_condition",
    "set_provider_not_ready_condition",
    "set_apply_failed_condition",
    "set_drift_detected_condition",
    "set_unsupported_target_condition",
    "emit_event",
    "get_secret_value",
    "get_secret_values",
    "get_cached_object",
    "set_cached_object",
    "invalidate_cache",
    "make_cache_key",
    "rate_limit_k8s",
    "rate_limit_s3",
    "handle_rate_limit_error",
]
