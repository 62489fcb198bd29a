"""Status condition helpers for BucketWebsite resources.

Conditions are never mutated in place: every helper returns a new list so
the caller can compare it against the status it read.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import (
    COND_APPLY_FAILED,
    COND_DRIFT_DETECTED,
    COND_PROVIDER_NOT_READY,
    COND_READY,
    COND_UNSUPPORTED_TARGET,
)

Conditions = list[dict[str, Any]]


def update_condition(
    conditions: Conditions,
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> Conditions:
    """Set a condition, keeping the others in their original order.

    Args:
        conditions: Existing conditions
        condition_type: Type of condition
        status: "True", "False" or "Unknown"
        reason: CamelCase reason
        message: Human-readable message
        observed_generation: Generation the condition describes

    Returns:
        New list of conditions. lastTransitionTime only moves when the
        status of the condition changes.
    """
    previous = next((cond for cond in conditions if cond.get("type") == condition_type), None)
    if previous is not None and previous.get("status") == status and previous.get("lastTransitionTime"):
        transition_time = previous["lastTransitionTime"]
    else:
        transition_time = datetime.now(timezone.utc).isoformat()

    condition: dict[str, Any] = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": transition_time,
    }
    if observed_generation is not None:
        condition["observedGeneration"] = observed_generation

    if previous is None:
        return [*conditions, condition]
    return [condition if cond is previous else cond for cond in conditions]


def clear_condition(conditions: Conditions, condition_type: str) -> Conditions:
    """Drop a condition type from the list if present."""
    return [cond for cond in conditions if cond.get("type") != condition_type]


def get_condition(conditions: Conditions, condition_type: str) -> dict[str, Any] | None:
    return next((cond for cond in conditions if cond.get("type") == condition_type), None)


def set_ready_condition(
    conditions: Conditions,
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> Conditions:
    return update_condition(
        conditions,
        COND_READY,
        "True" if status else "False",
        "Ready" if status else "NotReady",
        message,
        observed_generation,
    )


def _set_failure(condition_type: str):
    # Failure conditions are only ever present as "True"; success clears them
    def setter(conditions: Conditions, message: str, observed_generation: int | None = None) -> Conditions:
        return update_condition(conditions, condition_type, "True", condition_type, message, observed_generation)

    setter.__name__ = f"set_{condition_type}_condition"
    setter.__doc__ = f"Set the {condition_type} condition."
    return setter


set_provider_not_ready_condition = _set_failure(COND_PROVIDER_NOT_READY)
set_apply_failed_condition = _set_failure(COND_APPLY_FAILED)
set_unsupported_target_condition = _set_failure(COND_UNSUPPORTED_TARGET)


def set_drift_detected_condition(
    conditions: Conditions,
    attributes: list[str],
    observed_generation: int | None = None,
) -> Conditions:
    """Set the DriftDetected condition naming the drifted attributes."""
    return update_condition(
        conditions,
        COND_DRIFT_DETECTED,
        "True",
        COND_DRIFT_DETECTED,
        f"Remote configuration drifted on: {', '.join(sorted(attributes))}",
        observed_generation,
    )
