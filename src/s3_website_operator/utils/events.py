"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_DRIFT_DETECTED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_VALIDATE_FAILED,
    EVENT_REASON_VALIDATE_SUCCEEDED,
    EVENT_REASON_WEBSITE_CREATED,
    EVENT_REASON_WEBSITE_DELETED,
    EVENT_REASON_WEBSITE_IMPORTED,
    EVENT_REASON_WEBSITE_UPDATED,
)


def emit_event(
    meta: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        meta: Resource metadata
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        meta,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(meta: dict[str, Any]) -> None:
    """Emit reconcile started event."""
    emit_event(meta, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(meta: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(meta, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_validate_succeeded(meta: dict[str, Any]) -> None:
    """Emit validation succeeded event."""
    emit_event(meta, EVENT_REASON_VALIDATE_SUCCEEDED, "Validation succeeded")


def emit_validate_failed(meta: dict[str, Any], message: str) -> None:
    """Emit validation failed event."""
    emit_event(meta, EVENT_REASON_VALIDATE_FAILED, message, type_="Warning")


def emit_website_created(meta: dict[str, Any], identifier: str) -> None:
    emit_event(meta, EVENT_REASON_WEBSITE_CREATED, f"Website configuration {identifier} created")


def emit_website_updated(meta: dict[str, Any], identifier: str, attributes: list[str]) -> None:
    changed = ", ".join(sorted(attributes))
    emit_event(
        meta,
        EVENT_REASON_WEBSITE_UPDATED,
        f"Website configuration {identifier} updated ({changed})",
    )


def emit_website_deleted(meta: dict[str, Any], identifier: str) -> None:
    emit_event(meta, EVENT_REASON_WEBSITE_DELETED, f"Website configuration {identifier} deleted")


def emit_website_imported(meta: dict[str, Any], identifier: str) -> None:
    emit_event(meta, EVENT_REASON_WEBSITE_IMPORTED, f"Website configuration {identifier} imported")


def emit_drift_detected(meta: dict[str, Any], attributes: list[str]) -> None:
    """Emit a warning for attributes changed outside the operator."""
    emit_event(
        meta,
        EVENT_REASON_DRIFT_DETECTED,
        f"Drift detected on: {', '.join(sorted(attributes))}",
        type_="Warning",
    )
