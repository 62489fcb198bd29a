"""Base handler class shared by the operator's resource handlers."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import kopf

from .. import metrics
from ..constants import FINALIZER
from ..logging import log_resource_event
from ..utils.conditions import set_provider_not_ready_condition, set_ready_condition
from ..utils.errors import sanitize_exception
from ..utils.events import emit_reconcile_failed, emit_reconcile_started, emit_validate_failed

CONTROLLER_NAME = "s3-website-operator"

ConditionFn = Callable[[list[dict[str, Any]], str], list[dict[str, Any]]]


class BaseHandler:
    """Logging, status and failure reporting common to resource handlers."""

    def __init__(self, kind: str):
        """Initialize base handler.

        Args:
            kind: The Kubernetes resource kind (e.g., "BucketWebsite")
        """
        self.kind = kind
        self.logger = logging.getLogger(__name__)

    def _log(
        self,
        level: int,
        meta: dict[str, Any],
        message: str,
        event: str,
        reason: str,
        **kwargs: Any,
    ) -> None:
        log_resource_event(
            self.logger,
            controller=CONTROLLER_NAME,
            resource_kind=self.kind,
            resource_name=meta.get("name", "unknown"),
            namespace=meta.get("namespace", "default"),
            uid=meta.get("uid", "unknown"),
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_info(self, meta: dict[str, Any], message: str, event: str = "info", reason: str = "Info", **kwargs: Any) -> None:
        """Log an info-level structured message about the resource."""
        self._log(logging.INFO, meta, message, event, reason, **kwargs)

    def log_warning(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        self._log(logging.WARNING, meta, message, event, reason, **kwargs)

    def log_error(
        self,
        meta: dict[str, Any],
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            error: Exception to describe, sanitized before it is logged
            event: Event type
            reason: Reason for the event
            **kwargs: Additional fields to include in the log
        """
        fields = dict(kwargs)
        if error is not None:
            fields["error"] = sanitize_exception(error)
            fields["error_type"] = type(error).__name__
            # Reconciliation errors carry the identifier and lifecycle step
            for attr in ("identifier", "action"):
                value = getattr(error, attr, None)
                if value is not None:
                    fields.setdefault(attr, value)
        self._log(logging.ERROR, meta, message, event, reason, **fields)

    def _mark_not_ready(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        message: str,
        condition_fn: ConditionFn | None = None,
    ) -> None:
        """Record a failed pass: failure condition, Ready=False and a counted failure."""
        conditions = list(status.get("conditions", []))
        if condition_fn is not None:
            conditions = condition_fn(conditions, message)
        conditions = set_ready_condition(conditions, False, message)
        metrics.reconcile_total.labels(kind=self.kind, result="failed").inc()
        patch.status.update({
            "conditions": conditions,
            "observedGeneration": meta.get("generation", 0),
        })

    def _block_on_provider(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        message: str,
        delay: float,
    ) -> None:
        emit_reconcile_failed(meta, message)
        self._mark_not_ready(meta, status, patch, message, set_provider_not_ready_condition)
        raise kopf.TemporaryError(message, delay=delay)

    def handle_provider_not_found(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        provider_name: str,
        provider_ns: str,
        error_msg: str,
    ) -> None:
        """Report a missing Provider.

        Raises:
            kopf.TemporaryError: Always, the Provider may be created later
        """
        self.log_error(meta, error_msg, reason="ProviderNotFound", provider=provider_name, provider_namespace=provider_ns)
        self._block_on_provider(meta, status, patch, error_msg, delay=60)

    def handle_provider_not_ready(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        provider_name: str,
        error_msg: str,
    ) -> None:
        """Report a Provider that exists but cannot be used yet.

        Raises:
            kopf.TemporaryError: Always
        """
        self.log_warning(meta, error_msg, reason="ProviderNotReady", provider=provider_name)
        self._block_on_provider(meta, status, patch, error_msg, delay=30)

    def handle_validation_error(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        error_msg: str,
        condition_fn: ConditionFn | None = None,
    ) -> None:
        """Report a resource that cannot be reconciled as declared.

        Only a change to the resource can fix it, so kopf stops retrying.

        Raises:
            kopf.PermanentError: Always
        """
        self.log_error(meta, error_msg, reason="ValidationFailed")
        emit_validate_failed(meta, error_msg)
        metrics.error_total.labels(kind=self.kind, error_type="ValidationError").inc()
        self._mark_not_ready(meta, status, patch, error_msg, condition_fn)
        raise kopf.PermanentError(error_msg)

    def handle_reconciliation_error(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        error: Exception,
        condition_fn: ConditionFn | None = None,
        condition_msg: str | None = None,
    ) -> None:
        """Record a failed reconciliation on the resource without raising.

        Args:
            meta: Kubernetes resource metadata
            status: Resource status
            patch: Kopf patch object
            error: Exception that occurred
            condition_fn: Sets the failure condition, applied only with condition_msg
            condition_msg: Message for the failure and Ready conditions
        """
        sanitized_error = sanitize_exception(error)
        self.log_error(meta, f"Reconciliation failed: {sanitized_error}", error=error, reason="ReconciliationFailed")
        emit_reconcile_failed(meta, f"Reconciliation failed: {sanitized_error}")
        metrics.error_total.labels(kind=self.kind, error_type=type(error).__name__).inc()
        if condition_msg is None:
            condition_fn = None
        self._mark_not_ready(meta, status, patch, condition_msg or sanitized_error, condition_fn)

    def ensure_finalizer(self, meta: dict[str, Any], patch: kopf.Patch) -> None:
        finalizers = list(meta.get("finalizers", []))
        if FINALIZER not in finalizers:
            patch.metadata["finalizers"] = [*finalizers, FINALIZER]

    def remove_finalizer(self, meta: dict[str, Any], patch: kopf.Patch) -> None:
        """Remove our finalizer; an emptied list is patched to None."""
        finalizers = list(meta.get("finalizers", []))
        if FINALIZER in finalizers:
            finalizers.remove(FINALIZER)
            patch.metadata["finalizers"] = finalizers or None

    def reconcile_with_metrics(self, meta: dict[str, Any], reconcile_fn: Callable[[], None]) -> None:
        """Run one reconciliation pass with events, metrics and error reporting.

        kopf errors raised by reconcile_fn have already been reported and pass
        through untouched; anything else is reported here and re-raised so kopf
        retries with its default backoff.
        """
        emit_reconcile_started(meta)
        metrics.reconcile_total.labels(kind=self.kind, result="started").inc()

        start_time = time.time()
        try:
            reconcile_fn()
            metrics.reconcile_total.labels(kind=self.kind, result="success").inc()
        except (kopf.PermanentError, kopf.TemporaryError):
            raise
        except Exception as e:
            metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__).inc()
            self.log_error(meta, "Reconciliation failed", error=e, reason="ReconciliationFailed")
            emit_reconcile_failed(meta, f"Reconciliation failed: {sanitize_exception(e)}")
            metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
            raise
        finally:
            metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(time.time() - start_time)

    def update_resource_status(
        self,
        patch: kopf.Patch,
        meta: dict[str, Any],
        ready: bool,
        status_data: dict[str, Any] | None = None,
    ) -> None:
        """Patch status with the observed generation and the given fields."""
        metrics.resource_status_total.labels(kind=self.kind, status="ready" if ready else "not_ready").inc()
        patch.status.update({
            "observedGeneration": meta.get("generation", 0),
            **(status_data or {}),
        })
