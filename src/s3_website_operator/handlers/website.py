"""Handler for BucketWebsite CRD."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Any

import kopf
from botocore.exceptions import ClientError
from kubernetes import client

from .. import metrics
from ..builders.provider import create_provider_from_spec
from ..builders.website import create_desired_from_spec
from ..constants import (
    ANNOTATION_IMPORTED_ID,
    API_GROUP_VERSION,
    COND_APPLY_FAILED,
    COND_DRIFT_DETECTED,
    COND_PROVIDER_NOT_READY,
    COND_UNSUPPORTED_TARGET,
    DELETION_POLICY_DELETE,
    DELETION_POLICY_RETAIN,
    KIND_BUCKET_WEBSITE,
    KIND_PROVIDER,
)
from ..services.aws.client import AWSProvider
from ..tracing import add_span_attribute, trace_span
from ..utils.cache import invalidate_cache, make_cache_key
from ..utils.conditions import (
    clear_condition,
    set_apply_failed_condition,
    set_drift_detected_condition,
    set_ready_condition,
    set_unsupported_target_condition,
)
from ..utils.errors import sanitize_exception
from ..utils.events import (
    emit_drift_detected,
    emit_validate_succeeded,
    emit_website_created,
    emit_website_deleted,
    emit_website_imported,
    emit_website_updated,
)
from ..website import (
    BucketNotFound,
    DesiredConfiguration,
    DestroyIncomplete,
    DriftAfterApply,
    FatalError,
    MalformedIdentifier,
    NotFound,
    PlanAction,
    RemoteServiceError,
    ReplacementRequired,
    ResourceIdentifier,
    TransientError,
    UnsupportedTarget,
    ValidationError,
    WebsiteController,
    WebsiteError,
    canonicalize,
    decode,
    serialize_rules,
    validate,
    website_domain,
    website_endpoint,
)
from ..website.planner import identifier_for
from .base import BaseHandler
from .shared import get_k8s_client, get_provider_with_cache, is_provider_ready

DRIFT_CHECK_INTERVAL_SECONDS = float(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300"))

# Conditions that a successful pass resolves
_FAILURE_CONDITIONS = (
    COND_APPLY_FAILED,
    COND_DRIFT_DETECTED,
    COND_PROVIDER_NOT_READY,
    COND_UNSUPPORTED_TARGET,
)


class BucketWebsiteHandler(BaseHandler):
    """Handler for BucketWebsite resources."""

    def __init__(self):
        """Initialize bucket website handler."""
        super().__init__(KIND_BUCKET_WEBSITE)

    def build_provider(self, spec: dict[str, Any], meta: dict[str, Any]) -> tuple[str, dict[str, Any], AWSProvider]:
        """Look up the referenced Provider and build a client from it.

        Returns:
            Provider name, Provider object and the configured client

        Raises:
            client.exceptions.ApiException: If the Provider cannot be read
            ValueError: If the Provider or its secrets are misconfigured
        """
        provider_ref = spec.get("providerRef") or {}
        provider_name = provider_ref.get("name")
        provider_ns = provider_ref.get("namespace", meta.get("namespace", "default"))

        api = get_k8s_client()
        provider_obj = get_provider_with_cache(api, provider_name, provider_ns)
        provider_client = create_provider_from_spec(provider_obj.get("spec", {}), provider_obj.get("metadata", {}))
        return provider_name, provider_obj, provider_client

    def get_provider_client(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> AWSProvider:
        """Build the provider client, reporting an unusable Provider on the resource."""
        provider_ref = spec.get("providerRef") or {}
        provider_name = provider_ref.get("name", "")
        provider_ns = provider_ref.get("namespace", meta.get("namespace", "default"))

        try:
            _, provider_obj, provider_client = self.build_provider(spec, meta)
        except client.exceptions.ApiException as e:
            invalidate_cache(make_cache_key(KIND_PROVIDER, provider_ns, provider_name))
            if e.status == 404:
                self.handle_provider_not_found(
                    meta,
                    status,
                    patch,
                    provider_name,
                    provider_ns,
                    f"Provider {provider_name} not found in namespace {provider_ns}",
                )
            raise
        except ValueError as e:
            invalidate_cache(make_cache_key(KIND_PROVIDER, provider_ns, provider_name))
            self.handle_provider_not_ready(
                meta,
                status,
                patch,
                provider_name,
                f"Provider {provider_name} is misconfigured: {sanitize_exception(e)}",
            )
            raise

        if not is_provider_ready(provider_obj):
            # Re-read the Provider on retry so a recovery is noticed before the cache expires
            invalidate_cache(make_cache_key(KIND_PROVIDER, provider_ns, provider_name))
            self.handle_provider_not_ready(meta, status, patch, provider_name, f"Provider {provider_name} is not ready")

        return provider_client

    def reconcile(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Reconcile BucketWebsite resource."""
        name = meta.get("name", "unknown")
        bucket = spec.get("bucket")

        with trace_span("reconcile_bucket_website", kind=KIND_BUCKET_WEBSITE, attributes={"website.bucket": bucket or name}):
            provider_ref = spec.get("providerRef") or {}
            if not provider_ref.get("name"):
                self.handle_validation_error(meta, status, patch, "providerRef.name is required")

            desired = create_desired_from_spec(spec)
            try:
                validate(desired)
            except ValidationError as e:
                self.handle_validation_error(meta, status, patch, sanitize_exception(e), set_apply_failed_condition)

            emit_validate_succeeded(meta)

            provider_client = self.get_provider_client(spec, meta, status, patch)
            controller = WebsiteController(provider_client)

            try:
                identifier, action = self._converge(controller, desired, spec, meta, status, patch)
            except WebsiteError as e:
                self.handle_website_error(meta, status, patch, e)
                raise

            add_span_attribute("website.action", action)
            self._update_status(provider_client, identifier, action, desired, meta, status, patch)

    def _converge(
        self,
        controller: WebsiteController,
        desired: DesiredConfiguration,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> tuple[ResourceIdentifier, str]:
        """Drive the remote configuration to the desired state.

        Returns:
            Identifier now managed by this resource and the action taken
        """
        target = identifier_for(desired)
        current = status.get("id")
        imported = False

        import_id = spec.get("importId")
        if not current and import_id:
            identifier, _ = controller.import_(import_id)
            if identifier != target:
                raise ReplacementRequired(
                    f"importId {import_id} addresses {identifier}, but the resource declares {target}",
                    identifier=import_id,
                    action="Import",
                )
            metrics.website_operations_total.labels(operation="import", result="success").inc()
            emit_website_imported(meta, str(identifier))
            self.log_info(meta, f"Imported website configuration {identifier}", reason="WebsiteImported", identifier=str(identifier))
            patch.metadata.annotations[ANNOTATION_IMPORTED_ID] = str(identifier)
            current = str(identifier)
            imported = True

        if current:
            existing = decode(current)
            if existing != target:
                self._replace(controller, existing, target, spec, meta)
                current = None

        if not current:
            identifier = controller.create(desired)
            metrics.plan_actions_total.labels(action=PlanAction.CREATE.value).inc()
            metrics.website_operations_total.labels(operation="create", result="success").inc()
            emit_website_created(meta, str(identifier))
            self.log_info(meta, f"Created website configuration {identifier}", reason="WebsiteCreated", identifier=str(identifier))
            return identifier, PlanAction.CREATE.value

        existing = decode(current)
        reconciliation = controller.update(existing, desired)
        metrics.plan_actions_total.labels(action=reconciliation.action.value).inc()

        if reconciliation.action is PlanAction.NOOP:
            self.log_info(meta, f"Website configuration {existing} is in sync", reason="InSync", identifier=current)
            return existing, PlanAction.NOOP.value

        changed = reconciliation.changed_attributes
        spec_applied = meta.get("generation") == status.get("appliedGeneration")
        if spec_applied and not imported:
            # This generation was applied before, so the remote changed out of band
            self._record_drift(meta, changed, current)

        metrics.website_operations_total.labels(operation="update", result="success").inc()
        emit_website_updated(meta, current, changed)
        self.log_info(
            meta,
            f"Updated website configuration {existing}",
            reason="WebsiteUpdated",
            identifier=current,
            changed_attributes=changed,
        )
        return existing, reconciliation.action.value

    def _replace(
        self,
        controller: WebsiteController,
        existing: ResourceIdentifier,
        target: ResourceIdentifier,
        spec: dict[str, Any],
        meta: dict[str, Any],
    ) -> None:
        """Release the old identifier before the new one is created."""
        deletion_policy = spec.get("deletionPolicy", DELETION_POLICY_DELETE)
        self.log_info(
            meta,
            f"Bucket or expected owner changed ({existing} -> {target}), replacing website configuration",
            reason="Replacement",
            identifier=str(existing),
            deletion_policy=deletion_policy,
        )
        if deletion_policy == DELETION_POLICY_RETAIN:
            return
        controller.delete(existing)
        metrics.website_operations_total.labels(operation="delete", result="success").inc()
        emit_website_deleted(meta, str(existing))

    def _record_drift(self, meta: dict[str, Any], attributes: list[str], identifier: str) -> None:
        for attribute in attributes:
            metrics.drift_detected_total.labels(kind=self.kind, attribute=attribute).inc()
        emit_drift_detected(meta, attributes)
        self.log_warning(
            meta,
            f"Drift detected on website configuration {identifier}",
            reason="DriftDetected",
            identifier=identifier,
            attributes=attributes,
        )

    def _bucket_region(self, provider_client: AWSProvider, identifier: ResourceIdentifier, meta: dict[str, Any]) -> str:
        try:
            region = provider_client.get_bucket_region(identifier.bucket, identifier.expected_bucket_owner)
        except (WebsiteError, ClientError) as e:
            self.log_warning(
                meta,
                f"Could not determine region of bucket {identifier.bucket}, using provider region",
                reason="RegionLookupFailed",
                identifier=str(identifier),
                error=sanitize_exception(e),
            )
            region = None
        return region or provider_client.region

    def _update_status(
        self,
        provider_client: AWSProvider,
        identifier: ResourceIdentifier,
        action: str,
        desired: DesiredConfiguration,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        configuration = canonicalize(desired)
        region = self._bucket_region(provider_client, identifier, meta)

        conditions = list(status.get("conditions", []))
        for condition_type in _FAILURE_CONDITIONS:
            conditions = clear_condition(conditions, condition_type)
        conditions = set_ready_condition(
            conditions,
            True,
            f"Website configuration {identifier} is in sync",
            meta.get("generation"),
        )

        status_data = {
            "id": str(identifier),
            "websiteEndpoint": website_endpoint(identifier.bucket, region),
            "websiteDomain": website_domain(region),
            "routingRules": serialize_rules(configuration.routing_rules),
            "lastAction": action,
            "appliedGeneration": meta.get("generation", 0),
            "lastSyncTime": datetime.now(timezone.utc).isoformat(),
            "conditions": conditions,
        }
        self.update_resource_status(patch, meta, True, status_data)

    def handle_website_error(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        error: WebsiteError,
    ) -> None:
        """Report a reconciliation error and translate it for kopf.

        Raises:
            kopf.PermanentError: For errors retrying cannot fix
            kopf.TemporaryError: For errors that may clear up on their own
        """
        message = sanitize_exception(error)
        operation = (error.action or "reconcile").lower()
        metrics.website_operations_total.labels(operation=operation, result="failed").inc()

        if isinstance(error, (ValidationError, MalformedIdentifier)):
            self.handle_validation_error(meta, status, patch, message, set_apply_failed_condition)

        if isinstance(error, UnsupportedTarget):
            self.handle_validation_error(meta, status, patch, message, set_unsupported_target_condition)

        if isinstance(error, DriftAfterApply):
            attributes = list(error.attribute_diffs) or ["configuration"]
            self._record_drift(meta, attributes, error.identifier or "")
            self.handle_reconciliation_error(
                meta,
                status,
                patch,
                error,
                lambda conditions, _: set_drift_detected_condition(conditions, attributes),
                message,
            )
            raise kopf.TemporaryError(message, delay=60) from error

        self.handle_reconciliation_error(meta, status, patch, error, set_apply_failed_condition, message)

        if isinstance(error, FatalError):
            raise kopf.PermanentError(message) from error
        if isinstance(error, TransientError):
            raise kopf.TemporaryError(message, delay=15) from error
        if isinstance(error, (BucketNotFound, NotFound)):
            raise kopf.TemporaryError(message, delay=60) from error
        raise kopf.TemporaryError(message, delay=120) from error

    def delete(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Handle BucketWebsite resource deletion."""
        serialized = status.get("id")
        deletion_policy = spec.get("deletionPolicy", DELETION_POLICY_DELETE)

        self.log_info(
            meta,
            "BucketWebsite is being deleted",
            event="deletion",
            reason="Deletion",
            identifier=serialized,
            deletion_policy=deletion_policy,
        )

        if not serialized:
            self.log_info(meta, "No website configuration recorded, nothing to delete", reason="NothingToDelete")
            self.remove_finalizer(meta, patch)
            return

        if deletion_policy == DELETION_POLICY_RETAIN:
            self.log_info(
                meta,
                f"Retaining website configuration {serialized} per deletionPolicy=Retain",
                reason="WebsiteRetained",
                identifier=serialized,
            )
            self.remove_finalizer(meta, patch)
            return

        with trace_span("delete_bucket_website", kind=KIND_BUCKET_WEBSITE, attributes={"website.id": serialized}):
            try:
                _, _, provider_client = self.build_provider(spec, meta)
                WebsiteController(provider_client).delete(decode(serialized))
            except (TransientError, DestroyIncomplete) as e:
                metrics.website_operations_total.labels(operation="delete", result="failed").inc()
                self.log_warning(
                    meta,
                    f"Deletion of website configuration {serialized} did not complete, retrying",
                    reason="DeletionRetry",
                    identifier=serialized,
                    error=sanitize_exception(e),
                )
                raise kopf.TemporaryError(sanitize_exception(e), delay=30) from e
            except RemoteServiceError as e:
                metrics.website_operations_total.labels(operation="delete", result="failed").inc()
                self.log_error(
                    meta,
                    f"Failed to delete website configuration {serialized}, keeping finalizer",
                    error=e,
                    reason="DeletionFailed",
                    identifier=serialized,
                )
                raise kopf.TemporaryError(sanitize_exception(e), delay=120) from e
            except (WebsiteError, ClientError, ValueError, client.exceptions.ApiException) as e:
                metrics.website_operations_total.labels(operation="delete", result="failed").inc()
                self.log_error(
                    meta,
                    f"Failed to delete website configuration {serialized}",
                    error=e,
                    reason="DeletionFailed",
                    identifier=serialized,
                )
            else:
                metrics.website_operations_total.labels(operation="delete", result="success").inc()
                emit_website_deleted(meta, serialized)
                self.log_info(meta, f"Deleted website configuration {serialized}", reason="WebsiteDeleted", identifier=serialized)

        self.remove_finalizer(meta, patch)


# Global handler instance
_handler = BucketWebsiteHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_BUCKET_WEBSITE)
@kopf.on.update(API_GROUP_VERSION, KIND_BUCKET_WEBSITE)
@kopf.on.resume(API_GROUP_VERSION, KIND_BUCKET_WEBSITE)
@kopf.timer(API_GROUP_VERSION, KIND_BUCKET_WEBSITE, interval=DRIFT_CHECK_INTERVAL_SECONDS)
def handle_bucket_website(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle BucketWebsite resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_BUCKET_WEBSITE)
def handle_bucket_website_delete(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle BucketWebsite resource deletion."""
    _handler.delete(spec, meta, status, patch)
