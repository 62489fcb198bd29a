"""Builder for desired website configurations."""

from __future__ import annotations

from typing import Any

from ..website.models import DesiredConfiguration, ErrorDocument, IndexDocument, RedirectAllRequestsTo


def create_desired_from_spec(spec: dict[str, Any]) -> DesiredConfiguration:
    """Create the desired website configuration from a BucketWebsite CRD spec.

    Routing rules are passed through untouched in whichever form they were
    declared; the planner normalizes and validates them.

    Args:
        spec: BucketWebsite CRD spec

    Returns:
        Desired configuration for the reconciliation engine
    """
    index_document = None
    index_spec = spec.get("indexDocument")
    if index_spec is not None:
        index_document = IndexDocument(suffix=index_spec.get("suffix", ""))

    error_document = None
    error_spec = spec.get("errorDocument")
    if error_spec is not None:
        error_document = ErrorDocument(key=error_spec.get("key", ""))

    redirect_all = None
    redirect_spec = spec.get("redirectAllRequestsTo")
    if redirect_spec is not None:
        redirect_all = RedirectAllRequestsTo(
            host_name=redirect_spec.get("hostName", ""),
            protocol=redirect_spec.get("protocol"),
        )

    routing_rule = spec.get("routingRule")

    return DesiredConfiguration(
        bucket=spec.get("bucket", ""),
        expected_bucket_owner=spec.get("expectedBucketOwner") or "",
        index_document=index_document,
        error_document=error_document,
        redirect_all_requests_to=redirect_all,
        routing_rule=tuple(routing_rule) if routing_rule is not None else None,
        routing_rules=spec.get("routingRules"),
    )
