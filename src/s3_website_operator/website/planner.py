"""Validation of desired state and planning against actual state."""

from __future__ import annotations

from typing import Any

from .errors import (
    IncompleteAttributeGroup,
    InvalidAttributeValue,
    MutuallyExclusiveAttributes,
)
from .identifier import ID_DELIMITER, ResourceIdentifier
from .models import (
    PROTOCOLS,
    AttributeDiff,
    DesiredConfiguration,
    PlanAction,
    ReconciliationPlan,
    WebsiteConfiguration,
)
from .normalizer import normalize_serialized_rules, normalize_structured_rules


def identifier_for(desired: DesiredConfiguration) -> ResourceIdentifier:
    """Identifier addressed by a desired configuration."""
    return ResourceIdentifier(desired.bucket, desired.expected_bucket_owner or "")


def validate(desired: DesiredConfiguration) -> None:
    """Reject desired state the remote service cannot hold.

    Raises:
        MutuallyExclusiveAttributes: redirectAllRequestsTo combined with any
            other attribute, or routing rules declared in both forms
        IncompleteAttributeGroup: nothing declared, a rule without a redirect,
            or redirectAllRequestsTo without a host name
        InvalidAttributeValue: blank bucket, bad protocol, or unparsable rules
    """
    if not desired.bucket or not desired.bucket.strip():
        raise InvalidAttributeValue("bucket is required")
    if ID_DELIMITER in desired.bucket:
        raise InvalidAttributeValue(f"bucket name must not contain {ID_DELIMITER!r}")

    if desired.routing_rule is not None and desired.routing_rules is not None:
        raise MutuallyExclusiveAttributes("only one of routingRule or routingRules can be set")

    redirect_all = desired.redirect_all_requests_to
    if redirect_all is not None:
        conflicting = [
            name
            for name, value in (
                ("indexDocument", desired.index_document),
                ("errorDocument", desired.error_document),
                ("routingRules", desired.routing_rule if desired.routing_rule is not None else desired.routing_rules),
            )
            if value is not None
        ]
        if conflicting:
            raise MutuallyExclusiveAttributes(
                f"redirectAllRequestsTo cannot be combined with {', '.join(conflicting)}"
            )
        if not redirect_all.host_name:
            raise IncompleteAttributeGroup("redirectAllRequestsTo.hostName is required")
        _check_protocol(redirect_all.protocol, "redirectAllRequestsTo.protocol")
    elif desired.index_document is None and desired.error_document is None and not desired.declares_rules():
        raise IncompleteAttributeGroup(
            "one of indexDocument, errorDocument, redirectAllRequestsTo or routing rules must be set"
        )

    for index, rule in enumerate(_rules_of(desired) or ()):
        _check_protocol(rule.redirect.protocol, f"routing rule {index} redirect.protocol")


def canonicalize(desired: DesiredConfiguration | WebsiteConfiguration) -> WebsiteConfiguration:
    """Validated desired state in canonical form.

    An empty rule list has the same canonical form as no rules at all.
    """
    if isinstance(desired, WebsiteConfiguration):
        return desired

    validate(desired)
    return WebsiteConfiguration(
        index_document=desired.index_document,
        error_document=desired.error_document,
        redirect_all_requests_to=desired.redirect_all_requests_to,
        routing_rules=_rules_of(desired) or None,
    )


def diff(desired: WebsiteConfiguration, actual: WebsiteConfiguration) -> dict[str, AttributeDiff]:
    """Per-attribute differences; routing rules compare as one ordered whole."""
    actual_attributes = actual.attributes()
    return {
        name: AttributeDiff(before=actual_attributes[name], after=value)
        for name, value in desired.attributes().items()
        if actual_attributes[name] != value
    }


def plan(
    desired: DesiredConfiguration | WebsiteConfiguration,
    actual: WebsiteConfiguration | None,
    identifier: ResourceIdentifier | None = None,
) -> ReconciliationPlan:
    """Decide what to do to move actual state to desired state."""
    if identifier is None and isinstance(desired, DesiredConfiguration):
        identifier = identifier_for(desired)
    configuration = canonicalize(desired)

    if actual is None:
        return ReconciliationPlan(
            action=PlanAction.CREATE,
            identifier=identifier,
            attribute_diffs=diff(configuration, WebsiteConfiguration()),
            configuration=configuration,
        )

    attribute_diffs = diff(configuration, actual)
    action = PlanAction.UPDATE if attribute_diffs else PlanAction.NOOP
    return ReconciliationPlan(
        action=action,
        identifier=identifier,
        attribute_diffs=attribute_diffs,
        configuration=configuration,
    )


def plan_destroy(identifier: ResourceIdentifier) -> ReconciliationPlan:
    """Plan removal of the configuration for an identifier."""
    return ReconciliationPlan(action=PlanAction.DESTROY, identifier=identifier)


def _rules_of(desired: DesiredConfiguration) -> tuple[Any, ...] | None:
    if desired.routing_rule is not None:
        return normalize_structured_rules(desired.routing_rule)
    if desired.routing_rules is not None:
        return normalize_serialized_rules(desired.routing_rules)
    return None


def _check_protocol(protocol: str | None, where: str) -> None:
    if protocol is not None and protocol not in PROTOCOLS:
        raise InvalidAttributeValue(f"{where} must be one of {', '.join(PROTOCOLS)}, got {protocol!r}")
