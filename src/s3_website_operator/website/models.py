"""Models for bucket website configuration."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

# Regions whose website endpoint uses "s3-website-<region>" rather than "s3-website.<region>"
_LEGACY_WEBSITE_REGIONS = frozenset({
    "ap-northeast-1",
    "ap-southeast-1",
    "ap-southeast-2",
    "eu-west-1",
    "sa-east-1",
    "us-east-1",
    "us-gov-west-1",
    "us-west-1",
    "us-west-2",
})

PROTOCOLS = ("http", "https")


@dataclass(frozen=True)
class IndexDocument:
    """Suffix appended to requests for a directory."""

    suffix: str

    def to_document(self) -> dict[str, Any]:
        return {"Suffix": self.suffix}


@dataclass(frozen=True)
class ErrorDocument:
    """Object key returned when a 4XX error occurs."""

    key: str

    def to_document(self) -> dict[str, Any]:
        return {"Key": self.key}


@dataclass(frozen=True)
class RedirectAllRequestsTo:
    """Redirect every request to another host."""

    host_name: str
    protocol: str | None = None

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {"HostName": self.host_name}
        if self.protocol is not None:
            document["Protocol"] = self.protocol
        return document


@dataclass(frozen=True)
class Condition:
    """Condition that must match for a routing rule's redirect to apply."""

    key_prefix_equals: str | None = None
    http_error_code_returned_equals: str | None = None

    def is_empty(self) -> bool:
        return self.key_prefix_equals is None and self.http_error_code_returned_equals is None

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {}
        if self.http_error_code_returned_equals is not None:
            document["HttpErrorCodeReturnedEquals"] = self.http_error_code_returned_equals
        if self.key_prefix_equals is not None:
            document["KeyPrefixEquals"] = self.key_prefix_equals
        return document


@dataclass(frozen=True)
class Redirect:
    """Where a matching request is redirected to."""

    host_name: str | None = None
    http_redirect_code: str | None = None
    protocol: str | None = None
    replace_key_prefix_with: str | None = None
    replace_key_with: str | None = None

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {}
        if self.host_name is not None:
            document["HostName"] = self.host_name
        if self.http_redirect_code is not None:
            document["HttpRedirectCode"] = self.http_redirect_code
        if self.protocol is not None:
            document["Protocol"] = self.protocol
        if self.replace_key_prefix_with is not None:
            document["ReplaceKeyPrefixWith"] = self.replace_key_prefix_with
        if self.replace_key_with is not None:
            document["ReplaceKeyWith"] = self.replace_key_with
        return document


@dataclass(frozen=True)
class RoutingRule:
    """A single routing rule. Rules are evaluated top-down by the remote service."""

    redirect: Redirect
    condition: Condition | None = None

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {}
        if self.condition is not None:
            document["Condition"] = self.condition.to_document()
        document["Redirect"] = self.redirect.to_document()
        return document


@dataclass(frozen=True)
class WebsiteConfiguration:
    """Website configuration in canonical form.

    Used both for the actual state read back from the remote service and for
    the desired state once it has been validated and normalized. Two values
    compare equal exactly when the remote service would treat them the same.
    """

    index_document: IndexDocument | None = None
    error_document: ErrorDocument | None = None
    redirect_all_requests_to: RedirectAllRequestsTo | None = None
    routing_rules: tuple[RoutingRule, ...] | None = None

    def attributes(self) -> dict[str, Any]:
        """Top-level attributes keyed by name, in declaration order."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def is_empty(self) -> bool:
        return all(value is None for value in self.attributes().values())

    def to_document(self) -> dict[str, Any]:
        """Render as the document accepted by PutBucketWebsite."""
        document: dict[str, Any] = {}
        if self.index_document is not None:
            document["IndexDocument"] = self.index_document.to_document()
        if self.error_document is not None:
            document["ErrorDocument"] = self.error_document.to_document()
        if self.redirect_all_requests_to is not None:
            document["RedirectAllRequestsTo"] = self.redirect_all_requests_to.to_document()
        if self.routing_rules:
            document["RoutingRules"] = [rule.to_document() for rule in self.routing_rules]
        return document


@dataclass(frozen=True)
class DesiredConfiguration:
    """User-declared website configuration for one bucket.

    Routing rules can be declared in either of two shapes: ``routing_rule`` is
    the structured form (a list of ``condition``/``redirect`` mappings) and
    ``routing_rules`` is the serialized form (a JSON array, or its decoded
    list, using the remote service's PascalCase field names). At most one of
    them may be set.
    """

    bucket: str
    expected_bucket_owner: str = ""
    index_document: IndexDocument | None = None
    error_document: ErrorDocument | None = None
    redirect_all_requests_to: RedirectAllRequestsTo | None = None
    routing_rule: tuple[Any, ...] | None = None
    routing_rules: Any = None

    def declares_rules(self) -> bool:
        return self.routing_rule is not None or self.routing_rules is not None


class PlanAction(str, Enum):
    """Action a reconciliation pass has to take."""

    NOOP = "NoOp"
    CREATE = "Create"
    UPDATE = "Update"
    DESTROY = "Destroy"


@dataclass(frozen=True)
class AttributeDiff:
    """Before/after values of one top-level attribute."""

    before: Any
    after: Any


@dataclass(frozen=True)
class ReconciliationPlan:
    """Outcome of comparing desired and actual state."""

    action: PlanAction
    identifier: Any = None
    attribute_diffs: dict[str, AttributeDiff] = field(default_factory=dict)
    configuration: WebsiteConfiguration | None = None

    @property
    def changed_attributes(self) -> list[str]:
        return list(self.attribute_diffs)


def website_domain(region: str) -> str:
    """Return the website domain for buckets in a region."""
    if region in _LEGACY_WEBSITE_REGIONS:
        return f"s3-website-{region}.amazonaws.com"
    return f"s3-website.{region}.amazonaws.com"


def website_endpoint(bucket: str, region: str) -> str:
    """Return the website endpoint hostname for a bucket."""
    return f"{bucket}.{website_domain(region)}"
