"""Reconciliation engine for bucket website configurations."""

from .controller import LifecycleState, WebsiteController
from .errors import (
    BucketNotFound,
    DestroyIncomplete,
    DriftAfterApply,
    FatalError,
    IncompleteAttributeGroup,
    InvalidAttributeValue,
    MalformedIdentifier,
    MutuallyExclusiveAttributes,
    NotFound,
    RemoteServiceError,
    ReplacementRequired,
    TransientError,
    UnsupportedTarget,
    ValidationError,
    WebsiteError,
)
from .fetcher import RemoteStateFetcher
from .identifier import ResourceIdentifier, decode, encode
from .models import (
    AttributeDiff,
    Condition,
    DesiredConfiguration,
    ErrorDocument,
    IndexDocument,
    PlanAction,
    ReconciliationPlan,
    Redirect,
    RedirectAllRequestsTo,
    RoutingRule,
    WebsiteConfiguration,
    website_domain,
    website_endpoint,
)
from .normalizer import normalize_rules, serialize_rules
from .planner import canonicalize, plan, plan_destroy, validate

__all__ = [
    "WebsiteController",
    "LifecycleState",
    "RemoteStateFetcher",
    "ResourceIdentifier",
    "encode",
    "decode",
    "normalize_rules",
    "serialize_rules",
    "validate",
    "canonicalize",
    "plan",
    "plan_destroy",
    "AttributeDiff",
    "Condition",
    "DesiredConfiguration",
    "ErrorDocument",
    "IndexDocument",
    "PlanAction",
    "ReconciliationPlan",
    "Redirect",
    "RedirectAllRequestsTo",
    "RoutingRule",
    "WebsiteConfiguration",
    "website_domain",
    "website_endpoint",
    "WebsiteError",
    "MalformedIdentifier",
    "NotFound",
    "BucketNotFound",
    "UnsupportedTarget",
    "ValidationError",
    "MutuallyExclusiveAttributes",
    "IncompleteAttributeGroup",
    "InvalidAttributeValue",
    "ReplacementRequired",
    "DriftAfterApply",
    "DestroyIncomplete",
    "TransientError",
    "FatalError",
    "RemoteServiceError",
]
