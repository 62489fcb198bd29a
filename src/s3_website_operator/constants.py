"""Constants for the S3 Website Operator."""

# API Group
API_GROUP = "s3.cloud37.dev"
API_GROUP_VERSION = f"{API_GROUP}/v1alpha1"

# Resource Kinds
KIND_PROVIDER = "Provider"
KIND_BUCKET_WEBSITE = "BucketWebsite"

# Plurals
PLURAL_PROVIDERS = "providers"

# Annotations
ANNOTATION_IMPORTED_ID = f"{API_GROUP}/imported-id"

# Finalizers
FINALIZER = f"{API_GROUP}/website-finalizer"

# Deletion policies
DELETION_POLICY_DELETE = "Delete"
DELETION_POLICY_RETAIN = "Retain"

# Condition Types
COND_READY = "Ready"
COND_PROVIDER_NOT_READY = "ProviderNotReady"
COND_APPLY_FAILED = "ApplyFailed"
COND_DRIFT_DETECTED = "DriftDetected"
COND_UNSUPPORTED_TARGET = "UnsupportedTarget"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_VALIDATE_SUCCEEDED = "ValidateSucceeded"
EVENT_REASON_VALIDATE_FAILED = "ValidateFailed"
EVENT_REASON_WEBSITE_CREATED = "WebsiteCreated"
EVENT_REASON_WEBSITE_UPDATED = "WebsiteUpdated"
EVENT_REASON_WEBSITE_DELETED = "WebsiteDeleted"
EVENT_REASON_WEBSITE_IMPORTED = "WebsiteImported"
EVENT_REASON_DRIFT_DETECTED = "DriftDetected"
