"""Error taxonomy for bucket website reconciliation."""

from __future__ import annotations

from typing import Any


class WebsiteError(Exception):
    """Base class for all reconciliation errors.

    Every error carries the serialized identifier and the lifecycle action it
    was raised for, so operators can correlate a failure with the resource and
    the step that produced it.
    """

    retryable = False

    def __init__(self, message: str, identifier: str | None = None, action: str | None = None):
        super().__init__(message)
        self.message = message
        self.identifier = identifier
        self.action = action

    def with_context(self, identifier: Any = None, action: str | None = None) -> WebsiteError:
        """Attach identifier and action if not already set."""
        if self.identifier is None and identifier is not None:
            self.identifier = str(identifier)
        if self.action is None and action is not None:
            self.action = action
        return self

    def __str__(self) -> str:
        parts = []
        if self.action:
            parts.append(f"action={self.action}")
        if self.identifier:
            parts.append(f"id={self.identifier}")
        if not parts:
            return self.message
        return f"{self.message} ({', '.join(parts)})"


class MalformedIdentifier(WebsiteError):
    """Serialized identifier cannot be decoded."""


class NotFound(WebsiteError):
    """No website configuration exists for the identifier."""


class BucketNotFound(WebsiteError):
    """The bucket addressed by the identifier does not exist."""


class UnsupportedTarget(WebsiteError):
    """The bucket class cannot host a website configuration."""


class ValidationError(WebsiteError):
    """Desired state rejected locally, before any remote call."""


class MutuallyExclusiveAttributes(ValidationError):
    """More than one exclusive attribute group is declared."""


class IncompleteAttributeGroup(ValidationError):
    """A required part of an attribute group is missing."""


class InvalidAttributeValue(ValidationError):
    """An attribute holds a value the remote service would reject."""


class ReplacementRequired(ValidationError):
    """Desired state addresses a different identifier than the existing one."""


class DriftAfterApply(WebsiteError):
    """The confirming read after a write does not match the desired state."""

    def __init__(
        self,
        message: str,
        attribute_diffs: dict[str, Any] | None = None,
        identifier: str | None = None,
        action: str | None = None,
    ):
        super().__init__(message, identifier=identifier, action=action)
        self.attribute_diffs = attribute_diffs or {}


class DestroyIncomplete(WebsiteError):
    """The configuration is still readable after a successful delete."""


class TransientError(WebsiteError):
    """Network, throttling or timeout failure; safe to retry with the same plan."""

    retryable = True


class FatalError(WebsiteError):
    """Malformed remote response or violated internal invariant."""


class RemoteServiceError(WebsiteError):
    """Remote failure that does not map onto a more specific kind."""
