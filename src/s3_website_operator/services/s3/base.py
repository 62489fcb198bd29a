"""Base S3 website service interface."""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol


class BucketClass(str, Enum):
    """Storage class of a bucket as far as website hosting is concerned."""

    GENERAL_PURPOSE = "general_purpose"
    DIRECTORY = "directory"

    @property
    def supports_website(self) -> bool:
        return self is BucketClass.GENERAL_PURPOSE


class WebsiteService(Protocol):
    """Protocol defining the remote operations the reconciliation engine needs."""

    def get_bucket_website(self, bucket: str, expected_bucket_owner: str = "") -> dict[str, Any] | None:
        """Get the bucket website configuration document.

        Returns:
            The configuration document, or None if the bucket has none
        """
        ...

    def put_bucket_website(self, bucket: str, document: dict[str, Any], expected_bucket_owner: str = "") -> None:
        """Replace the whole bucket website configuration."""
        ...

    def delete_bucket_website(self, bucket: str, expected_bucket_owner: str = "") -> None:
        """Remove the bucket website configuration, leaving the bucket untouched."""
        ...

    def get_bucket_class(self, bucket: str, expected_bucket_owner: str = "") -> BucketClass:
        """Get the class of the bucket."""
        ...

    def get_bucket_region(self, bucket: str, expected_bucket_owner: str = "") -> str | None:
        """Get the region the bucket lives in."""
        ...
