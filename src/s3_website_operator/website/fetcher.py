"""Reading the actual website configuration from the remote service."""

from __future__ import annotations

import logging

from ..services.s3.base import BucketClass, WebsiteService
from .errors import FatalError, NotFound, UnsupportedTarget, ValidationError
from .identifier import ResourceIdentifier
from .models import WebsiteConfiguration
from .normalizer import configuration_from_document

logger = logging.getLogger(__name__)

# Directory bucket names always end with this suffix
DIRECTORY_BUCKET_SUFFIX = "--x-s3"


def is_directory_bucket(bucket: str) -> bool:
    """Check whether a bucket name denotes a directory bucket."""
    return bucket.endswith(DIRECTORY_BUCKET_SUFFIX)


class RemoteStateFetcher:
    """Fetch actual state for an identifier. Holds no state between calls."""

    def __init__(self, service: WebsiteService):
        self.service = service

    def ensure_supported(self, identifier: ResourceIdentifier) -> None:
        """Fail if the bucket cannot host a website configuration.

        Raises:
            UnsupportedTarget: If the bucket class does not support websites
            BucketNotFound: If the bucket does not exist
        """
        if is_directory_bucket(identifier.bucket):
            raise UnsupportedTarget(
                f"directory buckets are not supported: {identifier.bucket}",
                identifier=str(identifier),
            )

        bucket_class = self.service.get_bucket_class(identifier.bucket, identifier.expected_bucket_owner)
        if not BucketClass(bucket_class).supports_website:
            raise UnsupportedTarget(
                f"bucket {identifier.bucket} of class {BucketClass(bucket_class).value} does not support website configuration",
                identifier=str(identifier),
            )

    def fetch(self, identifier: ResourceIdentifier, check_target: bool = True) -> WebsiteConfiguration:
        """Fetch the canonical actual configuration.

        Args:
            identifier: Resource to read
            check_target: Verify the bucket class first; callers that already
                did so in the same pass may skip it

        Raises:
            NotFound: If the bucket has no website configuration
            BucketNotFound: If the bucket does not exist
            UnsupportedTarget: If the bucket class does not support websites
            FatalError: If the remote document cannot be parsed
        """
        if check_target:
            self.ensure_supported(identifier)

        document = self.service.get_bucket_website(identifier.bucket, identifier.expected_bucket_owner)
        if document is None:
            raise NotFound(
                f"website configuration for bucket {identifier.bucket} not found",
                identifier=str(identifier),
            )

        logger.debug(f"Fetched website configuration for {identifier}: {document}")
        try:
            return configuration_from_document(document)
        except (ValidationError, AttributeError, TypeError) as e:
            raise FatalError(
                f"malformed website configuration returned for bucket {identifier.bucket}: {e}",
                identifier=str(identifier),
            ) from e
