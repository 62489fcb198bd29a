"""AWS S3 client implementation."""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Callable

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, ConnectTimeoutError, ReadTimeoutError
from botocore.exceptions import ConnectionError as BotoConnectionError

from ... import metrics
from ...utils.rate_limit import rate_limit_s3
from ...website.errors import BucketNotFound, TransientError, UnsupportedTarget
from ..s3.base import BucketClass

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"NoSuchWebsiteConfiguration"}
BUCKET_NOT_FOUND_CODES = {"NoSuchBucket", "404", "NotFound"}
UNSUPPORTED_TARGET_CODES = {"NotImplemented", "UnsupportedOperation"}
TRANSIENT_CODES = {
    "InternalError",
    "RequestLimitExceeded",
    "RequestTimeout",
    "ServiceUnavailable",
    "SlowDown",
    "Throttling",
    "ThrottlingException",
    "TooManyRequests",
}

# Location types reported by HeadBucket for directory buckets
DIRECTORY_LOCATION_TYPES = {"AvailabilityZone", "LocalZone"}


def error_code(e: ClientError) -> str:
    """Extract the error code from a botocore ClientError."""
    return str(e.response.get("Error", {}).get("Code", ""))


def is_transient(e: Exception) -> bool:
    """Check whether an error may succeed when retried unchanged."""
    if isinstance(e, (BotoConnectionError, ConnectTimeoutError, ReadTimeoutError)):
        return True
    if isinstance(e, ClientError):
        if error_code(e) in TRANSIENT_CODES:
            return True
        status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
        return status == 429 or status >= 500
    return False


def is_unsupported_target(e: ClientError) -> bool:
    """Check whether the error says the bucket cannot host a website."""
    message = str(e.response.get("Error", {}).get("Message", "")).lower()
    return error_code(e) in UNSUPPORTED_TARGET_CODES or "directory bucket" in message


class AWSProvider:
    """AWS S3 provider implementation of the website service."""

    def __init__(
        self,
        endpoint: str,
        region: str,
        access_key: str,
        secret_key: str,
        session_token: str | None = None,
        path_style: bool = True,
        insecure_skip_verify: bool = False,
        connect_timeout: float | None = None,
        read_timeout: float | None = None,
        max_attempts: int | None = None,
    ) -> None:
        """Initialize AWS S3 provider.

        Args:
            endpoint: S3 endpoint URL
            region: AWS region
            access_key: Access key ID
            secret_key: Secret access key
            session_token: Optional session token for temporary credentials
            path_style: Use path-style addressing
            insecure_skip_verify: Skip TLS verification
            connect_timeout: Seconds to wait for a connection
            read_timeout: Seconds to wait for a response
            max_attempts: Total attempts botocore makes per call, including retries
        """
        self.endpoint = endpoint
        self.region = region
        self.path_style = path_style

        if connect_timeout is None:
            connect_timeout = float(os.getenv("S3_CONNECT_TIMEOUT_SECONDS", "10"))
        if read_timeout is None:
            read_timeout = float(os.getenv("S3_READ_TIMEOUT_SECONDS", "30"))
        if max_attempts is None:
            max_attempts = int(os.getenv("S3_MAX_ATTEMPTS", "3"))

        # Configure boto3 client
        config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path" if path_style else "auto"},
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            retries={"max_attempts": max_attempts, "mode": "standard"},
        )

        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint,
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            aws_session_token=session_token,
            config=config,
            verify=not insecure_skip_verify,
        )

    def _call(self, operation: str, bucket: str, fn: Callable[..., Any], **params: Any) -> Any:
        """Invoke a rate-limited client method, recording metrics and classifying errors."""
        start_time = time.time()
        try:
            response = rate_limit_s3(fn)(Bucket=bucket, **params)
            metrics.api_call_total.labels(api_type="s3", operation=operation, result="success").inc()
            return response
        except (ClientError, BotoConnectionError, ConnectTimeoutError, ReadTimeoutError) as e:
            metrics.api_call_total.labels(api_type="s3", operation=operation, result="error").inc()
            if is_transient(e):
                metrics.rate_limit_hits_total.labels(api_type="s3").inc()
                raise TransientError(f"{operation} on bucket {bucket} failed temporarily: {e}") from e
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="s3", operation=operation).observe(duration)

    @staticmethod
    def _owner_params(expected_bucket_owner: str) -> dict[str, str]:
        if expected_bucket_owner:
            return {"ExpectedBucketOwner": expected_bucket_owner}
        return {}

    def get_bucket_website(self, bucket: str, expected_bucket_owner: str = "") -> dict[str, Any] | None:
        """Get bucket website configuration."""
        try:
            response = self._call(
                "get_bucket_website",
                bucket,
                self.client.get_bucket_website,
                **self._owner_params(expected_bucket_owner),
            )
        except ClientError as e:
            code = error_code(e)
            if code in NOT_FOUND_CODES:
                return None
            if code in BUCKET_NOT_FOUND_CODES:
                raise BucketNotFound(f"bucket {bucket} does not exist") from e
            if is_unsupported_target(e):
                raise UnsupportedTarget(f"bucket {bucket} does not support website configuration: {e}") from e
            logger.error(f"Failed to get website configuration for bucket {bucket}: {e}")
            raise

        response.pop("ResponseMetadata", None)
        return {
            key: response[key]
            for key in ("IndexDocument", "ErrorDocument", "RedirectAllRequestsTo", "RoutingRules")
            if response.get(key)
        }

    def put_bucket_website(self, bucket: str, document: dict[str, Any], expected_bucket_owner: str = "") -> None:
        """Set bucket website configuration."""
        try:
            self._call(
                "put_bucket_website",
                bucket,
                self.client.put_bucket_website,
                WebsiteConfiguration=document,
                **self._owner_params(expected_bucket_owner),
            )
        except ClientError as e:
            if error_code(e) in BUCKET_NOT_FOUND_CODES:
                raise BucketNotFound(f"bucket {bucket} does not exist") from e
            if is_unsupported_target(e):
                raise UnsupportedTarget(f"bucket {bucket} does not support website configuration: {e}") from e
            logger.error(f"Failed to set website configuration for bucket {bucket}: {e}")
            raise

    def delete_bucket_website(self, bucket: str, expected_bucket_owner: str = "") -> None:
        """Delete bucket website configuration."""
        try:
            self._call(
                "delete_bucket_website",
                bucket,
                self.client.delete_bucket_website,
                **self._owner_params(expected_bucket_owner),
            )
        except ClientError as e:
            code = error_code(e)
            if code in NOT_FOUND_CODES:
                return
            if code in BUCKET_NOT_FOUND_CODES:
                raise BucketNotFound(f"bucket {bucket} does not exist") from e
            logger.error(f"Failed to delete website configuration for bucket {bucket}: {e}")
            raise

    def _head_bucket(self, bucket: str, expected_bucket_owner: str = "") -> dict[str, Any]:
        try:
            return self._call(
                "head_bucket",
                bucket,
                self.client.head_bucket,
                **self._owner_params(expected_bucket_owner),
            )
        except ClientError as e:
            if error_code(e) in BUCKET_NOT_FOUND_CODES:
                raise BucketNotFound(f"bucket {bucket} does not exist") from e
            logger.error(f"Failed to head bucket {bucket}: {e}")
            raise

    def get_bucket_class(self, bucket: str, expected_bucket_owner: str = "") -> BucketClass:
        """Get bucket class from HeadBucket."""
        response = self._head_bucket(bucket, expected_bucket_owner)
        if response.get("BucketLocationType") in DIRECTORY_LOCATION_TYPES:
            return BucketClass.DIRECTORY
        return BucketClass.GENERAL_PURPOSE

    def get_bucket_region(self, bucket: str, expected_bucket_owner: str = "") -> str | None:
        """Get bucket region from HeadBucket."""
        response = self._head_bucket(bucket, expected_bucket_owner)
        region = response.get("BucketRegion")
        if not region:
            headers = response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
            region = headers.get("x-amz-bucket-region")
        return region or None
