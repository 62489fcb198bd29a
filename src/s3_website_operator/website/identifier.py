"""Composite identifier for a bucket website configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import MalformedIdentifier

# Bucket names cannot contain a comma, so it safely separates bucket and owner.
ID_DELIMITER = ","


@dataclass(frozen=True)
class ResourceIdentifier:
    """Bucket and optional expected owner account.

    Immutable: a different bucket or owner is a different resource.
    """

    bucket: str
    expected_bucket_owner: str = ""

    def __str__(self) -> str:
        return encode(self.bucket, self.expected_bucket_owner)

    @classmethod
    def parse(cls, serialized: str) -> ResourceIdentifier:
        return decode(serialized)


def encode(bucket: str, expected_bucket_owner: str = "") -> str:
    """Serialize bucket and owner; the owner is omitted when empty."""
    if not expected_bucket_owner:
        return bucket
    return f"{bucket}{ID_DELIMITER}{expected_bucket_owner}"


def decode(serialized: str) -> ResourceIdentifier:
    """Parse a serialized identifier.

    Accepts ``bucket`` or ``bucket,owner``.

    Raises:
        MalformedIdentifier: If the bucket is empty, the owner segment is empty
            after a delimiter, or there is more than one delimiter.
    """
    if not isinstance(serialized, str) or not serialized:
        raise MalformedIdentifier(f"unexpected format for ID ({serialized!r}), expected BUCKET or BUCKET{ID_DELIMITER}EXPECTED_BUCKET_OWNER")

    if ID_DELIMITER not in serialized:
        return ResourceIdentifier(bucket=serialized)

    parts = serialized.split(ID_DELIMITER)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise MalformedIdentifier(
            f"unexpected format for ID ({serialized!r}), expected BUCKET or BUCKET{ID_DELIMITER}EXPECTED_BUCKET_OWNER",
            identifier=serialized,
        )
    return ResourceIdentifier(bucket=parts[0], expected_bucket_owner=parts[1])
