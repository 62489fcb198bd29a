"""Shared fixtures for unit tests."""

from __future__ import annotations

import copy
from typing import Any, Callable

import pytest

from s3_website_operator.services.s3.base import BucketClass
from s3_website_operator.website.errors import BucketNotFound


class FakeWebsiteService:
    """In-memory stand-in for the remote website service."""

    def __init__(self) -> None:
        self.buckets: dict[str, BucketClass] = {}
        self.documents: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []
        # Rewrites a document on put, to simulate a remote that stores something else
        self.put_transform: Callable[[dict[str, Any]], dict[str, Any]] | None = None
        self.ignore_deletes = False
        self.region = "us-east-1"
        self.head_owners: list[str] = []

    def add_bucket(self, bucket: str, bucket_class: BucketClass = BucketClass.GENERAL_PURPOSE) -> None:
        self.buckets[bucket] = bucket_class

    def _require(self, bucket: str) -> None:
        if bucket not in self.buckets:
            raise BucketNotFound(f"bucket {bucket} does not exist")

    def get_bucket_website(self, bucket: str, expected_bucket_owner: str = "") -> dict[str, Any] | None:
        self.calls.append(("get_bucket_website", bucket))
        self._require(bucket)
        document = self.documents.get(bucket)
        return copy.deepcopy(document) if document is not None else None

    def put_bucket_website(self, bucket: str, document: dict[str, Any], expected_bucket_owner: str = "") -> None:
        self.calls.append(("put_bucket_website", bucket))
        self._require(bucket)
        stored = copy.deepcopy(document)
        if self.put_transform is not None:
            stored = self.put_transform(stored)
        self.documents[bucket] = stored

    def delete_bucket_website(self, bucket: str, expected_bucket_owner: str = "") -> None:
        self.calls.append(("delete_bucket_website", bucket))
        self._require(bucket)
        if not self.ignore_deletes:
            self.documents.pop(bucket, None)

    def get_bucket_class(self, bucket: str, expected_bucket_owner: str = "") -> BucketClass:
        self.calls.append(("get_bucket_class", bucket))
        self.head_owners.append(expected_bucket_owner)
        self._require(bucket)
        return self.buckets[bucket]

    def get_bucket_region(self, bucket: str, expected_bucket_owner: str = "") -> str | None:
        self._require(bucket)
        return self.region

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def fake_service() -> FakeWebsiteService:
    """Fake remote service with one general purpose bucket named "my-site"."""
    service = FakeWebsiteService()
    service.add_bucket("my-site")
    return service
