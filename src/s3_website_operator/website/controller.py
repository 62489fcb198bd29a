"""Lifecycle controller sequencing create, read, update, delete and import."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator

from botocore.exceptions import ClientError

from ..constants import KIND_BUCKET_WEBSITE
from ..services.s3.base import WebsiteService
from ..tracing import trace_span
from .errors import (
    BucketNotFound,
    DestroyIncomplete,
    DriftAfterApply,
    FatalError,
    NotFound,
    RemoteServiceError,
    ReplacementRequired,
    WebsiteError,
)
from .fetcher import RemoteStateFetcher
from .identifier import ResourceIdentifier, decode
from .models import DesiredConfiguration, PlanAction, ReconciliationPlan, WebsiteConfiguration
from .planner import canonicalize, identifier_for, plan, plan_destroy

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    """States a website configuration moves through."""

    ABSENT = "Absent"
    CREATING = "Creating"
    PRESENT = "Present"
    UPDATING = "Updating"
    DESTROYING = "Destroying"
    IMPORTING = "Importing"


TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.ABSENT: frozenset({LifecycleState.CREATING, LifecycleState.IMPORTING}),
    LifecycleState.CREATING: frozenset({LifecycleState.PRESENT}),
    LifecycleState.PRESENT: frozenset({LifecycleState.UPDATING, LifecycleState.DESTROYING}),
    LifecycleState.UPDATING: frozenset({LifecycleState.PRESENT}),
    LifecycleState.DESTROYING: frozenset({LifecycleState.ABSENT}),
    LifecycleState.IMPORTING: frozenset({LifecycleState.PRESENT}),
}


def transition(
    current: LifecycleState,
    target: LifecycleState,
    identifier: ResourceIdentifier | None = None,
) -> LifecycleState:
    """Move to a new lifecycle state.

    Raises:
        FatalError: If the transition is not allowed
    """
    if target not in TRANSITIONS[current]:
        raise FatalError(
            f"illegal lifecycle transition {current.value} -> {target.value}",
            identifier=str(identifier) if identifier is not None else None,
        )
    logger.debug(f"Website {identifier}: {current.value} -> {target.value}")
    return target


class WebsiteController:
    """Reconciles one bucket website configuration per call.

    The controller keeps no state between calls and never caches actual state:
    every pass reads it fresh from the remote service. Passes for the same
    identifier are not coordinated here; a racing writer shows up as
    DriftAfterApply on the confirming read.
    """

    def __init__(self, service: WebsiteService):
        self.service = service
        self.fetcher = RemoteStateFetcher(service)

    @contextmanager
    def _step(self, identifier: ResourceIdentifier | str | None, action: str) -> Iterator[None]:
        """Tag errors raised inside with identifier and action."""
        with trace_span(
            f"website_{action.lower()}",
            kind=KIND_BUCKET_WEBSITE,
            attributes={"website.id": str(identifier), "website.action": action},
        ):
            try:
                yield
            except WebsiteError as e:
                e.with_context(identifier, action)
                raise
            except ClientError as e:
                raise RemoteServiceError(
                    f"remote call failed: {e}",
                    identifier=str(identifier),
                    action=action,
                ) from e

    def _fetch_or_none(self, identifier: ResourceIdentifier) -> WebsiteConfiguration | None:
        try:
            return self.fetcher.fetch(identifier)
        except NotFound:
            return None

    def create(self, desired: DesiredConfiguration) -> ResourceIdentifier:
        """Create the website configuration and return its identifier."""
        identifier = identifier_for(desired)
        with self._step(identifier, PlanAction.CREATE.value):
            configuration = canonicalize(desired)
            actual = self._fetch_or_none(identifier)
            return self._apply(plan(configuration, actual, identifier), configuration)

    def read(self, identifier: ResourceIdentifier) -> WebsiteConfiguration | None:
        """Read actual state; None when the configuration or bucket is gone."""
        with self._step(identifier, "Read"):
            try:
                return self.fetcher.fetch(identifier)
            except (NotFound, BucketNotFound):
                logger.info(f"Website configuration {identifier} not found, treating as absent")
                return None

    def update(self, identifier: ResourceIdentifier, desired: DesiredConfiguration) -> ReconciliationPlan:
        """Bring the configuration for an existing identifier to desired state.

        Returns:
            The plan that was applied (NoOp when already in sync)
        """
        with self._step(identifier, PlanAction.UPDATE.value):
            if identifier_for(desired) != identifier:
                raise ReplacementRequired(
                    f"bucket and expected owner cannot change in place "
                    f"({identifier} -> {identifier_for(desired)})"
                )
            configuration = canonicalize(desired)
            actual = self._fetch_or_none(identifier)
            reconciliation = plan(configuration, actual, identifier)
            self._apply(reconciliation, configuration)
            return reconciliation

    def delete(self, identifier: ResourceIdentifier) -> None:
        """Remove the configuration; an already-absent one is not an error."""
        with self._step(identifier, PlanAction.DESTROY.value):
            self._apply(plan_destroy(identifier), None)

    def import_(self, serialized: str) -> tuple[ResourceIdentifier, WebsiteConfiguration]:
        """Adopt an existing configuration by its serialized identifier.

        Raises:
            MalformedIdentifier: If the identifier cannot be decoded
            NotFound: If there is no configuration to import
        """
        with self._step(serialized, "Import"):
            identifier = decode(serialized)
            state = transition(LifecycleState.ABSENT, LifecycleState.IMPORTING, identifier)
            actual = self.fetcher.fetch(identifier)
            transition(state, LifecycleState.PRESENT, identifier)
            logger.info(f"Imported website configuration {identifier}")
            return identifier, actual

    def apply(
        self,
        reconciliation: ReconciliationPlan,
        desired: DesiredConfiguration | WebsiteConfiguration | None,
    ) -> ResourceIdentifier:
        """Execute a plan and confirm its outcome."""
        identifier = reconciliation.identifier
        if identifier is None:
            raise FatalError("plan has no identifier", action=reconciliation.action.value)

        with self._step(identifier, reconciliation.action.value):
            configuration = None
            if desired is not None:
                configuration = canonicalize(desired)
            if reconciliation.action in (PlanAction.CREATE, PlanAction.UPDATE):
                self.fetcher.ensure_supported(identifier)
            return self._apply(reconciliation, configuration)

    def _apply(
        self,
        reconciliation: ReconciliationPlan,
        configuration: WebsiteConfiguration | None,
    ) -> ResourceIdentifier:
        identifier = reconciliation.identifier
        action = reconciliation.action

        if action is PlanAction.NOOP:
            logger.info(f"Website configuration {identifier} is up to date")
            return identifier

        if action is PlanAction.DESTROY:
            self._destroy(identifier)
            return identifier

        if configuration is None:
            configuration = reconciliation.configuration
        if configuration is None:
            raise FatalError(f"{action.value} plan carries no configuration to write")

        if action is PlanAction.CREATE:
            state = transition(LifecycleState.ABSENT, LifecycleState.CREATING, identifier)
        else:
            state = transition(LifecycleState.PRESENT, LifecycleState.UPDATING, identifier)

        logger.info(
            f"Writing website configuration {identifier} ({action.value}), "
            f"changed attributes: {', '.join(reconciliation.changed_attributes) or 'none'}"
        )
        # The remote protocol replaces the whole document on every write.
        self.service.put_bucket_website(
            identifier.bucket,
            configuration.to_document(),
            identifier.expected_bucket_owner,
        )

        self._confirm(identifier, configuration)
        transition(state, LifecycleState.PRESENT, identifier)
        return identifier

    def _confirm(self, identifier: ResourceIdentifier, configuration: WebsiteConfiguration) -> None:
        """Re-read after a write and re-plan; anything but NoOp is drift."""
        try:
            actual = self.fetcher.fetch(identifier, check_target=False)
        except NotFound as e:
            raise DriftAfterApply(
                f"website configuration {identifier} reads back as absent after a successful write"
            ) from e

        residual = plan(configuration, actual, identifier)
        if residual.action is not PlanAction.NOOP:
            raise DriftAfterApply(
                f"website configuration {identifier} differs after write in: "
                f"{', '.join(residual.changed_attributes)}",
                attribute_diffs=dict(residual.attribute_diffs),
            )

    def _destroy(self, identifier: ResourceIdentifier) -> None:
        state = transition(LifecycleState.PRESENT, LifecycleState.DESTROYING, identifier)
        try:
            self.service.delete_bucket_website(identifier.bucket, identifier.expected_bucket_owner)
        except BucketNotFound:
            logger.info(f"Bucket for website configuration {identifier} is gone, nothing to delete")
            transition(state, LifecycleState.ABSENT, identifier)
            return

        try:
            remaining = self.fetcher.fetch(identifier, check_target=False)
        except (NotFound, BucketNotFound):
            remaining = None
        if remaining is not None:
            raise DestroyIncomplete(f"website configuration {identifier} still exists after delete")
        transition(state, LifecycleState.ABSENT, identifier)
        logger.info(f"Deleted website configuration {identifier}")
