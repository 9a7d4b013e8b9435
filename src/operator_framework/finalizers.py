"""Finalizer bookkeeping for the event dispatcher."""

from __future__ import annotations

import logging

from .clients import ResourceClient
from .resource import Resource

LOG = logging.getLogger(__name__)


def marked_for_deletion(resource: Resource) -> bool:
    """Return ``True`` once the control plane stamped a deletion timestamp."""

    return bool(resource.metadata.deletion_timestamp)


class FinalizerManager:
    """Inspect and edit the finalizer owned by one dispatcher.

    Only the configured ``finalizer`` token is ever added or removed; tokens
    owned by other controllers are carried over untouched.
    """

    def __init__(self, finalizer: str, client: ResourceClient) -> None:
        if not finalizer:
            raise ValueError("finalizer token must be a non-empty string")
        self._finalizer = finalizer
        self._client = client

    @property
    def finalizer(self) -> str:
        return self._finalizer

    def has_default_finalizer(self, resource: Resource) -> bool:
        return self._finalizer in resource.finalizers

    def add_finalizer_if_not_present(self, resource: Resource) -> Resource:
        """Return ``resource`` with the finalizer appended.

        Nothing is persisted; the caller decides when to replace.
        """

        if self.has_default_finalizer(resource):
            return resource
        LOG.info("Adding finalizer %s to %s", self._finalizer, resource.key)
        return resource.with_metadata(
            finalizers=resource.finalizers + (self._finalizer,)
        )

    def remove_default_finalizer(self, resource: Resource) -> Resource:
        """Drop one occurrence of the finalizer and persist the result.

        The replace is checked against the version observed on ``resource``.
        """

        if not self.has_default_finalizer(resource):
            raise ValueError(
                f"{resource.key} does not carry finalizer {self._finalizer}"
            )
        finalizers = list(resource.finalizers)
        finalizers.remove(self._finalizer)
        updated = resource.with_metadata(finalizers=tuple(finalizers))
        LOG.info("Removing finalizer %s from %s", self._finalizer, resource.key)
        return self._client.replace(updated, resource.metadata.resource_version)

    def marked_for_deletion(self, resource: Resource) -> bool:
        return marked_for_deletion(resource)
