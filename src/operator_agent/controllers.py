"""Controllers shipped with the agent."""

from __future__ import annotations

import logging

from operator_framework import Context, Resource, ResourceController

LOG = logging.getLogger(__name__)


class LoggingController(ResourceController):
    """Log every reconciliation and leave resources unchanged.

    Handy for checking that the agent sees a cluster's objects and that the
    finalizer round trip works before plugging in real logic.
    """

    def create_or_update(self, resource: Resource, context: Context) -> Resource:
        LOG.info(
            "Reconciling %s at version %s",
            resource.key, resource.metadata.resource_version,
        )
        return resource

    def delete(self, resource: Resource, context: Context) -> None:
        LOG.info("Cleaning up %s", resource.key)
