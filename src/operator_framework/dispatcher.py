"""Turn watch notifications into controller calls.

For ADDED and MODIFIED notifications the dispatcher either runs the
controller's cleanup (resource marked for deletion and still carrying our
finalizer) or its create/update logic, and then persists the finalizer
change with a version-checked replace.  DELETED and ERROR notifications are
only logged: by the time an object is gone its finalizer was already cleared
during the marked-for-deletion phase.

Failures never escape :meth:`EventDispatcher.event_received`.  The resource
is left as observed and the next notification for it starts over.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from . import config
from .clients import ResourceClient
from .controllers import Context, ResourceController
from .events import Action, WatchEvent
from .exceptions import ConflictError, ResourceNotFound
from .finalizers import FinalizerManager
from .resource import Resource

LOG = logging.getLogger(__name__)


def _describe(resource: Optional[Resource]) -> str:
    if resource is None:
        return "<no resource>"
    return str(getattr(resource, "key", resource))


class EventDispatcher:
    """Dispatch watch events for one resource kind to its controller."""

    def __init__(
        self,
        controller: ResourceController,
        client: ResourceClient,
        finalizer: Optional[str] = None,
        api_client: Optional[Any] = None,
    ) -> None:
        self._controller = controller
        self._client = client
        self._finalizers = FinalizerManager(
            finalizer or controller.finalizer_name or config.default_finalizer(),
            client,
        )
        self._context = Context(client=client, api_client=api_client)

    @property
    def finalizer(self) -> str:
        return self._finalizers.finalizer

    @property
    def controller(self) -> ResourceController:
        return self._controller

    # ------------------------------------------------------------------
    # Watch contract
    # ------------------------------------------------------------------
    def event_received(self, action: Action, resource: Optional[Resource]) -> None:
        try:
            LOG.debug("Action: %s, %s", action, _describe(resource))
            self._handle_event(action, resource)
        except ConflictError as exc:
            LOG.warning(
                "Dropping %s for %s after version conflict: %s",
                action.name, _describe(resource), exc,
            )
        except ResourceNotFound:
            LOG.info(
                "%s disappeared while handling %s", _describe(resource), action.name
            )
        except Exception:
            LOG.exception(
                "Error handling %s for %s", getattr(action, "name", action),
                _describe(resource),
            )

    def handle(self, event: WatchEvent) -> None:
        self.event_received(event.action, event.resource)

    def on_close(self, error: Optional[BaseException] = None) -> None:
        if error is not None:
            LOG.error("Watch closed with error: %s", error)
        else:
            LOG.debug("Watch closed")

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------
    def _handle_event(self, action: Action, resource: Optional[Resource]) -> None:
        if action.is_upsert:
            if resource is None:
                raise ValueError(f"{action.name} event without a resource")
            self._reconcile(resource)
        elif action is Action.ERROR:
            LOG.error("Received error for resource: %s", _describe(resource))
        elif action is Action.DELETED:
            LOG.debug("Resource deleted: %s", _describe(resource))
        else:
            raise TypeError(f"Unsupported action: {action!r}")

    def _reconcile(self, resource: Resource) -> None:
        finalizers = self._finalizers
        if finalizers.marked_for_deletion(resource):
            if finalizers.has_default_finalizer(resource):
                self._controller.delete(resource, self._context)
                finalizers.remove_default_finalizer(resource)
                return
            # Other owners may still update the object while their
            # finalizers are pending, so reconcile it like a live one.
            LOG.warning(
                "%s is marked for deletion without finalizer %s; reconciling",
                resource.key, finalizers.finalizer,
            )

        updated = self._controller.create_or_update(resource, self._context)
        updated = finalizers.add_finalizer_if_not_present(updated)
        self._client.replace(updated, updated.metadata.resource_version)
