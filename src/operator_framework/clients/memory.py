"""In-process resource store used by tests and lab runs.

The store mimics the parts of the API server the dispatcher relies on:

* every write bumps a store-wide revision that becomes the object's
  ``resource_version``;
* a replace must present the current version, otherwise it fails with
  :class:`~operator_framework.exceptions.ConflictError`;
* a replace that changes nothing keeps the version and emits no event;
* deleting an object that still carries finalizers only stamps
  ``deletion_timestamp``; the object disappears once the last finalizer is
  removed.

Each change is queued as a :class:`~operator_framework.events.WatchEvent`
so callers can feed them back into a dispatcher.
"""

from __future__ import annotations

import itertools
import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional

from ..events import Action, WatchEvent
from ..exceptions import ConflictError, ResourceNotFound
from ..resource import Resource, ResourceKey
from .base import ResourceClient

LOG = logging.getLogger(__name__)


def _utcnow() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class InMemoryResourceClient(ResourceClient):
    """Thread-safe dictionary backed :class:`ResourceClient`."""

    def __init__(self) -> None:
        self._objects: Dict[ResourceKey, Resource] = {}
        self._events: List[WatchEvent] = []
        self._revision = itertools.count(1)
        self._lock = Lock()

    def _next_version(self) -> str:
        return str(next(self._revision))

    def _emit(self, action: Action, resource: Resource) -> None:
        self._events.append(WatchEvent(action, resource))

    # ------------------------------------------------------------------
    # Store operations
    # ------------------------------------------------------------------
    def create(self, resource: Resource) -> Resource:
        with self._lock:
            if resource.key in self._objects:
                raise ValueError(f"{resource.key} already exists")
            stored = resource.with_metadata(
                resource_version=self._next_version(),
                deletion_timestamp=None,
            )
            self._objects[stored.key] = stored
            self._emit(Action.ADDED, stored)
            LOG.debug("Created %s at version %s", stored.key,
                      stored.metadata.resource_version)
            return stored

    def get(self, key: ResourceKey) -> Resource:
        with self._lock:
            try:
                return self._objects[key]
            except KeyError:
                raise ResourceNotFound(key) from None

    def list(self) -> List[Resource]:
        with self._lock:
            return list(self._objects.values())

    def replace(self, resource: Resource, expected_version: Optional[str]) -> Resource:
        with self._lock:
            stored = self._objects.get(resource.key)
            if stored is None:
                raise ResourceNotFound(resource.key)
            current = stored.metadata.resource_version
            if expected_version != current:
                raise ConflictError(resource.key, expected_version, current)

            # Clients cannot set or clear the deletion timestamp through a replace.
            candidate = resource.with_metadata(
                resource_version=current,
                deletion_timestamp=stored.metadata.deletion_timestamp,
                uid=stored.metadata.uid,
            )
            if candidate == stored:
                return stored

            updated = candidate.with_metadata(resource_version=self._next_version())
            if updated.metadata.deletion_timestamp and not updated.finalizers:
                del self._objects[updated.key]
                self._emit(Action.DELETED, updated)
                LOG.debug("Finalizers cleared, removed %s", updated.key)
            else:
                self._objects[updated.key] = updated
                self._emit(Action.MODIFIED, updated)
            return updated

    def mark_for_deletion(
        self, key: ResourceKey, timestamp: Optional[str] = None
    ) -> Optional[Resource]:
        """Request deletion of ``key``.

        Returns the resource still held because of pending finalizers, or
        ``None`` when it was removed right away.
        """

        with self._lock:
            stored = self._objects.get(key)
            if stored is None:
                raise ResourceNotFound(key)
            if not stored.finalizers:
                del self._objects[key]
                self._emit(Action.DELETED, stored)
                return None
            if stored.metadata.deletion_timestamp:
                return stored
            updated = stored.with_metadata(
                deletion_timestamp=timestamp or _utcnow(),
                resource_version=self._next_version(),
            )
            self._objects[key] = updated
            self._emit(Action.MODIFIED, updated)
            return updated

    # ------------------------------------------------------------------
    # Watch emulation
    # ------------------------------------------------------------------
    def pop_events(self) -> List[WatchEvent]:
        """Return and clear the queued change notifications."""

        with self._lock:
            events, self._events = self._events, []
            return events
