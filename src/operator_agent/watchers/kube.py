"""Kubernetes watch stream feeding an event dispatcher."""

from __future__ import annotations

import logging
from threading import Event, Thread
from typing import Any, Mapping, Optional

from kubernetes import client as k8s_client
from kubernetes import watch

from operator_framework import Action, EventDispatcher, Resource, WatchEvent

LOG = logging.getLogger(__name__)


def to_watch_event(raw: Mapping[str, Any]) -> WatchEvent:
    """Convert a raw event yielded by :class:`kubernetes.watch.Watch`."""

    action = Action.parse(raw.get("type"))
    obj = raw.get("object")
    if action is Action.ERROR:
        # ERROR events carry a Status object rather than a resource.
        if isinstance(obj, Mapping):
            LOG.error(
                "Watch reported error %s: %s", obj.get("code"), obj.get("message")
            )
        return WatchEvent(action)
    if not isinstance(obj, Mapping):
        raise ValueError(f"{action.name} event carries no object")
    return WatchEvent(action, Resource.from_dict(obj))


class ResourceWatcher(Thread):
    """Stream custom object events for one kind into ``dispatcher``.

    Each stream lasts at most ``timeout`` seconds.  When it ends or fails the
    dispatcher is told through :meth:`EventDispatcher.on_close` and a new
    stream is opened after ``retry_interval`` seconds.  Reopening lists every
    object again as ADDED, which doubles as a resync.
    """

    def __init__(
        self,
        dispatcher: EventDispatcher,
        api: k8s_client.CustomObjectsApi,
        *,
        group: str,
        version: str,
        plural: str,
        stop_event: Event,
        namespace: Optional[str] = None,
        timeout: int = 300,
        retry_interval: float = 5.0,
    ) -> None:
        super().__init__(daemon=True, name=f"watch-{plural}")
        self._dispatcher = dispatcher
        self._api = api
        self._group = group
        self._version = version
        self._plural = plural
        self._namespace = namespace
        self._stop = stop_event
        self._timeout = timeout
        self._retry_interval = retry_interval

    def run(self) -> None:
        LOG.info(
            "Starting watch on %s.%s/%s (namespace=%s)",
            self._plural, self._group, self._version, self._namespace or "*",
        )
        while not self._stop.is_set():
            try:
                self.watch_once()
            except Exception:  # pragma: no cover - logged and retried
                LOG.exception("Watch on %s.%s failed", self._plural, self._group)
            self._stop.wait(self._retry_interval)
        LOG.info("Stopped watch on %s.%s", self._plural, self._group)

    def watch_once(self) -> None:
        """Consume a single watch stream until it ends."""

        stream = watch.Watch()
        try:
            for raw in stream.stream(*self._list_call(), timeout_seconds=self._timeout):
                if self._stop.is_set():
                    stream.stop()
                    break
                try:
                    event = to_watch_event(raw)
                except ValueError as exc:
                    LOG.warning("Skipping malformed watch event: %s", exc)
                    continue
                self._dispatcher.handle(event)
        except Exception as exc:
            # ApiException, or urllib3/socket errors on a dropped connection.
            self._dispatcher.on_close(exc)
            return
        self._dispatcher.on_close(None)

    def _list_call(self) -> tuple:
        if self._namespace:
            return (
                self._api.list_namespaced_custom_object,
                self._group, self._version, self._namespace, self._plural,
            )
        return (
            self._api.list_cluster_custom_object,
            self._group, self._version, self._plural,
        )
