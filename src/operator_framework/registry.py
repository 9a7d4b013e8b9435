"""Route watch events to the dispatcher registered for their kind."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .clients import ResourceClient
from .controllers import ResourceController
from .dispatcher import EventDispatcher
from .events import WatchEvent

LOG = logging.getLogger(__name__)


class OperatorRegistry:
    """One controller and dispatcher per resource kind."""

    def __init__(self) -> None:
        self._dispatchers: Dict[str, EventDispatcher] = {}

    def register(
        self,
        kind: str,
        controller: ResourceController,
        client: ResourceClient,
        finalizer: Optional[str] = None,
        api_client: Optional[Any] = None,
    ) -> EventDispatcher:
        if kind in self._dispatchers:
            raise ValueError(f"controller for kind '{kind}' already registered")
        dispatcher = EventDispatcher(
            controller, client, finalizer=finalizer, api_client=api_client
        )
        self._dispatchers[kind] = dispatcher
        LOG.info(
            "Registered %s for kind %s (finalizer=%s)",
            type(controller).__name__, kind, dispatcher.finalizer,
        )
        return dispatcher

    def unregister(self, kind: str) -> None:
        self._dispatchers.pop(kind, None)

    def dispatcher_for(self, kind: str) -> EventDispatcher:
        try:
            return self._dispatchers[kind]
        except KeyError:
            raise KeyError(f"no controller registered for kind '{kind}'") from None

    def kinds(self) -> List[str]:
        return list(self._dispatchers)

    def handle(self, event: WatchEvent, kind: Optional[str] = None) -> None:
        if kind is None:
            if event.resource is None:
                raise ValueError("kind is required for events without a resource")
            kind = event.resource.kind
        self.dispatcher_for(kind).handle(event)
