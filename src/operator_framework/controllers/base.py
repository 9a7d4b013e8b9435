"""Abstract interface for resource controllers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Optional

from ..clients import ResourceClient
from ..resource import Resource


@dataclass(frozen=True)
class Context:
    """Collaborators handed to every controller call."""

    client: ResourceClient
    api_client: Optional[Any] = None


class ResourceController(ABC):
    """Reconciliation logic for one resource kind.

    Both operations must be idempotent: the same resource can be delivered
    again before the outcome of a previous call is visible.
    """

    #: Finalizer token owned by this controller.  ``None`` falls back to the
    #: ``[operator] default_finalizer`` option.
    finalizer_name: ClassVar[Optional[str]] = None

    @abstractmethod
    def create_or_update(self, resource: Resource, context: Context) -> Resource:
        """Reconcile ``resource`` and return the value to persist."""

    @abstractmethod
    def delete(self, resource: Resource, context: Context) -> None:
        """Release everything held on behalf of ``resource``."""
