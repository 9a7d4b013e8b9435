"""Finalizer-aware event dispatching for Kubernetes-style operators.

A watch stream delivers ADDED/MODIFIED/DELETED/ERROR notifications for one
resource kind.  :class:`EventDispatcher` turns each of them into a call on a
pluggable :class:`ResourceController` and keeps a finalizer on every live
resource so that the controller's cleanup runs before the control plane is
allowed to drop the object.

The package is pure Python apart from the Kubernetes-backed resource client;
tests and lab runs use :class:`InMemoryResourceClient` instead.
"""

from .clients import (  # noqa: F401
    InMemoryResourceClient,
    KubernetesResourceClient,
    ResourceClient,
)
from .controllers import Context, ResourceController  # noqa: F401
from .dispatcher import EventDispatcher  # noqa: F401
from .events import Action, WatchEvent  # noqa: F401
from .exceptions import ConflictError, OperatorError, ResourceNotFound  # noqa: F401
from .finalizers import FinalizerManager  # noqa: F401
from .registry import OperatorRegistry  # noqa: F401
from .resource import ObjectMeta, Resource, ResourceKey  # noqa: F401

__all__ = [
    "Action",
    "ConflictError",
    "Context",
    "EventDispatcher",
    "FinalizerManager",
    "InMemoryResourceClient",
    "KubernetesResourceClient",
    "ObjectMeta",
    "OperatorError",
    "OperatorRegistry",
    "Resource",
    "ResourceClient",
    "ResourceController",
    "ResourceKey",
    "ResourceNotFound",
    "WatchEvent",
]
