"""Resource store clients consumed by the dispatcher."""

from .base import ResourceClient  # noqa: F401
from .k8s import KubernetesResourceClient  # noqa: F401
from .memory import InMemoryResourceClient  # noqa: F401

__all__ = [
    "InMemoryResourceClient",
    "KubernetesResourceClient",
    "ResourceClient",
]
