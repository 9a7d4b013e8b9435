"""Controller contract implemented by operator authors."""

from .base import Context, ResourceController  # noqa: F401

__all__ = ["Context", "ResourceController"]
