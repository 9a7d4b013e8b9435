"""Watcher implementations used by the operator agent."""

from .kube import ResourceWatcher, to_watch_event  # noqa: F401

__all__ = ["ResourceWatcher", "to_watch_event"]
