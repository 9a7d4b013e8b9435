"""Errors raised by resource clients."""

from __future__ import annotations

from typing import Optional

from .resource import ResourceKey


class OperatorError(Exception):
    """Base class for framework errors."""


class ConflictError(OperatorError):
    """A replace presented a version token that is no longer current."""

    def __init__(
        self,
        key: ResourceKey,
        expected_version: Optional[str],
        actual_version: Optional[str] = None,
    ) -> None:
        self.key = key
        self.expected_version = expected_version
        self.actual_version = actual_version
        message = f"version conflict on {key}: expected {expected_version}"
        if actual_version is not None:
            message += f", current {actual_version}"
        super().__init__(message)


class ResourceNotFound(OperatorError):
    """The resource no longer exists in the store."""

    def __init__(self, key: ResourceKey) -> None:
        self.key = key
        super().__init__(f"{key} not found")
