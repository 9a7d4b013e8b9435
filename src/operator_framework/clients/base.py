"""Abstract interface for versioned resource stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..resource import Resource


class ResourceClient(ABC):
    """Read/replace access to the resources of one kind."""

    @abstractmethod
    def replace(self, resource: Resource, expected_version: Optional[str]) -> Resource:
        """Persist ``resource`` if the stored version equals ``expected_version``.

        Returns the stored resource carrying its new version token.  Raises
        :class:`~operator_framework.exceptions.ConflictError` when the stored
        version moved on and
        :class:`~operator_framework.exceptions.ResourceNotFound` when the
        object is gone.
        """
