"""Event primitives delivered by a watch stream."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .resource import Resource


class Action(Enum):
    """Kinds of notification a watch stream can deliver."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"

    @classmethod
    def parse(cls, value: str) -> "Action":
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unsupported watch action: {value!r}") from None

    @property
    def is_upsert(self) -> bool:
        return self in (Action.ADDED, Action.MODIFIED)


@dataclass(frozen=True)
class WatchEvent:
    """A single notification; ``resource`` may be absent for ERROR events."""

    action: Action
    resource: Optional[Resource] = None
