"""Resource value objects exchanged between watchers, controllers and clients.

Resources are immutable snapshots of what the control plane reported at
observation time.  Anything that needs a different version of a resource
(controllers, the finalizer manager) builds a new value with
:func:`dataclasses.replace` instead of mutating the snapshot in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, NamedTuple, Optional, Tuple


class ResourceKey(NamedTuple):
    """Identity of a resource within the control plane."""

    kind: str
    namespace: Optional[str]
    name: str

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind} {self.namespace}/{self.name}"
        return f"{self.kind} {self.name}"


@dataclass(frozen=True)
class ObjectMeta:
    """Subset of object metadata the framework cares about.

    Attributes
    ----------
    name:
        Object name, unique per kind and namespace.
    namespace:
        Owning namespace, ``None`` for cluster-scoped kinds.
    resource_version:
        Opaque version token used for optimistic concurrency on writes.
    deletion_timestamp:
        Set by the control plane once deletion was requested.  While any
        finalizer remains the object is kept around in this state.
    finalizers:
        Ordered finalizer tokens.
    """

    name: str
    namespace: Optional[str] = None
    uid: Optional[str] = None
    resource_version: Optional[str] = None
    deletion_timestamp: Optional[str] = None
    finalizers: Tuple[str, ...] = ()
    labels: Mapping[str, str] = field(default_factory=dict)
    annotations: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ObjectMeta":
        if not isinstance(data, Mapping):
            raise ValueError("metadata must be a mapping")
        if not data.get("name"):
            raise ValueError("metadata requires a 'name'")
        return cls(
            name=str(data["name"]),
            namespace=data.get("namespace"),
            uid=data.get("uid"),
            resource_version=data.get("resourceVersion"),
            deletion_timestamp=data.get("deletionTimestamp"),
            finalizers=tuple(data.get("finalizers") or ()),
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        optional = (
            ("namespace", self.namespace),
            ("uid", self.uid),
            ("resourceVersion", self.resource_version),
            ("deletionTimestamp", self.deletion_timestamp),
        )
        for key, value in optional:
            if value is not None:
                data[key] = value
        if self.finalizers:
            data["finalizers"] = list(self.finalizers)
        if self.labels:
            data["labels"] = dict(self.labels)
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        return data


@dataclass(frozen=True)
class Resource:
    """A custom resource snapshot.

    ``spec`` and ``status`` are opaque to the framework.  Top-level fields
    other than ``apiVersion``, ``kind``, ``metadata``, ``spec`` and ``status``
    are preserved in ``extra`` so that a round trip through :meth:`from_dict`
    and :meth:`to_dict` does not drop data the controller never looked at.
    """

    kind: str
    metadata: ObjectMeta
    api_version: str = "v1"
    spec: Mapping[str, Any] = field(default_factory=dict)
    status: Mapping[str, Any] = field(default_factory=dict)
    extra: Mapping[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = ("apiVersion", "kind", "metadata", "spec", "status")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Resource":
        if not isinstance(data, Mapping):
            raise ValueError("resource object must be a mapping")
        if "kind" not in data or "metadata" not in data:
            raise ValueError("resource object requires 'kind' and 'metadata'")
        return cls(
            kind=str(data["kind"]),
            api_version=str(data.get("apiVersion", "v1")),
            metadata=ObjectMeta.from_dict(data["metadata"]),
            spec=dict(data.get("spec") or {}),
            status=dict(data.get("status") or {}),
            extra={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
        }
        data.update(self.extra)
        if self.spec:
            data["spec"] = dict(self.spec)
        if self.status:
            data["status"] = dict(self.status)
        return data

    @property
    def key(self) -> ResourceKey:
        return ResourceKey(self.kind, self.metadata.namespace, self.metadata.name)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> Optional[str]:
        return self.metadata.namespace

    @property
    def finalizers(self) -> Tuple[str, ...]:
        return self.metadata.finalizers

    def with_metadata(self, **changes: Any) -> "Resource":
        """Return a copy with the given metadata fields replaced."""

        return replace(self, metadata=replace(self.metadata, **changes))
