"""Resource client backed by the Kubernetes custom objects API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from kubernetes import client as k8s_client
from kubernetes.client.exceptions import ApiException

from ..exceptions import ConflictError, ResourceNotFound
from ..resource import Resource, ResourceKey
from .base import ResourceClient

LOG = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404
HTTP_CONFLICT = 409


class KubernetesResourceClient(ResourceClient):
    """Replace custom objects of one group/version/plural.

    The API server performs the optimistic concurrency check itself: the body
    sent on replace carries ``metadata.resourceVersion`` and a stale value is
    answered with HTTP 409.
    """

    def __init__(
        self,
        group: str,
        version: str,
        plural: str,
        api: Optional[k8s_client.CustomObjectsApi] = None,
    ) -> None:
        self._group = group
        self._version = version
        self._plural = plural
        self._api = api or k8s_client.CustomObjectsApi()

    @property
    def api(self) -> k8s_client.CustomObjectsApi:
        return self._api

    def get(self, key: ResourceKey) -> Resource:
        try:
            if key.namespace:
                raw = self._api.get_namespaced_custom_object(
                    self._group, self._version, key.namespace, self._plural, key.name
                )
            else:
                raw = self._api.get_cluster_custom_object(
                    self._group, self._version, self._plural, key.name
                )
        except ApiException as exc:
            mapped = self._translate(exc, key, None)
            if mapped is None:
                raise
            raise mapped from exc
        return Resource.from_dict(raw)

    def replace(self, resource: Resource, expected_version: Optional[str]) -> Resource:
        if not expected_version:
            raise ValueError(f"refusing unversioned replace of {resource.key}")
        body: Dict[str, Any] = resource.to_dict()
        body["metadata"]["resourceVersion"] = expected_version

        key = resource.key
        LOG.debug("Replacing %s at version %s", key, expected_version)
        try:
            if key.namespace:
                raw = self._api.replace_namespaced_custom_object(
                    self._group, self._version, key.namespace, self._plural,
                    key.name, body,
                )
            else:
                raw = self._api.replace_cluster_custom_object(
                    self._group, self._version, self._plural, key.name, body,
                )
        except ApiException as exc:
            mapped = self._translate(exc, key, expected_version)
            if mapped is None:
                raise
            raise mapped from exc
        return Resource.from_dict(raw)

    @staticmethod
    def _translate(
        exc: ApiException, key: ResourceKey, expected_version: Optional[str]
    ) -> Optional[Exception]:
        if exc.status == HTTP_CONFLICT:
            return ConflictError(key, expected_version)
        if exc.status == HTTP_NOT_FOUND:
            return ResourceNotFound(key)
        return None
