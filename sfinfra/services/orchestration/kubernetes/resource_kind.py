"""
Resource kinds managed by the orchestrator.

Each kind knows which API group serves it and which namespaced read/delete
calls operate on it, so the deletion pass can treat Services, ConfigMaps,
Secrets, workloads and Ingresses through one interface.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from kubernetes.client.rest import ApiException

if TYPE_CHECKING:
    from .client import KubernetesClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _KindOperations:
    api: str
    read: str
    delete: str


_OPERATIONS = {
    "Service": _KindOperations("core_v1", "read_namespaced_service", "delete_namespaced_service"),
    "ConfigMap": _KindOperations("core_v1", "read_namespaced_config_map", "delete_namespaced_config_map"),
    "Secret": _KindOperations("core_v1", "read_namespaced_secret", "delete_namespaced_secret"),
    "Deployment": _KindOperations("apps_v1", "read_namespaced_deployment", "delete_namespaced_deployment"),
    "StatefulSet": _KindOperations("apps_v1", "read_namespaced_stateful_set", "delete_namespaced_stateful_set"),
    "Ingress": _KindOperations("networking_v1", "read_namespaced_ingress", "delete_namespaced_ingress"),
}


class ResourceKind(str, Enum):
    """Closed set of object kinds a service can own."""

    SERVICE = "Service"
    CONFIG_MAP = "ConfigMap"
    SECRET = "Secret"
    DEPLOYMENT = "Deployment"
    STATEFUL_SET = "StatefulSet"
    INGRESS = "Ingress"

    @property
    def _ops(self) -> _KindOperations:
        return _OPERATIONS[self.value]

    async def get_or_none(self, k8s: "KubernetesClient", name: str, namespace: str) -> Optional[Any]:
        """Read the object, returning None when the cluster answers 404."""
        api = getattr(k8s, self._ops.api)
        try:
            return await asyncio.to_thread(
                getattr(api, self._ops.read),
                name=name,
                namespace=namespace
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise

    async def delete(self, k8s: "KubernetesClient", name: str, namespace: str) -> bool:
        """
        Delete the object.

        Returns:
            True if the object was deleted, False if it was already gone
        """
        api = getattr(k8s, self._ops.api)
        try:
            await asyncio.to_thread(
                getattr(api, self._ops.delete),
                name=name,
                namespace=namespace
            )
        except ApiException as e:
            if e.status == 404:
                return False
            raise
        return True

    def __str__(self) -> str:
        return self.value
