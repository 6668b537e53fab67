"""
Managed Resource Set

What one service builder renders: a Service, a ConfigMap, an optional Secret
and one workload, all sharing the service's name and selector label.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

from kubernetes import client

from ..kubernetes.client import KubernetesClient
from ..kubernetes.helpers import (
    ServiceData,
    create_config_map_manifest,
    create_object_metadata,
    create_secret_manifest,
    create_service_manifest,
)
from ..kubernetes.primitives import create_config_map, create_secret, create_service

logger = logging.getLogger(__name__)

Workload = Union[client.V1Deployment, client.V1StatefulSet]


@dataclass(frozen=True)
class ManagedResourceSet:
    """
    Rendered objects for one service.

    Service, ConfigMap and Secret are kept as typed inputs and rendered on
    access, so building a set twice yields equal manifests.
    """

    name: str
    service_data: ServiceData
    config_data: Dict[str, str]
    workload: Workload
    secret_data: Optional[Dict[str, str]] = None

    @property
    def metadata(self) -> client.V1ObjectMeta:
        return create_object_metadata(self.name)

    @property
    def service(self) -> client.V1Service:
        return create_service_manifest(self.metadata, self.service_data)

    @property
    def config_map(self) -> client.V1ConfigMap:
        return create_config_map_manifest(self.metadata, self.config_data)

    @property
    def secret(self) -> Optional[client.V1Secret]:
        if self.secret_data is None:
            return None
        return create_secret_manifest(self.metadata, self.secret_data)

    @property
    def is_stateful(self) -> bool:
        return isinstance(self.workload, client.V1StatefulSet)


async def create_resource_set(
    k8s: KubernetesClient,
    namespace: str,
    resources: ManagedResourceSet
) -> Workload:
    """
    Post a rendered resource set: Service, ConfigMap, Secret, then workload.

    The first failing call aborts the sequence. Objects created before it
    stay in the cluster; deleting the service is the way to clean up.
    """
    logger.info(f"[BUILDER] Creating {resources.name} in {namespace}")

    await create_service(k8s, namespace, resources.metadata, resources.service_data)
    await create_config_map(k8s, namespace, resources.metadata, resources.config_data)

    if resources.secret_data is not None:
        await create_secret(k8s, namespace, resources.metadata, resources.secret_data)

    if resources.is_stateful:
        return await k8s.create_stateful_set(resources.workload, namespace)
    return await k8s.create_deployment(resources.workload, namespace)
