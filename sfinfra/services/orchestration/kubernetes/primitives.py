"""
Single-object create helpers and the symmetric deletion pass.

Create helpers render one manifest and post it. Errors from the API server
(409 Conflict included) propagate untouched. delete_managed treats a missing
object as already deleted.
"""

import logging
from typing import Dict, Iterable, List

from kubernetes import client

from .client import KubernetesClient
from .helpers import (
    ServiceData,
    create_config_map_manifest,
    create_secret_manifest,
    create_service_manifest,
)
from .resource_kind import ResourceKind

logger = logging.getLogger(__name__)


async def create_service(
    k8s: KubernetesClient,
    namespace: str,
    metadata: client.V1ObjectMeta,
    service_data: ServiceData
) -> client.V1Service:
    return await k8s.create_service(create_service_manifest(metadata, service_data), namespace)


async def create_config_map(
    k8s: KubernetesClient,
    namespace: str,
    metadata: client.V1ObjectMeta,
    data: Dict[str, str]
) -> client.V1ConfigMap:
    return await k8s.create_config_map(create_config_map_manifest(metadata, data), namespace)


async def create_secret(
    k8s: KubernetesClient,
    namespace: str,
    metadata: client.V1ObjectMeta,
    data: Dict[str, str]
) -> client.V1Secret:
    return await k8s.create_secret(create_secret_manifest(metadata, data), namespace)


async def delete_managed(
    k8s: KubernetesClient,
    namespace: str,
    name: str,
    kinds: Iterable[ResourceKind]
) -> List[ResourceKind]:
    """
    Delete every object called `name` for the given kinds, in order.

    Objects that do not exist are skipped; only errors other than 404
    propagate. Pods are garbage-collected by their controller, so the order
    only affects what disappears first (traffic before workload).

    Args:
        k8s: Kubernetes client
        namespace: Namespace to delete from
        name: Shared name of the service's objects
        kinds: Ordered resource kinds to delete

    Returns:
        Kinds that were actually deleted
    """
    deleted: List[ResourceKind] = []

    for kind in kinds:
        existing = await kind.get_or_none(k8s, name, namespace)
        if existing is None:
            logger.debug(f"[K8S] {kind} {name} not found in {namespace}, skipping")
            continue

        if await kind.delete(k8s, name, namespace):
            logger.info(f"[K8S] Deleted {kind}: {name}")
            deleted.append(kind)

    return deleted
