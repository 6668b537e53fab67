"""Block explorer: static web UI served from a Deployment."""

from kubernetes import client

from ....schemas import ExplorerConfig
from ..kubernetes.client import KubernetesClient
from ..kubernetes.helpers import (
    IMAGE_PULL_POLICY,
    ServiceData,
    container_port,
    create_deployment_manifest,
    create_object_metadata,
    create_pod_spec,
    env_from_config_map,
    http_probe,
)
from ..kubernetes.resource_kind import ResourceKind
from ..service_kind import ServiceKind
from .base import ManagedResourceSet, create_resource_set

NAME = ServiceKind.EXPLORER.resource_name

DELETE_KINDS = [ResourceKind.SERVICE, ResourceKind.CONFIG_MAP, ResourceKind.DEPLOYMENT]


def _container(config: ExplorerConfig) -> client.V1Container:
    return client.V1Container(
        name=NAME,
        image=config.image,
        image_pull_policy=IMAGE_PULL_POLICY,
        env_from=[env_from_config_map(NAME)],
        ports=[container_port(config.port)],
        liveness_probe=http_probe("/", config.port),
        readiness_probe=http_probe("/", config.port, initial_delay_seconds=5)
    )


def build(namespace: str, config: ExplorerConfig) -> ManagedResourceSet:
    return ManagedResourceSet(
        name=NAME,
        service_data=ServiceData.node_port(NAME, config.port),
        config_data={"WS_URL": config.ws_url},
        workload=create_deployment_manifest(
            create_object_metadata(NAME),
            create_pod_spec(containers=[_container(config)])
        )
    )


async def create(k8s: KubernetesClient, namespace: str, config: ExplorerConfig) -> client.V1Deployment:
    return await create_resource_set(k8s, namespace, build(namespace, config))
