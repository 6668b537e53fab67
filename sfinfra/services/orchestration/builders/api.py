"""API gateway: stateless Deployment talking to the chain node over websocket."""

from kubernetes import client

from ....schemas import ApiConfig
from ..kubernetes.client import KubernetesClient
from ..kubernetes.helpers import (
    IMAGE_PULL_POLICY,
    ServiceData,
    container_port,
    create_deployment_manifest,
    create_object_metadata,
    create_pod_spec,
    env_from_config_map,
    tcp_probe,
)
from ..kubernetes.resource_kind import ResourceKind
from ..service_kind import ServiceKind
from .base import ManagedResourceSet, create_resource_set

NAME = ServiceKind.API.resource_name

DELETE_KINDS = [ResourceKind.SERVICE, ResourceKind.CONFIG_MAP, ResourceKind.DEPLOYMENT]


def _container(config: ApiConfig) -> client.V1Container:
    return client.V1Container(
        name=NAME,
        image=config.image,
        image_pull_policy=IMAGE_PULL_POLICY,
        env_from=[env_from_config_map(NAME)],
        # NODE_URL is expanded by the kubelet from the ConfigMap env
        args=["-l", config.listen_url, "-s", "$(NODE_URL)"],
        ports=[container_port(config.port)],
        liveness_probe=tcp_probe(config.port, period_seconds=15)
    )


def build(namespace: str, config: ApiConfig) -> ManagedResourceSet:
    return ManagedResourceSet(
        name=NAME,
        service_data=ServiceData.node_port(NAME, config.port),
        config_data={"NODE_URL": config.node_url},
        workload=create_deployment_manifest(
            create_object_metadata(NAME),
            create_pod_spec(containers=[_container(config)])
        )
    )


async def create(k8s: KubernetesClient, namespace: str, config: ApiConfig) -> client.V1Deployment:
    return await create_resource_set(k8s, namespace, build(namespace, config))
