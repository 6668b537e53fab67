"""Status dashboard: React app reading chain state from the node socket."""

from kubernetes import client

from ....schemas import StatusConfig
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

NAME = ServiceKind.STATUS.resource_name

DELETE_KINDS = [ResourceKind.SERVICE, ResourceKind.CONFIG_MAP, ResourceKind.DEPLOYMENT]


def build(namespace: str, config: StatusConfig) -> ManagedResourceSet:
    container = client.V1Container(
        name=NAME,
        image=config.image,
        image_pull_policy=IMAGE_PULL_POLICY,
        env_from=[env_from_config_map(NAME)],
        ports=[container_port(config.port)],
        readiness_probe=http_probe("/", config.port, initial_delay_seconds=10)
    )

    return ManagedResourceSet(
        name=NAME,
        service_data=ServiceData.node_port(NAME, config.port),
        config_data={
            "PORT": str(config.port),
            "REACT_APP_PROVIDER_SOCKET": config.node_url,
        },
        workload=create_deployment_manifest(
            create_object_metadata(NAME),
            create_pod_spec(containers=[container])
        )
    )


async def create(k8s: KubernetesClient, namespace: str, config: StatusConfig) -> client.V1Deployment:
    return await create_resource_set(k8s, namespace, build(namespace, config))
