"""
Identity provider (Keycloak)

Database location and feature flags go to the ConfigMap; database and admin
credentials go to a separate Secret. The container reads both as env.
"""

from kubernetes import client

from ....schemas import KeycloakConfig
from ..kubernetes.client import KubernetesClient
from ..kubernetes.helpers import (
    IMAGE_PULL_POLICY,
    ServiceData,
    container_port,
    create_deployment_manifest,
    create_object_metadata,
    create_pod_spec,
    env_from_config_map,
    env_from_secret,
    http_probe,
)
from ..kubernetes.resource_kind import ResourceKind
from ..service_kind import ServiceKind
from .base import ManagedResourceSet, create_resource_set

NAME = ServiceKind.KEYCLOAK.resource_name

DELETE_KINDS = [
    ResourceKind.SERVICE,
    ResourceKind.CONFIG_MAP,
    ResourceKind.SECRET,
    ResourceKind.DEPLOYMENT,
]


def _config_data(config: KeycloakConfig) -> dict:
    db = config.db_config
    return {
        "KC_DB": "postgres",
        "KC_HEALTH_ENABLED": "true",
        "KC_DB_URL_HOST": db.db_address,
        "KC_DB_URL_DATABASE": db.db_database,
        "KC_DB_SCHEMA": db.db_schema,
        "KC_DB_URL_PORT": str(db.db_port),
    }


def _secret_data(config: KeycloakConfig) -> dict:
    return {
        "KC_DB_USERNAME": config.db_config.db_user,
        "KC_DB_PASSWORD": config.db_config.db_password,
        "KEYCLOAK_ADMIN": config.admin_username,
        "KEYCLOAK_ADMIN_PASSWORD": config.admin_password,
    }


def _container(config: KeycloakConfig) -> client.V1Container:
    return client.V1Container(
        name=NAME,
        image=config.image,
        image_pull_policy=IMAGE_PULL_POLICY,
        env_from=[env_from_config_map(NAME), env_from_secret(NAME)],
        args=["start-dev"],
        ports=[container_port(config.port)],
        liveness_probe=http_probe("/health", config.port),
        readiness_probe=http_probe("/realms/master", config.port)
    )


def build(namespace: str, config: KeycloakConfig) -> ManagedResourceSet:
    return ManagedResourceSet(
        name=NAME,
        service_data=ServiceData.node_port(NAME, config.port),
        config_data=_config_data(config),
        secret_data=_secret_data(config),
        workload=create_deployment_manifest(
            create_object_metadata(NAME),
            create_pod_spec(containers=[_container(config)])
        )
    )


async def create(k8s: KubernetesClient, namespace: str, config: KeycloakConfig) -> client.V1Deployment:
    return await create_resource_set(k8s, namespace, build(namespace, config))
