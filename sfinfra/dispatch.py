"""
Action dispatch

Maps (action, service) to exactly one builder create, one ingress
aggregation or one deletion pass. Configuration is taken as already resolved;
a missing section fails here before the cluster is contacted.
"""

import logging
from enum import Enum
from typing import Any, List

from .errors import ConfigurationMissingError
from .schemas import Config
from .services.orchestration.builders import api, explorer, ingress, ipfs, keycloak, node, status
from .services.orchestration.chain_type import ChainType
from .services.orchestration.kubernetes.client import KubernetesClient
from .services.orchestration.kubernetes.primitives import delete_managed
from .services.orchestration.service_kind import ServiceKind

logger = logging.getLogger(__name__)


class CliAction(str, Enum):
    CREATE = "create"
    DELETE = "delete"

    def __str__(self) -> str:
        return self.value


BUILDERS = {
    ServiceKind.API: api,
    ServiceKind.EXPLORER: explorer,
    ServiceKind.IPFS: ipfs,
    ServiceKind.KEYCLOAK: keycloak,
    ServiceKind.NODE: node,
    ServiceKind.STATUS: status,
    ServiceKind.INGRESS: ingress,
}


def config_section(config: Config, service: ServiceKind) -> Any:
    """
    Get the configuration section for a service.

    Raises:
        ConfigurationMissingError: The section is absent from the config
    """
    section = getattr(config, service.value)
    if section is None:
        raise ConfigurationMissingError(str(service))
    return section


def ingress_services(config: Config) -> List[ServiceKind]:
    return [ServiceKind.from_string(s) for s in config_section(config, ServiceKind.INGRESS).services]


async def dispatch(
    k8s: KubernetesClient,
    config: Config,
    action: CliAction,
    service: ServiceKind,
    namespace: str,
    chain: ChainType = ChainType.LOCAL
) -> Any:
    """
    Run one action against one service.

    Args:
        k8s: Kubernetes client handle
        config: Resolved configuration tree
        action: create or delete
        service: Target service
        namespace: Namespace to act in
        chain: Chain type, only used when creating the node

    Returns:
        The created workload/Ingress for create, the deleted kinds for delete
    """
    section = config_section(config, service)
    builder = BUILDERS[service]
    logger.info(f"[DISPATCH] {action} {service} in namespace {namespace}")

    if action == CliAction.DELETE:
        return await delete_managed(k8s, namespace, builder.NAME, builder.DELETE_KINDS)

    if service == ServiceKind.INGRESS:
        return await ingress.create(k8s, namespace, section, ingress_services(config))
    if service == ServiceKind.NODE:
        return await node.create(k8s, namespace, section, chain)
    return await builder.create(k8s, namespace, section)
