"""
Ingress Aggregator

Fronts several services with one Ingress: one host rule and one TLS host per
service, a single shared TLS secret and a cert-manager issuer annotation.

Backend ports are read from the live Service objects, so every exposed
service must have been created first. A missing Service aborts the whole
aggregation before the Ingress is posted.
"""

import logging
from typing import List, Sequence, Tuple

from kubernetes import client

from ....errors import ConfigurationError, DependencyMissingError
from ....schemas import IngressConfig
from ..kubernetes.client import KubernetesClient
from ..kubernetes.helpers import create_object_metadata
from ..kubernetes.resource_kind import ResourceKind
from ..service_kind import ServiceKind

logger = logging.getLogger(__name__)

NAME = ServiceKind.INGRESS.resource_name

DELETE_KINDS = [ResourceKind.INGRESS]

CERT_ISSUER_ANNOTATION = "cert-manager.io/cluster-issuer"


def host_for(service: ServiceKind, base_domain: str) -> str:
    """
    Routing host for a service: sf-api + demo.example.com -> sf-api.demo.example.com
    """
    return f"{service.resource_name.lower()}.{base_domain}"


async def get_service_port(k8s: KubernetesClient, namespace: str, service: ServiceKind) -> int:
    """
    First port declared by a service's live Service object.

    Raises:
        DependencyMissingError: The Service has not been created
        ConfigurationError: The Service declares no ports
    """
    name = service.resource_name
    existing = await k8s.read_service_or_none(name, namespace)

    if existing is None:
        raise DependencyMissingError(
            name, f"{name}: service does not exist, failed to create ingress"
        )

    ports = existing.spec.ports if existing.spec else None
    if not ports:
        raise ConfigurationError(f"{name}: port for the service is not defined")

    return ports[0].port


def _rule(service: ServiceKind, port: int, base_domain: str) -> client.V1IngressRule:
    return client.V1IngressRule(
        host=host_for(service, base_domain),
        http=client.V1HTTPIngressRuleValue(
            paths=[
                client.V1HTTPIngressPath(
                    path="/",
                    path_type="Prefix",
                    backend=client.V1IngressBackend(
                        service=client.V1IngressServiceBackend(
                            name=service.resource_name,
                            port=client.V1ServiceBackendPort(number=port)
                        )
                    )
                )
            ]
        )
    )


def build(config: IngressConfig, backends: Sequence[Tuple[ServiceKind, int]]) -> client.V1Ingress:
    """
    Create the aggregated Ingress manifest.

    Args:
        config: Ingress settings (base domain, TLS secret, issuer, class)
        backends: (service, port) pairs in routing order

    Returns:
        V1Ingress manifest; an empty backend list yields no rules and no TLS hosts
    """
    rules: List[client.V1IngressRule] = []
    tls_hosts: List[str] = []

    for service, port in backends:
        rules.append(_rule(service, port, config.host))
        tls_hosts.append(host_for(service, config.host))

    return client.V1Ingress(
        api_version="networking.k8s.io/v1",
        kind="Ingress",
        metadata=create_object_metadata(
            NAME,
            annotations={CERT_ISSUER_ANNOTATION: config.tls_issuer}
        ),
        spec=client.V1IngressSpec(
            ingress_class_name=config.ingress_class,
            rules=rules,
            tls=[
                client.V1IngressTLS(
                    hosts=tls_hosts,
                    secret_name=config.tls_secret
                )
            ]
        )
    )


async def create(
    k8s: KubernetesClient,
    namespace: str,
    config: IngressConfig,
    services: Sequence[ServiceKind]
) -> client.V1Ingress:
    """
    Resolve every service's live port, then post one Ingress.

    Nothing is created if any lookup fails.
    """
    backends: List[Tuple[ServiceKind, int]] = []

    for service in services:
        if service == ServiceKind.INGRESS:
            raise ConfigurationError("The ingress cannot route to itself")
        if any(existing == service for existing, _ in backends):
            raise ConfigurationError(f"{service.resource_name} is listed more than once")
        port = await get_service_port(k8s, namespace, service)
        logger.info(f"[INGRESS] {service.resource_name} -> {host_for(service, config.host)}:{port}")
        backends.append((service, port))

    return await k8s.create_ingress(build(config, backends), namespace)
