"""
Kubernetes Client for SugarFunge Infrastructure

Thin async facade over the synchronous kubernetes API classes. One instance
is created per invocation and passed explicitly to every primitive and
builder; nothing here is cached at module level.

Create calls never fall back to patching: a second create for the same name
surfaces the cluster's 409 Conflict to the caller.
"""

import asyncio
import logging
from typing import Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from .resource_kind import ResourceKind

logger = logging.getLogger(__name__)


class KubernetesClient:
    """
    Namespaced create/read/delete access to the cluster.

    Blocking client calls run in a worker thread via asyncio.to_thread, so
    callers await them one after the other.
    """

    def __init__(self, context: Optional[str] = None):
        """
        Initialize Kubernetes client with in-cluster config or kubeconfig.

        Args:
            context: Kubeconfig context to use; when set, in-cluster
                configuration is not attempted
        """
        if context:
            self._load_kube_config(context)
        else:
            try:
                # Try in-cluster config first (running as a Job/Pod)
                config.load_incluster_config()
                logger.info("Loaded in-cluster Kubernetes configuration")
            except config.ConfigException:
                self._load_kube_config(None)

        # Initialize API clients
        self.apps_v1 = client.AppsV1Api()
        self.core_v1 = client.CoreV1Api()
        self.networking_v1 = client.NetworkingV1Api()

    @staticmethod
    def _load_kube_config(context: Optional[str]) -> None:
        try:
            config.load_kube_config(context=context)
            logger.info(f"Loaded kubeconfig (context: {context or 'current'})")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes config: {e}")
            raise RuntimeError("Cannot load Kubernetes configuration") from e

    async def _create(self, kind: ResourceKind, create_fn, body, namespace: str):
        name = body.metadata.name
        try:
            created = await asyncio.to_thread(
                create_fn,
                namespace=namespace,
                body=body
            )
        except ApiException as e:
            logger.error(f"[K8S] Failed to create {kind} {name} in {namespace}: {e.status} {e.reason}")
            raise
        logger.info(f"[K8S] ✅ Created {kind}: {name}")
        return created

    # =========================================================================
    # CORE V1
    # =========================================================================

    async def create_service(self, service: client.V1Service, namespace: str) -> client.V1Service:
        """Create a Service. Raises ApiException (409) if it already exists."""
        return await self._create(
            ResourceKind.SERVICE, self.core_v1.create_namespaced_service, service, namespace
        )

    async def create_config_map(self, config_map: client.V1ConfigMap, namespace: str) -> client.V1ConfigMap:
        """Create a ConfigMap. Raises ApiException (409) if it already exists."""
        return await self._create(
            ResourceKind.CONFIG_MAP, self.core_v1.create_namespaced_config_map, config_map, namespace
        )

    async def create_secret(self, secret: client.V1Secret, namespace: str) -> client.V1Secret:
        """Create a Secret. Raises ApiException (409) if it already exists."""
        return await self._create(
            ResourceKind.SECRET, self.core_v1.create_namespaced_secret, secret, namespace
        )

    async def read_service_or_none(self, name: str, namespace: str) -> Optional[client.V1Service]:
        return await ResourceKind.SERVICE.get_or_none(self, name, namespace)

    async def read_secret_or_none(self, name: str, namespace: str) -> Optional[client.V1Secret]:
        return await ResourceKind.SECRET.get_or_none(self, name, namespace)

    # =========================================================================
    # APPS V1
    # =========================================================================

    async def create_deployment(self, deployment: client.V1Deployment, namespace: str) -> client.V1Deployment:
        """Create a Deployment. Raises ApiException (409) if it already exists."""
        return await self._create(
            ResourceKind.DEPLOYMENT, self.apps_v1.create_namespaced_deployment, deployment, namespace
        )

    async def create_stateful_set(
        self,
        stateful_set: client.V1StatefulSet,
        namespace: str
    ) -> client.V1StatefulSet:
        """Create a StatefulSet. Raises ApiException (409) if it already exists."""
        return await self._create(
            ResourceKind.STATEFUL_SET, self.apps_v1.create_namespaced_stateful_set, stateful_set, namespace
        )

    # =========================================================================
    # NETWORKING V1
    # =========================================================================

    async def create_ingress(self, ingress: client.V1Ingress, namespace: str) -> client.V1Ingress:
        """Create an Ingress. Raises ApiException (409) if it already exists."""
        return await self._create(
            ResourceKind.INGRESS, self.networking_v1.create_namespaced_ingress, ingress, namespace
        )
