"""
Kubernetes Manifest Helpers

Pure functions that translate typed inputs into kubernetes client models.
Nothing in this module talks to the cluster, so every builder can render its
full resource set without side effects and the create path only has to post
what was rendered.

Key conventions:
- Every object of a service carries the service's fixed name
- The selector label {"app.kubernetes.io/name": <name>} binds Service,
  workload selector and pod template together
- Non-secret parameters go to a ConfigMap, credentials to a Secret, and
  containers consume both as whole-object env sources
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from kubernetes import client

SELECTOR_LABEL = "app.kubernetes.io/name"
MANAGED_BY = "sfctl"
PART_OF = "sugarfunge"
IMAGE_PULL_POLICY = "IfNotPresent"


# =============================================================================
# Labels and Metadata
# =============================================================================

def get_selector_labels(name: str) -> Dict[str, str]:
    """Labels used as the Service selector and the workload match_labels."""
    return {SELECTOR_LABEL: name}


def get_standard_labels(name: str) -> Dict[str, str]:
    """
    Get standard labels for a managed object.

    The selector label is always included so pod template labels are a
    superset of the workload selector.
    """
    return {
        **get_selector_labels(name),
        "app.kubernetes.io/managed-by": MANAGED_BY,
        "app.kubernetes.io/part-of": PART_OF,
    }


def create_object_metadata(name: str, annotations: Optional[Dict[str, str]] = None) -> client.V1ObjectMeta:
    return client.V1ObjectMeta(
        name=name,
        labels=get_standard_labels(name),
        annotations=annotations
    )


# =============================================================================
# Service, ConfigMap and Secret
# =============================================================================

@dataclass(frozen=True)
class ServiceData:
    """
    Port and exposure settings for a Service.

    Attributes:
        name: Service name the selector points at
        port: Port the Service listens on
        target_port: Container port (defaults to port)
        protocol: TCP or UDP
        port_name: Optional name for the port
        cluster_ip: "None" for a headless Service
        service_type: NodePort, ClusterIP, ... (None = cluster default)
    """

    name: str
    port: int
    target_port: Optional[int] = None
    protocol: str = "TCP"
    port_name: Optional[str] = None
    cluster_ip: Optional[str] = None
    service_type: Optional[str] = None

    @classmethod
    def node_port(cls, name: str, port: int) -> "ServiceData":
        return cls(name=name, port=port, service_type="NodePort")

    @classmethod
    def headless(cls, name: str, port: int) -> "ServiceData":
        # Pods are discovered per-pod through DNS, no virtual IP
        return cls(name=name, port=port, cluster_ip="None")


def create_service_manifest(metadata: client.V1ObjectMeta, service_data: ServiceData) -> client.V1Service:
    """
    Create Service manifest.

    Args:
        metadata: Object metadata (name and labels)
        service_data: Port and exposure settings

    Returns:
        V1Service manifest
    """
    return client.V1Service(
        api_version="v1",
        kind="Service",
        metadata=metadata,
        spec=client.V1ServiceSpec(
            selector=get_selector_labels(service_data.name),
            ports=[
                client.V1ServicePort(
                    name=service_data.port_name,
                    port=service_data.port,
                    target_port=service_data.target_port or service_data.port,
                    protocol=service_data.protocol
                )
            ],
            cluster_ip=service_data.cluster_ip,
            type=service_data.service_type
        )
    )


def create_config_map_manifest(metadata: client.V1ObjectMeta, data: Dict[str, str]) -> client.V1ConfigMap:
    return client.V1ConfigMap(
        api_version="v1",
        kind="ConfigMap",
        metadata=metadata,
        data=dict(data)
    )


def create_secret_manifest(metadata: client.V1ObjectMeta, data: Dict[str, str]) -> client.V1Secret:
    # string_data lets the API server do the base64 encoding
    return client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=metadata,
        type="Opaque",
        string_data=dict(data)
    )


# =============================================================================
# Container Building Blocks
# =============================================================================

def env_from_config_map(name: str) -> client.V1EnvFromSource:
    return client.V1EnvFromSource(
        config_map_ref=client.V1ConfigMapEnvSource(name=name, optional=False)
    )


def env_from_secret(name: str) -> client.V1EnvFromSource:
    return client.V1EnvFromSource(
        secret_ref=client.V1SecretEnvSource(name=name, optional=False)
    )


def container_port(port: int, name: Optional[str] = None, protocol: str = "TCP") -> client.V1ContainerPort:
    return client.V1ContainerPort(container_port=port, name=name, protocol=protocol)


def http_probe(
    path: str,
    port: int,
    initial_delay_seconds: int = 30,
    timeout_seconds: int = 5,
    period_seconds: Optional[int] = None
) -> client.V1Probe:
    return client.V1Probe(
        http_get=client.V1HTTPGetAction(path=path, port=port),
        initial_delay_seconds=initial_delay_seconds,
        timeout_seconds=timeout_seconds,
        period_seconds=period_seconds
    )


def tcp_probe(
    port: int,
    initial_delay_seconds: int = 30,
    timeout_seconds: int = 5,
    period_seconds: Optional[int] = None
) -> client.V1Probe:
    return client.V1Probe(
        tcp_socket=client.V1TCPSocketAction(port=port),
        initial_delay_seconds=initial_delay_seconds,
        timeout_seconds=timeout_seconds,
        period_seconds=period_seconds
    )


# =============================================================================
# Volumes
# =============================================================================

def empty_dir_volume(name: str) -> client.V1Volume:
    return client.V1Volume(name=name, empty_dir=client.V1EmptyDirVolumeSource())


def secret_volume(name: str, secret_name: str) -> client.V1Volume:
    return client.V1Volume(
        name=name,
        secret=client.V1SecretVolumeSource(secret_name=secret_name)
    )


def config_map_volume(name: str, config_map_name: str) -> client.V1Volume:
    return client.V1Volume(
        name=name,
        config_map=client.V1ConfigMapVolumeSource(name=config_map_name)
    )


# =============================================================================
# Workloads
# =============================================================================

def create_pod_spec(
    containers: List[client.V1Container],
    init_containers: Optional[List[client.V1Container]] = None,
    volumes: Optional[List[client.V1Volume]] = None,
    fs_group: Optional[int] = None
) -> client.V1PodSpec:
    """Pod spec; empty init container and volume lists are left unset."""
    pod_spec = client.V1PodSpec(
        containers=containers,
        init_containers=init_containers or None,
        volumes=volumes or None
    )

    if fs_group is not None:
        pod_spec.security_context = client.V1PodSecurityContext(fs_group=fs_group)

    return pod_spec


def _pod_template(name: str, pod_spec: client.V1PodSpec) -> client.V1PodTemplateSpec:
    return client.V1PodTemplateSpec(
        metadata=client.V1ObjectMeta(labels=get_standard_labels(name)),
        spec=pod_spec
    )


def create_deployment_manifest(
    metadata: client.V1ObjectMeta,
    pod_spec: client.V1PodSpec,
    replicas: int = 1
) -> client.V1Deployment:
    """
    Create Deployment manifest for a stateless service.

    The selector is derived from the object name, the same way the Service
    selector is, so the two can never drift apart.
    """
    return client.V1Deployment(
        api_version="apps/v1",
        kind="Deployment",
        metadata=metadata,
        spec=client.V1DeploymentSpec(
            replicas=replicas,
            selector=client.V1LabelSelector(match_labels=get_selector_labels(metadata.name)),
            template=_pod_template(metadata.name, pod_spec)
        )
    )


def create_stateful_set_manifest(
    metadata: client.V1ObjectMeta,
    pod_spec: client.V1PodSpec,
    replicas: int = 1
) -> client.V1StatefulSet:
    """
    Create StatefulSet manifest.

    service_name points at the governing Service of the same name, which is
    what gives each pod its stable DNS identity.
    """
    return client.V1StatefulSet(
        api_version="apps/v1",
        kind="StatefulSet",
        metadata=metadata,
        spec=client.V1StatefulSetSpec(
            replicas=replicas,
            service_name=metadata.name,
            selector=client.V1LabelSelector(match_labels=get_selector_labels(metadata.name)),
            template=_pod_template(metadata.name, pod_spec)
        )
    )
