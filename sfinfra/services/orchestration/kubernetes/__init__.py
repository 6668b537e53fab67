"""
Kubernetes Module

- KubernetesClient: explicit handle for namespaced create/read/delete calls
- helpers: pure manifest builders (labels, Service, ConfigMap, Secret, workloads)
- primitives: single-object create helpers and the deletion pass
- ResourceKind: kinds the deletion pass can look up and delete
"""

from .client import KubernetesClient
from .helpers import (
    ServiceData,
    get_selector_labels,
    get_standard_labels,
    create_object_metadata,
    create_service_manifest,
    create_config_map_manifest,
    create_secret_manifest,
    create_deployment_manifest,
    create_stateful_set_manifest,
)
from .primitives import create_service, create_config_map, create_secret, delete_managed
from .resource_kind import ResourceKind

__all__ = [
    # Client
    "KubernetesClient",
    # Manifest Helpers
    "ServiceData",
    "get_selector_labels",
    "get_standard_labels",
    "create_object_metadata",
    "create_service_manifest",
    "create_config_map_manifest",
    "create_secret_manifest",
    "create_deployment_manifest",
    "create_stateful_set_manifest",
    # Primitives
    "create_service",
    "create_config_map",
    "create_secret",
    "delete_managed",
    "ResourceKind",
]
