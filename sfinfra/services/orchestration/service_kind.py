"""
Managed service kinds and their fixed resource names.

Every object a builder creates for a service is named after the service, so
the name doubles as the selector label value and the ingress backend.
"""

from enum import Enum


NAME_PREFIX = "sf-"


class ServiceKind(str, Enum):
    """Services this tool can create and delete."""

    API = "api"
    EXPLORER = "explorer"
    IPFS = "ipfs"
    KEYCLOAK = "keycloak"
    NODE = "node"
    STATUS = "status"
    INGRESS = "ingress"

    @classmethod
    def from_string(cls, value: str) -> "ServiceKind":
        value_lower = value.lower().strip()
        for kind in cls:
            if kind.value == value_lower:
                return kind
        valid = ", ".join([k.value for k in cls])
        raise ValueError(f"Invalid service: '{value}'. Valid services: {valid}")

    @property
    def resource_name(self) -> str:
        """Fixed name shared by every object of this service (e.g. sf-api)."""
        return f"{NAME_PREFIX}{self.value}"

    def __str__(self) -> str:
        return self.value
