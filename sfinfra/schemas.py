from typing import Annotated, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# Service sections
# =============================================================================

class ApiConfig(_Frozen):
    image: str = "sugarfunge.azurecr.io/api:latest"
    port: int = 4000
    listen_url: str = "http://0.0.0.0:4000"
    node_url: str = "ws://sf-node:9944"


class ExplorerConfig(_Frozen):
    image: str = "sugarfunge.azurecr.io/explorer:latest"
    port: int = 80
    ws_url: str = "wss://node.sugarfunge.dev"


class StatusConfig(_Frozen):
    image: str = "sugarfunge.azurecr.io/status:latest"
    port: int = 8000
    node_url: str = "wss://node.sugarfunge.dev"


class KeycloakDatabaseConfig(_Frozen):
    db_database: str = "keycloak"
    db_user: str = "keycloak"
    db_password: str = "keycloak"
    db_address: str = "sf-db-postgresql"
    db_port: int = 5432
    db_schema: str = "public"


class KeycloakConfig(_Frozen):
    image: str = "quay.io/keycloak/keycloak:18.0.0"
    port: int = 8080
    admin_username: str = "keycloak"
    admin_password: str = "keycloak"
    db_config: KeycloakDatabaseConfig = Field(default_factory=KeycloakDatabaseConfig)


# -----------------------------------------------------------------------------
# IPFS swarm key: disabled or present
# -----------------------------------------------------------------------------

class SwarmKeyDisabled(_Frozen):
    mode: Literal["disabled"] = "disabled"


class SwarmKeyPresent(_Frozen):
    mode: Literal["present"] = "present"
    key: str = Field(min_length=1)


SwarmKey = Annotated[Union[SwarmKeyDisabled, SwarmKeyPresent], Field(discriminator="mode")]


class IpfsConfig(_Frozen):
    image: str = "ipfs/go-ipfs:v0.13.0"
    swarm_tcp_port: int = 4001
    swarm_udp_port: int = 4002
    api_port: int = 5001
    swarm_key: SwarmKey = Field(default_factory=SwarmKeyDisabled)

    @field_validator("swarm_key", mode="before")
    @classmethod
    def coerce_swarm_key(cls, v):
        # Accept the short forms: `swarm_key: null` and `swarm_key: <hex>`
        if v is None:
            return {"mode": "disabled"}
        if isinstance(v, str):
            return {"mode": "present", "key": v.strip()}
        return v


# -----------------------------------------------------------------------------
# Chain node: bootnode peer and chain spec source
# -----------------------------------------------------------------------------

class BootnodeDisabled(_Frozen):
    kind: Literal["disabled"] = "disabled"


class BootnodePeer(_Frozen):
    kind: Literal["peer"] = "peer"
    dns_url: Optional[str] = None
    dns_ip: Optional[str] = None
    p2p_port: int = 30334
    peer_id: str = Field(validation_alias=AliasChoices("peer_id", "private_key"))

    @property
    def multiaddr(self) -> str:
        """libp2p address of the peer, preferring the DNS name over the IP."""
        if self.dns_url:
            return f"/dns4/{self.dns_url}/tcp/{self.p2p_port}/p2p/{self.peer_id}"
        if self.dns_ip:
            return f"/ip4/{self.dns_ip}/tcp/{self.p2p_port}/p2p/{self.peer_id}"
        return f"/ip4/127.0.0.1/tcp/{self.p2p_port}/p2p/{self.peer_id}"


Bootnode = Annotated[Union[BootnodeDisabled, BootnodePeer], Field(discriminator="kind")]


class ChainSpecDisabled(_Frozen):
    source: Literal["disabled"] = "disabled"


class ChainSpecExternal(_Frozen):
    source: Literal["external"] = "external"
    chainspec_url: str
    wget_image: str = "busybox:1.35"


class ChainSpecPreexistingSecret(_Frozen):
    source: Literal["secret"] = "secret"
    # Empty means "the secret named after the node itself"
    secret_name: str = ""


ChainSpecSource = Annotated[
    Union[ChainSpecDisabled, ChainSpecExternal, ChainSpecPreexistingSecret],
    Field(discriminator="source"),
]


class NodeConfig(_Frozen):
    image: str = "sugarfunge.azurecr.io/node:latest"
    ws_port: int = 9944
    p2p_port: int = 30334
    prometheus_port: int = 9090
    node_name: str = "alice"
    chainspec_file_name: str = "customSpec.json"
    chainspec: ChainSpecSource = Field(default_factory=ChainSpecPreexistingSecret)
    bootnode: Bootnode = Field(default_factory=BootnodeDisabled)

    @field_validator("bootnode", mode="before")
    @classmethod
    def coerce_bootnode(cls, v):
        if v is None:
            return {"kind": "disabled"}
        if isinstance(v, dict) and "kind" not in v:
            return {"kind": "peer", **v}
        return v

    @field_validator("chainspec", mode="before")
    @classmethod
    def coerce_chainspec(cls, v):
        if v is None:
            return {"source": "disabled"}
        if isinstance(v, dict) and "source" not in v and "chainspec_url" in v:
            return {"source": "external", **v}
        return v


# =============================================================================
# Ingress
# =============================================================================

DEFAULT_INGRESS_SERVICES = ["api", "explorer", "ipfs", "keycloak", "node", "status"]


class IngressConfig(_Frozen):
    host: str = "demo.sugarfunge.dev"
    tls_secret: str = "sf-ingress-tls"
    tls_issuer: str = "letsencrypt-staging"
    ingress_class: str = "nginx"
    services: tuple[str, ...] = tuple(DEFAULT_INGRESS_SERVICES)

    @field_validator("services")
    @classmethod
    def validate_services(cls, v):
        unknown = [s for s in v if s not in DEFAULT_INGRESS_SERVICES]
        if unknown:
            raise ValueError(
                f"Cannot expose {', '.join(unknown)} through the ingress. "
                f"Valid services: {', '.join(DEFAULT_INGRESS_SERVICES)}"
            )
        duplicates = sorted({s for s in v if v.count(s) > 1})
        if duplicates:
            raise ValueError(f"Services listed more than once: {', '.join(duplicates)}")
        return v


# =============================================================================
# Root
# =============================================================================

class Config(_Frozen):
    api: Optional[ApiConfig] = None
    explorer: Optional[ExplorerConfig] = None
    ipfs: Optional[IpfsConfig] = None
    keycloak: Optional[KeycloakConfig] = None
    node: Optional[NodeConfig] = None
    status: Optional[StatusConfig] = None
    ingress: Optional[IngressConfig] = None

    @classmethod
    def default(cls) -> "Config":
        return cls(
            api=ApiConfig(),
            explorer=ExplorerConfig(),
            ipfs=IpfsConfig(),
            keycloak=KeycloakConfig(),
            node=NodeConfig(),
            status=StatusConfig(),
            ingress=IngressConfig(),
        )
