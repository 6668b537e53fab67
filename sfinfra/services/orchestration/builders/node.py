"""
Chain node

Runs as a StatefulSet behind a headless Service: peers and clients resolve
individual pods through DNS rather than a shared virtual IP.

In testnet mode the node needs a chain specification file at startup. It is
either fetched by an init container from an external URL into an empty-dir,
or mounted from a Secret created outside this tool. If neither source is
available the create fails before any object is posted.
"""

import logging
from typing import List, Optional

from kubernetes import client

from ....errors import DependencyMissingError
from ....schemas import (
    BootnodeDisabled,
    BootnodePeer,
    ChainSpecDisabled,
    ChainSpecExternal,
    ChainSpecPreexistingSecret,
    NodeConfig,
)
from ..chain_type import ChainType
from ..kubernetes.client import KubernetesClient
from ..kubernetes.helpers import (
    IMAGE_PULL_POLICY,
    ServiceData,
    container_port,
    create_object_metadata,
    create_pod_spec,
    create_stateful_set_manifest,
    empty_dir_volume,
    env_from_config_map,
    secret_volume,
)
from ..kubernetes.resource_kind import ResourceKind
from ..service_kind import ServiceKind
from .base import ManagedResourceSet, create_resource_set

logger = logging.getLogger(__name__)

NAME = ServiceKind.NODE.resource_name

# The chain spec Secret is never owned by this tool, so it is not deleted
DELETE_KINDS = [ResourceKind.SERVICE, ResourceKind.CONFIG_MAP, ResourceKind.STATEFUL_SET]

CHAINSPEC_VOLUME = f"{NAME}-config"
CHAINSPEC_DIR = "/chainspec"
FS_GROUP = 1000


def chainspec_secret_name(source: ChainSpecPreexistingSecret) -> str:
    return source.secret_name or NAME


def node_args(config: NodeConfig, chain: ChainType) -> List[str]:
    """Command line for the node binary."""
    args = [
        f"--{config.node_name}",
        f"--port={config.p2p_port}",
        f"--ws-port={config.ws_port}",
        "--unsafe-ws-external",
        "--unsafe-rpc-external",
        "--rpc-methods=Unsafe",
        "--rpc-cors=all",
        "--prometheus-external",
    ]

    bootnode = config.bootnode
    if isinstance(bootnode, BootnodePeer):
        args.append(f"--bootnodes={bootnode.multiaddr}")
    elif not isinstance(bootnode, BootnodeDisabled):
        raise TypeError(f"Unhandled bootnode variant: {bootnode!r}")

    if chain.requires_chainspec:
        args.append(f"--chain={CHAINSPEC_DIR}/{config.chainspec_file_name}")

    return args


def _chainspec_init_container(config: NodeConfig, source: ChainSpecExternal) -> client.V1Container:
    return client.V1Container(
        name=f"{NAME}-config",
        image=source.wget_image,
        image_pull_policy=IMAGE_PULL_POLICY,
        command=["wget", "-O", f"{CHAINSPEC_DIR}/{config.chainspec_file_name}", source.chainspec_url],
        volume_mounts=[client.V1VolumeMount(name=CHAINSPEC_VOLUME, mount_path=CHAINSPEC_DIR)]
    )


def _container(config: NodeConfig, chain: ChainType) -> client.V1Container:
    volume_mounts = None
    if chain.requires_chainspec:
        volume_mounts = [
            client.V1VolumeMount(
                name=CHAINSPEC_VOLUME,
                mount_path=f"{CHAINSPEC_DIR}/{config.chainspec_file_name}",
                sub_path=config.chainspec_file_name
            )
        ]

    return client.V1Container(
        name=NAME,
        image=config.image,
        image_pull_policy=IMAGE_PULL_POLICY,
        env_from=[env_from_config_map(NAME)],
        args=node_args(config, chain),
        ports=[
            container_port(config.ws_port, name="rpc-port"),
            container_port(config.p2p_port, name="p2p-port"),
            container_port(config.prometheus_port, name="prometheus-port"),
        ],
        volume_mounts=volume_mounts
    )


def _chainspec_sources(config: NodeConfig, chain: ChainType):
    """
    Init containers and volumes supplying the chain spec.

    Returns:
        Tuple of (init_containers, volumes); both empty outside testnet mode

    Raises:
        DependencyMissingError: Testnet mode with the chain spec disabled
    """
    if not chain.requires_chainspec:
        return [], []

    source = config.chainspec
    if isinstance(source, ChainSpecExternal):
        return [_chainspec_init_container(config, source)], [empty_dir_volume(CHAINSPEC_VOLUME)]
    if isinstance(source, ChainSpecPreexistingSecret):
        return [], [secret_volume(CHAINSPEC_VOLUME, chainspec_secret_name(source))]
    if isinstance(source, ChainSpecDisabled):
        raise DependencyMissingError(
            NAME,
            f"{NAME}: {chain} chain requires a chain spec, but neither an external URL "
            f"nor a pre-existing secret is configured"
        )
    raise TypeError(f"Unhandled chain spec variant: {source!r}")


def build(namespace: str, config: NodeConfig, chain: ChainType = ChainType.LOCAL) -> ManagedResourceSet:
    init_containers, volumes = _chainspec_sources(config, chain)

    pod_spec = create_pod_spec(
        containers=[_container(config, chain)],
        init_containers=init_containers,
        volumes=volumes,
        fs_group=FS_GROUP
    )

    return ManagedResourceSet(
        name=NAME,
        service_data=ServiceData.headless(NAME, config.ws_port),
        config_data={"CHAIN": "sugarfunge"},
        workload=create_stateful_set_manifest(create_object_metadata(NAME), pod_spec)
    )


async def check_dependencies(
    k8s: KubernetesClient,
    namespace: str,
    config: NodeConfig,
    chain: ChainType
) -> Optional[str]:
    """
    Verify external data the node needs is reachable before creating anything.

    Returns:
        Name of the pre-existing chain spec Secret, if one is used

    Raises:
        DependencyMissingError: Chain spec disabled, or its Secret is missing
    """
    if not chain.requires_chainspec:
        return None

    source = config.chainspec
    if isinstance(source, ChainSpecDisabled):
        # build() reports the same condition; fail here before any cluster call
        _chainspec_sources(config, chain)

    if isinstance(source, ChainSpecPreexistingSecret):
        secret_name = chainspec_secret_name(source)
        if await k8s.read_secret_or_none(secret_name, namespace) is None:
            raise DependencyMissingError(secret_name, f"The secret {secret_name} does not exist")
        logger.info(f"[BUILDER] Using chain spec from secret {secret_name}")
        return secret_name

    return None


async def create(
    k8s: KubernetesClient,
    namespace: str,
    config: NodeConfig,
    chain: ChainType = ChainType.LOCAL
) -> client.V1StatefulSet:
    await check_dependencies(k8s, namespace, config, chain)
    return await create_resource_set(k8s, namespace, build(namespace, config, chain))
