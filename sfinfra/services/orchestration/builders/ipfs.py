"""
Distributed storage node (IPFS)

Runs as a StatefulSet. A first-run script shipped in the ConfigMap is executed
by an init container before the daemon starts: it initializes the repo on the
shared data volume and, when a swarm key Secret is mounted, installs the key
to turn the node into a private swarm member. Without a key the script skips
that step and the node joins the public network.
"""

from typing import List

from kubernetes import client

from ....schemas import IpfsConfig, SwarmKeyDisabled, SwarmKeyPresent
from ..kubernetes.client import KubernetesClient
from ..kubernetes.helpers import (
    IMAGE_PULL_POLICY,
    ServiceData,
    config_map_volume,
    container_port,
    create_object_metadata,
    create_pod_spec,
    create_stateful_set_manifest,
    empty_dir_volume,
    secret_volume,
    tcp_probe,
)
from ..kubernetes.resource_kind import ResourceKind
from ..service_kind import ServiceKind
from .base import ManagedResourceSet, create_resource_set

NAME = ServiceKind.IPFS.resource_name

DELETE_KINDS = [
    ResourceKind.SERVICE,
    ResourceKind.CONFIG_MAP,
    ResourceKind.SECRET,
    ResourceKind.STATEFUL_SET,
]

DATA_VOLUME = f"{NAME}-data"
CONFIG_VOLUME = f"{NAME}-config"
SWARM_VOLUME = f"{NAME}-swarm"

DATA_PATH = "/data/ipfs"
CONFIG_PATH = "/custom"
SWARM_PATH = "/swarm"

CONFIGURE_SCRIPT_NAME = "configure-ipfs.sh"
SWARM_KEY_FILE = "swarm.key"

CONFIGURE_SCRIPT = f'''#!/bin/sh
set -e
set -x
user=ipfs

# First start with current persistent volume
[ -f $IPFS_PATH/version ] || {{
    echo "No ipfs repo found in $IPFS_PATH. Initializing..."
    ipfs init
    ipfs config Addresses.API /ip4/0.0.0.0/tcp/5001
    ipfs config Addresses.Gateway /ip4/0.0.0.0/tcp/8080
    ipfs config Datastore.StorageMax 5GB
    ipfs config --json API.HTTPHeaders.Access-Control-Allow-Origin '["*"]'
    ipfs config --json API.HTTPHeaders.Access-Control-Allow-Methods '["PUT", "POST"]'
    chown -R ipfs $IPFS_PATH
}}

# Check for the swarm key
[ -f $IPFS_PATH/{SWARM_KEY_FILE} ] || {{
    echo "No {SWARM_KEY_FILE} found, copying from mounted secret"
    [ -f {SWARM_PATH}/{SWARM_KEY_FILE} ] || {{
        echo "No {SWARM_KEY_FILE} found in IPFS secret... Exiting swarm configuration"
        exit 0
    }}
    echo "Removing all bootstrap nodes..."
    ipfs bootstrap rm --all
    cp -v {SWARM_PATH}/{SWARM_KEY_FILE} $IPFS_PATH/{SWARM_KEY_FILE}
    chmod 600 $IPFS_PATH/{SWARM_KEY_FILE}
    chown -R ipfs $IPFS_PATH
}}
'''


def format_swarm_key(key: str) -> str:
    """Render a hex pre-shared key in the go-ipfs swarm.key file format."""
    return f"/key/swarm/psk/1.0.0/\n/base16/\n{key}"


def _init_container(config: IpfsConfig) -> client.V1Container:
    volume_mounts = [
        client.V1VolumeMount(name=DATA_VOLUME, mount_path=DATA_PATH),
        client.V1VolumeMount(name=CONFIG_VOLUME, mount_path=CONFIG_PATH),
    ]

    if isinstance(config.swarm_key, SwarmKeyPresent):
        volume_mounts.append(client.V1VolumeMount(name=SWARM_VOLUME, mount_path=SWARM_PATH))

    return client.V1Container(
        name=f"configure-{NAME}",
        image=config.image,
        image_pull_policy=IMAGE_PULL_POLICY,
        command=["sh", f"{CONFIG_PATH}/{CONFIGURE_SCRIPT_NAME}"],
        volume_mounts=volume_mounts
    )


def _container(config: IpfsConfig) -> client.V1Container:
    return client.V1Container(
        name=NAME,
        image=config.image,
        image_pull_policy=IMAGE_PULL_POLICY,
        ports=[
            container_port(config.swarm_tcp_port, name="swarm-tcp"),
            container_port(config.swarm_udp_port, name="swarm-udp", protocol="UDP"),
            container_port(config.api_port, name="api"),
        ],
        volume_mounts=[client.V1VolumeMount(name=DATA_VOLUME, mount_path=DATA_PATH)],
        liveness_probe=tcp_probe(config.swarm_tcp_port, period_seconds=15)
    )


def _volumes(config: IpfsConfig) -> List[client.V1Volume]:
    volumes = [
        empty_dir_volume(DATA_VOLUME),
        config_map_volume(CONFIG_VOLUME, NAME),
    ]

    swarm_key = config.swarm_key
    if isinstance(swarm_key, SwarmKeyPresent):
        volumes.append(secret_volume(SWARM_VOLUME, NAME))
    elif not isinstance(swarm_key, SwarmKeyDisabled):
        raise TypeError(f"Unhandled swarm key variant: {swarm_key!r}")

    return volumes


def build(namespace: str, config: IpfsConfig) -> ManagedResourceSet:
    secret_data = None
    if isinstance(config.swarm_key, SwarmKeyPresent):
        secret_data = {SWARM_KEY_FILE: format_swarm_key(config.swarm_key.key)}

    pod_spec = create_pod_spec(
        containers=[_container(config)],
        init_containers=[_init_container(config)],
        volumes=_volumes(config)
    )

    return ManagedResourceSet(
        name=NAME,
        service_data=ServiceData.node_port(NAME, config.api_port),
        config_data={CONFIGURE_SCRIPT_NAME: CONFIGURE_SCRIPT},
        secret_data=secret_data,
        workload=create_stateful_set_manifest(create_object_metadata(NAME), pod_spec)
    )


async def create(k8s: KubernetesClient, namespace: str, config: IpfsConfig) -> client.V1StatefulSet:
    return await create_resource_set(k8s, namespace, build(namespace, config))
