"""
Unit tests for the service builders' rendered resource sets.

Tests:
- Service selector equals workload selector for every service
- Builds are pure (same input, equal output)
- ConfigMap/Secret separation for the identity provider
- IPFS swarm key variants
- Chain node bootnode and chain spec variants
"""

import pytest

pytest.importorskip("kubernetes")

from kubernetes import client

from sfinfra.errors import DependencyMissingError
from sfinfra.schemas import (
    ApiConfig,
    BootnodePeer,
    ChainSpecDisabled,
    ChainSpecExternal,
    ChainSpecPreexistingSecret,
    IpfsConfig,
    NodeConfig,
)
from sfinfra.services.orchestration.builders import api, explorer, ipfs, keycloak, node, status
from sfinfra.services.orchestration.chain_type import ChainType

SWARM_KEY = "a" * 64


def _build_all(config):
    return {
        "api": api.build("default", config.api),
        "explorer": explorer.build("default", config.explorer),
        "ipfs": ipfs.build("default", config.ipfs),
        "keycloak": keycloak.build("default", config.keycloak),
        "node": node.build("default", config.node),
        "status": status.build("default", config.status),
    }


@pytest.mark.unit
@pytest.mark.kubernetes
class TestSelectorInvariant:

    @pytest.mark.parametrize("service", ["api", "explorer", "ipfs", "keycloak", "node", "status"])
    def test_service_selector_equals_workload_selector(self, default_config, service):
        resources = _build_all(default_config)[service]

        service_selector = resources.service.spec.selector
        workload_selector = resources.workload.spec.selector.match_labels
        pod_labels = resources.workload.spec.template.metadata.labels

        assert service_selector == workload_selector
        assert workload_selector.items() <= pod_labels.items()

    @pytest.mark.parametrize("service", ["api", "explorer", "ipfs", "keycloak", "node", "status"])
    def test_all_objects_share_name(self, default_config, service):
        resources = _build_all(default_config)[service]

        names = {
            resources.service.metadata.name,
            resources.config_map.metadata.name,
            resources.workload.metadata.name,
        }
        if resources.secret is not None:
            names.add(resources.secret.metadata.name)

        assert names == {f"sf-{service}"}

    def test_selector_holds_in_testnet_mode(self):
        config = NodeConfig(chainspec=ChainSpecExternal(chainspec_url="https://example.com/spec.json"))
        resources = node.build("default", config, ChainType.TESTNET)

        assert resources.service.spec.selector == resources.workload.spec.selector.match_labels


@pytest.mark.unit
@pytest.mark.kubernetes
class TestPureBuilds:

    @pytest.mark.parametrize("service", ["api", "explorer", "ipfs", "keycloak", "node", "status"])
    def test_building_twice_is_identical(self, default_config, service):
        first = _build_all(default_config)[service]
        second = _build_all(default_config)[service]

        assert first.service.to_dict() == second.service.to_dict()
        assert first.config_map.to_dict() == second.config_map.to_dict()
        assert first.workload.to_dict() == second.workload.to_dict()
        assert (first.secret is None) == (second.secret is None)

    def test_ipfs_with_key_is_identical(self):
        config = IpfsConfig(swarm_key=SWARM_KEY)

        assert ipfs.build("default", config).secret.to_dict() == ipfs.build("default", config).secret.to_dict()


@pytest.mark.unit
@pytest.mark.kubernetes
class TestStatelessServices:

    def test_api_container(self):
        resources = api.build("default", ApiConfig(port=4100, listen_url="http://0.0.0.0:4100"))
        container = resources.workload.spec.template.spec.containers[0]

        assert isinstance(resources.workload, client.V1Deployment)
        assert container.args == ["-l", "http://0.0.0.0:4100", "-s", "$(NODE_URL)"]
        assert container.ports[0].container_port == 4100
        assert container.env_from[0].config_map_ref.name == "sf-api"
        assert resources.config_data == {"NODE_URL": "ws://sf-node:9944"}
        assert resources.service.spec.type == "NodePort"
        assert resources.secret is None

    def test_explorer_env(self, default_config):
        resources = explorer.build("default", default_config.explorer)

        assert resources.config_data == {"WS_URL": "wss://node.sugarfunge.dev"}
        assert resources.workload.spec.template.spec.containers[0].readiness_probe.http_get.path == "/"

    def test_status_uses_configured_image_and_port(self, default_config):
        resources = status.build("default", default_config.status)
        container = resources.workload.spec.template.spec.containers[0]

        assert container.image == "sugarfunge.azurecr.io/status:latest"
        assert resources.config_data["PORT"] == "8000"
        assert resources.config_data["REACT_APP_PROVIDER_SOCKET"] == "wss://node.sugarfunge.dev"


@pytest.mark.unit
@pytest.mark.kubernetes
class TestKeycloak:

    def test_credentials_only_in_secret(self, default_config):
        resources = keycloak.build("default", default_config.keycloak)

        assert set(resources.secret_data) == {
            "KC_DB_USERNAME", "KC_DB_PASSWORD", "KEYCLOAK_ADMIN", "KEYCLOAK_ADMIN_PASSWORD"
        }
        assert not set(resources.secret_data) & set(resources.config_data)
        assert resources.config_data["KC_DB_URL_PORT"] == "5432"

    def test_env_from_both_sources(self, default_config):
        resources = keycloak.build("default", default_config.keycloak)
        env_from = resources.workload.spec.template.spec.containers[0].env_from

        assert env_from[0].config_map_ref.name == "sf-keycloak"
        assert env_from[1].secret_ref.name == "sf-keycloak"
        assert all(
            (source.config_map_ref or source.secret_ref).optional is False for source in env_from
        )

    def test_probes(self, default_config):
        container = keycloak.build("default", default_config.keycloak).workload.spec.template.spec.containers[0]

        assert container.liveness_probe.http_get.path == "/health"
        assert container.readiness_probe.http_get.path == "/realms/master"
        assert container.args == ["start-dev"]


@pytest.mark.unit
@pytest.mark.kubernetes
class TestIpfs:

    def test_without_swarm_key(self):
        resources = ipfs.build("default", IpfsConfig())
        pod_spec = resources.workload.spec.template.spec

        assert isinstance(resources.workload, client.V1StatefulSet)
        assert resources.secret is None
        assert [v.name for v in pod_spec.volumes] == ["sf-ipfs-data", "sf-ipfs-config"]
        assert len(pod_spec.init_containers) == 1
        assert "/swarm" not in [m.mount_path for m in pod_spec.init_containers[0].volume_mounts]

    def test_swarm_key_adds_one_secret_and_one_volume(self):
        without_key = ipfs.build("default", IpfsConfig())
        with_key = ipfs.build("default", IpfsConfig(swarm_key=SWARM_KEY))

        volumes_without = without_key.workload.spec.template.spec.volumes
        volumes_with = with_key.workload.spec.template.spec.volumes

        assert len(volumes_with) == len(volumes_without) + 1
        assert volumes_with[-1].secret.secret_name == "sf-ipfs"
        assert without_key.secret is None
        assert with_key.secret is not None

    def test_swarm_key_file_format(self):
        resources = ipfs.build("default", IpfsConfig(swarm_key=SWARM_KEY))

        assert resources.secret.string_data == {
            "swarm.key": f"/key/swarm/psk/1.0.0/\n/base16/\n{SWARM_KEY}"
        }
        mounts = resources.workload.spec.template.spec.init_containers[0].volume_mounts
        assert ("sf-ipfs-swarm", "/swarm") in [(m.name, m.mount_path) for m in mounts]

    def test_configure_script_in_config_map(self):
        resources = ipfs.build("default", IpfsConfig())
        init = resources.workload.spec.template.spec.init_containers[0]

        assert "configure-ipfs.sh" in resources.config_data
        assert "ipfs init" in resources.config_data["configure-ipfs.sh"]
        assert init.command == ["sh", "/custom/configure-ipfs.sh"]

    def test_service_exposes_api_port(self):
        resources = ipfs.build("default", IpfsConfig(api_port=5005))
        assert resources.service.spec.ports[0].port == 5005


@pytest.mark.unit
@pytest.mark.kubernetes
class TestChainNode:

    def test_local_mode_has_no_init_or_volumes(self):
        resources = node.build("default", NodeConfig(), ChainType.LOCAL)
        pod_spec = resources.workload.spec.template.spec

        assert pod_spec.init_containers is None
        assert pod_spec.volumes is None
        assert pod_spec.security_context.fs_group == 1000
        assert not any(arg.startswith("--chain=") for arg in pod_spec.containers[0].args)

    def test_local_mode_ignores_disabled_chainspec(self):
        resources = node.build("default", NodeConfig(chainspec=ChainSpecDisabled()), ChainType.LOCAL)
        assert resources.workload.spec.template.spec.init_containers is None

    def test_headless_service(self):
        resources = node.build("default", NodeConfig())

        assert resources.service.spec.cluster_ip == "None"
        assert resources.service.spec.ports[0].port == 9944
        assert isinstance(resources.workload, client.V1StatefulSet)

    def test_testnet_with_external_chainspec(self):
        config = NodeConfig(chainspec=ChainSpecExternal(chainspec_url="https://example.com/spec.json"))
        pod_spec = node.build("default", config, ChainType.TESTNET).workload.spec.template.spec

        init = pod_spec.init_containers[0]
        assert init.command == ["wget", "-O", "/chainspec/customSpec.json", "https://example.com/spec.json"]
        assert pod_spec.volumes[0].empty_dir is not None
        assert "--chain=/chainspec/customSpec.json" in pod_spec.containers[0].args
        mount = pod_spec.containers[0].volume_mounts[0]
        assert mount.mount_path == "/chainspec/customSpec.json"
        assert mount.sub_path == "customSpec.json"

    def test_testnet_with_preexisting_secret(self):
        config = NodeConfig(chainspec=ChainSpecPreexistingSecret(secret_name="chain-spec"))
        pod_spec = node.build("default", config, ChainType.TESTNET).workload.spec.template.spec

        assert pod_spec.init_containers is None
        assert pod_spec.volumes[0].secret.secret_name == "chain-spec"

    def test_testnet_with_chainspec_disabled_fails(self):
        with pytest.raises(DependencyMissingError):
            node.build("default", NodeConfig(chainspec=ChainSpecDisabled()), ChainType.TESTNET)

    @pytest.mark.parametrize(
        "peer, expected",
        [
            (BootnodePeer(dns_url="boot.example.com", peer_id="12D3"), "/dns4/boot.example.com/tcp/30334/p2p/12D3"),
            (BootnodePeer(dns_ip="10.0.0.5", p2p_port=30335, peer_id="12D3"), "/ip4/10.0.0.5/tcp/30335/p2p/12D3"),
            (BootnodePeer(peer_id="12D3"), "/ip4/127.0.0.1/tcp/30334/p2p/12D3"),
        ],
    )
    def test_bootnode_address(self, peer, expected):
        args = node.node_args(NodeConfig(bootnode=peer), ChainType.LOCAL)
        assert f"--bootnodes={expected}" in args

    def test_no_bootnode(self):
        args = node.node_args(NodeConfig(), ChainType.LOCAL)
        assert not any(arg.startswith("--bootnodes") for arg in args)
        assert args[0] == "--alice"
