"""
Test configuration and fixtures for pytest.

Provides an in-memory fake of the three kubernetes API groups the
orchestrator uses. Objects are keyed by (kind, namespace, name); creating an
existing object raises ApiException 409 and reading or deleting a missing one
raises ApiException 404, like the real API server.
"""

import re
from unittest.mock import patch

import pytest

from kubernetes.client.rest import ApiException

from sfinfra.config import get_settings
from sfinfra.schemas import Config
from sfinfra.services.orchestration.kubernetes.client import KubernetesClient

_METHOD = re.compile(r"^(create|read|delete)_namespaced_(\w+)$")


def pytest_configure(config):
    """Register custom markers and reset cached settings."""
    get_settings.cache_clear()

    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "kubernetes: mark test as exercising Kubernetes manifests or API calls")


class FakeCluster:
    """Namespaced object store shared by the fake API groups."""

    def __init__(self):
        self.objects = {}
        self.calls = []
        # (verb, kind) -> ApiException to raise instead of handling the call
        self.failures = {}

    def api(self):
        return _FakeApi(self)

    def get(self, kind: str, name: str, namespace: str = "default"):
        return self.objects.get((kind, namespace, name))

    def kinds(self, namespace: str = "default"):
        return sorted(kind for kind, ns, _ in self.objects if ns == namespace)

    def fail(self, verb: str, kind: str, status: int = 500, reason: str = "Internal Server Error"):
        self.failures[(verb, kind)] = ApiException(status=status, reason=reason)

    def handle(self, verb: str, kind: str, namespace: str, name: str = None, body=None):
        if body is not None:
            name = body.metadata.name
        self.calls.append((verb, kind, name))

        failure = self.failures.get((verb, kind))
        if failure is not None:
            raise failure

        key = (kind, namespace, name)
        if verb == "create":
            if key in self.objects:
                raise ApiException(status=409, reason="Conflict")
            self.objects[key] = body
            return body
        if key not in self.objects:
            raise ApiException(status=404, reason="Not Found")
        if verb == "read":
            return self.objects[key]
        return self.objects.pop(key)


class _FakeApi:
    def __init__(self, cluster: FakeCluster):
        self._cluster = cluster

    def __getattr__(self, attr):
        match = _METHOD.match(attr)
        if match is None:
            raise AttributeError(attr)
        verb, kind = match.groups()

        def call(namespace, name=None, body=None, **kwargs):
            return self._cluster.handle(verb, kind, namespace, name=name, body=body)

        return call


@pytest.fixture
def fake_cluster():
    return FakeCluster()


@pytest.fixture
def k8s(fake_cluster):
    """KubernetesClient wired to the fake cluster."""
    with patch("sfinfra.services.orchestration.kubernetes.client.config"):
        k8s = KubernetesClient()
    k8s.core_v1 = fake_cluster.api()
    k8s.apps_v1 = fake_cluster.api()
    k8s.networking_v1 = fake_cluster.api()
    return k8s


@pytest.fixture
def default_config():
    return Config.default()
