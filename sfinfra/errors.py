"""
Orchestration errors.

Cluster API failures are not wrapped here: the kubernetes client's
ApiException reaches the caller unchanged. These classes cover the failures
the orchestrator detects on its own before (or instead of) talking to the
cluster.
"""

from typing import Optional


class OrchestrationError(Exception):
    """Base class for every error raised by the orchestrator itself."""


class ConfigurationError(OrchestrationError):
    """The resolved configuration cannot describe a working resource."""


class ConfigurationMissingError(ConfigurationError):
    """A configuration section required by the requested action is absent."""

    def __init__(self, service: str, message: Optional[str] = None):
        self.service = service
        super().__init__(message or f"failed to load config for {service}")


class DependencyMissingError(OrchestrationError):
    """
    A resource the operation depends on does not exist.

    Raised when the ingress targets a Service that was never created, or when
    a workload needs external data (chain spec) that was not supplied.
    """

    def __init__(self, resource: str, message: Optional[str] = None):
        self.resource = resource
        super().__init__(message or f"{resource}: required resource does not exist")
