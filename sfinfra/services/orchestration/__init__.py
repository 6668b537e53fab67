"""
Orchestration Module

Builds and tears down the SugarFunge services in one namespace:
- ServiceKind / ChainType: what to act on and how the node is configured
- kubernetes: client handle, manifest helpers, create/delete primitives
- builders: one module per service plus the ingress aggregator
"""

from .chain_type import ChainType
from .service_kind import ServiceKind

__all__ = [
    "ChainType",
    "ServiceKind",
]
