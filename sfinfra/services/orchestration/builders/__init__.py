"""
Service Builders

Each module exposes NAME, DELETE_KINDS, a pure build() and an async create().
The ingress module aggregates the others and must be created last.
"""

from .base import ManagedResourceSet, create_resource_set

__all__ = ["ManagedResourceSet", "create_resource_set"]
