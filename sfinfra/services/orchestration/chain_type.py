"""
Chain Type Enumeration

Selects how the chain node is configured: a self-contained local chain or a
testnet node that loads its chain specification from external data.
"""

from enum import Enum


class ChainType(str, Enum):
    """
    Supported chain types for the chain node.

    Attributes:
        LOCAL: Development chain built into the node binary
        TESTNET: Shared testnet, requires a chain spec file at startup
    """

    LOCAL = "local"
    TESTNET = "testnet"

    @classmethod
    def from_string(cls, value: str) -> "ChainType":
        """
        Convert a string to ChainType enum.

        Raises:
            ValueError: If value is not a valid chain type
        """
        value_lower = value.lower().strip()
        for chain in cls:
            if chain.value == value_lower:
                return chain
        valid = ", ".join([c.value for c in cls])
        raise ValueError(f"Invalid chain type: '{value}'. Valid chain types: {valid}")

    @property
    def requires_chainspec(self) -> bool:
        return self == ChainType.TESTNET

    def __str__(self) -> str:
        return self.value
