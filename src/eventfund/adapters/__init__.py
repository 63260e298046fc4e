"""Collaborator contracts and their in-memory implementations.

The web3-backed asset lives in eventfund.adapters.web3_asset and is
imported explicitly where a chain connection is wanted.
"""

from eventfund.adapters.interfaces import CappedTokenEngine, PoolEngine, SettlementAsset
from eventfund.adapters.memory import (
    InMemoryPoolEngine,
    InMemorySettlementAsset,
    InMemoryTokenEngine,
    pseudo_address,
)

__all__ = [
    "CappedTokenEngine",
    "PoolEngine",
    "SettlementAsset",
    "InMemoryPoolEngine",
    "InMemorySettlementAsset",
    "InMemoryTokenEngine",
    "pseudo_address",
]
