"""Collaborator contracts — what the funding core requires of the outside world.

The registry, issuer, fee splitter and bootstrapper never talk to a
concrete chain or pool implementation. They talk to these Protocols.
Swapping the in-memory engines for on-chain ones requires no change to
campaign accounting.

Amounts are integers in the collaborator's own base units.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from eventfund.models.liquidity import PoolKey


@runtime_checkable
class SettlementAsset(Protocol):
    """The stable asset contributions are paid in (e.g. USDC).

    transfer_from moves `amount` from `owner` to `recipient` and raises
    TransferFailed if the owner lacks balance or approval, or the
    recipient rejects the funds. The escrow account moves its own funds
    through the same call.
    """

    @property
    def token_id(self) -> str:
        ...

    def decimals(self) -> int:
        ...

    def balance_of(self, owner: str) -> int:
        ...

    def transfer_from(self, owner: str, recipient: str, amount: int) -> None:
        ...


@runtime_checkable
class CappedTokenEngine(Protocol):
    """Deploys and mints capped fungible tokens.

    mint raises CapExceeded past a cap once set_cap has been called;
    set_cap is callable once per token.
    """

    def deploy(self, name: str, symbol: str, decimals: int) -> str:
        ...

    def mint(self, token_id: str, to: str, amount: int) -> None:
        ...

    def set_cap(self, token_id: str, cap: int) -> None:
        ...

    def cap(self, token_id: str) -> int | None:
        ...

    def total_supply(self, token_id: str) -> int:
        ...

    def balance_of(self, token_id: str, owner: str) -> int:
        ...

    def decimals(self, token_id: str) -> int:
        ...


@runtime_checkable
class PoolEngine(Protocol):
    """Creates constant-product pools and accepts full-range liquidity.

    pool_account names the account that receives a pool's seed funds
    before add_full_range_liquidity is requested.
    """

    def pool_account(self, pool_id: str) -> str:
        ...

    def create_pool(
        self,
        base_token: str,
        quote_token: str,
        initial_tick: int,
        key: PoolKey,
    ) -> str:
        ...

    def add_full_range_liquidity(
        self,
        pool_id: str,
        base_amount: int,
        quote_amount: int,
    ) -> None:
        ...
