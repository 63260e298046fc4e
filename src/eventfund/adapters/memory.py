"""In-memory collaborators — settlement asset, capped-token engine, pool engine.

These back the test suite and the CLI simulator. They follow the same
contracts as their on-chain counterparts: allowances gate transfer_from,
caps gate mint, and pools are keyed by PoolKey.
"""

from __future__ import annotations

import hashlib
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple

from eventfund.errors import CapExceeded, TransferFailed
from eventfund.models.liquidity import FeeAdjustment, PoolKey


def pseudo_address(seed: str) -> str:
    """Deterministic 20-byte hex address for a seed string."""
    return "0x" + hashlib.sha256(seed.encode("utf-8")).hexdigest()[:40]


class InMemorySettlementAsset:
    """ERC-20-like stable asset with allowances.

    The operator (the registry's escrow account) spends its own balance
    freely and spends other owners' balances against their allowance to
    it. Recipients in the rejecting set refuse incoming transfers, which
    is how tests model a backer address that cannot receive funds.
    """

    def __init__(
        self,
        operator: str,
        decimals: int = 6,
        token_id: Optional[str] = None,
    ) -> None:
        self._operator = operator
        self._decimals = decimals
        self._token_id = token_id or pseudo_address(f"settlement:{operator}")
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._rejecting: Set[str] = set()
        self._lock = threading.Lock()

    @property
    def token_id(self) -> str:
        return self._token_id

    @property
    def operator(self) -> str:
        return self._operator

    def decimals(self) -> int:
        return self._decimals

    def balance_of(self, owner: str) -> int:
        return self._balances.get(owner, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def mint(self, owner: str, amount: int) -> None:
        """Credit test funds to an owner."""
        with self._lock:
            self._balances[owner] = self._balances.get(owner, 0) + amount

    def approve(self, owner: str, spender: str, amount: int) -> None:
        with self._lock:
            self._allowances[(owner, spender)] = amount

    def reject_transfers_to(self, recipient: str) -> None:
        self._rejecting.add(recipient)

    def accept_transfers_to(self, recipient: str) -> None:
        self._rejecting.discard(recipient)

    def transfer_from(self, owner: str, recipient: str, amount: int) -> None:
        with self._lock:
            if amount <= 0:
                raise TransferFailed(
                    f"Transfer amount must be positive, got {amount}",
                    recipient=recipient, amount=amount,
                )
            if recipient in self._rejecting:
                raise TransferFailed(
                    f"Recipient {recipient} rejected transfer of {amount}",
                    recipient=recipient, amount=amount,
                )
            balance = self._balances.get(owner, 0)
            if balance < amount:
                raise TransferFailed(
                    f"Insufficient balance for {owner}: has {balance}, needs {amount}",
                    recipient=recipient, amount=amount,
                )
            if owner != self._operator:
                allowed = self._allowances.get((owner, self._operator), 0)
                if allowed < amount:
                    raise TransferFailed(
                        f"Insufficient allowance from {owner}: "
                        f"approved {allowed}, needs {amount}",
                        recipient=recipient, amount=amount,
                    )
                self._allowances[(owner, self._operator)] = allowed - amount
            self._balances[owner] = balance - amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount


@dataclass
class _TokenState:
    name: str
    symbol: str
    decimals: int
    total_supply: int = 0
    cap: Optional[int] = None
    balances: Dict[str, int] = field(default_factory=dict)


class InMemoryTokenEngine:
    """Capped fungible token factory."""

    def __init__(self) -> None:
        self._tokens: Dict[str, _TokenState] = {}
        self._lock = threading.Lock()

    def deploy(self, name: str, symbol: str, decimals: int) -> str:
        with self._lock:
            token_id = pseudo_address(f"token:{len(self._tokens)}:{name}:{symbol}")
            self._tokens[token_id] = _TokenState(name=name, symbol=symbol, decimals=decimals)
            return token_id

    def mint(self, token_id: str, to: str, amount: int) -> None:
        with self._lock:
            token = self._get(token_id)
            if token.cap is not None and token.total_supply + amount > token.cap:
                raise CapExceeded(
                    f"Mint of {amount} exceeds cap {token.cap} "
                    f"(supply {token.total_supply}) for {token.symbol}"
                )
            token.total_supply += amount
            token.balances[to] = token.balances.get(to, 0) + amount

    def set_cap(self, token_id: str, cap: int) -> None:
        with self._lock:
            token = self._get(token_id)
            if token.cap is not None:
                raise ValueError(f"Cap already set for {token.symbol}: {token.cap}")
            if cap < token.total_supply:
                raise ValueError(
                    f"Cap {cap} is below current supply {token.total_supply}"
                )
            token.cap = cap

    def cap(self, token_id: str) -> Optional[int]:
        return self._get(token_id).cap

    def total_supply(self, token_id: str) -> int:
        return self._get(token_id).total_supply

    def balance_of(self, token_id: str, owner: str) -> int:
        return self._get(token_id).balances.get(owner, 0)

    def decimals(self, token_id: str) -> int:
        return self._get(token_id).decimals

    def symbol(self, token_id: str) -> str:
        return self._get(token_id).symbol

    def _get(self, token_id: str) -> _TokenState:
        token = self._tokens.get(token_id)
        if token is None:
            raise ValueError(f"Unknown token: {token_id}")
        return token


@dataclass
class InMemoryPool:
    key: PoolKey
    base_token: str
    quote_token: str
    initial_tick: int
    base_reserve: int = 0
    quote_reserve: int = 0
    adjustments: List[FeeAdjustment] = field(default_factory=list)

    @property
    def token_is_currency0(self) -> bool:
        return self.key.currency0 == self.base_token


AfterSwapHook = Callable[[int, int, bool], FeeAdjustment]


class InMemoryPoolEngine:
    """Pool registry that forwards swap deltas to a post-trade hook.

    simulate_swap does no pricing; it exists to deliver signed trader
    deltas to the hook the way a real pool engine does after a swap.
    """

    def __init__(self, after_swap: Optional[AfterSwapHook] = None) -> None:
        self._pools: Dict[str, InMemoryPool] = {}
        self._after_swap = after_swap

    def create_pool(
        self,
        base_token: str,
        quote_token: str,
        initial_tick: int,
        key: PoolKey,
    ) -> str:
        pool_id = key.pool_id
        if pool_id in self._pools:
            raise ValueError(f"Pool already exists: {pool_id}")
        self._pools[pool_id] = InMemoryPool(
            key=key,
            base_token=base_token,
            quote_token=quote_token,
            initial_tick=initial_tick,
        )
        return pool_id

    def pool_account(self, pool_id: str) -> str:
        self.get_pool(pool_id)
        return pool_id

    def add_full_range_liquidity(
        self,
        pool_id: str,
        base_amount: int,
        quote_amount: int,
    ) -> None:
        pool = self.get_pool(pool_id)
        pool.base_reserve += base_amount
        pool.quote_reserve += quote_amount

    def get_pool(self, pool_id: str) -> InMemoryPool:
        pool = self._pools.get(pool_id)
        if pool is None:
            raise ValueError(f"Unknown pool: {pool_id}")
        return pool

    def simulate_swap(
        self,
        pool_id: str,
        amount0_delta: int,
        amount1_delta: int,
    ) -> Optional[FeeAdjustment]:
        """Deliver a completed trade's deltas to the post-trade hook."""
        pool = self.get_pool(pool_id)
        if self._after_swap is None:
            return None
        adjustment = self._after_swap(amount0_delta, amount1_delta, pool.token_is_currency0)
        pool.adjustments.append(adjustment)
        return adjustment
