"""Liquidity models — pool keys, seed amounts, and trade fee adjustments."""

from __future__ import annotations

import enum
import hashlib
import json
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PoolKey:
    """Identity of a constant-product pool.

    currency0 sorts before currency1 (case-insensitive address order),
    matching how pool engines key their pools.
    """
    currency0: str
    currency1: str
    fee: int
    tick_spacing: int
    hooks: str

    @property
    def pool_id(self) -> str:
        """Deterministic id derived from the canonical key encoding."""
        canonical = json.dumps(
            {
                "currency0": self.currency0.lower(),
                "currency1": self.currency1.lower(),
                "fee": self.fee,
                "tick_spacing": self.tick_spacing,
                "hooks": self.hooks.lower(),
            },
            sort_keys=True,
        ).encode("utf-8")
        return f"pool_{hashlib.sha256(canonical).hexdigest()[:40]}"

    def to_dict(self) -> dict:
        return {
            "currency0": self.currency0,
            "currency1": self.currency1,
            "fee": self.fee,
            "tick_spacing": self.tick_spacing,
            "hooks": self.hooks,
        }


@dataclass(frozen=True)
class PoolSeed:
    """Inputs for seeding a full-range pool at finalization.

    base_amount is in receipt-token base units, quote_amount in
    settlement-asset base units. raw_price is quote units per token unit;
    initial_tick and sqrt_price_x96 are in the pool's currency0/currency1
    orientation.
    """
    excess: int
    price_ratio: Decimal
    base_amount: int
    quote_amount: int
    raw_price: Decimal
    key: PoolKey
    token_is_currency0: bool
    initial_tick: int
    sqrt_price_x96: int
    tick_lower: int
    tick_upper: int
    liquidity: int

    @property
    def is_empty(self) -> bool:
        return self.base_amount == 0 or self.quote_amount == 0

    @property
    def base_token(self) -> str:
        return self.key.currency0 if self.token_is_currency0 else self.key.currency1

    @property
    def quote_token(self) -> str:
        return self.key.currency1 if self.token_is_currency0 else self.key.currency0

    def to_dict(self) -> dict:
        return {
            "excess": self.excess,
            "price_ratio": str(self.price_ratio),
            "base_amount": self.base_amount,
            "quote_amount": self.quote_amount,
            "raw_price": str(self.raw_price),
            "pool_key": self.key.to_dict(),
            "token_is_currency0": self.token_is_currency0,
            "initial_tick": self.initial_tick,
            "sqrt_price_x96": self.sqrt_price_x96,
            "tick_lower": self.tick_lower,
            "tick_upper": self.tick_upper,
            "liquidity": self.liquidity,
        }


class TradeDirection(str, enum.Enum):
    """Direction of a completed trade from the trader's point of view."""
    BUY = "buy"
    SELL = "sell"


class ClassificationRule(str, enum.Enum):
    """Which branch of the trade classifier decided the direction."""
    TOKEN_RECEIVED = "token_received"
    TOKEN_PAID = "token_paid"
    BOTH_LEGS_NEGATIVE = "both_legs_negative"
    NO_TOKEN_FLOW = "no_token_flow"


@dataclass(frozen=True)
class TradeClassification:
    direction: TradeDirection
    rule: ClassificationRule


@dataclass(frozen=True)
class FeeAdjustment:
    """Post-trade fee adjustment in pips (1_000_000 pips = 100%)."""
    direction: TradeDirection
    rule: ClassificationRule
    delta_pips: int
    base_fee_pips: int
    effective_fee_pips: int

    @property
    def effective_rate(self) -> Decimal:
        return Decimal(self.effective_fee_pips) / Decimal(1_000_000)

    def to_dict(self) -> dict:
        return {
            "direction": self.direction.value,
            "rule": self.rule.value,
            "delta_pips": self.delta_pips,
            "base_fee_pips": self.base_fee_pips,
            "effective_fee_pips": self.effective_fee_pips,
            "effective_rate": str(self.effective_rate),
        }
