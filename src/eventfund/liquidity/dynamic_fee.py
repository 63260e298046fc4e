"""Dynamic fee engine — asymmetric post-trade fee for the receipt-token pool.

Invoked by the pool engine after every swap with the trader's signed
balance deltas (positive = received by the trader, negative = paid by
the trader). Stateless: the same deltas always give the same answer.

Classification, from the receipt-token leg:
    token_delta > 0                      → BUY   (token_received)
    token_delta < 0, quote_delta < 0     → SELL  (both_legs_negative)
    token_delta < 0                      → SELL  (token_paid)
    token_delta == 0                     → SELL  (no_token_flow)

The both-legs-negative case (trader pays on both sides, which a plain swap
never produces) and the zero-token case collapse to SELL: anything that
does not deliver tokens to the trader pays the higher fee.

Adjustments are in pips (hundredths of a basis point; 1_000_000 = 100%).
Buys get a negative offset, sells a positive one; both are configuration.
"""

from __future__ import annotations

from eventfund.logging import get_logger
from eventfund.models.liquidity import (
    ClassificationRule,
    FeeAdjustment,
    TradeClassification,
    TradeDirection,
)
from eventfund.policy.params import DynamicFeeParams


log = get_logger(__name__)


def classify_trade(token_delta: int, quote_delta: int) -> TradeClassification:
    """Classify a completed trade from the trader's signed deltas."""
    if token_delta > 0:
        return TradeClassification(TradeDirection.BUY, ClassificationRule.TOKEN_RECEIVED)
    if token_delta < 0 and quote_delta < 0:
        return TradeClassification(TradeDirection.SELL, ClassificationRule.BOTH_LEGS_NEGATIVE)
    if token_delta < 0:
        return TradeClassification(TradeDirection.SELL, ClassificationRule.TOKEN_PAID)
    return TradeClassification(TradeDirection.SELL, ClassificationRule.NO_TOKEN_FLOW)


def classify_swap(
    amount0_delta: int,
    amount1_delta: int,
    token_is_currency0: bool,
) -> TradeClassification:
    """Classify from pool-ordered deltas."""
    if token_is_currency0:
        return classify_trade(amount0_delta, amount1_delta)
    return classify_trade(amount1_delta, amount0_delta)


class DynamicFeeEngine:
    """Returns the fee offset for each completed trade.

    Usage:
        engine = DynamicFeeEngine(params, base_fee_pips=3000)
        adjustment = engine.after_swap(amount0_delta, amount1_delta, True)
    """

    def __init__(self, params: DynamicFeeParams, base_fee_pips: int) -> None:
        if params.buy_fee_adjustment_pips > 0:
            raise ValueError(
                f"Buy adjustment must not raise the fee, got {params.buy_fee_adjustment_pips}"
            )
        if params.sell_fee_adjustment_pips < 0:
            raise ValueError(
                f"Sell adjustment must not lower the fee, got {params.sell_fee_adjustment_pips}"
            )
        self._params = params
        self._base_fee_pips = base_fee_pips

    def adjustment_for(self, direction: TradeDirection) -> int:
        if direction == TradeDirection.BUY:
            return self._params.buy_fee_adjustment_pips
        return self._params.sell_fee_adjustment_pips

    def adjust(self, classification: TradeClassification) -> FeeAdjustment:
        delta = self.adjustment_for(classification.direction)
        effective = max(0, min(self._params.max_fee_pips, self._base_fee_pips + delta))
        return FeeAdjustment(
            direction=classification.direction,
            rule=classification.rule,
            delta_pips=delta,
            base_fee_pips=self._base_fee_pips,
            effective_fee_pips=effective,
        )

    def after_swap(
        self,
        amount0_delta: int,
        amount1_delta: int,
        token_is_currency0: bool,
    ) -> FeeAdjustment:
        """Post-trade hook entry point."""
        adjustment = self.adjust(
            classify_swap(amount0_delta, amount1_delta, token_is_currency0)
        )
        log.debug(
            "trade_fee_adjusted",
            direction=adjustment.direction.value,
            rule=adjustment.rule.value,
            delta_pips=adjustment.delta_pips,
            effective_fee_pips=adjustment.effective_fee_pips,
        )
        return adjustment
