"""Liquidity bootstrapper — seeds the receipt-token pool at success finalization.

The excess raised above target is the quote side of the pool. The base
side is freshly minted receipt tokens, sized so the pool opens at the
configured quote-per-token ratio:

    base_amount = floor(excess * 10**(token_decimals - funding_decimals) / ratio)
    raw_price   = ratio * 10**funding_decimals / 10**token_decimals

The raw price is turned into the pool's currency0/currency1 orientation,
then into a tick and a Q64.96 sqrt price. Liquidity spans the full range.

compute_seed is a pure function of its inputs. Creating the pool and
requesting liquidity go through the PoolEngine collaborator.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_FLOOR, localcontext
from typing import Optional

from eventfund.adapters.interfaces import PoolEngine
from eventfund.liquidity.tick_math import (
    full_range_liquidity,
    full_range_ticks,
    price_to_sqrt_price_x96,
    price_to_tick,
    sort_currencies,
)
from eventfund.logging import get_logger
from eventfund.models.liquidity import PoolKey, PoolSeed
from eventfund.policy.params import LiquidityParams


log = get_logger(__name__)


class LiquidityBootstrapper:
    """Computes pool seed amounts and drives pool creation.

    Usage:
        bootstrapper = LiquidityBootstrapper(params, token_decimals=18, pool_engine=engine)
        seed = bootstrapper.compute_seed(20_000, 6, event_token, usdc)
        pool_id = bootstrapper.create_pool(seed)
        bootstrapper.provide_liquidity(pool_id, seed)
    """

    def __init__(
        self,
        params: LiquidityParams,
        token_decimals: int,
        pool_engine: Optional[PoolEngine] = None,
    ) -> None:
        self._params = params
        self._token_decimals = token_decimals
        self._pool_engine = pool_engine

    @property
    def params(self) -> LiquidityParams:
        return self._params

    def compute_seed(
        self,
        excess: int,
        funding_decimals: int,
        event_token: str,
        funding_token: str,
        price_ratio: Optional[Decimal] = None,
    ) -> PoolSeed:
        """Pool seed inputs for `excess` quote units at `price_ratio`."""
        if excess < 0:
            raise ValueError(f"Excess must be non-negative, got {excess}")
        ratio = self._params.pool_price_ratio if price_ratio is None else price_ratio
        if ratio <= 0:
            raise ValueError(f"Pool price ratio must be positive, got {ratio}")

        shift = self._token_decimals - funding_decimals
        with localcontext() as ctx:
            ctx.prec = 80
            scale = Decimal(10) ** shift
            base_amount = int(
                (Decimal(excess) * scale / ratio).to_integral_value(rounding=ROUND_FLOOR)
            )
            raw_price = ratio / scale

            currency0, currency1 = sort_currencies(event_token, funding_token)
            token_is_currency0 = currency0 == event_token
            pool_price = raw_price if token_is_currency0 else 1 / raw_price

        tick_lower, tick_upper = full_range_ticks(self._params.tick_spacing)
        if token_is_currency0:
            amount0, amount1 = base_amount, excess
        else:
            amount0, amount1 = excess, base_amount

        return PoolSeed(
            excess=excess,
            price_ratio=ratio,
            base_amount=base_amount,
            quote_amount=excess,
            raw_price=raw_price,
            key=PoolKey(
                currency0=currency0,
                currency1=currency1,
                fee=self._params.base_fee_pips,
                tick_spacing=self._params.tick_spacing,
                hooks=self._params.hooks,
            ),
            token_is_currency0=token_is_currency0,
            initial_tick=price_to_tick(pool_price),
            sqrt_price_x96=price_to_sqrt_price_x96(pool_price),
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            liquidity=full_range_liquidity(amount0, amount1, pool_price, tick_lower, tick_upper),
        )

    def create_pool(self, seed: PoolSeed) -> Optional[str]:
        """Create the pool at the seed's initial tick.

        Returns None for an empty seed; a pool with one empty side has no
        price to open at.
        """
        if seed.is_empty:
            log.info("pool_seed_empty", excess=seed.excess, base_amount=seed.base_amount)
            return None
        pool_id = self._engine().create_pool(
            seed.base_token, seed.quote_token, seed.initial_tick, seed.key
        )
        log.info(
            "pool_created",
            pool_id=pool_id,
            initial_tick=seed.initial_tick,
            sqrt_price_x96=seed.sqrt_price_x96,
        )
        return pool_id

    def pool_account(self, pool_id: str) -> str:
        """Account that receives the pool's seed funds."""
        return self._engine().pool_account(pool_id)

    def provide_liquidity(self, pool_id: str, seed: PoolSeed) -> None:
        """Request full-range liquidity for the seed amounts."""
        self._engine().add_full_range_liquidity(pool_id, seed.base_amount, seed.quote_amount)
        log.info(
            "pool_seeded",
            pool_id=pool_id,
            base_amount=seed.base_amount,
            quote_amount=seed.quote_amount,
            liquidity=seed.liquidity,
        )

    def _engine(self) -> PoolEngine:
        if self._pool_engine is None:
            raise ValueError("No pool engine configured")
        return self._pool_engine
