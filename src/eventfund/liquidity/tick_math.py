"""Price-axis conversions for concentrated-liquidity pools.

Prices here are raw: currency1 base units per currency0 base unit. Ticks
are on the 1.0001 geometric grid, tick = floor(log_1.0001(price)), and the
sqrt price is Q64.96 fixed point. All math runs in Decimal at high
precision so results are reproducible across platforms.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_FLOOR, localcontext
from typing import Tuple


MIN_TICK = -887272
MAX_TICK = 887272
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342
Q96 = 2 ** 96
TICK_BASE = Decimal("1.0001")

_PRECISION = 80


def sort_currencies(a: str, b: str) -> Tuple[str, str]:
    """Order two token addresses the way pool engines key them."""
    if a.lower() == b.lower():
        raise ValueError(f"Pool currencies must differ: {a}")
    try:
        a_key, b_key = int(a, 16), int(b, 16)
    except ValueError:
        a_key, b_key = a.lower(), b.lower()
    return (a, b) if a_key < b_key else (b, a)


def price_to_tick(price: Decimal) -> int:
    """Greatest tick whose price does not exceed `price`."""
    if price <= 0:
        raise ValueError(f"Price must be positive, got {price}")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        tick = (price.ln() / TICK_BASE.ln()).to_integral_value(rounding=ROUND_FLOOR)
        # ln rounding can land one tick off right at a grid boundary
        if TICK_BASE ** int(tick) > price:
            tick -= 1
        elif TICK_BASE ** int(tick + 1) <= price:
            tick += 1
    return max(MIN_TICK, min(MAX_TICK, int(tick)))


def tick_to_price(tick: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return TICK_BASE ** tick


def sqrt_price_at_tick(tick: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return (TICK_BASE ** tick).sqrt()


def price_to_sqrt_price_x96(price: Decimal) -> int:
    """floor(sqrt(price) * 2**96), clamped to the engine's valid range."""
    if price <= 0:
        raise ValueError(f"Price must be positive, got {price}")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        value = (price.sqrt() * Q96).to_integral_value(rounding=ROUND_FLOOR)
    return max(MIN_SQRT_RATIO, min(MAX_SQRT_RATIO - 1, int(value)))


def full_range_ticks(tick_spacing: int) -> Tuple[int, int]:
    """Widest tick range usable at a given spacing."""
    if tick_spacing <= 0:
        raise ValueError(f"Tick spacing must be positive, got {tick_spacing}")
    upper = (MAX_TICK // tick_spacing) * tick_spacing
    return -upper, upper


def full_range_liquidity(
    amount0: int,
    amount1: int,
    price: Decimal,
    tick_lower: int,
    tick_upper: int,
) -> int:
    """Liquidity that amount0/amount1 support across [tick_lower, tick_upper].

    Standard concentrated-liquidity formulas; the smaller side binds.
    """
    if amount0 <= 0 or amount1 <= 0:
        return 0
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        sp = price.sqrt()
        sa = sqrt_price_at_tick(tick_lower)
        sb = sqrt_price_at_tick(tick_upper)
        if not sa < sp < sb:
            raise ValueError(
                f"Price {price} is outside the tick range [{tick_lower}, {tick_upper}]"
            )
        liquidity0 = Decimal(amount0) * sp * sb / (sb - sp)
        liquidity1 = Decimal(amount1) / (sp - sa)
        return int(min(liquidity0, liquidity1).to_integral_value(rounding=ROUND_FLOOR))
