"""Pool seeding and post-trade fee policy."""

from eventfund.liquidity.bootstrapper import LiquidityBootstrapper
from eventfund.liquidity.dynamic_fee import DynamicFeeEngine, classify_swap, classify_trade

__all__ = [
    "LiquidityBootstrapper",
    "DynamicFeeEngine",
    "classify_swap",
    "classify_trade",
]
