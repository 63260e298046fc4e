"""Launchpad parameters and chain settings."""

from eventfund.policy.params import (
    ChainSettings,
    DynamicFeeParams,
    FundingParams,
    LiquidityParams,
    ParamsResolver,
    chain_settings,
)

__all__ = [
    "ChainSettings",
    "DynamicFeeParams",
    "FundingParams",
    "LiquidityParams",
    "ParamsResolver",
    "chain_settings",
]
