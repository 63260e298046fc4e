"""Parameter resolver — loads launchpad parameters from the config directory.

Parameters live in config/launchpad_params.json. Decimal-valued entries are
stored as strings so they round-trip exactly. Chain secrets (RPC URL,
signing key, settlement token address) never live in the parameter file;
they are read from the environment, optionally seeded from a .env file.

The fee magnitudes and the pool price ratio are product decisions, not
derived constants. They are read here and nowhere else.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv


PARAMS_FILENAME = "launchpad_params.json"


@dataclass(frozen=True)
class FundingParams:
    deposit_ratio: Decimal
    max_raise_ratio: Decimal
    event_token_decimals: int
    min_duration_days: int
    max_duration_days: int
    protocol_treasury: str
    escrow_account: str


@dataclass(frozen=True)
class LiquidityParams:
    pool_price_ratio: Decimal
    tick_spacing: int
    base_fee_pips: int
    hooks: str


@dataclass(frozen=True)
class DynamicFeeParams:
    buy_fee_adjustment_pips: int
    sell_fee_adjustment_pips: int
    max_fee_pips: int = 1_000_000


@dataclass(frozen=True)
class ChainSettings:
    """Connection settings for the on-chain settlement asset."""
    rpc_url: str
    private_key: str
    token_address: str
    chain_id: int


class ParamsResolver:
    """Typed access to launchpad parameters.

    Usage:
        resolver = ParamsResolver.from_config_dir(Path("config"))
        funding = resolver.funding_params()
    """

    def __init__(self, params: dict[str, Any]) -> None:
        self._params = params

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> ParamsResolver:
        path = config_dir / PARAMS_FILENAME
        if not path.exists():
            raise FileNotFoundError(f"Parameter file not found: {path}")
        return cls(json.loads(path.read_text(encoding="utf-8")))

    @property
    def raw(self) -> dict[str, Any]:
        return self._params

    def funding_params(self) -> FundingParams:
        f = self._params["funding"]
        return FundingParams(
            deposit_ratio=Decimal(str(f["deposit_ratio"])),
            max_raise_ratio=Decimal(str(f["max_raise_ratio"])),
            event_token_decimals=int(f["event_token_decimals"]),
            min_duration_days=int(f.get("min_duration_days", 1)),
            max_duration_days=int(f.get("max_duration_days", 365)),
            protocol_treasury=f["protocol_treasury"],
            escrow_account=f["escrow_account"],
        )

    def liquidity_params(self) -> LiquidityParams:
        p = self._params["liquidity"]
        return LiquidityParams(
            pool_price_ratio=Decimal(str(p["pool_price_ratio"])),
            tick_spacing=int(p["tick_spacing"]),
            base_fee_pips=int(p["base_fee_pips"]),
            hooks=p["hooks"],
        )

    def dynamic_fee_params(self) -> DynamicFeeParams:
        d = self._params["dynamic_fee"]
        return DynamicFeeParams(
            buy_fee_adjustment_pips=int(d["buy_fee_adjustment_pips"]),
            sell_fee_adjustment_pips=int(d["sell_fee_adjustment_pips"]),
            max_fee_pips=int(d.get("max_fee_pips", 1_000_000)),
        )


def chain_settings(env_file: Optional[Path] = None) -> ChainSettings:
    """Read chain settings from the environment.

    Required: EVENTFUND_RPC_URL, EVENTFUND_PRIVATE_KEY, EVENTFUND_TOKEN_ADDRESS.
    Optional: EVENTFUND_CHAIN_ID (default 84532, Base Sepolia).
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    rpc_url = os.getenv("EVENTFUND_RPC_URL")
    private_key = os.getenv("EVENTFUND_PRIVATE_KEY")
    token_address = os.getenv("EVENTFUND_TOKEN_ADDRESS")
    missing = [
        name
        for name, value in (
            ("EVENTFUND_RPC_URL", rpc_url),
            ("EVENTFUND_PRIVATE_KEY", private_key),
            ("EVENTFUND_TOKEN_ADDRESS", token_address),
        )
        if not value
    ]
    if missing:
        raise ValueError(f"Missing chain settings: {', '.join(missing)}")

    return ChainSettings(
        rpc_url=rpc_url,
        private_key=private_key,
        token_address=token_address,
        chain_id=int(os.getenv("EVENTFUND_CHAIN_ID", "84532")),
    )
