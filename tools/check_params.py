#!/usr/bin/env python3
"""Launchpad parameter checks against config/launchpad_params.json."""

import json
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional


ROOT = Path(__file__).resolve().parents[1]
PARAMS_PATH = ROOT / "config" / "launchpad_params.json"

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
MAX_FEE_PIPS = 1_000_000
# Full-range ticks must still fit inside the tick bounds
MAX_TICK_SPACING = 16_384


def load_json(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def decimal_param(section: dict, key: str, label: str, errors: list[str]) -> Optional[Decimal]:
    """Parse a string-encoded decimal; floats are rejected."""
    raw = section.get(key)
    if not isinstance(raw, str):
        errors.append(f"{label}.{key} must be a decimal string, got {raw!r}")
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        errors.append(f"{label}.{key} is not a valid decimal: {raw!r}")
        return None


def check_address(section: dict, key: str, label: str, errors: list[str]) -> None:
    value = section.get(key, "")
    if not isinstance(value, str) or not ADDRESS_RE.match(value):
        errors.append(f"{label}.{key} must be a 20-byte hex address, got {value!r}")


def check(params_path: Path = PARAMS_PATH) -> int:
    params = load_json(params_path)
    errors: list[str] = []

    for section in ("funding", "liquidity", "dynamic_fee"):
        if section not in params:
            errors.append(f"Missing parameter section: {section}")
    if errors:
        return report(errors)

    # --- Funding ---
    funding = params["funding"]
    deposit_ratio = decimal_param(funding, "deposit_ratio", "funding", errors)
    if deposit_ratio is not None and not (0 < deposit_ratio < 1):
        errors.append(f"funding.deposit_ratio must be in (0, 1), got {deposit_ratio}")
    max_raise = decimal_param(funding, "max_raise_ratio", "funding", errors)
    if max_raise is not None and max_raise < 1:
        errors.append(f"funding.max_raise_ratio must be >= 1, got {max_raise}")

    token_decimals = funding.get("event_token_decimals")
    if not isinstance(token_decimals, int) or not (0 <= token_decimals <= 36):
        errors.append(f"funding.event_token_decimals must be an int in [0, 36], got {token_decimals!r}")

    min_days = funding.get("min_duration_days", 1)
    max_days = funding.get("max_duration_days", 365)
    if min_days < 1:
        errors.append("funding.min_duration_days must be >= 1")
    if max_days < min_days:
        errors.append("funding.max_duration_days must be >= min_duration_days")

    check_address(funding, "protocol_treasury", "funding", errors)
    check_address(funding, "escrow_account", "funding", errors)
    if funding.get("protocol_treasury", "").lower() == funding.get("escrow_account", "").lower():
        errors.append("funding.protocol_treasury must differ from funding.escrow_account")

    # --- Liquidity ---
    liquidity = params["liquidity"]
    ratio = decimal_param(liquidity, "pool_price_ratio", "liquidity", errors)
    if ratio is not None and ratio <= 0:
        errors.append(f"liquidity.pool_price_ratio must be positive, got {ratio}")
    spacing = liquidity.get("tick_spacing", 0)
    if not isinstance(spacing, int) or not (1 <= spacing <= MAX_TICK_SPACING):
        errors.append(f"liquidity.tick_spacing must be in [1, {MAX_TICK_SPACING}], got {spacing!r}")
    base_fee = liquidity.get("base_fee_pips", -1)
    if not (0 <= base_fee <= MAX_FEE_PIPS):
        errors.append(f"liquidity.base_fee_pips must be in [0, {MAX_FEE_PIPS}], got {base_fee}")
    check_address(liquidity, "hooks", "liquidity", errors)

    # --- Dynamic fee ---
    dynamic = params["dynamic_fee"]
    buy = dynamic.get("buy_fee_adjustment_pips", 0)
    sell = dynamic.get("sell_fee_adjustment_pips", 0)
    if buy >= 0:
        errors.append(f"dynamic_fee.buy_fee_adjustment_pips must be negative, got {buy}")
    if sell <= 0:
        errors.append(f"dynamic_fee.sell_fee_adjustment_pips must be positive, got {sell}")
    max_fee = dynamic.get("max_fee_pips", MAX_FEE_PIPS)
    if not (0 < max_fee <= MAX_FEE_PIPS):
        errors.append(f"dynamic_fee.max_fee_pips must be in (0, {MAX_FEE_PIPS}], got {max_fee}")
    if 0 <= base_fee <= MAX_FEE_PIPS:
        if base_fee + buy < 0:
            errors.append("base fee plus buy adjustment must not go below zero")
        if base_fee + sell > max_fee:
            errors.append("base fee plus sell adjustment must not exceed max_fee_pips")

    return report(errors)


def report(errors: list[str]) -> int:
    if errors:
        print("Parameter check failed:")
        for err in errors:
            print(f"- {err}")
        return 1

    print("Parameter check passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(check())
