"""eventfund CLI — command-line interface for the campaign launchpad.

Usage:
    python -m eventfund.cli status
    python -m eventfund.cli simulate scenarios/summer_fest.json
    python -m eventfund.cli seed-quote --excess 20000000000
    python -m eventfund.cli fee --token-delta -500 --quote-delta 600
    python -m eventfund.cli chain-status --env-file .env
    python -m eventfund.cli check-params
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from web3.exceptions import Web3Exception

from eventfund.adapters.memory import (
    InMemoryPoolEngine,
    InMemorySettlementAsset,
    InMemoryTokenEngine,
    pseudo_address,
)
from eventfund.adapters.web3_asset import Web3SettlementAsset
from eventfund.errors import EventFundError
from eventfund.funding.registry import CampaignRegistry
from eventfund.liquidity.bootstrapper import LiquidityBootstrapper
from eventfund.liquidity.dynamic_fee import DynamicFeeEngine, classify_trade
from eventfund.logging import configure_logging
from eventfund.persistence.event_log import EventLog
from eventfund.policy.params import PARAMS_FILENAME, ParamsResolver, chain_settings


DEFAULT_CONFIG = Path(__file__).resolve().parents[2] / "config"


def _fee_engine(resolver: ParamsResolver) -> DynamicFeeEngine:
    return DynamicFeeEngine(
        resolver.dynamic_fee_params(),
        base_fee_pips=resolver.liquidity_params().base_fee_pips,
    )


def _parse_time(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def cmd_status(args: argparse.Namespace) -> int:
    resolver = ParamsResolver.from_config_dir(args.config)
    funding = resolver.funding_params()
    liquidity = resolver.liquidity_params()
    dynamic = resolver.dynamic_fee_params()
    status = {
        "config_dir": str(args.config),
        "version": resolver.raw.get("version"),
        "funding": {
            "deposit_ratio": str(funding.deposit_ratio),
            "max_raise_ratio": str(funding.max_raise_ratio),
            "event_token_decimals": funding.event_token_decimals,
            "duration_days": [funding.min_duration_days, funding.max_duration_days],
            "protocol_treasury": funding.protocol_treasury,
            "escrow_account": funding.escrow_account,
        },
        "liquidity": {
            "pool_price_ratio": str(liquidity.pool_price_ratio),
            "tick_spacing": liquidity.tick_spacing,
            "base_fee_pips": liquidity.base_fee_pips,
        },
        "dynamic_fee": {
            "buy_fee_adjustment_pips": dynamic.buy_fee_adjustment_pips,
            "sell_fee_adjustment_pips": dynamic.sell_fee_adjustment_pips,
        },
    }
    print(json.dumps(status, indent=2))
    return 0


def run_scenario(
    scenario: dict[str, Any],
    resolver: ParamsResolver,
    event_log: Optional[EventLog] = None,
) -> dict[str, Any]:
    """Drive the registry through a scenario against in-memory engines.

    Scenario shape:
        {
          "start": "2026-06-01T00:00:00+00:00",
          "settlement_decimals": 6,
          "balances": {"org": 10000, "alice": 40000},
          "steps": [
            {"op": "create", "organizer": "org", "event_name": "Fest",
             "token_symbol": "FEST", "target_amount": 100000, "duration_days": 30},
            {"op": "contribute", "campaign": 0, "backer": "alice",
             "amount": 40000, "day": 1},
            {"op": "status", "campaign": 0, "day": 2},
            {"op": "close", "campaign": 0, "day": 31},
            {"op": "swap", "campaign": 0, "token_delta": 5, "quote_delta": -6}
          ]
        }

    Every balance is approved to the escrow account up front. A step that
    raises an EventFundError records the error and the run continues.
    """
    funding = resolver.funding_params()
    start = _parse_time(scenario.get("start"))
    asset = InMemorySettlementAsset(
        funding.escrow_account, decimals=int(scenario.get("settlement_decimals", 6))
    )
    for owner, amount in scenario.get("balances", {}).items():
        asset.mint(owner, int(amount))
        asset.approve(owner, funding.escrow_account, int(amount))

    fee_engine = _fee_engine(resolver)
    pool_engine = InMemoryPoolEngine(after_swap=fee_engine.after_swap)
    token_engine = InMemoryTokenEngine()
    registry = CampaignRegistry.from_params(
        resolver, asset, token_engine, pool_engine, event_log=event_log
    )

    results: list[dict[str, Any]] = []
    for index, step in enumerate(scenario.get("steps", [])):
        op = step.get("op")
        now = start + timedelta(days=float(step.get("day", 0)))
        entry: dict[str, Any] = {"step": index, "op": op}
        try:
            if op == "create":
                entry["campaign_id"] = registry.create(
                    organizer=step["organizer"],
                    event_name=step["event_name"],
                    token_symbol=step["token_symbol"],
                    target_amount=int(step["target_amount"]),
                    duration_days=int(step["duration_days"]),
                    now=now,
                )
            elif op == "contribute":
                entry["raised_amount"] = registry.contribute(
                    int(step["campaign"]), step["backer"], int(step["amount"]), now=now
                )
            elif op == "status":
                entry["status"] = registry.get_status(int(step["campaign"]), now=now).to_dict()
            elif op == "close":
                entry["refunds"] = registry.close_expired_campaign(
                    int(step["campaign"]), now=now
                ).to_dict()
            elif op == "retry":
                entry["transfers"] = [
                    t.to_dict() for t in registry.retry_failed_transfers(int(step["campaign"]), now=now)
                ]
            elif op == "swap":
                campaign = registry.get_campaign(int(step["campaign"]))
                if campaign.pool_id is None:
                    entry["error"] = f"Campaign {campaign.campaign_id} has no pool"
                else:
                    pool = pool_engine.get_pool(campaign.pool_id)
                    token_delta = int(step["token_delta"])
                    quote_delta = int(step["quote_delta"])
                    if pool.token_is_currency0:
                        deltas = (token_delta, quote_delta)
                    else:
                        deltas = (quote_delta, token_delta)
                    adjustment = pool_engine.simulate_swap(campaign.pool_id, *deltas)
                    entry["fee"] = adjustment.to_dict() if adjustment else None
            else:
                entry["error"] = f"Unknown op: {op}"
        except EventFundError as exc:
            entry["error"] = f"{type(exc).__name__}: {exc}"
        results.append(entry)

    campaigns = []
    end = start + timedelta(days=max((float(s.get("day", 0)) for s in scenario.get("steps", [])), default=0))
    for campaign_id in registry.campaign_ids():
        campaign = registry.get_campaign(campaign_id)
        pool_key = registry.get_pool_key(campaign_id)
        campaigns.append({
            "campaign_id": campaign_id,
            "state": campaign.status.value,
            "campaign_goal": campaign.campaign_goal,
            "event_token": campaign.event_token_id,
            "token_supply": token_engine.total_supply(campaign.event_token_id),
            "token_cap": token_engine.cap(campaign.event_token_id),
            "pool_key": pool_key.to_dict() if pool_key else None,
            "status": registry.get_status(campaign_id, now=end).to_dict(),
            "transfers": [t.to_dict() for t in registry.transfers(campaign_id)],
        })

    return {
        "steps": results,
        "campaigns": campaigns,
        "balances": {
            owner: asset.balance_of(owner)
            for owner in sorted(
                set(scenario.get("balances", {}))
                | {funding.escrow_account, funding.protocol_treasury}
            )
        },
    }


def cmd_simulate(args: argparse.Namespace) -> int:
    resolver = ParamsResolver.from_config_dir(args.config)
    try:
        scenario = json.loads(Path(args.scenario).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Failed: cannot read scenario {args.scenario}: {exc}", file=sys.stderr)
        return 1
    event_log = EventLog(storage_path=args.event_log) if args.event_log else None
    result = run_scenario(scenario, resolver, event_log)
    print(json.dumps(result, indent=2, default=str))
    return 0


def cmd_seed_quote(args: argparse.Namespace) -> int:
    resolver = ParamsResolver.from_config_dir(args.config)
    funding = resolver.funding_params()
    bootstrapper = LiquidityBootstrapper(
        resolver.liquidity_params(), funding.event_token_decimals
    )
    try:
        seed = bootstrapper.compute_seed(
            args.excess,
            args.funding_decimals,
            event_token=args.event_token or pseudo_address("quote:event-token"),
            funding_token=args.funding_token or pseudo_address("quote:settlement"),
            price_ratio=Decimal(args.ratio) if args.ratio else None,
        )
    except ValueError as exc:
        print(f"Failed: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(seed.to_dict(), indent=2, default=str))
    return 0


def cmd_fee(args: argparse.Namespace) -> int:
    resolver = ParamsResolver.from_config_dir(args.config)
    adjustment = _fee_engine(resolver).adjust(
        classify_trade(args.token_delta, args.quote_delta)
    )
    print(json.dumps(adjustment.to_dict(), indent=2, default=str))
    return 0


def cmd_chain_status(args: argparse.Namespace) -> int:
    """Read the on-chain settlement asset named by the chain settings."""
    resolver = ParamsResolver.from_config_dir(args.config)
    funding = resolver.funding_params()
    try:
        settings = chain_settings(args.env_file)
    except ValueError as exc:
        print(f"Failed: {exc}", file=sys.stderr)
        return 1

    asset = Web3SettlementAsset.from_settings(settings)
    accounts = {
        "operator": asset.operator,
        "escrow_account": funding.escrow_account,
        "protocol_treasury": funding.protocol_treasury,
    }
    for owner in args.owner or []:
        accounts[owner] = owner
    try:
        status = {
            "chain_id": settings.chain_id,
            "token": asset.token_id,
            "decimals": asset.decimals(),
            "operator_is_escrow": asset.operator.lower() == funding.escrow_account.lower(),
            "balances": {label: asset.balance_of(addr) for label, addr in accounts.items()},
        }
    except (Web3Exception, OSError, ValueError) as exc:
        print(f"Failed: cannot read token {asset.token_id}: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(status, indent=2))
    return 0


def cmd_check_params(args: argparse.Namespace) -> int:
    """Run launchpad parameter checks."""
    tools_dir = Path(__file__).resolve().parents[2] / "tools"
    sys.path.insert(0, str(tools_dir))
    from check_params import check
    return check(args.config / PARAMS_FILENAME)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eventfund",
        description="eventfund — event crowdfunding launchpad CLI",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help="Path to config directory (default: config/)",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    sub = parser.add_subparsers(dest="command")

    # status
    sub.add_parser("status", help="Show launchpad parameters")

    # simulate
    p_sim = sub.add_parser("simulate", help="Run a scenario against in-memory engines")
    p_sim.add_argument("scenario", help="Path to scenario JSON")
    p_sim.add_argument("--event-log", type=Path, help="Append audit events to this JSONL file")

    # seed-quote
    p_seed = sub.add_parser("seed-quote", help="Quote pool seed amounts for an excess")
    p_seed.add_argument("--excess", type=int, required=True, help="Excess in settlement base units")
    p_seed.add_argument("--funding-decimals", type=int, default=6, help="Settlement decimals (default: 6)")
    p_seed.add_argument("--ratio", help="Quote per token price ratio (default: configured)")
    p_seed.add_argument("--event-token", help="Receipt token address")
    p_seed.add_argument("--funding-token", help="Settlement token address")

    # fee
    p_fee = sub.add_parser("fee", help="Classify a trade and show its fee")
    p_fee.add_argument("--token-delta", type=int, required=True, help="Trader's receipt-token delta")
    p_fee.add_argument("--quote-delta", type=int, required=True, help="Trader's settlement delta")

    # chain-status
    p_chain = sub.add_parser("chain-status", help="Read the on-chain settlement asset")
    p_chain.add_argument("--env-file", type=Path, help="Load chain settings from this .env file")
    p_chain.add_argument("--owner", action="append", help="Extra address to show a balance for")

    # check-params
    sub.add_parser("check-params", help="Run launchpad parameter checks")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(level=args.log_level, format_json=args.json_logs)

    commands = {
        "status": cmd_status,
        "simulate": cmd_simulate,
        "seed-quote": cmd_seed_quote,
        "fee": cmd_fee,
        "chain-status": cmd_chain_status,
        "check-params": cmd_check_params,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
