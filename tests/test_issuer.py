"""Tests for TokenIssuer — 1:1 minting, decimal scaling, cap lock."""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from eventfund.adapters.memory import InMemoryTokenEngine
from eventfund.errors import CapExceeded, InvalidAmount
from eventfund.funding.issuer import TokenIssuer
from eventfund.models.campaign import Campaign

SCALE = 10 ** 12  # 6-decimal settlement asset into 18-decimal receipts


def _now() -> datetime:
    return datetime(2026, 6, 1, tzinfo=timezone.utc)


def _make_campaign(target: int = 100_000) -> Campaign:
    return Campaign(
        campaign_id=0,
        organizer="org",
        event_name="Summer Fest",
        token_symbol="SFEST",
        funding_token="0xusdc",
        funding_decimals=6,
        target_amount=target,
        organizer_deposit=target // 10,
        deadline_utc=_now() + timedelta(days=30),
        created_utc=_now(),
        max_raise_ratio=Decimal("1.2"),
    )


@pytest.fixture
def engine() -> InMemoryTokenEngine:
    return InMemoryTokenEngine()


@pytest.fixture
def issuer(engine) -> TokenIssuer:
    return TokenIssuer(engine, token_decimals=18)


class TestScaling:
    def test_scale_up(self, issuer) -> None:
        assert issuer.to_token_units(5, 6) == 5 * SCALE

    def test_same_decimals(self) -> None:
        issuer = TokenIssuer(InMemoryTokenEngine(), token_decimals=6)
        assert issuer.to_token_units(123, 6) == 123

    def test_exact_scale_down(self) -> None:
        issuer = TokenIssuer(InMemoryTokenEngine(), token_decimals=2)
        assert issuer.to_token_units(12_300, 4) == 123

    def test_lossy_scale_down_rejected(self) -> None:
        issuer = TokenIssuer(InMemoryTokenEngine(), token_decimals=2)
        with pytest.raises(InvalidAmount):
            issuer.to_token_units(12_345, 4)

    def test_negative_decimals_rejected(self) -> None:
        with pytest.raises(ValueError):
            TokenIssuer(InMemoryTokenEngine(), token_decimals=-1)


class TestDeploy:
    def test_deploy_zero_supply_with_goal_ceiling(self, issuer, engine) -> None:
        token_id = issuer.deploy(_make_campaign())
        assert engine.total_supply(token_id) == 0
        assert engine.symbol(token_id) == "SFEST"
        assert engine.decimals(token_id) == 18
        assert issuer.ceiling(token_id) == 120_000 * SCALE
        assert engine.cap(token_id) is None


class TestMintContribution:
    def test_mint_is_one_to_one(self, issuer, engine) -> None:
        token_id = issuer.deploy(_make_campaign())
        minted = issuer.mint_contribution(token_id, "alice", 40_000, 6)
        assert minted == 40_000 * SCALE
        assert engine.balance_of(token_id, "alice") == 40_000 * SCALE

    def test_mint_past_ceiling_rejected(self, issuer, engine) -> None:
        token_id = issuer.deploy(_make_campaign())
        issuer.mint_contribution(token_id, "alice", 120_000, 6)
        with pytest.raises(CapExceeded):
            issuer.mint_contribution(token_id, "bob", 1, 6)
        assert engine.balance_of(token_id, "bob") == 0

    def test_unknown_token_rejected(self, issuer) -> None:
        with pytest.raises(ValueError):
            issuer.mint_contribution("0xnot-deployed", "alice", 1, 6)


class TestPoolAllocation:
    def test_allocation_locks_cap_at_supply(self, issuer, engine) -> None:
        token_id = issuer.deploy(_make_campaign())
        issuer.mint_contribution(token_id, "alice", 120_000, 6)
        cap = issuer.mint_pool_allocation(token_id, "pool", 16_666 * SCALE)
        assert cap == 120_000 * SCALE + 16_666 * SCALE
        assert engine.cap(token_id) == cap
        assert engine.total_supply(token_id) == cap
        assert issuer.is_locked(token_id)

    def test_zero_allocation_still_locks(self, issuer, engine) -> None:
        token_id = issuer.deploy(_make_campaign())
        issuer.mint_contribution(token_id, "alice", 100_000, 6)
        cap = issuer.mint_pool_allocation(token_id, "escrow", 0)
        assert cap == 100_000 * SCALE
        assert engine.balance_of(token_id, "escrow") == 0

    def test_no_mint_after_lock(self, issuer) -> None:
        token_id = issuer.deploy(_make_campaign())
        issuer.mint_contribution(token_id, "alice", 100_000, 6)
        issuer.mint_pool_allocation(token_id, "pool", 10)
        with pytest.raises(CapExceeded):
            issuer.mint_contribution(token_id, "bob", 1, 6)
        with pytest.raises(CapExceeded):
            issuer.mint_pool_allocation(token_id, "pool", 10)

    def test_negative_allocation_rejected(self, issuer) -> None:
        token_id = issuer.deploy(_make_campaign())
        with pytest.raises(InvalidAmount):
            issuer.mint_pool_allocation(token_id, "pool", -1)
        assert not issuer.is_locked(token_id)
