"""Tests for CampaignStateMachine — legal and illegal status transitions."""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from eventfund.errors import TransitionError
from eventfund.funding.state_machine import CampaignStateMachine
from eventfund.models.campaign import CAMPAIGN_TRANSITIONS, Campaign, CampaignStatus


def _now() -> datetime:
    return datetime(2026, 6, 1, tzinfo=timezone.utc)


def _make_campaign(
    raised: int = 0,
    status: CampaignStatus = CampaignStatus.ACTIVE,
    days: int = 30,
) -> Campaign:
    return Campaign(
        campaign_id=0,
        organizer="org",
        event_name="Summer Fest",
        token_symbol="SFEST",
        funding_token="0xusdc",
        funding_decimals=6,
        target_amount=100_000,
        organizer_deposit=10_000,
        deadline_utc=_now() + timedelta(days=days),
        created_utc=_now(),
        max_raise_ratio=Decimal("1.2"),
        raised_amount=raised,
        status=status,
    )


class TestTransitionTable:
    def test_terminal_states_have_no_exits(self) -> None:
        assert CAMPAIGN_TRANSITIONS[CampaignStatus.FUNDED] == frozenset()
        assert CAMPAIGN_TRANSITIONS[CampaignStatus.CLOSED] == frozenset()

    def test_is_terminal(self) -> None:
        sm = CampaignStateMachine()
        assert sm.is_terminal(CampaignStatus.FUNDED)
        assert sm.is_terminal(CampaignStatus.CLOSED)
        assert not sm.is_terminal(CampaignStatus.ACTIVE)
        assert not sm.is_terminal(CampaignStatus.EXPIRED)


class TestFunded:
    def test_funded_when_target_met(self) -> None:
        c = _make_campaign(raised=100_000)
        CampaignStateMachine.apply_transition(c, CampaignStatus.FUNDED, _now())
        assert c.status == CampaignStatus.FUNDED

    def test_funded_below_target_rejected(self) -> None:
        c = _make_campaign(raised=99_999)
        errors = CampaignStateMachine.validate_transition(c, CampaignStatus.FUNDED, _now())
        assert errors and "below target" in errors[0]
        with pytest.raises(TransitionError):
            CampaignStateMachine.apply_transition(c, CampaignStatus.FUNDED, _now())
        assert c.status == CampaignStatus.ACTIVE


class TestExpired:
    def test_expired_after_deadline(self) -> None:
        c = _make_campaign(raised=30_000)
        CampaignStateMachine.apply_transition(
            c, CampaignStatus.EXPIRED, _now() + timedelta(days=30)
        )
        assert c.status == CampaignStatus.EXPIRED

    def test_expired_before_deadline_rejected(self) -> None:
        c = _make_campaign()
        errors = CampaignStateMachine.validate_transition(
            c, CampaignStatus.EXPIRED, _now() + timedelta(days=29)
        )
        assert any("has not passed" in e for e in errors)

    def test_expired_with_target_met_rejected(self) -> None:
        c = _make_campaign(raised=100_000)
        errors = CampaignStateMachine.validate_transition(
            c, CampaignStatus.EXPIRED, _now() + timedelta(days=31)
        )
        assert any("target met" in e for e in errors)


class TestIllegal:
    @pytest.mark.parametrize("start, target", [
        (CampaignStatus.ACTIVE, CampaignStatus.CLOSED),
        (CampaignStatus.FUNDED, CampaignStatus.EXPIRED),
        (CampaignStatus.FUNDED, CampaignStatus.CLOSED),
        (CampaignStatus.CLOSED, CampaignStatus.ACTIVE),
        (CampaignStatus.EXPIRED, CampaignStatus.FUNDED),
        (CampaignStatus.EXPIRED, CampaignStatus.ACTIVE),
    ])
    def test_illegal_transition(self, start, target) -> None:
        c = _make_campaign(raised=100_000, status=start)
        with pytest.raises(TransitionError, match="Invalid campaign transition"):
            CampaignStateMachine.apply_transition(c, target, _now() + timedelta(days=60))
        assert c.status == start


class TestAcceptsContributions:
    def test_active_before_deadline(self) -> None:
        assert CampaignStateMachine.accepts_contributions(_make_campaign(), _now())

    def test_not_at_deadline(self) -> None:
        c = _make_campaign()
        assert not CampaignStateMachine.accepts_contributions(c, c.deadline_utc)

    def test_not_once_target_met(self) -> None:
        assert not CampaignStateMachine.accepts_contributions(
            _make_campaign(raised=100_000), _now()
        )

    def test_not_when_expired(self) -> None:
        c = _make_campaign(status=CampaignStatus.EXPIRED)
        assert not CampaignStateMachine.accepts_contributions(c, _now())
