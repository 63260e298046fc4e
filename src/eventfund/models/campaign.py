"""Campaign models — campaign records, contributions, and the status view.

All amounts are integers in base units of the settlement asset (the
on-chain uint256 convention). Ratios are Decimal. No floats in accounting.

Invariants enforced around these models:
- raised_amount == sum of Contribution.amount for the campaign
- organizer_deposit is escrowed separately and never counted as raised
- status only moves along CAMPAIGN_TRANSITIONS
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_DOWN
from typing import Dict, Optional

from eventfund.models.liquidity import PoolKey


class CampaignStatus(str, enum.Enum):
    """Lifecycle state of a campaign.

    State machine:
        ACTIVE → FUNDED            (a contribution meets the target)
        ACTIVE → EXPIRED           (deadline passed, target not met)
        EXPIRED → CLOSED           (explicit close, funds released)
    """
    ACTIVE = "active"
    FUNDED = "funded"
    EXPIRED = "expired"
    CLOSED = "closed"


# Valid campaign status transitions
CAMPAIGN_TRANSITIONS: Dict[CampaignStatus, frozenset] = {
    CampaignStatus.ACTIVE: frozenset({
        CampaignStatus.FUNDED,
        CampaignStatus.EXPIRED,
    }),
    CampaignStatus.FUNDED: frozenset(),
    CampaignStatus.EXPIRED: frozenset({CampaignStatus.CLOSED}),
    CampaignStatus.CLOSED: frozenset(),
}


@dataclass
class Campaign:
    """A funding campaign for one event.

    Mutable — owned exclusively by the CampaignRegistry, which is the only
    writer of status, raised_amount and the fee/pool fields.
    """
    campaign_id: int
    organizer: str
    event_name: str
    token_symbol: str
    funding_token: str
    funding_decimals: int
    target_amount: int
    organizer_deposit: int
    deadline_utc: datetime
    created_utc: datetime
    max_raise_ratio: Decimal = Decimal("1")
    event_token_id: str = ""
    raised_amount: int = 0
    unique_backers: int = 0
    status: CampaignStatus = CampaignStatus.ACTIVE
    protocol_fees_collected: int = 0
    pool_id: Optional[str] = None
    pool_key: Optional[PoolKey] = None
    finalized_utc: Optional[datetime] = None
    closed_utc: Optional[datetime] = None

    @property
    def campaign_goal(self) -> int:
        """Upper bound of the raise: target plus the pool-seeding band."""
        goal = (Decimal(self.target_amount) * self.max_raise_ratio).to_integral_value(
            rounding=ROUND_DOWN
        )
        return max(int(goal), self.target_amount)

    @property
    def target_met(self) -> bool:
        return self.raised_amount >= self.target_amount

    def is_past_deadline(self, now: datetime) -> bool:
        return now >= self.deadline_utc

    def time_left(self, now: datetime) -> int:
        """Whole seconds until the deadline, never negative."""
        remaining = (self.deadline_utc - now).total_seconds()
        return max(0, int(remaining))


@dataclass
class Contribution:
    """Cumulative contribution of one backer to one campaign.

    Created on the first contribution, updated on later ones, never deleted.
    Refund accounting reads it after the campaign closes.
    """
    campaign_id: int
    backer: str
    amount: int = 0
    first_contributed_utc: Optional[datetime] = None
    last_contributed_utc: Optional[datetime] = None


@dataclass(frozen=True)
class CampaignStatusView:
    """Read-only snapshot returned by get_status."""
    is_active: bool
    is_expired: bool
    is_funded: bool
    time_left: int
    raised_amount: int
    target_amount: int
    organizer_deposit: int
    funding_token: str
    protocol_fees_collected: int
    unique_backers: int

    def to_dict(self) -> dict:
        return {
            "is_active": self.is_active,
            "is_expired": self.is_expired,
            "is_funded": self.is_funded,
            "time_left": self.time_left,
            "raised_amount": self.raised_amount,
            "target_amount": self.target_amount,
            "organizer_deposit": self.organizer_deposit,
            "funding_token": self.funding_token,
            "protocol_fees_collected": self.protocol_fees_collected,
            "unique_backers": self.unique_backers,
        }
