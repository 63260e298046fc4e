"""Contribution ledger — per-campaign, per-backer cumulative contributions.

The ledger is the only writer of backer amounts and the source of truth
for unique-backer counts and refund entitlements. Entries are updated in
place on repeat contributions and never deleted, so refunds can be
computed after a campaign has stopped accepting funds.

Not thread-safe on its own: the registry calls it under the campaign lock.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from eventfund.errors import InvalidAmount
from eventfund.models.campaign import Contribution


class ContributionLedger:
    """In-memory ledger keyed by campaign id, then backer.

    Usage:
        ledger = ContributionLedger()
        is_new = ledger.record(0, "alice", 500)
        ledger.total_for(0, "alice")  # 500
    """

    def __init__(self) -> None:
        self._entries: Dict[int, Dict[str, Contribution]] = {}

    def record(
        self,
        campaign_id: int,
        backer: str,
        amount: int,
        now: Optional[datetime] = None,
    ) -> bool:
        """Add to a backer's cumulative entry.

        Returns True if this is the backer's first contribution to the
        campaign.
        """
        if amount <= 0:
            raise InvalidAmount(f"Contribution amount must be positive, got {amount}")
        if now is None:
            now = datetime.now(timezone.utc)

        entries = self._entries.setdefault(campaign_id, {})
        entry = entries.get(backer)
        is_new = entry is None
        if is_new:
            entry = Contribution(
                campaign_id=campaign_id,
                backer=backer,
                first_contributed_utc=now,
            )
            entries[backer] = entry
        entry.amount += amount
        entry.last_contributed_utc = now
        return is_new

    def total_for(self, campaign_id: int, backer: str) -> int:
        entry = self._entries.get(campaign_id, {}).get(backer)
        return entry.amount if entry else 0

    def get(self, campaign_id: int, backer: str) -> Optional[Contribution]:
        return self._entries.get(campaign_id, {}).get(backer)

    def all_contributors(self, campaign_id: int) -> List[Tuple[str, int]]:
        """Every (backer, cumulative amount) pair for a campaign."""
        return [
            (entry.backer, entry.amount)
            for entry in self._entries.get(campaign_id, {}).values()
        ]

    def backer_count(self, campaign_id: int) -> int:
        return len(self._entries.get(campaign_id, {}))

    def total_raised(self, campaign_id: int) -> int:
        return sum(entry.amount for entry in self._entries.get(campaign_id, {}).values())
