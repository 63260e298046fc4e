"""Campaign state machine — validates status transitions.

Campaign lifecycle:
    ACTIVE → FUNDED     a contribution brings raised to or past the target
    ACTIVE → EXPIRED    the deadline passed with the target unmet
    EXPIRED → CLOSED    explicit close, all escrow refunded

Pure computation: validates and applies the status field only. Fund
movements, minting and audit events are the registry's job. Nothing moves
a campaign on a timer; every transition is caller-triggered.
"""

from __future__ import annotations

from datetime import datetime

from eventfund.errors import TransitionError
from eventfund.models.campaign import CAMPAIGN_TRANSITIONS, Campaign, CampaignStatus


class CampaignStateMachine:
    """Validates and applies campaign status transitions."""

    @staticmethod
    def validate_transition(
        campaign: Campaign,
        target: CampaignStatus,
        now: datetime,
    ) -> list[str]:
        """Check a transition. Returns errors (empty = OK)."""
        current = campaign.status
        allowed = CAMPAIGN_TRANSITIONS.get(current, frozenset())
        if target not in allowed:
            allowed_str = ", ".join(sorted(s.value for s in allowed))
            return [
                f"Invalid campaign transition: {current.value} → {target.value}. "
                f"Allowed from {current.value}: [{allowed_str}]"
            ]

        errors: list[str] = []
        if target == CampaignStatus.FUNDED and not campaign.target_met:
            errors.append(
                f"Campaign {campaign.campaign_id}: raised {campaign.raised_amount} "
                f"is below target {campaign.target_amount}"
            )
        elif target == CampaignStatus.EXPIRED:
            if not campaign.is_past_deadline(now):
                errors.append(
                    f"Campaign {campaign.campaign_id}: deadline "
                    f"{campaign.deadline_utc.isoformat()} has not passed"
                )
            if campaign.target_met:
                errors.append(
                    f"Campaign {campaign.campaign_id}: target met, cannot expire"
                )
        return errors

    @staticmethod
    def apply_transition(
        campaign: Campaign,
        target: CampaignStatus,
        now: datetime,
    ) -> None:
        """Validate and apply a transition, raising TransitionError on failure."""
        errors = CampaignStateMachine.validate_transition(campaign, target, now)
        if errors:
            raise TransitionError("; ".join(errors))
        campaign.status = target

    @staticmethod
    def accepts_contributions(campaign: Campaign, now: datetime) -> bool:
        return (
            campaign.status == CampaignStatus.ACTIVE
            and not campaign.is_past_deadline(now)
            and not campaign.target_met
        )

    @staticmethod
    def is_terminal(status: CampaignStatus) -> bool:
        return status in (CampaignStatus.FUNDED, CampaignStatus.CLOSED)
