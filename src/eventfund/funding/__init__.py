"""Campaign funding core: registry, ledger, issuer, fee splitter."""

from eventfund.funding.fees import FeeSplitter
from eventfund.funding.issuer import TokenIssuer
from eventfund.funding.ledger import ContributionLedger
from eventfund.funding.registry import CampaignRegistry
from eventfund.funding.state_machine import CampaignStateMachine

__all__ = [
    "CampaignRegistry",
    "CampaignStateMachine",
    "ContributionLedger",
    "FeeSplitter",
    "TokenIssuer",
]
