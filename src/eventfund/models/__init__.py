"""Core data models for eventfund."""

from eventfund.models.campaign import (
    CAMPAIGN_TRANSITIONS,
    Campaign,
    CampaignStatus,
    CampaignStatusView,
    Contribution,
)
from eventfund.models.liquidity import (
    ClassificationRule,
    FeeAdjustment,
    PoolKey,
    PoolSeed,
    TradeClassification,
    TradeDirection,
)
from eventfund.models.settlement import (
    RefundSettlement,
    SuccessPlan,
    SuccessSettlement,
    TransferKind,
    TransferRecord,
    TransferStatus,
)

__all__ = [
    "CAMPAIGN_TRANSITIONS",
    "Campaign",
    "CampaignStatus",
    "CampaignStatusView",
    "Contribution",
    "ClassificationRule",
    "FeeAdjustment",
    "PoolKey",
    "PoolSeed",
    "TradeClassification",
    "TradeDirection",
    "RefundSettlement",
    "SuccessPlan",
    "SuccessSettlement",
    "TransferKind",
    "TransferRecord",
    "TransferStatus",
]
