"""Settlement models — payout and refund legs and their batch results.

A settlement is a batch of independent transfer legs. Each leg either
completes or fails on its own; a failed leg is recorded with its error
and can be retried by the caller. Nothing here moves funds.

Invariants:
- success: organizer_payout + excess == raised_amount
- refund:  deposit_refund + sum(backer refunds) == organizer_deposit + raised_amount
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


class TransferKind(str, enum.Enum):
    """Classification of a settlement leg."""
    ORGANIZER_PAYOUT = "organizer_payout"
    PROTOCOL_FEE = "protocol_fee"
    BACKER_REFUND = "backer_refund"
    DEPOSIT_REFUND = "deposit_refund"
    POOL_SEED = "pool_seed"
    # A pulled contribution handed back after its mint failed
    CONTRIBUTION_RETURN = "contribution_return"


class TransferStatus(str, enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class TransferRecord:
    """One settlement leg out of escrow.

    Mutable — a failed leg may be retried, which updates status, error
    and attempts in place.
    """
    transfer_id: str
    campaign_id: int
    kind: TransferKind
    recipient: str
    amount: int
    status: TransferStatus = TransferStatus.FAILED
    error: Optional[str] = None
    attempts: int = 0
    created_utc: Optional[datetime] = None
    completed_utc: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.status == TransferStatus.COMPLETED

    def to_dict(self) -> dict:
        return {
            "transfer_id": self.transfer_id,
            "campaign_id": self.campaign_id,
            "kind": self.kind.value,
            "recipient": self.recipient,
            "amount": self.amount,
            "status": self.status.value,
            "error": self.error,
            "attempts": self.attempts,
        }


@dataclass(frozen=True)
class SuccessPlan:
    """Pure split of a funded campaign's escrow.

    The whole organizer deposit is the protocol fee; the organizer is paid
    exactly the target; everything above target stays for the pool.
    """
    campaign_id: int
    raised_amount: int
    protocol_fee: int
    organizer_payout: int
    excess: int

    def __post_init__(self) -> None:
        if self.organizer_payout + self.excess != self.raised_amount:
            raise ValueError(
                f"Payout ({self.organizer_payout}) + excess ({self.excess}) "
                f"does not equal raised amount ({self.raised_amount})"
            )


@dataclass(frozen=True)
class SuccessSettlement:
    plan: SuccessPlan
    transfers: Tuple[TransferRecord, ...] = field(default_factory=tuple)

    @property
    def failed(self) -> Tuple[TransferRecord, ...]:
        return tuple(t for t in self.transfers if not t.succeeded)


@dataclass(frozen=True)
class RefundSettlement:
    """Result of closing an expired campaign."""
    campaign_id: int
    deposit_refund: int
    backer_refunds: Tuple[Tuple[str, int], ...]
    transfers: Tuple[TransferRecord, ...] = field(default_factory=tuple)

    @property
    def total_refunded(self) -> int:
        return self.deposit_refund + sum(amount for _, amount in self.backer_refunds)

    @property
    def failed(self) -> Tuple[TransferRecord, ...]:
        return tuple(t for t in self.transfers if not t.succeeded)

    def to_dict(self) -> dict:
        return {
            "campaign_id": self.campaign_id,
            "deposit_refund": self.deposit_refund,
            "backer_refunds": [
                {"backer": backer, "amount": amount}
                for backer, amount in self.backer_refunds
            ],
            "total_refunded": self.total_refunded,
            "failed": [t.to_dict() for t in self.failed],
        }
