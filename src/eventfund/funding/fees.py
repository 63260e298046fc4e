"""Fee splitter — divides a campaign's escrow at finalization.

On success the split is:
    protocol_fee      = organizer_deposit       → protocol treasury
    organizer_payout  = target_amount           → organizer
    excess            = raised - target         → stays for the pool

No fee is taken from contributions. On expiry every backer gets back their
cumulative contribution and the organizer gets back the full deposit.

Each leg is attempted on its own. A leg that fails (a recipient that
refuses funds, an RPC error, a dropped connection) is recorded as a failed
TransferRecord and the batch continues. A batch never raises part way
through: every leg it reached is returned and handed to `on_transfer` as
soon as it settles. Callers retry failed legs explicitly; nothing here
retries on its own.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Set, Tuple
from uuid import uuid4

from eventfund.adapters.interfaces import SettlementAsset
from eventfund.errors import AlreadyFinalized, TransferFailed
from eventfund.logging import get_logger
from eventfund.models.campaign import Campaign
from eventfund.models.settlement import (
    RefundSettlement,
    SuccessPlan,
    SuccessSettlement,
    TransferKind,
    TransferRecord,
    TransferStatus,
)


log = get_logger(__name__)

TransferCallback = Callable[[TransferRecord], None]


class FeeSplitter:
    """Computes and executes payout and refund batches out of escrow.

    Usage:
        splitter = FeeSplitter(asset, escrow_account, treasury)
        plan = splitter.plan_success(campaign)
        settlement = splitter.settle_success(campaign)
    """

    def __init__(
        self,
        asset: SettlementAsset,
        escrow_account: str,
        protocol_treasury: str,
    ) -> None:
        self._asset = asset
        self._escrow = escrow_account
        self._treasury = protocol_treasury
        self._finalized: Set[int] = set()
        self._lock = threading.Lock()

    @property
    def escrow_account(self) -> str:
        return self._escrow

    @property
    def protocol_treasury(self) -> str:
        return self._treasury

    def plan_success(self, campaign: Campaign) -> SuccessPlan:
        """Pure split of a funded campaign. No funds move."""
        return SuccessPlan(
            campaign_id=campaign.campaign_id,
            raised_amount=campaign.raised_amount,
            protocol_fee=campaign.organizer_deposit,
            organizer_payout=campaign.target_amount,
            excess=campaign.raised_amount - campaign.target_amount,
        )

    def is_finalized(self, campaign_id: int) -> bool:
        return campaign_id in self._finalized

    def settle_success(
        self,
        campaign: Campaign,
        now: Optional[datetime] = None,
        on_transfer: Optional[TransferCallback] = None,
    ) -> SuccessSettlement:
        """Pay the organizer and take the protocol fee, exactly once.

        Raises AlreadyFinalized on a second call for the same campaign.
        """
        with self._lock:
            if campaign.campaign_id in self._finalized:
                raise AlreadyFinalized(
                    f"Campaign {campaign.campaign_id} has already been finalized"
                )
            self._finalized.add(campaign.campaign_id)

        plan = self.plan_success(campaign)
        transfers = self._execute_batch(
            campaign.campaign_id,
            [
                (TransferKind.ORGANIZER_PAYOUT, campaign.organizer, plan.organizer_payout),
                (TransferKind.PROTOCOL_FEE, self._treasury, plan.protocol_fee),
            ],
            now,
            on_transfer,
        )
        return SuccessSettlement(plan=plan, transfers=tuple(transfers))

    def settle_refunds(
        self,
        campaign: Campaign,
        contributors: Iterable[Tuple[str, int]],
        now: Optional[datetime] = None,
        on_transfer: Optional[TransferCallback] = None,
    ) -> RefundSettlement:
        """Refund the deposit and every backer's cumulative contribution."""
        backer_refunds = tuple((backer, amount) for backer, amount in contributors if amount > 0)
        legs = [(TransferKind.DEPOSIT_REFUND, campaign.organizer, campaign.organizer_deposit)]
        legs.extend((TransferKind.BACKER_REFUND, backer, amount) for backer, amount in backer_refunds)

        transfers = self._execute_batch(campaign.campaign_id, legs, now, on_transfer)
        return RefundSettlement(
            campaign_id=campaign.campaign_id,
            deposit_refund=campaign.organizer_deposit,
            backer_refunds=backer_refunds,
            transfers=tuple(transfers),
        )

    def transfer_leg(
        self,
        campaign_id: int,
        kind: TransferKind,
        recipient: str,
        amount: int,
        now: Optional[datetime] = None,
    ) -> TransferRecord:
        """Create and attempt a single leg out of escrow."""
        if now is None:
            now = datetime.now(timezone.utc)
        record = TransferRecord(
            transfer_id=f"xfer_{uuid4().hex[:12]}",
            campaign_id=campaign_id,
            kind=kind,
            recipient=recipient,
            amount=amount,
            created_utc=now,
        )
        return self.attempt(record, now)

    def attempt(
        self,
        record: TransferRecord,
        now: Optional[datetime] = None,
    ) -> TransferRecord:
        """Attempt (or re-attempt) one leg.

        Never raises on a failed transfer. A TransferFailed is the expected
        refusal; any other error out of the asset (a dropped RPC
        connection, a timeout) is logged with its traceback and recorded
        the same way, since the leg may be retried once the fault clears.
        """
        if record.succeeded:
            return record
        if now is None:
            now = datetime.now(timezone.utc)

        record.attempts += 1
        try:
            self._asset.transfer_from(self._escrow, record.recipient, record.amount)
        except TransferFailed as exc:
            self._mark_failed(record, str(exc))
            log.warning(
                "transfer_failed",
                campaign_id=record.campaign_id,
                kind=record.kind.value,
                recipient=record.recipient,
                amount=record.amount,
                attempts=record.attempts,
                error=record.error,
            )
            return record
        except Exception as exc:
            self._mark_failed(record, f"{type(exc).__name__}: {exc}")
            log.exception(
                "transfer_error",
                campaign_id=record.campaign_id,
                kind=record.kind.value,
                recipient=record.recipient,
                amount=record.amount,
                attempts=record.attempts,
            )
            return record

        record.status = TransferStatus.COMPLETED
        record.error = None
        record.completed_utc = now
        log.info(
            "transfer_completed",
            campaign_id=record.campaign_id,
            kind=record.kind.value,
            recipient=record.recipient,
            amount=record.amount,
        )
        return record

    @staticmethod
    def _mark_failed(record: TransferRecord, error: str) -> None:
        record.status = TransferStatus.FAILED
        record.error = error

    def _execute_batch(
        self,
        campaign_id: int,
        legs: Iterable[Tuple[TransferKind, str, int]],
        now: Optional[datetime],
        on_transfer: Optional[TransferCallback] = None,
    ) -> List[TransferRecord]:
        transfers: List[TransferRecord] = []
        for kind, recipient, amount in legs:
            if amount <= 0:
                continue
            record = self.transfer_leg(campaign_id, kind, recipient, amount, now)
            transfers.append(record)
            if on_transfer is not None:
                on_transfer(record)
        return transfers
