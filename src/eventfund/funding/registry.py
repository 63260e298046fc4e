"""Campaign registry — owns campaigns, escrow accounting and the state machine.

The registry is the public surface of the funding core:
    create                   open a campaign, escrow the organizer deposit
    contribute               accept funds, mint receipts, finalize on target
    close_expired_campaign   refund everyone once the deadline has passed
    get_status               read-only snapshot
    get_event_token          the campaign's receipt token

Concurrency: every mutation of a campaign runs under that campaign's lock,
so contributions are ordered and the target-crossing contribution
finalizes the campaign before any other contribution is looked at. The
registry-level lock guards id allocation and the lock table only;
different campaigns never wait on each other.

All-or-nothing: a campaign either reaches its target (organizer paid,
deposit kept as the protocol fee, excess seeded into the pool) or expires
and is closed with every unit of escrow returned.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_DOWN
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from eventfund.adapters.interfaces import CappedTokenEngine, PoolEngine, SettlementAsset
from eventfund.errors import (
    AlreadyClosed,
    AlreadyFinalized,
    CampaignNotActive,
    CampaignNotFound,
    CapExceeded,
    InsufficientBalance,
    InsufficientDeposit,
    InvalidAmount,
    InvalidParameters,
    NotExpired,
    TargetNotReached,
    TransferFailed,
)
from eventfund.funding.fees import FeeSplitter
from eventfund.funding.issuer import TokenIssuer
from eventfund.funding.ledger import ContributionLedger
from eventfund.funding.state_machine import CampaignStateMachine
from eventfund.liquidity.bootstrapper import LiquidityBootstrapper
from eventfund.logging import get_campaign_logger, get_logger
from eventfund.models.campaign import Campaign, CampaignStatus, CampaignStatusView
from eventfund.models.liquidity import PoolKey, PoolSeed
from eventfund.models.settlement import (
    RefundSettlement,
    SuccessSettlement,
    TransferKind,
    TransferRecord,
)
from eventfund.persistence.event_log import EventKind, EventLog, EventRecord
from eventfund.policy.params import FundingParams, ParamsResolver


log = get_logger(__name__)


@dataclass
class _CampaignBook:
    """Registry-private bookkeeping kept alongside a campaign.

    The liquidity fields record how far pool bootstrap got, so a retry
    resumes after the last completed step.
    """
    lock: threading.Lock = field(default_factory=threading.Lock)
    transfers: List[TransferRecord] = field(default_factory=list)
    settlement: Optional[SuccessSettlement] = None
    refunds: Optional[RefundSettlement] = None
    seed: Optional[PoolSeed] = None
    pool_resolved: bool = False
    pool_seed_leg: Optional[TransferRecord] = None
    liquidity_complete: bool = False
    liquidity_error: Optional[str] = None


class CampaignRegistry:
    """All-or-nothing campaign funding with receipt tokens and pool seeding.

    Usage:
        registry = CampaignRegistry.from_params(resolver, asset, token_engine, pool_engine)
        campaign_id = registry.create("org", "Summer Fest", "SFEST", 100_000, 30)
        registry.contribute(campaign_id, "alice", 40_000)
        registry.get_status(campaign_id)
    """

    def __init__(
        self,
        asset: SettlementAsset,
        issuer: TokenIssuer,
        fee_splitter: FeeSplitter,
        bootstrapper: LiquidityBootstrapper,
        funding: FundingParams,
        ledger: Optional[ContributionLedger] = None,
        event_log: Optional[EventLog] = None,
    ) -> None:
        self._asset = asset
        self._issuer = issuer
        self._fee_splitter = fee_splitter
        self._bootstrapper = bootstrapper
        self._funding = funding
        self._ledger = ledger or ContributionLedger()
        self._event_log = event_log
        self._state_machine = CampaignStateMachine()

        self._campaigns: Dict[int, Campaign] = {}
        self._books: Dict[int, _CampaignBook] = {}
        self._next_id = 0
        self._registry_lock = threading.Lock()

    @classmethod
    def from_params(
        cls,
        resolver: ParamsResolver,
        asset: SettlementAsset,
        token_engine: CappedTokenEngine,
        pool_engine: PoolEngine,
        event_log: Optional[EventLog] = None,
    ) -> CampaignRegistry:
        """Wire a registry and its components from launchpad parameters."""
        funding = resolver.funding_params()
        issuer = TokenIssuer(token_engine, funding.event_token_decimals)
        splitter = FeeSplitter(asset, funding.escrow_account, funding.protocol_treasury)
        bootstrapper = LiquidityBootstrapper(
            resolver.liquidity_params(), funding.event_token_decimals, pool_engine
        )
        return cls(asset, issuer, splitter, bootstrapper, funding, event_log=event_log)

    @property
    def escrow_account(self) -> str:
        return self._funding.escrow_account

    @property
    def ledger(self) -> ContributionLedger:
        return self._ledger

    @property
    def campaign_count(self) -> int:
        return len(self._campaigns)

    def campaign_ids(self) -> List[int]:
        """Ids of every published campaign, ascending.

        A create that failed after reserving its id leaves a gap.
        """
        with self._registry_lock:
            return sorted(self._campaigns)

    # ------------------------------------------------------------------ #
    # Public operations                                                   #
    # ------------------------------------------------------------------ #

    def create(
        self,
        organizer: str,
        event_name: str,
        token_symbol: str,
        target_amount: int,
        duration_days: int,
        funding_token: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Open a campaign and escrow the organizer deposit.

        Args:
            organizer: Identity that receives the payout on success.
            event_name: Event name, also the receipt token's name.
            token_symbol: Receipt token symbol.
            target_amount: Funding goal in settlement-asset base units.
            duration_days: Days until the deadline.
            funding_token: Settlement asset id; must match the registry's
                asset when given.
            now: Current time (defaults to UTC now).

        Returns:
            The new campaign id.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        if not organizer or not organizer.strip():
            raise InvalidParameters("Organizer is required")
        if not event_name or not event_name.strip():
            raise InvalidParameters("Event name is required")
        if not token_symbol or not token_symbol.strip():
            raise InvalidParameters("Token symbol is required")
        if target_amount <= 0:
            raise InvalidParameters(f"Target amount must be positive, got {target_amount}")
        if duration_days <= 0:
            raise InvalidParameters(f"Duration must be positive, got {duration_days} days")
        if not (self._funding.min_duration_days <= duration_days <= self._funding.max_duration_days):
            raise InvalidParameters(
                f"Duration {duration_days} days outside "
                f"[{self._funding.min_duration_days}, {self._funding.max_duration_days}]"
            )
        if funding_token is not None and funding_token.lower() != self._asset.token_id.lower():
            raise InvalidParameters(
                f"Unsupported funding token {funding_token}; "
                f"this registry settles in {self._asset.token_id}"
            )

        deposit = self.deposit_for(target_amount)
        if deposit <= 0:
            raise InvalidParameters(
                f"Target {target_amount} is too small for a non-zero deposit "
                f"at ratio {self._funding.deposit_ratio}"
            )

        funding_decimals = self._asset.decimals()
        with self._registry_lock:
            campaign_id = self._next_id
            self._next_id += 1

        campaign = Campaign(
            campaign_id=campaign_id,
            organizer=organizer,
            event_name=event_name.strip(),
            token_symbol=token_symbol.strip(),
            funding_token=self._asset.token_id,
            funding_decimals=funding_decimals,
            target_amount=target_amount,
            organizer_deposit=deposit,
            deadline_utc=now + timedelta(days=duration_days),
            created_utc=now,
            max_raise_ratio=self._funding.max_raise_ratio,
        )
        campaign.event_token_id = self._issuer.deploy(campaign)

        # Last fallible step: nothing after this can strand the deposit
        try:
            self._asset.transfer_from(organizer, self._funding.escrow_account, deposit)
        except TransferFailed as exc:
            raise InsufficientDeposit(
                f"Organizer {organizer} must approve and hold a deposit of {deposit}: {exc}"
            ) from exc

        self._record_event(campaign, EventKind.CAMPAIGN_CREATED, now, {
            "organizer": organizer,
            "event_name": campaign.event_name,
            "token_symbol": campaign.token_symbol,
            "target_amount": target_amount,
            "organizer_deposit": deposit,
            "deadline_utc": campaign.deadline_utc.isoformat(),
            "event_token_id": campaign.event_token_id,
        })

        # Published only once fully built
        with self._registry_lock:
            self._campaigns[campaign_id] = campaign
            self._books[campaign_id] = _CampaignBook()
        get_campaign_logger(__name__, campaign_id).info(
            "campaign_created",
            organizer=organizer,
            target_amount=target_amount,
            organizer_deposit=deposit,
            deadline=campaign.deadline_utc.isoformat(),
        )
        return campaign_id

    def contribute(
        self,
        campaign_id: int,
        backer: str,
        amount: int,
        now: Optional[datetime] = None,
    ) -> int:
        """Accept a contribution and mint receipt tokens 1:1.

        If this contribution meets the target, success finalization runs
        before returning.

        Returns:
            The campaign's raised amount after this contribution.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        book = self._book(campaign_id)
        with book.lock:
            campaign = self._campaigns[campaign_id]
            if campaign.status == CampaignStatus.ACTIVE and campaign.is_past_deadline(now):
                self._expire(campaign, now)
            if not self._state_machine.accepts_contributions(campaign, now):
                raise CampaignNotActive(
                    f"Campaign {campaign_id} is {campaign.status.value} and not accepting "
                    f"contributions"
                )
            if amount <= 0:
                raise InvalidAmount(f"Contribution amount must be positive, got {amount}")
            remaining = campaign.campaign_goal - campaign.raised_amount
            if amount > remaining:
                raise InvalidAmount(
                    f"Contribution of {amount} exceeds campaign goal; "
                    f"at most {remaining} can be accepted"
                )
            # Representability check before any funds move
            self._issuer.to_token_units(amount, campaign.funding_decimals)

            try:
                self._asset.transfer_from(backer, self._funding.escrow_account, amount)
            except TransferFailed as exc:
                raise InsufficientBalance(
                    f"Backer {backer} cannot fund contribution of {amount}: {exc}"
                ) from exc

            try:
                minted = self._issuer.mint_contribution(
                    campaign.event_token_id, backer, amount, campaign.funding_decimals
                )
            except Exception:
                self._return_contribution(campaign, book, backer, amount, now)
                raise
            is_new = self._ledger.record(campaign_id, backer, amount, now)
            campaign.raised_amount += amount
            if is_new:
                campaign.unique_backers += 1

            self._record_event(campaign, EventKind.CONTRIBUTION_RECORDED, now, {
                "backer": backer,
                "amount": amount,
                "minted": minted,
                "raised_amount": campaign.raised_amount,
                "new_backer": is_new,
            })
            get_campaign_logger(__name__, campaign_id).info(
                "contribution_recorded",
                backer=backer,
                amount=amount,
                raised_amount=campaign.raised_amount,
                target_amount=campaign.target_amount,
            )

            if campaign.target_met:
                self._finalize(campaign, book, now)
            return campaign.raised_amount

    def close_expired_campaign(
        self,
        campaign_id: int,
        now: Optional[datetime] = None,
    ) -> RefundSettlement:
        """Refund the deposit and every backer of an expired campaign.

        Each refund leg is independent; failed legs are recorded on the
        campaign and can be retried with retry_failed_transfers.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        book = self._book(campaign_id)
        with book.lock:
            campaign = self._campaigns[campaign_id]
            if campaign.status == CampaignStatus.CLOSED:
                raise AlreadyClosed(f"Campaign {campaign_id} is already closed")
            if campaign.status == CampaignStatus.FUNDED:
                raise NotExpired(f"Campaign {campaign_id} was funded and cannot be closed")
            if not campaign.is_past_deadline(now):
                raise NotExpired(
                    f"Campaign {campaign_id} deadline {campaign.deadline_utc.isoformat()} "
                    f"has not passed"
                )
            if campaign.status == CampaignStatus.ACTIVE:
                self._expire(campaign, now)

            raised_before = campaign.raised_amount
            refunds = self._fee_splitter.settle_refunds(
                campaign,
                self._ledger.all_contributors(campaign_id),
                now,
                on_transfer=lambda record: self._record_transfer(campaign, book, record, now),
            )
            book.refunds = refunds

            campaign.raised_amount = 0
            self._state_machine.apply_transition(campaign, CampaignStatus.CLOSED, now)
            campaign.closed_utc = now
            self._record_event(campaign, EventKind.CAMPAIGN_CLOSED, now, {
                "deposit_refund": refunds.deposit_refund,
                "raised_refunded": raised_before,
                "total_refunded": refunds.total_refunded,
                "failed_transfers": len(refunds.failed),
            })
            get_campaign_logger(__name__, campaign_id).info(
                "campaign_closed",
                total_refunded=refunds.total_refunded,
                failed_transfers=len(refunds.failed),
            )
            return refunds

    def get_status(
        self,
        campaign_id: int,
        now: Optional[datetime] = None,
    ) -> CampaignStatusView:
        """Read-only status snapshot. Never transitions the campaign.

        is_expired is true for an active campaign past its deadline and
        also for one already moved to expired but not yet closed.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        book = self._book(campaign_id)
        with book.lock:
            c = self._campaigns[campaign_id]
            past_deadline = c.is_past_deadline(now)
            return CampaignStatusView(
                is_active=c.status == CampaignStatus.ACTIVE and not past_deadline,
                is_expired=past_deadline and c.status in (
                    CampaignStatus.ACTIVE, CampaignStatus.EXPIRED
                ),
                is_funded=c.status == CampaignStatus.FUNDED,
                time_left=c.time_left(now),
                raised_amount=c.raised_amount,
                target_amount=c.target_amount,
                organizer_deposit=c.organizer_deposit,
                funding_token=c.funding_token,
                protocol_fees_collected=c.protocol_fees_collected,
                unique_backers=c.unique_backers,
            )

    def get_event_token(self, campaign_id: int) -> str:
        return self.get_campaign(campaign_id).event_token_id

    # ------------------------------------------------------------------ #
    # Supporting operations and reads                                     #
    # ------------------------------------------------------------------ #

    def finalize_success(
        self,
        campaign_id: int,
        now: Optional[datetime] = None,
    ) -> SuccessSettlement:
        """Run success finalization for a campaign that met its target.

        contribute() calls this path itself; a direct call only succeeds
        if that never happened, and otherwise raises AlreadyFinalized.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        book = self._book(campaign_id)
        with book.lock:
            campaign = self._campaigns[campaign_id]
            if campaign.status == CampaignStatus.FUNDED or self._fee_splitter.is_finalized(campaign_id):
                raise AlreadyFinalized(f"Campaign {campaign_id} has already been finalized")
            if not campaign.target_met:
                raise TargetNotReached(
                    f"Campaign {campaign_id} raised {campaign.raised_amount} "
                    f"of {campaign.target_amount}"
                )
            return self._finalize(campaign, book, now)

    def retry_failed_transfers(
        self,
        campaign_id: int,
        now: Optional[datetime] = None,
    ) -> List[TransferRecord]:
        """Re-attempt every failed settlement leg of a campaign.

        A funded campaign whose pool bootstrap stopped part way (pool
        creation, cap lock, seed leg or liquidity request) resumes it here.

        Returns the legs that were retried, with their updated status.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        book = self._book(campaign_id)
        with book.lock:
            campaign = self._campaigns[campaign_id]
            retried = [t for t in book.transfers if not t.succeeded]
            for record in retried:
                self._fee_splitter.attempt(record, now)
                self._record_transfer_event(campaign, record, now)
            if campaign.status == CampaignStatus.FUNDED and not book.liquidity_complete:
                self._bootstrap_liquidity(campaign, book, now)
            return retried

    def liquidity_pending(self, campaign_id: int) -> bool:
        """True for a funded campaign whose pool bootstrap has not finished."""
        book = self._book(campaign_id)
        with book.lock:
            campaign = self._campaigns[campaign_id]
            return campaign.status == CampaignStatus.FUNDED and not book.liquidity_complete

    def get_campaign(self, campaign_id: int) -> Campaign:
        self._book(campaign_id)
        return self._campaigns[campaign_id]

    def get_campaign_goal(self, campaign_id: int) -> int:
        return self.get_campaign(campaign_id).campaign_goal

    def get_pool_key(self, campaign_id: int) -> Optional[PoolKey]:
        return self.get_campaign(campaign_id).pool_key

    def get_pool_seed(self, campaign_id: int) -> Optional[PoolSeed]:
        return self._book(campaign_id).seed

    def get_settlement(self, campaign_id: int) -> Optional[SuccessSettlement]:
        return self._book(campaign_id).settlement

    def transfers(self, campaign_id: int) -> List[TransferRecord]:
        return list(self._book(campaign_id).transfers)

    def contributions(self, campaign_id: int) -> List[Tuple[str, int]]:
        self._book(campaign_id)
        return self._ledger.all_contributors(campaign_id)

    def deposit_for(self, target_amount: int) -> int:
        """Organizer deposit owed for a target, rounded down."""
        deposit = (Decimal(target_amount) * self._funding.deposit_ratio).to_integral_value(
            rounding=ROUND_DOWN
        )
        return int(deposit)

    # ------------------------------------------------------------------ #
    # Internal transitions — callers hold the campaign lock               #
    # ------------------------------------------------------------------ #

    def _expire(self, campaign: Campaign, now: datetime) -> None:
        self._state_machine.apply_transition(campaign, CampaignStatus.EXPIRED, now)
        self._record_event(campaign, EventKind.CAMPAIGN_EXPIRED, now, {
            "raised_amount": campaign.raised_amount,
            "target_amount": campaign.target_amount,
        })
        get_campaign_logger(__name__, campaign.campaign_id).info(
            "campaign_expired",
            raised_amount=campaign.raised_amount,
            target_amount=campaign.target_amount,
        )

    def _finalize(
        self,
        campaign: Campaign,
        book: _CampaignBook,
        now: datetime,
    ) -> SuccessSettlement:
        """Funded transition, payout and fee, then pool bootstrap and cap lock."""
        clog = get_campaign_logger(__name__, campaign.campaign_id)
        self._state_machine.apply_transition(campaign, CampaignStatus.FUNDED, now)

        plan = self._fee_splitter.plan_success(campaign)
        campaign.protocol_fees_collected = plan.protocol_fee
        campaign.finalized_utc = now
        self._record_event(campaign, EventKind.CAMPAIGN_FUNDED, now, {
            "raised_amount": plan.raised_amount,
            "organizer_payout": plan.organizer_payout,
            "protocol_fee": plan.protocol_fee,
            "excess": plan.excess,
        })
        settlement = self._fee_splitter.settle_success(
            campaign,
            now,
            on_transfer=lambda record: self._record_transfer(campaign, book, record, now),
        )
        book.settlement = settlement
        clog.info(
            "campaign_funded",
            raised_amount=plan.raised_amount,
            organizer_payout=plan.organizer_payout,
            protocol_fee=plan.protocol_fee,
            excess=plan.excess,
        )

        self._bootstrap_liquidity(campaign, book, now)
        return settlement

    def _bootstrap_liquidity(
        self,
        campaign: Campaign,
        book: _CampaignBook,
        now: datetime,
    ) -> bool:
        """Run or resume pool bootstrap for a funded campaign.

        The payout is already settled by the time this runs, so a failing
        pool or token engine must not unwind it. The failure is logged,
        recorded on the book and in the event log, and left for
        retry_failed_transfers. CapExceeded is an internal fault and
        propagates.

        Returns True once every step has completed.
        """
        try:
            self._liquidity_steps(campaign, book, now)
        except CapExceeded:
            raise
        except Exception as exc:
            book.liquidity_error = f"{type(exc).__name__}: {exc}"
            get_campaign_logger(__name__, campaign.campaign_id).exception(
                "liquidity_bootstrap_failed", error=book.liquidity_error
            )
            self._record_event(campaign, EventKind.LIQUIDITY_FAILED, now, {
                "error": book.liquidity_error,
                "pool_id": campaign.pool_id,
                "cap_locked": self._issuer.is_locked(campaign.event_token_id),
            })
            return False
        book.liquidity_error = None
        return book.liquidity_complete

    def _liquidity_steps(
        self,
        campaign: Campaign,
        book: _CampaignBook,
        now: datetime,
    ) -> None:
        # Each step is skipped once done; see _CampaignBook
        if book.liquidity_complete:
            return
        if book.seed is None:
            book.seed = self._bootstrapper.compute_seed(
                campaign.raised_amount - campaign.target_amount,
                campaign.funding_decimals,
                campaign.event_token_id,
                campaign.funding_token,
            )
        seed = book.seed

        if not book.pool_resolved:
            pool_id = self._bootstrapper.create_pool(seed)
            book.pool_resolved = True
            if pool_id is not None:
                campaign.pool_id = pool_id
                campaign.pool_key = seed.key
        pool_id = campaign.pool_id

        if pool_id is None:
            pool_account = self._funding.escrow_account
            allocation = 0
        else:
            pool_account = self._bootstrapper.pool_account(pool_id)
            allocation = seed.base_amount

        if not self._issuer.is_locked(campaign.event_token_id):
            cap = self._issuer.mint_pool_allocation(
                campaign.event_token_id, pool_account, allocation
            )
            self._record_event(campaign, EventKind.TOKEN_CAP_LOCKED, now, {
                "event_token_id": campaign.event_token_id,
                "cap": cap,
                "pool_allocation": allocation,
            })

        if pool_id is None:
            book.liquidity_complete = True
            return

        if book.pool_seed_leg is None:
            book.pool_seed_leg = self._fee_splitter.transfer_leg(
                campaign.campaign_id, TransferKind.POOL_SEED, pool_account,
                seed.quote_amount, now,
            )
            self._record_transfer(campaign, book, book.pool_seed_leg, now)
        if not book.pool_seed_leg.succeeded:
            # The quote side never reached the pool; retried with the other legs
            return

        self._bootstrapper.provide_liquidity(pool_id, seed)
        book.liquidity_complete = True
        self._record_event(campaign, EventKind.POOL_SEEDED, now, {
            "pool_id": pool_id,
            "base_amount": seed.base_amount,
            "quote_amount": seed.quote_amount,
            "initial_tick": seed.initial_tick,
        })

    def _return_contribution(
        self,
        campaign: Campaign,
        book: _CampaignBook,
        backer: str,
        amount: int,
        now: datetime,
    ) -> None:
        """Hand back a pulled contribution whose mint failed.

        The contribution never reaches the ledger, so close would not
        refund it. A return that fails stays on the book for retry.
        """
        record = self._fee_splitter.transfer_leg(
            campaign.campaign_id, TransferKind.CONTRIBUTION_RETURN, backer, amount, now
        )
        self._record_transfer(campaign, book, record, now)
        get_campaign_logger(__name__, campaign.campaign_id).warning(
            "contribution_returned",
            backer=backer,
            amount=amount,
            returned=record.succeeded,
        )

    def _record_transfer(
        self,
        campaign: Campaign,
        book: _CampaignBook,
        record: TransferRecord,
        now: datetime,
    ) -> None:
        book.transfers.append(record)
        self._record_transfer_event(campaign, record, now)

    def _record_transfer_event(
        self,
        campaign: Campaign,
        record: TransferRecord,
        now: datetime,
    ) -> None:
        if not record.succeeded:
            kind = EventKind.TRANSFER_FAILED
        elif record.kind in (
            TransferKind.BACKER_REFUND,
            TransferKind.DEPOSIT_REFUND,
            TransferKind.CONTRIBUTION_RETURN,
        ):
            kind = EventKind.REFUND_ISSUED
        else:
            kind = EventKind.PAYOUT_SETTLED
        self._record_event(campaign, kind, now, record.to_dict())

    def _record_event(
        self,
        campaign: Campaign,
        kind: EventKind,
        now: datetime,
        payload: dict[str, Any],
    ) -> None:
        if self._event_log is None:
            return
        self._event_log.append(EventRecord.create(
            event_id=f"evt_{uuid4().hex[:16]}",
            event_kind=kind,
            campaign_id=campaign.campaign_id,
            payload=payload,
            timestamp_utc=now,
        ))

    def _book(self, campaign_id: int) -> _CampaignBook:
        """Internal lookup with clear error on missing ID."""
        with self._registry_lock:
            book = self._books.get(campaign_id)
        if book is None:
            raise CampaignNotFound(f"Unknown campaign ID: {campaign_id}")
        return book
