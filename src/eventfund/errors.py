"""Error taxonomy for campaign funding and liquidity bootstrap.

User-facing operations raise immediately. Batch settlement is the one
exception: TransferFailed is captured per leg and recorded, never
propagated out of a refund or payout batch.

CapExceeded signals an internal invariant violation (caps are computed so
that it cannot happen) and is never caught by the registry.
"""

from __future__ import annotations


class EventFundError(Exception):
    """Base class for all eventfund errors."""


class InvalidParameters(EventFundError):
    """Campaign creation inputs are invalid."""


class InvalidAmount(EventFundError):
    """A contribution or mint amount is zero, negative, or out of range."""


class InsufficientDeposit(EventFundError):
    """The organizer has not funded or approved the upfront deposit."""


class InsufficientBalance(EventFundError):
    """The caller lacks funds or approval for the transfer."""


class CampaignNotFound(EventFundError):
    """No campaign exists with the given id."""


class CampaignNotActive(EventFundError):
    """The campaign no longer accepts contributions."""


class NotExpired(EventFundError):
    """A close was requested before the deadline or on a funded campaign."""


class AlreadyClosed(EventFundError):
    """A close was requested on a campaign that is already closed."""


class AlreadyFinalized(EventFundError):
    """Success finalization was requested twice for the same campaign."""


class TargetNotReached(EventFundError):
    """Success finalization was requested before the target was met."""


class CapExceeded(EventFundError):
    """A mint would exceed the receipt token's cap."""


class TransitionError(EventFundError):
    """Raised when a campaign status transition is not allowed."""


class TransferFailed(EventFundError):
    """A single transfer leg failed.

    Carries the leg's recipient and amount so batch settlement can record
    it and move on to the next leg.
    """

    def __init__(self, message: str, recipient: str = "", amount: int = 0) -> None:
        super().__init__(message)
        self.recipient = recipient
        self.amount = amount
