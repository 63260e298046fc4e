"""Token issuer — the only minter of receipt-token supply.

Receipt tokens are minted 1:1 against contributions, scaled from the
settlement asset's decimals to the receipt token's decimals. During
funding the issuer holds a provisional ceiling of scaled(campaign_goal),
which the registry's goal check keeps out of reach. At success
finalization the pool allocation is minted once and the engine cap is
locked at the resulting supply; no mint is accepted after that.

A CapExceeded from this module means caps were computed wrong. It is an
internal fault, not a user error.
"""

from __future__ import annotations

from typing import Dict, Set

from eventfund.adapters.interfaces import CappedTokenEngine
from eventfund.errors import CapExceeded, InvalidAmount
from eventfund.logging import get_logger
from eventfund.models.campaign import Campaign


log = get_logger(__name__)


class TokenIssuer:
    """Deploys, mints and caps receipt tokens for campaigns.

    Usage:
        issuer = TokenIssuer(engine, token_decimals=18)
        token_id = issuer.deploy(campaign)
        issuer.mint_contribution(token_id, "alice", 500, funding_decimals=6)
        cap = issuer.mint_pool_allocation(token_id, pool_account, allocation)
    """

    def __init__(self, engine: CappedTokenEngine, token_decimals: int) -> None:
        if token_decimals < 0:
            raise ValueError(f"Token decimals must be non-negative, got {token_decimals}")
        self._engine = engine
        self._token_decimals = token_decimals
        self._ceilings: Dict[str, int] = {}
        self._allocated: Set[str] = set()
        self._locked: Set[str] = set()

    @property
    def token_decimals(self) -> int:
        return self._token_decimals

    def to_token_units(self, amount: int, funding_decimals: int) -> int:
        """Scale a settlement-asset amount to receipt-token base units.

        Scaling up is exact. Scaling down must also be exact; a remainder
        would break the 1:1 rule, so it raises InvalidAmount.
        """
        shift = self._token_decimals - funding_decimals
        if shift >= 0:
            return amount * 10 ** shift
        factor = 10 ** (-shift)
        if amount % factor:
            raise InvalidAmount(
                f"Amount {amount} is not representable in {self._token_decimals} "
                f"token decimals (settlement asset has {funding_decimals})"
            )
        return amount // factor

    def deploy(self, campaign: Campaign) -> str:
        """Deploy the campaign's receipt token with zero supply."""
        token_id = self._engine.deploy(
            campaign.event_name, campaign.token_symbol, self._token_decimals
        )
        self._ceilings[token_id] = self.to_token_units(
            campaign.campaign_goal, campaign.funding_decimals
        )
        log.info(
            "receipt_token_deployed",
            campaign_id=campaign.campaign_id,
            token_id=token_id,
            symbol=campaign.token_symbol,
            decimals=self._token_decimals,
        )
        return token_id

    def mint_contribution(
        self,
        token_id: str,
        backer: str,
        amount: int,
        funding_decimals: int,
    ) -> int:
        """Mint receipt tokens 1:1 for a contribution. Returns units minted."""
        minted = self.to_token_units(amount, funding_decimals)
        if token_id in self._locked:
            raise CapExceeded(f"Token {token_id} cap is locked; no further minting")
        ceiling = self._ceilings.get(token_id)
        if ceiling is None:
            raise ValueError(f"Token {token_id} was not deployed by this issuer")
        supply = self._engine.total_supply(token_id)
        if supply + minted > ceiling:
            raise CapExceeded(
                f"Mint of {minted} to {backer} exceeds ceiling {ceiling} "
                f"(supply {supply}) for token {token_id}"
            )
        self._engine.mint(token_id, backer, minted)
        return minted

    def mint_pool_allocation(self, token_id: str, pool_account: str, allocation: int) -> int:
        """Mint the pool's token share once and lock the cap at supply.

        Safe to call again after the engine failed part way: an allocation
        that was already minted is not minted twice.

        Returns the permanent cap.
        """
        if token_id in self._locked:
            raise CapExceeded(f"Token {token_id} cap is locked; no further minting")
        if allocation < 0:
            raise InvalidAmount(f"Pool allocation must be non-negative, got {allocation}")
        if allocation and token_id not in self._allocated:
            self._engine.mint(token_id, pool_account, allocation)
        self._allocated.add(token_id)
        cap = self._engine.total_supply(token_id)
        self._engine.set_cap(token_id, cap)
        self._locked.add(token_id)
        log.info(
            "receipt_token_cap_locked",
            token_id=token_id, pool_allocation=allocation, cap=cap,
        )
        return cap

    def is_locked(self, token_id: str) -> bool:
        return token_id in self._locked

    def ceiling(self, token_id: str) -> int:
        return self._ceilings[token_id]
