"""Domain models for lp_market: the finalized bonding-curve pair."""

from dataclasses import dataclass, replace
from datetime import datetime
from fractions import Fraction

from src.lp_curve.domain.models import CurveState, funding_progress, spot_price


@dataclass
class Market:
    id: str
    owner_address: str
    name: str
    symbol: str
    description: str
    token_contract_ref: str
    amm_contract_ref: str
    real_reserve: int
    virtual_reserve: int
    token_reserve: int
    target_reserve: int
    created_at: datetime
    updated_at: datetime

    @property
    def price(self) -> Fraction:
        return spot_price(self.real_reserve + self.virtual_reserve, self.token_reserve)

    @property
    def progress(self) -> Fraction:
        return funding_progress(self.real_reserve, self.target_reserve)

    def curve(self) -> CurveState:
        """Last persisted reserves in pricing-engine shape (may be stale)."""
        return CurveState(
            market_ref=self.amm_contract_ref,
            real_reserve=self.real_reserve,
            virtual_reserve=self.virtual_reserve,
            token_reserve=self.token_reserve,
            target_reserve=self.target_reserve,
        )

    def with_curve(self, state: CurveState, now: datetime) -> "Market":
        """Copy with reserves taken from a fresh chain read.

        Artifact refs and virtual_reserve are fixed at creation and kept.
        """
        return replace(
            self,
            real_reserve=state.real_reserve,
            token_reserve=state.token_reserve,
            target_reserve=state.target_reserve,
            updated_at=now,
        )
