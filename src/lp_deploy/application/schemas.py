"""Pydantic schemas for lp_deploy requests and responses."""

from pydantic import BaseModel, Field

from src.lp_common.datetime_utils import to_utc_iso
from src.lp_deploy.domain.models import DeploymentRecord
from src.lp_deploy.domain.validators import (
    MAX_DESCRIPTION_LEN,
    MAX_NAME_LEN,
    MAX_SYMBOL_LEN,
)


class DeployRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LEN)
    symbol: str = Field(..., min_length=1, max_length=MAX_SYMBOL_LEN)
    description: str = Field("", max_length=MAX_DESCRIPTION_LEN)


class DeploymentOut(BaseModel):
    id: str
    owner_address: str
    name: str
    symbol: str
    description: str
    completion_step: str | None
    token_contract_ref: str | None
    amm_contract_ref: str | None
    last_tx_id: str | None
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, r: DeploymentRecord) -> "DeploymentOut":
        return cls(
            id=r.id,
            owner_address=r.owner_address,
            name=r.name,
            symbol=r.symbol,
            description=r.description,
            completion_step=r.completion_step.value if r.completion_step else None,
            token_contract_ref=r.token_contract_ref,
            amm_contract_ref=r.amm_contract_ref,
            last_tx_id=r.last_tx_id,
            created_at=to_utc_iso(r.created_at),
            updated_at=to_utc_iso(r.updated_at),
        )


class DeploymentListResponse(BaseModel):
    items: list[DeploymentOut]
