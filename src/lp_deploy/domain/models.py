"""Domain models for lp_deploy: the resumable provisioning checkpoint."""

from dataclasses import dataclass, replace
from datetime import datetime

from src.lp_common.enums import DeploymentStep
from src.lp_deploy.domain.workflow import next_step


@dataclass
class DeploymentRecord:
    """Progress of one (owner, symbol) deployment.

    completion_step=None is the NONE state: an in-memory draft that has not
    been persisted because no step has been confirmed yet.
    """

    id: str
    owner_address: str
    name: str
    symbol: str
    description: str
    completion_step: DeploymentStep | None
    token_contract_ref: str | None
    amm_contract_ref: str | None
    last_tx_id: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def is_complete(self) -> bool:
        return self.completion_step == DeploymentStep.SUPPLY_TRANSFERRED

    def advanced_to(
        self,
        step: DeploymentStep,
        tx_id: str,
        now: datetime,
        token_contract_ref: str | None = None,
        amm_contract_ref: str | None = None,
    ) -> "DeploymentRecord":
        """Copy checkpointed at the next confirmed step.

        Only the immediate successor is accepted and recorded artifact
        refs are never overwritten.
        """
        expected = next_step(self.completion_step)
        if step != expected:
            raise ValueError(
                f"Deployment {self.id}: cannot move from {self.completion_step} to {step}"
            )
        if token_contract_ref and self.token_contract_ref:
            raise ValueError(f"Deployment {self.id}: token artifact already recorded")
        if amm_contract_ref and self.amm_contract_ref:
            raise ValueError(f"Deployment {self.id}: AMM artifact already recorded")
        return replace(
            self,
            completion_step=step,
            token_contract_ref=token_contract_ref or self.token_contract_ref,
            amm_contract_ref=amm_contract_ref or self.amm_contract_ref,
            last_tx_id=tx_id,
            updated_at=now,
        )
