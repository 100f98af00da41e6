"""Step ordering for the deployment state machine.

NONE -> TOKEN_DEPLOYED -> AMM_DEPLOYED -> AMM_INITIALIZED -> SUPPLY_TRANSFERRED

A fresh deployment and a resume run the same loop; they differ only in
which prefix of STEP_ORDER is already behind them.
"""

from src.lp_common.enums import DeploymentStep

STEP_ORDER: tuple[DeploymentStep, ...] = (
    DeploymentStep.TOKEN_DEPLOYED,
    DeploymentStep.AMM_DEPLOYED,
    DeploymentStep.AMM_INITIALIZED,
    DeploymentStep.SUPPLY_TRANSFERRED,
)


def step_rank(step: DeploymentStep | None) -> int:
    """0 for NONE, 1..4 along STEP_ORDER."""
    if step is None:
        return 0
    return STEP_ORDER.index(step) + 1


def remaining_steps(completed: DeploymentStep | None) -> tuple[DeploymentStep, ...]:
    return STEP_ORDER[step_rank(completed):]


def next_step(completed: DeploymentStep | None) -> DeploymentStep | None:
    remaining = remaining_steps(completed)
    return remaining[0] if remaining else None


def deployment_id(owner_address: str, symbol: str) -> str:
    """One live workflow per (owner, symbol); also the final market id."""
    return f"{owner_address}.{symbol.lower()}"
