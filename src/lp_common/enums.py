"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class DeploymentStep(str, Enum):
    """Confirmed provisioning checkpoints, in strict forward order."""
    TOKEN_DEPLOYED = "TOKEN_DEPLOYED"
    AMM_DEPLOYED = "AMM_DEPLOYED"
    AMM_INITIALIZED = "AMM_INITIALIZED"
    SUPPLY_TRANSFERRED = "SUPPLY_TRANSFERRED"


class TradeSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class TxStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"
