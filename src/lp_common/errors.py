"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Input / wallet session
  3xxx: Market
  4xxx: Trade
  6xxx: Deployment workflow
  9xxx: System
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Input / wallet session ---

class ValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1001, f"Invalid input: {detail}", 422)


class NotConnectedError(AppError):
    def __init__(self, detail: str = "No authenticated wallet address") -> None:
        super().__init__(1101, detail, 401)


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketUnavailableError(AppError):
    def __init__(self, market_ref: str, cause: str) -> None:
        self.market_ref = market_ref
        self.cause = cause
        super().__init__(3002, f"Market state unavailable for {market_ref}: {cause}", 503)


class MarketAlreadyExistsError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3003, f"Market already deployed: {market_id}", 409)


# --- 4xxx: Trade ---

class InsufficientLiquidityError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Insufficient liquidity: {detail}", 422)


class DegenerateTradeError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4002, f"Degenerate trade: {detail}", 422)


class TradeFailedError(AppError):
    def __init__(self, market_id: str, cause: str) -> None:
        self.cause = cause
        super().__init__(4003, f"Trade on {market_id} failed: {cause}", 502)


# --- 6xxx: Deployment workflow ---

class DeploymentNotFoundError(AppError):
    def __init__(self, deployment_id: str) -> None:
        super().__init__(6001, f"Deployment not found: {deployment_id}", 404)


class DeploymentFailedError(AppError):
    """A provisioning step failed before confirmation.

    ``record`` is the last confirmed checkpoint (None when the very first
    step failed and nothing was persisted).
    """

    def __init__(self, step: str, cause: str, record: Any = None) -> None:
        self.step = step
        self.cause = cause
        self.record = record
        super().__init__(6002, f"Deployment step {step} failed: {cause}", 502)


class AlreadyInProgressError(AppError):
    def __init__(self, deployment_id: str, detail: str = "another attempt is running") -> None:
        super().__init__(6003, f"Deployment {deployment_id} already in progress: {detail}", 409)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
