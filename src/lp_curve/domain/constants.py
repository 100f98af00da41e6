"""Bonding-curve parameters: must match the AMM contract constants exactly.

Amounts are micro-units (TOKEN_DECIMALS = 6).
"""

FEE_RATE_BPS = 200  # 2%
VIRTUAL_RESERVE = 600_000_000  # 600 base units
TARGET_RESERVE = 3_000_000_000  # 3000 base units = 100% progress
TOKEN_DECIMALS = 6
TOTAL_SUPPLY = 100_000_000_000_000  # 100M tokens
INITIAL_ALLOCATION_BPS = 9000  # 90% of supply seeds the pool
INITIAL_ALLOCATION = TOTAL_SUPPLY * INITIAL_ALLOCATION_BPS // 10_000
INITIAL_BASE_RESERVE = 0
