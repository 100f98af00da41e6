"""Token metadata validation: runs before any external call."""

import re

from src.lp_common.errors import ValidationError

MAX_NAME_LEN = 32
MAX_SYMBOL_LEN = 10
MAX_DESCRIPTION_LEN = 200

_SYMBOL_RE = re.compile(r"^[A-Za-z0-9]+$")


def validate_token_metadata(
    name: str, symbol: str, description: str | None
) -> tuple[str, str, str]:
    """Return normalized (name, SYMBOL, description) or raise ValidationError."""
    name = (name or "").strip()
    symbol = (symbol or "").strip()
    description = (description or "").strip()

    if not name or not symbol:
        raise ValidationError("token name and symbol are required")
    if len(name) > MAX_NAME_LEN:
        raise ValidationError(f"name must be {MAX_NAME_LEN} characters or less")
    if len(symbol) > MAX_SYMBOL_LEN:
        raise ValidationError(f"symbol must be {MAX_SYMBOL_LEN} characters or less")
    if not _SYMBOL_RE.match(symbol):
        raise ValidationError("symbol can only contain letters and numbers")
    if len(description) > MAX_DESCRIPTION_LEN:
        raise ValidationError(f"description must be {MAX_DESCRIPTION_LEN} characters or less")
    return name, symbol.upper(), description
