"""
Stock ledger configuration.

Usage in settings.py:
    STOCKLEDGER = {
        "DEFAULT_REORDER_THRESHOLD": 10,
        "MAX_RETRIES": 3,
        "RETRY_DELAY": 0.05,
        "DATABASE": "default",
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class StockLedgerSettings:
    """Stock ledger configuration settings."""

    # Reorder threshold for products without an explicit reorder_level
    DEFAULT_REORDER_THRESHOLD: int = 10

    # Attempts after the first one when the database reports a transient error
    MAX_RETRIES: int = 3

    # Seconds to wait before retry N (multiplied by N)
    RETRY_DELAY: float = 0.05

    # Database alias used by get_ledger()
    DATABASE: str = "default"


def get_ledger_settings() -> StockLedgerSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKLEDGER", {})
    return StockLedgerSettings(**{
        k: v for k, v in user_settings.items()
        if k in StockLedgerSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_ledger_settings(), name)


ledger_settings = _LazySettings()
