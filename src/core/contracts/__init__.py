"""
Contract Validation Module

Модуль для валидации JSON контрактов кошелька (снапшоты состояния).
"""

from .validators import (
    ContractValidator,
    SchemaLoader,
    WalletStateValidator,
    validate_wallet_state,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "WalletStateValidator",
    # Functions
    "validate_wallet_state",
]
