"""Конфигурация кошелька."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WalletConfig:
    """
    Конфигурация MultiSigWallet.

    - allow_unreachable_threshold: разрешить threshold > числа владельцев.
      По умолчанию такой кошелёк отклоняется при создании (InvalidThreshold),
      т.к. ни одна транзакция в нём никогда не наберёт кворум.
    - validate_snapshots: проверять снапшоты по JSON Schema при экспорте и импорте.
    """
    allow_unreachable_threshold: bool = False
    validate_snapshots: bool = True
