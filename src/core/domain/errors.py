"""
Wallet Errors — типизированные ошибки кошелька

Каждая ошибка несёт стабильный `code`, совпадающий с именем класса.
Все ошибки валидации прерывают операцию без изменения состояния.
ExecutionFailed — единственный случай, когда изменение было сделано и
явно откатано до выброса ошибки.
"""

from typing import Optional


class WalletError(Exception):
    """Базовая ошибка кошелька."""

    code: str = "WalletError"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.code)


# =============================================================================
# CONSTRUCTION
# =============================================================================


class WalletConfigurationError(WalletError):
    """Ошибка конструирования owner set / threshold."""

    code = "WalletConfigurationError"


class OwnersNotProvided(WalletConfigurationError):
    """Пустой список владельцев."""

    code = "OwnersNotProvided"


class InvalidThreshold(WalletConfigurationError):
    """Threshold нулевой, отрицательный или недостижимый."""

    code = "InvalidThreshold"

    def __init__(self, threshold: object, owner_count: int):
        self.threshold = threshold
        self.owner_count = owner_count
        super().__init__(
            f"Invalid threshold {threshold!r} for {owner_count} owner(s)"
        )


class InvalidOwnerAddress(WalletConfigurationError):
    """Null/sentinel идентичность в списке владельцев."""

    code = "InvalidOwnerAddress"

    def __init__(self, owner: object):
        self.owner = owner
        super().__init__(f"Invalid owner identity: {owner!r}")


class DuplicateOwner(WalletConfigurationError):
    """Владелец встречается в списке больше одного раза."""

    code = "DuplicateOwner"

    def __init__(self, owner: str):
        self.owner = owner
        super().__init__(f"Duplicate owner: {owner}")


# =============================================================================
# ACCESS CONTROL / LOOKUP
# =============================================================================


class Unauthorized(WalletError):
    """Вызывающий не является владельцем."""

    code = "Unauthorized"

    def __init__(self, caller: object):
        self.caller = caller
        super().__init__(f"Caller {caller!r} is not an owner")


class TransactionNotFound(WalletError):
    code = "TransactionNotFound"

    def __init__(self, tx_id: object):
        self.tx_id = tx_id
        super().__init__(f"Transaction {tx_id!r} does not exist")


# =============================================================================
# LIFECYCLE
# =============================================================================


class AlreadyApproved(WalletError):
    code = "AlreadyApproved"

    def __init__(self, tx_id: int, owner: str):
        self.tx_id = tx_id
        self.owner = owner
        super().__init__(f"Transaction {tx_id} already approved by {owner}")


class AlreadyExecuted(WalletError):
    code = "AlreadyExecuted"

    def __init__(self, tx_id: int):
        self.tx_id = tx_id
        super().__init__(f"Transaction {tx_id} already executed")


class NotYetApproved(WalletError):
    code = "NotYetApproved"

    def __init__(self, tx_id: int, owner: str):
        self.tx_id = tx_id
        self.owner = owner
        super().__init__(f"Transaction {tx_id} is not approved by {owner}")


class InsufficientApprovals(WalletError):
    """Количество approvals ниже threshold."""

    code = "InsufficientApprovals"

    def __init__(self, tx_id: int, current_count: int, threshold: int):
        self.tx_id = tx_id
        self.current_count = current_count
        self.threshold = threshold
        super().__init__(
            f"Transaction {tx_id} has {current_count} approval(s), "
            f"threshold is {threshold}"
        )


class ExecutionFailed(WalletError):
    """
    Внешний эффект сообщил о неудаче.

    К моменту выброса состояние кошелька уже восстановлено к снапшоту,
    сделанному до флипа executed.
    """

    code = "ExecutionFailed"

    def __init__(self, tx_id: int, reason: str = "external call reported failure"):
        self.tx_id = tx_id
        self.reason = reason
        super().__init__(f"Execution of transaction {tx_id} failed: {reason}")


# =============================================================================
# INPUT / SNAPSHOT
# =============================================================================


class InvalidTarget(WalletError):
    code = "InvalidTarget"

    def __init__(self, target: object):
        self.target = target
        super().__init__(f"Invalid target identity: {target!r}")


class InvalidSender(WalletError):
    code = "InvalidSender"

    def __init__(self, sender: object):
        self.sender = sender
        super().__init__(f"Invalid sender: {sender!r}")


class InvalidAmount(WalletError):
    code = "InvalidAmount"

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid amount: {value!r}")


class SnapshotCorrupted(WalletError):
    """Снапшот прошёл JSON Schema, но нарушает инварианты кошелька."""

    code = "SnapshotCorrupted"
