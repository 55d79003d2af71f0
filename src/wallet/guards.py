"""Access-control guards.

Каждый guard — отдельная функция, проверяющая одно условие и выбрасывающая
свою типизированную ошибку. Операции комбинируют guards в фиксированном порядке
в самом начале, до любых изменений состояния.
"""

from src.core.domain.errors import (
    AlreadyApproved,
    AlreadyExecuted,
    InvalidAmount,
    InvalidSender,
    InvalidTarget,
    NotYetApproved,
    TransactionNotFound,
    Unauthorized,
)
from src.core.domain.identity import is_null_identity
from src.core.domain.transaction import Transaction
from src.wallet.owner_registry import OwnerRegistry
from src.wallet.state import WalletState


def only_owner(registry: OwnerRegistry, caller: object) -> None:
    if not registry.is_owner(caller):
        raise Unauthorized(caller)


def tx_exists(state: WalletState, tx_id: object) -> Transaction:
    """Транзакция с данным id существует (возвращает её read-only view)."""
    if isinstance(tx_id, bool) or not isinstance(tx_id, int):
        raise TransactionNotFound(tx_id)
    if tx_id < 0 or tx_id >= len(state.transactions):
        raise TransactionNotFound(tx_id)
    return state.transactions[tx_id]


def not_executed(tx: Transaction) -> None:
    if tx.executed:
        raise AlreadyExecuted(tx.tx_id)


def not_approved(state: WalletState, tx_id: int, owner: str) -> None:
    if state.is_approved(tx_id, owner):
        raise AlreadyApproved(tx_id, owner)


def approved(state: WalletState, tx_id: int, owner: str) -> None:
    if not state.is_approved(tx_id, owner):
        raise NotYetApproved(tx_id, owner)


def valid_target(target: object) -> None:
    if is_null_identity(target):
        raise InvalidTarget(target)


def valid_sender(sender: object) -> None:
    if is_null_identity(sender):
        raise InvalidSender(sender)


def valid_amount(value: object, allow_zero: bool = True) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(value)
    if value < 0 or (value == 0 and not allow_zero):
        raise InvalidAmount(value)


def open_transaction(state: WalletState, caller: object, tx_id: object) -> Transaction:
    """Общая цепочка approve/revoke/execute: owner → exists → not executed."""
    only_owner(state.registry, caller)
    tx = tx_exists(state, tx_id)
    not_executed(tx)
    return tx
