"""TransactionLedger — append-only хранилище предложенных действий.

Идентификатор транзакции равен её позиции в ledger (0-based, без пропусков).
Единственная мутация после append — флип executed, выполняемый ExecutionEngine.
"""

from typing import Iterator

from src.core.domain.events import SubmitEvent
from src.core.domain.transaction import Transaction
from src.core.observability import get_logger
from src.wallet import guards
from src.wallet.state import WalletState

log = get_logger(__name__)


class TransactionLedger:
    """Index-addressed ledger поверх общего WalletState."""
    
    def __init__(self, state: WalletState):
        self._state = state
    
    def submit(self, target: str, value: int, payload: bytes, caller: str) -> int:
        """Добавить новую транзакцию (executed=False).
        
        Args:
            target: получатель внешнего эффекта
            value: сумма (целое ≥ 0)
            payload: непрозрачные данные вызова
            caller: вызывающий (должен быть владельцем)
        
        Returns:
            tx_id = длина ledger до добавления
        
        Raises:
            Unauthorized, InvalidTarget, InvalidAmount
        """
        guards.only_owner(self._state.registry, caller)
        guards.valid_target(target)
        guards.valid_amount(value)
        if not isinstance(payload, (bytes, bytearray, memoryview)):
            raise TypeError(f"payload must be bytes, got {type(payload).__name__}")
        
        tx_id = len(self._state.transactions)
        tx = Transaction(tx_id=tx_id, target=target, value=value, payload=bytes(payload))
        self._state.transactions.append(tx)
        self._state.emit(SubmitEvent(tx_id=tx_id))
        
        log.info(
            "transaction_submitted",
            tx_id=tx_id,
            owner=caller,
            target=target,
            value=value,
            payload_size=len(tx.payload),
        )
        return tx_id
    
    def get(self, tx_id: int) -> Transaction:
        """Read-only view транзакции; TransactionNotFound если id вне диапазона."""
        return guards.tx_exists(self._state, tx_id)
    
    def mark_executed(self, tx_id: int) -> None:
        tx = self.get(tx_id)
        self._state.transactions[tx_id] = tx.with_executed(True)
    
    def __len__(self) -> int:
        return len(self._state.transactions)
    
    def __iter__(self) -> Iterator[Transaction]:
        return iter(tuple(self._state.transactions))
