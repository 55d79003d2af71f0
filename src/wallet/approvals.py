"""ApprovalTracker — учёт approvals владельцев по транзакциям.

approval_count пересчитывается сканированием фиксированного списка владельцев
при каждом вызове. Owner set мал и неизменяем, поэтому счётчик не хранится;
при росте owner set его нужно заменить эквивалентным инкрементальным счётчиком.
"""

from typing import Tuple

from src.core.domain.events import ApproveEvent, RevokeEvent
from src.core.observability import get_logger
from src.wallet import guards
from src.wallet.state import WalletState

log = get_logger(__name__)


class ApprovalTracker:
    
    def __init__(self, state: WalletState):
        self._state = state
    
    def approve(self, tx_id: int, caller: str) -> None:
        """Записать approval вызывающего.
        
        Raises:
            Unauthorized, TransactionNotFound, AlreadyExecuted, AlreadyApproved
        """
        guards.open_transaction(self._state, caller, tx_id)
        guards.not_approved(self._state, tx_id, caller)
        
        self._state.set_approval(tx_id, caller, True)
        self._state.emit(ApproveEvent(owner=caller, tx_id=tx_id))
        
        log.info(
            "transaction_approved",
            tx_id=tx_id,
            owner=caller,
            approvals=self.approval_count(tx_id),
            threshold=self._state.registry.threshold,
        )
    
    def revoke(self, tx_id: int, caller: str) -> None:
        """Отозвать ранее выданный approval.
        
        Raises:
            Unauthorized, TransactionNotFound, AlreadyExecuted, NotYetApproved
        """
        guards.open_transaction(self._state, caller, tx_id)
        guards.approved(self._state, tx_id, caller)
        
        self._state.set_approval(tx_id, caller, False)
        self._state.emit(RevokeEvent(owner=caller, tx_id=tx_id))
        
        log.info(
            "approval_revoked",
            tx_id=tx_id,
            owner=caller,
            approvals=self.approval_count(tx_id),
        )
    
    def approval_count(self, tx_id: int) -> int:
        return sum(
            1 for owner in self._state.registry.owners
            if self._state.is_approved(tx_id, owner)
        )
    
    def is_approved(self, tx_id: int, owner: str) -> bool:
        return self._state.is_approved(tx_id, owner)
    
    def approvers(self, tx_id: int) -> Tuple[str, ...]:
        """Текущие одобрившие владельцы в порядке owner list."""
        return tuple(
            owner for owner in self._state.registry.owners
            if self._state.is_approved(tx_id, owner)
        )
