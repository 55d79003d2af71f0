"""WalletState — единый объект состояния кошелька.

Владелец состояния — один экземпляр MultiSigWallet; все четыре компонента
(registry, ledger, approvals, execution) работают с одним и тем же объектом.

Persisted state surface:
- registry (owners, threshold)
- transactions (упорядоченный список с флагами executed)
- approvals: tx_id → {owner → bool}

Outbox уведомлений тоже часть состояния: уведомления, поставленные в очередь
во время операции, откатываются вместе с ней.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from src.core.domain.events import WalletEvent
from src.core.domain.transaction import Transaction
from src.wallet.owner_registry import OwnerRegistry


@dataclass(frozen=True)
class WalletCheckpoint:
    """Снапшот изменяемой части состояния для compensating rollback."""
    transactions: Tuple[Transaction, ...]
    approvals: Tuple[Tuple[int, Tuple[Tuple[str, bool], ...]], ...]
    outbox_size: int


@dataclass
class WalletState:
    registry: OwnerRegistry
    transactions: List[Transaction] = field(default_factory=list)
    approvals: Dict[int, Dict[str, bool]] = field(default_factory=dict)
    outbox: List[WalletEvent] = field(default_factory=list)
    
    def is_approved(self, tx_id: int, owner: str) -> bool:
        """approved[tx_id][owner], default False."""
        return self.approvals.get(tx_id, {}).get(owner, False)
    
    def set_approval(self, tx_id: int, owner: str, value: bool) -> None:
        self.approvals.setdefault(tx_id, {})[owner] = value
    
    def emit(self, event: WalletEvent) -> None:
        self.outbox.append(event)
    
    def drain_events(self) -> List[WalletEvent]:
        events, self.outbox = self.outbox, []
        return events
    
    def checkpoint(self) -> WalletCheckpoint:
        # Transaction — frozen модели, поэтому достаточно копии списка
        return WalletCheckpoint(
            transactions=tuple(self.transactions),
            approvals=tuple(
                (tx_id, tuple(records.items()))
                for tx_id, records in self.approvals.items()
            ),
            outbox_size=len(self.outbox),
        )
    
    def restore(self, checkpoint: WalletCheckpoint) -> None:
        """Восстановить состояние ровно к моменту checkpoint."""
        self.transactions = list(checkpoint.transactions)
        self.approvals = {
            tx_id: dict(records) for tx_id, records in checkpoint.approvals
        }
        del self.outbox[checkpoint.outbox_size:]
