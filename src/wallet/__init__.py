"""Wallet — M-of-N кошелёк с кворумом владельцев.

Компоненты (общий WalletState):
- OwnerRegistry — неизменяемые владельцы и threshold
- TransactionLedger — append-only список предложенных действий
- ApprovalTracker — approvals владельцев по транзакциям
- ExecutionEngine — quorum check и reentrancy-safe исполнение
"""

from .approvals import ApprovalTracker
from .config import WalletConfig
from .execution import ExecutionEngine, ExecutionResult
from .host import InMemoryHost, WalletHost
from .ledger import TransactionLedger
from .notifications import EventSink, InMemoryEventSink, LoggingEventSink
from .owner_registry import OwnerRegistry
from .service import MultiSigWallet
from .state import WalletCheckpoint, WalletState

__all__ = [
    "MultiSigWallet",
    "WalletConfig",
    "OwnerRegistry",
    "TransactionLedger",
    "ApprovalTracker",
    "ExecutionEngine",
    "ExecutionResult",
    "WalletState",
    "WalletCheckpoint",
    "WalletHost",
    "InMemoryHost",
    "EventSink",
    "InMemoryEventSink",
    "LoggingEventSink",
]
