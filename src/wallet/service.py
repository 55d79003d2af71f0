"""MultiSigWallet — сервис кошелька с кворумом владельцев.

Единственная точка доступа к WalletState. Каждая операция верхнего уровня
(submit/approve/revoke/execute/deposit) выполняется под lock кошелька целиком,
включая вызов внешнего эффекта. Вызовы из эффекта обратно в кошелёк идут в том же
потоке и повторно входят в RLock; от двойного исполнения защищает флаг executed.

Уведомления копятся в outbox состояния и публикуются в sink только после
коммита самой внешней операции.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

from src.core.contracts import validate_wallet_state
from src.core.domain.errors import SnapshotCorrupted, WalletError
from src.core.domain.events import DepositEvent, WalletEvent
from src.core.domain.transaction import Transaction
from src.core.observability import get_logger
from src.wallet import guards
from src.wallet.approvals import ApprovalTracker
from src.wallet.config import WalletConfig
from src.wallet.execution import ExecutionEngine, ExecutionResult
from src.wallet.host import WalletHost
from src.wallet.ledger import TransactionLedger
from src.wallet.notifications import EventSink, LoggingEventSink
from src.wallet.owner_registry import OwnerRegistry
from src.wallet.state import WalletState

log = get_logger(__name__)

SNAPSHOT_SCHEMA_VERSION = "1"


class MultiSigWallet:
    """M-of-N кошелёк: submit → approve/revoke → execute.

    Args:
        owners: список владельцев (порядок сохраняется)
        threshold: минимальное число approvals для execute
        address: идентичность кошелька у хоста (отправитель внешних вызовов)
        host: окружение, исполняющее внешний эффект и хранящее баланс
        event_sink: получатель уведомлений (default: LoggingEventSink)
        config: WalletConfig (default: WalletConfig())
    """

    def __init__(
        self,
        owners: Iterable[str],
        threshold: int,
        *,
        address: str,
        host: WalletHost,
        event_sink: Optional[EventSink] = None,
        config: Optional[WalletConfig] = None
    ):
        self.config = config or WalletConfig()
        registry = OwnerRegistry(
            owners,
            threshold,
            allow_unreachable_threshold=self.config.allow_unreachable_threshold,
        )
        guards.valid_target(address)

        self._address = address
        self._host = host
        self._event_sink = event_sink or LoggingEventSink()
        self._lock = threading.RLock()
        self._depth = 0
        self._wire(WalletState(registry=registry))

        log.info(
            "wallet_created",
            address=address,
            owners=list(registry.owners),
            threshold=registry.threshold,
        )

    def _wire(self, state: WalletState) -> None:
        self._state = state
        self._ledger = TransactionLedger(state)
        self._tracker = ApprovalTracker(state)
        self._engine = ExecutionEngine(
            state, self._ledger, self._tracker, self._host, self._address
        )

    @contextmanager
    def _operation(self, name: str, caller: object) -> Iterator[None]:
        with self._lock:
            self._depth += 1
            try:
                yield
            except WalletError as exc:
                log.warning(
                    "operation_rejected",
                    operation=name,
                    caller=caller,
                    error=exc.code,
                    reentrant=self._depth > 1,
                )
                if self._depth == 1:
                    self._state.drain_events()
                raise
            except BaseException:
                if self._depth == 1:
                    self._state.drain_events()
                raise
            else:
                if self._depth == 1:
                    self._publish(name, self._state.drain_events())
            finally:
                self._depth -= 1

    def _publish(self, name: str, events: Iterable[WalletEvent]) -> None:
        """Доставка закоммиченных событий; сбой sink не отменяет операцию."""
        for event in events:
            try:
                self._event_sink.publish(event)
            except Exception:
                log.exception(
                    "event_publish_failed",
                    operation=name,
                    event_type=event.event_type.value,
                )

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def submit(self, caller: str, to: str, value: int, data: bytes = b"") -> int:
        with self._operation("submit", caller):
            return self._ledger.submit(to, value, data, caller)

    def approve(self, caller: str, tx_id: int) -> None:
        with self._operation("approve", caller):
            self._tracker.approve(tx_id, caller)

    def revoke(self, caller: str, tx_id: int) -> None:
        with self._operation("revoke", caller):
            self._tracker.revoke(tx_id, caller)

    def execute(self, caller: str, tx_id: int) -> ExecutionResult:
        with self._operation("execute", caller):
            return self._engine.execute(tx_id, caller)

    def deposit(self, sender: str, value: int) -> None:
        """Зачислить средства на кошелёк у хоста и эмитить Deposit."""
        with self._operation("deposit", sender):
            guards.valid_sender(sender)
            guards.valid_amount(value, allow_zero=False)
            event = DepositEvent(sender=sender, value=value)
            self._host.credit(self._address, value)
            self._state.emit(event)
            log.info("deposit_received", sender=sender, value=value, balance=self.get_balance())

    # =========================================================================
    # READ ACCESSORS
    # =========================================================================

    @property
    def address(self) -> str:
        return self._address

    @property
    def owners(self) -> Tuple[str, ...]:
        return self._state.registry.owners

    @property
    def threshold(self) -> int:
        return self._state.registry.threshold

    def is_owner(self, identity: object) -> bool:
        return self._state.registry.is_owner(identity)

    def get_balance(self) -> int:
        return self._host.balance_of(self._address)

    @property
    def transaction_count(self) -> int:
        with self._lock:
            return len(self._ledger)

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        with self._lock:
            return tuple(self._ledger)

    def get_transaction(self, tx_id: int) -> Transaction:
        with self._lock:
            return self._ledger.get(tx_id)

    def is_approved(self, tx_id: int, owner: str) -> bool:
        with self._lock:
            return self._tracker.is_approved(tx_id, owner)

    def approval_count(self, tx_id: int) -> int:
        with self._lock:
            self._ledger.get(tx_id)
            return self._tracker.approval_count(tx_id)

    def approvers(self, tx_id: int) -> Tuple[str, ...]:
        with self._lock:
            self._ledger.get(tx_id)
            return self._tracker.approvers(tx_id)

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def snapshot(self) -> Dict[str, Any]:
        """Экспорт persisted state surface (JSON-совместимый dict)."""
        with self._lock:
            approvals: Dict[str, list] = {}
            for tx in self._ledger:
                approvers = self._tracker.approvers(tx.tx_id)
                if approvers:
                    approvals[str(tx.tx_id)] = list(approvers)
            data = {
                "schema_version": SNAPSHOT_SCHEMA_VERSION,
                "owners": list(self.owners),
                "threshold": self.threshold,
                "transactions": [tx.to_record() for tx in self._ledger],
                "approvals": approvals,
            }
        if self.config.validate_snapshots:
            validate_wallet_state(data)
        return data

    @classmethod
    def from_snapshot(
        cls,
        data: Dict[str, Any],
        *,
        address: str,
        host: WalletHost,
        event_sink: Optional[EventSink] = None,
        config: Optional[WalletConfig] = None
    ) -> "MultiSigWallet":
        """Восстановление кошелька из снапшота.

        Raises:
            jsonschema.ValidationError: снапшот не соответствует wallet_state схеме
            WalletConfigurationError: owners/threshold не проходят проверки реестра
            SnapshotCorrupted: id транзакций не плотные или approvals ссылаются
                на неизвестные транзакции/владельцев
        """
        config = config or WalletConfig()
        if config.validate_snapshots:
            validate_wallet_state(data)

        wallet = cls(
            data["owners"],
            data["threshold"],
            address=address,
            host=host,
            event_sink=event_sink,
            config=config,
        )
        registry = wallet._state.registry

        transactions = []
        for index, record in enumerate(data["transactions"]):
            if record["tx_id"] != index:
                raise SnapshotCorrupted(
                    f"Transaction ids must be dense: expected {index}, got {record['tx_id']}"
                )
            transactions.append(Transaction.from_record(record))

        approvals: Dict[int, Dict[str, bool]] = {}
        for key, owners in data["approvals"].items():
            tx_id = int(key)
            if tx_id >= len(transactions):
                raise SnapshotCorrupted(f"Approvals reference unknown transaction {tx_id}")
            for owner in owners:
                if not registry.is_owner(owner):
                    raise SnapshotCorrupted(f"Approval by non-owner {owner!r} on transaction {tx_id}")
                approvals.setdefault(tx_id, {})[owner] = True

        wallet._wire(WalletState(registry=registry, transactions=transactions, approvals=approvals))
        log.info(
            "wallet_restored",
            address=address,
            transactions=len(transactions),
        )
        return wallet
