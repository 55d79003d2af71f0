"""ExecutionEngine — quorum evaluation и исполнение внешнего эффекта.

Порядок execute (checks-effects-interactions):
1. only_owner → Unauthorized
2. tx_exists / not_executed → TransactionNotFound / AlreadyExecuted
3. approval_count < threshold → InsufficientApprovals (без изменений состояния)
4. checkpoint состояния, затем executed=True ДО вызова эффекта
5. вызов эффекта через host
6. неудача → явный rollback к checkpoint, ExecutionFailed; успех → commit

Флаг executed, выставленный в шаге 4, и есть reentrancy guard: повторный
вход в execute для того же tx_id из эффекта упирается в AlreadyExecuted.
Lock кошелька этого не обеспечивает (он reentrant для того же потока).
"""

from dataclasses import dataclass

from src.core.domain.errors import ExecutionFailed, InsufficientApprovals
from src.core.domain.events import ExecuteEvent
from src.core.observability import get_logger
from src.wallet import guards
from src.wallet.approvals import ApprovalTracker
from src.wallet.host import WalletHost
from src.wallet.ledger import TransactionLedger
from src.wallet.state import WalletCheckpoint, WalletState

log = get_logger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """Результат успешного исполнения."""

    tx_id: int
    target: str
    value: int
    approvals: int
    threshold: int

    # Для отладки
    details: str


class ExecutionEngine:

    def __init__(
        self,
        state: WalletState,
        ledger: TransactionLedger,
        tracker: ApprovalTracker,
        host: WalletHost,
        wallet_address: str
    ):
        self._state = state
        self._ledger = ledger
        self._tracker = tracker
        self._host = host
        self._wallet_address = wallet_address

    def execute(self, tx_id: int, caller: str) -> ExecutionResult:
        """Исполнить транзакцию, набравшую кворум.

        Raises:
            Unauthorized, TransactionNotFound, AlreadyExecuted,
            InsufficientApprovals, ExecutionFailed
        """
        tx = guards.open_transaction(self._state, caller, tx_id)

        threshold = self._state.registry.threshold
        count = self._tracker.approval_count(tx_id)
        if count < threshold:
            log.info(
                "execution_blocked",
                tx_id=tx_id,
                approvals=count,
                threshold=threshold,
            )
            raise InsufficientApprovals(tx_id, count, threshold)

        # Effects: флип executed до interaction
        checkpoint = self._state.checkpoint()
        self._ledger.mark_executed(tx_id)

        # Interaction
        try:
            ok = self._host.call(self._wallet_address, tx.target, tx.value, tx.payload)
        except Exception as exc:
            log.warning(
                "external_call_raised",
                tx_id=tx_id,
                target=tx.target,
                exc_info=True,
            )
            self._rollback(checkpoint, tx_id, reason=f"external call raised {type(exc).__name__}")
            raise ExecutionFailed(tx_id, reason=f"{type(exc).__name__}: {exc}") from exc
        except BaseException as exc:
            # KeyboardInterrupt, SystemExit и т.п.: откатываем и пробрасываем как есть
            self._rollback(checkpoint, tx_id, reason=f"external call aborted by {type(exc).__name__}")
            raise

        if not ok:
            self._rollback(checkpoint, tx_id, reason="external call reported failure")
            raise ExecutionFailed(tx_id)

        self._state.emit(ExecuteEvent(tx_id=tx_id))
        log.info(
            "execution_committed",
            tx_id=tx_id,
            owner=caller,
            target=tx.target,
            value=tx.value,
            approvals=count,
            threshold=threshold,
        )
        return ExecutionResult(
            tx_id=tx_id,
            target=tx.target,
            value=tx.value,
            approvals=count,
            threshold=threshold,
            details=f"Executed with {count}/{threshold} approvals",
        )

    def _rollback(self, checkpoint: WalletCheckpoint, tx_id: int, reason: str) -> None:
        """Compensating rollback: состояние ровно как до флипа executed.

        Отменяет и изменения, сделанные reentrant вызовами во время эффекта
        (approvals, revocations, submissions, вложенные execute, уведомления).
        """
        self._state.restore(checkpoint)
        log.warning(
            "execution_rolled_back",
            tx_id=tx_id,
            reason=reason,
            executed=self._ledger.get(tx_id).executed,
        )
