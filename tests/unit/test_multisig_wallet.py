"""Тесты MultiSigWallet (сервис).

Coverage:
- Сценарий A/B/C, threshold 2
- Уведомления: только закоммиченные, порядок, отбрасывание при rollback
- deposit / get_balance через хост
- Reentrancy через сервис (RLock + флаг executed)
- Вложенное исполнение другой транзакции и общий rollback
- Конкурентные submit из потоков
- Конфигурация (unreachable threshold)
- Structured logging
"""

import threading

import pytest
from structlog.testing import capture_logs

from src.core.domain import (
    NULL_ADDRESS,
    AlreadyExecuted,
    DepositEvent,
    EventType,
    ExecutionFailed,
    InsufficientApprovals,
    InvalidAmount,
    InvalidSender,
    InvalidTarget,
    InvalidThreshold,
    NotYetApproved,
    Unauthorized,
)
from src.wallet import InMemoryEventSink, InMemoryHost, MultiSigWallet, WalletConfig


OWNER_A = "0x" + "a" * 40
OWNER_B = "0x" + "b" * 40
OWNER_C = "0x" + "c" * 40
STRANGER = "0x" + "e" * 40
TARGET_X = "0x" + "9" * 40
TARGET_Y = "0x" + "8" * 40
WALLET = "0x" + "7" * 40


@pytest.fixture
def host():
    return InMemoryHost()


@pytest.fixture
def sink():
    return InMemoryEventSink()


@pytest.fixture
def wallet(host, sink):
    w = MultiSigWallet([OWNER_A, OWNER_B, OWNER_C], 2, address=WALLET, host=host, event_sink=sink)
    w.deposit(STRANGER, 100)
    sink.clear()
    return w


class TestScenario:
    """Owners {A, B, C}, threshold 2, перевод 5 на X."""
    
    def test_full_lifecycle(self, wallet, host):
        tx_id = wallet.submit(OWNER_A, TARGET_X, 5, b"")
        assert tx_id == 0
        
        wallet.approve(OWNER_A, 0)
        assert wallet.approval_count(0) == 1
        
        with pytest.raises(InsufficientApprovals) as exc_info:
            wallet.execute(OWNER_A, 0)
        assert (exc_info.value.tx_id, exc_info.value.current_count) == (0, 1)
        assert wallet.get_transaction(0).executed is False
        
        wallet.approve(OWNER_B, 0)
        assert wallet.approval_count(0) == 2
        
        result = wallet.execute(OWNER_A, 0)
        assert result.value == 5
        assert host.calls == [(WALLET, TARGET_X, 5, b"")]
        assert wallet.get_balance() == 95
        
        with pytest.raises(AlreadyExecuted):
            wallet.execute(OWNER_A, 0)
        with pytest.raises(AlreadyExecuted):
            wallet.approve(OWNER_C, 0)
        with pytest.raises(AlreadyExecuted):
            wallet.revoke(OWNER_A, 0)
        
        assert len(host.calls) == 1
    
    def test_revoke_then_reapprove(self, wallet):
        wallet.submit(OWNER_A, TARGET_X, 5)
        
        with pytest.raises(NotYetApproved):
            wallet.revoke(OWNER_B, 0)
        
        wallet.approve(OWNER_B, 0)
        wallet.revoke(OWNER_B, 0)
        assert wallet.approval_count(0) == 0
        assert not wallet.is_approved(0, OWNER_B)
        
        wallet.approve(OWNER_B, 0)
        assert wallet.is_approved(0, OWNER_B)
    
    def test_non_owner_submit_leaves_ledger(self, wallet):
        with pytest.raises(Unauthorized):
            wallet.submit(STRANGER, TARGET_X, 1)
        
        assert wallet.transaction_count == 0
        assert wallet.transactions == ()


class TestAccessors:
    
    def test_owner_accessors(self, wallet):
        assert wallet.owners == (OWNER_A, OWNER_B, OWNER_C)
        assert wallet.threshold == 2
        assert wallet.address == WALLET
        assert wallet.is_owner(OWNER_B)
        assert not wallet.is_owner(STRANGER)
    
    def test_transactions_snapshot_tuple(self, wallet):
        wallet.submit(OWNER_A, TARGET_X, 1)
        wallet.submit(OWNER_B, TARGET_Y, 2, b"\xff")
        
        txs = wallet.transactions
        assert [tx.tx_id for tx in txs] == [0, 1]
        assert txs[1].payload == b"\xff"
        assert wallet.transaction_count == 2
    
    def test_approvers(self, wallet):
        wallet.submit(OWNER_A, TARGET_X, 1)
        wallet.approve(OWNER_C, 0)
        wallet.approve(OWNER_A, 0)
        
        assert wallet.approvers(0) == (OWNER_A, OWNER_C)
    
    def test_null_wallet_address_rejected(self, host):
        with pytest.raises(InvalidTarget):
            MultiSigWallet([OWNER_A], 1, address=NULL_ADDRESS, host=host)


class TestDeposits:
    
    def test_deposit_credits_host_and_notifies(self, wallet, host, sink):
        wallet.deposit(OWNER_A, 25)
        
        assert wallet.get_balance() == 125
        assert host.balance_of(WALLET) == 125
        assert sink.events == [DepositEvent(sender=OWNER_A, value=25)]
    
    @pytest.mark.parametrize("value", [0, -5, 2.5])
    def test_invalid_deposit_rejected(self, wallet, sink, value):
        with pytest.raises(InvalidAmount):
            wallet.deposit(OWNER_A, value)
        
        assert wallet.get_balance() == 100
        assert sink.events == []
    
    def test_anyone_may_deposit(self, wallet):
        wallet.deposit(STRANGER, 1)
        assert wallet.get_balance() == 101
    
    @pytest.mark.parametrize("sender", ["", "   ", NULL_ADDRESS, None, 42])
    def test_invalid_sender_rejected(self, wallet, sink, sender):
        with pytest.raises(InvalidSender) as exc_info:
            wallet.deposit(sender, 10)
        
        assert exc_info.value.sender == sender
        assert wallet.get_balance() == 100
        assert sink.events == []


class TestNotifications:
    
    def test_events_in_commit_order(self, wallet, sink):
        wallet.submit(OWNER_A, TARGET_X, 5)
        wallet.approve(OWNER_A, 0)
        wallet.approve(OWNER_B, 0)
        wallet.execute(OWNER_C, 0)
        
        assert [e.event_type for e in sink.events] == [
            EventType.SUBMIT,
            EventType.APPROVE,
            EventType.APPROVE,
            EventType.EXECUTE,
        ]
        assert sink.of_type(EventType.APPROVE)[1].owner == OWNER_B
    
    def test_rejected_operations_publish_nothing(self, wallet, sink):
        wallet.submit(OWNER_A, TARGET_X, 5)
        sink.clear()
        
        with pytest.raises(Unauthorized):
            wallet.approve(STRANGER, 0)
        with pytest.raises(InsufficientApprovals):
            wallet.execute(OWNER_A, 0)
        
        assert sink.events == []
    
    def test_failed_execution_discards_reentrant_events(self, wallet, host, sink):
        wallet.submit(OWNER_A, TARGET_X, 5)
        wallet.approve(OWNER_A, 0)
        wallet.approve(OWNER_B, 0)
        sink.clear()
        
        def submit_then_fail(sender, value, payload):
            wallet.submit(OWNER_C, TARGET_Y, 1)
            return False
        
        host.register_handler(TARGET_X, submit_then_fail)
        
        with pytest.raises(ExecutionFailed):
            wallet.execute(OWNER_A, 0)
        
        assert sink.events == []
        assert wallet.transaction_count == 1
    
    def test_reentrant_events_published_after_outer_commit(self, wallet, host, sink):
        wallet.submit(OWNER_A, TARGET_X, 5)
        wallet.approve(OWNER_A, 0)
        wallet.approve(OWNER_B, 0)
        sink.clear()
        seen_during_effect = []
        
        def submit_inside(sender, value, payload):
            wallet.submit(OWNER_C, TARGET_Y, 1)
            seen_during_effect.append(len(sink.events))
            return True
        
        host.register_handler(TARGET_X, submit_inside)
        wallet.execute(OWNER_A, 0)
        
        assert seen_during_effect == [0]
        assert [e.event_type for e in sink.events] == [EventType.SUBMIT, EventType.EXECUTE]
    
    def test_failing_sink_does_not_undo_commit(self, host):
        class FlakySink(InMemoryEventSink):
            """Первая публикация падает, остальные доходят."""
            
            def __init__(self):
                super().__init__()
                self.failures = 0
            
            def publish(self, event):
                if self.failures == 0:
                    self.failures += 1
                    raise RuntimeError("sink unavailable")
                super().publish(event)
        
        sink = FlakySink()
        wallet = MultiSigWallet([OWNER_A, OWNER_B, OWNER_C], 2, address=WALLET, host=host, event_sink=sink)
        host.credit(WALLET, 100)
        wallet.submit(OWNER_C, TARGET_Y, 1)
        wallet.submit(OWNER_A, TARGET_X, 5)
        wallet.approve(OWNER_A, 1)
        wallet.approve(OWNER_B, 1)
        
        def submit_inside(sender, value, payload):
            wallet.submit(OWNER_C, TARGET_Y, 2)
            return True
        
        host.register_handler(TARGET_X, submit_inside)
        sink.clear()
        sink.failures = 0
        
        with capture_logs() as logs:
            result = wallet.execute(OWNER_A, 1)
        
        assert result.tx_id == 1
        assert wallet.get_transaction(1).executed is True
        assert host.balance_of(TARGET_X) == 5
        # первое (SUBMIT) потеряно, EXECUTE всё равно доставлен
        assert [e.event_type for e in sink.events] == [EventType.EXECUTE]
        failed = [entry for entry in logs if entry["event"] == "event_publish_failed"]
        assert len(failed) == 1
        assert failed[0]["operation"] == "execute"
        assert failed[0]["event_type"] == EventType.SUBMIT.value
        
        with pytest.raises(AlreadyExecuted):
            wallet.execute(OWNER_B, 1)


class TestReentrancyThroughService:
    
    def test_reentrant_execute_rejected_without_deadlock(self, wallet, host):
        wallet.submit(OWNER_A, TARGET_X, 5)
        wallet.approve(OWNER_A, 0)
        wallet.approve(OWNER_B, 0)
        errors = []
        
        def reenter(sender, value, payload):
            try:
                wallet.execute(OWNER_B, 0)
            except AlreadyExecuted as exc:
                errors.append(exc)
            return True
        
        host.register_handler(TARGET_X, reenter)
        wallet.execute(OWNER_A, 0)
        
        assert len(errors) == 1
        assert host.balance_of(TARGET_X) == 5
        assert wallet.get_balance() == 95
    
    def test_nested_execution_rolled_back_with_outer(self, wallet, host):
        wallet.submit(OWNER_A, TARGET_X, 5)
        wallet.submit(OWNER_A, TARGET_Y, 7)
        for tx_id in (0, 1):
            wallet.approve(OWNER_A, tx_id)
            wallet.approve(OWNER_B, tx_id)
        
        def execute_other_then_fail(sender, value, payload):
            wallet.execute(OWNER_C, 1)
            return False
        
        host.register_handler(TARGET_X, execute_other_then_fail)
        
        with pytest.raises(ExecutionFailed):
            wallet.execute(OWNER_A, 0)
        
        assert wallet.get_transaction(0).executed is False
        assert wallet.get_transaction(1).executed is False
        assert wallet.get_balance() == 100
        assert host.balance_of(TARGET_Y) == 0
    
    def test_retry_after_fixing_target(self, wallet, host):
        wallet.submit(OWNER_A, TARGET_X, 5)
        wallet.approve(OWNER_A, 0)
        wallet.approve(OWNER_B, 0)
        accept = {"value": False}
        host.register_handler(TARGET_X, lambda sender, value, payload: accept["value"])
        
        with pytest.raises(ExecutionFailed):
            wallet.execute(OWNER_A, 0)
        
        accept["value"] = True
        wallet.execute(OWNER_A, 0)
        assert wallet.get_transaction(0).executed is True


class TestConcurrency:
    
    def test_concurrent_submits_get_dense_ids(self, wallet):
        ids = []
        ids_lock = threading.Lock()
        
        def worker(owner):
            for _ in range(25):
                tx_id = wallet.submit(owner, TARGET_X, 1)
                with ids_lock:
                    ids.append(tx_id)
        
        threads = [
            threading.Thread(target=worker, args=(owner,))
            for owner in (OWNER_A, OWNER_B, OWNER_C) * 2
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        
        assert sorted(ids) == list(range(150))
        assert [tx.tx_id for tx in wallet.transactions] == list(range(150))
    
    def test_concurrent_execute_runs_effect_once(self, wallet, host):
        wallet.submit(OWNER_A, TARGET_X, 5)
        wallet.approve(OWNER_A, 0)
        wallet.approve(OWNER_B, 0)
        outcomes = []
        outcomes_lock = threading.Lock()
        
        def worker(owner):
            try:
                wallet.execute(owner, 0)
                result = "ok"
            except AlreadyExecuted:
                result = "already"
            with outcomes_lock:
                outcomes.append(result)
        
        threads = [threading.Thread(target=worker, args=(o,)) for o in (OWNER_A, OWNER_B, OWNER_C)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        
        assert sorted(outcomes) == ["already", "already", "ok"]
        assert len(host.calls) == 1


class TestConfiguration:
    
    def test_unreachable_threshold_rejected_by_default(self, host):
        with pytest.raises(InvalidThreshold):
            MultiSigWallet([OWNER_A, OWNER_B], 3, address=WALLET, host=host)
    
    def test_permissive_mode_never_reaches_quorum(self, host):
        wallet = MultiSigWallet(
            [OWNER_A, OWNER_B],
            3,
            address=WALLET,
            host=host,
            config=WalletConfig(allow_unreachable_threshold=True),
        )
        wallet.submit(OWNER_A, TARGET_X, 0)
        wallet.approve(OWNER_A, 0)
        wallet.approve(OWNER_B, 0)
        
        with pytest.raises(InsufficientApprovals) as exc_info:
            wallet.execute(OWNER_A, 0)
        assert exc_info.value.current_count == 2


class TestLogging:
    
    def test_commit_logged(self, wallet):
        wallet.submit(OWNER_A, TARGET_X, 5)
        wallet.approve(OWNER_A, 0)
        wallet.approve(OWNER_B, 0)
        
        with capture_logs() as logs:
            wallet.execute(OWNER_A, 0)
        
        committed = [entry for entry in logs if entry["event"] == "execution_committed"]
        assert len(committed) == 1
        assert committed[0]["tx_id"] == 0
        assert committed[0]["approvals"] == 2
    
    def test_rejection_logged_as_warning(self, wallet):
        with capture_logs() as logs:
            with pytest.raises(Unauthorized):
                wallet.submit(STRANGER, TARGET_X, 1)
        
        rejected = [entry for entry in logs if entry["event"] == "operation_rejected"]
        assert rejected[0]["log_level"] == "warning"
        assert rejected[0]["error"] == "Unauthorized"
        assert rejected[0]["operation"] == "submit"
    
    def test_rollback_logged(self, wallet, host):
        wallet.submit(OWNER_A, TARGET_X, 5)
        wallet.approve(OWNER_A, 0)
        wallet.approve(OWNER_B, 0)
        host.register_handler(TARGET_X, lambda sender, value, payload: False)
        
        with capture_logs() as logs:
            with pytest.raises(ExecutionFailed):
                wallet.execute(OWNER_A, 0)
        
        rolled_back = [entry for entry in logs if entry["event"] == "execution_rolled_back"]
        assert rolled_back[0]["executed"] is False
