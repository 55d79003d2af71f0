"""Host — окружение, исполняющее внешний эффект и хранящее средства кошелька.

Кошелёк не учитывает баланс самостоятельно: get_balance делегирует хосту.
InMemoryHost — эталонная реализация для локального использования и тестов.
"""

from typing import Callable, Dict, Optional, Protocol

from src.core.observability import get_logger

log = get_logger(__name__, component="host")


# (sender, value, payload) → True при успехе
CallHandler = Callable[[str, int, bytes], bool]


class WalletHost(Protocol):
    """Контракт хоста для MultiSigWallet."""
    
    def balance_of(self, address: str) -> int: ...
    
    def credit(self, address: str, value: int) -> None: ...
    
    def call(self, sender: str, target: str, value: int, payload: bytes) -> bool:
        """Выполнить внешний эффект; False или exception — неудача.
        
        При неудаче хост обязан сам отбросить свои изменения ресурсов.
        """
        ...


class InMemoryHost:
    """In-memory хост: балансы + опциональные обработчики на стороне получателя.
    
    Обработчик получателя вызывается после перевода value и может повторно
    войти в кошелёк (reentrancy). Если обработчик вернул False или выбросил
    исключение, либо у отправителя недостаточно средств, все изменения балансов,
    сделанные в рамках call (включая вложенные), отменяются.
    """
    
    def __init__(self, balances: Optional[Dict[str, int]] = None):
        self._balances: Dict[str, int] = dict(balances or {})
        self._handlers: Dict[str, CallHandler] = {}
        self.calls: list[tuple[str, str, int, bytes]] = []
    
    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)
    
    def credit(self, address: str, value: int) -> None:
        if value < 0:
            raise ValueError(f"credit value must be non-negative, got {value}")
        self._balances[address] = self.balance_of(address) + value
    
    def register_handler(self, target: str, handler: CallHandler) -> None:
        self._handlers[target] = handler
    
    def call(self, sender: str, target: str, value: int, payload: bytes) -> bool:
        self.calls.append((sender, target, value, payload))
        
        if self.balance_of(sender) < value:
            log.warning(
                "call_insufficient_funds",
                sender=sender,
                target=target,
                value=value,
                balance=self.balance_of(sender),
            )
            return False
        
        journal = dict(self._balances)
        self._balances[sender] = self.balance_of(sender) - value
        self._balances[target] = self.balance_of(target) + value
        
        handler = self._handlers.get(target)
        if handler is None:
            return True
        
        try:
            ok = handler(sender, value, payload)
        except BaseException:
            self._balances = journal
            raise
        
        if not ok:
            self._balances = journal
            log.warning("call_rejected_by_target", sender=sender, target=target, value=value)
            return False
        return True
