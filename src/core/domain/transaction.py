"""
Transaction — Модель предложенного действия

Immutable Pydantic модель: кошелёк никогда не мутирует транзакцию на месте,
а заменяет её копией с новым флагом executed (model_copy). Поэтому любое
значение, полученное через ledger, является read-only view.
"""

from pydantic import BaseModel, Field, field_validator

from .identity import is_null_identity


# =============================================================================
# TRANSACTION MODEL
# =============================================================================


class Transaction(BaseModel):
    """
    Предложенное внешнее действие (target, value, payload).

    Жизненный цикл:
    - создаётся только через submit (executed=False)
    - executed=True выставляется только ExecutionEngine
    - никогда не удаляется
    """

    tx_id: int = Field(..., ge=0, description="Порядковый идентификатор (0-based)")
    target: str = Field(..., min_length=1, description="Получатель внешнего эффекта")
    value: int = Field(..., ge=0, description="Сумма перевода (минимальные единицы)")
    payload: bytes = Field(default=b"", description="Непрозрачные данные вызова")
    executed: bool = Field(default=False, description="Терминальный флаг исполнения")

    model_config = {"frozen": True}

    @field_validator("target")
    @classmethod
    def validate_target(cls, v: str) -> str:
        """Получатель не может быть null/sentinel."""
        if is_null_identity(v):
            raise ValueError(f"target must not be a null identity, got {v!r}")
        return v

    def with_executed(self, executed: bool) -> "Transaction":
        """Копия транзакции с новым флагом executed."""
        return self.model_copy(update={"executed": executed})

    def to_record(self) -> dict:
        """Сериализация в запись снапшота (payload как hex)."""
        return {
            "tx_id": self.tx_id,
            "target": self.target,
            "value": self.value,
            "payload": self.payload.hex(),
            "executed": self.executed,
        }

    @classmethod
    def from_record(cls, record: dict) -> "Transaction":
        """Восстановление из записи снапшота."""
        return cls(
            tx_id=record["tx_id"],
            target=record["target"],
            value=record["value"],
            payload=bytes.fromhex(record["payload"]),
            executed=record["executed"],
        )
