"""
Wallet Events — уведомления для наблюдателей

Эмитятся только при успешном коммите операции; внутри кошелька не потребляются.
"""

from enum import Enum

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class EventType(str, Enum):
    """Тип уведомления кошелька."""

    DEPOSIT = "Deposit"
    SUBMIT = "Submit"
    APPROVE = "Approve"
    REVOKE = "Revoke"
    EXECUTE = "Execute"


# =============================================================================
# EVENT MODELS
# =============================================================================


class WalletEvent(BaseModel):
    """Базовое уведомление."""

    event_type: EventType = Field(..., description="Тип уведомления")

    model_config = {"frozen": True}


class DepositEvent(WalletEvent):
    event_type: EventType = EventType.DEPOSIT
    sender: str = Field(..., min_length=1)
    value: int = Field(..., gt=0)


class SubmitEvent(WalletEvent):
    event_type: EventType = EventType.SUBMIT
    tx_id: int = Field(..., ge=0)


class ApproveEvent(WalletEvent):
    event_type: EventType = EventType.APPROVE
    owner: str = Field(..., min_length=1)
    tx_id: int = Field(..., ge=0)


class RevokeEvent(WalletEvent):
    event_type: EventType = EventType.REVOKE
    owner: str = Field(..., min_length=1)
    tx_id: int = Field(..., ge=0)


class ExecuteEvent(WalletEvent):
    event_type: EventType = EventType.EXECUTE
    tx_id: int = Field(..., ge=0)
