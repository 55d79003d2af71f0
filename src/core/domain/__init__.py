"""
Domain models and value objects.

Contains fundamental wallet entities: Transaction, notifications, identities, errors.
"""

from src.core.domain.errors import (
    AlreadyApproved,
    AlreadyExecuted,
    DuplicateOwner,
    ExecutionFailed,
    InsufficientApprovals,
    InvalidAmount,
    InvalidOwnerAddress,
    InvalidSender,
    InvalidTarget,
    InvalidThreshold,
    NotYetApproved,
    OwnersNotProvided,
    SnapshotCorrupted,
    TransactionNotFound,
    Unauthorized,
    WalletConfigurationError,
    WalletError,
)
from src.core.domain.events import (
    ApproveEvent,
    DepositEvent,
    EventType,
    ExecuteEvent,
    RevokeEvent,
    SubmitEvent,
    WalletEvent,
)
from src.core.domain.identity import NULL_ADDRESS, is_null_identity
from src.core.domain.transaction import Transaction

__all__ = [
    # Identity
    "NULL_ADDRESS",
    "is_null_identity",
    # Transaction model
    "Transaction",
    # Events
    "EventType",
    "WalletEvent",
    "DepositEvent",
    "SubmitEvent",
    "ApproveEvent",
    "RevokeEvent",
    "ExecuteEvent",
    # Errors
    "WalletError",
    "WalletConfigurationError",
    "OwnersNotProvided",
    "InvalidThreshold",
    "InvalidOwnerAddress",
    "DuplicateOwner",
    "Unauthorized",
    "TransactionNotFound",
    "AlreadyApproved",
    "AlreadyExecuted",
    "NotYetApproved",
    "InsufficientApprovals",
    "ExecutionFailed",
    "InvalidTarget",
    "InvalidAmount",
    "InvalidSender",
    "SnapshotCorrupted",
]
