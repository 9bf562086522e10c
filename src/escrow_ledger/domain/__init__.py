"""Domain layer: pure business logic with zero framework dependencies."""

from escrow_ledger.domain.agreement import EscrowAgreement
from escrow_ledger.domain.enums import (
    EscrowAction,
    EscrowState,
    EventType,
    PartyRole,
)
from escrow_ledger.domain.exceptions import (
    AgreementNotFoundError,
    AlreadyInitializedError,
    EscrowError,
    InconsistentSnapshotError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidStateError,
    UnauthorizedError,
)
from escrow_ledger.domain.state_machine import (
    TRANSITIONS,
    EscrowStateMachine,
    validate_transition,
)

__all__ = [
    "EscrowAgreement",
    "EscrowAction",
    "EscrowState",
    "EventType",
    "PartyRole",
    "EscrowError",
    "UnauthorizedError",
    "InvalidStateError",
    "InsufficientFundsError",
    "AlreadyInitializedError",
    "AgreementNotFoundError",
    "InvalidAmountError",
    "InconsistentSnapshotError",
    "TRANSITIONS",
    "EscrowStateMachine",
    "validate_transition",
]
