"""Domain exceptions for the escrow ledger.

These exceptions are framework-agnostic and represent business rule violations.
Every failure leaves the agreement untouched, so callers can catch the specific
subclass, branch on ``code`` and retry with corrected input.
"""

from __future__ import annotations


class EscrowError(Exception):
    """Base exception for all escrow errors."""

    def __init__(self, message: str, code: str = "ESCROW_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


# --- Transition Errors ---


class UnauthorizedError(EscrowError):
    """Raised when the sender does not hold the role an action requires.

    Example: the seller trying to confirm delivery.
    """

    def __init__(self, action: str, sender: str, required_role: str) -> None:
        super().__init__(
            message=f"Sender '{sender}' is not allowed to {action}: requires the {required_role}",
            code="UNAUTHORIZED",
        )
        self.action = action
        self.sender = sender
        self.required_role = required_role


class InvalidStateError(EscrowError):
    """Raised when an action is attempted outside the state it requires."""

    MESSAGES = {
        "deposit": "Deposit only allowed in AWAITING_PAYMENT state",
        "confirm_delivery": "Cannot confirm delivery unless funds are deposited",
        "refund_buyer": "Can only refund when funds are held",
    }

    def __init__(self, action: str, current_state: str, required_state: str) -> None:
        super().__init__(
            message=self.MESSAGES.get(action, f"{action} requires {required_state} state"),
            code="INVALID_STATE",
        )
        self.action = action
        self.current_state = current_state
        self.required_state = required_state


class InsufficientFundsError(EscrowError):
    """Raised when a deposit does not match the agreed amount exactly.

    Overpayments are rejected too; check ``is_overpayment`` to tell them apart.
    """

    def __init__(self, required: int, received: int) -> None:
        super().__init__(
            message=f"Deposit must equal the agreed amount: required {required}, received {received}",
            code="INSUFFICIENT_FUNDS",
        )
        self.required = required
        self.received = received

    @property
    def is_overpayment(self) -> bool:
        return self.received > self.required


# --- Registry Errors ---


class AlreadyInitializedError(EscrowError):
    """Raised when an agreement id is registered a second time."""

    def __init__(self, agreement_id: str) -> None:
        super().__init__(
            message=f"Agreement already initialized: {agreement_id}",
            code="ALREADY_INITIALIZED",
        )
        self.agreement_id = agreement_id


class AgreementNotFoundError(EscrowError):
    """Raised when an agreement id does not exist."""

    def __init__(self, agreement_id: str) -> None:
        super().__init__(
            message=f"Agreement not found: {agreement_id}",
            code="AGREEMENT_NOT_FOUND",
        )
        self.agreement_id = agreement_id


class InvalidAmountError(EscrowError):
    """Raised when the host requires positive amounts and gets something else."""

    def __init__(self, amount: int) -> None:
        super().__init__(
            message=f"Agreement amount must be a positive integer, got {amount!r}",
            code="INVALID_AMOUNT",
        )
        self.amount = amount


# --- Persistence Errors ---


class InconsistentSnapshotError(EscrowError):
    """Raised when restored fields break the balance/state invariant."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="INCONSISTENT_SNAPSHOT")
