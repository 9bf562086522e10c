"""Domain enumerations for the escrow ledger.

These enums define the canonical states and types used throughout the package.
They are framework-agnostic (no pydantic, no structlog imports).
"""

import enum


class EscrowState(enum.StrEnum):
    """Lifecycle states of an escrow agreement.

    State transitions are enforced by the EscrowStateMachine guard.
    See domain/state_machine.py for the transition table.
    """

    AWAITING_PAYMENT = "AWAITING_PAYMENT"
    AWAITING_DELIVERY = "AWAITING_DELIVERY"
    COMPLETED = "COMPLETED"
    REFUNDED = "REFUNDED"

    @property
    def is_terminal(self) -> bool:
        return self in (EscrowState.COMPLETED, EscrowState.REFUNDED)


class EscrowAction(enum.StrEnum):
    """Transitions a party can request on an agreement.

    Values match the event names on EscrowStateMachine.
    """

    DEPOSIT = "deposit"
    CONFIRM_DELIVERY = "confirm_delivery"
    REFUND_BUYER = "refund_buyer"


class PartyRole(enum.StrEnum):
    """Roles a sender identifier can hold in an agreement."""

    BUYER = "buyer"
    SELLER = "seller"
    ARBITER = "arbiter"


class EventType(enum.StrEnum):
    """Types of audit events recorded by the escrow service.

    Every successful transition produces exactly one event.
    """

    AGREEMENT_CREATED = "AGREEMENT_CREATED"
    FUNDS_DEPOSITED = "FUNDS_DEPOSITED"
    DELIVERY_CONFIRMED = "DELIVERY_CONFIRMED"
    BUYER_REFUNDED = "BUYER_REFUNDED"
    TRANSITION_REJECTED = "TRANSITION_REJECTED"
