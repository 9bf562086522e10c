"""Escrow Agreement State Machine Guard.

Uses python-statemachine to enforce legal state transitions at the domain level.
No matter what the hosting application does, an illegal transition
(e.g., AWAITING_PAYMENT -> COMPLETED) will raise TransitionNotAllowed.

The state machine is instantiated at the agreement's current state and fired
only after the agreement has checked its own preconditions, so the stored
state is updated from the machine's result and never from the caller.

Transition table:
    AWAITING_PAYMENT   -> AWAITING_DELIVERY  (deposit)
    AWAITING_DELIVERY  -> COMPLETED          (confirm_delivery)
    AWAITING_DELIVERY  -> REFUNDED           (refund_buyer)
"""

from __future__ import annotations

from statemachine import State, StateMachine

from escrow_ledger.domain.enums import EscrowAction, EscrowState

# action -> (required state, resulting state); must match the events below
TRANSITIONS: dict[EscrowAction, tuple[EscrowState, EscrowState]] = {
    EscrowAction.DEPOSIT: (EscrowState.AWAITING_PAYMENT, EscrowState.AWAITING_DELIVERY),
    EscrowAction.CONFIRM_DELIVERY: (EscrowState.AWAITING_DELIVERY, EscrowState.COMPLETED),
    EscrowAction.REFUND_BUYER: (EscrowState.AWAITING_DELIVERY, EscrowState.REFUNDED),
}


class EscrowStateMachine(StateMachine):
    """State machine that guards escrow agreement lifecycle transitions.

    Usage:
        sm = EscrowStateMachine(current_state="AWAITING_PAYMENT")
        sm.deposit()       # transitions to AWAITING_DELIVERY
        sm.status          # 'AWAITING_DELIVERY'
    """

    # --- States ---
    AWAITING_PAYMENT = State(
        "Awaiting payment", value=EscrowState.AWAITING_PAYMENT.value, initial=True
    )
    AWAITING_DELIVERY = State("Awaiting delivery", value=EscrowState.AWAITING_DELIVERY.value)
    COMPLETED = State("Completed", value=EscrowState.COMPLETED.value, final=True)
    REFUNDED = State("Refunded", value=EscrowState.REFUNDED.value, final=True)

    # --- Events / Transitions ---
    deposit = AWAITING_PAYMENT.to(AWAITING_DELIVERY)
    confirm_delivery = AWAITING_DELIVERY.to(COMPLETED)
    refund_buyer = AWAITING_DELIVERY.to(REFUNDED)

    def __init__(self, current_state: str = EscrowState.AWAITING_PAYMENT.value) -> None:
        """Initialize the state machine at a given state.

        Args:
            current_state: The current EscrowState value (e.g., "AWAITING_DELIVERY").
        """
        valid_values = {s.value for s in self.states}
        if current_state not in valid_values:
            valid = ", ".join(sorted(valid_values))
            raise ValueError(f"Unknown state '{current_state}'. Valid states: {valid}")
        super().__init__(start_value=str(current_state))

    @property
    def status(self) -> str:
        """Return the current state value as a string (matches EscrowState enum)."""
        return str(self.current_state_value)

    def get_allowed_events(self) -> list[str]:
        """Return the event names that can fire from the current state."""
        return [
            action.value
            for action, (source, _) in TRANSITIONS.items()
            if source.value == self.status
        ]


def validate_transition(current_state: str, event_name: str) -> str:
    """Validate a state transition and return the new state.

    Creates a temporary state machine, fires the named event, and returns
    the resulting state string.

    Raises:
        TransitionNotAllowed: If the transition is illegal.
        ValueError: If the state or event name is invalid.
    """
    sm = EscrowStateMachine(current_state=current_state)

    if event_name not in {action.value for action in TRANSITIONS}:
        raise ValueError(
            f"Unknown event '{event_name}'. "
            f"Allowed events from {current_state}: {sm.get_allowed_events()}"
        )

    sm.send(event_name)
    return sm.status
