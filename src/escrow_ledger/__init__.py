"""Escrow ledger: a buyer/seller escrow agreement as a guarded state machine."""

from escrow_ledger.domain import (
    EscrowAction,
    EscrowAgreement,
    EscrowError,
    EscrowState,
)

__version__ = "0.1.0"

__all__ = [
    "EscrowAction",
    "EscrowAgreement",
    "EscrowError",
    "EscrowState",
    "__version__",
]
