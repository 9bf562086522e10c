"""Application services that host escrow agreements."""

from escrow_ledger.services.escrow_service import EscrowEvent, EscrowService

__all__ = ["EscrowEvent", "EscrowService"]
