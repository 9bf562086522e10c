"""Pydantic schemas for persisting and reporting escrow agreements."""

from escrow_ledger.schemas.agreement import AgreementStatus, EscrowAgreementSnapshot

__all__ = ["AgreementStatus", "EscrowAgreementSnapshot"]
