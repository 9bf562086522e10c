"""Shared test fixtures for the escrow ledger test suite.

Provides:
    - Fresh and funded agreements for the reference parties
    - An EscrowService wired to explicit settings (no .env lookup)
"""

from __future__ import annotations

import pytest

from escrow_ledger.config import Settings
from escrow_ledger.domain.agreement import EscrowAgreement
from escrow_ledger.services.escrow_service import EscrowService

BUYER = "alice"
SELLER = "bob"
AMOUNT = 100

# ---------------------------------------------------------------------------
# Domain Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def agreement() -> EscrowAgreement:
    """Return a fresh agreement awaiting payment."""
    return EscrowAgreement.create(BUYER, SELLER, AMOUNT)


@pytest.fixture
def funded_agreement(agreement: EscrowAgreement) -> EscrowAgreement:
    """Return an agreement the buyer has already paid into."""
    agreement.deposit(BUYER, AMOUNT)
    return agreement


# ---------------------------------------------------------------------------
# Service Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def service(settings: Settings) -> EscrowService:
    return EscrowService(settings)
