"""Escrow Ledger: End-to-End Simulation.

Replays the reference scenarios with BuyerBot and SellerBot parties:

    Scenario 1: Seller tries to pay in      -> UNAUTHORIZED, still AWAITING_PAYMENT
    Scenario 2: Buyer deposits 100          -> AWAITING_DELIVERY, balance 100
    Scenario 3: Seller confirms, then buyer -> UNAUTHORIZED, then COMPLETED paying 100
    Scenario 4: Buyer self-refund, seller   -> UNAUTHORIZED, then REFUNDED paying 100
    Scenario 5: Buyer deposits 50 of 100    -> INSUFFICIENT_FUNDS, still AWAITING_PAYMENT

Usage:
    escrow-simulate
    escrow-simulate --scenario 3
    escrow-simulate --json-logs
"""

from __future__ import annotations

import argparse
from collections.abc import Callable
from dataclasses import dataclass

from escrow_ledger.config import Settings
from escrow_ledger.domain.enums import EscrowState
from escrow_ledger.domain.exceptions import EscrowError
from escrow_ledger.logging_config import get_logger, setup_logging
from escrow_ledger.services.escrow_service import EscrowService

logger = get_logger("simulation")

AGREED_AMOUNT = 100


class ScenarioFailed(AssertionError):
    """Raised when a scenario observes something other than what it expects."""


# ---------------------------------------------------------------------------
# Parties
# ---------------------------------------------------------------------------
@dataclass
class BuyerBot:
    """Simulated buyer that opens agreements, pays in and confirms delivery."""

    name: str = "alice"

    def open_agreement(self, svc: EscrowService, seller: str, amount: int) -> str:
        agreement_id = svc.create_agreement(buyer=self.name, seller=seller, amount=amount)
        logger.info("buyer.agreement_opened", agreement_id=agreement_id, amount=amount)
        return agreement_id

    def deposit(self, svc: EscrowService, agreement_id: str, amount: int) -> None:
        svc.deposit(agreement_id, self.name, amount)
        logger.info("buyer.deposited", agreement_id=agreement_id, amount=amount)

    def confirm_delivery(self, svc: EscrowService, agreement_id: str) -> int:
        payout = svc.confirm_delivery(agreement_id, self.name)
        logger.info("buyer.delivery_confirmed", agreement_id=agreement_id, payout=payout)
        return payout


@dataclass
class SellerBot:
    """Simulated seller that can hand the deposit back."""

    name: str = "bob"

    def refund_buyer(self, svc: EscrowService, agreement_id: str) -> int:
        refund = svc.refund_buyer(agreement_id, self.name)
        logger.info("seller.refunded", agreement_id=agreement_id, refund=refund)
        return refund


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------
def banner(text: str) -> None:
    """Print a prominent banner."""
    width = 70
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width + "\n")


def section(text: str) -> None:
    """Print a section header."""
    print(f"\n--- {text} ---\n")


def print_audit_trail(svc: EscrowService, agreement_id: str) -> None:
    """Print the full audit trail for an agreement."""
    print("\n  Audit Trail:")
    for i, evt in enumerate(svc.list_events(agreement_id), 1):
        old = evt.old_state or "-"
        print(f"    {i}. [{evt.event_type}] {old} -> {evt.new_state} (by {evt.actor})")
    print()


def expect(condition: bool, message: str) -> None:
    if not condition:
        raise ScenarioFailed(message)


def expect_rejection(action: Callable[[], object], code: str) -> None:
    """Run ``action`` and check it fails with the given error code."""
    try:
        action()
    except EscrowError as exc:
        expect(exc.code == code, f"Expected {code}, got {exc.code}")
        print(f"  Rejected as expected: {exc.code} ({exc.message})")
        return
    raise ScenarioFailed(f"Expected {code}, but the call succeeded")


def expect_state(svc: EscrowService, agreement_id: str, state: EscrowState, balance: int) -> None:
    status = svc.get_status(agreement_id)
    expect(status.state is state, f"Expected {state}, got {status.state}")
    expect(status.balance == balance, f"Expected balance {balance}, got {status.balance}")
    print(f"  State: {status.state}  Balance: {status.balance}")


# ===========================================================================
# Scenarios
# ===========================================================================
def scenario_1_seller_cannot_deposit(svc: EscrowService) -> None:
    banner("SCENARIO 1: Seller Cannot Deposit")
    buyer, seller = BuyerBot(), SellerBot()
    agreement_id = buyer.open_agreement(svc, seller.name, AGREED_AMOUNT)

    section("Seller attempts the deposit")
    expect_rejection(lambda: svc.deposit(agreement_id, seller.name, AGREED_AMOUNT), "UNAUTHORIZED")
    expect_state(svc, agreement_id, EscrowState.AWAITING_PAYMENT, 0)
    print_audit_trail(svc, agreement_id)


def scenario_2_buyer_deposits(svc: EscrowService) -> None:
    banner("SCENARIO 2: Buyer Deposits")
    buyer, seller = BuyerBot(), SellerBot()
    agreement_id = buyer.open_agreement(svc, seller.name, AGREED_AMOUNT)

    section("Buyer deposits the agreed amount")
    buyer.deposit(svc, agreement_id, AGREED_AMOUNT)
    expect_state(svc, agreement_id, EscrowState.AWAITING_DELIVERY, AGREED_AMOUNT)
    print_audit_trail(svc, agreement_id)


def scenario_3_buyer_releases_funds(svc: EscrowService) -> None:
    banner("SCENARIO 3: Only The Buyer Releases Funds")
    buyer, seller = BuyerBot(), SellerBot()
    agreement_id = buyer.open_agreement(svc, seller.name, AGREED_AMOUNT)
    buyer.deposit(svc, agreement_id, AGREED_AMOUNT)

    section("Seller attempts to confirm delivery")
    expect_rejection(lambda: svc.confirm_delivery(agreement_id, seller.name), "UNAUTHORIZED")

    section("Buyer confirms delivery")
    payout = buyer.confirm_delivery(svc, agreement_id)
    expect(payout == AGREED_AMOUNT, f"Expected payout {AGREED_AMOUNT}, got {payout}")
    expect_state(svc, agreement_id, EscrowState.COMPLETED, 0)
    print_audit_trail(svc, agreement_id)


def scenario_4_seller_refunds(svc: EscrowService) -> None:
    banner("SCENARIO 4: Only The Seller Refunds")
    buyer, seller = BuyerBot(), SellerBot()
    agreement_id = buyer.open_agreement(svc, seller.name, AGREED_AMOUNT)
    buyer.deposit(svc, agreement_id, AGREED_AMOUNT)

    section("Buyer attempts a self-refund")
    expect_rejection(lambda: svc.refund_buyer(agreement_id, buyer.name), "UNAUTHORIZED")

    section("Seller refunds the buyer")
    refund = seller.refund_buyer(svc, agreement_id)
    expect(refund == AGREED_AMOUNT, f"Expected refund {AGREED_AMOUNT}, got {refund}")
    expect_state(svc, agreement_id, EscrowState.REFUNDED, 0)
    print_audit_trail(svc, agreement_id)


def scenario_5_wrong_amount(svc: EscrowService) -> None:
    banner("SCENARIO 5: Deposit Must Match Exactly")
    buyer, seller = BuyerBot(), SellerBot()
    agreement_id = buyer.open_agreement(svc, seller.name, AGREED_AMOUNT)

    section("Buyer deposits half the agreed amount")
    expect_rejection(
        lambda: svc.deposit(agreement_id, buyer.name, AGREED_AMOUNT // 2), "INSUFFICIENT_FUNDS"
    )
    expect_state(svc, agreement_id, EscrowState.AWAITING_PAYMENT, 0)
    print_audit_trail(svc, agreement_id)


SCENARIOS: dict[int, Callable[[EscrowService], None]] = {
    1: scenario_1_seller_cannot_deposit,
    2: scenario_2_buyer_deposits,
    3: scenario_3_buyer_releases_funds,
    4: scenario_4_seller_refunds,
    5: scenario_5_wrong_amount,
}


# ===========================================================================
# Main
# ===========================================================================
def run(scenario: int = 0, svc: EscrowService | None = None) -> int:
    """Run one scenario, or all of them when ``scenario`` is 0.

    Returns a process exit code: 0 when every expectation held.
    """
    if scenario and scenario not in SCENARIOS:
        print(f"Unknown scenario {scenario}. Available: {', '.join(map(str, SCENARIOS))}")
        return 2
    svc = svc or EscrowService()

    selected = [scenario] if scenario else list(SCENARIOS)
    failures = 0
    for num in selected:
        try:
            SCENARIOS[num](svc)
        except ScenarioFailed as exc:
            failures += 1
            logger.error("simulation.scenario_failed", scenario=num, reason=str(exc))

    if failures:
        banner(f"{failures} SCENARIO(S) FAILED")
        return 1
    banner("ALL SCENARIOS COMPLETED SUCCESSFULLY")
    return 0


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    settings = settings or Settings()

    parser = argparse.ArgumentParser(description="Escrow Ledger Simulation")
    parser.add_argument(
        "--scenario",
        type=int,
        default=0,
        help="Run a specific scenario (1-5). Default: run all.",
    )
    parser.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=settings.app_json_logs or not settings.is_development,
        help="Emit JSON log lines instead of colored console output "
        "(default: APP_JSON_LOGS, or on outside development).",
    )
    parser.add_argument(
        "--log-level",
        default=settings.app_log_level,
        help="Root log level (default: APP_LOG_LEVEL).",
    )
    args = parser.parse_args(argv)

    setup_logging(log_level=args.log_level, json_logs=args.json_logs)
    logger.info("simulation.started", env=settings.app_env, scenario=args.scenario or "all")
    return run(args.scenario, EscrowService(settings))


if __name__ == "__main__":
    raise SystemExit(main())
