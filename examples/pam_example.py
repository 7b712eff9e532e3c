#!/usr/bin/env python3
"""
PAM (Principal at Maturity) Contract Example
============================================

This example walks a Principal at Maturity (PAM) loan through its life with
actus_ledger: first through the host facade, which speaks numeric codes and
encoded bytes, then directly through the contract rule set.

What You'll Learn:
-----------------
1. How to describe a loan with ContractTerms
2. How to initialize a contract through the facade and apply events
3. How to replay a contract's scheduled events
4. How payment frequency changes cash flow timing
5. How the creditor and debtor see the same flows with opposite signs

Example: 100,000 loan at 5% annual interest, 2-year term
"""

from actus_ledger.contracts import create_contract
from actus_ledger.core import (
    ContractRole,
    ContractTerms,
    ContractType,
    DayCountConvention,
    EventType,
    Units,
    encode_terms,
    make_timestamp,
    to_iso,
)
from actus_ledger.engine import ActusContract


def loan_terms(**overrides) -> ContractTerms:
    fields = {
        "contract_id": "PAM-BASIC-001",
        "contract_type": ContractType.PAM,
        "contract_role": ContractRole.RPA,
        "settlement_currency": b"USD",
        "status_date": make_timestamp(2024, 1, 15),
        "initial_exchange_date": make_timestamp(2024, 1, 15),
        "maturity_date": make_timestamp(2026, 1, 15),
        "notional_principal": Units.from_int(100_000),
        "nominal_interest_rate": Units.from_decimal("0.05"),
        "day_count_convention": DayCountConvention.A360,
        "interest_payment_cycle": "3M",
    }
    fields.update(overrides)
    return ContractTerms(**fields)


def example_1_facade_lifecycle():
    """
    Example 1: Facade Lifecycle
    ---------------------------
    Initialize a contract from encoded terms and apply every scheduled event
    through the facade, printing the settlement amount and state after each.
    """
    print("=" * 80)
    print("Example 1: PAM through the facade - 100,000 at 5% for 2 years")
    print("=" * 80)

    terms = loan_terms()
    facade = ActusContract()
    facade.init(ContractType.PAM.code, ContractRole.RPA.code, b"USD", encode_terms(terms))

    # The rule set knows the schedule; the host decides when to apply events
    events = create_contract(terms).scheduled_events()

    print(f"\n{'Date':<12} {'Event':<6} {'Payoff':>16} {'Notional':>16} {'Accrued':>12}")
    print("-" * 66)
    for day, event in events:
        payoff = facade.process_event(event.code, day.shifted)
        state = facade.get_state()
        print(
            f"{to_iso(day.shifted)[:10]:<12} {event.value:<6} {str(payoff):>16} "
            f"{str(state.notional_principal):>16} {str(state.accrued_interest):>12}"
        )

    print(f"\nFinal stage: {facade.get_state().stage.value}")
    print(f"State bytes: {facade.get_state_bytes().hex()}")


def example_2_payment_frequencies():
    """
    Example 2: Comparing Payment Frequencies
    ----------------------------------------
    The same loan with monthly, quarterly, semi-annual and annual interest.
    Simple interest does not compound, so only the timing changes.
    """
    print("\n\n" + "=" * 80)
    print("Example 2: Payment Frequency Comparison")
    print("=" * 80)

    print(f"\n{'Frequency':<15} {'# Payments':<12} {'Total Interest':>18}")
    print("-" * 48)
    for name, cycle in {"Monthly": "1M", "Quarterly": "3M", "Semi-Annual": "6M", "Annual": "1Y"}.items():
        contract = create_contract(loan_terms(contract_id=f"PAM-FREQ-{name}", interest_payment_cycle=cycle))
        state = contract.initialize_state()
        total = Units(0)
        payments = 0
        for day, event in contract.scheduled_events():
            payoff = contract.transition(event, day.shifted, state)
            if event == EventType.IP:
                total += payoff
                payments += 1
        print(f"{name:<15} {payments:<12} {str(total):>18}")


def example_3_creditor_vs_debtor():
    """
    Example 3: Creditor vs. Debtor Perspective
    ------------------------------------------
    RPA (creditor) pays out at IED and receives later; RPL (debtor) is the
    mirror image.
    """
    print("\n\n" + "=" * 80)
    print("Example 3: Creditor vs. Debtor")
    print("=" * 80)

    for role in (ContractRole.RPA, ContractRole.RPL):
        contract = create_contract(loan_terms(contract_role=role, interest_payment_cycle="1Y"))
        state = contract.initialize_state()
        flows = [
            str(contract.transition(event, day.shifted, state))
            for day, event in contract.scheduled_events()
        ]
        print(f"\n{role.value}: {', '.join(flows)}")


def main():
    """Run all examples."""
    example_1_facade_lifecycle()
    example_2_payment_frequencies()
    example_3_creditor_vs_debtor()

    print("\n\n" + "=" * 80)
    print("All examples completed successfully!")
    print("=" * 80)


if __name__ == "__main__":
    main()
