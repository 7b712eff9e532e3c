#!/usr/bin/env python3
"""
Amortizing Contracts Example
============================

Compares the three amortizing contract types on the same 12-month loan:

- LAM (Linear Amortizer): fixed principal installments, falling interest
- NAM (Negative Amortizer): fixed total payment, principal is what's left
  after interest
- ANN (Annuity): fixed total payment computed from the terms

Each table shows the principal (PR) and interest (IP) settled on every
payment date and the notional outstanding afterwards.
"""

from actus_ledger.contracts import AnnuityContract, create_contract
from actus_ledger.core import (
    ContractRole,
    ContractTerms,
    ContractType,
    EventType,
    Units,
    make_timestamp,
    to_iso,
)


def amortizing_terms(contract_type: ContractType, **overrides) -> ContractTerms:
    fields = {
        "contract_id": f"{contract_type.value}-EXAMPLE-001",
        "contract_type": contract_type,
        "contract_role": ContractRole.RPA,
        "status_date": make_timestamp(2024, 1, 15),
        "initial_exchange_date": make_timestamp(2024, 1, 15),
        "maturity_date": make_timestamp(2025, 1, 15),
        "notional_principal": Units.from_int(12_000),
        "nominal_interest_rate": Units.from_decimal("0.065"),
        "principal_redemption_cycle": "1M",
        "interest_payment_cycle": "1M",
    }
    fields.update(overrides)
    return ContractTerms(**fields)


def print_schedule(contract) -> None:
    state = contract.initialize_state()
    rows: dict[int, dict[EventType, Units]] = {}
    for day, event in contract.scheduled_events():
        payoff = contract.transition(event, day.shifted, state)
        if event in (EventType.PR, EventType.IP, EventType.MD):
            rows.setdefault(day.shifted, {})[event] = payoff
        rows.get(day.shifted, {})["nt"] = state.notional_principal

    print(f"{'Date':<12} {'Principal':>14} {'Interest':>12} {'Maturity':>14} {'Outstanding':>14}")
    print("-" * 70)
    for ts, row in rows.items():
        cells = [str(row.get(e, "")) for e in (EventType.PR, EventType.IP, EventType.MD)]
        print(f"{to_iso(ts)[:10]:<12} {cells[0]:>14} {cells[1]:>12} {cells[2]:>14} {str(row['nt']):>14}")


def main():
    """Run the comparison."""
    print("=" * 80)
    print("LAM: 1,000 principal per month")
    print("=" * 80)
    print_schedule(
        create_contract(
            amortizing_terms(ContractType.LAM, next_principal_redemption_amount=Units.from_int(1_000))
        )
    )

    print("\n" + "=" * 80)
    print("NAM: 1,000 total payment per month")
    print("=" * 80)
    print_schedule(
        create_contract(
            amortizing_terms(ContractType.NAM, next_principal_redemption_amount=Units.from_int(1_000))
        )
    )

    ann = create_contract(amortizing_terms(ContractType.ANN))
    assert isinstance(ann, AnnuityContract)
    print("\n" + "=" * 80)
    print(f"ANN: computed payment {ann.annuity_amount} per month")
    print("=" * 80)
    print_schedule(ann)


if __name__ == "__main__":
    main()
