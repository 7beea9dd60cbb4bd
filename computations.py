"""
Business logic and computations for SplitSettle
"""
from __future__ import annotations
import logging
import math
from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Optional

from models import (
    DEFAULT_TOLERANCE,
    REMAINDER_WARN,
    UNKNOWN_IGNORE,
    UNKNOWN_RAISE,
    BalanceSheet,
    ExpenseRecord,
    LedgerValidationError,
    Participant,
    SettlementPolicy,
    SettlementResult,
    Transaction,
)
from utils import parse_date, round_cents, round_units

logger = logging.getLogger(__name__)


def filter_expenses_by_date(
    expenses: List[ExpenseRecord],
    start: Optional[date],
    end: Optional[date]
) -> List[ExpenseRecord]:
    """Filter expenses by date range (inclusive)"""
    out = []
    for e in expenses:
        ed = parse_date(e.date)
        if start and ed < start:
            continue
        if end and ed > end:
            continue
        out.append(e)
    return out


def total_spent(expenses: Iterable[ExpenseRecord]) -> float:
    """Sum of declared expense totals"""
    return sum(float(e.total_amount) for e in expenses)


def calculate_balances(
    expenses: List[ExpenseRecord],
    participants: List[Participant],
    policy: SettlementPolicy = SettlementPolicy(),
    warnings: Optional[List[str]] = None,
) -> BalanceSheet:
    """
    Net balance per participant: everything they paid minus everything they owe.
    Shares of ids outside `participants` are handled per policy.unknown_participants;
    with "warn" the message is appended to `warnings` when a list is given,
    otherwise it is logged.
    """
    balances = BalanceSheet.for_participants(participants)

    def apply(e: ExpenseRecord, member_id: str, amount: float) -> None:
        try:
            balances.add(member_id, amount)
        except KeyError:
            if policy.unknown_participants == UNKNOWN_IGNORE:
                return
            msg = f"expense {e.id!r} references unknown participant {member_id!r}"
            if policy.unknown_participants == UNKNOWN_RAISE:
                raise LedgerValidationError(msg) from None
            if warnings is not None:
                warnings.append(msg)
            else:
                logger.warning(msg)

    for e in expenses:
        for share in e.paid_by:
            apply(e, share.member_id, float(share.amount))
        for share in e.split_among:
            apply(e, share.member_id, -float(share.amount))

    return balances


def calculate_minimal_transactions(
    balances: BalanceSheet,
    policy: SettlementPolicy = SettlementPolicy(),
    warnings: Optional[List[str]] = None,
) -> List[Transaction]:
    """
    Greedy min-cash-flow: repeatedly match the largest debtor with the largest
    creditor. Not a guaranteed minimum (that problem is NP-hard), but needs at
    most (non-zero participants - 1) payments.
    Amounts are whole currency units; transfers that round to 0 are skipped.
    Under the "warn" remainder policy each skip is appended to `warnings`,
    or logged when no list is given.
    """
    tol = policy.tolerance
    debtors = []
    creditors = []
    for member_id, amount in balances.items():
        val = round_cents(amount)
        if val < -tol:
            debtors.append([member_id, val])
        if val > tol:
            creditors.append([member_id, val])

    debtors.sort(key=lambda x: x[1])  # most negative first
    creditors.sort(key=lambda x: x[1], reverse=True)

    transactions = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        amount = round_cents(min(abs(debtor[1]), creditor[1]))
        rounded = round_units(amount)
        if rounded > 0:
            transactions.append(Transaction(debtor[0], creditor[0], rounded))
        elif policy.subunit_remainders == REMAINDER_WARN:
            msg = f"dropped sub-unit transfer {debtor[0]!r} -> {creditor[0]!r} of {amount:.2f}"
            if warnings is not None:
                warnings.append(msg)
            else:
                logger.warning(msg)

        debtor[1] = round_cents(debtor[1] + amount)
        creditor[1] = round_cents(creditor[1] - amount)

        if abs(debtor[1]) <= tol:
            i += 1
        if creditor[1] <= tol:
            j += 1

    logger.debug("settled %d balances with %d transactions", len(balances), len(transactions))
    return transactions


def get_detailed_raw_debts(
    expenses: List[ExpenseRecord],
    participants: List[Participant],
    policy: SettlementPolicy = SettlementPolicy(),
) -> List[str]:
    """
    Describe who owes whom before simplification, one line per pair.

    Each debtor's share is spread over the payers of that expense in proportion
    to what each payer contributed; opposite debts within a pair are netted.
    """
    ids = [p.id for p in participants]
    names = {p.id: p.name for p in participants}
    matrix: Dict[str, Dict[str, float]] = {a: {b: 0.0 for b in ids} for a in ids}

    for e in expenses:
        total_paid = sum(float(p.amount) for p in e.paid_by)
        if total_paid == 0:
            continue
        for splitter in e.split_among:
            for payer in e.paid_by:
                if splitter.member_id == payer.member_id:
                    continue
                row = matrix.get(splitter.member_id)
                if row is None or payer.member_id not in row:
                    continue
                row[payer.member_id] += float(splitter.amount) * float(payer.amount) / total_paid

    results = []
    processed = set()
    for a in ids:
        for b in ids:
            if a == b:
                continue
            key = tuple(sorted((a, b)))
            if key in processed:
                continue
            processed.add(key)

            net = matrix[a][b] - matrix[b][a]
            if net > policy.tolerance:
                debtor, creditor = a, b
            elif net < -policy.tolerance:
                debtor, creditor = b, a
            else:
                continue
            results.append(policy.debt_template.format(
                debtor=names[debtor],
                creditor=names[creditor],
                amount=round_units(abs(net)),
            ))

    return results


def validate_expenses(
    expenses: List[ExpenseRecord],
    participants: List[Participant],
    tolerance: float = DEFAULT_TOLERANCE,
) -> List[str]:
    """
    Check the invariants the calculations assume and describe each violation.
    Nothing is raised; an empty list means the input is consistent.
    """
    known = {p.id for p in participants}
    out = []

    counts = Counter(e.id for e in expenses)
    for eid, n in counts.items():
        if n > 1:
            out.append(f"expense id {eid!r} appears {n} times")

    for e in expenses:
        label = f"expense {e.id!r} ({e.title})"
        if not e.paid_by:
            out.append(f"{label} has no payers")
        if not e.split_among:
            out.append(f"{label} is not split among anyone")

        shares = list(e.paid_by) + list(e.split_among)
        for s in shares:
            if s.member_id not in known:
                out.append(f"{label} references unknown participant {s.member_id!r}")
            if math.isnan(float(s.amount)):
                out.append(f"{label} has a non-numeric amount for {s.member_id!r}")
            elif float(s.amount) < 0:
                out.append(f"{label} has a negative amount for {s.member_id!r}")

        paid = sum(float(s.amount) for s in e.paid_by)
        owed = sum(float(s.amount) for s in e.split_among)
        if abs(paid - owed) > tolerance:
            out.append(f"{label}: paid {paid:.2f} but split {owed:.2f}")
        if abs(paid - float(e.total_amount)) > tolerance:
            out.append(f"{label}: paid {paid:.2f} but total is {float(e.total_amount):.2f}")

    return out


def check_balance_sheet(balances: BalanceSheet, tolerance: float = DEFAULT_TOLERANCE) -> List[str]:
    """Balances of a consistent ledger sum to zero"""
    total = balances.total()
    if math.isnan(total) or abs(total) > tolerance:
        return [f"balances sum to {total:.2f} instead of 0"]
    return []


def unsettled_remainders(
    balances: BalanceSheet,
    transactions: List[Transaction],
    tolerance: float = DEFAULT_TOLERANCE,
) -> Dict[str, float]:
    """Balance left per participant after applying the transactions"""
    after = balances.copy()
    for t in transactions:
        after.add(t.from_id, t.amount)
        after.add(t.to_id, -t.amount)
    return {m: round_cents(v) for m, v in after.items() if abs(v) > tolerance}


def settle(
    expenses: List[ExpenseRecord],
    participants: List[Participant],
    policy: SettlementPolicy = SettlementPolicy(),
) -> SettlementResult:
    """Balances, payments and raw-debt breakdown for one set of expenses"""
    warnings = validate_expenses(expenses, participants, policy.tolerance)
    for w in warnings:
        logger.warning(w)

    # unknown ids are already reported by validate_expenses
    balances = calculate_balances(expenses, participants, policy, [])
    extra = check_balance_sheet(balances, policy.tolerance)
    transactions = calculate_minimal_transactions(balances, policy, extra)
    for w in extra:
        logger.warning(w)
    warnings += extra

    return SettlementResult(
        balances=balances,
        transactions=transactions,
        raw_debts=get_detailed_raw_debts(expenses, participants, policy),
        warnings=warnings,
    )
