"""
Data models for SplitSettle
"""
from __future__ import annotations
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional


DEFAULT_TOLERANCE = 0.01

UNKNOWN_IGNORE = "ignore"
UNKNOWN_WARN = "warn"
UNKNOWN_RAISE = "raise"
UNKNOWN_PARTICIPANT_POLICIES = (UNKNOWN_IGNORE, UNKNOWN_WARN, UNKNOWN_RAISE)

REMAINDER_DROP = "drop"
REMAINDER_WARN = "warn"
SUBUNIT_REMAINDER_POLICIES = (REMAINDER_DROP, REMAINDER_WARN)


class LedgerValidationError(ValueError):
    """Raised when input violates a ledger invariant under a strict policy"""


@dataclass(frozen=True)
class Participant:
    """Group member"""
    id: str
    name: str


@dataclass(frozen=True)
class SplitShare:
    """One participant's part of an expense (paid or owed)"""
    member_id: str
    amount: float


@dataclass
class ExpenseRecord:
    """Single shared expense"""
    id: str
    title: str
    date: str  # YYYY-MM-DD or ISO timestamp
    total_amount: float
    paid_by: List[SplitShare]
    split_among: List[SplitShare]
    notes: str = ""


@dataclass(frozen=True)
class Transaction:
    """One settlement payment: from_id pays to_id"""
    from_id: str
    to_id: str
    amount: int


@dataclass(frozen=True)
class SettlementPolicy:
    """
    Behaviour switches for settlement computations.

    unknown_participants: what to do with shares of ids absent from the member list
    subunit_remainders: "drop" silently discards transfers that round to zero,
        "warn" discards them too but reports the drift
    debt_template: format of raw-debt lines, fields debtor, creditor, amount
    """
    unknown_participants: str = UNKNOWN_IGNORE
    subunit_remainders: str = REMAINDER_DROP
    debt_template: str = "{debtor} owes {creditor} {amount}"
    tolerance: float = DEFAULT_TOLERANCE

    def __post_init__(self):
        if self.unknown_participants not in UNKNOWN_PARTICIPANT_POLICIES:
            raise ValueError(f"unknown_participants must be one of {UNKNOWN_PARTICIPANT_POLICIES}")
        if self.subunit_remainders not in SUBUNIT_REMAINDER_POLICIES:
            raise ValueError(f"subunit_remainders must be one of {SUBUNIT_REMAINDER_POLICIES}")
        if (isinstance(self.tolerance, bool) or not isinstance(self.tolerance, (int, float))
                or not math.isfinite(self.tolerance) or self.tolerance <= 0):
            raise ValueError(f"tolerance must be a positive number, got {self.tolerance!r}")
        if not isinstance(self.debt_template, str):
            raise ValueError("debt_template must be a string")


class BalanceSheet(Mapping):
    """
    Net amount per participant, keyed by member id in member order.
    Positive -> is owed money; negative -> owes money.

    The key set is fixed at construction; amounts for other ids are rejected
    with KeyError so callers decide how to treat them.
    """

    def __init__(self, member_ids: Iterable[str], amounts: Optional[Dict[str, float]] = None):
        self._amounts: Dict[str, float] = {m: 0.0 for m in member_ids}
        for m, v in (amounts or {}).items():
            self.add(m, v)

    @classmethod
    def for_participants(cls, participants: Iterable[Participant]) -> "BalanceSheet":
        return cls(p.id for p in participants)

    def add(self, member_id: str, amount: float) -> None:
        if member_id not in self._amounts:
            raise KeyError(member_id)
        self._amounts[member_id] += amount

    def total(self) -> float:
        return sum(self._amounts.values())

    def copy(self) -> "BalanceSheet":
        return BalanceSheet(self._amounts.keys(), dict(self._amounts))

    def __getitem__(self, member_id: str) -> float:
        return self._amounts[member_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._amounts)

    def __len__(self) -> int:
        return len(self._amounts)

    def __repr__(self) -> str:
        return f"BalanceSheet({self._amounts!r})"


@dataclass
class SettlementResult:
    """Everything one settlement computation produces"""
    balances: BalanceSheet
    transactions: List[Transaction]
    raw_debts: List[str]
    warnings: List[str] = field(default_factory=list)

    def transactions_for(self, member_id: str) -> List[Transaction]:
        """Payments a member makes or receives"""
        return [t for t in self.transactions if member_id in (t.from_id, t.to_id)]


@dataclass
class HistoryRecord:
    """Archived (or in-progress) settlement session"""
    id: str
    start_date: str
    end_date: str
    summary: str
    expenses: List[ExpenseRecord] = field(default_factory=list)
    settlement_plan: List[Transaction] = field(default_factory=list)
    total_spent: float = 0.0
    is_partial: bool = True


@dataclass
class Group:
    """Complete ledger for one group"""
    id: str
    name: str
    members: List[Participant]
    expenses: List[ExpenseRecord]
    history: List[HistoryRecord] = field(default_factory=list)
    cleared_member_ids: List[str] = field(default_factory=list)
    active_settlement_id: Optional[str] = None
    policy: SettlementPolicy = field(default_factory=SettlementPolicy)
    version: int = 1

    def member_names(self) -> Dict[str, str]:
        return {m.id: m.name for m in self.members}
