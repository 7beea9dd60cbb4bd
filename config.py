"""
Configuration and data loading/saving for SplitSettle
"""
from __future__ import annotations
import json
from dataclasses import asdict
from typing import List

from models import (
    ExpenseRecord,
    Group,
    HistoryRecord,
    Participant,
    SettlementPolicy,
    SplitShare,
    Transaction,
)
from utils import generate_id


class LedgerFormatError(ValueError):
    """Ledger file content cannot be turned into model objects"""


def load_participants(path: str) -> List[Participant]:
    """Load member list from JSON file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return []
    return [participant_from_dict(m) for m in data.get("members", [])]


def participant_from_dict(d: dict) -> Participant:
    try:
        return Participant(id=str(d["id"]), name=str(d.get("name", d["id"])))
    except (KeyError, TypeError) as exc:
        raise LedgerFormatError(f"invalid member entry: {d!r}") from exc


def shares_from_list(items: list) -> List[SplitShare]:
    try:
        return [SplitShare(member_id=str(s["member_id"]), amount=float(s["amount"])) for s in items]
    except (KeyError, TypeError, ValueError) as exc:
        raise LedgerFormatError(f"invalid split share list: {items!r}") from exc


def expense_from_dict(d: dict) -> ExpenseRecord:
    try:
        return ExpenseRecord(
            id=str(d["id"]),
            title=str(d.get("title", "")),
            date=str(d["date"]),
            total_amount=float(d["total_amount"]),
            paid_by=shares_from_list(d.get("paid_by", [])),
            split_among=shares_from_list(d.get("split_among", [])),
            notes=str(d.get("notes", "")),
        )
    except (KeyError, TypeError, ValueError) as exc:
        if isinstance(exc, LedgerFormatError):
            raise
        raise LedgerFormatError(f"invalid expense entry: {d!r}") from exc


def transaction_from_dict(d: dict) -> Transaction:
    try:
        return Transaction(from_id=str(d["from_id"]), to_id=str(d["to_id"]), amount=int(d["amount"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise LedgerFormatError(f"invalid transaction entry: {d!r}") from exc


def history_from_dict(d: dict) -> HistoryRecord:
    try:
        return HistoryRecord(
            id=str(d["id"]),
            start_date=str(d["start_date"]),
            end_date=str(d.get("end_date", d["start_date"])),
            summary=str(d.get("summary", "")),
            expenses=[expense_from_dict(e) for e in d.get("expenses", [])],
            settlement_plan=[transaction_from_dict(t) for t in d.get("settlement_plan", [])],
            total_spent=float(d.get("total_spent", 0.0)),
            is_partial=bool(d.get("is_partial", True)),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise LedgerFormatError(f"invalid history entry: {d!r}") from exc


def policy_from_dict(d: dict) -> SettlementPolicy:
    """Build a SettlementPolicy, falling back to defaults for missing keys"""
    fields = ("unknown_participants", "subunit_remainders", "debt_template", "tolerance")
    unknown = set(d) - set(fields)
    if unknown:
        raise LedgerFormatError(f"unknown policy settings: {sorted(unknown)}")
    try:
        return SettlementPolicy(**d)
    except (TypeError, ValueError) as exc:
        raise LedgerFormatError(str(exc)) from exc


def get_default_group(name: str = "My Group") -> Group:
    """Empty group with no members"""
    return Group(id=generate_id(), name=name, members=[], expenses=[])


def group_to_dict(group: Group) -> dict:
    """Convert Group object to dictionary for JSON serialization"""
    return {
        "version": group.version,
        "id": group.id,
        "name": group.name,
        "members": [asdict(m) for m in group.members],
        "expenses": [asdict(e) for e in group.expenses],
        "history": [asdict(h) for h in group.history],
        "cleared_member_ids": list(group.cleared_member_ids),
        "active_settlement_id": group.active_settlement_id,
        "policy": asdict(group.policy),
    }


def dict_to_group(d: dict) -> Group:
    """Convert dictionary from JSON to Group object"""
    if not isinstance(d, dict):
        raise LedgerFormatError("ledger document must be a JSON object")
    try:
        version = int(d.get("version", 1))
    except (TypeError, ValueError) as exc:
        raise LedgerFormatError(f"invalid ledger version: {d.get('version')!r}") from exc
    return Group(
        version=version,
        id=str(d.get("id") or generate_id()),
        name=str(d.get("name", "")),
        members=[participant_from_dict(m) for m in d.get("members", [])],
        expenses=[expense_from_dict(e) for e in d.get("expenses", [])],
        history=[history_from_dict(h) for h in d.get("history", [])],
        cleared_member_ids=[str(m) for m in d.get("cleared_member_ids", [])],
        active_settlement_id=d.get("active_settlement_id"),
        policy=policy_from_dict(d.get("policy", {})),
    )


def load_group(path: str) -> Group:
    """Read a ledger JSON file"""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise LedgerFormatError(f"{path}: {exc}") from exc
    return dict_to_group(data)


def save_group(group: Group, path: str) -> None:
    """Write a ledger JSON file"""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(group_to_dict(group), f, ensure_ascii=False, indent=2)
