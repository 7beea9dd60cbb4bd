"""
CSV export and import functionality for SplitSettle
"""
from __future__ import annotations
import csv
from typing import List

from config import LedgerFormatError
from models import ExpenseRecord, SplitShare

COLUMNS = ['id', 'date', 'title', 'total_amount', 'paid_by', 'split_among', 'notes']


def format_shares(shares: List[SplitShare]) -> str:
    """[SplitShare('a', 30.0)] -> 'a:30.0'"""
    return ';'.join(f"{s.member_id}:{s.amount}" for s in shares)


def parse_shares(text: str) -> List[SplitShare]:
    """'a:30;b:15.5' -> list of SplitShare"""
    shares = []
    for pair in (text or '').split(';'):
        if not pair.strip():
            continue
        if ':' not in pair:
            raise LedgerFormatError(f"invalid share {pair!r}, expected member:amount")
        k, v = pair.rsplit(':', 1)
        try:
            shares.append(SplitShare(member_id=k.strip(), amount=float(v.strip())))
        except ValueError as exc:
            raise LedgerFormatError(f"invalid amount in share {pair!r}") from exc
    return shares


def export_expenses_to_csv(expenses: List[ExpenseRecord], filepath: str) -> None:
    """
    Export expenses list to CSV file
    CSV columns: id, date, title, total_amount, paid_by, split_among, notes
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(COLUMNS)
        for e in expenses:
            writer.writerow([
                e.id,
                e.date,
                e.title,
                e.total_amount,
                format_shares(e.paid_by),
                format_shares(e.split_among),
                e.notes
            ])


def import_expenses_from_csv(filepath: str) -> List[ExpenseRecord]:
    """
    Import expenses list from CSV file
    Returns list of ExpenseRecord objects
    """
    expenses = []

    with open(filepath, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f)
        missing = set(COLUMNS[:-1]) - set(reader.fieldnames or [])
        if missing:
            raise LedgerFormatError(f"{filepath}: missing columns {sorted(missing)}")

        for line_no, row in enumerate(reader, start=2):
            try:
                total = float(row['total_amount'])
            except (TypeError, ValueError) as exc:
                raise LedgerFormatError(f"{filepath}:{line_no}: invalid total_amount") from exc
            expenses.append(ExpenseRecord(
                id=row['id'],
                date=row['date'],
                title=row['title'],
                total_amount=total,
                paid_by=parse_shares(row['paid_by']),
                split_among=parse_shares(row['split_among']),
                notes=row.get('notes') or ''
            ))

    return expenses


def merge_expenses(existing: List[ExpenseRecord], incoming: List[ExpenseRecord]) -> List[ExpenseRecord]:
    """
    Upsert by expense id: an incoming expense replaces the one with the same id
    in place, new ids are appended in incoming order.
    """
    merged = list(existing)
    index = {e.id: i for i, e in enumerate(merged)}
    for e in incoming:
        if e.id in index:
            merged[index[e.id]] = e
        else:
            index[e.id] = len(merged)
            merged.append(e)
    return merged
