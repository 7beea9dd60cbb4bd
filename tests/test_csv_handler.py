import pytest

from config import LedgerFormatError
from conftest import expense
from csv_handler import export_expenses_to_csv, import_expenses_from_csv, merge_expenses, parse_shares
from models import SplitShare


def test_csv_export_import(tmp_path, group):
    group.expenses[0].notes = "with, comma"
    path = tmp_path / "expenses.csv"
    export_expenses_to_csv(group.expenses, str(path))
    assert import_expenses_from_csv(str(path)) == group.expenses


def test_parse_shares():
    assert parse_shares("a:30; b:15.5;") == [SplitShare("a", 30.0), SplitShare("b", 15.5)]
    assert parse_shares("") == []
    with pytest.raises(LedgerFormatError):
        parse_shares("a=30")
    with pytest.raises(LedgerFormatError):
        parse_shares("a:thirty")


def test_import_requires_columns(tmp_path):
    path = tmp_path / "expenses.csv"
    path.write_text("id,date\n1,2024-01-01\n", encoding="utf-8")
    with pytest.raises(LedgerFormatError):
        import_expenses_from_csv(str(path))


def test_import_rejects_bad_total(tmp_path):
    path = tmp_path / "expenses.csv"
    path.write_text(
        "id,date,title,total_amount,paid_by,split_among,notes\n"
        "1,2024-01-01,Tea,abc,a:3,b:3,\n",
        encoding="utf-8",
    )
    with pytest.raises(LedgerFormatError, match=":2:"):
        import_expenses_from_csv(str(path))


def test_merge_expenses_replaces_by_id(group):
    e1, e2 = group.expenses
    changed = expense("e1", {"a": 60}, {"b": 60}, title="Dinner (fixed)")
    new = expense("e9", {"c": 5}, {"a": 5})

    merged = merge_expenses(group.expenses, [changed, new])

    assert [e.id for e in merged] == ["e1", "e2", "e9"]
    assert merged[0] is changed
    assert merged[1] is e2
    assert group.expenses == [e1, e2]
    assert merge_expenses(merged, merged) == merged
