import json

from config import load_group, save_group
from conftest import expense
from csv_handler import export_expenses_to_csv
from split_settle_cli import main


def test_prints_settlement(tmp_path, capsys, group):
    path = tmp_path / "ledger.json"
    save_group(group, str(path))

    assert main([str(path)]) == 0
    out = capsys.readouterr().out
    assert "A: +50.00" in out
    assert "C -> A: 40" in out
    assert "B -> A: 10" in out
    assert "C owes B 10" in out


def test_all_settled(tmp_path, capsys, group):
    group.expenses = []
    path = tmp_path / "ledger.json"
    save_group(group, str(path))
    assert main([str(path)]) == 0
    assert "(all settled)" in capsys.readouterr().out


def test_missing_ledger_fails(tmp_path):
    assert main([str(tmp_path / "nope.json")]) == 1


def test_strict_rejects_unknown_member(tmp_path, group):
    group.expenses.append(expense("e3", {"zed": 10}, {"a": 10}))
    path = tmp_path / "ledger.json"
    save_group(group, str(path))
    assert main([str(path)]) == 0
    assert main([str(path), "--strict"]) == 1


def test_csv_and_excel_options(tmp_path, group):
    path = tmp_path / "ledger.json"
    save_group(group, str(path))
    csv_path = tmp_path / "out.csv"
    xlsx_path = tmp_path / "out.xlsx"

    assert main([str(path), "--export-csv", str(csv_path), "--excel", str(xlsx_path)]) == 0
    assert csv_path.exists()
    assert xlsx_path.exists()

    assert main([str(path), "--import-csv", str(csv_path)]) == 0
    assert load_group(str(path)).expenses == group.expenses


def test_date_range(tmp_path, capsys, group):
    path = tmp_path / "ledger.json"
    save_group(group, str(path))
    assert main([str(path), "--start", "2024-05-02"]) == 0
    assert "A -> B: 10" in capsys.readouterr().out


def test_reimport_keeps_balances(tmp_path, capsys, group):
    path = tmp_path / "ledger.json"
    save_group(group, str(path))
    csv_path = tmp_path / "expenses.csv"
    export_expenses_to_csv(group.expenses, str(csv_path))

    assert main([str(path), "--import-csv", str(csv_path)]) == 0
    out = capsys.readouterr().out
    assert "C -> A: 40" in out
    assert len(load_group(str(path)).expenses) == 2


def test_strict_is_not_saved_into_ledger(tmp_path, group):
    path = tmp_path / "ledger.json"
    save_group(group, str(path))
    csv_path = tmp_path / "extra.csv"
    export_expenses_to_csv([expense("e3", {"a": 6}, {"b": 3, "c": 3})], str(csv_path))

    assert main([str(path), "--strict", "--import-csv", str(csv_path)]) == 0
    saved = load_group(str(path))
    assert saved.policy == group.policy
    assert [e.id for e in saved.expenses] == ["e1", "e2", "e3"]


def test_malformed_policy_fails_cleanly(tmp_path, group):
    path = tmp_path / "ledger.json"
    save_group(group, str(path))
    data = json.loads(path.read_text(encoding="utf-8"))
    data["policy"]["tolerance"] = "0.01"
    path.write_text(json.dumps(data), encoding="utf-8")
    assert main([str(path)]) == 1


def test_zero_tolerance_ledger_fails_cleanly(tmp_path, group):
    path = tmp_path / "ledger.json"
    save_group(group, str(path))
    data = json.loads(path.read_text(encoding="utf-8"))
    data["policy"]["tolerance"] = 0
    path.write_text(json.dumps(data), encoding="utf-8")
    assert main([str(path)]) == 1
