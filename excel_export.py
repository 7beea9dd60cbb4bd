"""
Excel export functionality for SplitSettle
"""
from __future__ import annotations
from datetime import date
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import Group, SettlementPolicy
from computations import filter_expenses_by_date, settle


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            v = cell.value
            if v is None:
                continue
            max_len = max(max_len, len(str(v)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _new_sheet(wb, title, headers):
    ws = wb.create_sheet(title)
    ws.append(headers)
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    return ws


def export_settlement_excel(
    group: Group,
    filepath: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    policy: Optional[SettlementPolicy] = None,
) -> None:
    """
    Export a settlement report with sheets:
    - Expenses: one row per expense, one paid/owed column pair per member
    - Balances: net per member
    - Transfers: payments that settle the balances
    - Raw Debts: pairwise debts before simplification
    - Warnings: only when the ledger is inconsistent
    """
    policy = policy or group.policy
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    members = group.members
    names = group.member_names()
    exps = filter_expenses_by_date(group.expenses, start, end)
    exps.sort(key=lambda e: (e.date, e.title))
    result = settle(exps, members, policy)

    # Expenses sheet
    headers = ["Date", "Title", "Total"]
    headers += [f"{m.name} paid" for m in members] + [f"{m.name} owes" for m in members]
    ws = _new_sheet(wb, "Expenses", headers)
    for e in exps:
        paid = {m.id: 0.0 for m in members}
        owed = {m.id: 0.0 for m in members}
        for s in e.paid_by:
            if s.member_id in paid:
                paid[s.member_id] += s.amount
        for s in e.split_among:
            if s.member_id in owed:
                owed[s.member_id] += s.amount
        ws.append([e.date[:10], e.title, e.total_amount]
                  + [paid[m.id] for m in members] + [owed[m.id] for m in members])

    if exps:
        ws.append(["TOTALS"] + [""] * (len(headers) - 1))
        trow = ws.max_row
        ws.cell(trow, 1).font = Font(bold=True)
        # Using Excel formulas for better transparency
        for col in range(3, len(headers) + 1):
            letter = get_column_letter(col)
            ws.cell(trow, col).value = f"=SUM({letter}2:{letter}{trow - 1})"

    for r in range(2, ws.max_row + 1):
        for c in range(3, len(headers) + 1):
            ws.cell(r, c).number_format = "0.00"
    _autosize_columns(ws)

    # Balances sheet
    ws = _new_sheet(wb, "Balances", ["Member", "Net"])
    for m in members:
        ws.append([m.name, result.balances[m.id]])
    for r in range(2, ws.max_row + 1):
        ws.cell(r, 2).number_format = "0.00"
    _autosize_columns(ws)

    # Transfers sheet
    ws = _new_sheet(wb, "Transfers", ["From (Debtor)", "To (Creditor)", "Amount"])
    for t in result.transactions:
        ws.append([names.get(t.from_id, t.from_id), names.get(t.to_id, t.to_id), t.amount])
    _autosize_columns(ws)

    # Raw debts sheet
    ws = _new_sheet(wb, "Raw Debts", ["Debt"])
    for line in result.raw_debts:
        ws.append([line])
    _autosize_columns(ws, max_width=80)

    if result.warnings:
        ws = _new_sheet(wb, "Warnings", ["Warning"])
        for w in result.warnings:
            ws.append([w])
        _autosize_columns(ws, max_width=100)

    wb.save(filepath)
