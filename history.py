"""
Settlement sessions: members clear their debts one by one, and the session is
archived into the group's history once everyone has cleared.
"""
from __future__ import annotations
import logging
from dataclasses import replace
from typing import Optional

from computations import settle, total_spent
from models import Group, HistoryRecord, LedgerValidationError
from utils import generate_id, now_iso

logger = logging.getLogger(__name__)

IN_PROGRESS_SUMMARY = "Settlement in progress..."
DONE_SUMMARY = "All members have settled up."


def active_record(group: Group) -> Optional[HistoryRecord]:
    """History record of the running settlement session, if any"""
    if group.active_settlement_id is None:
        return None
    for h in group.history:
        if h.id == group.active_settlement_id:
            return h
    return None


def record_clearance(group: Group, member_id: str, now: Optional[str] = None) -> Group:
    """
    Mark `member_id` as settled and return the updated group.

    The member's payments from the current settlement are appended to the
    active history record (created on first clearance). When the last member
    clears, the record is finalised and takes over the group's expenses.
    The input group is left untouched.
    """
    if member_id not in group.member_names():
        raise LedgerValidationError(f"{member_id!r} is not a member of group {group.id!r}")
    if member_id in group.cleared_member_ids:
        raise LedgerValidationError(f"{member_id!r} has already cleared")

    now = now or now_iso()
    result = settle(group.expenses, group.members, group.policy)
    mine = result.transactions_for(member_id)

    history = list(group.history)
    record = active_record(group)
    if record is None:
        record = HistoryRecord(
            id=group.active_settlement_id or generate_id(),
            start_date=now,
            end_date=now,
            summary=IN_PROGRESS_SUMMARY,
        )
        history.insert(0, record)
    idx = history.index(record)

    # payments between two cleared members were already recorded by the first
    plan = list(record.settlement_plan)
    plan += [t for t in mine if t not in plan]
    cleared = list(group.cleared_member_ids) + [member_id]
    everyone = all(m.id in cleared for m in group.members)

    if everyone:
        history[idx] = replace(
            record,
            end_date=now,
            summary=DONE_SUMMARY,
            expenses=list(group.expenses),
            settlement_plan=plan,
            total_spent=total_spent(group.expenses),
            is_partial=False,
        )
        logger.info("settlement %s finished for group %s", record.id, group.id)
        return replace(
            group,
            expenses=[],
            history=history,
            cleared_member_ids=[],
            active_settlement_id=None,
        )

    history[idx] = replace(record, end_date=now, settlement_plan=plan)
    logger.info("%s cleared in settlement %s (%d/%d)", member_id, record.id, len(cleared), len(group.members))
    return replace(
        group,
        history=history,
        cleared_member_ids=cleared,
        active_settlement_id=record.id,
    )
