import pytest

from models import ExpenseRecord, Group, Participant, SplitShare


def expense(eid, paid_by, split_among, title="", date="2024-05-01", total=None):
    """Build an ExpenseRecord from {member: amount} dicts"""
    paid = [SplitShare(m, float(a)) for m, a in paid_by.items()]
    split = [SplitShare(m, float(a)) for m, a in split_among.items()]
    return ExpenseRecord(
        id=eid,
        title=title or eid,
        date=date,
        total_amount=float(total if total is not None else sum(paid_by.values())),
        paid_by=paid,
        split_among=split,
    )


@pytest.fixture
def people():
    return [Participant("a", "A"), Participant("b", "B"), Participant("c", "C")]


@pytest.fixture
def dinner():
    """A pays 90 split equally among A, B, C"""
    return expense("e1", {"a": 90}, {"a": 30, "b": 30, "c": 30}, title="Dinner")


@pytest.fixture
def group(people, dinner):
    return Group(
        id="g1",
        name="Trip",
        members=people,
        expenses=[dinner, expense("e2", {"b": 20}, {"a": 10, "c": 10}, title="Taxi", date="2024-05-03")],
    )
