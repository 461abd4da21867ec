import sys
import pathlib
import datetime

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent.parent))
from university_inventory_system import (
    AssignmentLimitExceededError,
    InventoryItem,
    ItemKind,
    ItemUnavailableError,
    StaffMember,
    MAX_ASSIGNED_ITEMS,
)


def make_item(item_id, kind=ItemKind.EQUIPMENT, price=100.0, detail="Dell"):
    return InventoryItem(item_id, f"Item {item_id}", kind, detail,
                         datetime.date(2024, 1, 10), price, datetime.date(2026, 1, 10))


def test_assign_marks_item_unavailable():
    s1 = StaffMember("S1", "Ada Mensah")
    item = make_item("I1")
    s1.assign_item(item)
    assert item.is_available() is False
    assert s1.get_assigned_items() == [item]
    assert s1.assigned_count == 1


def test_sixth_assignment_fails_and_leaves_set_unchanged():
    staff = StaffMember("S1", "Ada Mensah")
    items = [make_item(f"I{n}") for n in range(MAX_ASSIGNED_ITEMS + 1)]
    for it in items[:MAX_ASSIGNED_ITEMS]:
        staff.assign_item(it)
    before = staff.get_assigned_items()

    with pytest.raises(AssignmentLimitExceededError):
        staff.assign_item(items[-1])

    assert staff.get_assigned_items() == before
    assert staff.assigned_count == 5
    assert items[-1].is_available() is True


def test_limit_checked_before_availability():
    staff = StaffMember("S1", "Ada Mensah", max_items=1)
    staff.assign_item(make_item("I1"))
    taken = make_item("I2")
    taken.set_available(False)
    with pytest.raises(AssignmentLimitExceededError):
        staff.assign_item(taken)


def test_unavailable_item_is_rejected_without_mutation():
    staff = StaffMember("S2", "Kofi Boateng")
    item = make_item("I1")
    item.set_available(False)
    with pytest.raises(ItemUnavailableError):
        staff.assign_item(item)
    assert staff.get_assigned_items() == []
    assert item.is_available() is False


def test_assign_then_return_restores_availability():
    staff = StaffMember("S1", "Ada Mensah")
    item = make_item("I1")
    staff.assign_item(item)
    assert staff.return_item(item) is True
    assert item.is_available() is True
    assert item not in staff.get_assigned_items()


def test_return_keeps_order_of_remaining_items():
    staff = StaffMember("S1", "Ada Mensah")
    a, b, c = make_item("A"), make_item("B"), make_item("C")
    for it in (a, b, c):
        staff.assign_item(it)
    staff.return_item(b)
    assert [it.item_id for it in staff.get_assigned_items()] == ["A", "C"]


def test_return_of_unheld_item_is_a_no_op():
    s1 = StaffMember("S1", "Ada Mensah")
    s2 = StaffMember("S2", "Kofi Boateng")
    item = make_item("I1")
    s1.assign_item(item)

    assert s2.return_item(item) is False
    assert item.is_available() is False
    assert s1.get_assigned_items() == [item]


def test_return_matches_identifier_case_insensitively():
    staff = StaffMember("S1", "Ada Mensah")
    item = make_item("EQ1")
    staff.assign_item(item)
    assert staff.has_item("eq1")
    assert staff.return_item(item) is True
    assert not staff.has_item("EQ1")


def test_assigned_items_is_a_snapshot_of_shared_references():
    staff = StaffMember("S1", "Ada Mensah")
    item = make_item("I1")
    staff.assign_item(item)
    snapshot = staff.get_assigned_items()
    snapshot.clear()
    assert staff.assigned_count == 1
    assert staff.get_assigned_items()[0] is item


def test_item_released_by_one_member_can_go_to_another():
    s1 = StaffMember("S1", "Ada Mensah")
    s2 = StaffMember("S2", "Kofi Boateng")
    i1 = make_item("I1", price=100.0)

    s1.assign_item(i1)
    assert i1.is_available() is False
    with pytest.raises(ItemUnavailableError):
        s2.assign_item(i1)

    s1.return_item(i1)
    assert i1.is_available() is True
    s2.assign_item(i1)
    assert s2.get_assigned_items() == [i1]
    assert s1.get_assigned_items() == []
