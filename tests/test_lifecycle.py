from datetime import date
from decimal import Decimal

import pytest

from rentflow.core.errors import DuplicateRecordError, RecordNotFoundError, RecordValidationError
from rentflow.core.lifecycle import (
    changed_fields,
    create_record,
    get_record,
    list_records,
    soft_delete,
    undo_delete,
    update_record,
)
from rentflow.models.expense import Expense
from rentflow.models.rent_entry import RentEntry


def _expense(db, category="Utilities", amount="10"):
    return create_record(db, Expense, {"date": date(2024, 3, 1), "category": category, "amount": Decimal(amount)})


def test_soft_delete_batch_and_undo(db):
    a, b, c = _expense(db, "A"), _expense(db, "B"), _expense(db, "C")

    assert soft_delete(db, Expense, [a.id, b.id]) == 2
    assert [e.id for e in list_records(db, Expense)] == [c.id]
    with pytest.raises(RecordNotFoundError):
        get_record(db, Expense, a.id)
    assert get_record(db, Expense, a.id, include_deleted=True).deleted_at is not None

    assert undo_delete(db, Expense, [a.id, b.id]) == 2
    assert {e.id for e in list_records(db, Expense)} == {a.id, b.id, c.id}
    db.refresh(a)
    assert a.deleted_at is None


def test_soft_delete_empty_list_is_noop(db):
    _expense(db)
    assert soft_delete(db, Expense, []) == 0
    assert undo_delete(db, Expense, []) == 0
    assert len(list_records(db, Expense)) == 1


def test_soft_delete_already_deleted_is_not_counted_twice(db):
    a = _expense(db)
    soft_delete(db, Expense, [a.id])
    assert soft_delete(db, Expense, [a.id]) == 0


def test_get_record_requires_id(db):
    with pytest.raises(RecordValidationError):
        get_record(db, Expense, "")


def test_update_record_and_changed_fields(db):
    a = _expense(db, amount="10")
    data = {"category": "Utilities", "amount": Decimal("12"), "status": "Paid"}

    assert sorted(changed_fields(a, data)) == ["amount", "status"]
    assert changed_fields(a, data, fields=["category"]) == []

    a = update_record(db, a, data)
    assert a.amount == Decimal("12")
    assert a.status == "Paid"


def test_partial_unique_index_allows_reuse_after_soft_delete(db):
    row = {
        "tenant_id": "t-1", "year": 2024, "month": 3, "due_date": date(2024, 3, 1),
        "rent": Decimal("100"), "name": "Alice", "property": "Flat 1A",
    }
    first = create_record(db, RentEntry, dict(row))
    with pytest.raises(DuplicateRecordError):
        create_record(db, RentEntry, dict(row))

    soft_delete(db, RentEntry, [first.id])
    assert create_record(db, RentEntry, dict(row)).id != first.id
