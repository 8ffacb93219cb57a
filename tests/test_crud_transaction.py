from datetime import date
from uuid import uuid4

import pytest

from expense_tracker.crud import crud_transaction
from expense_tracker.db.core import NotFoundError, PaymentType, TransactionCategory
from expense_tracker.models.transaction import TransactionCreate, TransactionUpdate


def _create(db_session, user, amount, category=TransactionCategory.EXPENSE,
            payment_type=PaymentType.CASH, when=date(2024, 1, 5), description="Coffee"):
    return crud_transaction.create_db_transaction(db_session, user.db_id, TransactionCreate(
        description=description,
        payment_type=payment_type,
        category=category,
        amount=amount,
        date=when,
    ))


def test_create_for_missing_user_fails(db_session) -> None:
    with pytest.raises(NotFoundError):
        crud_transaction.create_db_transaction(db_session, 999, TransactionCreate(
            description="Coffee",
            payment_type=PaymentType.CASH,
            category=TransactionCategory.EXPENSE,
            amount=4.5,
            date=date(2024, 1, 5),
        ))


def test_category_totals_add_up_to_all_transactions(db_session, make_user) -> None:
    user = make_user()
    amounts = [
        (12.5, TransactionCategory.EXPENSE),
        (7.25, TransactionCategory.EXPENSE),
        (300.0, TransactionCategory.SAVING),
        (1200.0, TransactionCategory.INVESTMENT),
        (0.99, TransactionCategory.EXPENSE),
    ]
    for amount, category in amounts:
        _create(db_session, user, amount, category=category)

    stats = crud_transaction.get_stats_by_category(db_session, user.db_id)

    assert sum(s.total_amount for s in stats) == pytest.approx(sum(a for a, _ in amounts))
    assert sum(s.count for s in stats) == len(amounts)
    assert {s.key for s in stats} == {"expense", "saving", "investment"}


def test_stats_ignore_other_users(db_session, make_user) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    _create(db_session, alice, 10, payment_type=PaymentType.CARD)
    _create(db_session, bob, 99, payment_type=PaymentType.CARD)

    stats = crud_transaction.get_stats_by_payment_type(db_session, alice.db_id)

    assert [(s.key, s.total_amount, s.count) for s in stats] == [("card", 10.0, 1)]


def test_stats_for_user_without_transactions(db_session, make_user) -> None:
    user = make_user()

    assert crud_transaction.get_stats_by_category(db_session, user.db_id) == []
    assert crud_transaction.get_monthly_stats(db_session, user.db_id) == []


def test_monthly_stats_are_latest_first(db_session, make_user) -> None:
    user = make_user()
    _create(db_session, user, 5, when=date(2023, 12, 31))
    _create(db_session, user, 10, when=date(2024, 3, 1))
    _create(db_session, user, 15, when=date(2024, 3, 28))
    _create(db_session, user, 20, when=date(2024, 11, 2))

    stats = crud_transaction.get_monthly_stats(db_session, user.db_id)

    assert [(s.year, s.month, s.total_amount, s.count) for s in stats] == [
        (2024, 11, 20.0, 1),
        (2024, 3, 25.0, 2),
        (2023, 12, 5.0, 1),
    ]


def test_update_applies_only_supplied_fields(db_session, make_user) -> None:
    user = make_user()
    txn = _create(db_session, user, 4.5)

    updated = crud_transaction.update_db_transaction(
        db_session, txn.id, user.db_id, TransactionUpdate(amount=50)
    )

    assert updated.amount == 50
    assert updated.description == "Coffee"
    assert updated.category == TransactionCategory.EXPENSE
    assert updated.payment_type == PaymentType.CASH
    assert updated.date == date(2024, 1, 5)
    assert updated.location is None


def test_update_with_nothing_to_change(db_session, make_user) -> None:
    user = make_user()
    txn = _create(db_session, user, 4.5)

    with pytest.raises(ValueError):
        crud_transaction.update_db_transaction(db_session, txn.id, user.db_id, TransactionUpdate())


def test_delete_is_owner_scoped(db_session, make_user) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    txn = _create(db_session, alice, 4.5)

    with pytest.raises(NotFoundError):
        crud_transaction.delete_db_transaction(db_session, txn.id, bob.db_id)

    deleted = crud_transaction.delete_db_transaction(db_session, txn.id, alice.db_id)
    assert deleted.id == txn.id
    assert deleted.amount == 4.5
    assert deleted.owner_id == alice.id
    assert crud_transaction.read_db_transaction(db_session, txn.id, alice.db_id) is None
    with pytest.raises(NotFoundError):
        crud_transaction.delete_db_transaction(db_session, uuid4(), alice.db_id)


def test_list_rejects_out_of_range_paging(db_session, make_user) -> None:
    user = make_user()

    with pytest.raises(ValueError):
        crud_transaction.read_db_transactions(db_session, user.db_id, page=0)
    with pytest.raises(ValueError):
        crud_transaction.read_db_transactions(db_session, user.db_id, page=2**40)
    with pytest.raises(ValueError):
        crud_transaction.read_db_transactions(db_session, user.db_id, limit=2**40)
