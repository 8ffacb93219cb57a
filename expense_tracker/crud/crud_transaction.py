from sqlalchemy.orm import Session, joinedload
from sqlalchemy import desc, extract, func
from typing import Optional, List
from datetime import datetime
from uuid import uuid4, UUID

from expense_tracker.db.core import TransactionDB, UserDB, NotFoundError
from expense_tracker.models.transaction import TransactionCreate, TransactionUpdate, GroupStat, MonthlyStat
from expense_tracker.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
# No hard cap on page size; large pages are only logged
LARGE_LIMIT_WARNING = 100
# page and limit stay below this so the OFFSET fits a 64-bit integer
MAX_PAGING_VALUE = 2**31 - 1


# ===== DATABASE OPERATIONS =====

def create_db_transaction(db: Session, user_id: int, transaction_data: TransactionCreate) -> TransactionDB:
    """Create a new transaction owned by user_id"""

    user = db.query(UserDB).filter(UserDB.db_id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")

    now = datetime.utcnow()
    db_transaction = TransactionDB(
        id=uuid4(),
        user_id=user.db_id,
        description=transaction_data.description,
        payment_type=transaction_data.payment_type,
        category=transaction_data.category,
        amount=transaction_data.amount,
        date=transaction_data.date,
        location=transaction_data.location,
        created_at=now,
        updated_at=now
    )

    db.add(db_transaction)
    db.commit()
    db.refresh(db_transaction)
    return db_transaction


def read_db_transaction(db: Session, transaction_id: UUID, user_id: int) -> Optional[TransactionDB]:
    """Read a transaction by its public id, only if user_id owns it"""

    return db.query(TransactionDB).filter(
        TransactionDB.id == transaction_id,
        TransactionDB.user_id == user_id
    ).options(joinedload(TransactionDB.user)).first()


def read_db_transactions(db: Session, user_id: int, page: int = DEFAULT_PAGE,
                         limit: int = DEFAULT_LIMIT) -> List[TransactionDB]:
    """Read a page of the user's transactions, newest-created first"""

    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive integers")
    if page > MAX_PAGING_VALUE or limit > MAX_PAGING_VALUE:
        raise ValueError(f"page and limit must not exceed {MAX_PAGING_VALUE}")
    if limit > LARGE_LIMIT_WARNING:
        logger.warning(f"User {user_id} requested a large page of transactions (limit={limit})")

    skip = (page - 1) * limit
    query = db.query(TransactionDB).filter(TransactionDB.user_id == user_id)
    query = query.order_by(desc(TransactionDB.created_at), desc(TransactionDB.db_id))

    return query.options(joinedload(TransactionDB.user)).offset(skip).limit(limit).all()


def update_db_transaction(db: Session, transaction_id: UUID, user_id: int,
                          transaction_updates: TransactionUpdate) -> TransactionDB:
    """Update only the supplied fields of an owned transaction"""

    db_transaction = read_db_transaction(db, transaction_id, user_id)
    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    update_data = transaction_updates.model_dump(exclude_unset=True)
    if not update_data:
        raise ValueError("No update fields provided")

    for field, value in update_data.items():
        setattr(db_transaction, field, value)

    db_transaction.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(db_transaction)
    return db_transaction


def delete_db_transaction(db: Session, transaction_id: UUID, user_id: int) -> TransactionDB:
    """Delete an owned transaction and return it.

    The returned object is detached but keeps its loaded column values.
    """

    db_transaction = read_db_transaction(db, transaction_id, user_id)

    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    db.delete(db_transaction)
    db.commit()
    return db_transaction


# ===== STATISTICS =====

def _group_totals(db: Session, user_id: int, column) -> List[GroupStat]:
    rows = db.query(
        column,
        func.sum(TransactionDB.amount),
        func.count(TransactionDB.db_id)
    ).filter(TransactionDB.user_id == user_id).group_by(column).all()

    return [
        GroupStat(key=key.value, total_amount=float(total or 0.0), count=count)
        for key, total, count in rows
    ]


def get_stats_by_category(db: Session, user_id: int) -> List[GroupStat]:
    """Total amount and count per category"""
    return _group_totals(db, user_id, TransactionDB.category)


def get_stats_by_payment_type(db: Session, user_id: int) -> List[GroupStat]:
    """Total amount and count per payment type"""
    return _group_totals(db, user_id, TransactionDB.payment_type)


def get_monthly_stats(db: Session, user_id: int) -> List[MonthlyStat]:
    """Total amount and count per calendar month, latest month first"""

    year = extract('year', TransactionDB.date)
    month = extract('month', TransactionDB.date)

    rows = db.query(
        year,
        month,
        func.sum(TransactionDB.amount),
        func.count(TransactionDB.db_id)
    ).filter(
        TransactionDB.user_id == user_id
    ).group_by(year, month).order_by(desc(year), desc(month)).all()

    return [
        MonthlyStat(year=int(y), month=int(m), total_amount=float(total or 0.0), count=count)
        for y, m, total, count in rows
    ]
