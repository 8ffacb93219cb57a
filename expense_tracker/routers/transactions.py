from fastapi import APIRouter, HTTPException, Query, status
from typing import List
from uuid import UUID
from fastapi.params import Depends
from sqlalchemy.orm import Session

from expense_tracker.db.core import NotFoundError, UserDB, get_db
from expense_tracker.models.transaction import (
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    GroupStat,
    MonthlyStat,
)
from expense_tracker.crud.crud_transaction import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_PAGING_VALUE,
    create_db_transaction,
    read_db_transaction,
    read_db_transactions,
    update_db_transaction,
    delete_db_transaction,
    get_stats_by_category,
    get_stats_by_payment_type,
    get_monthly_stats,
)
from expense_tracker.routers.deps import get_current_user

router = APIRouter(
    prefix="/transaction",
    tags=["transaction"],
)

TRANSACTION_NOT_FOUND = "Transaction not found"


@router.post("/add", status_code=status.HTTP_201_CREATED)
def add_transaction(transaction: TransactionCreate, current_user: UserDB = Depends(get_current_user),
                    db: Session = Depends(get_db)) -> TransactionResponse:
    try:
        db_transaction = create_db_transaction(db, current_user.db_id, transaction)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return TransactionResponse.model_validate(db_transaction)


@router.get("")
def list_transactions(page: int = Query(DEFAULT_PAGE, ge=1, le=MAX_PAGING_VALUE),
                      limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_PAGING_VALUE),
                      current_user: UserDB = Depends(get_current_user),
                      db: Session = Depends(get_db)) -> List[TransactionResponse]:
    """
    List the caller's transactions, newest first.
    """
    db_transactions = read_db_transactions(db, current_user.db_id, page=page, limit=limit)
    return [TransactionResponse.model_validate(t) for t in db_transactions]


@router.get("/stats/category")
def category_statistics(current_user: UserDB = Depends(get_current_user),
                        db: Session = Depends(get_db)) -> List[GroupStat]:
    return get_stats_by_category(db, current_user.db_id)


@router.get("/stats/payment-type")
def payment_type_statistics(current_user: UserDB = Depends(get_current_user),
                            db: Session = Depends(get_db)) -> List[GroupStat]:
    return get_stats_by_payment_type(db, current_user.db_id)


@router.get("/stats/monthly")
def monthly_statistics(current_user: UserDB = Depends(get_current_user),
                       db: Session = Depends(get_db)) -> List[MonthlyStat]:
    """
    Totals per (year, month), latest month first.
    """
    return get_monthly_stats(db, current_user.db_id)


@router.get("/{transaction_id}")
def read_transaction(transaction_id: UUID, current_user: UserDB = Depends(get_current_user),
                     db: Session = Depends(get_db)) -> TransactionResponse:
    db_transaction = read_db_transaction(db, transaction_id=transaction_id, user_id=current_user.db_id)
    if not db_transaction:
        raise HTTPException(status_code=404, detail=TRANSACTION_NOT_FOUND)
    return TransactionResponse.model_validate(db_transaction)


@router.put("/{transaction_id}")
def update_transaction(transaction_id: UUID, transaction: TransactionUpdate,
                       current_user: UserDB = Depends(get_current_user),
                       db: Session = Depends(get_db)) -> TransactionResponse:
    try:
        db_transaction = update_db_transaction(db, transaction_id=transaction_id, user_id=current_user.db_id,
                                               transaction_updates=transaction)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=TRANSACTION_NOT_FOUND) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return TransactionResponse.model_validate(db_transaction)


@router.delete("/{transaction_id}")
def delete_transaction(transaction_id: UUID, current_user: UserDB = Depends(get_current_user),
                       db: Session = Depends(get_db)) -> TransactionResponse:
    try:
        db_transaction = delete_db_transaction(db, transaction_id=transaction_id, user_id=current_user.db_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=TRANSACTION_NOT_FOUND) from e
    return TransactionResponse.model_validate(db_transaction)
