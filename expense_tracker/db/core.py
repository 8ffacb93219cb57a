from typing import Optional
from sqlalchemy import create_engine, ForeignKey, Index, UniqueConstraint, String, Float, DateTime, Date
from sqlalchemy.types import Enum
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Mapped, relationship, mapped_column
from datetime import datetime, date
from uuid import UUID
import enum

from expense_tracker import config


class NotFoundError(Exception):
    pass


class ConflictError(Exception):
    pass


class Base(DeclarativeBase):
    pass


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class PaymentType(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"


class TransactionCategory(str, enum.Enum):
    EXPENSE = "expense"
    SAVING = "saving"
    INVESTMENT = "investment"


def _enum_values(enum_cls):
    # Persist the lowercase wire values rather than member names
    return [member.value for member in enum_cls]


class UserDB(Base):
    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("email", name="uq_user_email"),
        UniqueConstraint("username", name="uq_user_username"),
        Index("idx_users_email", "email"),
    )

    # Core User Identification
    db_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    id: Mapped[UUID] = mapped_column(unique=True, nullable=False)

    # Authentication
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    refresh_token: Mapped[Optional[str]] = mapped_column(String(1024))

    # Profile
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    gender: Mapped[Gender] = mapped_column(Enum(Gender, values_callable=_enum_values, name="gender"), nullable=False)
    profile_picture: Mapped[str] = mapped_column(String(500), nullable=False)

    # Activity Tracking
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    transactions = relationship("TransactionDB", back_populates="user", cascade="all, delete-orphan")


class TransactionDB(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        Index("idx_transactions_user_created", "user_id", "created_at"),
        Index("idx_transactions_user_date", "user_id", "date"),
    )

    # Core Transaction Identification
    db_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    id: Mapped[UUID] = mapped_column(unique=True, nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)

    # Basic Transaction Data
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    payment_type: Mapped[PaymentType] = mapped_column(
        Enum(PaymentType, values_callable=_enum_values, name="payment_type"), nullable=False
    )
    category: Mapped[TransactionCategory] = mapped_column(
        Enum(TransactionCategory, values_callable=_enum_values, name="transaction_category"), nullable=False
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255))

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("UserDB", back_populates="transactions")

    @property
    def owner_id(self) -> UUID:
        """Public id of the owning user."""
        return self.user.id


engine = create_engine(config.DATABASE_URL, echo=config.SQL_ECHO)
session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency to get the database session
def get_db():
    database = session_local()
    try:
        yield database
    finally:
        database.close()
