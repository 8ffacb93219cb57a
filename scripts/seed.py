import sys
import os
import random
from sqlalchemy.orm import Session
from faker import Faker

# Add the project root to the Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from expense_tracker.db.core import (
    Base,
    engine,
    session_local,
    UserDB,
    Gender,
    PaymentType,
    TransactionCategory,
)
from expense_tracker.crud.crud_user import create_db_user
from expense_tracker.crud.crud_transaction import create_db_transaction
from expense_tracker.models.user import UserCreate
from expense_tracker.models.transaction import TransactionCreate

fake = Faker()

DEMO_PASSWORD = "password123"
USERS_TO_CREATE = 3
TRANSACTIONS_PER_USER = 60

# Rough amount ranges per category
AMOUNT_RANGES = {
    TransactionCategory.EXPENSE: (2, 300),
    TransactionCategory.SAVING: (50, 1000),
    TransactionCategory.INVESTMENT: (100, 5000),
}


def seed_database():
    """
    Fills the database with demo users and a spread of transactions over the last two years.
    """
    Base.metadata.create_all(bind=engine)
    db: Session = session_local()

    try:
        if db.query(UserDB).count() > 0:
            print("Database appears to be already seeded. Exiting.")
            return

        print("Seeding database with sample data...")
        for i in range(USERS_TO_CREATE):
            username = f"{fake.user_name()}{i}".replace(".", "_")
            user = create_db_user(db, UserCreate(
                username=username,
                name=fake.name(),
                email=f"{username}@example.com",
                password=DEMO_PASSWORD,
                gender=random.choice(list(Gender)),
            ))
            print(f"Created user {user.username} / {user.email} (password: {DEMO_PASSWORD})")

            for _ in range(TRANSACTIONS_PER_USER):
                category = random.choices(list(TransactionCategory), weights=[8, 1, 1])[0]
                low, high = AMOUNT_RANGES[category]
                create_db_transaction(db, user.db_id, TransactionCreate(
                    description=fake.catch_phrase(),
                    payment_type=random.choice(list(PaymentType)),
                    category=category,
                    amount=round(random.uniform(low, high), 2),
                    date=fake.date_between(start_date="-2y", end_date="today"),
                    location=fake.city() if random.random() > 0.3 else None,
                ))

        print("Seeding complete.")
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
