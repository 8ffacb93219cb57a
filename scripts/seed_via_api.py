import sys
import os
import random
from faker import Faker

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from expense_tracker.client import ApiError, ExpenseTrackerClient

# --- Configuration ---
BASE_URL = os.environ.get("EXPENSE_TRACKER_URL", "http://127.0.0.1:8000/api/v1")
DEMO_PASSWORD = "password123"

fake = Faker()


def seed_user(client: ExpenseTrackerClient, transactions: int = 40):
    username = fake.user_name().replace(".", "_")
    email = f"{username}@example.com"
    try:
        client.register(username, fake.name(), email, DEMO_PASSWORD, random.choice(["male", "female", "other"]))
    except ApiError as e:
        print(f"Error registering {username}: {e}")
        return None

    client.login(email, DEMO_PASSWORD)
    print(f"--- Seeding transactions for {username} ---")
    for _ in range(transactions):
        try:
            client.add_transaction(
                description=fake.catch_phrase(),
                payment_type=random.choice(["cash", "card", "upi"]),
                category=random.choice(["expense", "expense", "expense", "saving", "investment"]),
                amount=round(random.uniform(1, 500), 2),
                date=fake.date_between(start_date="-1y", end_date="today"),
                location=fake.city(),
            )
        except ApiError as e:
            print(f"Error adding transaction: {e}")

    print("Category totals:")
    for stat in client.category_stats():
        print(f"  {stat['key']}: {stat['totalAmount']:.2f} ({stat['count']} transactions)")
    client.logout()
    return email


if __name__ == "__main__":
    seeded = [seed_user(ExpenseTrackerClient(BASE_URL)) for _ in range(2)]
    print(f"Seeded users: {[email for email in seeded if email]} (password: {DEMO_PASSWORD})")
