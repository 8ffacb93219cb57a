from datetime import date

import pytest

from expense_tracker.client import ApiError, ExpenseTrackerClient, filter_transactions

PASSWORD = "s3cret-pass"


@pytest.fixture
def api(make_client):
    return ExpenseTrackerClient("http://testserver/api/v1", session=make_client())


@pytest.fixture
def logged_in(api):
    api.register("carol", "Carol", "carol@example.com", PASSWORD, "other")
    api.login("carol@example.com", PASSWORD)
    return api


def test_login_tracks_session_state(api) -> None:
    api.register("carol", "Carol", "carol@example.com", PASSWORD, "other")
    assert not api.state.is_authenticated

    user = api.login("carol@example.com", PASSWORD)

    assert api.state.is_authenticated
    assert api.state.user["username"] == "carol"
    assert user["profilePicture"] == "https://avatar.iran.liara.run/public/46"


def test_errors_carry_status_and_message(api) -> None:
    with pytest.raises(ApiError) as excinfo:
        api.login("ghost@example.com", PASSWORD)

    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "Invalid email or password"


def test_transaction_round_trip(logged_in) -> None:
    created = logged_in.add_transaction("Groceries", "card", "expense", 42.1, date(2024, 5, 1), location="Market")

    assert logged_in.list_transactions() == [created]
    assert logged_in.get_transaction(created["id"]) == created

    updated = logged_in.update_transaction(created["id"], amount=40)
    assert updated["amount"] == 40
    assert updated["location"] == "Market"

    assert logged_in.category_stats() == [{"key": "expense", "totalAmount": 40, "count": 1}]
    assert logged_in.payment_type_stats() == [{"key": "card", "totalAmount": 40, "count": 1}]
    assert logged_in.monthly_stats() == [{"year": 2024, "month": 5, "totalAmount": 40, "count": 1}]

    logged_in.delete_transaction(created["id"])
    with pytest.raises(ApiError) as excinfo:
        logged_in.get_transaction(created["id"])
    assert excinfo.value.status_code == 404


def test_expired_access_token_is_refreshed_transparently(logged_in) -> None:
    old_refresh = logged_in.http.cookies.get("refreshToken")
    logged_in.http.cookies.delete("accessToken")

    user = logged_in.me()

    assert user["username"] == "carol"
    assert logged_in.http.cookies.get("refreshToken") != old_refresh


def test_failed_refresh_drops_session(logged_in) -> None:
    logged_in.http.cookies.clear()

    with pytest.raises(ApiError) as excinfo:
        logged_in.me()

    assert excinfo.value.status_code == 401
    assert not logged_in.state.is_authenticated


def test_profile_and_password(logged_in) -> None:
    assert logged_in.update_profile(name="Caroline")["name"] == "Caroline"
    assert logged_in.state.user["name"] == "Caroline"

    logged_in.change_password(PASSWORD, "another-pass")
    logged_in.logout()
    assert not logged_in.state.is_authenticated

    with pytest.raises(ApiError):
        logged_in.login("carol@example.com", PASSWORD)
    assert logged_in.login("carol@example.com", "another-pass")["username"] == "carol"


def test_list_filters_by_search_category_and_payment_type(logged_in) -> None:
    logged_in.add_transaction("Groceries", "card", "expense", 42.1, date(2024, 5, 1), location="Market")
    logged_in.add_transaction("Index fund", "upi", "investment", 500, date(2024, 5, 2))
    logged_in.add_transaction("Lunch", "cash", "expense", 12, date(2024, 5, 3), location="Food court")

    def descriptions(**filters):
        return sorted(t["description"] for t in logged_in.list_transactions(**filters))

    assert descriptions() == ["Groceries", "Index fund", "Lunch"]
    assert descriptions(search="MARKET") == ["Groceries"]
    assert descriptions(search="fund") == ["Index fund"]
    assert descriptions(category="expense") == ["Groceries", "Lunch"]
    assert descriptions(category="expense", payment_type="cash") == ["Lunch"]
    assert descriptions(search="food", category="investment") == []


def test_filter_transactions_without_location() -> None:
    transactions = [{"description": "Rent", "location": None, "category": "expense", "paymentType": "upi"}]

    assert filter_transactions(transactions, search="rent") == transactions
    assert filter_transactions(transactions, search="office") == []


def test_summary_totals_each_category(logged_in) -> None:
    assert logged_in.summary() == {"expense": 0.0, "saving": 0.0, "investment": 0.0}

    logged_in.add_transaction("Groceries", "card", "expense", 40, date(2024, 5, 1))
    logged_in.add_transaction("Lunch", "cash", "expense", 12.5, date(2024, 5, 3))
    logged_in.add_transaction("Piggy bank", "cash", "saving", 100, date(2024, 5, 4))

    assert logged_in.summary() == {"expense": 52.5, "saving": 100.0, "investment": 0.0}
