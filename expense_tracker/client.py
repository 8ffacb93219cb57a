"""
HTTP client for the Expense Tracker API.

The auth cookies live in the client's own requests.Session, and the
logged-in user is tracked on an explicit SessionState, so several clients
(for example two users in one test) never share session data.
"""
import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from expense_tracker.logging_config import get_logger

logger = get_logger(__name__)

# Endpoints that must not trigger a refresh-and-retry on 401
AUTH_ENDPOINTS = ("/user/login", "/user/register", "/user/refresh-token")

CATEGORIES = ("expense", "saving", "investment")


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


def filter_transactions(transactions: List[Dict[str, Any]], search: str = "", category: Optional[str] = None,
                        payment_type: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Narrow a list of transactions by search text, category and payment type.

    search matches description or location, case-insensitively; an empty
    search matches everything. category and payment_type must match exactly
    when given.
    """
    term = search.lower()

    def matches(transaction: Dict[str, Any]) -> bool:
        text = (transaction["description"].lower(), (transaction.get("location") or "").lower())
        if term and not any(term in field for field in text):
            return False
        if category and transaction["category"] != category:
            return False
        if payment_type and transaction["paymentType"] != payment_type:
            return False
        return True

    return [t for t in transactions if matches(t)]

@dataclass
class SessionState:
    user: Optional[Dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


class ExpenseTrackerClient:
    def __init__(self, base_url: str = "http://127.0.0.1:8000/api/v1",
                 session: Optional[requests.Session] = None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.http = session or requests.Session()
        self.timeout = timeout
        self.state = SessionState()

    # --- Transport ---

    def _send(self, method: str, endpoint: str, data: Optional[dict] = None,
              params: Optional[dict] = None) -> requests.Response:
        # dates are not JSON serializable by default
        body = json.dumps(data, default=str) if data is not None else None
        headers = {"Content-Type": "application/json"} if body is not None else None
        return self.http.request(
            method,
            f"{self.base_url}{endpoint}",
            data=body,
            params=params,
            headers=headers,
            timeout=self.timeout,
        )

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            return response.json().get("message", response.text)
        except ValueError:
            return response.text

    def _request(self, method: str, endpoint: str, data: Optional[dict] = None,
                 params: Optional[dict] = None) -> Any:
        response = self._send(method, endpoint, data=data, params=params)

        if response.status_code == 401 and not endpoint.startswith(AUTH_ENDPOINTS):
            if self._try_refresh():
                response = self._send(method, endpoint, data=data, params=params)

        if response.status_code == 401:
            self.state.user = None

        if response.status_code >= 400:
            raise ApiError(response.status_code, self._error_message(response))

        if not response.text:
            return None
        return response.json()

    def _try_refresh(self) -> bool:
        response = self._send("GET", "/user/refresh-token")
        if response.status_code < 400:
            logger.debug("Access token refreshed")
            return True
        logger.info(f"Session refresh failed: {self._error_message(response)}")
        self.state.user = None
        return False

    # --- Auth ---

    def register(self, username: str, name: str, email: str, password: str, gender: str) -> Dict[str, Any]:
        return self._request("POST", "/user/register", {
            "username": username,
            "name": name,
            "email": email,
            "password": password,
            "gender": gender,
        })

    def login(self, email: str, password: str) -> Dict[str, Any]:
        user = self._request("POST", "/user/login", {"email": email, "password": password})
        self.state.user = user
        return user

    def logout(self) -> None:
        try:
            self._request("POST", "/user/logout")
        finally:
            self.state.user = None
            self.http.cookies.clear()

    def me(self) -> Dict[str, Any]:
        user = self._request("GET", "/user/info")
        self.state.user = user
        return user

    def update_profile(self, name: Optional[str] = None, gender: Optional[str] = None) -> Dict[str, Any]:
        payload = {key: value for key, value in (("name", name), ("gender", gender)) if value is not None}
        user = self._request("PUT", "/user/update", payload)
        self.state.user = user
        return user

    def change_password(self, old_password: str, new_password: str) -> None:
        self._request("PUT", "/user/change-password", {
            "oldPassword": old_password,
            "newPassword": new_password,
        })

    # --- Transactions ---

    def add_transaction(self, description: str, payment_type: str, category: str, amount: float,
                        date: date, location: Optional[str] = None) -> Dict[str, Any]:
        payload = {
            "description": description,
            "paymentType": payment_type,
            "category": category,
            "amount": amount,
            "date": date,
        }
        if location is not None:
            payload["location"] = location
        return self._request("POST", "/transaction/add", payload)

    def list_transactions(self, page: int = 1, limit: int = 10, search: str = "", category: Optional[str] = None,
                          payment_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """Fetch one page; search, category and payment_type filter that page locally."""
        transactions = self._request("GET", "/transaction", params={"page": page, "limit": limit})
        return filter_transactions(transactions, search=search, category=category, payment_type=payment_type)

    def get_transaction(self, transaction_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/transaction/{transaction_id}")

    def update_transaction(self, transaction_id: str, **fields: Any) -> Dict[str, Any]:
        return self._request("PUT", f"/transaction/{transaction_id}", fields)

    def delete_transaction(self, transaction_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/transaction/{transaction_id}")

    def category_stats(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/transaction/stats/category")

    def summary(self) -> Dict[str, float]:
        """Total amount per category, with 0.0 for categories that have no transactions."""
        totals = {category: 0.0 for category in CATEGORIES}
        for stat in self.category_stats():
            totals[stat["key"]] = stat["totalAmount"]
        return totals

    def payment_type_stats(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/transaction/stats/payment-type")

    def monthly_stats(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/transaction/stats/monthly")
