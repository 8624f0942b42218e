"""
utils.py
Validation, dates, list filters, summaries, exports, sample data.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Iterable

import pandas as pd

from config import get_settings
from models import (
    FAILED,
    NETWORKS,
    PENDING,
    ROLE_ADMIN,
    ROLE_USER,
    STATUSES,
    SUCCESS,
    DataPlan,
    Transaction,
    User,
)

TX_COLUMNS = ["id", "type", "plan", "recipient", "amount", "status", "date", "network"]


def joined_date_str(d: date | None = None) -> str:
    # e.g. "12 Oct 2023"
    return (d or date.today()).strftime("%d %b %Y")


def tx_date_str(d: date | None = None) -> str:
    # e.g. "20/11/2023"
    return (d or date.today()).strftime("%d/%m/%Y")


def format_money(amount: float) -> str:
    return f"{get_settings().currency_symbol}{float(amount):.2f}"


def digits(value: str) -> str:
    return "".join(ch for ch in value if ch.isdigit())


# ---------- validation ----------


def validate_password(new_password: str, confirm: str | None = None) -> list[str]:
    errors: list[str] = []
    min_len = get_settings().min_password_length
    if len(new_password) < min_len:
        errors.append(f"Password must be at least {min_len} characters.")
    if confirm is not None and new_password != confirm:
        errors.append("Passwords do not match.")
    return errors


def validate_signup(name: str, identifier: str, password: str, confirm: str) -> list[str]:
    errors: list[str] = []
    if not name.strip():
        errors.append("Full name is required.")
    if not identifier.strip():
        errors.append("Phone number or email is required.")
    errors.extend(validate_password(password, confirm))
    return errors


def validate_recipient(phone: str) -> list[str]:
    min_len = get_settings().min_phone_length
    if len(digits(phone)) < min_len:
        return [f"Recipient number must have at least {min_len} digits."]
    return []


def validate_plan_inputs(network: str, size: str, price) -> list[str]:
    errors: list[str] = []
    if network not in NETWORKS:
        errors.append(f"Network must be one of {', '.join(NETWORKS)}.")
    if not str(size).strip():
        errors.append("Size is required.")
    try:
        p = float(price)
    except (TypeError, ValueError):
        errors.append("Price must be numeric.")
    else:
        if not math.isfinite(p) or p < 0:
            errors.append("Price must be a non-negative amount.")
    return errors


def validate_admin_inputs(name: str, email: str, password: str) -> list[str]:
    errors: list[str] = []
    if not name.strip():
        errors.append("Name is required.")
    if "@" not in email:
        errors.append("A valid email is required.")
    errors.extend(validate_password(password))
    return errors


# ---------- filters ----------


def filter_orders(transactions: Iterable[Transaction], search: str = "", status: str = "All") -> list[Transaction]:
    term = search.strip().lower()
    out = []
    for t in transactions:
        matches_search = term in t.recipient or term in t.id.lower()
        matches_status = status == "All" or t.status == status
        if matches_search and matches_status:
            out.append(t)
    return out


def filter_history(transactions: Iterable[Transaction], search: str = "", status: str = "All") -> list[Transaction]:
    term = search.strip().lower()
    return [
        t
        for t in transactions
        if (not term or term in t.id.lower() or term in t.recipient or term in t.plan.lower())
        and (status == "All" or t.status == status)
    ]


def filter_clients(users: Iterable[User], search: str = "") -> list[User]:
    term = search.strip().lower()
    return [
        u
        for u in users
        if u.role == ROLE_USER and (term in u.name.lower() or term in (u.phone or ""))
    ]


def filter_staff(users: Iterable[User], search: str = "") -> list[User]:
    term = search.strip().lower()
    return [
        u
        for u in users
        if u.role == ROLE_ADMIN and (term in u.name.lower() or search.strip() in (u.email or ""))
    ]


# ---------- summaries ----------


def summary_stats(transactions: Iterable[Transaction], users: Iterable[User] = ()) -> dict:
    txs = list(transactions)
    users = list(users)
    return {
        "total_sales": sum(t.amount for t in txs if t.status == SUCCESS),
        "pending_orders": sum(1 for t in txs if t.status == PENDING),
        "failed_orders": sum(1 for t in txs if t.status == FAILED),
        "total_orders": len(txs),
        "total_clients": sum(1 for u in users if u.role == ROLE_USER),
        "total_staff": sum(1 for u in users if u.role == ROLE_ADMIN),
    }


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    rows = [t.to_dict() for t in transactions]
    if not rows:
        return pd.DataFrame(columns=TX_COLUMNS)
    return pd.DataFrame(rows)[TX_COLUMNS].copy()


def revenue_by_date(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Successful order value per day, oldest first."""
    df = transactions_frame(t for t in transactions if t.status == SUCCESS)
    if df.empty:
        return pd.DataFrame(columns=["day", "revenue"])
    df["day"] = pd.to_datetime(df["date"], format="%d/%m/%Y", errors="coerce")
    df = df.dropna(subset=["day"])
    return (
        df.groupby("day", as_index=False)["amount"]
        .sum()
        .rename(columns={"amount": "revenue"})
        .sort_values("day")
        .reset_index(drop=True)
    )


def transactions_to_csv_bytes(transactions: Iterable[Transaction]) -> bytes:
    return transactions_frame(transactions).to_csv(index=False).encode("utf-8")


def users_frame(users: Iterable[User], show_passwords: bool = False) -> pd.DataFrame:
    rows = []
    for u in users:
        rows.append(
            {
                "id": u.id,
                "name": u.name,
                "phone": u.phone or "",
                "email": u.email or "",
                "joined": u.joined_date,
                "passcode": u.password if show_passwords else "••••••••",
            }
        )
    return pd.DataFrame(rows, columns=["id", "name", "phone", "email", "joined", "passcode"])


def plans_frame(plans: Iterable[DataPlan]) -> pd.DataFrame:
    rows = [p.to_dict() for p in plans]
    return pd.DataFrame(rows, columns=["id", "network", "size", "price", "validity"])


# ---------- sample data ----------


def insert_sample_data(store) -> None:
    """
    Add two sample clients and two orders (adds new records each run).
    """
    store.add_user("Kwame Mensah", "0244123456", "password123")
    store.add_user("Abena Serwaa", "0205123456", "password456")

    mtn = store.plans_for("MTN")
    telecel = store.plans_for("Telecel")
    if mtn:
        tx = store.add_transaction(mtn[-1], "0244123456")
        store.update_transaction_status(tx.id, SUCCESS)
    if telecel:
        store.add_transaction(telecel[0], "0205123456")


def status_options() -> list[str]:
    return ["All", *STATUSES]
