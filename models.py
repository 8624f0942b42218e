"""
models.py
Record types (users, plans, transactions), constants and error kinds.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields

NETWORKS = ("MTN", "Telecel", "AT")

ROLE_USER = "user"
ROLE_ADMIN = "admin"

PENDING = "Pending"
SUCCESS = "Success"
FAILED = "Failed"
STATUSES = (PENDING, SUCCESS, FAILED)
TERMINAL_STATUSES = (SUCCESS, FAILED)


class DataSwiftError(Exception):
    """Base class for store and session errors."""


class AuthError(DataSwiftError):
    pass


class RecordNotFound(DataSwiftError):
    pass


class DuplicateAccount(DataSwiftError):
    pass


class RootAdminProtected(DataSwiftError):
    pass


class ValidationFailed(DataSwiftError):
    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class InvalidTransition(DataSwiftError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move a {current} transaction to {target}.")
        self.current = current
        self.target = target


class _Record:
    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict):
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class User(_Record):
    id: str
    name: str
    password: str  # plaintext
    avatar: str
    role: str  # 'user' or 'admin'
    joined_date: str
    phone: str | None = None
    email: str | None = None

    @property
    def identifier(self) -> str:
        return self.phone or self.email or ""

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass(frozen=True)
class DataPlan(_Record):
    id: str
    network: str  # MTN/Telecel/AT
    size: str
    price: float
    validity: str = "30 Days"

    @property
    def label(self) -> str:
        return f"{self.network} {self.size}"


@dataclass(frozen=True)
class Transaction(_Record):
    id: str
    type: str  # "Data"
    amount: float
    status: str  # Pending/Success/Failed
    date: str
    recipient: str
    # Denormalized "network size" copy; never re-read from the catalog.
    plan: str
    network: str | None = None


def next_status(current: str, target: str) -> str:
    """
    Pending -> Success/Failed. Success and Failed are terminal.
    Re-applying the current status is a no-op.
    """
    if target not in STATUSES:
        raise ValueError(f"Unknown status: {target!r}")
    if current == target:
        return current
    if current in TERMINAL_STATUSES or target == PENDING:
        raise InvalidTransition(current, target)
    return target
