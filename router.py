"""
router.py
View Router: the fixed set of screens and who may open them.
"""

from __future__ import annotations

from models import ROLE_ADMIN, ROLE_USER

DASHBOARD = "dashboard"
BUY_DATA = "buy-data"
HISTORY = "history"
ADMIN = "admin"
SETTINGS = "settings"

VIEWS = (DASHBOARD, BUY_DATA, HISTORY, ADMIN, SETTINGS)
DEFAULT_VIEW = DASHBOARD

LABELS = {
    DASHBOARD: "Dashboard",
    BUY_DATA: "Buy Data",
    HISTORY: "History",
    ADMIN: "Admin Panel",
    SETTINGS: "Settings",
}

# Views missing here are open to every role.
_RESTRICTED = {
    ADMIN: {ROLE_ADMIN},
    BUY_DATA: {ROLE_USER},  # customer ordering screen
}


def can_access(view: str, role: str | None) -> bool:
    if view not in VIEWS:
        return False
    allowed = _RESTRICTED.get(view)
    return allowed is None or role in allowed


def resolve(view: str, role: str | None) -> str:
    return view if can_access(view, role) else DEFAULT_VIEW


def nav_items(role: str | None) -> list[str]:
    return [v for v in VIEWS if can_access(v, role)]
