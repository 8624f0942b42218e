"""
session.py
Session Manager (authenticated flag, current user, current view) and the
application state handed to every screen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import db
import router
from models import RecordNotFound, User
from store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_CLIENT = "local"


class SessionManager:
    """
    Persisted session for one browser client. No expiry: valid until logout.
    """

    def __init__(
        self,
        authenticated: bool = False,
        user: User | None = None,
        view: str = router.DEFAULT_VIEW,
        client_id: str = DEFAULT_CLIENT,
    ):
        self.client_id = client_id
        self.authenticated = authenticated and user is not None
        self.user = user if self.authenticated else None
        self.view = view if view in router.VIEWS else router.DEFAULT_VIEW

    @classmethod
    def load(cls, client_id: str = DEFAULT_CLIENT) -> "SessionManager":
        raw_user = db.get_slot(db.client_key(db.CURRENT_USER_KEY, client_id))
        user = User.from_dict(raw_user) if raw_user else None
        return cls(
            authenticated=bool(db.get_slot(db.client_key(db.AUTH_KEY, client_id), False)),
            user=user,
            view=db.get_slot(db.client_key(db.VIEW_KEY, client_id), router.DEFAULT_VIEW),
            client_id=client_id,
        )

    @property
    def role(self) -> str | None:
        return self.user.role if self.user else None

    def _set(self, key: str, value) -> None:
        db.set_slot(db.client_key(key, self.client_id), value)

    def _persist(self) -> None:
        self._set(db.AUTH_KEY, self.authenticated)
        self._set(db.CURRENT_USER_KEY, self.user.to_dict() if self.user else None)
        self._set(db.VIEW_KEY, self.view)

    def start(self, user: User) -> None:
        self.authenticated = True
        self.user = user
        self.view = router.DEFAULT_VIEW
        self._persist()

    def logout(self) -> None:
        if self.user:
            logger.info("Logout: %s", self.user.id)
        self.authenticated = False
        self.user = None
        self.view = router.DEFAULT_VIEW
        self._persist()

    def navigate(self, view: str) -> str:
        """Set the current view; views the role may not open fall back to the dashboard."""
        self.view = router.resolve(view, self.role)
        self._set(db.VIEW_KEY, self.view)
        return self.view

    def refresh(self, store: RecordStore) -> None:
        """Re-read the current user from the store; a deleted account ends the session."""
        if not self.user:
            return
        try:
            latest = store.get_user(self.user.id)
        except RecordNotFound:
            logger.warning("Session user %s no longer exists", self.user.id)
            self.logout()
            return
        if latest != self.user:
            self.user = latest
            self._set(db.CURRENT_USER_KEY, latest.to_dict())


@dataclass
class AppState:
    store: RecordStore
    session: SessionManager

    @classmethod
    def load(cls, client_id: str = DEFAULT_CLIENT) -> "AppState":
        state = cls(store=RecordStore.load(), session=SessionManager.load(client_id))
        state.session.refresh(state.store)
        return state

    def sync(self) -> None:
        """Pick up writes made by other browser sessions."""
        self.store.refresh()
        self.session.refresh(self.store)

    @property
    def user(self) -> User | None:
        return self.session.user
