"""
auth.py
Login, signup, admin provisioning and password changes.

Passwords are stored and compared as plaintext.
"""

from __future__ import annotations

import logging

import utils
from models import ROLE_ADMIN, ROLE_USER, AuthError, User, ValidationFailed
from store import RecordStore

logger = logging.getLogger(__name__)


def login(store: RecordStore, identifier: str, password: str, role: str = ROLE_USER, name: str | None = None) -> User:
    """
    Resolve credentials to a user.

    An existing (phone or email, password) match wins regardless of `role`.
    Otherwise, with a `name`, a new account is created; self-signup always
    gets role 'user'. Without a name the attempt fails.
    """
    existing = store.find_user(identifier, password)
    if existing:
        logger.info("Login: %s", existing.id)
        return existing

    if not name:
        logger.warning("Failed login for %r", identifier)
        raise AuthError("Account not found. Check your details or sign up.")

    if role != ROLE_USER:
        logger.warning("Signup requested role %r; self-signup accounts are always users", role)
    return store.add_user(name, identifier, password)


def provision_admin(store: RecordStore, actor: User, email: str, name: str, password: str) -> User:
    if actor.role != ROLE_ADMIN:
        raise AuthError("Only administrators can create admin accounts.")
    errors = utils.validate_admin_inputs(name, email, password)
    if errors:
        raise ValidationFailed(errors)
    return store.add_admin(email.strip(), name.strip(), password)


def change_password(
    store: RecordStore, actor: User, user_id: str, new_password: str, confirm: str | None = None
) -> User:
    errors = utils.validate_password(new_password, confirm)
    if new_password == store.settings.root_admin_password and store.is_root(store.get_user(user_id)):
        errors.append("Choose a password other than the default one.")
    if errors:
        raise ValidationFailed(errors)
    return store.update_user_password(user_id, new_password, actor=actor)


def must_change_password(store: RecordStore, user: User | None) -> bool:
    """Root administrator still on the configured default password."""
    return store.is_root(user) and user.password == store.settings.root_admin_password
