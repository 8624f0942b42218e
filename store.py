"""
store.py
Record Store: the users, plans and transactions collections.

Collections are tuples. Each mutation builds a new tuple, swaps it in and
persists only the slot that changed. Nothing cascades between collections.
"""

from __future__ import annotations

import logging
import random
import string
from dataclasses import replace
from typing import Iterable

import db
import utils
from config import Settings, get_settings
from models import (
    PENDING,
    ROLE_ADMIN,
    ROLE_USER,
    DataPlan,
    DuplicateAccount,
    RecordNotFound,
    RootAdminProtected,
    Transaction,
    User,
    next_status,
)

logger = logging.getLogger(__name__)

ROOT_ADMIN_ID = "USR-ROOT"

SEED_PLANS = (
    DataPlan(id="1", network="MTN", size="1GB", price=7),
    DataPlan(id="2", network="MTN", size="5GB", price=40),
    DataPlan(id="3", network="Telecel", size="1.5GB", price=12),
    DataPlan(id="4", network="AT", size="2GB", price=10),
)

_ID_CHARS = string.ascii_lowercase + string.digits


def _random_suffix(length: int) -> str:
    return "".join(random.choices(_ID_CHARS, k=length))


class RecordStore:
    def __init__(
        self,
        users: Iterable[User] = (),
        plans: Iterable[DataPlan] = (),
        transactions: Iterable[Transaction] = (),
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.users: tuple[User, ...] = tuple(users)
        self.plans: tuple[DataPlan, ...] = tuple(plans)
        self.transactions: tuple[Transaction, ...] = tuple(transactions)

    @classmethod
    def load(cls, settings: Settings | None = None) -> "RecordStore":
        """
        Read the three collection slots. Missing slots fall back to defaults
        (no users, seed plans, no transactions) and the root administrator
        is injected when no user carries the configured root email.
        """
        store = cls(settings=settings)
        store.refresh()
        return store

    # ---------- persistence ----------

    def refresh(self) -> None:
        """Re-read all three collections; other sessions may have written since."""
        self._read_users()
        self._read_plans()
        self._read_transactions()

    def _read_users(self) -> None:
        self.users = tuple(User.from_dict(d) for d in db.get_slot(db.USERS_KEY, []))
        if self.root_admin is None:
            self._set_users((self._make_root_admin(),) + self.users)
            logger.info("Root administrator %s injected", self.settings.root_admin_email)

    def _read_plans(self) -> None:
        raw = db.get_slot(db.PLANS_KEY)
        self.plans = SEED_PLANS if raw is None else tuple(DataPlan.from_dict(d) for d in raw)

    def _read_transactions(self) -> None:
        self.transactions = tuple(Transaction.from_dict(d) for d in db.get_slot(db.TRANSACTIONS_KEY, []))

    def _set_users(self, users: Iterable[User]) -> None:
        self.users = tuple(users)
        db.set_slot(db.USERS_KEY, [u.to_dict() for u in self.users])

    def _set_plans(self, plans: Iterable[DataPlan]) -> None:
        self.plans = tuple(plans)
        db.set_slot(db.PLANS_KEY, [p.to_dict() for p in self.plans])

    def _set_transactions(self, transactions: Iterable[Transaction]) -> None:
        self.transactions = tuple(transactions)
        db.set_slot(db.TRANSACTIONS_KEY, [t.to_dict() for t in self.transactions])

    # ---------- lookups ----------

    @property
    def root_admin(self) -> User | None:
        return next((u for u in self.users if self.is_root(u)), None)

    def is_root(self, user: User | None) -> bool:
        return bool(user and user.email and user.email == self.settings.root_admin_email)

    def get_user(self, user_id: str) -> User:
        for u in self.users:
            if u.id == user_id:
                return u
        raise RecordNotFound(f"No user with id {user_id}")

    def find_user(self, identifier: str, password: str) -> User | None:
        for u in self.users:
            if (u.phone == identifier or u.email == identifier) and u.password == password:
                return u
        return None

    def get_plan(self, plan_id: str) -> DataPlan:
        for p in self.plans:
            if p.id == plan_id:
                return p
        raise RecordNotFound(f"No plan with id {plan_id}")

    def plans_for(self, network: str) -> list[DataPlan]:
        return [p for p in self.plans if p.network == network]

    def get_transaction(self, tx_id: str) -> Transaction:
        for t in self.transactions:
            if t.id == tx_id:
                return t
        raise RecordNotFound(f"No transaction with id {tx_id}")

    # ---------- id generation ----------

    def _new_user_id(self, prefix: str) -> str:
        taken = {u.id for u in self.users}
        while True:
            candidate = f"{prefix}-{_random_suffix(5)}"
            if candidate not in taken:
                return candidate

    def _new_plan_id(self) -> str:
        taken = {p.id for p in self.plans}
        while True:
            candidate = _random_suffix(9)
            if candidate not in taken:
                return candidate

    def _new_transaction_id(self) -> str:
        taken = {t.id for t in self.transactions}
        while True:
            candidate = f"TX-G{random.randint(10000, 99999)}"
            if candidate not in taken:
                return candidate

    # ---------- plans ----------

    def add_plan(self, network: str, size: str, price: float, validity: str = "30 Days") -> DataPlan:
        self._read_plans()
        plan = DataPlan(id=self._new_plan_id(), network=network, size=size, price=float(price), validity=validity)
        self._set_plans(self.plans + (plan,))
        logger.info("Plan %s added (%s)", plan.id, plan.label)
        return plan

    def update_plan(self, plan: DataPlan) -> DataPlan:
        self._read_plans()
        self.get_plan(plan.id)
        self._set_plans(plan if p.id == plan.id else p for p in self.plans)
        logger.info("Plan %s updated (%s at %s)", plan.id, plan.label, plan.price)
        return plan

    def delete_plan(self, plan_id: str) -> None:
        self._read_plans()
        self.get_plan(plan_id)
        self._set_plans(p for p in self.plans if p.id != plan_id)
        logger.info("Plan %s deleted", plan_id)

    # ---------- users ----------

    def _make_root_admin(self) -> User:
        s = self.settings
        return User(
            id=ROOT_ADMIN_ID,
            name=s.root_admin_name,
            email=s.root_admin_email,
            password=s.root_admin_password,
            avatar=s.avatar_url.format(seed="devteam"),
            role=ROLE_ADMIN,
            joined_date="01 Jan 2023",
        )

    def _check_not_reserved(self, identifier: str) -> None:
        if identifier == self.settings.root_admin_email:
            raise DuplicateAccount("This address is reserved for the root administrator.")

    def add_user(self, name: str, identifier: str, password: str) -> User:
        """Self-service signup. Always role 'user'."""
        self._read_users()
        self._check_not_reserved(identifier)
        is_email = "@" in identifier
        user = User(
            id=self._new_user_id("USR"),
            name=name,
            phone=None if is_email else identifier,
            email=identifier if is_email else None,
            password=password,
            avatar=self.settings.avatar_url.format(seed=identifier),
            role=ROLE_USER,
            joined_date=utils.joined_date_str(),
        )
        self._set_users(self.users + (user,))
        logger.info("User %s signed up", user.id)
        return user

    def add_admin(self, email: str, name: str, password: str) -> User:
        self._read_users()
        self._check_not_reserved(email)
        admin = User(
            id=self._new_user_id("ADM"),
            name=name,
            email=email,
            password=password,
            avatar=self.settings.avatar_url.format(seed=email),
            role=ROLE_ADMIN,
            joined_date=utils.joined_date_str(),
        )
        self._set_users(self.users + (admin,))
        logger.info("Admin %s provisioned", admin.id)
        return admin

    def _check_manage(self, target: User, actor: User | None, action: str) -> None:
        # Other admins are managed by the root administrator only.
        if target.is_admin and actor is not None and not self.is_root(actor) and actor.id != target.id:
            logger.warning("%s of admin %s refused for %s", action, target.id, actor.id)
            raise RootAdminProtected("Only the root administrator can manage staff accounts.")

    def delete_user(self, user_id: str, actor: User | None = None) -> None:
        self._read_users()
        target = self.get_user(user_id)
        if self.is_root(target):
            logger.warning("Deletion of root administrator refused")
            raise RootAdminProtected("The root administrator cannot be deleted.")
        self._check_manage(target, actor, "Deletion")
        self._set_users(u for u in self.users if u.id != user_id)
        logger.info("User %s deleted", user_id)

    def update_user_password(self, user_id: str, new_password: str, actor: User | None = None) -> User:
        self._read_users()
        target = self.get_user(user_id)
        if self.is_root(target) and not self.is_root(actor):
            logger.warning("Password reset of root administrator refused")
            raise RootAdminProtected("Only the root administrator can change its own password.")
        self._check_manage(target, actor, "Password reset")
        updated = replace(target, password=new_password)
        self._set_users(updated if u.id == user_id else u for u in self.users)
        logger.info("Password updated for %s", user_id)
        return updated

    # ---------- transactions ----------

    def add_transaction(self, plan: DataPlan, recipient: str) -> Transaction:
        self._read_transactions()
        tx = Transaction(
            id=self._new_transaction_id(),
            type="Data",
            amount=plan.price,
            status=PENDING,
            date=utils.tx_date_str(),
            recipient=recipient,
            plan=plan.label,
            network=plan.network,
        )
        # Newest first.
        self._set_transactions((tx,) + self.transactions)
        logger.info("Order %s placed: %s for %s", tx.id, tx.plan, tx.recipient)
        return tx

    def update_transaction_status(self, tx_id: str, status: str) -> Transaction:
        self._read_transactions()
        current = self.get_transaction(tx_id)
        updated = replace(current, status=next_status(current.status, status))
        self._set_transactions(updated if t.id == tx_id else t for t in self.transactions)
        logger.info("Order %s marked %s", tx_id, updated.status)
        return updated
