"""
app.py
Streamlit data-bundle storefront (customers order bundles, admins reconcile).
Run: streamlit run app.py
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import replace

import streamlit as st

import auth
import db
import router
import utils
from config import get_settings
from models import FAILED, NETWORKS, PENDING, SUCCESS, DataSwiftError, ValidationFailed
from session import AppState

settings = get_settings()
logger = logging.getLogger(__name__)

st.set_page_config(page_title=settings.app_title, layout="wide")


def init_once():
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    db.init_db()


def client_id() -> str:
    # Per-browser token kept in the URL so a reload resumes the same session.
    token = st.query_params.get("sid")
    if not token:
        token = uuid.uuid4().hex
        st.query_params["sid"] = token
    return token


def get_state() -> AppState:
    if "app_state" not in st.session_state:
        st.session_state.app_state = AppState.load(client_id())
    state = st.session_state.app_state
    state.sync()
    return state


def show_errors(errors: list[str]) -> None:
    for e in errors:
        st.error(e)


def login_screen(state: AppState):
    st.title(f"⚡ {settings.app_title}")

    mode = st.radio("Mode", ["Sign in", "Create account"], horizontal=True, label_visibility="collapsed")
    signing_up = mode == "Create account"

    col1, col2 = st.columns([1, 1])
    with col1:
        name = st.text_input("Full name", placeholder="e.g. Kwame Mensah") if signing_up else None
        identifier = st.text_input("Phone number or email", placeholder="024XXXXXXX")
        password = st.text_input("Password", type="password")
        confirm = st.text_input("Confirm password", type="password") if signing_up else None

        if st.button("Get started" if signing_up else "Sign in", type="primary"):
            if signing_up:
                errors = utils.validate_signup(name, identifier, password, confirm)
                if errors:
                    show_errors(errors)
                    return
            try:
                user = auth.login(state.store, identifier.strip(), password, name=(name.strip() if name else None))
            except DataSwiftError as e:
                st.error(str(e))
                return
            state.session.start(user)
            st.rerun()

    with col2:
        st.info(
            "Order MTN, Telecel and AT bundles in seconds.\n\n"
            "Orders are processed manually: send payment to our MoMo number "
            "and an admin will activate your bundle.\n\n"
            f"Main admin access: **{settings.root_admin_email}**"
        )


def force_change_password_screen(state: AppState):
    st.title("⚠️ Change Password (Required)")

    st.warning("You must change the default password before using the console.")
    new1 = st.text_input("New password", type="password")
    new2 = st.text_input("Confirm new password", type="password")

    if st.button("Update password", type="primary"):
        try:
            auth.change_password(state.store, state.user, state.user.id, new1, new2)
        except ValidationFailed as e:
            show_errors(e.errors)
            return
        state.session.refresh(state.store)
        st.success("Password updated. You can continue.")
        st.rerun()


def go(state: AppState, view: str):
    state.session.navigate(view)
    st.rerun()


def dashboard_page(state: AppState):
    st.header("📊 Dashboard")

    is_admin = state.user.is_admin
    transactions = state.store.transactions
    stats = utils.summary_stats(transactions)

    c1, c2 = st.columns(2)
    c1.metric("Total Revenue" if is_admin else "Total Spend", utils.format_money(stats["total_sales"]))
    c2.metric("Transactions", f"{stats['total_orders']} Records")

    st.divider()

    if is_admin:
        chart_col, actions_col = st.columns([2, 1])
        with chart_col:
            st.subheader("Platform activity")
            df = utils.revenue_by_date(transactions)
            if df.empty:
                st.caption("No completed sales yet.")
            else:
                st.area_chart(df, x="day", y="revenue")
    else:
        actions_col = st.container()

    with actions_col:
        st.subheader("Quick actions")
        if is_admin:
            if st.button("🛡️ System Console", type="primary", use_container_width=True):
                go(state, router.ADMIN)
        else:
            if st.button("⚡ Order Data Bundle", type="primary", use_container_width=True):
                go(state, router.BUY_DATA)

        st.caption("Recent records")
        recent = transactions[:4]
        if recent:
            for tx in recent:
                st.write(f"**{tx.recipient}** · {tx.date} · {utils.format_money(tx.amount)}")
        else:
            st.caption("No recent activity")
        if st.button("View all"):
            go(state, router.HISTORY)


def buy_data_page(state: AppState):
    st.header("📶 Buy Data Bundle")

    network = st.radio("Network", NETWORKS, horizontal=True)
    phone = st.text_input("Recipient number", placeholder="e.g. 0244123456")

    plans = state.store.plans_for(network)
    if not plans:
        st.caption(f"No plans currently available for {network}.")
        return

    plan = st.radio(
        "Select plan",
        plans,
        format_func=lambda p: f"{p.size} · {p.validity} · {utils.format_money(p.price)}",
        key=f"plan_{network}",
    )

    errors = utils.validate_recipient(phone) if phone else []
    show_errors(errors)

    if st.button("Place bundle order", type="primary", disabled=not phone or bool(errors)):
        with st.spinner("Processing payment..."):
            time.sleep(settings.payment_delay_seconds)
        tx = state.store.add_transaction(plan, phone.strip())
        st.toast(f"Order {tx.id} for {tx.recipient} is processing. Our admins will verify payment.")
        go(state, router.HISTORY)

    st.warning(
        "Note: your order will be processed manually. Once you place an order, send the "
        "payment to our designated MoMo number. An admin will verify and activate your bundle shortly."
    )


def history_page(state: AppState):
    st.header("🧾 History")

    # All orders on this device are listed, not only the signed-in account's.
    c1, c2 = st.columns([2, 1])
    with c1:
        search = st.text_input("Search (id/recipient/plan)", key="history_search")
    with c2:
        status = st.selectbox("Status", utils.status_options(), key="history_status")

    rows = utils.filter_history(state.store.transactions, search, status)
    if rows:
        st.dataframe(utils.transactions_frame(rows), use_container_width=True, hide_index=True)
        st.download_button(
            "Download transactions.csv",
            data=utils.transactions_to_csv_bytes(rows),
            file_name="transactions.csv",
            mime="text/csv",
        )
    else:
        st.caption("No transactions found yet.")


def orders_tab(state: AppState, search: str):
    status = st.selectbox("Status", utils.status_options(), key="orders_status")
    rows = utils.filter_orders(state.store.transactions, search, status)
    st.subheader(f"Orders ({status})")
    st.dataframe(utils.transactions_frame(rows), use_container_width=True, hide_index=True)

    pending = [t for t in rows if t.status == PENDING]
    if not pending:
        st.caption("No pending orders in this view.")
        return

    tx_id = st.selectbox("Pending order", [t.id for t in pending], key="orders_pick")
    c1, c2 = st.columns(2)
    target = None
    with c1:
        if st.button("✅ Mark Success", key="orders_success"):
            target = SUCCESS
    with c2:
        if st.button("❌ Mark Failed", key="orders_failed"):
            target = FAILED
    if target:
        try:
            state.store.update_transaction_status(tx_id, target)
        except DataSwiftError as e:
            st.error(str(e))
            return
        st.rerun()


def reset_password_form(state: AppState, user_id: str, key: str):
    new_pass = st.text_input("New password", type="password", key=f"{key}_pass")
    if st.button("Reset password", key=f"{key}_reset"):
        try:
            auth.change_password(state.store, state.user, user_id, new_pass)
        except ValidationFailed as e:
            show_errors(e.errors)
            return
        except DataSwiftError as e:
            st.error(str(e))
            return
        st.success("Password updated successfully.")


def delete_user_form(state: AppState, user_id: str, key: str):
    confirm = st.checkbox("Confirm delete", value=False, key=f"{key}_confirm")
    if st.button("Delete", type="secondary", disabled=not confirm, key=f"{key}_delete"):
        try:
            state.store.delete_user(user_id, actor=state.user)
        except DataSwiftError as e:
            st.error(str(e))
            return
        st.success("Account deleted.")
        st.rerun()


def clients_tab(state: AppState, search: str):
    st.subheader("User management")
    clients = utils.filter_clients(state.store.users, search)
    show = st.checkbox("Show passcodes", key="clients_show")
    st.dataframe(utils.users_frame(clients, show_passwords=show), use_container_width=True, hide_index=True)

    if not clients:
        st.caption("No clients match.")
        return

    user_id = st.selectbox("Client", [c.id for c in clients], key="clients_pick")
    c1, c2 = st.columns(2)
    with c1:
        reset_password_form(state, user_id, key="clients")
    with c2:
        delete_user_form(state, user_id, key="clients")


def plans_tab(state: AppState):
    st.subheader("Plans management")

    with st.expander("➕ Add bundle"):
        c1, c2, c3 = st.columns(3)
        with c1:
            network = st.selectbox("Network", NETWORKS, key="plan_new_network")
        with c2:
            size = st.text_input("Size (e.g. 10GB)", key="plan_new_size")
        with c3:
            price = st.text_input("Price", value="", key="plan_new_price")
        if st.button("Save plan", type="primary", key="plan_new_save"):
            errors = utils.validate_plan_inputs(network, size, price)
            if errors:
                show_errors(errors)
            else:
                state.store.add_plan(network, size.strip(), float(price))
                st.success("Plan added.")
                st.rerun()

    active = st.radio("Network", NETWORKS, horizontal=True, key="plan_filter")
    plans = state.store.plans_for(active)
    st.dataframe(utils.plans_frame(plans), use_container_width=True, hide_index=True)
    if not plans:
        st.caption(f"No plans for {active}.")
        return

    labels = {f"{p.size} · {utils.format_money(p.price)} (ID {p.id})": p.id for p in plans}
    chosen = st.selectbox("Plan", list(labels.keys()), key="plan_pick")
    plan = state.store.get_plan(labels[chosen])

    if st.session_state.get("edit_plan_id") == plan.id:
        c1, c2 = st.columns(2)
        with c1:
            new_size = st.text_input("Size", value=plan.size, key="plan_edit_size")
        with c2:
            new_price = st.text_input("Price", value=str(plan.price), key="plan_edit_price")
        s1, s2 = st.columns(2)
        with s1:
            if st.button("Save", type="primary", key="plan_edit_save"):
                errors = utils.validate_plan_inputs(plan.network, new_size, new_price)
                if errors:
                    show_errors(errors)
                    return
                state.store.update_plan(replace(plan, size=new_size.strip(), price=float(new_price)))
                st.session_state.edit_plan_id = None
                st.rerun()
        with s2:
            if st.button("Cancel edit", key="plan_edit_cancel"):
                st.session_state.edit_plan_id = None
                st.rerun()
    else:
        c1, c2 = st.columns(2)
        with c1:
            if st.button("Edit", key="plan_edit"):
                st.session_state.edit_plan_id = plan.id
                st.rerun()
        with c2:
            confirm = st.checkbox("Confirm delete", value=False, key="plan_del_confirm")
            if st.button("Delete", disabled=not confirm, key="plan_delete"):
                state.store.delete_plan(plan.id)
                st.success("Plan deleted.")
                st.rerun()


def staff_tab(state: AppState, search: str):
    st.subheader("Admin management")

    with st.expander("➕ New admin"):
        c1, c2, c3 = st.columns(3)
        with c1:
            name = st.text_input("Name", key="staff_new_name")
        with c2:
            email = st.text_input("Email", key="staff_new_email")
        with c3:
            password = st.text_input("Password", type="password", key="staff_new_pass")
        if st.button("Create admin", type="primary", key="staff_new_save"):
            try:
                admin = auth.provision_admin(state.store, state.user, email, name, password)
            except ValidationFailed as e:
                show_errors(e.errors)
            except DataSwiftError as e:
                st.error(str(e))
            else:
                st.success(f"Admin {admin.name} created successfully.")
                st.rerun()

    staff = utils.filter_staff(state.store.users, search)
    st.dataframe(utils.users_frame(staff), use_container_width=True, hide_index=True)
    if not staff:
        st.caption("No admins match.")
        return

    admin_id = st.selectbox("Admin", [a.id for a in staff], key="staff_pick")
    target = state.store.get_user(admin_id)

    if state.store.is_root(target):
        st.caption("Root administrator: cannot be deleted; its password is changed from its own Settings.")
        return
    if not state.store.is_root(state.user):
        st.caption("Only the root administrator can manage staff accounts.")
        return

    c1, c2 = st.columns(2)
    with c1:
        reset_password_form(state, admin_id, key="staff")
    with c2:
        delete_user_form(state, admin_id, key="staff")


def admin_page(state: AppState):
    st.header("🛡️ Admin Console")

    stats = utils.summary_stats(state.store.transactions, state.store.users)
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Total orders", stats["total_orders"])
    c2.metric("Pending queue", stats["pending_orders"])
    c3.metric("Revenue", utils.format_money(stats["total_sales"]))
    c4.metric("Clients", stats["total_clients"])
    c5.metric("Staff / Admins", stats["total_staff"])

    search = st.text_input("Search", key="admin_search")

    orders, clients, plans, staff = st.tabs(["Orders", "Clients", "Plans", "Staff"])
    with orders:
        orders_tab(state, search)
    with clients:
        clients_tab(state, search)
    with plans:
        plans_tab(state)
    with staff:
        staff_tab(state, search)


def settings_page(state: AppState):
    st.header("⚙️ Settings")

    user = state.user
    st.subheader("Account")
    st.write(f"**{user.name}** · {user.identifier} · `{user.role}`")

    st.subheader("Change password")
    p1 = st.text_input("New password", type="password", key="settings_p1")
    p2 = st.text_input("Confirm new password", type="password", key="settings_p2")
    if st.button("Update password", type="primary"):
        try:
            auth.change_password(state.store, user, user.id, p1, p2)
        except ValidationFailed as e:
            show_errors(e.errors)
        else:
            state.session.refresh(state.store)
            st.success("Password updated.")

    if user.is_admin:
        st.divider()
        st.subheader("Sample data")
        st.caption("Add 2 sample clients + a couple of orders for testing (adds new records each run).")
        if st.button("Insert sample data"):
            utils.insert_sample_data(state.store)
            st.success("Sample data inserted.")
            st.rerun()

    if state.store.is_root(user):
        st.divider()
        st.subheader("Reset stored data")
        st.caption(f"Stored slots: {', '.join(db.stored_keys())}")
        confirm = st.checkbox("Confirm reset", value=False, key="reset_confirm")
        if st.button("Reset everything", disabled=not confirm):
            db.reset_state()
            del st.session_state.app_state
            st.rerun()

    st.divider()
    if st.button("Sign out"):
        state.session.logout()
        st.rerun()


PAGES = {
    router.DASHBOARD: dashboard_page,
    router.BUY_DATA: buy_data_page,
    router.HISTORY: history_page,
    router.ADMIN: admin_page,
    router.SETTINGS: settings_page,
}


def main_app(state: AppState):
    session = state.session
    st.sidebar.title(f"⚡ {settings.app_title}")
    st.sidebar.caption(f"Logged in as: {state.user.name} ({state.user.role})")

    items = router.nav_items(session.role)
    current = router.resolve(session.view, session.role)
    chosen = st.sidebar.radio("Navigate", items, index=items.index(current), format_func=router.LABELS.get)
    if chosen != session.view:
        session.navigate(chosen)

    if st.sidebar.button("Logout"):
        session.logout()
        st.rerun()

    PAGES[session.view](state)


# --------- App entry ---------

def run():
    init_once()
    state = get_state()

    if not state.session.authenticated:
        login_screen(state)
        return

    if auth.must_change_password(state.store, state.user):
        force_change_password_screen(state)
        return

    main_app(state)


if __name__ == "__main__":
    run()
