from datetime import date

import pytest

import utils
from models import FAILED, PENDING, SUCCESS, InvalidTransition, Transaction, User, next_status


def make_tx(id, status=PENDING, amount=10, recipient="0244000000", plan="MTN 1GB", day="20/11/2023"):
    return Transaction(id=id, type="Data", amount=amount, status=status, date=day, recipient=recipient, plan=plan)


def make_user(id, name, role="user", phone=None, email=None):
    return User(id=id, name=name, password="secret99", avatar="", role=role, joined_date="01 Jan 2024", phone=phone, email=email)


def test_date_formats():
    assert utils.tx_date_str(date(2023, 11, 20)) == "20/11/2023"
    assert utils.joined_date_str(date(2023, 10, 12)) == "12 Oct 2023"


def test_format_money():
    assert utils.format_money(7) == "GH₵7.00"


@pytest.mark.parametrize(
    "phone,ok",
    [("0244000000", True), ("024 400 0000", True), ("024400000", False), ("", False)],
)
def test_validate_recipient(phone, ok):
    assert (utils.validate_recipient(phone) == []) is ok


def test_validate_signup():
    assert utils.validate_signup("Ama", "0555123456", "secret99", "secret99") == []
    errors = utils.validate_signup(" ", "", "abc", "abd")
    assert "Full name is required." in errors
    assert "Passwords do not match." in errors
    assert len(errors) == 4


def test_validate_plan_inputs():
    assert utils.validate_plan_inputs("MTN", "10GB", "45") == []
    assert utils.validate_plan_inputs("Vodafone", "", "abc") == [
        "Network must be one of MTN, Telecel, AT.",
        "Size is required.",
        "Price must be numeric.",
    ]


@pytest.mark.parametrize(
    "price,ok",
    [("0", True), ("7.5", True), ("-1", False), ("nan", False), ("inf", False)],
)
def test_validate_plan_price(price, ok):
    assert (utils.validate_plan_inputs("MTN", "Promo", price) == []) is ok


def test_next_status():
    assert next_status(PENDING, SUCCESS) == SUCCESS
    assert next_status(PENDING, FAILED) == FAILED
    assert next_status(SUCCESS, SUCCESS) == SUCCESS
    with pytest.raises(InvalidTransition):
        next_status(FAILED, SUCCESS)
    with pytest.raises(InvalidTransition):
        next_status(SUCCESS, PENDING)
    with pytest.raises(ValueError):
        next_status(PENDING, "Refunded")


def test_filter_orders_combines_search_and_status():
    txs = [
        make_tx("TX-G10001", PENDING, recipient="0244000000"),
        make_tx("TX-G10002", SUCCESS, recipient="0244000000"),
        make_tx("TX-G10003", PENDING, recipient="0200111222"),
    ]
    assert [t.id for t in utils.filter_orders(txs, "0244", PENDING)] == ["TX-G10001"]
    assert [t.id for t in utils.filter_orders(txs, "tx-g1000", "All")] == ["TX-G10001", "TX-G10002", "TX-G10003"]
    assert utils.filter_orders(txs, "", FAILED) == []


def test_filter_history_matches_plan():
    txs = [make_tx("TX-G1", plan="MTN 1GB"), make_tx("TX-G2", plan="AT 2GB")]
    assert [t.id for t in utils.filter_history(txs, "at 2")] == ["TX-G2"]


def test_filter_clients_and_staff():
    users = [
        make_user("U1", "Kwame Mensah", phone="0244123456"),
        make_user("U2", "Abena Serwaa", phone="0205123456"),
        make_user("A1", "Ops Team", role="admin", email="ops@example.com"),
    ]
    assert [u.id for u in utils.filter_clients(users, "kwame")] == ["U1"]
    assert [u.id for u in utils.filter_clients(users, "0205")] == ["U2"]
    assert [u.id for u in utils.filter_clients(users, "ops")] == []
    assert [u.id for u in utils.filter_staff(users, "ops@")] == ["A1"]
    assert utils.filter_staff(users, "OPS@EXAMPLE") == []
    assert [u.id for u in utils.filter_staff(users, "OPS TEAM")] == ["A1"]


def test_summary_stats():
    txs = [make_tx("1", SUCCESS, 40), make_tx("2", SUCCESS, 10), make_tx("3", PENDING, 7), make_tx("4", FAILED, 12)]
    users = [make_user("U1", "A"), make_user("A1", "B", role="admin")]
    stats = utils.summary_stats(txs, users)
    assert stats == {
        "total_sales": 50,
        "pending_orders": 1,
        "failed_orders": 1,
        "total_orders": 4,
        "total_clients": 1,
        "total_staff": 1,
    }


def test_revenue_by_date():
    txs = [
        make_tx("1", SUCCESS, 40, day="20/11/2023"),
        make_tx("2", SUCCESS, 10, day="20/11/2023"),
        make_tx("3", SUCCESS, 7, day="21/11/2023"),
        make_tx("4", PENDING, 99, day="21/11/2023"),
    ]
    df = utils.revenue_by_date(txs)
    assert df["revenue"].tolist() == [50, 7]
    assert utils.revenue_by_date([]).empty


def test_transactions_csv():
    csv = utils.transactions_to_csv_bytes([make_tx("TX-G1")]).decode("utf-8")
    header, row = csv.strip().splitlines()
    assert header == ",".join(utils.TX_COLUMNS)
    assert row.startswith("TX-G1,Data,MTN 1GB,0244000000")
    assert utils.transactions_to_csv_bytes([]).decode("utf-8").strip() == ",".join(utils.TX_COLUMNS)


def test_users_frame_masks_passwords():
    users = [make_user("U1", "A", phone="0244123456")]
    assert utils.users_frame(users)["passcode"].tolist() == ["••••••••"]
    assert utils.users_frame(users, show_passwords=True)["passcode"].tolist() == ["secret99"]


def test_insert_sample_data(store):
    utils.insert_sample_data(store)
    assert len(utils.filter_clients(store.users)) == 2
    assert [t.status for t in store.transactions] == [PENDING, SUCCESS]
