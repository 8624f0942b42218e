import pytest

import router
from models import ROLE_ADMIN, ROLE_USER


@pytest.mark.parametrize(
    "view,role,allowed",
    [
        (router.ADMIN, ROLE_ADMIN, True),
        (router.ADMIN, ROLE_USER, False),
        (router.ADMIN, None, False),
        (router.BUY_DATA, ROLE_USER, True),
        (router.BUY_DATA, ROLE_ADMIN, False),
        (router.HISTORY, ROLE_USER, True),
        (router.SETTINGS, ROLE_ADMIN, True),
        ("login", ROLE_ADMIN, False),
    ],
)
def test_can_access(view, role, allowed):
    assert router.can_access(view, role) is allowed


def test_resolve_falls_back_to_dashboard():
    assert router.resolve(router.ADMIN, ROLE_USER) == router.DASHBOARD
    assert router.resolve("nowhere", ROLE_ADMIN) == router.DASHBOARD
    assert router.resolve(router.HISTORY, ROLE_USER) == router.HISTORY


def test_nav_items_by_role():
    assert router.nav_items(ROLE_USER) == [router.DASHBOARD, router.BUY_DATA, router.HISTORY, router.SETTINGS]
    assert router.nav_items(ROLE_ADMIN) == [router.DASHBOARD, router.HISTORY, router.ADMIN, router.SETTINGS]
