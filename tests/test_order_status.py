import pytest

from orderhub.enums.order import ORDER_STATUSES
from orderhub.services.order_status import StatusPolicy


@pytest.mark.parametrize(
    "role,status,allowed",
    [
        ("picker", "Accepted", True),
        ("picker", "Assigned", True),
        ("picker", "Delivered", False),
        ("rider", "OutForDelivery", True),
        ("rider", "Delivered", True),
        ("rider", "Accepted", False),
        ("customer", "Cancelled", True),
        ("customer", "Delivered", False),
        ("Rider", "Delivered", True),
        (" ADMIN ", "Pending", True),
        ("stranger", "Cancelled", False),
        (None, "Cancelled", False),
    ],
)
def test_transition_table(role, status, allowed):
    assert StatusPolicy.is_transition_allowed(role, status) is allowed


def test_admin_may_set_every_status():
    assert StatusPolicy.allowed_statuses("admin") == set(ORDER_STATUSES)


def test_visible_statuses_per_role():
    assert StatusPolicy.visible_statuses("picker") == {"Pending", "Accepted", "Assigned"}
    assert StatusPolicy.visible_statuses("rider") == {"Assigned", "OutForDelivery", "Delivered"}
    assert StatusPolicy.visible_statuses("admin") == set(ORDER_STATUSES)


def test_is_valid_status():
    assert StatusPolicy.is_valid_status("OutForDelivery")
    assert not StatusPolicy.is_valid_status("Shipped")
    assert not StatusPolicy.is_valid_status("pending")
