import pytest

from orderhub.errors.exceptions import (
    AuthorizationError,
    NotFoundError,
    PaymentVerificationError,
    ValidationError,
)
from orderhub.lib.identity import (
    AdminIdentity,
    CustomerIdentity,
    PartnerIdentity,
    ServicePartnerIdentity,
)
from orderhub.models.coupon import Coupon
from orderhub.models.order import Order
from orderhub.models.product import Product, Service
from orderhub.models.user import User
from orderhub.services.coupon import CouponService


def identity_of(user):
    return CustomerIdentity(id=str(user.pk))


def rider_identity(rider):
    return PartnerIdentity(id=str(rider.pk), role="rider")


def salon_identity(partner):
    return ServicePartnerIdentity(id=str(partner.pk), category=partner.category)


@pytest.fixture
def salon_service():
    service = Service(name="Haircut", price=300, category="Beauty")
    service.save()
    return service


@pytest.fixture
def service_order(lifecycle, customer, salon_service):
    payload = {
        "items": [{"productId": str(salon_service.pk), "quantity": 1, "unitPrice": 300}],
        "payment": {"method": "cod"},
    }
    return lifecycle.place_order(identity_of(customer), payload)


def test_place_cod_order(lifecycle, customer, make_payload, events, emitter):
    events.join_rooms_for_identity("owner", identity_of(customer))
    events.join_rooms_for_identity("staff", AdminIdentity(id="a1"))

    order = lifecycle.place_order(identity_of(customer), make_payload())

    assert order.status == "Pending"
    assert order.payment.method == "cod"
    assert order.payment.status == "Pending"
    assert order.pricing.subtotal == 125
    assert order.pricing.grand_total == 143.75
    assert order.address.city == "Pune"
    assert order.address.contact_name == "Asha"
    assert order.fulfillment_type == "delivery"
    assert emitter.events_for("owner") == ["orders:new"]
    assert emitter.events_for("staff") == ["orders:new"]


def test_place_order_never_touches_address_book(lifecycle, customer, make_payload):
    lifecycle.place_order(
        identity_of(customer),
        make_payload(addressOverrides={"contactName": "Gate", "latitude": 18.5}),
    )
    stored = User.objects.get(pk=customer.pk)
    assert stored.addresses[0].latitude is None
    assert len(stored.addresses) == 1


def test_inline_address_for_users_without_one(lifecycle, make_payload):
    user = User(phone="9111111111", name="New")
    user.save()

    order = lifecycle.place_order(
        identity_of(user), make_payload(address={"street": "Park St", "city": "Kolkata"})
    )
    assert order.address.city == "Kolkata"

    with pytest.raises(ValidationError):
        lifecycle.place_order(identity_of(user), make_payload())


def test_inline_address_accepts_numeric_values(lifecycle, make_payload):
    user = User(phone="9111111112", name="Numeric")
    user.save()

    order = lifecycle.place_order(
        identity_of(user),
        make_payload(
            address={"city": "Pune", "pincode": 411001, "latitude": "18.52", "contactPhone": 9876543210}
        ),
    )
    assert order.address.pincode == "411001"
    assert order.address.latitude == 18.52
    assert order.address.contact_phone == "9876543210"

    with pytest.raises(ValidationError):
        lifecycle.place_order(
            identity_of(user), make_payload(address={"city": "Pune", "latitude": "north"})
        )


def test_category_is_resolved_from_catalog(lifecycle, customer):
    Product(product_id="SKU1", name="Kajal", category="Beauty").save()
    order = lifecycle.place_order(
        identity_of(customer),
        {"items": [{"productId": "SKU1", "quantity": 1, "unitPrice": 10}]},
    )
    assert order.category == "Beauty"
    assert order.items[0].category == "Beauty"


def test_service_items_make_a_service_order(service_order):
    assert service_order.fulfillment_type == "service"
    assert service_order.category == "Beauty"


def test_online_orders_must_use_payment_flow(lifecycle, customer, make_payload):
    with pytest.raises(ValidationError):
        lifecycle.place_order(identity_of(customer), make_payload(payment={"method": "online"}))
    assert Order.objects.count() == 0


def test_only_customers_place_orders(lifecycle, rider, make_payload):
    with pytest.raises(AuthorizationError):
        lifecycle.place_order(rider_identity(rider), make_payload())


def test_unknown_payment_method(lifecycle, customer, make_payload):
    with pytest.raises(ValidationError):
        lifecycle.place_order(identity_of(customer), make_payload(payment={"method": "barter"}))


def test_initiate_online_payment(lifecycle, customer, make_payload, gateway):
    result = lifecycle.initiate_payment_order(
        identity_of(customer), make_payload(payment={"method": "online"})
    )

    order = Order.objects.get(order_id=result["order"]["order_id"])
    assert gateway.created[0]["amount"] == 14375
    assert gateway.created[0]["receipt"] == order.order_id
    assert result["gateway_order"]["receipt"] == order.order_id
    assert result["key_id"] == "rzp_test_key"
    assert order.payment.method == "online"
    assert order.payment.status == "Pending"
    assert order.payment.gateway_order_id == "order_gw_1"


def test_initiate_cod_payment_skips_gateway(lifecycle, customer, make_payload, gateway):
    result = lifecycle.initiate_payment_order(identity_of(customer), make_payload())
    assert set(result) == {"order"}
    assert gateway.created == []


def test_zero_total_online_payment_rejected(lifecycle, customer, make_payload, gateway):
    payload = make_payload(payment={"method": "online"}, pricing={"grandTotal": 0})
    with pytest.raises(ValidationError):
        lifecycle.initiate_payment_order(identity_of(customer), payload)
    assert gateway.created == []
    assert Order.objects.count() == 0


def test_verify_online_payment(lifecycle, customer, make_payload, events, emitter):
    result = lifecycle.initiate_payment_order(
        identity_of(customer), make_payload(payment={"method": "online"})
    )
    events.join_rooms_for_identity("owner", identity_of(customer))
    payload = {
        "razorpay_order_id": result["gateway_order"]["id"],
        "razorpay_payment_id": "pay_123",
        "razorpay_signature": "valid-signature",
    }

    order = lifecycle.verify_online_payment(identity_of(customer), payload)
    assert order.payment.status == "Done"
    assert order.payment.transaction_id == "pay_123"

    again = lifecycle.verify_online_payment(identity_of(customer), payload)
    assert again.version == order.version
    status_events = [call for call in emitter.calls if call[0] == "orders:status"]
    assert len(status_events) == 2
    assert status_events[0][1]["paymentStatus"] == "Done"
    assert status_events[0][1]["transactionId"] == "pay_123"


def test_verify_rejects_bad_signature_and_strangers(
    lifecycle, customer, other_customer, make_payload
):
    result = lifecycle.initiate_payment_order(
        identity_of(customer), make_payload(payment={"method": "online"})
    )
    payload = {
        "razorpay_order_id": result["gateway_order"]["id"],
        "razorpay_payment_id": "pay_123",
        "razorpay_signature": "forged",
    }
    with pytest.raises(PaymentVerificationError):
        lifecycle.verify_online_payment(identity_of(customer), payload)

    payload["razorpay_signature"] = "valid-signature"
    with pytest.raises(AuthorizationError):
        lifecycle.verify_online_payment(identity_of(other_customer), payload)

    payload["razorpay_order_id"] = "order_unknown"
    with pytest.raises(NotFoundError):
        lifecycle.verify_online_payment(identity_of(customer), payload)

    with pytest.raises(ValidationError):
        lifecycle.verify_online_payment(identity_of(customer), {"razorpay_order_id": "x"})


def test_first_order_coupon_is_marked_used_once(lifecycle, customer, make_payload):
    assert CouponService.get_eligible_coupon(customer.pk) == "FIRST20"

    lifecycle.place_order(
        identity_of(customer),
        make_payload(couponCode="FIRST20", pricing={"couponDiscount": 20}),
    )
    coupon = Coupon.objects.get(user_id=str(customer.pk), code="FIRST20")
    assert coupon.is_used
    used_at = coupon.used_at

    assert CouponService.mark_coupon_used(customer.pk, "FIRST20") is False
    assert Coupon.objects.get(pk=coupon.pk).used_at == used_at
    assert CouponService.get_eligible_coupon(customer.pk) is None


def test_coupon_without_discount_is_not_consumed(lifecycle, customer, make_payload):
    CouponService.get_eligible_coupon(customer.pk)
    lifecycle.place_order(identity_of(customer), make_payload(couponCode="FIRST20"))
    assert not Coupon.objects.get(user_id=str(customer.pk)).is_used


def test_rider_moves_order_and_everyone_hears(lifecycle, customer, rider, make_payload, events, emitter):
    order = lifecycle.place_order(identity_of(customer), make_payload())
    events.join_rooms_for_identity("owner", identity_of(customer))
    events.join_rooms_for_identity("rider", rider_identity(rider))

    lifecycle.change_order_status(rider_identity(rider), order.order_id, "OutForDelivery")

    stored = Order.objects.get(pk=order.pk)
    assert stored.status == "OutForDelivery"
    assert stored.status_history[-1].updated_by.partner == str(rider.pk)
    payloads = [payload for event, payload, to in emitter.calls if event == "orders:status"]
    assert payloads == [{"orderId": order.order_id, "status": "OutForDelivery"}] * 2


def test_status_policy_is_enforced(lifecycle, customer, other_customer, picker, make_payload):
    order = lifecycle.place_order(identity_of(customer), make_payload())
    picker_identity = PartnerIdentity(id=str(picker.pk), role="picker")

    with pytest.raises(AuthorizationError):
        lifecycle.change_order_status(picker_identity, order.order_id, "Delivered")
    with pytest.raises(AuthorizationError):
        lifecycle.change_order_status(identity_of(customer), order.order_id, "Delivered")
    with pytest.raises(AuthorizationError):
        lifecycle.change_order_status(identity_of(other_customer), order.order_id, "Cancelled")
    with pytest.raises(ValidationError):
        lifecycle.change_order_status(picker_identity, order.order_id, "Lost")
    with pytest.raises(NotFoundError):
        lifecycle.change_order_status(picker_identity, "ORDMISSING", "Accepted")

    lifecycle.change_order_status(picker_identity, order.order_id, "Accepted")
    assert Order.objects.get(pk=order.pk).status == "Accepted"


def test_customer_cancel(lifecycle, customer, other_customer, make_payload):
    order = lifecycle.place_order(identity_of(customer), make_payload())

    with pytest.raises(NotFoundError):
        lifecycle.cancel_customer_order(identity_of(other_customer), order.order_id)

    cancelled = lifecycle.cancel_customer_order(identity_of(customer), order.order_id)
    assert cancelled.status == "Cancelled"
    assert cancelled.payment.status == "Cancelled"
    assert cancelled.status_history[-1].updated_by.user == str(customer.pk)


def test_delivery_partners_cannot_touch_service_orders(lifecycle, service_order, rider):
    with pytest.raises(AuthorizationError):
        lifecycle.change_order_status(rider_identity(rider), service_order.order_id, "OutForDelivery")


def test_service_partner_accept_flow(lifecycle, service_order, service_partner, events, emitter):
    salon = salon_identity(service_partner)
    events.join_rooms_for_identity("salon", salon)

    accepted = lifecycle.service_partner_update_status(salon, service_order.order_id, "Accepted")
    assert accepted.status == "Accepted"
    assert accepted.service_partner_id == str(service_partner.pk)
    assert emitter.events_for("salon") == ["orders:status"]

    with pytest.raises(ValidationError):
        lifecycle.service_partner_update_status(salon, service_order.order_id, "Accepted")

    done = lifecycle.change_order_status(salon, service_order.order_id, "Delivered")
    assert done.status == "Delivered"


def test_service_partner_guards(lifecycle, service_order, customer, make_payload):
    other_category = ServicePartnerIdentity(id="5f0000000000000000000001", category="Grocery")
    with pytest.raises(AuthorizationError):
        lifecycle.service_partner_update_status(other_category, service_order.order_id, "Accepted")

    stranger = ServicePartnerIdentity(id="5f0000000000000000000002", category="Beauty")
    with pytest.raises(AuthorizationError):
        lifecycle.service_partner_update_status(stranger, service_order.order_id, "Delivered")

    with pytest.raises(ValidationError):
        lifecycle.service_partner_update_status(stranger, service_order.order_id, "Assigned")

    delivery_order = lifecycle.place_order(identity_of(customer), make_payload())
    with pytest.raises(AuthorizationError):
        lifecycle.service_partner_update_status(stranger, delivery_order.order_id, "Accepted")


def test_service_partner_views(lifecycle, service_order, service_partner):
    salon = salon_identity(service_partner)

    visible = list(lifecycle.orders_for_identity(salon))
    assert [order.order_id for order in visible] == [service_order.order_id]
    assert lifecycle.service_partner_stats(salon) == {
        "pending": 1,
        "accepted": 0,
        "rejected": 0,
        "totalAssigned": 0,
    }

    lifecycle.service_partner_update_status(salon, service_order.order_id, "Accepted")
    assert lifecycle.service_partner_stats(salon) == {
        "pending": 0,
        "accepted": 1,
        "rejected": 0,
        "totalAssigned": 1,
    }

    payments = lifecycle.service_partner_payments(salon)
    assert payments["summary"] == {"pending": 324.0, "complete": 0, "failed": 0}
    assert payments["payments"][0]["orderId"] == service_order.order_id
    assert payments["payments"][0]["date"].endswith("Z")


def test_partner_payment_status_update(lifecycle, customer, rider, make_payload, events, emitter):
    order = lifecycle.place_order(identity_of(customer), make_payload())
    events.join_rooms_for_identity("owner", identity_of(customer))

    with pytest.raises(ValidationError):
        lifecycle.update_payment_status(rider_identity(rider), order.order_id, "Failed")

    updated = lifecycle.update_payment_status(rider_identity(rider), order.order_id, "Done")
    assert updated.payment.status == "Done"
    assert emitter.calls[-1] == (
        "orders:payment-status",
        {"orderId": order.order_id, "paymentStatus": "Done"},
        "owner",
    )

    with pytest.raises(ValidationError):
        lifecycle.update_payment_status(rider_identity(rider), order.order_id, "Pending")


def test_orders_for_identity_scoping(lifecycle, customer, other_customer, rider, make_payload):
    mine = lifecycle.place_order(identity_of(customer), make_payload())
    theirs = lifecycle.place_order(identity_of(other_customer), make_payload())
    lifecycle.change_order_status(AdminIdentity(id="a1"), theirs.order_id, "Assigned")

    assert [o.order_id for o in lifecycle.orders_for_identity(identity_of(customer))] == [
        mine.order_id
    ]
    assert [o.order_id for o in lifecycle.orders_for_identity(rider_identity(rider))] == [
        theirs.order_id
    ]
    assert len(list(lifecycle.orders_for_identity(AdminIdentity(id="a1")))) == 2


def test_join_and_snapshot(lifecycle, customer, make_payload, emitter):
    order = lifecycle.place_order(identity_of(customer), make_payload())

    rooms, orders = lifecycle.join_and_snapshot("c1", identity_of(customer))

    assert rooms == [f"user:{customer.pk}"]
    event, payload, to = emitter.calls[-1]
    assert (event, to) == ("orders:init", "c1")
    assert [item["order_id"] for item in payload] == [order.order_id]
