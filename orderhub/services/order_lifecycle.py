"""
Order placement, payment and status orchestration.

Every write goes through ``OrderService`` and every visible side effect is a
room-scoped broadcast through the injected ``OrderEventBus``.
"""
from bson import ObjectId

import const
from orderhub.enums.order import (
    FULFILLMENT_TYPES,
    PAYMENT_METHODS,
    FulfillmentType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
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
    actor_for_identity,
    resolve_user_id,
)
from orderhub.lib.logger import log_order_message, log_payment_message
from orderhub.lib.order_helper import (
    build_delivery,
    build_order_address,
    build_payment,
    compute_pricing,
    generate_order_id,
    normalize_keys,
    normalize_payment_method,
    parse_amount,
    round_money,
    sanitize_items,
    select_user_address,
    to_text,
)
from orderhub.models.base_mongo import format_utc_datetime
from orderhub.models.product import Product, Service
from orderhub.models.user import Address, User
from orderhub.services.coupon import CouponService
from orderhub.services.order import OrderService
from orderhub.services.order_status import SERVICE_PARTNER_ALLOWED_STATUSES, StatusPolicy

PARTNER_PAYMENT_STATUSES = [PaymentStatus.PENDING.value, PaymentStatus.DONE.value]

ADDRESS_FIELDS = (
    "label",
    "house_no",
    "street",
    "landmark",
    "city",
    "state",
    "pincode",
)


def status_payload(order):
    return {"orderId": order.order_id, "status": order.status}


class OrderLifecycle:

    def __init__(self, events, payment_gateway=None, delivery_fee=15, tax_rate=0.03):
        self.events = events
        self.payment_gateway = payment_gateway
        self.delivery_fee = delivery_fee
        self.tax_rate = tax_rate

    @classmethod
    def from_config(cls, config, events, payment_gateway=None):
        return cls(
            events,
            payment_gateway=payment_gateway,
            delivery_fee=config.get("DEFAULT_DELIVERY_FEE", 15),
            tax_rate=config.get("DEFAULT_TAX_RATE", 0.03),
        )

    # ---- catalog lookups -------------------------------------------------

    @staticmethod
    def lookup_catalog(product_id):
        """Return ``(category, is_service)`` for a catalog id, best effort."""
        try:
            product = Product.objects(product_id=str(product_id)).first()
            if not product and ObjectId.is_valid(str(product_id)):
                product = Product.objects(pk=str(product_id)).first()
            if product:
                return product.category, False
            if ObjectId.is_valid(str(product_id)):
                service = Service.objects(pk=str(product_id)).first()
                if service:
                    return service.category, True
        except Exception as e:
            log_order_message(f"Category lookup failed for {product_id}: {e}", "WARNING")
        return None, False

    def resolve_categories(self, items):
        """Fill missing item categories and tell whether any item is a service."""
        resolved = None
        has_service = False
        for item in items:
            category, is_service = self.lookup_catalog(item.product_id)
            has_service = has_service or is_service
            if not item.category and category:
                item.category = category
            if item.category and not resolved:
                resolved = item.category
        return resolved, has_service

    # ---- placement -------------------------------------------------------

    @staticmethod
    def load_customer(identity):
        if not isinstance(identity, (CustomerIdentity, AdminIdentity)):
            raise AuthorizationError("Only customers can place orders")
        user = None
        if ObjectId.is_valid(str(identity.id)):
            user = User.objects(pk=str(identity.id)).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def resolve_address(user, payload):
        overrides = normalize_keys(payload.get("addressOverrides") or payload.get("address"))
        address = select_user_address(user, payload.get("addressId") or payload.get("address_id"))
        if address is None and overrides:
            # customers without an address book may send a full address inline
            address = Address(
                latitude=parse_amount(overrides.get("latitude"), "latitude", default=None),
                longitude=parse_amount(overrides.get("longitude"), "longitude", default=None),
                **{key: to_text(overrides.get(key)) for key in ADDRESS_FIELDS},
            )
        return build_order_address(user, address, overrides)

    def prepare_order(self, identity, payload):
        payload = payload or {}
        items = sanitize_items(payload.get("items"))
        user = self.load_customer(identity)

        resolved_category, has_service = self.resolve_categories(items)
        category = payload.get("category") or resolved_category or items[0].category

        fulfillment_type = payload.get("fulfillmentType") or payload.get("fulfillment_type")
        if fulfillment_type and fulfillment_type not in FULFILLMENT_TYPES:
            raise ValidationError(f"Unsupported fulfillment type: {fulfillment_type}")
        if has_service:
            fulfillment_type = FulfillmentType.SERVICE.value

        return {
            "user": user,
            "items": items,
            "category": category,
            "fulfillment_type": fulfillment_type or FulfillmentType.DELIVERY.value,
            "pricing": compute_pricing(
                items, payload.get("pricing"), self.delivery_fee, self.tax_rate
            ),
            "address": self.resolve_address(user, payload),
            "delivery": build_delivery(payload.get("delivery")),
            "coupon_code": (payload.get("couponCode") or payload.get("coupon_code") or None),
        }

    @staticmethod
    def payment_method_of(payload):
        method = normalize_payment_method(((payload or {}).get("payment") or {}).get("method"))
        if method not in PAYMENT_METHODS:
            raise ValidationError(f"Unsupported payment method: {method}")
        return method

    def create_from_draft(self, draft, payment, order_id=None):
        order = OrderService.create_order(
            draft["user"].pk,
            draft["items"],
            draft["pricing"],
            draft["address"],
            payment,
            draft["delivery"],
            coupon_code=draft["coupon_code"],
            category=draft["category"],
            fulfillment_type=draft["fulfillment_type"],
            order_id=order_id,
        )

        if draft["coupon_code"] and (draft["pricing"].coupon_discount or 0) > 0:
            try:
                CouponService.mark_coupon_used(order.user_id, draft["coupon_code"])
            except Exception as e:
                log_order_message(
                    f"Could not mark coupon {draft['coupon_code']} used for {order.order_id}: {e}",
                    "WARNING",
                )

        self.events.broadcast(
            const.EVENT_ORDERS_NEW, order.serialize(), order.user_id, order.category
        )
        return order

    def place_order(self, identity, payload):
        method = self.payment_method_of(payload)
        if method == PaymentMethod.ONLINE.value:
            raise ValidationError(
                "Online payments must be initiated through the payment endpoint"
            )
        draft = self.prepare_order(identity, payload)
        transaction_id = ((payload or {}).get("payment") or {}).get("transactionId")
        return self.create_from_draft(
            draft, build_payment(method=method, transaction_id=transaction_id)
        )

    def initiate_payment_order(self, identity, payload):
        """Create a cod order directly, or an online order plus its gateway order."""
        method = self.payment_method_of(payload)
        draft = self.prepare_order(identity, payload)

        if method == PaymentMethod.COD.value:
            order = self.create_from_draft(draft, build_payment(method=method))
            return {"order": order.serialize()}

        amount = round_money(draft["pricing"].grand_total)
        if amount <= 0:
            raise ValidationError("Invalid payable amount for online payment")
        amount_in_paise = int(round(amount * 100))
        if amount_in_paise <= 0:
            raise ValidationError("Invalid payable amount for online payment")
        if self.payment_gateway is None:
            raise ValidationError("Online payments are not configured")

        order_id = generate_order_id()
        gateway_order = self.payment_gateway.create_order(
            amount_in_paise,
            receipt=order_id,
            notes={"userId": str(draft["user"].pk), "paymentMethod": method},
        )
        order = self.create_from_draft(
            draft,
            build_payment(method=method, gateway_order_id=gateway_order.get("id")),
            order_id=order_id,
        )
        log_payment_message(
            f"Order {order.order_id} awaiting payment on {gateway_order.get('id')}"
        )
        return {
            "order": order.serialize(),
            "gateway_order": {
                "id": gateway_order.get("id"),
                "amount": gateway_order.get("amount"),
                "currency": gateway_order.get("currency"),
                "receipt": gateway_order.get("receipt"),
            },
            "key_id": self.payment_gateway.key_id,
        }

    def verify_online_payment(self, identity, payload):
        payload = payload or {}
        gateway_order_id = payload.get("razorpay_order_id") or payload.get("gatewayOrderId")
        payment_id = payload.get("razorpay_payment_id") or payload.get("paymentId")
        signature = payload.get("razorpay_signature") or payload.get("signature")
        if not gateway_order_id or not payment_id or not signature:
            raise ValidationError("Payment verification data is incomplete")
        if self.payment_gateway is None:
            raise PaymentVerificationError("Online payments are not configured")

        if not self.payment_gateway.verify_signature(gateway_order_id, payment_id, signature):
            log_payment_message(
                f"Signature mismatch for gateway order {gateway_order_id}", "WARNING"
            )
            raise PaymentVerificationError("Invalid payment signature")

        order = OrderService.find_by_gateway_order_id(gateway_order_id)
        if not order:
            raise NotFoundError("Order not found for the provided gateway order id")
        if order.user_id != resolve_user_id(identity.id):
            raise AuthorizationError("You are not authorized to verify this payment")

        if order.payment.status != PaymentStatus.DONE.value:
            OrderService.set_payment_status(
                order,
                PaymentStatus.DONE.value,
                transaction_id=payment_id,
                method=PaymentMethod.ONLINE.value,
            )
            log_payment_message(f"Payment {payment_id} verified for {order.order_id}")

        broadcast_payload = status_payload(order)
        broadcast_payload.update(
            {
                "paymentStatus": order.payment.status,
                "transactionId": order.payment.transaction_id,
            }
        )
        self.events.broadcast(
            const.EVENT_ORDERS_STATUS, broadcast_payload, order.user_id, order.category
        )
        return order

    # ---- status changes --------------------------------------------------

    @staticmethod
    def ensure_fulfillment_scope(identity, order):
        if isinstance(identity, PartnerIdentity) and order.is_service_order:
            raise AuthorizationError("Service orders are handled by service partners")
        if isinstance(identity, ServicePartnerIdentity) and not order.is_service_order:
            raise AuthorizationError("Delivery orders are handled by delivery partners")

    def apply_status(self, order, status, identity, service_partner_id=None):
        OrderService.change_status(
            order, status, actor_for_identity(identity), service_partner_id=service_partner_id
        )
        self.events.broadcast(
            const.EVENT_ORDERS_STATUS, status_payload(order), order.user_id, order.category
        )
        return order

    def change_order_status(self, identity, order_ref, status):
        if not StatusPolicy.is_valid_status(status):
            raise ValidationError("Invalid status")
        if isinstance(identity, ServicePartnerIdentity):
            return self.service_partner_update_status(identity, order_ref, status)

        order = OrderService.find_by_public_or_internal_id(order_ref)
        if not order:
            raise NotFoundError("Order not found")
        if not StatusPolicy.is_transition_allowed(identity.role, status):
            raise AuthorizationError("Not allowed to set this status")
        if isinstance(identity, CustomerIdentity) and order.user_id != identity.id:
            raise AuthorizationError("You can only update your own orders")
        self.ensure_fulfillment_scope(identity, order)
        return self.apply_status(order, status, identity)

    def cancel_customer_order(self, identity, order_ref):
        order = OrderService.find_for_customer(identity.id, order_ref)
        if not order:
            raise NotFoundError("Order not found")
        if not StatusPolicy.is_transition_allowed("customer", OrderStatus.CANCELLED.value):
            raise AuthorizationError("Not allowed to cancel the order")
        return self.apply_status(
            order, OrderStatus.CANCELLED.value, CustomerIdentity(id=identity.id)
        )

    def service_partner_update_status(self, identity, order_ref, status):
        if status not in SERVICE_PARTNER_ALLOWED_STATUSES:
            raise ValidationError("Invalid status for service partner")
        order = OrderService.find_by_public_or_internal_id(order_ref)
        if not order:
            raise NotFoundError("Order not found")
        self.ensure_fulfillment_scope(identity, order)

        if status == OrderStatus.ACCEPTED.value:
            categories = {order.category} | {item.category for item in order.items}
            if not identity.category or identity.category not in categories:
                raise AuthorizationError("Order is outside your category")
            if order.status != OrderStatus.PENDING.value or order.service_partner_id:
                raise ValidationError("Order already processed")
            return self.apply_status(order, status, identity, service_partner_id=identity.id)

        if order.service_partner_id != str(identity.id):
            raise AuthorizationError("Not authorized to update this order")
        return self.apply_status(order, status, identity)

    def update_payment_status(self, identity, order_ref, payment_status):
        if payment_status not in PARTNER_PAYMENT_STATUSES:
            raise ValidationError("Invalid payment status. Must be Pending or Done")
        order = OrderService.find_by_public_or_internal_id(order_ref)
        if not order:
            raise NotFoundError("Order not found")
        self.ensure_fulfillment_scope(identity, order)
        if (
            order.payment.method not in PAYMENT_METHODS
            or order.payment.status != PaymentStatus.PENDING.value
        ):
            raise ValidationError(
                "Payment status can only be updated while the payment is pending"
            )

        OrderService.set_payment_status(order, payment_status)
        self.events.broadcast(
            const.EVENT_ORDERS_PAYMENT_STATUS,
            {"orderId": order.order_id, "paymentStatus": order.payment.status},
            order.user_id,
            order.category,
        )
        return order

    # ---- read side -------------------------------------------------------

    @staticmethod
    def orders_for_identity(identity):
        if isinstance(identity, CustomerIdentity):
            return OrderService.list_for_customer(identity.id)
        if isinstance(identity, ServicePartnerIdentity):
            if not identity.category:
                return OrderService.list_assigned_to(identity.id)
            return OrderService.list_for_service_partner(identity.id, identity.category)
        if isinstance(identity, PartnerIdentity):
            role = StatusPolicy.role_key(identity.role)
            if role in ("rider", "picker"):
                return OrderService.list_all(StatusPolicy.visible_statuses(role))
            return OrderService.list_all()
        if isinstance(identity, AdminIdentity):
            return OrderService.list_all()
        return OrderService.list_all([])

    def join_and_snapshot(self, connection_id, identity):
        """Subscribe ``connection_id`` to its rooms and push ``orders:init``."""
        rooms = self.events.join_rooms_for_identity(connection_id, identity)
        orders = list(self.orders_for_identity(identity))
        self.events.send_snapshot(connection_id, orders)
        return rooms, orders

    @staticmethod
    def service_partner_stats(identity):
        pending = 0
        if identity.category:
            pending = (
                OrderService.list_for_service_partner(identity.id, identity.category)
                .filter(status=OrderStatus.PENDING.value, service_partner_id=None)
                .count()
            )
        assigned = OrderService.list_assigned_to(identity.id)
        accepted = assigned.filter(
            status__nin=[OrderStatus.CANCELLED.value, OrderStatus.PENDING.value]
        ).count()
        rejected = assigned.filter(status=OrderStatus.CANCELLED.value).count()
        return {
            "pending": pending,
            "accepted": accepted,
            "rejected": rejected,
            "totalAssigned": accepted + rejected,
        }

    @staticmethod
    def service_partner_payments(identity):
        summary = {"pending": 0, "complete": 0, "failed": 0}
        payments = []
        for order in OrderService.list_assigned_to(identity.id):
            amount = order.pricing.grand_total or 0
            if order.payment.status == PaymentStatus.DONE.value:
                summary["complete"] += amount
            elif order.payment.status == PaymentStatus.FAILED.value:
                summary["failed"] += amount
            else:
                summary["pending"] += amount
            payments.append(
                {
                    "orderId": order.order_id,
                    "amount": amount,
                    "method": order.payment.method,
                    "status": order.payment.status,
                    "date": format_utc_datetime(order.created_at),
                }
            )
        return {
            "summary": {key: round_money(value) for key, value in summary.items()},
            "payments": payments,
        }
