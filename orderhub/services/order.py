from datetime import datetime

from bson import ObjectId
from mongoengine import Q
from mongoengine.errors import NotUniqueError, SaveConditionError

import const
from orderhub.enums.order import (
    PAYMENT_STATUSES,
    FulfillmentType,
    OrderStatus,
    PaymentStatus,
)
from orderhub.errors.exceptions import ConflictError, ValidationError
from orderhub.lib.identity import PartnerActor, UserActor, resolve_user_id
from orderhub.lib.logger import log_order_message
from orderhub.lib.order_helper import generate_order_id, sanitize_items
from orderhub.models.order import (
    Order,
    OrderItem,
    StatusActor,
    StatusHistoryEntry,
)
from orderhub.services.order_status import StatusPolicy


class OrderService:

    @staticmethod
    def create_order(
        user_id,
        items,
        pricing,
        address,
        payment,
        delivery,
        coupon_code=None,
        category=None,
        fulfillment_type=FulfillmentType.DELIVERY.value,
        order_id=None,
    ):
        if not items:
            raise ValidationError("Order items are required")
        if not all(isinstance(item, OrderItem) for item in items):
            items = sanitize_items(items)

        owner = resolve_user_id(user_id)
        if not owner:
            raise ValidationError("Order owner is required")

        now = datetime.utcnow()
        order_id = order_id or generate_order_id(now)
        for attempt in range(1, const.ORDER_ID_MAX_ATTEMPTS + 1):
            order = Order(
                order_id=order_id,
                user_id=owner,
                category=category or items[0].category,
                fulfillment_type=fulfillment_type,
                items=items,
                pricing=pricing,
                address=address,
                payment=payment,
                delivery=delivery,
                coupon_code=coupon_code or None,
                status=OrderStatus.PENDING.value,
                status_history=[
                    StatusHistoryEntry(
                        status=OrderStatus.PENDING.value,
                        updated_by=StatusActor(user=owner, role="customer"),
                        updated_at=now,
                    )
                ],
                version=1,
                created_at=now,
            )
            try:
                order.save()
                log_order_message(f"Created order {order.order_id} for user {owner}")
                return order
            except NotUniqueError:
                log_order_message(
                    f"Order id collision on {order_id} (attempt {attempt})", "WARNING"
                )
                order_id = generate_order_id()

        raise ConflictError("Could not allocate a unique order id")

    @staticmethod
    def find_order(order_id):
        if not order_id or not ObjectId.is_valid(str(order_id)):
            return None
        return Order.objects(pk=str(order_id)).first()

    @staticmethod
    def find_by_public_or_internal_id(order_ref):
        if not order_ref:
            return None
        order = OrderService.find_order(order_ref)
        if order:
            return order
        return Order.objects(order_id=str(order_ref)).first()

    @staticmethod
    def find_for_customer(user_id, order_ref):
        order = OrderService.find_by_public_or_internal_id(order_ref)
        if order and order.user_id == resolve_user_id(user_id):
            return order
        return None

    @staticmethod
    def find_by_gateway_order_id(gateway_order_id):
        if not gateway_order_id:
            return None
        return Order.objects(payment__gateway_order_id=gateway_order_id).first()

    @staticmethod
    def save_versioned(order):
        """Persist ``order`` only if nobody else wrote it since it was read."""
        expected = order.version or 1
        order.version = expected + 1
        try:
            order.save(save_condition={"version": expected})
        except SaveConditionError:
            order.version = expected
            raise ConflictError(
                "Order was modified by another request, reload and retry",
                payload={"order_id": order.order_id},
            )
        return order

    @staticmethod
    def change_status(order, new_status, actor, service_partner_id=None):
        if not StatusPolicy.is_valid_status(new_status):
            raise ValidationError(f"Invalid status: {new_status}")
        if not isinstance(actor, (UserActor, PartnerActor)) or not actor.id or not actor.role:
            raise ValidationError("Invalid actor payload")

        if new_status == order.status:
            return order

        if (
            new_status == OrderStatus.CANCELLED.value
            and order.payment.status != PaymentStatus.CANCELLED.value
        ):
            order.payment.status = PaymentStatus.CANCELLED.value

        if service_partner_id:
            order.service_partner_id = str(service_partner_id)

        order.status = new_status
        order.status_history.append(
            StatusHistoryEntry(
                status=new_status,
                updated_by=StatusActor.from_actor(actor),
                updated_at=datetime.utcnow(),
            )
        )
        OrderService.save_versioned(order)
        log_order_message(
            f"Order {order.order_id} moved to {new_status} by {actor.role}:{actor.id}"
        )
        return order

    @staticmethod
    def set_payment_status(order, status, transaction_id=None, method=None):
        if status not in PAYMENT_STATUSES:
            raise ValidationError(f"Invalid payment status: {status}")
        order.payment.status = status
        if transaction_id:
            order.payment.transaction_id = transaction_id
        if method:
            order.payment.method = method
        OrderService.save_versioned(order)
        log_order_message(f"Order {order.order_id} payment set to {status}")
        return order

    @staticmethod
    def list_for_customer(user_id):
        return Order.objects(user_id=resolve_user_id(user_id))

    @staticmethod
    def list_all(statuses=None):
        if statuses is None:
            return Order.objects()
        return Order.objects(status__in=list(statuses))

    @staticmethod
    def category_filter(category):
        return Q(category=category) | Q(items__category=category)

    @staticmethod
    def list_for_service_partner(partner_id, category):
        available = (
            OrderService.category_filter(category)
            & Q(fulfillment_type=FulfillmentType.SERVICE.value)
            & Q(status=OrderStatus.PENDING.value)
            & Q(service_partner_id=None)
        )
        return Order.objects(available | Q(service_partner_id=str(partner_id)))

    @staticmethod
    def list_assigned_to(partner_id):
        return Order.objects(service_partner_id=str(partner_id))
