from datetime import datetime

from mongoengine import (
    BooleanField,
    DateTimeField,
    EmbeddedDocumentField,
    EmbeddedDocumentListField,
    FloatField,
    IntField,
    StringField,
    ValidationError,
)

from orderhub.enums.order import (
    FULFILLMENT_TYPES,
    ORDER_STATUSES,
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
    FulfillmentType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from orderhub.lib.identity import PartnerActor, UserActor
from orderhub.models.base_mongo import BaseDocument, BaseEmbeddedDocument


class OrderItem(BaseEmbeddedDocument):
    product_id = StringField(required=True)
    name = StringField(default=None)
    quantity = IntField(required=True, min_value=1)
    unit_price = FloatField(required=True, min_value=0)
    discount = FloatField(default=0, min_value=0)
    final_price = FloatField(required=True, min_value=0)
    image = StringField(default=None)
    category = StringField(default=None)
    # booking details carried by service items
    time = StringField(default=None)
    date = StringField(default=None)
    hour = StringField(default=None)
    suggestion = StringField(default=None)
    check_in = StringField(default=None)
    check_out = StringField(default=None)
    guests = IntField(default=None)


class OrderPricing(BaseEmbeddedDocument):
    subtotal = FloatField(required=True, min_value=0)
    delivery_fee = FloatField(required=True, min_value=0)
    coupon_discount = FloatField(default=0, min_value=0)
    tax = FloatField(required=True, min_value=0)
    grand_total = FloatField(required=True, min_value=0)


class OrderAddress(BaseEmbeddedDocument):
    label = StringField(default=None)
    house_no = StringField(default=None)
    street = StringField(default=None)
    landmark = StringField(default=None)
    city = StringField(default=None)
    state = StringField(default=None)
    pincode = StringField(default=None)
    latitude = FloatField(default=None)
    longitude = FloatField(default=None)
    is_default = BooleanField(default=False)
    contact_name = StringField(default=None)
    contact_phone = StringField(default=None)


class OrderPayment(BaseEmbeddedDocument):
    method = StringField(default=PaymentMethod.COD.value, choices=PAYMENT_METHODS)
    status = StringField(default=PaymentStatus.PENDING.value, choices=PAYMENT_STATUSES)
    transaction_id = StringField(default=None)
    gateway_order_id = StringField(default=None)


class OrderDelivery(BaseEmbeddedDocument):
    type = StringField(default="Instant")
    expected_time = DateTimeField(default=None)
    instructions = StringField(default=None)


class StatusActor(BaseEmbeddedDocument):
    user = StringField(default=None)
    partner = StringField(default=None)
    role = StringField(required=True)

    def clean(self):
        if bool(self.user) == bool(self.partner):
            raise ValidationError(
                "Status history entry must include exactly one of user or partner"
            )

    @classmethod
    def from_actor(cls, actor):
        if isinstance(actor, UserActor):
            return cls(user=str(actor.id), role=actor.role)
        if isinstance(actor, PartnerActor):
            return cls(partner=str(actor.id), role=actor.role)
        raise ValidationError("Invalid actor payload")


class StatusHistoryEntry(BaseEmbeddedDocument):
    status = StringField(required=True, choices=ORDER_STATUSES)
    updated_by = EmbeddedDocumentField(StatusActor, required=True)
    updated_at = DateTimeField(default=datetime.utcnow)


class Order(BaseDocument):
    meta = {
        "collection": "orders",
        "indexes": [
            {"fields": ["order_id"], "unique": True, "name": "idx_order_id_001"},
            {"fields": ["user_id"], "name": "idx_order_user_001"},
            {"fields": ["payment.gateway_order_id"], "name": "idx_gateway_order_001"},
            {"fields": ["category", "status"], "name": "idx_category_status_001"},
        ],
        "ordering": ["-created_at"],
    }

    order_id = StringField(required=True)
    user_id = StringField(required=True)
    category = StringField(default=None)
    fulfillment_type = StringField(
        default=FulfillmentType.DELIVERY.value, choices=FULFILLMENT_TYPES
    )
    service_partner_id = StringField(default=None)

    items = EmbeddedDocumentListField(OrderItem, required=True)
    pricing = EmbeddedDocumentField(OrderPricing, required=True)
    address = EmbeddedDocumentField(OrderAddress, required=True)
    payment = EmbeddedDocumentField(OrderPayment, required=True)
    delivery = EmbeddedDocumentField(OrderDelivery, required=True)

    coupon_code = StringField(default=None)

    status = StringField(default=OrderStatus.PENDING.value, choices=ORDER_STATUSES)
    status_history = EmbeddedDocumentListField(StatusHistoryEntry, default=list)

    version = IntField(default=1, min_value=1)

    def clean(self):
        if not self.items:
            raise ValidationError("Order must include items")

    @property
    def is_service_order(self):
        return self.fulfillment_type == FulfillmentType.SERVICE.value

    def latest_partner_id(self):
        for entry in reversed(self.status_history):
            if entry.updated_by and entry.updated_by.partner:
                return entry.updated_by.partner
        return None

    def serialize(self):
        data = self.to_json()
        if not data.get("category") and self.items:
            data["category"] = self.items[0].category
        return data
