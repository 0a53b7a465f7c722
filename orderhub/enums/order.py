from enum import Enum


class OrderStatus(Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    ASSIGNED = "Assigned"
    OUT_FOR_DELIVERY = "OutForDelivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(Enum):
    PENDING = "Pending"
    DONE = "Done"
    CANCELLED = "Cancelled"
    FAILED = "Failed"


class PaymentMethod(Enum):
    COD = "cod"
    ONLINE = "online"


class FulfillmentType(Enum):
    DELIVERY = "delivery"
    SERVICE = "service"


class CouponType(Enum):
    FIRST_TIME = "FIRST_TIME"
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


# Ordered as the lifecycle goes
ORDER_STATUSES = [status.value for status in OrderStatus]
PAYMENT_STATUSES = [status.value for status in PaymentStatus]
PAYMENT_METHODS = [method.value for method in PaymentMethod]
FULFILLMENT_TYPES = [kind.value for kind in FulfillmentType]
COUPON_TYPES = [kind.value for kind in CouponType]

PAYMENT_METHOD_ALIASES = {
    "online": PaymentMethod.ONLINE.value,
    "razorpay": PaymentMethod.ONLINE.value,
    "prepaid": PaymentMethod.ONLINE.value,
    "cod": PaymentMethod.COD.value,
    "cash": PaymentMethod.COD.value,
    "cash_on_delivery": PaymentMethod.COD.value,
}
