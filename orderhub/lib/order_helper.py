import re
import uuid
from datetime import datetime, timedelta

import const
from orderhub.enums.order import PAYMENT_METHOD_ALIASES, PaymentMethod, PaymentStatus
from orderhub.errors.exceptions import ValidationError
from orderhub.models.order import (
    OrderAddress,
    OrderDelivery,
    OrderItem,
    OrderPayment,
    OrderPricing,
)

DEFAULT_DELIVERY_FEE = 15
DEFAULT_TAX_RATE = 0.03

PRICING_FIELDS = ("subtotal", "delivery_fee", "coupon_discount", "tax", "grand_total")

# Request payloads come from JS clients, accept both spellings
FIELD_ALIASES = {
    "productId": "product_id",
    "unitPrice": "unit_price",
    "finalPrice": "final_price",
    "checkIn": "check_in",
    "checkOut": "check_out",
    "deliveryFee": "delivery_fee",
    "couponDiscount": "coupon_discount",
    "grandTotal": "grand_total",
    "expectedTime": "expected_time",
    "houseNo": "house_no",
    "isDefault": "is_default",
    "contactName": "contact_name",
    "contactPhone": "contact_phone",
    "transactionId": "transaction_id",
}

ITEM_EXTRA_FIELDS = (
    "name",
    "image",
    "category",
    "time",
    "date",
    "hour",
    "suggestion",
    "check_in",
    "check_out",
)


def normalize_keys(payload):
    if not payload:
        return {}
    return {FIELD_ALIASES.get(key, key): value for key, value in payload.items()}


def round_money(value):
    return round(float(value) + 0.0, 2)


def parse_amount(value, field, default=0.0):
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValidationError(f"Invalid amount for {field}")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid amount for {field}")
    if amount != amount or amount in (float("inf"), float("-inf")):
        raise ValidationError(f"Invalid amount for {field}")
    return amount


def to_text(value):
    if value is None or value == "":
        return None
    return str(value)


def generate_order_id(now=None):
    now = now or datetime.utcnow()
    stamp = now.strftime("%Y%m%d%H%M%S")
    suffix = uuid.uuid4().hex[:8].upper()
    return re.sub(r"[^A-Z0-9]", "", f"{const.ORDER_ID_PREFIX}{stamp}{suffix}")


def sanitize_items(items):
    if not isinstance(items, list) or len(items) == 0:
        raise ValidationError("Order items are required")

    sanitized = []
    for index, raw in enumerate(items):
        if not isinstance(raw, dict):
            raise ValidationError(f"Item {index} is invalid")
        item = normalize_keys(raw)

        product_id = item.get("product_id")
        if product_id is None or str(product_id).strip() == "":
            raise ValidationError(f"Item {index} is missing productId")

        quantity = parse_amount(item.get("quantity"), "quantity")
        if quantity < 1 or int(quantity) != quantity:
            raise ValidationError(f"Item {index} quantity must be a whole number >= 1")
        unit_price = parse_amount(item.get("unit_price"), "unitPrice")
        discount = parse_amount(item.get("discount"), "discount")
        if unit_price < 0 or discount < 0:
            raise ValidationError(f"Item {index} prices must not be negative")

        if item.get("final_price") is not None:
            final_price = parse_amount(item.get("final_price"), "finalPrice")
            if final_price < 0:
                raise ValidationError(f"Item {index} finalPrice must not be negative")
        else:
            final_price = max(quantity * unit_price - discount, 0)

        fields = {key: to_text(item.get(key)) for key in ITEM_EXTRA_FIELDS if item.get(key)}
        guests = parse_amount(item.get("guests"), "guests", default=None)
        if guests is not None and (guests < 0 or int(guests) != guests):
            raise ValidationError(f"Item {index} guests must be a whole number")
        sanitized.append(
            OrderItem(
                product_id=str(product_id),
                quantity=int(quantity),
                unit_price=unit_price,
                discount=discount,
                final_price=round_money(final_price),
                guests=int(guests) if guests is not None else None,
                **fields,
            )
        )
    return sanitized


def compute_pricing(
    items,
    override=None,
    delivery_fee=DEFAULT_DELIVERY_FEE,
    tax_rate=DEFAULT_TAX_RATE,
):
    override = normalize_keys(override)
    given = {}
    for field in PRICING_FIELDS:
        if override.get(field) is not None:
            value = parse_amount(override[field], field)
            if value < 0:
                raise ValidationError(f"{field} must not be negative")
            given[field] = value

    subtotal = given.get("subtotal", sum(item.final_price or 0 for item in items))
    fee = given.get("delivery_fee", delivery_fee)
    coupon_discount = given.get("coupon_discount", 0)
    tax = given.get("tax", round_money(subtotal * tax_rate))
    grand_total = given.get(
        "grand_total", max(round_money(subtotal + fee - coupon_discount + tax), 0)
    )
    return OrderPricing(
        subtotal=round_money(subtotal),
        delivery_fee=round_money(fee),
        coupon_discount=round_money(coupon_discount),
        tax=round_money(tax),
        grand_total=round_money(grand_total),
    )


def select_user_address(user, address_id=None):
    if user is None or not user.addresses:
        return None
    if address_id:
        target = user.find_address(address_id)
        if target is not None:
            return target
    for address in user.addresses:
        if address.is_default:
            return address
    return user.addresses[0]


def build_order_address(user, address, overrides=None):
    """Snapshot ``address`` for an order; the stored address is never touched."""
    if address is None:
        raise ValidationError("No address available for order")
    overrides = normalize_keys(overrides)

    latitude = overrides.get("latitude")
    longitude = overrides.get("longitude")
    is_default = overrides.get("is_default")
    return OrderAddress(
        label=address.label,
        house_no=address.house_no,
        street=address.street,
        landmark=address.landmark,
        city=address.city,
        state=address.state,
        pincode=address.pincode,
        latitude=latitude if isinstance(latitude, (int, float)) else address.latitude,
        longitude=longitude if isinstance(longitude, (int, float)) else address.longitude,
        is_default=is_default if isinstance(is_default, bool) else address.is_default,
        contact_name=to_text(overrides.get("contact_name"))
        or user.name
        or address.label
        or const.DEFAULT_CONTACT_NAME,
        contact_phone=to_text(overrides.get("contact_phone")) or user.phone or None,
    )


def normalize_payment_method(value):
    key = str(value or PaymentMethod.COD.value).strip().lower()
    return PAYMENT_METHOD_ALIASES.get(key, key)


def build_payment(method=PaymentMethod.COD.value, status=None, transaction_id=None, gateway_order_id=None):
    return OrderPayment(
        method=method,
        status=status or PaymentStatus.PENDING.value,
        transaction_id=transaction_id,
        gateway_order_id=gateway_order_id,
    )


def build_delivery(payload=None, now=None):
    payload = normalize_keys(payload)
    now = now or datetime.utcnow()
    expected_time = payload.get("expected_time")
    if isinstance(expected_time, str):
        try:
            expected_time = datetime.fromisoformat(expected_time.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError("Invalid expectedTime")
    if not isinstance(expected_time, datetime):
        expected_time = now + timedelta(minutes=const.DEFAULT_DELIVERY_MINUTES)
    return OrderDelivery(
        type=payload.get("type") or const.DEFAULT_DELIVERY_TYPE,
        expected_time=expected_time,
        instructions=payload.get("instructions") or None,
    )
