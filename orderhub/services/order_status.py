from orderhub.enums.order import OrderStatus, ORDER_STATUSES

PICKER_ALLOWED_STATUSES = [
    OrderStatus.ACCEPTED.value,
    OrderStatus.ASSIGNED.value,
]
RIDER_ALLOWED_STATUSES = [
    OrderStatus.OUT_FOR_DELIVERY.value,
    OrderStatus.DELIVERED.value,
]

ROLE_ALLOWED_STATUS_MAP = {
    "picker": PICKER_ALLOWED_STATUSES,
    "rider": RIDER_ALLOWED_STATUSES,
    "admin": ORDER_STATUSES,
    "customer": [OrderStatus.CANCELLED.value],
}

# Category-scoped service partners go through their own flow, not the table above
SERVICE_PARTNER_ALLOWED_STATUSES = [
    OrderStatus.ACCEPTED.value,
    OrderStatus.OUT_FOR_DELIVERY.value,
    OrderStatus.DELIVERED.value,
    OrderStatus.CANCELLED.value,
]


class StatusPolicy:

    @staticmethod
    def role_key(role):
        return str(role or "").strip().lower()

    @staticmethod
    def allowed_statuses(role):
        return set(ROLE_ALLOWED_STATUS_MAP.get(StatusPolicy.role_key(role), []))

    @staticmethod
    def is_transition_allowed(role, status):
        return status in StatusPolicy.allowed_statuses(role)

    @staticmethod
    def visible_statuses(role):
        role_key = StatusPolicy.role_key(role)
        if role_key == "picker":
            return {OrderStatus.PENDING.value, *PICKER_ALLOWED_STATUSES}
        if role_key == "rider":
            return {OrderStatus.ASSIGNED.value, *RIDER_ALLOWED_STATUSES}
        return set(ORDER_STATUSES)

    @staticmethod
    def is_valid_status(status):
        return status in ORDER_STATUSES
