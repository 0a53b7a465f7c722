from datetime import datetime, timedelta

from mongoengine import Q

import const
from orderhub.enums.order import CouponType
from orderhub.errors.exceptions import ValidationError
from orderhub.lib.identity import resolve_user_id
from orderhub.lib.logger import logger
from orderhub.models.coupon import Coupon
from orderhub.models.order import Order


class CouponService:

    @staticmethod
    def has_orders(user_id):
        return Order.objects(user_id=resolve_user_id(user_id)).first() is not None

    @staticmethod
    def usable_coupons(user_id, code=None, now=None):
        now = now or datetime.utcnow()
        query = Coupon.objects(
            Q(expires_at=None) | Q(expires_at__gt=now),
            user_id=resolve_user_id(user_id),
            is_used=False,
        )
        if code:
            query = query.filter(code=code.upper())
        return query

    @staticmethod
    def get_eligible_coupon(user_id):
        """Return the first-order coupon code if ``user_id`` can still use it."""
        if CouponService.has_orders(user_id):
            return None

        code = const.FIRST_ORDER_COUPON_CODE
        if CouponService.usable_coupons(user_id, code).first():
            return code

        coupon = Coupon(
            code=code,
            type=CouponType.FIXED.value,
            value=const.FIRST_ORDER_COUPON_VALUE,
            user_id=resolve_user_id(user_id),
            expires_at=datetime.utcnow() + timedelta(days=const.FIRST_ORDER_COUPON_DAYS),
        )
        coupon.save()
        logger.info(f"Issued {code} coupon to user {user_id}")
        return code

    @staticmethod
    def apply_coupon(user_id, code):
        if not code or not isinstance(code, str):
            raise ValidationError("Coupon code is required")

        code = code.strip().upper()
        coupon = CouponService.usable_coupons(user_id, code).first()
        if not coupon:
            raise ValidationError("Invalid or expired coupon")

        if code == const.FIRST_ORDER_COUPON_CODE and CouponService.has_orders(user_id):
            raise ValidationError("Coupon no longer valid")

        return {"code": coupon.code, "type": coupon.type, "value": coupon.value}

    @staticmethod
    def mark_coupon_used(user_id, code):
        """Flip ``is_used`` once; returns False when there was nothing to flip."""
        if not code:
            return False
        updated = Coupon.objects(
            user_id=resolve_user_id(user_id), code=code.upper(), is_used=False
        ).update_one(set__is_used=True, set__used_at=datetime.utcnow())
        return bool(updated)

    @staticmethod
    def remove_expired_coupons(now=None):
        now = now or datetime.utcnow()
        deleted = Coupon.objects(expires_at__lte=now).delete()
        if deleted:
            logger.info(f"Removed {deleted} expired coupons")
        return deleted
