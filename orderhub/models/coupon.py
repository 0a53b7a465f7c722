from datetime import datetime

from mongoengine import BooleanField, DateTimeField, FloatField, StringField

from orderhub.enums.order import COUPON_TYPES
from orderhub.models.base_mongo import BaseDocument


class Coupon(BaseDocument):
    meta = {
        "collection": "coupons",
        "indexes": [
            {"fields": ["user_id", "code"], "name": "idx_user_code_001"},
            {"fields": ["expires_at"], "name": "idx_expires_at_001"},
        ],
    }

    code = StringField(required=True, max_length=50)
    type = StringField(required=True, choices=COUPON_TYPES)
    value = FloatField(required=True, min_value=0)
    user_id = StringField(required=True)
    is_used = BooleanField(default=False)
    used_at = DateTimeField(default=None)
    expires_at = DateTimeField(default=None)

    def clean(self):
        if self.code:
            self.code = self.code.upper()

    def is_expired(self, now=None):
        now = now or datetime.utcnow()
        return self.expires_at is not None and self.expires_at <= now
