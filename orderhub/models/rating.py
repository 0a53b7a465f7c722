from mongoengine import IntField, StringField

from orderhub.models.base_mongo import BaseDocument


class OrderRating(BaseDocument):
    meta = {
        "collection": "order_ratings",
        "indexes": [
            {"fields": ["order", "user"], "unique": True, "name": "idx_order_user_001"}
        ],
    }

    order = StringField(required=True)
    user = StringField(required=True)
    rating = IntField(required=True, min_value=1, max_value=5)
    review_text = StringField(default="")


class RiderRating(BaseDocument):
    meta = {
        "collection": "rider_ratings",
        "indexes": [
            {"fields": ["order", "user"], "unique": True, "name": "idx_order_user_002"},
            {"fields": ["rider"], "name": "idx_rider_001"},
        ],
    }

    order = StringField(required=True)
    rider = StringField(required=True)
    user = StringField(required=True)
    rating = IntField(required=True, min_value=1, max_value=5)
    review_text = StringField(default="")
