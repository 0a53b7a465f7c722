from mongoengine import BooleanField, FloatField, StringField

from orderhub.models.base_mongo import BaseDocument

ALLOWED_ROLES = ["rider", "admin", "picker"]


class Partner(BaseDocument):
    meta = {
        "collection": "partners",
        "indexes": [
            {"fields": ["phone_number"], "unique": True, "name": "idx_phone_number_001"}
        ],
    }

    full_name = StringField(required=True)
    phone_number = StringField(required=True)
    city = StringField(default="")
    vehicle_type = StringField(default="")
    vehicle_number = StringField(default="")
    role = StringField(default="rider", choices=ALLOWED_ROLES)
    is_active = BooleanField(default=True)
    average_rating = FloatField(default=0, min_value=0, max_value=5)


class ServicePartner(BaseDocument):
    meta = {
        "collection": "service_partners",
        "indexes": [
            {"fields": ["phone"], "unique": True, "name": "idx_sp_phone_001"},
            {"fields": ["category"], "name": "idx_sp_category_001"},
        ],
    }

    name = StringField(required=True)
    phone = StringField(required=True)
    email = StringField(required=True)
    city = StringField(default="")
    state = StringField(default="")
    category = StringField(required=True)
    is_active = BooleanField(default=True)
