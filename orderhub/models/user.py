from bson import ObjectId
from mongoengine import (
    BooleanField,
    EmbeddedDocumentListField,
    FloatField,
    ObjectIdField,
    StringField,
)

from orderhub.models.base_mongo import BaseDocument, BaseEmbeddedDocument


class Address(BaseEmbeddedDocument):
    id = ObjectIdField(default=ObjectId)
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


class User(BaseDocument):
    meta = {
        "collection": "users",
        "indexes": [{"fields": ["phone"], "unique": True, "name": "idx_phone_001"}],
    }

    phone = StringField(required=True, max_length=20)
    name = StringField(default=None)
    email = StringField(default=None)
    role = StringField(default="customer", choices=["customer", "admin", "rider"])
    profile_completed = BooleanField(default=False)
    addresses = EmbeddedDocumentListField(Address, default=list)

    def clean(self):
        self.normalize_default_address()

    def normalize_default_address(self):
        """Keep at most one default address, the first flagged one wins."""
        found = False
        for address in self.addresses:
            if address.is_default:
                if not found:
                    found = True
                else:
                    address.is_default = False
        if not found and self.addresses:
            self.addresses[0].is_default = True

    def find_address(self, address_id):
        if not address_id:
            return None
        for address in self.addresses:
            if str(address.id) == str(address_id):
                return address
        return None
