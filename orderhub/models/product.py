from mongoengine import DictField, FloatField, ListField, StringField

from orderhub.models.base_mongo import BaseDocument


class Product(BaseDocument):
    meta = {
        "collection": "products",
        "indexes": [
            {"fields": ["product_id"], "name": "idx_product_id_001"},
            {"fields": ["category"], "name": "idx_product_category_001"},
        ],
    }

    product_id = StringField(default=None)
    name = StringField(required=True)
    description = StringField(default="")
    category = StringField(default=None)
    sub_category = StringField(default=None)
    brand = StringField(default=None)
    images = ListField(DictField(), default=list)
    price = DictField(default=dict)
    ratings = DictField(default=dict)
    tags = ListField(StringField(), default=list)
    status = StringField(default="active")

    @property
    def selling_price(self):
        price = self.price or {}
        return price.get("selling_price", price.get("mrp"))

    @property
    def average_rating(self):
        return (self.ratings or {}).get("average_rating", 0)


class Service(BaseDocument):
    meta = {"collection": "services"}

    name = StringField(required=True)
    price = FloatField(default=0)
    description = StringField(default="")
    category = StringField(required=True)
    time = StringField(default=None)
    date = StringField(default=None)
    hour = StringField(default=None)
