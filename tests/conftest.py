import mongomock
import pytest
from mongoengine import connect, disconnect

from orderhub import create_app
from orderhub.config import TestingConfig
from orderhub.lib.rooms import RoomRegistry
from orderhub.models.coupon import Coupon
from orderhub.models.order import Order
from orderhub.models.partner import Partner, ServicePartner
from orderhub.models.product import Product, Service
from orderhub.models.rating import OrderRating, RiderRating
from orderhub.models.user import Address, User
from orderhub.services.auth import (
    KIND_PARTNER,
    KIND_SERVICE_PARTNER,
    KIND_USER,
    AuthService,
)
from orderhub.services.order_events import OrderEventBus
from orderhub.services.order_lifecycle import OrderLifecycle

MODELS = (
    Order,
    User,
    Partner,
    ServicePartner,
    Product,
    Service,
    Coupon,
    OrderRating,
    RiderRating,
)


class RecordingEmitter:
    def __init__(self):
        self.calls = []

    def __call__(self, event, payload, to):
        self.calls.append((event, payload, to))

    def events_for(self, connection_id):
        return [event for event, _, to in self.calls if to == connection_id]


class FakeGateway:
    key_id = "rzp_test_key"

    def __init__(self, signature_ok=True):
        self.signature_ok = signature_ok
        self.created = []

    def create_order(self, amount, receipt, notes=None):
        self.created.append({"amount": amount, "receipt": receipt, "notes": notes})
        return {
            "id": f"order_gw_{len(self.created)}",
            "amount": amount,
            "currency": "INR",
            "receipt": receipt,
        }

    def verify_signature(self, gateway_order_id, payment_id, signature):
        return self.signature_ok and signature == "valid-signature"


@pytest.fixture(scope="session", autouse=True)
def mongo_connection():
    disconnect()
    connect(
        "orderhub_test",
        host="mongodb://localhost",
        mongo_client_class=mongomock.MongoClient,
    )
    yield
    disconnect()


@pytest.fixture(autouse=True)
def clean_collections(mongo_connection):
    yield
    for model in MODELS:
        model.drop_collection()


@pytest.fixture(scope="session")
def app(mongo_connection):
    return create_app(TestingConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def emitter():
    return RecordingEmitter()


@pytest.fixture
def registry(emitter):
    return RoomRegistry(emitter=emitter)


@pytest.fixture
def events(registry):
    return OrderEventBus(registry)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def lifecycle(events, gateway):
    return OrderLifecycle(events, payment_gateway=gateway)


@pytest.fixture
def customer():
    user = User(
        phone="9000000001",
        name="Asha",
        addresses=[
            Address(label="Home", street="MG Road", city="Pune", pincode="411001", is_default=True)
        ],
    )
    user.save()
    return user


@pytest.fixture
def other_customer():
    user = User(
        phone="9000000002",
        name="Ravi",
        addresses=[Address(label="Work", street="FC Road", city="Pune")],
    )
    user.save()
    return user


@pytest.fixture
def rider():
    partner = Partner(full_name="Rider One", phone_number="8000000001", role="rider")
    partner.save()
    return partner


@pytest.fixture
def picker():
    partner = Partner(full_name="Picker One", phone_number="8000000002", role="picker")
    partner.save()
    return partner


@pytest.fixture
def service_partner():
    partner = ServicePartner(
        name="Glow Salon",
        phone="7000000001",
        email="glow@example.com",
        category="Beauty",
    )
    partner.save()
    return partner


@pytest.fixture
def token_for(app):
    def make(kind, subject):
        with app.app_context():
            return AuthService.create_token(kind, str(subject))

    return make


@pytest.fixture
def auth_headers(token_for):
    def make(kind, subject):
        return {"Authorization": f"Bearer {token_for(kind, subject)}"}

    return make


@pytest.fixture
def customer_headers(auth_headers, customer):
    return auth_headers(KIND_USER, customer.pk)


@pytest.fixture
def rider_headers(auth_headers, rider):
    return auth_headers(KIND_PARTNER, rider.pk)


@pytest.fixture
def service_partner_headers(auth_headers, service_partner):
    return auth_headers(KIND_SERVICE_PARTNER, service_partner.pk)


def order_payload(**overrides):
    payload = {
        "items": [
            {"productId": "P1", "name": "Lipstick", "quantity": 2, "unitPrice": 50},
            {"productId": "P2", "name": "Kajal", "quantity": 1, "unitPrice": 25},
        ],
        "payment": {"method": "cod"},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_payload():
    return order_payload
