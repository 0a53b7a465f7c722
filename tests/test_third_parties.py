import hashlib
import hmac

import pytest
import requests

from orderhub.errors.exceptions import PaymentGatewayError, ValidationError
from orderhub.third_parties import geocoder as geocoder_module
from orderhub.third_parties import razorpay as razorpay_module
from orderhub.third_parties.geocoder import NominatimGeocoder
from orderhub.third_parties.razorpay import RazorpayClient


class FakeResponse:
    def __init__(self, status_code=200, data=None, text=""):
        self.status_code = status_code
        self._data = data
        self.text = text

    def json(self):
        return self._data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(str(self.status_code))


@pytest.fixture
def razorpay():
    return RazorpayClient("rzp_test_key", "secret")


def test_signature_is_hmac_of_order_and_payment(razorpay):
    expected = hmac.new(b"secret", b"order_1|pay_1", hashlib.sha256).hexdigest()
    assert razorpay.signature_for("order_1", "pay_1") == expected
    assert razorpay.verify_signature("order_1", "pay_1", expected)
    assert not razorpay.verify_signature("order_1", "pay_2", expected)
    assert not razorpay.verify_signature("order_1", "pay_1", "")


def test_missing_credentials():
    with pytest.raises(PaymentGatewayError):
        RazorpayClient("", "").create_order(100, "ORD1")


def test_create_order_posts_amount_in_paise(razorpay, monkeypatch):
    sent = {}

    def fake_post(url, json=None, auth=None, timeout=None):
        sent.update(url=url, json=json, auth=auth)
        return FakeResponse(data={"id": "order_gw", "amount": json["amount"]})

    monkeypatch.setattr(razorpay_module.requests, "post", fake_post)

    assert razorpay.create_order(14375, "ORD1")["id"] == "order_gw"
    assert sent["url"] == "https://api.razorpay.com/v1/orders"
    assert sent["json"]["amount"] == 14375
    assert sent["json"]["currency"] == "INR"
    assert sent["auth"] == ("rzp_test_key", "secret")


def test_create_order_errors(razorpay, monkeypatch):
    with pytest.raises(ValidationError):
        razorpay.create_order(0, "ORD1")

    monkeypatch.setattr(
        razorpay_module.requests, "post", lambda *a, **k: FakeResponse(400, text="bad")
    )
    with pytest.raises(PaymentGatewayError):
        razorpay.create_order(100, "ORD1")

    def unreachable(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(razorpay_module.requests, "post", unreachable)
    with pytest.raises(PaymentGatewayError):
        razorpay.create_order(100, "ORD1")


def test_reverse_geocode(monkeypatch):
    data = {
        "address": {
            "house_number": "12",
            "road": "MG Road",
            "town": "Lonavala",
            "state": "Maharashtra",
            "postcode": "410401",
        }
    }
    monkeypatch.setattr(geocoder_module.requests, "get", lambda *a, **k: FakeResponse(data=data))

    assert NominatimGeocoder().reverse(18.75, 73.4) == {
        "house_no": "12",
        "street": "MG Road",
        "landmark": "",
        "city": "Lonavala",
        "state": "Maharashtra",
        "pincode": "410401",
    }


def test_forward_geocode(monkeypatch):
    monkeypatch.setattr(
        geocoder_module.requests,
        "get",
        lambda *a, **k: FakeResponse(data=[{"lat": "18.52", "lon": "73.85"}]),
    )
    assert NominatimGeocoder().forward("Pune") == {"latitude": 18.52, "longitude": 73.85}

    monkeypatch.setattr(geocoder_module.requests, "get", lambda *a, **k: FakeResponse(data=[]))
    assert NominatimGeocoder().forward("Nowhere") is None


def test_geocoder_failures_return_none(monkeypatch):
    monkeypatch.setattr(geocoder_module.requests, "get", lambda *a, **k: FakeResponse(500))
    assert NominatimGeocoder().reverse(0, 0) is None
    assert NominatimGeocoder().forward("x") is None
