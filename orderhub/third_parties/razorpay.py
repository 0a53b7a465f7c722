import hashlib
import hmac

import requests

from orderhub.errors.exceptions import PaymentGatewayError, ValidationError
from orderhub.lib.logger import log_payment_message


class RazorpayClient:
    """Thin REST client for the Razorpay orders API."""

    def __init__(self, key_id, key_secret, api_url="https://api.razorpay.com/v1", currency="INR", timeout=10):
        self.key_id = key_id
        self.key_secret = key_secret
        self.api_url = api_url.rstrip("/")
        self.currency = currency
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            key_id=config.get("RAZORPAY_KEY_ID"),
            key_secret=config.get("RAZORPAY_KEY_SECRET"),
            api_url=config.get("RAZORPAY_API_URL") or "https://api.razorpay.com/v1",
            currency=config.get("RAZORPAY_CURRENCY") or "INR",
        )

    def ensure_credentials(self):
        if not self.key_id or not self.key_secret:
            raise PaymentGatewayError(
                "Razorpay credentials are missing, set RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET"
            )

    def create_order(self, amount, receipt, notes=None):
        """Create a gateway order; ``amount`` is in the smallest currency unit."""
        self.ensure_credentials()
        amount = int(round(amount or 0))
        if amount <= 0:
            raise ValidationError("Invalid amount for Razorpay order")

        payload = {
            "amount": amount,
            "currency": self.currency,
            "receipt": receipt,
            "payment_capture": 1,
            "notes": notes or {},
        }
        try:
            response = requests.post(
                f"{self.api_url}/orders",
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log_payment_message(f"Razorpay order request failed: {e}", "ERROR")
            raise PaymentGatewayError("Payment gateway is unreachable")

        if response.status_code >= 400:
            log_payment_message(
                f"Razorpay rejected order {receipt}: {response.status_code} {response.text}",
                "ERROR",
            )
            raise PaymentGatewayError(
                "Payment gateway rejected the order", payload={"status": response.status_code}
            )

        gateway_order = response.json()
        log_payment_message(f"Created Razorpay order {gateway_order.get('id')} for {receipt}")
        return gateway_order

    def signature_for(self, gateway_order_id, payment_id):
        body = f"{gateway_order_id}|{payment_id}".encode("utf-8")
        return hmac.new(self.key_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()

    def verify_signature(self, gateway_order_id, payment_id, signature):
        self.ensure_credentials()
        if not gateway_order_id or not payment_id or not signature:
            return False
        expected = self.signature_for(gateway_order_id, payment_id)
        return hmac.compare_digest(expected, str(signature))
