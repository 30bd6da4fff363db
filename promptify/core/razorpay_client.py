import hashlib
import hmac
import logging
from typing import Any, Optional

from promptify.core.config import razorpay_settings
from promptify.core.errors import PaymentError

logger = logging.getLogger(__name__)


class RazorpayClient:
    _instance: Optional[Any] = None

    @classmethod
    def get_instance(cls) -> Any:
        if cls._instance is None:
            if not razorpay_settings.is_configured:
                raise PaymentError("Payment gateway is not configured")
            import razorpay

            cls._instance = razorpay.Client(
                auth=(razorpay_settings.KEY_ID, razorpay_settings.KEY_SECRET)
            )
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


def razorpay_client() -> Any:
    return RazorpayClient.get_instance()


def _hmac_sha256(secret: str, payload: bytes) -> str:
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str) -> bool:
    """Checkout signature: HMAC-SHA256 of ``order_id|payment_id`` with the key secret."""
    if not razorpay_settings.KEY_SECRET:
        raise PaymentError("Payment gateway is not configured")
    expected = _hmac_sha256(razorpay_settings.KEY_SECRET, f"{order_id}|{payment_id}".encode())
    return hmac.compare_digest(expected, signature or "")


def verify_webhook_signature(body: bytes, signature: str | None) -> bool:
    """Webhook signature: HMAC-SHA256 of the raw body with the webhook secret."""
    if not razorpay_settings.WEBHOOK_SECRET:
        logger.error("RAZORPAY_WEBHOOK_SECRET not configured, rejecting webhook")
        return False
    if not signature:
        return False
    expected = _hmac_sha256(razorpay_settings.WEBHOOK_SECRET, body)
    return hmac.compare_digest(expected, signature)
