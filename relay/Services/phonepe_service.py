# relay/Services/phonepe_service.py
import logging
import time
import uuid
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from relay.errors import InvalidAmountError

logger = logging.getLogger(__name__)

SUCCESS_STATES = {'SUCCESS', 'COMPLETED', 'PAYMENT_SUCCESS'}
DEFAULT_REFUND_REASON = "Customer Requested Refund"


def to_paise(amount):
    """Convert an INR amount to integer paise (e.g. 10.5 -> 1050)."""
    if amount is None or isinstance(amount, bool):
        raise InvalidAmountError("Invalid amount. Please enter a valid amount greater than 0.")
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise InvalidAmountError("Invalid amount. Please enter a valid amount greater than 0.")
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError("Invalid amount. Please enter a valid amount greater than 0.")

    try:
        paise = int((value * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise InvalidAmountError("Invalid amount. Please enter a valid amount greater than 0.")
    if paise <= 0:
        raise InvalidAmountError("Invalid amount. Please enter a valid amount greater than 0.")
    return paise


def extract_payment_state(payload):
    """Read the payment state from a callback or status payload.

    PhonePe has sent both ``state`` and ``status``, flat or nested under
    ``payload``/``data``, so every shape is accepted.
    """
    if not isinstance(payload, dict):
        return None
    for key in ('state', 'status'):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value.upper()
    for key in ('payload', 'data'):
        nested = payload.get(key)
        if isinstance(nested, dict):
            state = extract_payment_state(nested)
            if state:
                return state
    return None


def extract_merchant_order_id(payload):
    if not isinstance(payload, dict):
        return None
    if payload.get('merchantOrderId'):
        return payload['merchantOrderId']
    for key in ('payload', 'data'):
        nested = payload.get(key)
        if isinstance(nested, dict) and nested.get('merchantOrderId'):
            return nested['merchantOrderId']
    return None


def is_successful(state):
    return bool(state) and state.upper() in SUCCESS_STATES


class PhonePeService:
    def __init__(self, client, redirect_url, expire_after=900, success_url=None,
                 failure_url=None):
        self.client = client
        self.redirect_url = redirect_url
        self.success_url = success_url
        self.failure_url = failure_url
        self.expire_after = expire_after

    def build_payment_payload(self, amount, merchant_order_id=None, meta_info=None,
                              message=None, redirect_url=None):
        payload = {
            "merchantOrderId": merchant_order_id or str(uuid.uuid4()),
            "amount": to_paise(amount),
            "expireAfter": self.expire_after,
            "paymentFlow": {
                "type": "PG_CHECKOUT",
                "merchantUrls": {
                    "redirectUrl": redirect_url or self.redirect_url,
                },
            },
        }
        merchant_urls = payload["paymentFlow"]["merchantUrls"]
        if self.success_url:
            merchant_urls["successUrl"] = self.success_url
        if self.failure_url:
            merchant_urls["failureUrl"] = self.failure_url
        if meta_info:
            payload["metaInfo"] = meta_info
        if message:
            payload["paymentFlow"]["message"] = message
        return payload

    def build_refund_payload(self, merchant_order_id, amount, refund_id=None, reason=None):
        if not merchant_order_id:
            raise ValueError("merchantOrderId is required")
        return {
            "merchantOrderId": merchant_order_id,
            "refundAmount": to_paise(amount),
            "refundId": refund_id or f"RF-{int(time.time() * 1000)}",
            "reason": reason or DEFAULT_REFUND_REASON,
        }

    def create_payment(self, amount, **kwargs):
        """Crear pago en PhonePe y devolver (merchantOrderId, respuesta)."""
        payload = self.build_payment_payload(amount, **kwargs)
        logger.info("Initiating payment %s for %s paise",
                    payload["merchantOrderId"], payload["amount"])
        data = self.client.initiate_payment(payload)
        return payload["merchantOrderId"], data

    def order_status(self, merchant_order_id, details=False):
        return self.client.get_order_status(merchant_order_id, details=details)

    def create_refund(self, merchant_order_id, amount, refund_id=None, reason=None):
        payload = self.build_refund_payload(merchant_order_id, amount, refund_id, reason)
        logger.info("Initiating refund %s for order %s", payload["refundId"], merchant_order_id)
        data = self.client.initiate_refund(payload)
        return payload["refundId"], data

    def refund_status(self, refund_id):
        return self.client.get_refund_status(refund_id)
