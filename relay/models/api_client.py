# relay/models/api_client.py
import logging
import re
import time

import requests

from config import resolve_endpoints
from relay.errors import InvalidIdentifierError, UpstreamAuthError, UpstreamRequestError
from relay.models.token import TokenGrant
from relay.utils.cache_manager import CredentialCache

logger = logging.getLogger(__name__)

GRANT_TYPE = "client_credentials"

# Identificadores de orden/reembolso permitidos por PhonePe
IDENTIFIER_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,63}")


def _path_segment(value):
    """Validate an order or refund id before it goes into an upstream path."""
    if not isinstance(value, str) or not IDENTIFIER_PATTERN.fullmatch(value):
        raise InvalidIdentifierError(
            "Invalid identifier. Use 1-63 letters, digits, underscores or hyphens."
        )
    return value


def _error_payload(response):
    """Upstream error body if it is JSON, else its text."""
    try:
        return response.json()
    except ValueError:
        return response.text or None


class PhonePeClient:
    def __init__(self, client_id, client_secret, client_version, auth_url, base_url,
                 auth_scheme="O-Bearer", timeout=10, auth_timeout=None,
                 credential_cache=None, refresh_margin=0, session=None,
                 clock=time.time):
        if not client_id or not client_secret:
            raise ValueError("PhonePe client id and client secret are required")
        self.client_id = client_id
        self.client_secret = client_secret
        self.client_version = client_version
        self.auth_url = auth_url
        self.base_url = base_url.rstrip('/')
        self.auth_scheme = auth_scheme
        self.timeout = timeout
        self.auth_timeout = auth_timeout
        self.session = session or requests.Session()
        self.credentials = credential_cache or CredentialCache(
            self.fetch_token, refresh_margin=refresh_margin, clock=clock
        )

    @classmethod
    def from_config(cls, config, **kwargs):
        auth_url, base_url = resolve_endpoints(config)
        return cls(
            client_id=config.get('PHONEPE_CLIENT_ID'),
            client_secret=config.get('PHONEPE_CLIENT_SECRET'),
            client_version=config.get('PHONEPE_CLIENT_VERSION', '1'),
            auth_url=auth_url,
            base_url=base_url,
            auth_scheme=config.get('PHONEPE_AUTH_SCHEME', 'O-Bearer'),
            timeout=config.get('PHONEPE_REQUEST_TIMEOUT', 10),
            auth_timeout=config.get('PHONEPE_AUTH_TIMEOUT'),
            refresh_margin=config.get('PHONEPE_TOKEN_REFRESH_MARGIN', 0),
            **kwargs
        )

    def fetch_token(self):
        """Request a fresh access token from the PhonePe identity endpoint."""
        data = {
            "client_id": self.client_id,
            "client_version": self.client_version,
            "client_secret": self.client_secret,
            "grant_type": GRANT_TYPE,
        }
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        try:
            res = self.session.post(self.auth_url, data=data, headers=headers,
                                    timeout=self.auth_timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Error fetching access token: %s", e)
            raise UpstreamAuthError("Failed to fetch access token", payload=str(e)) from e

        if not res.ok:
            payload = _error_payload(res)
            logger.error("Error fetching access token: %s %s", res.status_code, payload)
            raise UpstreamAuthError("Failed to fetch access token", payload=payload,
                                    status_code=res.status_code)

        try:
            body = res.json()
        except ValueError as e:
            raise UpstreamAuthError("Invalid response from PhonePe API",
                                    payload=res.text or None) from e
        return TokenGrant.from_response(body)

    def get_token(self):
        return self.credentials.get_token()

    def get_headers(self):
        """Construye headers requeridos por PhonePe."""
        token = self.get_token()
        authorization = f"{self.auth_scheme} {token}" if self.auth_scheme else token
        return {
            "Content-Type": "application/json",
            "Authorization": authorization,
        }

    def make_request(self, method, url, **kwargs):
        """Call the gateway and return its JSON body."""
        # Convertir URLs relativas
        if not url.startswith('http'):
            url = f"{self.base_url}/{url.lstrip('/')}"

        headers = self.get_headers()
        if 'headers' in kwargs:
            headers.update(kwargs['headers'])
        kwargs['headers'] = headers
        kwargs.setdefault('timeout', self.timeout)

        logger.debug("PhonePe request: %s %s", method, url)
        try:
            res = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("PhonePe request failed: %s %s: %s", method, url, e)
            raise UpstreamRequestError("Upstream request failed", payload=str(e)) from e

        if res.status_code == 401:
            # Token revocado o vencido del lado de PhonePe
            self.credentials.invalidate()

        if not res.ok:
            payload = _error_payload(res)
            logger.error("PhonePe error %s for %s %s: %s", res.status_code, method, url, payload)
            raise UpstreamRequestError("Upstream request failed", payload=payload,
                                       status_code=res.status_code)

        try:
            return res.json()
        except ValueError:
            return {"raw": res.text}

    def initiate_payment(self, payload):
        return self.make_request("POST", "/checkout/v2/pay", json=payload)

    def get_order_status(self, merchant_order_id, details=False):
        params = {"details": "true"} if details else None
        order_id = _path_segment(merchant_order_id)
        return self.make_request("GET", f"/checkout/v2/order/{order_id}/status", params=params)

    def initiate_refund(self, payload):
        return self.make_request("POST", "/checkout/v2/refund", json=payload)

    def get_refund_status(self, refund_id):
        refund_id = _path_segment(refund_id)
        return self.make_request("GET", f"/checkout/v2/refund/{refund_id}/status")
