import json
from unittest.mock import Mock

import pytest

from config import TestingConfig
from relay import create_app
from relay.models.api_client import PhonePeClient

AUTH_URL = "https://auth.phonepe.test/v1/oauth/token"
BASE_URL = "https://api.phonepe.test/apis/pg-sandbox"


def _http_response(json_data=None, status_code=200, text=None):
    """Mock requests.Response whose .json() returns json_data."""
    resp = Mock()
    resp.ok = 200 <= status_code < 400
    resp.status_code = status_code
    if json_data is None:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
        resp.text = text or ""
    else:
        resp.json.return_value = json_data
        resp.text = json.dumps(json_data)
    return resp


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def make_response():
    return _http_response


@pytest.fixture
def token_payload():
    return {
        "access_token": "tok_abc",
        "encrypted_access_token": "enc_tok_abc",
        "token_type": "O-Bearer",
        "expires_in": 1200,
        "issued_at": 1706073005,
        "expires_at": 1706074205,
        "session_expires_at": 1706074205,
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(token_payload):
    session = Mock()
    session.post.return_value = _http_response(token_payload)
    session.request.return_value = _http_response({"success": True})
    return session


@pytest.fixture
def phonepe_client(session, clock):
    return PhonePeClient(
        client_id="test-client-id",
        client_secret="test-client-secret",
        client_version="1",
        auth_url=AUTH_URL,
        base_url=BASE_URL,
        session=session,
        clock=clock,
    )


@pytest.fixture
def app(phonepe_client):
    return create_app(TestingConfig, client=phonepe_client)


@pytest.fixture
def client(app):
    return app.test_client()
