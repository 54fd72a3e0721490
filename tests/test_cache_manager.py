import threading
import time

import pytest

from relay.errors import UpstreamAuthError
from relay.models.token import TokenGrant
from relay.utils.cache_manager import CredentialCache, TokenCache


class FakeIssuer:
    """Token issuer that hands out tok_1, tok_2, ... and counts calls."""

    def __init__(self, expires_in=1200, token_type="Bearer"):
        self.calls = 0
        self.expires_in = expires_in
        self.token_type = token_type
        self.error = None

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return TokenGrant(
            access_token=f"tok_{self.calls}",
            token_type=self.token_type,
            expires_in=self.expires_in,
        )


@pytest.fixture
def issuer():
    return FakeIssuer()


@pytest.fixture
def credentials(issuer, clock):
    return CredentialCache(issuer, clock=clock)


class TestTokenCache:

    def test_starts_empty(self, clock):
        cache = TokenCache(clock=clock)
        assert cache.token is None
        assert cache.expires_at is None
        assert not cache.is_valid()

    def test_set_token_sets_both_fields(self, clock):
        cache = TokenCache(clock=clock)
        expires_at = cache.set_token(TokenGrant(access_token="tok_abc"), 1200)

        assert cache.token == "tok_abc"
        assert cache.expires_at == expires_at == clock.now + 1200
        assert cache.is_valid()

    def test_valid_until_one_instant_before_expiry(self, clock):
        cache = TokenCache(clock=clock)
        cache.set_token(TokenGrant(access_token="tok_abc"), 10)

        clock.advance(9.5)
        assert cache.is_valid()

        clock.advance(0.5)
        assert not cache.is_valid()

    def test_clear_empties_both_fields(self, clock):
        cache = TokenCache(clock=clock)
        cache.set_token(TokenGrant(access_token="tok_abc"), 10)
        cache.clear()

        assert cache.token is None
        assert cache.expires_at is None

    def test_rejects_empty_token(self, clock):
        with pytest.raises(ValueError):
            TokenCache(clock=clock).set_token(TokenGrant(access_token=""), 10)


class TestCredentialCache:

    def test_first_call_fetches_once(self, credentials, issuer):
        assert credentials.get_token() == "tok_1"
        assert issuer.calls == 1

    def test_valid_cache_skips_fetch(self, credentials, issuer, clock):
        credentials.get_token()
        clock.advance(1)

        assert credentials.get_token() == "tok_1"
        assert issuer.calls == 1

    def test_refetches_when_expiry_reached_exactly(self, credentials, issuer, clock):
        credentials.get_token()
        clock.advance(1200)

        assert credentials.get_token() == "tok_2"
        assert issuer.calls == 2
        assert credentials.cache.token == "tok_2"
        assert credentials.cache.expires_at == clock.now + 1200

    def test_refetches_after_expiry(self, credentials, issuer, clock):
        credentials.get_token()
        clock.advance(5000)

        assert credentials.get_token() == "tok_2"
        assert issuer.calls == 2

    def test_repeated_calls_return_identical_token(self, credentials):
        assert credentials.get_token() == credentials.get_token()

    def test_documented_scenario(self, credentials, issuer, clock):
        start = clock.now
        assert credentials.get_token() == "tok_1"

        clock.now = start + 1
        assert credentials.get_token() == "tok_1"
        assert issuer.calls == 1

        clock.now = start + 1201
        assert credentials.get_token() == "tok_2"
        assert issuer.calls == 2

    def test_failed_fetch_leaves_empty_cache_untouched(self, credentials, issuer):
        issuer.error = UpstreamAuthError("Invalid response from PhonePe API",
                                         payload={"access_token": "tok_x"})

        with pytest.raises(UpstreamAuthError) as exc_info:
            credentials.get_token()

        assert exc_info.value.payload == {"access_token": "tok_x"}
        assert credentials.cache.token is None
        assert credentials.cache.expires_at is None

    def test_failed_refresh_keeps_previous_entry(self, credentials, issuer, clock):
        credentials.get_token()
        previous_expiry = credentials.cache.expires_at
        clock.advance(1300)
        issuer.error = UpstreamAuthError("Failed to fetch access token", payload="timeout")

        with pytest.raises(UpstreamAuthError):
            credentials.get_token()

        assert credentials.cache.token == "tok_1"
        assert credentials.cache.expires_at == previous_expiry

    def test_failures_are_not_cached(self, credentials, issuer):
        issuer.error = UpstreamAuthError("Failed to fetch access token")
        with pytest.raises(UpstreamAuthError):
            credentials.get_token()

        issuer.error = None
        assert credentials.get_token() == "tok_2"
        assert issuer.calls == 2

    def test_invalidate_forces_refetch(self, credentials, issuer):
        credentials.get_token()
        credentials.invalidate()

        assert credentials.get_token() == "tok_2"

    def test_refresh_margin_shortens_lifetime(self, issuer, clock):
        credentials = CredentialCache(issuer, refresh_margin=60, clock=clock)
        credentials.get_token()

        clock.advance(1139)
        assert credentials.get_token() == "tok_1"
        clock.advance(1)
        assert credentials.get_token() == "tok_2"

    def test_zero_lifetime_token_is_returned_then_refetched(self, clock):
        issuer = FakeIssuer(expires_in=0)
        credentials = CredentialCache(issuer, clock=clock)

        assert credentials.get_token() == "tok_1"
        assert credentials.get_token() == "tok_2"

    def test_get_grant_keeps_issuer_fields(self, credentials):
        grant = credentials.get_grant()

        assert grant.token_type == "Bearer"
        assert grant.expires_in == 1200
        assert credentials.get_grant() is grant

    def test_ttl_counts_down_with_the_clock(self, credentials, issuer, clock):
        grant, ttl = credentials.get_grant_with_ttl()
        assert grant.access_token == "tok_1"
        assert ttl == 1200

        clock.advance(1100)
        grant, ttl = credentials.get_grant_with_ttl()
        assert grant.access_token == "tok_1"
        assert ttl == 100
        assert issuer.calls == 1

    def test_ttl_reflects_refresh_margin(self, issuer, clock):
        credentials = CredentialCache(issuer, refresh_margin=60, clock=clock)

        assert credentials.get_grant_with_ttl()[1] == 1140

    def test_concurrent_misses_share_one_fetch(self, clock):
        started = threading.Event()
        release = threading.Event()

        class SlowIssuer(FakeIssuer):
            def __call__(self):
                started.set()
                release.wait(timeout=5)
                return super().__call__()

        issuer = SlowIssuer()
        credentials = CredentialCache(issuer, clock=clock)
        results = []

        def worker():
            results.append(credentials.get_token())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        assert started.wait(timeout=5)
        time.sleep(0.05)
        release.set()
        for thread in threads:
            thread.join(timeout=5)

        assert issuer.calls == 1
        assert results == ["tok_1"] * 8
