# relay/utils/cache_manager.py
import logging
import threading
import time

logger = logging.getLogger(__name__)


class TokenCache:
    """Holds a single access token and the instant it stops being valid.

    ``token`` and ``expires_at`` are either both set or both ``None``.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._entry = None  # (grant, expires_at)

    @property
    def token(self):
        entry = self._entry
        return entry[0].access_token if entry else None

    @property
    def expires_at(self):
        entry = self._entry
        return entry[1] if entry else None

    def set_token(self, grant, expires_in):
        """Set the token and expiration time."""
        if not grant.access_token:
            raise ValueError("access token must be a non-empty string")
        expires_at = self._clock() + expires_in
        # Una sola asignación: token y expiración cambian juntos
        self._entry = (grant, expires_at)
        return expires_at

    def get_valid_entry(self):
        """Return ``(grant, seconds_left)`` if not expired, else ``None``."""
        entry = self._entry
        if entry is None:
            return None
        grant, expires_at = entry
        now = self._clock()
        if now < expires_at:
            return grant, max(0, int(expires_at - now))
        return None

    def get_valid(self):
        """Return the cached grant if it has not expired, else ``None``."""
        entry = self.get_valid_entry()
        return entry[0] if entry else None

    def is_valid(self):
        """Check if the token is still valid."""
        return self.get_valid_entry() is not None

    def clear(self):
        """Clear the token cache."""
        self._entry = None


class CredentialCache:
    """Expiry-aware access token cache in front of a token issuer.

    ``issuer`` is a callable returning a ``TokenGrant``. Concurrent callers
    that miss the cache wait on a single in-flight fetch; failures propagate
    to the caller and are never cached.
    """

    def __init__(self, issuer, cache=None, refresh_margin=0, clock=time.time):
        self._issuer = issuer
        self._cache = cache if cache is not None else TokenCache(clock=clock)
        self._refresh_margin = refresh_margin
        self._lock = threading.Lock()

    @property
    def cache(self):
        return self._cache

    def get_token(self):
        """Return a valid access token, fetching a new one when needed."""
        return self.get_grant().access_token

    def get_grant(self):
        return self.get_grant_with_ttl()[0]

    def get_grant_with_ttl(self):
        """Return ``(grant, seconds_left)`` for a valid token."""
        entry = self._cache.get_valid_entry()
        if entry is not None:
            return entry

        with self._lock:
            # Otro hilo pudo haber refrescado mientras esperábamos el lock
            entry = self._cache.get_valid_entry()
            if entry is not None:
                return entry

            grant = self._issuer()
            lifetime = max(0, grant.expires_in - self._refresh_margin)
            self._cache.set_token(grant, lifetime)
            logger.info("New access token cached (expires_in=%ss)", grant.expires_in)
            return grant, int(lifetime)

    def invalidate(self):
        with self._lock:
            self._cache.clear()
        logger.debug("Access token cache cleared")
