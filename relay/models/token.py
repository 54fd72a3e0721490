# relay/models/token.py
from dataclasses import dataclass
from typing import Optional

from relay.errors import UpstreamAuthError


@dataclass(frozen=True)
class TokenGrant:
    """Parsed response of the PhonePe identity endpoint."""

    access_token: str
    token_type: Optional[str] = None
    expires_in: int = 0
    encrypted_access_token: Optional[str] = None
    issued_at: Optional[int] = None
    expires_at: Optional[int] = None
    session_expires_at: Optional[int] = None

    @classmethod
    def from_response(cls, data):
        """Build a grant from the issuer JSON, rejecting partial responses."""
        if not isinstance(data, dict):
            raise UpstreamAuthError("Invalid response from PhonePe API", payload=data)

        access_token = data.get('access_token')
        token_type = data.get('token_type')
        if not access_token or not token_type:
            raise UpstreamAuthError("Invalid response from PhonePe API", payload=data)

        try:
            expires_in = int(data.get('expires_in') or 0)
        except (TypeError, ValueError):
            raise UpstreamAuthError("Invalid expires_in in PhonePe token response", payload=data)

        return cls(
            access_token=access_token,
            token_type=token_type,
            expires_in=expires_in,
            encrypted_access_token=data.get('encrypted_access_token'),
            issued_at=data.get('issued_at'),
            expires_at=data.get('expires_at'),
            session_expires_at=data.get('session_expires_at'),
        )

    def to_public_dict(self, expires_in=None):
        """camelCase view returned by the /get-auth-token route.

        ``expires_in`` overrides the issuer lifetime with the time left on a
        cached token.
        """
        return {
            'accessToken': self.access_token,
            'encryptedAccessToken': self.encrypted_access_token,
            'expiresIn': self.expires_in if expires_in is None else expires_in,
            'issuedAt': self.issued_at,
            'expiresAt': self.expires_at,
            'sessionExpiresAt': self.session_expires_at,
            'tokenType': self.token_type,
        }
