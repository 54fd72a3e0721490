# relay/errors.py
class RelayError(Exception):
    """Base error for failures talking to the payment gateway."""

    def __init__(self, message, payload=None, status_code=None):
        super().__init__(message)
        self.message = message
        self.payload = payload
        self.status_code = status_code

    def to_dict(self):
        return {
            'success': False,
            'message': self.message,
            'error': self.payload if self.payload is not None else self.message,
        }


class UpstreamAuthError(RelayError):
    """Token fetch failed or the issuer returned a malformed response."""


class UpstreamRequestError(RelayError):
    """A payment, order status or refund call to the gateway failed."""


class ValidationError(ValueError):
    """Bad input from the merchant front end; answered with 400."""


class InvalidAmountError(ValidationError):
    pass


class InvalidIdentifierError(ValidationError):
    pass
