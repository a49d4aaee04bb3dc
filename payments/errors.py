from collections import namedtuple


class PaymentError(Exception):
    """Base class for every failure the payments app reports."""


class InvalidInput(PaymentError):
    pass


class DuplicateTransaction(PaymentError):
    def __init__(self, transaction_id):
        super().__init__(f"Transaction {transaction_id} already exists")
        self.transaction_id = transaction_id


class GatewayError(PaymentError):
    def __init__(self, message, status_code=None, body=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class GatewayAuthFailure(GatewayError):
    pass


class NetworkDelay(GatewayError):
    pass


class RateLimited(GatewayError):
    pass


class GatewayUnavailable(GatewayError):
    pass


ErrorResponse = namedtuple('ErrorResponse', ['code', 'message', 'action'])

INVALID_INPUT = ErrorResponse(
    'INVALID_INPUT',
    "Invalid phone number or amount. Please check and try again.",
    'REENTER',
)
NETWORK_DELAY = ErrorResponse(
    'NETWORK_DELAY',
    "Network delay while contacting M-PESA. Please wait and try again.",
    'WAIT',
)
DARAJA_RATE_LIMIT = ErrorResponse(
    'DARAJA_RATE_LIMIT',
    "Too many payment requests right now. Please wait a moment.",
    'WAIT',
)
SERVICE_TEMPORARY_DOWN = ErrorResponse(
    'SERVICE_TEMPORARY_DOWN',
    "M-PESA service is temporarily unavailable. Please wait and try again.",
    'WAIT',
)

# Order matters: the first matching class wins.
_ERROR_RESPONSES = (
    (InvalidInput, INVALID_INPUT),
    (RateLimited, DARAJA_RATE_LIMIT),
    (GatewayUnavailable, SERVICE_TEMPORARY_DOWN),
    (GatewayError, NETWORK_DELAY),
)


def error_response_for(exc):
    """Return the caller-facing ErrorResponse for a payment failure."""
    for error_class, response in _ERROR_RESPONSES:
        if isinstance(exc, error_class):
            return response
    return NETWORK_DELAY


def error_body(response):
    return {
        "status": "ERROR",
        "code": response.code,
        "message": response.message,
        "safe": True,
        "action": response.action,
    }
