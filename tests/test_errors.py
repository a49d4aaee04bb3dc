import pytest

from payments.errors import (
    DARAJA_RATE_LIMIT,
    INVALID_INPUT,
    NETWORK_DELAY,
    SERVICE_TEMPORARY_DOWN,
    DuplicateTransaction,
    GatewayAuthFailure,
    GatewayError,
    GatewayUnavailable,
    InvalidInput,
    NetworkDelay,
    RateLimited,
    error_body,
    error_response_for,
)


@pytest.mark.parametrize("exc, expected", [
    (InvalidInput("bad"), INVALID_INPUT),
    (RateLimited("slow down", status_code=429), DARAJA_RATE_LIMIT),
    (GatewayUnavailable("down", status_code=503), SERVICE_TEMPORARY_DOWN),
    (NetworkDelay("timeout"), NETWORK_DELAY),
    (GatewayAuthFailure("denied", status_code=401), NETWORK_DELAY),
    (GatewayError("odd"), NETWORK_DELAY),
    (DuplicateTransaction("ws_CO_1"), NETWORK_DELAY),
])
def test_error_response_for(exc, expected):
    assert error_response_for(exc) == expected


def test_only_invalid_input_asks_to_reenter():
    assert INVALID_INPUT.action == "REENTER"
    for response in (NETWORK_DELAY, DARAJA_RATE_LIMIT, SERVICE_TEMPORARY_DOWN):
        assert response.action == "WAIT"


def test_error_body():
    assert error_body(DARAJA_RATE_LIMIT) == {
        "status": "ERROR",
        "code": "DARAJA_RATE_LIMIT",
        "message": DARAJA_RATE_LIMIT.message,
        "safe": True,
        "action": "WAIT",
    }
