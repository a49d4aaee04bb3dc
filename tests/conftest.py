"""
Shared fixtures for the payments tests.
"""
from unittest.mock import MagicMock

import pytest

from payments.services.mpesa import MpesaDarajaClient
from payments.store import TransactionStore


def make_response(status_code=200, json_data=None, text=None):
    """Build a stand-in for ``requests.Response``."""
    response = MagicMock()
    response.status_code = status_code
    if json_data is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
        response.text = text or ""
    else:
        response.json.return_value = json_data
        response.text = text or str(json_data)
    return response


@pytest.fixture
def store(db):
    return TransactionStore()


@pytest.fixture
def mpesa_client():
    return MpesaDarajaClient(
        env="sandbox",
        consumer_key="key",
        consumer_secret="secret",
        shortcode="174379",
        passkey="bfb279f9aa9bdbcf158e97dd71a467cd",
    )


@pytest.fixture
def gateway():
    """Gateway double for the views; accepts every charge by default."""
    fake = MagicMock(spec=MpesaDarajaClient)
    fake.submit_charge.return_value = "ws_CO_191220191020363925"
    return fake


def stk_callback(transaction_id, result_code=0, receipt="NLJ7RT61SV", with_metadata=True):
    stk = {
        "MerchantRequestID": "29115-34620561-1",
        "CheckoutRequestID": transaction_id,
        "ResultCode": result_code,
        "ResultDesc": "The service request is processed successfully.",
    }
    if with_metadata:
        items = [
            {"Name": "Amount", "Value": 1.00},
            {"Name": "TransactionDate", "Value": 20191219102115},
            {"Name": "PhoneNumber", "Value": 254708374149},
        ]
        if receipt is not None:
            items.insert(1, {"Name": "MpesaReceiptNumber", "Value": receipt})
        stk["CallbackMetadata"] = {"Item": items}
    return {"Body": {"stkCallback": stk}}
