"""Parsing of Daraja STK callbacks.

Safaricom posts::

    {"Body": {"stkCallback": {
        "MerchantRequestID": "...",
        "CheckoutRequestID": "ws_CO_...",
        "ResultCode": 0,
        "ResultDesc": "The service request is processed successfully.",
        "CallbackMetadata": {"Item": [
            {"Name": "Amount", "Value": 1},
            {"Name": "MpesaReceiptNumber", "Value": "NLJ7RT61SV"},
            ...
        ]}
    }}}

``CallbackMetadata`` is only present on success. ``parse_stk_callback`` never
raises: anything it cannot use comes back as a ``MalformedCallback``.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

RECEIPT_ITEM = "MpesaReceiptNumber"


@dataclass(frozen=True)
class StkCallback:
    transaction_id: str
    result_code: int
    result_desc: Optional[str] = None
    receipt: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.result_code == 0


@dataclass(frozen=True)
class MalformedCallback:
    reason: str


def _result_code(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _metadata_items(stk: dict) -> Dict[str, Any]:
    metadata = stk.get("CallbackMetadata")
    if not isinstance(metadata, dict):
        return {}
    items = metadata.get("Item")
    if not isinstance(items, list):
        return {}
    found = {}
    for item in items:
        if isinstance(item, dict) and isinstance(item.get("Name"), str):
            found[item["Name"]] = item.get("Value")
    return found


def parse_stk_callback(payload) -> Union[StkCallback, MalformedCallback]:
    if not isinstance(payload, dict):
        return MalformedCallback("payload is not a JSON object")
    body = payload.get("Body")
    if not isinstance(body, dict):
        return MalformedCallback("missing Body")
    stk = body.get("stkCallback")
    if not isinstance(stk, dict):
        return MalformedCallback("missing Body.stkCallback")

    transaction_id = stk.get("CheckoutRequestID")
    if not isinstance(transaction_id, str) or not transaction_id:
        return MalformedCallback("missing CheckoutRequestID")

    result_code = _result_code(stk.get("ResultCode"))
    if result_code is None:
        return MalformedCallback("missing or non-integer ResultCode")

    metadata = _metadata_items(stk)
    receipt = metadata.get(RECEIPT_ITEM)
    return StkCallback(
        transaction_id=transaction_id,
        result_code=result_code,
        result_desc=stk.get("ResultDesc"),
        receipt=str(receipt) if receipt is not None else None,
        metadata=metadata,
    )
