import json
import logging
import re

from django.conf import settings
from django.db import DatabaseError
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .callbacks import MalformedCallback, parse_stk_callback
from .errors import (
    INVALID_INPUT,
    DuplicateTransaction,
    GatewayError,
    InvalidInput,
    error_body,
    error_response_for,
)
from .models import TransactionStatus
from .services.mpesa import MpesaDarajaClient
from .store import TransactionStore

logger = logging.getLogger(__name__)

ACCEPTED = {"ResultCode": 0, "ResultDesc": "Accepted"}
INVALID_CALLBACK = {"ResultCode": 0, "ResultDesc": "Invalid callback payload"}

# Largest value the transactions.amount INTEGER column holds
MAX_AMOUNT = 2147483647


def _json_body(request):
    try:
        return json.loads(request.body.decode('utf-8'))
    except (UnicodeDecodeError, ValueError):
        return None


def _clean_phone(value):
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput("phone is required")
    return value.strip()


def _clean_amount(value):
    # bool is an int subclass; True must not mean 1 shilling
    if isinstance(value, bool) or value is None:
        raise InvalidInput("amount is required")
    if isinstance(value, str):
        value = value.strip()
        if not re.fullmatch(r"-?[0-9]+", value):
            raise InvalidInput("amount must be a whole number")
        value = int(value)
    elif isinstance(value, float):
        if not value.is_integer():
            raise InvalidInput("amount must be a whole number")
        value = int(value)
    elif not isinstance(value, int):
        raise InvalidInput("amount must be a whole number")
    if value <= 0:
        raise InvalidInput("amount must be greater than zero")
    if value > MAX_AMOUNT:
        raise InvalidInput("amount is too large")
    return value


def callback_url():
    return f"{settings.BASE_URL.rstrip('/')}/callback"


class PaymentsView(View):
    """Base for the payment endpoints.

    ``store`` and ``gateway`` are handed in through ``as_view()``; a missing
    gateway is built from settings on each request.
    """
    store = None
    gateway = None

    def get_store(self):
        if self.store is None:
            self.store = TransactionStore()
        return self.store

    def get_gateway(self):
        if self.gateway is None:
            return MpesaDarajaClient.from_settings()
        return self.gateway


@method_decorator(csrf_exempt, name='dispatch')
class InitiateChargeView(PaymentsView):
    http_method_names = ['post']

    def post(self, request):
        data = _json_body(request)
        try:
            if not isinstance(data, dict):
                raise InvalidInput("body must be a JSON object")
            phone = _clean_phone(data.get('phone'))
            amount = _clean_amount(data.get('amount'))
        except InvalidInput as e:
            logger.info("Rejected STK push request: %s", e)
            return JsonResponse(error_body(INVALID_INPUT))

        try:
            transaction_id = self.get_gateway().submit_charge(phone, amount, callback_url())
        except (InvalidInput, GatewayError) as e:
            response = error_response_for(e)
            logger.error(
                "STK push for %s failed (%s): %s body=%s",
                phone, response.code, e, getattr(e, 'body', None),
            )
            return JsonResponse(error_body(response))

        try:
            self.get_store().create_pending(transaction_id, phone, amount)
        except DuplicateTransaction:
            logger.exception("Could not record transaction %s", transaction_id)
            return JsonResponse({"error": "STK Push Failed"}, status=500)

        return JsonResponse({"transactionId": transaction_id, "status": TransactionStatus.PENDING})


@method_decorator(csrf_exempt, name='dispatch')
class CallbackView(PaymentsView):
    http_method_names = ['post']

    def post(self, request):
        callback = parse_stk_callback(_json_body(request))
        if isinstance(callback, MalformedCallback):
            logger.warning("Ignoring malformed MPESA callback: %s", callback.reason)
            return JsonResponse(INVALID_CALLBACK)

        if callback.succeeded:
            outcome = TransactionStatus.SUCCESS
        else:
            outcome = TransactionStatus.FAILED
        logger.info(
            "MPESA callback for %s: ResultCode=%s (%s) receipt=%s",
            callback.transaction_id, callback.result_code, callback.result_desc, callback.receipt,
        )
        try:
            self.get_store().mark_result(callback.transaction_id, outcome, callback.receipt)
        except DatabaseError:
            # Safaricom only needs to know we got it.
            logger.exception("Could not record callback for %s", callback.transaction_id)

        return JsonResponse(ACCEPTED)


class StatusView(PaymentsView):
    http_method_names = ['get']

    def get(self, request, transaction_id=None):
        if transaction_id is None:
            transaction_id = request.GET.get('transactionId')
        if not transaction_id:
            return JsonResponse({"status": TransactionStatus.UNKNOWN})
        return JsonResponse({"status": self.get_store().get_status(transaction_id)})


class LastTransactionView(PaymentsView):
    http_method_names = ['get']

    def get(self, request):
        txn = self.get_store().get_most_recent()
        if txn is None:
            return JsonResponse({"status": TransactionStatus.NONE})
        return JsonResponse(txn.as_dict())
