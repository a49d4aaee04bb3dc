import base64
import datetime as dt
import logging

import requests
from django.conf import settings
from requests.auth import HTTPBasicAuth

from ..errors import (
    GatewayAuthFailure,
    GatewayUnavailable,
    InvalidInput,
    NetworkDelay,
    RateLimited,
)
from .base import PaymentProvider

logger = logging.getLogger(__name__)

BASE_URLS = {
    'sandbox': 'https://sandbox.safaricom.co.ke',
    'production': 'https://api.safaricom.co.ke',
}


def _body_of(resp):
    try:
        return resp.json()
    except ValueError:
        return resp.text


class MpesaDarajaClient(PaymentProvider):
    def __init__(self, env, consumer_key, consumer_secret, shortcode, passkey,
                 account_reference='ESP8266', transaction_desc='ESP8266 Payment', timeout=30):
        if env not in BASE_URLS:
            raise ValueError(f"MPESA environment must be 'sandbox' or 'production', got {env!r}")
        self.env = env
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.shortcode = str(shortcode)
        self.passkey = passkey
        self.account_reference = account_reference
        self.transaction_desc = transaction_desc
        self.timeout = timeout

        self.base_url = BASE_URLS[env]

    @classmethod
    def from_settings(cls):
        return cls(
            env=getattr(settings, 'MPESA_ENV', 'sandbox'),
            consumer_key=getattr(settings, 'MPESA_CONSUMER_KEY', ''),
            consumer_secret=getattr(settings, 'MPESA_CONSUMER_SECRET', ''),
            shortcode=getattr(settings, 'MPESA_SHORTCODE', ''),
            passkey=getattr(settings, 'MPESA_PASSKEY', ''),
            account_reference=getattr(settings, 'MPESA_ACCOUNT_REFERENCE', 'ESP8266'),
            transaction_desc=getattr(settings, 'MPESA_TRANSACTION_DESC', 'ESP8266 Payment'),
            timeout=getattr(settings, 'MPESA_TIMEOUT', 30),
        )

    @staticmethod
    def timestamp(now=None):
        return (now or dt.datetime.now()).strftime('%Y%m%d%H%M%S')

    def password(self, timestamp):
        raw = f"{self.shortcode}{self.passkey}{timestamp}".encode('utf-8')
        return base64.b64encode(raw).decode('utf-8')

    def get_access_token(self):
        url = f"{self.base_url}/oauth/v1/generate?grant_type=client_credentials"
        try:
            response = requests.get(
                url,
                auth=HTTPBasicAuth(self.consumer_key, self.consumer_secret),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GatewayAuthFailure(f"MPESA OAuth request failed: {e}") from e

        if response.status_code != 200:
            raise GatewayAuthFailure(
                f"MPESA OAuth error: status={response.status_code}, body={response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            data = response.json()
        except ValueError:
            raise GatewayAuthFailure(
                f"MPESA OAuth returned non-JSON body: status={response.status_code}, body={response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        if not isinstance(data, dict) or not data.get("access_token"):
            raise GatewayAuthFailure(
                f"MPESA OAuth JSON missing access_token: {data}",
                status_code=response.status_code,
                body=data,
            )
        return data["access_token"]

    def _token(self):
        # A throttled or failing OAuth endpoint means the same thing to the
        # caller as a throttled or failing STK endpoint.
        try:
            return self.get_access_token()
        except GatewayAuthFailure as e:
            if e.status_code == 429:
                raise RateLimited(str(e), status_code=e.status_code, body=e.body) from e
            if e.status_code is not None and e.status_code >= 500:
                raise GatewayUnavailable(str(e), status_code=e.status_code, body=e.body) from e
            raise

    def build_payload(self, phone, amount, callback_url, timestamp):
        return {
            "BusinessShortCode": self.shortcode,
            "Password": self.password(timestamp),
            "Timestamp": timestamp,
            "TransactionType": "CustomerPayBillOnline",
            "Amount": amount,
            "PartyA": phone,
            "PartyB": self.shortcode,
            "PhoneNumber": phone,
            "CallBackURL": callback_url,
            "AccountReference": self.account_reference,
            "TransactionDesc": self.transaction_desc,
        }

    def submit_charge(self, phone, amount, callback_url):
        token = self._token()
        timestamp = self.timestamp()
        payload = self.build_payload(phone, amount, callback_url, timestamp)

        url = f"{self.base_url}/mpesa/stkpush/v1/processrequest"
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        try:
            resp = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkDelay(f"Failed to reach MPESA STK API: {e}") from e

        body = _body_of(resp)
        status = resp.status_code
        if status == 400:
            raise InvalidInput(f"MPESA rejected the STK request: {body}")
        if status == 429:
            raise RateLimited("MPESA rate limit reached", status_code=status, body=body)
        if status >= 500:
            raise GatewayUnavailable(f"MPESA STK API returned {status}", status_code=status, body=body)
        if status != 200 or not isinstance(body, dict):
            raise NetworkDelay(f"Unexpected MPESA STK response {status}", status_code=status, body=body)

        # Daraja signals acceptance with ResponseCode "0"
        if 'ResponseCode' in body and str(body['ResponseCode']) != '0':
            raise NetworkDelay(
                body.get('ResponseDescription') or "STK Push was not accepted",
                status_code=status,
                body=body,
            )
        checkout_id = body.get('CheckoutRequestID')
        if not checkout_id:
            raise NetworkDelay("MPESA response missing CheckoutRequestID", status_code=status, body=body)

        logger.info("STK push accepted for %s: %s", phone, checkout_id)
        return checkout_id
