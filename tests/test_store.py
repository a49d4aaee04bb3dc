from unittest.mock import patch

import pytest

from payments.errors import DuplicateTransaction
from payments.models import Transaction, TransactionStatus
from payments.store import TransactionStore


class TestCreatePending:
    def test_creates_single_pending_row(self, store):
        store.create_pending("ws_CO_1", "254708374149", 10)

        rows = list(Transaction.objects.all())
        assert len(rows) == 1
        assert rows[0].transaction_id == "ws_CO_1"
        assert rows[0].phone == "254708374149"
        assert rows[0].amount == 10
        assert rows[0].status == TransactionStatus.PENDING
        assert rows[0].mpesa_receipt is None

    def test_duplicate_id_raises(self, store):
        store.create_pending("ws_CO_1", "254708374149", 10)

        with pytest.raises(DuplicateTransaction):
            store.create_pending("ws_CO_1", "254700000000", 99)

        row = Transaction.objects.get(transaction_id="ws_CO_1")
        assert row.phone == "254708374149"
        assert row.amount == 10


class TestMarkResult:
    def test_success_sets_receipt(self, store):
        store.create_pending("ws_CO_1", "254708374149", 10)

        assert store.mark_result("ws_CO_1", TransactionStatus.SUCCESS, "NLJ7RT61SV") is True

        row = Transaction.objects.get(transaction_id="ws_CO_1")
        assert row.status == TransactionStatus.SUCCESS
        assert row.mpesa_receipt == "NLJ7RT61SV"

    def test_success_without_receipt(self, store):
        store.create_pending("ws_CO_1", "254708374149", 10)

        store.mark_result("ws_CO_1", TransactionStatus.SUCCESS)

        row = Transaction.objects.get(transaction_id="ws_CO_1")
        assert row.status == TransactionStatus.SUCCESS
        assert row.mpesa_receipt is None

    def test_failed_leaves_receipt_null(self, store):
        store.create_pending("ws_CO_1", "254708374149", 10)

        store.mark_result("ws_CO_1", TransactionStatus.FAILED, "IGNORED")

        row = Transaction.objects.get(transaction_id="ws_CO_1")
        assert row.status == TransactionStatus.FAILED
        assert row.mpesa_receipt is None

    def test_unknown_id_is_tolerated(self, store):
        store.create_pending("ws_CO_1", "254708374149", 10)

        assert store.mark_result("ws_CO_missing", TransactionStatus.SUCCESS, "R") is False
        assert Transaction.objects.count() == 1
        assert store.get_status("ws_CO_1") == TransactionStatus.PENDING

    @pytest.mark.parametrize("outcome", [TransactionStatus.PENDING, TransactionStatus.UNKNOWN, "NONE"])
    def test_rejects_non_terminal_outcome(self, store, outcome):
        store.create_pending("ws_CO_1", "254708374149", 10)

        with pytest.raises(ValueError):
            store.mark_result("ws_CO_1", outcome)

    def test_string_outcome_accepted(self, store):
        store.create_pending("ws_CO_1", "254708374149", 10)

        store.mark_result("ws_CO_1", "FAILED")

        assert store.get_status("ws_CO_1") == TransactionStatus.FAILED


class TestReads:
    def test_status_unknown_for_unseen_id(self, store):
        assert store.get_status("ws_CO_never") == TransactionStatus.UNKNOWN

    def test_status_follows_lifecycle(self, store):
        store.create_pending("ws_CO_1", "254708374149", 10)
        assert store.get_status("ws_CO_1") == TransactionStatus.PENDING

        store.mark_result("ws_CO_1", TransactionStatus.SUCCESS, "NLJ7RT61SV")
        assert store.get_status("ws_CO_1") == TransactionStatus.SUCCESS
        assert store.get_status("ws_CO_1") == TransactionStatus.SUCCESS

    def test_most_recent_empty(self, store):
        assert store.get_most_recent() is None

    def test_most_recent_is_greatest_id(self, store):
        store.create_pending("ws_CO_191220191020363925", "254700000001", 1)
        store.create_pending("ws_CO_191220191020363927", "254700000003", 3)
        store.create_pending("ws_CO_191220191020363926", "254700000002", 2)

        latest = store.get_most_recent()
        assert latest.transaction_id == "ws_CO_191220191020363927"
        assert latest.as_dict() == {
            "transaction_id": "ws_CO_191220191020363927",
            "phone": "254700000003",
            "amount": 3,
            "status": "PENDING",
        }


def test_open_and_close_use_the_configured_alias():
    store = TransactionStore(using="default")
    with patch("payments.store.connections") as connections:
        with store as opened:
            assert opened is store
            connections["default"].ensure_connection.assert_called_once_with()
            connections["default"].close.assert_not_called()
        connections["default"].close.assert_called_once_with()
