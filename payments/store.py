import logging

from django.db import DEFAULT_DB_ALIAS, IntegrityError, connections, transaction

from .errors import DuplicateTransaction
from .models import TERMINAL_STATUSES, Transaction, TransactionStatus

logger = logging.getLogger(__name__)


class TransactionStore:
    """Access to the ``transactions`` table.

    One store is built at process start and handed to the views. ``open()``
    acquires the database connection for ``using`` and ``close()`` releases
    it, for the calling thread only: Django keeps one connection per thread,
    so ``serve`` uses them to check the database at start-up and release the
    main thread's connection at shutdown, while connections opened by request
    threads are closed by Django's own ``request_finished`` handling
    (``CONN_MAX_AGE`` is 0). Every operation touches exactly one row, so the database's own
    single-statement atomicity is all the coordination there is; two
    callbacks for the same id race and the last write wins.
    """

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def open(self):
        connections[self.using].ensure_connection()
        logger.info("Transaction store opened on database %r", self.using)
        return self

    def close(self):
        connections[self.using].close()
        logger.info("Transaction store closed on database %r", self.using)

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _transactions(self):
        return Transaction.objects.using(self.using)

    def create_pending(self, transaction_id, phone, amount):
        try:
            with transaction.atomic(using=self.using):
                # force_insert so an existing id fails instead of being overwritten
                txn = Transaction(
                    transaction_id=transaction_id,
                    phone=phone,
                    amount=amount,
                    status=TransactionStatus.PENDING,
                    mpesa_receipt=None,
                )
                txn.save(using=self.using, force_insert=True)
        except IntegrityError as e:
            raise DuplicateTransaction(transaction_id) from e
        return txn

    def mark_result(self, transaction_id, outcome, receipt=None):
        """Move a transaction to SUCCESS or FAILED.

        The receipt is only written for SUCCESS. Returns False when no row
        matches ``transaction_id``; the gateway cannot usefully retry, so
        that case is a tolerated miss rather than an error.
        """
        outcome = TransactionStatus(outcome)
        if outcome not in TERMINAL_STATUSES:
            raise ValueError(f"{outcome} is not a terminal status")

        fields = {"status": outcome}
        if outcome == TransactionStatus.SUCCESS:
            fields["mpesa_receipt"] = receipt
        updated = self._transactions().filter(transaction_id=transaction_id).update(**fields)
        if not updated:
            logger.warning("Callback for unknown transaction %s ignored", transaction_id)
            return False
        return True

    def get_status(self, transaction_id):
        status = (
            self._transactions()
            .filter(transaction_id=transaction_id)
            .values_list("status", flat=True)
            .first()
        )
        if status is None:
            return TransactionStatus.UNKNOWN
        return TransactionStatus(status)

    def get_most_recent(self):
        # CheckoutRequestIDs only sort roughly by creation time; best effort.
        return self._transactions().order_by("-transaction_id").first()
