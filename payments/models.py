from django.db import models


class TransactionStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    SUCCESS = 'SUCCESS', 'Success'
    FAILED = 'FAILED', 'Failed'
    # Read-path sentinels, never stored
    UNKNOWN = 'UNKNOWN', 'Unknown'
    NONE = 'NONE', 'None'


PERSISTED_STATUSES = (
    TransactionStatus.PENDING,
    TransactionStatus.SUCCESS,
    TransactionStatus.FAILED,
)
TERMINAL_STATUSES = (TransactionStatus.SUCCESS, TransactionStatus.FAILED)


class Transaction(models.Model):
    transaction_id = models.TextField(primary_key=True)  # Daraja CheckoutRequestID
    phone = models.TextField()
    amount = models.IntegerField()
    status = models.TextField(
        choices=[(s.value, s.label) for s in PERSISTED_STATUSES],
        default=TransactionStatus.PENDING,
    )
    mpesa_receipt = models.TextField(blank=True, null=True)  # after success

    class Meta:
        db_table = 'transactions'

    def __str__(self):
        return f"{self.transaction_id} - {self.phone} - {self.amount} - {self.status}"

    def as_dict(self):
        return {
            "transaction_id": self.transaction_id,
            "phone": self.phone,
            "amount": self.amount,
            "status": self.status,
        }
