from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'payments'
    verbose_name = 'M-PESA payments'

    def ready(self):
        from .store import TransactionStore

        # The one store handle views and the serve command share
        self.store = TransactionStore()
