from abc import ABC, abstractmethod


class PaymentProvider(ABC):
    @abstractmethod
    def get_access_token(self):
        raise NotImplementedError

    @abstractmethod
    def submit_charge(self, phone, amount, callback_url):
        """Ask the gateway to charge ``phone`` and return its correlation id."""
        raise NotImplementedError
