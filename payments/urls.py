from django.apps import apps
from django.urls import path

from . import views

store = apps.get_app_config('payments').store

urlpatterns = [
    path('stkpush', views.InitiateChargeView.as_view(store=store), name='stkpush'),
    path('callback', views.CallbackView.as_view(store=store), name='stk_callback'),
    path('status', views.StatusView.as_view(store=store), name='status_query'),
    path('status/<str:transaction_id>', views.StatusView.as_view(store=store), name='status'),
    path('last-transaction', views.LastTransactionView.as_view(store=store), name='last_transaction'),
]
