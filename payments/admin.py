from django.contrib import admin
from .models import Transaction

@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ('transaction_id', 'phone', 'amount', 'status', 'mpesa_receipt')
    list_filter = ('status',)
    search_fields = ('transaction_id', 'phone', 'mpesa_receipt')
    readonly_fields = ('transaction_id', 'phone', 'amount', 'status', 'mpesa_receipt')

    # Rows only come from the gateway
    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
