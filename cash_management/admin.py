from django.contrib import admin

from .models import AuditLog, BankAccount, CashFlowTransaction, Payable, Receivable


@admin.register(BankAccount)
class BankAccountAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "bank_name", "currency", "balance", "last_updated")
    search_fields = ("name", "bank_name")


@admin.register(CashFlowTransaction)
class CashFlowTransactionAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "date",
        "bank",
        "description",
        "debit",
        "credit",
        "balance",
        "bank_balance",
        "created_by",
        "created_at",
    )
    list_filter = ("bank", "date", "transaction_type")
    search_fields = ("description", "paid_to", "received_from", "pv_number", "cheque_number")

    def has_delete_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        # Ledger entries are immutable; post a correcting entry instead
        return False

    def get_actions(self, request):
        actions = super().get_actions(request)
        if 'delete_selected' in actions:
            del actions['delete_selected']
        return actions


@admin.register(Payable)
class PayableAdmin(admin.ModelAdmin):
    list_display = ("due_date", "paid_to", "purpose", "amount", "paid", "pending", "status")
    list_filter = ("status",)
    search_fields = ("paid_to", "purpose")


@admin.register(Receivable)
class ReceivableAdmin(admin.ModelAdmin):
    list_display = ("due_date", "receivable_from", "purpose", "amount", "bank", "status")
    list_filter = ("status",)
    search_fields = ("receivable_from", "purpose")


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action", "model", "object_id", "user")
    list_filter = ("model", "action")
