from rest_framework import serializers

from .models import BankAccount, CashFlowTransaction, Payable, Receivable


class BankAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = BankAccount
        fields = ["id", "name", "bank_name", "currency", "balance", "last_updated"]


class CashFlowTransactionSerializer(serializers.ModelSerializer):
    bank_name = serializers.CharField(source="bank.name", read_only=True)

    class Meta:
        model = CashFlowTransaction
        fields = [
            "id",
            "bank",
            "bank_name",
            "date",
            "paid_to",
            "received_from",
            "description",
            "pv_number",
            "cheque_number",
            "fs_number",
            "debit",
            "credit",
            "balance",
            "bank_balance",
            "remark",
            "transaction_type",
            "created_at",
        ]
        read_only_fields = ["balance", "bank_balance", "created_at"]


class PayableSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payable
        fields = [
            "id",
            "due_date",
            "paid_to",
            "purpose",
            "amount",
            "paid",
            "pending",
            "status",
            "first_priority",
            "second_priority",
            "third_priority",
            "remark",
            "created_at",
        ]
        read_only_fields = ["pending", "created_at"]

    def validate(self, attrs):
        amount = attrs.get("amount", getattr(self.instance, "amount", 0))
        paid = attrs.get("paid", getattr(self.instance, "paid", 0))
        if paid < 0 or paid > amount:
            raise serializers.ValidationError("Paid must be between 0 and the payable amount.")
        return attrs


class ReceivableSerializer(serializers.ModelSerializer):
    class Meta:
        model = Receivable
        fields = ["id", "due_date", "receivable_from", "purpose", "amount", "bank", "status", "remark", "created_at"]
        read_only_fields = ["created_at"]
