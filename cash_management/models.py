from django.db import models
from django.contrib.auth.models import User


STATUS_CHOICES = [
    ('paid', 'Paid'),
    ('unpaid', 'Unpaid'),
    ('partial', 'Partial'),
]


class BankAccount(models.Model):
    name = models.CharField(max_length=100, unique=True)
    bank_name = models.CharField(max_length=100, blank=True)
    currency = models.CharField(max_length=10, default='ETB')
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class CashFlowTransaction(models.Model):
    TYPE_CHOICES = [
        ('deposit', 'Deposit'),
        ('withdrawal', 'Withdrawal'),
        ('transfer', 'Transfer'),
    ]

    bank = models.ForeignKey(BankAccount, on_delete=models.PROTECT, related_name='transactions')
    date = models.DateField()
    paid_to = models.CharField(max_length=200, blank=True)
    received_from = models.CharField(max_length=200, blank=True)
    description = models.TextField()
    pv_number = models.CharField(max_length=50, blank=True)
    cheque_number = models.CharField(max_length=50, blank=True)
    fs_number = models.CharField(max_length=50, blank=True)
    debit = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    credit = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    # Running balance of this bank's ledger after the entry
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    bank_balance = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    remark = models.TextField(blank=True)
    transaction_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='deposit')
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='cash_transactions'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['date', 'id']

    def __str__(self) -> str:
        sign = '-' if self.debit else '+'
        amount = self.debit if self.debit else self.credit
        return f"{self.date} {sign}{amount} {self.bank}"


class Payable(models.Model):
    due_date = models.DateField()
    paid_to = models.CharField(max_length=200)
    purpose = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    paid = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    pending = models.DecimalField(max_digits=14, decimal_places=2, default=0, editable=False)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='unpaid')
    first_priority = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    second_priority = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    third_priority = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    remark = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['due_date']

    def save(self, *args, **kwargs):
        self.pending = (self.amount or 0) - (self.paid or 0)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.paid_to}: {self.pending} pending"


class Receivable(models.Model):
    due_date = models.DateField()
    receivable_from = models.CharField(max_length=200)
    purpose = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    bank = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='unpaid')
    remark = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['due_date']

    def __str__(self) -> str:
        return f"{self.receivable_from}: {self.amount} ({self.status})"


class AuditLog(models.Model):
    action = models.CharField(max_length=50)
    model = models.CharField(max_length=100)
    object_id = models.CharField(max_length=50)
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL)
    note = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.created_at:%Y-%m-%d %H:%M} {self.action} {self.model}#{self.object_id}"
