from decimal import Decimal

from django.contrib.auth.models import Group, User
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from cash_management.models import BankAccount, Payable


class CashApiTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="finance", password="pass")
        self.user.groups.add(Group.objects.get_or_create(name="Finance")[0])
        self.client = APIClient()
        self.client.force_authenticate(self.user)
        self.bank = BankAccount.objects.create(name="CBE Bank", balance=Decimal("1000"))

    def test_summary(self):
        Payable.objects.create(due_date="2024-05-01", paid_to="A", purpose="x", amount=Decimal("400"))
        resp = self.client.get(reverse("cash_management:cash_summary"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["totalPayable"], 400.0)
        self.assertEqual(resp.json()["difference"], -400.0)
        self.assertEqual(resp.json()["cashReceivableBalance"], 1000.0)

    def test_post_transaction(self):
        resp = self.client.post(
            reverse("cash_management:transactions"),
            {"bank": self.bank.pk, "date": "2024-05-01", "description": "Fuel", "debit": "250.00"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["balance"], "750.00")
        self.assertEqual(resp.json()["bank_name"], "CBE Bank")
        listing = self.client.get(reverse("cash_management:transactions"), {"bank": self.bank.pk})
        self.assertEqual(len(listing.json()), 1)

    def test_transaction_needs_one_amount(self):
        resp = self.client.post(
            reverse("cash_management:transactions"),
            {"bank": self.bank.pk, "date": "2024-05-01", "description": "Nothing"},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.bank.refresh_from_db()
        self.assertEqual(self.bank.balance, Decimal("1000"))

    def test_payable_create_and_update(self):
        resp = self.client.post(
            reverse("cash_management:payables"),
            {"due_date": "2024-05-10", "paid_to": "Transport Co", "purpose": "Trips", "amount": "900", "paid": "100"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["pending"], "800.00")
        pk = resp.json()["id"]
        resp = self.client.patch(reverse("cash_management:payable_detail", args=[pk]), {"paid": "900", "status": "paid"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["pending"], "0.00")

    def test_overpaid_payable_is_rejected(self):
        resp = self.client.post(
            reverse("cash_management:payables"),
            {"due_date": "2024-05-10", "paid_to": "X", "purpose": "Y", "amount": "100", "paid": "150"},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)

    def test_receivables_filter_by_status(self):
        for status in ("unpaid", "paid"):
            self.client.post(
                reverse("cash_management:receivables"),
                {"due_date": "2024-05-10", "receivable_from": "Mill", "purpose": "Sale", "amount": "500", "status": status},
                format="json",
            )
        resp = self.client.get(reverse("cash_management:receivables"), {"status": "unpaid"})
        self.assertEqual(len(resp.json()), 1)

    def test_requires_finance_group(self):
        self.user.groups.clear()
        resp = self.client.get(reverse("cash_management:cash_summary"))
        self.assertEqual(resp.status_code, 403)
