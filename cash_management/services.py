from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable

from django.core.exceptions import ValidationError
from django.db import transaction

from cash_management.models import BankAccount, CashFlowTransaction, Payable, Receivable


ZERO = Decimal("0")


def _q(x):
    return Decimal(x or 0).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@transaction.atomic
def post_cash_transaction(bank_id: int, *, date, description: str, debit=0, credit=0, actor=None, **details):
    """Record one entry against a bank account and move its balance.

    A debit reduces the bank balance and a credit increases it; exactly one of
    them must be positive. The running balance continues from the bank's last
    entry, or from the bank balance before this entry when it is the first.
    """
    debit, credit = _q(debit), _q(credit)
    errors = []
    if debit < 0 or credit < 0:
        errors.append("Debit and credit cannot be negative.")
    if (debit > 0) == (credit > 0):
        errors.append("Enter either a debit or a credit amount.")
    if not (description or "").strip():
        errors.append("Description is required.")
    if errors:
        raise ValidationError(errors)

    bank = BankAccount.objects.select_for_update().get(pk=bank_id)
    last = CashFlowTransaction.objects.filter(bank=bank).order_by("-date", "-id").first()
    previous = last.balance if last else bank.balance

    is_debit = debit > 0
    bank.balance = _q(bank.balance) - debit if is_debit else _q(bank.balance) + credit
    bank.save(update_fields=["balance", "last_updated"])

    return CashFlowTransaction.objects.create(
        bank=bank,
        date=date,
        description=description,
        debit=debit,
        credit=credit,
        balance=previous - debit if is_debit else previous + credit,
        bank_balance=bank.balance,
        transaction_type=details.pop("transaction_type", "withdrawal" if is_debit else "deposit"),
        created_by=actor,
        **details,
    )


def compute_financial_summary(
    banks: Iterable[BankAccount],
    payables: Iterable[Payable],
    receivables: Iterable[Receivable],
) -> Dict[str, Decimal]:
    total_payable = sum((_q(p.pending) for p in payables), ZERO)
    total_receivable = sum((_q(r.amount) for r in receivables if r.status == "unpaid"), ZERO)
    total_bank_balance = sum((_q(b.balance) for b in banks), ZERO)
    cash_balance = total_bank_balance
    return {
        "totalPayable": total_payable,
        "totalReceivable": total_receivable,
        "totalBankBalance": total_bank_balance,
        "cashBalance": cash_balance,
        "cashReceivableBalance": cash_balance + total_receivable,
        "difference": total_receivable - total_payable,
    }


def financial_summary() -> Dict[str, Decimal]:
    return compute_financial_summary(
        BankAccount.objects.all(),
        Payable.objects.all(),
        Receivable.objects.all(),
    )
