from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict

from .aggregation import MamaPayment
from .normalize import to_decimal
from .store import StoreInventory, performance_level, sell_rate


CURRENCY = "ETB"


def _round(value, places: int) -> Decimal:
    return to_decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_number(value, places: int = 2) -> str:
    return f"{_round(value, places):,.{places}f}"


def format_etb(amount, places: int = 2) -> str:
    """``1234.5`` -> ``1,234.50 ETB``; dashboard cards pass ``places=0``."""
    return f"{format_number(amount, places)} {CURRENCY}"


def format_kg(value, places: int = 0) -> str:
    return f"{format_number(value, places)} kg"


def format_percent(value, places: int = 1) -> str:
    return f"{format_number(value, places)}%"


def mama_payment_row(payment: MamaPayment) -> Dict[str, str]:
    return {
        "mama_id": str(payment.mama_id),
        "mama_name": payment.mama_name,
        "account_number": payment.account_number,
        "with_tube": format_number(payment.total_with_tube, 0),
        "without_tube": format_number(payment.total_without_tube, 0),
        "total_quantity": format_number(payment.total_quantity, 0),
        "working_days": str(payment.working_days),
        "total_amount": format_etb(payment.total_amount),
    }


def store_row(item: StoreInventory) -> Dict[str, str]:
    rate = sell_rate(item)
    return {
        "type": item.type,
        "total_stock": format_kg(item.total_kg),
        "total_bags": str(item.total_bags),
        "collected": format_kg(item.collected),
        "sold": format_kg(item.sold),
        "price_per_kg": format_etb(item.price_per_kg),
        "revenue": format_etb(item.revenue, 0),
        "sales_rate": format_percent(rate),
        "performance": performance_level(rate),
    }
