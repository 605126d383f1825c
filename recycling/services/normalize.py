from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional


ZERO = Decimal("0")

# No weight, count or price in this domain comes near this; larger values
# are treated as unparsable.
MAX_MAGNITUDE = Decimal("1e12")


def to_decimal(value) -> Decimal:
    """Coerce an API value to Decimal.

    Strings may carry whitespace and thousands separators. Missing, empty,
    unparsable, non-finite or out-of-range values become 0; this never raises.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        dec = value
    else:
        try:
            dec = Decimal(str(value).strip().replace(",", ""))
        except (InvalidOperation, ValueError):
            return ZERO
    if not dec.is_finite() or abs(dec) >= MAX_MAGNITUDE:
        return ZERO
    return dec


def to_int(value) -> int:
    return int(to_decimal(value))


def to_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def pick(payload: Dict[str, Any], *names, default=None):
    """Return the first key present in ``payload`` (camelCase or snake_case)."""
    for name in names:
        if name in payload and payload[name] is not None:
            return payload[name]
    return default


def date_part(value) -> str:
    """``2024-05-01T08:00:00Z`` -> ``2024-05-01``."""
    text = to_text(value)
    return text.split("T")[0] if text else ""


@dataclass
class CollectionTransaction:
    id: str
    supplier_id: str
    supplier_name: str
    item_name: str
    quantity: Decimal
    unit_price: Decimal
    total_amount: Decimal
    date: str
    receipt_number: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CollectionTransaction":
        return cls(
            id=to_text(pick(payload, "id")),
            supplier_id=to_text(pick(payload, "supplierId", "supplier_id")),
            supplier_name=to_text(pick(payload, "supplierName", "supplier_name")),
            item_name=to_text(pick(payload, "itemName", "item_name")),
            quantity=to_decimal(pick(payload, "quantity")),
            unit_price=to_decimal(pick(payload, "unitPrice", "unit_price")),
            total_amount=to_decimal(pick(payload, "totalAmount", "total_amount")),
            date=to_text(pick(payload, "date")),
            receipt_number=to_text(pick(payload, "receiptNumber", "receipt_number")),
        )


@dataclass
class MamaProduct:
    product_id: int
    product_name: str
    type: str
    quantity: Decimal
    unit_price: Decimal
    total_amount: Decimal
    notes: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "MamaProduct":
        return cls(
            product_id=to_int(pick(payload, "productId", "product_id")),
            product_name=to_text(pick(payload, "productName", "product_name")),
            type=to_text(pick(payload, "type")),
            quantity=to_decimal(pick(payload, "quantity")),
            unit_price=to_decimal(pick(payload, "unitPrice", "unit_price")),
            total_amount=to_decimal(pick(payload, "totalAmount", "total_amount")),
            notes=to_text(pick(payload, "notes")),
        )


@dataclass
class MamaDayEntry:
    mama_id: int
    full_name: str
    account_number: str
    date: str
    products: List[MamaProduct] = field(default_factory=list)
    grand_total: Decimal = ZERO

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "MamaDayEntry":
        products = pick(payload, "products", default=[]) or []
        return cls(
            mama_id=to_int(pick(payload, "mamaId", "mama_id")),
            full_name=to_text(pick(payload, "fullName", "full_name")),
            account_number=to_text(pick(payload, "accountNumber", "account_number")),
            date=date_part(pick(payload, "date")),
            products=[MamaProduct.from_payload(p) for p in products if isinstance(p, dict)],
            grand_total=to_decimal(pick(payload, "grandTotal", "grand_total")),
        )


@dataclass
class JanitorCollection:
    supplier_id: int
    supplier_name: str
    collection_type: str
    paper_type: str
    total_kg: Decimal
    total_bag: Decimal
    janitor_name: str
    janitor_account: str


def janitor_collections_from_payload(payload) -> List[JanitorCollection]:
    """Flatten the ``/payment`` response (suppliers with nested collections)."""
    out: List[JanitorCollection] = []
    for supplier in payload or []:
        if not isinstance(supplier, dict):
            continue
        supplier_id = to_int(pick(supplier, "supplier_id", "supplierId"))
        supplier_name = to_text(pick(supplier, "supplier_name", "supplierName"))
        for col in pick(supplier, "collections", default=[]) or []:
            out.append(
                JanitorCollection(
                    supplier_id=supplier_id,
                    supplier_name=supplier_name,
                    collection_type=to_text(pick(col, "collection_type", "collectionType")),
                    paper_type=to_text(pick(col, "paper_type", "paperType")),
                    total_kg=to_decimal(pick(col, "total_kg", "totalKg")),
                    total_bag=to_decimal(pick(col, "total_bag", "totalBag")),
                    janitor_name=to_text(pick(col, "janitor_name", "janitorName")),
                    janitor_account=to_text(pick(col, "janitor_account", "janitorAccount")),
                )
            )
    return out


@dataclass
class VisitPlan:
    id: int
    supplier_id: int
    marketer_id: int
    visit_date: str
    type: str
    status: str
    company_name: str = ""
    notes: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "VisitPlan":
        return cls(
            id=to_int(pick(payload, "id")),
            supplier_id=to_int(pick(payload, "supplier_id", "supplierId")),
            marketer_id=to_int(pick(payload, "marketer_id", "marketerId")),
            visit_date=date_part(pick(payload, "visit_date", "visitDate")),
            type=to_text(pick(payload, "type")),
            status=to_text(pick(payload, "status")) or "Pending",
            company_name=to_text(pick(payload, "company_name", "companyName")),
            notes=to_text(pick(payload, "notes")),
        )


def normalize_list(payload, record_cls) -> List[Any]:
    """Build typed records from a list payload, skipping non-object rows."""
    items: Optional[list] = payload if isinstance(payload, list) else []
    return [record_cls.from_payload(item) for item in items if isinstance(item, dict)]
