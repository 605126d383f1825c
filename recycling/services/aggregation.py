from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Hashable, Iterable, List, Tuple, TypeVar

from .normalize import ZERO, CollectionTransaction, JanitorCollection, MamaDayEntry, VisitPlan


T = TypeVar("T")
A = TypeVar("A")


def aggregate(
    records: Iterable[T],
    key_fn: Callable[[T], Hashable],
    init_fn: Callable[[T], A],
    fold_fn: Callable[[A, T], None],
) -> Dict[Hashable, A]:
    """Group ``records`` by ``key_fn`` in a single pass.

    ``init_fn`` builds the aggregate the first time a key is seen and
    ``fold_fn`` folds each record into it. Keys keep first-seen order.
    """
    out: Dict[Hashable, A] = {}
    for record in records:
        key = key_fn(record)
        agg = out.get(key)
        if agg is None:
            agg = out[key] = init_fn(record)
        fold_fn(agg, record)
    return out


# --- mama payments ---------------------------------------------------------

WITH_TUBE = "withTube"
WITHOUT_TUBE = "withoutTube"


@dataclass
class MamaPayment:
    mama_id: int
    mama_name: str
    account_number: str
    total_with_tube: Decimal = ZERO
    total_without_tube: Decimal = ZERO
    total_quantity: Decimal = ZERO
    total_amount: Decimal = ZERO
    working_days: int = 0
    details: List[MamaDayEntry] = field(default_factory=list)
    _dates: set = field(default_factory=set, repr=False)


def _fold_mama_entry(payment: MamaPayment, entry: MamaDayEntry) -> None:
    payment.details.append(entry)
    for product in entry.products:
        if product.type == WITH_TUBE:
            payment.total_with_tube += product.quantity
        elif product.type == WITHOUT_TUBE:
            payment.total_without_tube += product.quantity
        payment.total_quantity += product.quantity
        payment.total_amount += product.total_amount
    payment._dates.add(entry.date)
    payment.working_days = len(payment._dates)


def aggregate_mama_payments(entries: Iterable[MamaDayEntry]) -> List[MamaPayment]:
    grouped = aggregate(
        entries,
        key_fn=lambda e: e.mama_id,
        init_fn=lambda e: MamaPayment(e.mama_id, e.full_name, e.account_number),
        fold_fn=_fold_mama_entry,
    )
    return list(grouped.values())


def summarize_mama_payments(payments: List[MamaPayment]) -> Dict[str, Decimal]:
    return {
        "total_payment": sum((p.total_amount for p in payments), ZERO),
        "active_mamas": sum(1 for p in payments if p.total_quantity > 0),
        "total_products": sum((p.total_quantity for p in payments), ZERO),
        "total_with_tube": sum((p.total_with_tube for p in payments), ZERO),
        "total_without_tube": sum((p.total_without_tube for p in payments), ZERO),
        "total_working_days": sum(p.working_days for p in payments),
    }


# --- janitor payments ------------------------------------------------------

# Paper codes in report column order.
PAPER_CODES = ("boxfile", "Card", "Carton", "metal", "MG", "Mixed", "Np", "SC", "SW")

DEFAULT_RATE = Decimal("5.5")

PAYMENT_RATES: Dict[str, Dict[str, Decimal]] = {
    "regular": {
        "boxfile": Decimal("5.5"),
        "Card": Decimal("5.5"),
        "Carton": Decimal("7"),
        "metal": Decimal("5.5"),
        "MG": Decimal("5.5"),
        "Mixed": Decimal("5.5"),
        "Np": Decimal("30"),
        "SC": Decimal("5.5"),
        "SW": Decimal("7"),
    },
    "instore": {code: DEFAULT_RATE for code in PAPER_CODES},
}


def paper_type_code(name: str) -> str:
    """Map a free-text paper type name to its payment code; defaults to Mixed."""
    if "White" in name or name == "SW":
        return "SW"
    if "Colored" in name or name == "SC":
        return "SC"
    if "Mixed" in name:
        return "Mixed"
    if "Carton" in name:
        return "Carton"
    if "Newspaper" in name or name == "Np":
        return "Np"
    if "Metal" in name or name == "metal":
        return "metal"
    if "Card" in name:
        return "Card"
    if "boxfile" in name:
        return "boxfile"
    if "MG" in name:
        return "MG"
    return "Mixed"


def collection_type_of(text: str) -> str:
    return "instore" if "instore" in text.lower() else "regular"


def payment_rate(collection_type: str, code: str) -> Decimal:
    return PAYMENT_RATES.get(collection_type, {}).get(code, DEFAULT_RATE)


@dataclass
class PaperTypeSummary:
    paper_type: str
    paper_type_code: str
    weight: Decimal = ZERO
    amount: Decimal = ZERO


@dataclass
class JanitorSummary:
    janitor_name: str
    janitor_account: str
    collection_type: str
    paper_types: Dict[str, PaperTypeSummary] = field(default_factory=dict)
    total_weight: Decimal = ZERO
    total_amount: Decimal = ZERO


@dataclass
class SupplierSummary:
    supplier_id: int
    supplier_name: str
    janitors: Dict[Tuple[str, str], JanitorSummary] = field(default_factory=dict)
    total_weight: Decimal = ZERO
    total_amount: Decimal = ZERO


def _fold_janitor_collection(supplier: SupplierSummary, col: JanitorCollection) -> None:
    ctype = collection_type_of(col.collection_type)
    code = paper_type_code(col.paper_type)
    weight = col.total_kg
    amount = weight * payment_rate(ctype, code)

    key = (col.janitor_name, col.janitor_account)
    janitor = supplier.janitors.get(key)
    if janitor is None:
        janitor = supplier.janitors[key] = JanitorSummary(col.janitor_name, col.janitor_account, ctype)
    paper = janitor.paper_types.get(code)
    if paper is None:
        paper = janitor.paper_types[code] = PaperTypeSummary(col.paper_type, code)

    paper.weight += weight
    paper.amount += amount
    janitor.total_weight += weight
    janitor.total_amount += amount
    supplier.total_weight += weight
    supplier.total_amount += amount


def aggregate_janitor_payments(collections: Iterable[JanitorCollection]) -> List[SupplierSummary]:
    grouped = aggregate(
        collections,
        key_fn=lambda c: c.supplier_id,
        init_fn=lambda c: SupplierSummary(c.supplier_id, c.supplier_name),
        fold_fn=_fold_janitor_collection,
    )
    return list(grouped.values())


# --- supplier collections --------------------------------------------------

@dataclass
class SupplierCollectionSummary:
    supplier_id: str
    supplier_name: str
    transactions: int = 0
    total_quantity: Decimal = ZERO
    total_amount: Decimal = ZERO
    last_collection: str = ""


def _fold_supplier_transaction(summary: SupplierCollectionSummary, txn: CollectionTransaction) -> None:
    summary.transactions += 1
    summary.total_quantity += txn.quantity
    summary.total_amount += txn.total_amount
    if txn.date > summary.last_collection:
        summary.last_collection = txn.date


def aggregate_supplier_collections(transactions: Iterable[CollectionTransaction]) -> List[SupplierCollectionSummary]:
    grouped = aggregate(
        transactions,
        key_fn=lambda t: t.supplier_id,
        init_fn=lambda t: SupplierCollectionSummary(t.supplier_id, t.supplier_name),
        fold_fn=_fold_supplier_transaction,
    )
    return list(grouped.values())


# --- weekly plans ----------------------------------------------------------

WORKING_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def day_of(visit_date: date) -> str:
    """Working-day name for a date; Sunday is not a working day."""
    weekday = visit_date.weekday()
    if weekday == 6:
        raise ValueError(f"Date {visit_date.isoformat()} falls on Sunday which is not a working day")
    return WORKING_DAYS[weekday]


def group_plans_by_day(plans: Iterable[VisitPlan]) -> Dict[str, List[VisitPlan]]:
    """Bucket visit plans Monday..Saturday; rows without a valid date are skipped."""
    out: Dict[str, List[VisitPlan]] = {day: [] for day in WORKING_DAYS}
    for plan in plans:
        try:
            visit_date = date.fromisoformat(plan.visit_date)
        except ValueError:
            continue
        out[day_of(visit_date)].append(plan)
    return out
