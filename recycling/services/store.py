"""Store inventory movements: collection intake, sorting of mixed paper, sales.

Every operation validates the whole request first and returns a new store
mapping; the store passed in is never modified. A rejected request raises
``ValidationError`` listing every violated constraint.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Optional

from django.core.exceptions import ValidationError

from .normalize import ZERO, CollectionTransaction, pick, to_decimal, to_text


BAG_WEIGHT_KG = 50

PAPER_TYPES = ("mixed", "sw", "sc", "carton", "np")
SORTED_TYPES = ("sw", "sc", "carton", "np")

TWO_PLACES = Decimal("0.01")


def _q2(x: Decimal) -> Decimal:
    return x.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def bags_for(kg: Decimal, bag_weight: int = BAG_WEIGHT_KG) -> int:
    """Whole bags filled by ``kg`` at a fixed bag weight."""
    if kg <= 0:
        return 0
    return int(kg // bag_weight)


@dataclass(frozen=True)
class StoreInventory:
    type: str
    name: str = ""
    total_kg: Decimal = ZERO
    total_bags: int = 0
    collected: Decimal = ZERO
    sold: Decimal = ZERO
    revenue: Decimal = ZERO
    price_per_kg: Decimal = ZERO

    @classmethod
    def from_payload(cls, payload: Dict) -> "StoreInventory":
        month = pick(payload, "currentMonth", "current_month", default={}) or {}
        ptype = to_text(pick(payload, "type", "paper_type", "paperType")).lower()
        return cls(
            type=ptype,
            name=to_text(pick(payload, "name")) or ptype,
            total_kg=to_decimal(pick(payload, "totalKg", "total_kg")),
            total_bags=int(to_decimal(pick(payload, "totalBags", "total_bags"))),
            collected=to_decimal(pick(month, "collected")),
            sold=to_decimal(pick(month, "sold")),
            revenue=to_decimal(pick(month, "revenue")),
            price_per_kg=to_decimal(pick(payload, "price", "pricePerKg", "price_per_kg")),
        )

    def to_payload(self) -> Dict:
        return {
            "type": self.type,
            "name": self.name,
            "totalKg": self.total_kg,
            "totalBags": self.total_bags,
            "currentMonth": {
                "collected": self.collected,
                "sold": self.sold,
                "revenue": self.revenue,
            },
            "price": self.price_per_kg,
        }


Store = Dict[str, StoreInventory]


def store_from_payload(payload) -> Store:
    """Build a store keyed by paper type from a list (or a dict keyed by type)."""
    if isinstance(payload, dict):
        items = [dict(v, type=v.get("type") or k) for k, v in payload.items() if isinstance(v, dict)]
    else:
        items = [p for p in (payload or []) if isinstance(p, dict)]
    store: Store = {}
    for item in items:
        inv = StoreInventory.from_payload(item)
        if inv.type:
            store[inv.type] = inv
    for ptype in PAPER_TYPES:
        store.setdefault(ptype, StoreInventory(type=ptype, name=ptype))
    return store


def add_collection(
    store: Store,
    paper_type: str,
    kg,
    bags=None,
    bag_weight: int = BAG_WEIGHT_KG,
) -> Store:
    kg = to_decimal(kg)
    errors = []
    if paper_type not in store:
        errors.append(f"Unknown paper type: {paper_type}")
    if kg <= 0:
        errors.append("Collected amount must be greater than 0 kg.")
    bag_count = bags_for(kg, bag_weight) if bags in (None, "") else int(to_decimal(bags))
    if bag_count < 0:
        errors.append("Bag count cannot be negative.")
    if errors:
        raise ValidationError(errors)

    item = store[paper_type]
    out = dict(store)
    out[paper_type] = replace(
        item,
        total_kg=item.total_kg + kg,
        total_bags=item.total_bags + bag_count,
        collected=item.collected + kg,
    )
    return out


def sort_mixed(
    store: Store,
    mixed_kg,
    splits: Dict[str, object],
    bag_weight: int = BAG_WEIGHT_KG,
) -> Store:
    """Move ``mixed_kg`` out of mixed stock into the sorted grades in ``splits``.

    The kilograms credited to the sorted grades must add up to exactly the
    kilograms taken from mixed.
    """
    mixed_kg = to_decimal(mixed_kg)
    credits = {ptype: to_decimal(kg) for ptype, kg in (splits or {}).items()}

    errors = []
    if mixed_kg <= 0:
        errors.append("Amount to sort must be greater than 0 kg.")
    for ptype, kg in credits.items():
        if ptype not in SORTED_TYPES:
            errors.append(f"Cannot sort into {ptype}; expected one of {', '.join(SORTED_TYPES)}.")
        if kg < 0:
            errors.append(f"{ptype}: sorted amount cannot be negative.")
    credited = sum(credits.values(), ZERO)
    if credited != mixed_kg:
        errors.append(f"Sorted amounts ({credited} kg) must equal the mixed amount taken ({mixed_kg} kg).")
    available = store["mixed"].total_kg if "mixed" in store else ZERO
    if mixed_kg > available:
        errors.append(f"mixed: requested {mixed_kg} kg exceeds available {available} kg.")
    if errors:
        raise ValidationError(errors)

    out = dict(store)
    mixed = out["mixed"]
    out["mixed"] = replace(
        mixed,
        total_kg=mixed.total_kg - mixed_kg,
        total_bags=max(0, mixed.total_bags - bags_for(mixed_kg, bag_weight)),
    )
    for ptype, kg in credits.items():
        item = out.get(ptype) or StoreInventory(type=ptype, name=ptype)
        out[ptype] = replace(
            item,
            total_kg=item.total_kg + kg,
            total_bags=item.total_bags + bags_for(kg, bag_weight),
        )
    return out


@dataclass(frozen=True)
class SaleItem:
    paper_type: str
    kg_amount: Decimal
    price_per_kg: Optional[Decimal] = None

    @classmethod
    def from_payload(cls, payload: Dict) -> "SaleItem":
        price = pick(payload, "pricePerKg", "price_per_kg", "price")
        return cls(
            paper_type=to_text(pick(payload, "type", "paperType", "paper_type")).lower(),
            kg_amount=to_decimal(pick(payload, "kgAmount", "kg_amount")),
            price_per_kg=to_decimal(price) if price not in (None, "") else None,
        )


def sell(store: Store, items: Iterable[SaleItem], bag_weight: int = BAG_WEIGHT_KG) -> Store:
    items = list(items)
    errors = []
    if not items:
        errors.append("A sale needs at least one item.")

    requested: Dict[str, Decimal] = {}
    for pos, item in enumerate(items, start=1):
        if item.paper_type not in store:
            errors.append(f"Item {pos}: unknown paper type {item.paper_type or '(blank)'}.")
            continue
        if item.kg_amount <= 0:
            errors.append(f"Item {pos} ({item.paper_type}): quantity must be greater than 0 kg.")
            continue
        requested[item.paper_type] = requested.get(item.paper_type, ZERO) + item.kg_amount
        available = store[item.paper_type].total_kg
        if requested[item.paper_type] > available:
            errors.append(
                f"Item {pos} ({item.paper_type}): requested {requested[item.paper_type]} kg "
                f"exceeds available {available} kg."
            )
    if errors:
        raise ValidationError(errors)

    out = dict(store)
    for item in items:
        inv = out[item.paper_type]
        price = inv.price_per_kg if item.price_per_kg is None else item.price_per_kg
        out[item.paper_type] = replace(
            inv,
            total_kg=inv.total_kg - item.kg_amount,
            total_bags=max(0, inv.total_bags - bags_for(item.kg_amount, bag_weight)),
            sold=inv.sold + item.kg_amount,
            revenue=_q2(inv.revenue + item.kg_amount * price),
        )
    return out


# --- dashboard derivations -------------------------------------------------

def sell_rate(item: StoreInventory) -> Decimal:
    if item.collected <= 0:
        return ZERO
    return item.sold / item.collected * 100


def performance_level(rate: Decimal) -> str:
    if rate >= 90:
        return "Excellent"
    if rate >= 70:
        return "Good"
    if rate >= 50:
        return "Fair"
    return "Poor"


def distribution(store: Store) -> Dict[str, Decimal]:
    """Share of total stock per paper type, in percent with one decimal."""
    total = sum((i.total_kg for i in store.values()), ZERO)
    if total <= 0:
        return {ptype: ZERO for ptype in store}
    return {
        ptype: (item.total_kg / total * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        for ptype, item in store.items()
    }


def best_performer(store: Store) -> Optional[StoreInventory]:
    best = None
    for item in store.values():
        if best is None or item.revenue > best.revenue:
            best = item
    return best


def store_totals(store: Store) -> Dict[str, Decimal]:
    items = list(store.values())
    return {
        "total_kg": sum((i.total_kg for i in items), ZERO),
        "total_bags": sum(i.total_bags for i in items),
        "total_collected": sum((i.collected for i in items), ZERO),
        "total_sold": sum((i.sold for i in items), ZERO),
        "total_revenue": sum((i.revenue for i in items), ZERO),
    }


# --- collection transactions -----------------------------------------------

EDITABLE_TRANSACTION_FIELDS = ("quantity", "unit_price")


def edit_transaction(txn: CollectionTransaction, field_name: str, value) -> CollectionTransaction:
    """Edit quantity or unit price, keeping total = quantity * unit price."""
    if field_name == "total_amount":
        raise ValueError("total_amount is calculated from quantity and unit price")
    if field_name in EDITABLE_TRANSACTION_FIELDS:
        updated = replace(txn, **{field_name: to_decimal(value)})
    elif field_name in ("supplier_name", "item_name", "date", "receipt_number"):
        updated = replace(txn, **{field_name: to_text(value)})
    else:
        raise ValueError(f"Unknown field: {field_name}")
    return replace(updated, total_amount=_q2(updated.quantity * updated.unit_price))
