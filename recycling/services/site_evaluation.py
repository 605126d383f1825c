"""Site evaluation report: derived cost fields and submission checks.

Every calculated field is declared once in ``DERIVED_FIELDS`` together with
the raw fields it reads. After a raw field changes, the table is walked in
order and only the entries that (transitively) depend on the change are
re-evaluated, each one reading the already-updated draft.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Callable, Dict, Iterable, List, Optional

from django.core.exceptions import ValidationError

from .normalize import ZERO, date_part, pick, to_decimal, to_text


PAPER_WEIGHT_FIELDS = (
    "sw",
    "sc",
    "mixed",
    "carton",
    "card",
    "newspaper",
    "magazine",
    "plastic",
    "boxfile",
    "metal",
    "book",
)

TEXT_FIELDS = (
    "supplier_name",
    "collection_coordinator",
    "starting_date",
    "end_date",
    "collection_type",
    "transported_by",
    "quality_checked_by",
    "quality_approved_by",
    "customer_feedback",
    "key_operation_issues",
)


@dataclass(frozen=True)
class SiteEvaluationReport:
    id: Optional[int] = None
    session_id: Optional[int] = None

    supplier_name: str = ""
    collection_coordinator: str = ""
    starting_date: str = ""
    end_date: str = ""
    collection_type: str = "sorted"

    # Performance and bag utilization
    collected_amount_kg: Decimal = ZERO
    collected_amount_bag_number: Decimal = ZERO
    sw: Decimal = ZERO
    sc: Decimal = ZERO
    mixed: Decimal = ZERO
    carton: Decimal = ZERO
    card: Decimal = ZERO
    newspaper: Decimal = ZERO
    magazine: Decimal = ZERO
    plastic: Decimal = ZERO
    boxfile: Decimal = ZERO
    metal: Decimal = ZERO
    book: Decimal = ZERO
    average_kg_per_bag: Decimal = ZERO
    rate_of_bag: Decimal = ZERO
    cost_of_bag_per_kg: Decimal = ZERO
    bag_received_from_stock: Decimal = ZERO
    bag_used: Decimal = ZERO
    bag_return: Decimal = ZERO

    # Sorting labour cost
    no_of_sorting_and_collection_labor: Decimal = ZERO
    sorting_rate: Decimal = ZERO
    cost_of_sorting_and_collection_labour: Decimal = ZERO
    cost_of_labour_per_kg: Decimal = ZERO

    # Loading and unloading cost
    no_of_loading_unloading_labour: Decimal = ZERO
    loading_unloading_rate: Decimal = ZERO
    cost_of_loading_unloading: Decimal = ZERO
    cost_of_loading_labour_per_kg: Decimal = ZERO

    # Transportation cost
    transported_by: str = ""
    no_of_trip: Decimal = ZERO
    cost_of_transportation: Decimal = ZERO
    cost_of_transport_per_kg: Decimal = ZERO

    # Quality and feedback
    quality_checked_by: str = ""
    quality_approved_by: str = ""
    customer_feedback: str = ""
    key_operation_issues: str = ""

    @classmethod
    def from_payload(cls, payload: Dict) -> "SiteEvaluationReport":
        values = {}
        for name in NUMERIC_FIELDS:
            values[name] = to_decimal(pick(payload, _camel(name), name))
        for name in TEXT_FIELDS:
            values[name] = to_text(pick(payload, _camel(name), name))
        values["collection_type"] = values["collection_type"] or "sorted"
        values["starting_date"] = date_part(values["starting_date"])
        values["end_date"] = date_part(values["end_date"])
        raw_id = pick(payload, "id")
        raw_session = pick(payload, "sessionId", "session_id")
        values["id"] = int(to_decimal(raw_id)) if raw_id not in (None, "") else None
        values["session_id"] = int(to_decimal(raw_session)) if raw_session not in (None, "") else None
        return cls(**values)

    def to_payload(self) -> Dict:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "id" and value is None:
                continue
            out[_camel(f.name)] = value
        return out


NUMERIC_FIELDS = tuple(
    f.name for f in fields(SiteEvaluationReport) if f.type in ("Decimal", Decimal)
)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _q(value: Decimal, places: Optional[int]) -> Decimal:
    if places is None:
        return value
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _per_kg(numerator_field: str) -> Callable[[Dict], Optional[Decimal]]:
    def formula(r):
        kg = r["collected_amount_kg"]
        if kg <= 0:
            return None
        return r[numerator_field] / kg
    return formula


def _average_kg_per_bag(r):
    bags = r["collected_amount_bag_number"]
    if bags <= 0:
        return None
    return r["collected_amount_kg"] / bags


def _cost_of_bag_per_kg(r):
    kg = r["collected_amount_kg"]
    if kg <= 0:
        return None
    return r["rate_of_bag"] * r["collected_amount_bag_number"] / kg


@dataclass(frozen=True)
class DerivedField:
    name: str
    inputs: tuple
    formula: Callable[[Dict], Optional[Decimal]]
    places: Optional[int]


# Currency outputs carry 2 places, per-kg rates 3. A formula returning None
# hit a zero denominator and leaves the field untouched.
DERIVED_FIELDS: List[DerivedField] = [
    DerivedField(
        "collected_amount_kg",
        PAPER_WEIGHT_FIELDS,
        lambda r: sum((r[name] for name in PAPER_WEIGHT_FIELDS), ZERO),
        None,
    ),
    DerivedField(
        "bag_return",
        ("bag_received_from_stock", "bag_used"),
        lambda r: max(ZERO, r["bag_received_from_stock"] - r["bag_used"]),
        None,
    ),
    DerivedField(
        "average_kg_per_bag",
        ("collected_amount_kg", "collected_amount_bag_number"),
        _average_kg_per_bag,
        2,
    ),
    DerivedField(
        "cost_of_bag_per_kg",
        ("rate_of_bag", "collected_amount_bag_number", "collected_amount_kg"),
        _cost_of_bag_per_kg,
        3,
    ),
    DerivedField(
        "cost_of_sorting_and_collection_labour",
        ("no_of_sorting_and_collection_labor", "sorting_rate", "collected_amount_kg"),
        lambda r: r["no_of_sorting_and_collection_labor"] * r["sorting_rate"] * r["collected_amount_kg"],
        2,
    ),
    DerivedField(
        "cost_of_labour_per_kg",
        ("cost_of_sorting_and_collection_labour", "collected_amount_kg"),
        _per_kg("cost_of_sorting_and_collection_labour"),
        3,
    ),
    # Not weighted by kg, unlike the sorting labour cost above.
    DerivedField(
        "cost_of_loading_unloading",
        ("no_of_loading_unloading_labour", "loading_unloading_rate"),
        lambda r: r["no_of_loading_unloading_labour"] * r["loading_unloading_rate"],
        2,
    ),
    DerivedField(
        "cost_of_loading_labour_per_kg",
        ("cost_of_loading_unloading", "collected_amount_kg"),
        _per_kg("cost_of_loading_unloading"),
        3,
    ),
    DerivedField(
        "cost_of_transport_per_kg",
        ("cost_of_transportation", "collected_amount_kg"),
        _per_kg("cost_of_transportation"),
        3,
    ),
]

DERIVED_NAMES = frozenset(d.name for d in DERIVED_FIELDS)
INPUT_FIELDS = frozenset(NUMERIC_FIELDS) - DERIVED_NAMES


def affected_fields(changed: Iterable[str]) -> List[str]:
    """Derived fields to re-evaluate, in table order, after ``changed`` moved."""
    dirty = set(changed)
    out = []
    for derived in DERIVED_FIELDS:
        if dirty.intersection(derived.inputs):
            out.append(derived.name)
            dirty.add(derived.name)
    return out


def _evaluate(report: SiteEvaluationReport, names: Iterable[str]) -> SiteEvaluationReport:
    wanted = set(names)
    values = {name: getattr(report, name) for name in NUMERIC_FIELDS}
    updates = {}
    for derived in DERIVED_FIELDS:
        if derived.name not in wanted:
            continue
        try:
            result = derived.formula(values)
            if result is None:
                continue
            result = _q(result, derived.places)
        except InvalidOperation as exc:
            raise ValidationError(f"{_camel(derived.name)} is out of range; check the values it is calculated from.") from exc
        values[derived.name] = result
        updates[derived.name] = result
    return replace(report, **updates) if updates else report


def recompute(report: SiteEvaluationReport, changed_field: str, new_value) -> SiteEvaluationReport:
    """Apply one edit and cascade it through the dependent fields."""
    if changed_field in DERIVED_NAMES:
        raise ValueError(f"{changed_field} is calculated and cannot be set directly")
    if changed_field in TEXT_FIELDS:
        return replace(report, **{changed_field: to_text(new_value)})
    if changed_field not in INPUT_FIELDS:
        raise ValueError(f"Unknown field: {changed_field}")

    draft = replace(report, **{changed_field: to_decimal(new_value)})
    return _evaluate(draft, affected_fields([changed_field]))


def recompute_all(report: SiteEvaluationReport) -> SiteEvaluationReport:
    return _evaluate(report, DERIVED_NAMES)


def apply_session(report: SiteEvaluationReport, session: Dict) -> SiteEvaluationReport:
    """Prefill header fields from a collection session; weights stay user input."""
    return replace(
        report,
        session_id=int(to_decimal(pick(session, "id"))) or None,
        supplier_name=to_text(pick(session, "supplier_name", "supplierName")),
        collection_coordinator=to_text(pick(session, "coordinator_name", "coordinatorName")),
        starting_date=date_part(pick(session, "actual_start_date", "actualStartDate")),
        end_date=date_part(pick(session, "actual_end_date", "actualEndDate")),
    )


def validate_report(report: SiteEvaluationReport) -> List[str]:
    errors = []
    if not report.session_id:
        errors.append("Please select a collection session first.")
    if report.collected_amount_kg <= 0:
        errors.append("Collected amount must be greater than 0.")
    if report.bag_used > report.bag_received_from_stock:
        errors.append(
            f"Bags used ({report.bag_used}) cannot exceed bags received from stock "
            f"({report.bag_received_from_stock})."
        )
    for name in sorted(INPUT_FIELDS):
        if getattr(report, name) < 0:
            errors.append(f"{_camel(name)} cannot be negative.")
    return errors


def ensure_submittable(report: SiteEvaluationReport) -> SiteEvaluationReport:
    """Recalculate every derived field and reject the report on any violation."""
    report = recompute_all(report)
    errors = validate_report(report)
    if errors:
        raise ValidationError(errors)
    return report
