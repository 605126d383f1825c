from datetime import date
from decimal import Decimal

import pytest

from recycling.services.aggregation import (
    aggregate,
    aggregate_janitor_payments,
    aggregate_mama_payments,
    aggregate_supplier_collections,
    day_of,
    group_plans_by_day,
    paper_type_code,
    payment_rate,
    summarize_mama_payments,
)
from recycling.services.normalize import (
    CollectionTransaction,
    MamaDayEntry,
    VisitPlan,
    janitor_collections_from_payload,
    normalize_list,
)


def _mama_entry(mama_id, day, products, name="Almaz"):
    return MamaDayEntry.from_payload({
        "mamaId": mama_id,
        "fullName": name,
        "accountNumber": f"ACC-{mama_id}",
        "date": day,
        "products": products,
    })


def test_two_days_for_one_mama():
    product = {"type": "withTube", "quantity": 5, "totalAmount": "50.00"}
    entries = [_mama_entry(7, "2024-05-01", [product]), _mama_entry(7, "2024-05-02", [product])]
    [payment] = aggregate_mama_payments(entries)
    assert payment.mama_id == 7
    assert payment.total_with_tube == 10
    assert payment.total_without_tube == 0
    assert payment.total_quantity == 10
    assert payment.total_amount == Decimal("100.00")
    assert payment.working_days == 2
    assert len(payment.details) == 2


def test_same_day_counts_once():
    entries = [
        _mama_entry(1, "2024-05-01T08:00:00Z", [{"type": "withoutTube", "quantity": 3, "totalAmount": 30}]),
        _mama_entry(1, "2024-05-01T15:00:00Z", [{"type": "withTube", "quantity": 2, "totalAmount": 20}]),
    ]
    [payment] = aggregate_mama_payments(entries)
    assert payment.working_days == 1
    assert payment.total_without_tube == 3
    assert payment.total_with_tube == 2


def test_keys_keep_first_seen_order():
    entries = [
        _mama_entry(3, "2024-05-01", [], name="C"),
        _mama_entry(1, "2024-05-01", [], name="A"),
        _mama_entry(3, "2024-05-02", [], name="C"),
        _mama_entry(2, "2024-05-01", [], name="B"),
    ]
    assert [p.mama_id for p in aggregate_mama_payments(entries)] == [3, 1, 2]


def test_aggregate_totals_match_source_totals():
    entries = [
        _mama_entry(i % 3, f"2024-05-0{1 + i % 5}", [{"type": "withTube", "quantity": i, "totalAmount": f"{i}.25"}])
        for i in range(1, 10)
    ]
    payments = aggregate_mama_payments(entries)
    source_total = sum(
        (p.total_amount for e in entries for p in e.products), Decimal("0")
    )
    assert sum(p.total_amount for p in payments) == source_total
    assert summarize_mama_payments(payments)["total_payment"] == source_total


def test_summary_counts_active_mamas():
    entries = [
        _mama_entry(1, "2024-05-01", [{"type": "withTube", "quantity": 4, "totalAmount": 40}]),
        _mama_entry(2, "2024-05-01", []),
    ]
    summary = summarize_mama_payments(aggregate_mama_payments(entries))
    assert summary["active_mamas"] == 1
    assert summary["total_products"] == 4
    assert summary["total_working_days"] == 2


def test_generic_aggregate():
    words = ["apple", "avocado", "banana", "blueberry", "cherry"]
    out = aggregate(words, key_fn=lambda w: w[0], init_fn=lambda w: [], fold_fn=lambda acc, w: acc.append(w))
    assert list(out) == ["a", "b", "c"]
    assert out["b"] == ["banana", "blueberry"]


def test_paper_type_codes():
    assert paper_type_code("White Paper") == "SW"
    assert paper_type_code("Colored Paper") == "SC"
    assert paper_type_code("Carton Box") == "Carton"
    assert paper_type_code("Newspaper") == "Np"
    assert paper_type_code("Something else") == "Mixed"


def test_payment_rates_by_collection_type():
    assert payment_rate("regular", "Np") == Decimal("30")
    assert payment_rate("regular", "Carton") == Decimal("7")
    assert payment_rate("instore", "Np") == Decimal("5.5")
    assert payment_rate("unknown", "SW") == Decimal("5.5")


def test_janitor_payments_grouped_by_supplier_and_janitor():
    payload = [
        {
            "supplier_id": 1,
            "supplier_name": "Bole Office",
            "collections": [
                {"collection_type": "Regular", "paper_type": "White Paper", "total_kg": "10", "janitor_name": "Kebede", "janitor_account": "A1"},
                {"collection_type": "Regular", "paper_type": "Newspaper", "total_kg": "2", "janitor_name": "Kebede", "janitor_account": "A1"},
                {"collection_type": "Instore", "paper_type": "Newspaper", "total_kg": "4", "janitor_name": "Sara", "janitor_account": "A2"},
            ],
        },
    ]
    [supplier] = aggregate_janitor_payments(janitor_collections_from_payload(payload))
    kebede = supplier.janitors[("Kebede", "A1")]
    assert kebede.paper_types["SW"].amount == Decimal("70")
    assert kebede.paper_types["Np"].amount == Decimal("60")
    assert kebede.total_amount == Decimal("130")
    sara = supplier.janitors[("Sara", "A2")]
    assert sara.collection_type == "instore"
    assert sara.total_amount == Decimal("22.0")
    assert supplier.total_weight == Decimal("16")
    assert supplier.total_amount == Decimal("152.0")


def test_supplier_collections():
    rows = normalize_list([
        {"supplierId": "S1", "supplierName": "School", "quantity": "10", "totalAmount": "70", "date": "2024-05-01"},
        {"supplierId": "S2", "supplierName": "Office", "quantity": "5", "totalAmount": "35", "date": "2024-05-02"},
        {"supplierId": "S1", "supplierName": "School", "quantity": "20", "totalAmount": "140", "date": "2024-05-03"},
    ], CollectionTransaction)
    summaries = aggregate_supplier_collections(rows)
    assert [s.supplier_id for s in summaries] == ["S1", "S2"]
    assert summaries[0].transactions == 2
    assert summaries[0].total_quantity == Decimal("30")
    assert summaries[0].total_amount == Decimal("210")
    assert summaries[0].last_collection == "2024-05-03"


def test_day_of_rejects_sunday():
    assert day_of(date(2024, 5, 6)) == "Monday"
    assert day_of(date(2024, 5, 11)) == "Saturday"
    with pytest.raises(ValueError):
        day_of(date(2024, 5, 12))


def test_group_plans_by_day_skips_undated_rows():
    plans = normalize_list([
        {"id": 1, "visit_date": "2024-05-06T00:00:00Z"},
        {"id": 2, "visit_date": "2024-05-08"},
        {"id": 3, "visit_date": ""},
    ], VisitPlan)
    by_day = group_plans_by_day(plans)
    assert list(by_day) == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
    assert [p.id for p in by_day["Monday"]] == [1]
    assert [p.id for p in by_day["Wednesday"]] == [2]
