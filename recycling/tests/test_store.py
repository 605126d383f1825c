from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from recycling.services.normalize import CollectionTransaction
from recycling.services.store import (
    PAPER_TYPES,
    SaleItem,
    add_collection,
    bags_for,
    best_performer,
    distribution,
    edit_transaction,
    performance_level,
    sell,
    sell_rate,
    sort_mixed,
    store_from_payload,
    store_totals,
)


def _store():
    return store_from_payload([
        {"type": "mixed", "name": "Mixed", "totalKg": "500", "totalBags": 10,
         "currentMonth": {"collected": "500", "sold": "0", "revenue": "0"}, "price": "5"},
        {"type": "sw", "name": "White", "totalKg": "20", "totalBags": 0,
         "currentMonth": {"collected": "100", "sold": "80", "revenue": "800"}, "price": "10"},
    ])


def _total_kg(store):
    return sum(item.total_kg for item in store.values())


def test_snapshot_fills_missing_types():
    store = _store()
    assert set(store) == set(PAPER_TYPES)
    assert store["np"].total_kg == 0
    assert store["sw"].sold == Decimal("80")


def test_snapshot_accepts_mapping_keyed_by_type():
    store = store_from_payload({"carton": {"totalKg": 12}})
    assert store["carton"].total_kg == Decimal("12")


def test_bags_for():
    assert bags_for(Decimal("49.9")) == 0
    assert bags_for(Decimal("150")) == 3
    assert bags_for(Decimal("120"), bag_weight=40) == 3
    assert bags_for(Decimal("-5")) == 0


def test_collection_adds_stock_and_bags():
    store = _store()
    updated = add_collection(store, "sw", "120")
    assert updated["sw"].total_kg == Decimal("140")
    assert updated["sw"].total_bags == 2
    assert updated["sw"].collected == Decimal("220")
    assert store["sw"].total_kg == Decimal("20")


def test_collection_with_explicit_bags():
    updated = add_collection(_store(), "np", 30, bags=4)
    assert updated["np"].total_bags == 4


def test_collection_rejects_bad_input():
    with pytest.raises(ValidationError) as exc:
        add_collection(_store(), "plastic", 0)
    assert len(exc.value.messages) == 2


def test_sorting_conserves_total_kg():
    store = _store()
    splits = {"sw": "200", "sc": "50", "carton": "25.5", "np": "24.5"}
    updated = sort_mixed(store, "300", splits)
    assert _total_kg(updated) == _total_kg(store)
    assert updated["mixed"].total_kg == Decimal("200")
    assert updated["mixed"].total_bags == 4
    assert updated["sw"].total_kg == Decimal("220")
    assert updated["sw"].total_bags == 4
    assert updated["carton"].total_bags == 0


def test_sorting_rejects_unbalanced_split():
    store = _store()
    with pytest.raises(ValidationError) as exc:
        sort_mixed(store, "100", {"sw": "60", "sc": "30"})
    assert any("must equal" in m for m in exc.value.messages)
    assert store["mixed"].total_kg == Decimal("500")


def test_sorting_rejects_more_than_mixed_stock():
    with pytest.raises(ValidationError) as exc:
        sort_mixed(_store(), "600", {"sw": "600"})
    assert any("exceeds available 500" in m for m in exc.value.messages)


def test_sorting_rejects_unknown_and_negative_targets():
    with pytest.raises(ValidationError) as exc:
        sort_mixed(_store(), "10", {"mixed": "20", "sw": "-10"})
    messages = exc.value.messages
    assert any("Cannot sort into mixed" in m for m in messages)
    assert any("cannot be negative" in m for m in messages)


def test_sale_over_stock_is_rejected_and_store_unchanged():
    store = _store()
    before = dict(store)
    with pytest.raises(ValidationError) as exc:
        sell(store, [SaleItem("sw", Decimal("25"))])
    [message] = exc.value.messages
    assert "Item 1 (sw)" in message
    assert "available 20 kg" in message
    assert store == before


def test_sale_quantities_are_summed_per_type():
    with pytest.raises(ValidationError) as exc:
        sell(_store(), [SaleItem("sw", Decimal("15")), SaleItem("sw", Decimal("10"))])
    [message] = exc.value.messages
    assert message.startswith("Item 2 (sw): requested 25 kg")


def test_sale_updates_stock_and_revenue():
    store = _store()
    updated = sell(store, [
        SaleItem("sw", Decimal("20"), Decimal("12.5")),
        SaleItem("mixed", Decimal("100")),
    ])
    assert updated["sw"].total_kg == 0
    assert updated["sw"].sold == Decimal("100")
    assert updated["sw"].revenue == Decimal("1050.00")
    assert updated["mixed"].total_kg == Decimal("400")
    assert updated["mixed"].total_bags == 8
    assert updated["mixed"].revenue == Decimal("500.00")
    assert _total_kg(store) - _total_kg(updated) == Decimal("120")


def test_sale_item_from_payload():
    item = SaleItem.from_payload({"type": "SW", "kgAmount": "5", "pricePerKg": ""})
    assert item == SaleItem("sw", Decimal("5"), None)


def test_dashboard_derivations():
    store = _store()
    assert sell_rate(store["sw"]) == Decimal("80")
    assert sell_rate(store["np"]) == 0
    assert performance_level(Decimal("95")) == "Excellent"
    assert performance_level(Decimal("70")) == "Good"
    assert performance_level(Decimal("50")) == "Fair"
    assert performance_level(Decimal("49.9")) == "Poor"
    shares = distribution(store)
    assert shares["mixed"] == Decimal("96.2")
    assert shares["sw"] == Decimal("3.8")
    assert best_performer(store).type == "sw"
    totals = store_totals(store)
    assert totals["total_kg"] == Decimal("520")
    assert totals["total_bags"] == 10
    assert totals["total_revenue"] == Decimal("800")


def test_distribution_of_empty_store():
    shares = distribution(store_from_payload([]))
    assert all(v == 0 for v in shares.values())


def test_edit_transaction_keeps_total_consistent():
    txn = CollectionTransaction.from_payload({"quantity": "10", "unitPrice": "7", "totalAmount": "70"})
    updated = edit_transaction(txn, "quantity", "12.5")
    assert updated.total_amount == Decimal("87.50")
    updated = edit_transaction(updated, "unit_price", "8")
    assert updated.total_amount == Decimal("100.00")
    with pytest.raises(ValueError):
        edit_transaction(txn, "total_amount", 1)
    with pytest.raises(ValueError):
        edit_transaction(txn, "supplier_id", "x")
