import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .api_client import BackendClient, BackendError
from .serializers import (
    CollectionIntakeSerializer,
    ExportPeriodSerializer,
    PeriodSerializer,
    SaleSerializer,
    SiteEvaluationChangeSerializer,
    SiteEvaluationSubmitSerializer,
    SortSerializer,
    WeekSerializer,
)
from .services import aggregation, exports, formatting, site_evaluation, store as store_svc
from .services.normalize import (
    CollectionTransaction,
    MamaDayEntry,
    VisitPlan,
    janitor_collections_from_payload,
    normalize_list,
)
from .utils.jsonsafe import json_safe


logger = logging.getLogger(__name__)

BACKEND_UNAVAILABLE = "Could not reach the records service. Please try again."

STORE_ROLES = ("Store Keeper", "Manager")
PAYMENT_ROLES = ("Finance", "Manager")


def in_group(user, *group_names) -> bool:
    try:
        return user.is_authenticated and (
            user.is_superuser or user.groups.filter(name__in=group_names).exists()
        )
    except Exception:
        return False


def get_backend_client() -> BackendClient:
    return BackendClient.from_settings()


def _bag_weight() -> int:
    return getattr(settings, "STORE_BAG_WEIGHT_KG", store_svc.BAG_WEIGHT_KG)


def _invalid(ser):
    return Response({"error": "Missing/invalid fields", "details": ser.errors}, status=400)


def _rejected(exc: ValidationError, status=400):
    logger.info("Request rejected: %s", "; ".join(exc.messages))
    return Response({"error": " ".join(exc.messages), "details": exc.messages}, status=status)


def _backend_failed(exc: BackendError):
    logger.error("Backend call failed: %s", exc)
    return Response({"error": BACKEND_UNAVAILABLE}, status=502)


def _forbidden():
    return Response({"error": "You do not have access to this action."}, status=403)


def _file_response(content, filename: str, file_type: str):
    content_type = (
        "text/csv"
        if file_type == "csv"
        else "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    resp = HttpResponse(content, content_type=content_type)
    resp["Content-Disposition"] = f"attachment; filename={filename}"
    return resp


# --- site evaluation -------------------------------------------------------

@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def site_evaluation_recompute(request):
    """Apply one field edit to a draft report and return every derived value."""
    ser = SiteEvaluationChangeSerializer(data=request.data)
    if not ser.is_valid():
        return _invalid(ser)
    report = site_evaluation.SiteEvaluationReport.from_payload(ser.validated_data["report"])
    try:
        report = site_evaluation.recompute(
            report, ser.validated_data["field"], ser.validated_data.get("value")
        )
    except ValueError as e:
        return Response({"error": str(e)}, status=400)
    except ValidationError as e:
        return _rejected(e)
    return Response({"report": json_safe(report.to_payload())})


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def site_evaluation_prefill(request, session_id: int):
    """Fill supplier, coordinator and dates of a draft from a collection session."""
    report = site_evaluation.SiteEvaluationReport.from_payload(request.data.get("report") or {})
    try:
        session = get_backend_client().collection_session(session_id)
    except BackendError as e:
        return _backend_failed(e)
    if session is None:
        return Response({"error": f"Collection session {session_id} not found."}, status=404)
    report = site_evaluation.apply_session(report, session)
    return Response({"report": json_safe(report.to_payload())})


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def site_evaluation_submit(request):
    ser = SiteEvaluationSubmitSerializer(data=request.data)
    if not ser.is_valid():
        return _invalid(ser)
    report = site_evaluation.SiteEvaluationReport.from_payload(ser.validated_data["report"])
    try:
        report = site_evaluation.ensure_submittable(report)
    except ValidationError as e:
        return _rejected(e)
    try:
        saved = get_backend_client().create_site_evaluation_report(report.to_payload())
    except BackendError as e:
        return _backend_failed(e)
    logger.info("Site evaluation report submitted for session %s", report.session_id)
    return Response({"report": json_safe(report.to_payload()), "saved": json_safe(saved)}, status=201)


# --- mama payments ---------------------------------------------------------

def _load_mama_payments(start, end):
    entries = normalize_list(get_backend_client().mama_payments(start, end), MamaDayEntry)
    return aggregation.aggregate_mama_payments(entries)


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def mama_payments(request):
    if not in_group(request.user, *PAYMENT_ROLES):
        return _forbidden()
    ser = PeriodSerializer(data=request.query_params)
    if not ser.is_valid():
        return _invalid(ser)
    start, end = ser.validated_data["startDate"], ser.validated_data["endDate"]
    try:
        payments = _load_mama_payments(start, end)
    except BackendError as e:
        return _backend_failed(e)
    summary = aggregation.summarize_mama_payments(payments)
    return Response({
        "startDate": start.isoformat(),
        "endDate": end.isoformat(),
        "payments": json_safe(payments),
        "rows": [formatting.mama_payment_row(p) for p in payments],
        "summary": json_safe(summary),
        "cards": {
            "total_payment": formatting.format_etb(summary["total_payment"], 0),
            "total_products": formatting.format_number(summary["total_products"], 0),
        },
    })


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def mama_payments_export(request):
    if not in_group(request.user, *PAYMENT_ROLES):
        return _forbidden()
    ser = ExportPeriodSerializer(data=request.query_params)
    if not ser.is_valid():
        return _invalid(ser)
    start, end = ser.validated_data["startDate"], ser.validated_data["endDate"]
    file_type = ser.validated_data["fileType"]
    try:
        payments = _load_mama_payments(start, end)
    except BackendError as e:
        return _backend_failed(e)
    if not payments:
        return Response({"error": "No payments found for the selected period."}, status=404)
    rows = exports.mama_payment_export_rows(payments, start, end)
    filename = exports.export_filename("Mamas_Payment_Report", start, end, file_type)
    if file_type == "csv":
        content = exports.rows_to_csv(rows)
    else:
        content = exports.rows_to_xlsx([("Payment Summary", rows)])
    return _file_response(content, filename, file_type)


# --- janitor payments ------------------------------------------------------

def _load_janitor_payments(start, end):
    payload = get_backend_client().janitor_collections(start, end)
    return aggregation.aggregate_janitor_payments(janitor_collections_from_payload(payload))


def _supplier_json(supplier):
    return {
        "supplier_id": supplier.supplier_id,
        "supplier_name": supplier.supplier_name,
        "total_weight": json_safe(supplier.total_weight),
        "total_amount": json_safe(supplier.total_amount),
        "janitors": [
            dict(json_safe(j), paper_types=[json_safe(p) for p in j.paper_types.values()])
            for j in supplier.janitors.values()
        ],
    }


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def janitor_payments(request):
    if not in_group(request.user, *PAYMENT_ROLES):
        return _forbidden()
    ser = PeriodSerializer(data=request.query_params)
    if not ser.is_valid():
        return _invalid(ser)
    start, end = ser.validated_data["startDate"], ser.validated_data["endDate"]
    try:
        suppliers = _load_janitor_payments(start, end)
    except BackendError as e:
        return _backend_failed(e)
    total_amount = sum((s.total_amount for s in suppliers), aggregation.ZERO)
    total_weight = sum((s.total_weight for s in suppliers), aggregation.ZERO)
    return Response({
        "startDate": start.isoformat(),
        "endDate": end.isoformat(),
        "suppliers": [_supplier_json(s) for s in suppliers],
        "total_amount": json_safe(total_amount),
        "total_weight": json_safe(total_weight),
        "cards": {
            "total_payment": formatting.format_etb(total_amount),
            "total_weight": formatting.format_kg(total_weight, 2),
        },
    })


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def janitor_payments_export(request):
    if not in_group(request.user, *PAYMENT_ROLES):
        return _forbidden()
    ser = ExportPeriodSerializer(data=request.query_params)
    if not ser.is_valid():
        return _invalid(ser)
    start, end = ser.validated_data["startDate"], ser.validated_data["endDate"]
    file_type = ser.validated_data["fileType"]
    try:
        suppliers = _load_janitor_payments(start, end)
    except BackendError as e:
        return _backend_failed(e)
    rows = exports.janitor_payment_export_rows(suppliers, start, end)
    filename = exports.export_filename("Janitor_Payment_Report", start, end, file_type)
    if file_type == "csv":
        content = exports.rows_to_csv(rows)
    else:
        content = exports.rows_to_xlsx([("Janitor Payments", rows)])
    return _file_response(content, filename, file_type)


# --- store -----------------------------------------------------------------

def _load_store():
    return store_svc.store_from_payload(get_backend_client().last_inventory())


def _store_json(store):
    return [json_safe(item.to_payload()) for item in store.values()]


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def store_overview(request):
    try:
        store = _load_store()
    except BackendError as e:
        return _backend_failed(e)
    totals = store_svc.store_totals(store)
    best = store_svc.best_performer(store)
    return Response({
        "inventory": _store_json(store),
        "rows": [formatting.store_row(item) for item in store.values()],
        "distribution": json_safe(store_svc.distribution(store)),
        "totals": json_safe(totals),
        "cards": {
            "total_inventory": formatting.format_kg(totals["total_kg"]),
            "revenue": formatting.format_etb(totals["total_revenue"], 0),
            "collected": formatting.format_kg(totals["total_collected"]),
            "best_performer": best.type if best else "",
        },
    })


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def store_export(request):
    file_type = request.query_params.get("fileType", "xlsx")
    if file_type not in ("xlsx", "csv"):
        return Response({"error": "fileType must be xlsx or csv"}, status=400)
    try:
        store = _load_store()
    except BackendError as e:
        return _backend_failed(e)
    today = timezone.localdate()
    rows = exports.store_export_rows(store, today)
    filename = f"Store_Inventory_{today:%Y_%m_%d}.{file_type}"
    if file_type == "csv":
        content = exports.rows_to_csv(rows)
    else:
        content = exports.rows_to_xlsx([("Inventory", rows)])
    return _file_response(content, filename, file_type)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def store_collect(request):
    if not in_group(request.user, *STORE_ROLES):
        return _forbidden()
    ser = CollectionIntakeSerializer(data=request.data)
    if not ser.is_valid():
        return _invalid(ser)
    data = ser.validated_data
    client = get_backend_client()
    try:
        store = store_svc.store_from_payload(client.last_inventory())
        updated = store_svc.add_collection(
            store, data["type"], data["kg"], data.get("bags"), bag_weight=_bag_weight()
        )
    except BackendError as e:
        return _backend_failed(e)
    except ValidationError as e:
        return _rejected(e)
    item = updated[data["type"]]
    try:
        client.record_collection({
            "type": data["type"],
            "kg": data["kg"],
            "bags": item.total_bags - store[data["type"]].total_bags,
            "supplierId": data.get("supplierId", ""),
            "inventory": [item.to_payload()],
        })
    except BackendError as e:
        return _backend_failed(e)
    logger.info("Collected %s kg of %s", data["kg"], data["type"])
    return Response({"inventory": _store_json(updated)}, status=201)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def store_sort(request):
    if not in_group(request.user, *STORE_ROLES):
        return _forbidden()
    ser = SortSerializer(data=request.data)
    if not ser.is_valid():
        return _invalid(ser)
    mixed_kg = ser.validated_data["mixedKg"]
    splits = ser.splits()
    client = get_backend_client()
    try:
        store = store_svc.store_from_payload(client.last_inventory())
        updated = store_svc.sort_mixed(store, mixed_kg, splits, bag_weight=_bag_weight())
    except BackendError as e:
        return _backend_failed(e)
    except ValidationError as e:
        return _rejected(e)
    try:
        client.record_sorting({
            "mixedKg": mixed_kg,
            **splits,
            "inventory": [updated[t].to_payload() for t in ("mixed",) + store_svc.SORTED_TYPES],
        })
    except BackendError as e:
        return _backend_failed(e)
    logger.info("Sorted %s kg of mixed paper", mixed_kg)
    return Response({"inventory": _store_json(updated)}, status=201)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def store_sell(request):
    if not in_group(request.user, *STORE_ROLES):
        return _forbidden()
    ser = SaleSerializer(data=request.data)
    if not ser.is_valid():
        return _invalid(ser)
    items = [store_svc.SaleItem.from_payload(i) for i in ser.validated_data["items"]]
    client = get_backend_client()
    try:
        store = store_svc.store_from_payload(client.last_inventory())
        updated = store_svc.sell(store, items, bag_weight=_bag_weight())
    except BackendError as e:
        return _backend_failed(e)
    except ValidationError as e:
        short = any("exceeds available" in m for m in e.messages)
        return _rejected(e, status=409 if short else 400)
    sold_types = list(dict.fromkeys(i.paper_type for i in items))
    try:
        client.record_sale({
            "customerName": ser.validated_data["customerName"],
            "paymentMethod": ser.validated_data["paymentMethod"],
            "items": [json_safe(i) for i in items],
            "inventory": [updated[t].to_payload() for t in sold_types],
        })
    except BackendError as e:
        return _backend_failed(e)
    logger.info("Sale recorded for %s", ", ".join(sold_types))
    return Response({"inventory": _store_json(updated)}, status=201)


# --- suppliers and plans ---------------------------------------------------

@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def supplier_collections(request):
    try:
        transactions = normalize_list(get_backend_client().inventory(), CollectionTransaction)
    except BackendError as e:
        return _backend_failed(e)
    summaries = aggregation.aggregate_supplier_collections(transactions)
    return Response({
        "suppliers": json_safe(summaries),
        "total_amount": json_safe(sum((s.total_amount for s in summaries), aggregation.ZERO)),
    })


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def weekly_plan(request):
    ser = WeekSerializer(data=request.query_params)
    if not ser.is_valid():
        return _invalid(ser)
    try:
        plans = normalize_list(get_backend_client().weekly_plan(ser.backend_params()), VisitPlan)
        by_day = aggregation.group_plans_by_day(plans)
    except BackendError as e:
        return _backend_failed(e)
    except ValueError as e:
        return Response({"error": str(e)}, status=400)
    return Response({
        "start_date": ser.validated_data["start_date"].isoformat(),
        "end_date": ser.validated_data["end_date"].isoformat(),
        "days": json_safe(by_day),
    })
