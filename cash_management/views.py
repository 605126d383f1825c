import logging

from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .models import BankAccount, CashFlowTransaction, Payable, Receivable
from .serializers import (
    BankAccountSerializer,
    CashFlowTransactionSerializer,
    PayableSerializer,
    ReceivableSerializer,
)
from .services import financial_summary, post_cash_transaction


logger = logging.getLogger(__name__)


def in_group(user, group_name: str) -> bool:
    try:
        return user.is_authenticated and user.groups.filter(name=group_name).exists()
    except Exception:
        return False


def is_finance(user) -> bool:
    return user.is_superuser or in_group(user, 'Finance') or in_group(user, 'Manager')


def _forbidden():
    return Response({"error": "Finance access required."}, status=403)


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def cash_summary(request):
    if not is_finance(request.user):
        return _forbidden()
    summary = financial_summary()
    return Response({k: float(v) for k, v in summary.items()})


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def banks(request):
    if not is_finance(request.user):
        return _forbidden()
    return Response(BankAccountSerializer(BankAccount.objects.all(), many=True).data)


@api_view(["GET", "POST"])
@permission_classes([permissions.IsAuthenticated])
def transactions(request):
    if not is_finance(request.user):
        return _forbidden()
    if request.method == "GET":
        qs = CashFlowTransaction.objects.select_related("bank")
        bank = request.query_params.get("bank")
        if bank:
            qs = qs.filter(bank_id=bank)
        return Response(CashFlowTransactionSerializer(qs, many=True).data)

    ser = CashFlowTransactionSerializer(data=request.data)
    if not ser.is_valid():
        return Response({"error": "Missing/invalid fields", "details": ser.errors}, status=400)
    data = dict(ser.validated_data)
    bank = data.pop("bank")
    try:
        txn = post_cash_transaction(bank.pk, actor=request.user, **data)
    except ValidationError as e:
        return Response({"error": " ".join(e.messages), "details": e.messages}, status=400)
    logger.info("Cash transaction %s posted to %s by %s", txn.pk, bank, request.user)
    return Response(CashFlowTransactionSerializer(txn).data, status=201)


def _list_or_create(request, model, serializer_cls):
    if request.method == "GET":
        qs = model.objects.all()
        status = request.query_params.get("status")
        if status:
            qs = qs.filter(status=status)
        return Response(serializer_cls(qs, many=True).data)
    ser = serializer_cls(data=request.data)
    if not ser.is_valid():
        return Response({"error": "Missing/invalid fields", "details": ser.errors}, status=400)
    obj = ser.save()
    return Response(serializer_cls(obj).data, status=201)


def _update(request, model, serializer_cls, pk):
    obj = get_object_or_404(model, pk=pk)
    ser = serializer_cls(obj, data=request.data, partial=True)
    if not ser.is_valid():
        return Response({"error": "Missing/invalid fields", "details": ser.errors}, status=400)
    return Response(serializer_cls(ser.save()).data)


@api_view(["GET", "POST"])
@permission_classes([permissions.IsAuthenticated])
def payables(request):
    if not is_finance(request.user):
        return _forbidden()
    return _list_or_create(request, Payable, PayableSerializer)


@api_view(["PATCH"])
@permission_classes([permissions.IsAuthenticated])
def payable_detail(request, pk: int):
    if not is_finance(request.user):
        return _forbidden()
    return _update(request, Payable, PayableSerializer, pk)


@api_view(["GET", "POST"])
@permission_classes([permissions.IsAuthenticated])
def receivables(request):
    if not is_finance(request.user):
        return _forbidden()
    return _list_or_create(request, Receivable, ReceivableSerializer)


@api_view(["PATCH"])
@permission_classes([permissions.IsAuthenticated])
def receivable_detail(request, pk: int):
    if not is_finance(request.user):
        return _forbidden()
    return _update(request, Receivable, ReceivableSerializer, pk)
