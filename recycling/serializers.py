from datetime import timedelta

from django.utils import timezone
from rest_framework import serializers

from .services.site_evaluation import DERIVED_NAMES, INPUT_FIELDS, TEXT_FIELDS
from .services.store import PAPER_TYPES, SORTED_TYPES


class PeriodSerializer(serializers.Serializer):
    """Report period; defaults to the current month up to today."""

    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)

    def validate(self, attrs):
        today = timezone.localdate()
        attrs.setdefault("startDate", today.replace(day=1))
        attrs.setdefault("endDate", today)
        if attrs["startDate"] > attrs["endDate"]:
            raise serializers.ValidationError("Start date must be before end date")
        return attrs


class WeekSerializer(serializers.Serializer):
    """Visit-plan week; defaults to Monday through Saturday of the current week."""

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    marketer_id = serializers.IntegerField(required=False, min_value=1)

    def validate(self, attrs):
        today = timezone.localdate()
        monday = today - timedelta(days=today.weekday())
        attrs.setdefault("start_date", monday)
        attrs.setdefault("end_date", attrs["start_date"] + timedelta(days=5))
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError("Start date must be before end date")
        return attrs

    def backend_params(self):
        params = {
            "start_date": self.validated_data["start_date"].isoformat(),
            "end_date": self.validated_data["end_date"].isoformat(),
        }
        if "marketer_id" in self.validated_data:
            params["marketer_id"] = self.validated_data["marketer_id"]
        return params


class ExportPeriodSerializer(PeriodSerializer):
    fileType = serializers.ChoiceField(choices=["xlsx", "csv"], default="xlsx")


class SiteEvaluationChangeSerializer(serializers.Serializer):
    report = serializers.DictField(required=False, default=dict)
    field = serializers.CharField()
    value = serializers.JSONField(allow_null=True, required=False)

    def validate_field(self, value):
        if value in DERIVED_NAMES:
            raise serializers.ValidationError(f"{value} is calculated and cannot be set directly")
        if value not in INPUT_FIELDS and value not in TEXT_FIELDS:
            raise serializers.ValidationError(f"Unknown field: {value}")
        return value


class SiteEvaluationSubmitSerializer(serializers.Serializer):
    report = serializers.DictField()


class CollectionIntakeSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=PAPER_TYPES)
    kg = serializers.DecimalField(max_digits=12, decimal_places=3)
    bags = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    supplierId = serializers.CharField(required=False, allow_blank=True)


class SortSerializer(serializers.Serializer):
    mixedKg = serializers.DecimalField(max_digits=12, decimal_places=3)
    sw = serializers.DecimalField(max_digits=12, decimal_places=3, required=False, default=0)
    sc = serializers.DecimalField(max_digits=12, decimal_places=3, required=False, default=0)
    carton = serializers.DecimalField(max_digits=12, decimal_places=3, required=False, default=0)
    np = serializers.DecimalField(max_digits=12, decimal_places=3, required=False, default=0)

    def splits(self):
        return {ptype: self.validated_data[ptype] for ptype in SORTED_TYPES}


class SaleItemSerializer(serializers.Serializer):
    type = serializers.CharField()
    kgAmount = serializers.DecimalField(max_digits=12, decimal_places=3)
    pricePerKg = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)


class SaleSerializer(serializers.Serializer):
    customerName = serializers.CharField(required=False, allow_blank=True, default="")
    paymentMethod = serializers.ChoiceField(choices=["cash", "mobile", "bank"], default="cash")
    items = SaleItemSerializer(many=True)
