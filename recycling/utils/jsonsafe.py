from dataclasses import fields, is_dataclass
from decimal import Decimal
from uuid import UUID
from datetime import date, datetime, time
from django.db.models import Model, QuerySet


def json_safe(obj):
    """Convert service results (dataclasses, Decimals, dates) into JSON types.

    Dataclass attributes starting with ``_`` are bookkeeping and are skipped.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, (UUID,)):
        return str(obj)
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: json_safe(getattr(obj, f.name))
            for f in fields(obj)
            if not f.name.startswith("_")
        }
    if isinstance(obj, Model):
        pk = getattr(obj, "pk", None)
        return json_safe(pk)
    if isinstance(obj, QuerySet):
        return [json_safe(x) for x in obj]
    if isinstance(obj, dict):
        return {_key(k): json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [json_safe(v) for v in obj]
    return str(obj)


def _key(k):
    if isinstance(k, tuple):
        return "|".join(str(part) for part in k)
    return str(k)
