import csv
from unittest import mock

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from openpyxl import load_workbook

from recycling.api_client import BackendError


COMMAND = "recycling.management.commands.export_payments.BackendClient"


@pytest.fixture
def backend():
    client = mock.MagicMock()
    with mock.patch(COMMAND) as cls:
        cls.from_settings.return_value = client
        yield client


def test_exports_mama_payments_to_xlsx(backend, tmp_path):
    backend.mama_payments.return_value = [
        {"mamaId": 1, "fullName": "Almaz", "accountNumber": "1000", "date": "2024-05-01",
         "products": [{"type": "withTube", "quantity": 4, "totalAmount": "40"}]},
    ]
    out = tmp_path / "mamas.xlsx"
    call_command("export_payments", "mamas", "--start", "2024-05-01", "--end", "2024-05-31", "--output", str(out))
    ws = load_workbook(out).active
    assert ws["A1"].value == "Mamas Payment Report"
    assert ws["A5"].value == "Almaz"


def test_exports_janitor_payments_to_csv(backend, tmp_path):
    backend.janitor_collections.return_value = [{
        "supplier_id": 1,
        "supplier_name": "Bole Office",
        "collections": [{"collection_type": "Regular", "paper_type": "SW", "total_kg": "10",
                         "janitor_name": "Kebede", "janitor_account": "A1"}],
    }]
    out = tmp_path / "janitors.csv"
    call_command("export_payments", "janitors", "--format", "csv", "--output", str(out))
    rows = list(csv.reader(out.open(newline="")))
    assert rows[0] == ["Janitor Payment Report"]
    assert rows[4][:3] == ["Bole Office", "Kebede", "A1"]


def test_rejects_bad_dates(backend):
    with pytest.raises(CommandError):
        call_command("export_payments", "mamas", "--start", "05/01/2024")
    with pytest.raises(CommandError):
        call_command("export_payments", "mamas", "--start", "2024-06-01", "--end", "2024-05-01")


def test_backend_failure_is_command_error(backend, tmp_path):
    backend.mama_payments.side_effect = BackendError("down")
    with pytest.raises(CommandError):
        call_command("export_payments", "mamas", "--output", str(tmp_path / "x.xlsx"))
