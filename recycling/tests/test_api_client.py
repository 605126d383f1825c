from datetime import date
from decimal import Decimal
from unittest import mock

import pytest
import requests

from recycling.api_client import BackendClient, BackendError, unwrap


def _client(payload=None, exc=None):
    session = mock.MagicMock()
    session.headers = {}
    response = mock.MagicMock()
    response.json.return_value = payload
    if exc is not None:
        session.request.side_effect = exc
    else:
        session.request.return_value = response
    return BackendClient("http://backend.test/", timeout=5, session=session), session, response


def test_unwrap_envelope():
    assert unwrap({"status": "success", "data": [1, 2]}) == [1, 2]
    assert unwrap([{"id": 1}]) == [{"id": 1}]
    assert unwrap({"id": 1}) == {"id": 1}
    with pytest.raises(BackendError):
        unwrap({"status": "error", "message": "boom"})


def test_from_settings_uses_configured_url(settings):
    settings.RECYCLING_API_URL = "http://records.local:5000/"
    settings.RECYCLING_API_TIMEOUT = 7
    client = BackendClient.from_settings()
    assert client.base_url == "http://records.local:5000"
    assert client.timeout == 7


def test_get_builds_url_and_passes_timeout():
    client, session, _ = _client({"status": "success", "data": [{"id": 1}]})
    assert client.mama_payments(date(2024, 5, 1), date(2024, 5, 31)) == [{"id": 1}]
    session.request.assert_called_once_with(
        "GET",
        "http://backend.test/api/mamas/payments",
        params={"startDate": "2024-05-01", "endDate": "2024-05-31"},
        json=None,
        timeout=5,
    )
    assert session.headers["Accept"] == "application/json"


def test_post_sends_json_safe_body():
    client, session, _ = _client({"status": "success", "data": {"id": 3}})
    assert client.record_sale({"items": [{"kgAmount": Decimal("2.5")}]}) == {"id": 3}
    kwargs = session.request.call_args.kwargs
    assert session.request.call_args.args == ("POST", "http://backend.test/inventorysell")
    assert kwargs["json"] == {"items": [{"kgAmount": 2.5}]}


def test_empty_payload_becomes_empty_list():
    client, _, _ = _client(None)
    assert client.last_inventory() == []


def test_network_error_is_wrapped():
    client, _, _ = _client(exc=requests.ConnectionError("refused"))
    with pytest.raises(BackendError):
        client.inventory()


def test_http_error_is_wrapped():
    client, _, response = _client({})
    response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    with pytest.raises(BackendError):
        client.site_evaluation_reports()


def test_invalid_json_is_wrapped():
    client, _, response = _client()
    response.json.side_effect = ValueError("no json")
    with pytest.raises(BackendError):
        client.weekly_plan()


def test_collection_session_lookup():
    sessions = [{"id": 1, "supplier_name": "A"}, {"id": 2, "supplier_name": "B"}]
    client, _, _ = _client(sessions)
    assert client.collection_session(2)["supplier_name"] == "B"
    assert client.collection_session(9) is None
