from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from .utils.jsonsafe import json_safe


logger = logging.getLogger(__name__)


class BackendError(Exception):
    """The CRUD backend could not be reached or refused the request."""


def unwrap(payload):
    """Return ``data`` from a ``{status, data}`` envelope.

    Payloads without an envelope (bare lists, plain objects) are returned
    unchanged. An envelope whose status is not ``success`` is an error.
    """
    if isinstance(payload, dict) and "status" in payload:
        if payload.get("status") != "success":
            message = payload.get("message") or payload.get("error") or payload.get("status")
            raise BackendError(f"Backend reported failure: {message}")
        return payload.get("data")
    return payload


class BackendClient:
    """Thin wrapper over the CRUD backend's REST endpoints.

    One instance is built per request from settings and handed to the views;
    it keeps no state besides the HTTP session.
    """

    def __init__(self, base_url: str, timeout: int = 15, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")

    @classmethod
    def from_settings(cls) -> "BackendClient":
        return cls(
            getattr(settings, "RECYCLING_API_URL", "http://localhost:5000"),
            timeout=getattr(settings, "RECYCLING_API_TIMEOUT", 15),
        )

    def _request(self, method: str, path: str, params: Optional[Dict] = None, body: Any = None):
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            r = self.session.request(
                method,
                url,
                params=params,
                json=json_safe(body) if body is not None else None,
                timeout=self.timeout,
            )
            r.raise_for_status()
            payload = r.json()
        except requests.RequestException as e:
            logger.error("Backend %s %s failed: %s", method, url, e)
            raise BackendError(f"{method} {path} failed") from e
        except ValueError as e:
            logger.error("Backend %s %s returned invalid JSON", method, url)
            raise BackendError(f"{method} {path} returned invalid JSON") from e
        return unwrap(payload)

    def get(self, path: str, params: Optional[Dict] = None):
        return self._request("GET", path, params=params)

    def post(self, path: str, body: Any):
        return self._request("POST", path, body=body)

    # collection sessions and site evaluation
    def collection_sessions(self):
        return self.get("/collection-sessions") or []

    def collection_session(self, session_id: int) -> Optional[Dict]:
        for session in self.collection_sessions():
            if str(session.get("id")) == str(session_id):
                return session
        return None

    def site_evaluation_reports(self):
        return self.get("/site-evaluation-reports") or []

    def create_site_evaluation_report(self, payload: Dict):
        return self.post("/site-evaluation-reports", payload)

    # store inventory
    def inventory(self):
        return self.get("/inventory") or []

    def last_inventory(self):
        return self.get("/last-inventory") or []

    def inventory_sales(self):
        return self.get("/inventorysell") or []

    def record_collection(self, payload: Dict):
        return self.post("/inventory", payload)

    def record_sorting(self, payload: Dict):
        return self.post("/sorting", payload)

    def record_sale(self, payload: Dict):
        return self.post("/inventorysell", payload)

    # payments
    def mama_payments(self, start: date, end: date):
        params = {"startDate": start.isoformat(), "endDate": end.isoformat()}
        return self.get("/api/mamas/payments", params=params) or []

    def janitor_collections(self, start: date, end: date):
        params = {"startDate": start.isoformat(), "endDate": end.isoformat()}
        return self.get("/payment", params=params) or []

    # plans
    def weekly_plan(self, params: Optional[Dict] = None):
        return self.get("/api/weekly-plan", params=params) or []
