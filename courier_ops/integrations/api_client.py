"""
COURIER BACKEND READ CLIENT

Purpose:
- Read dashboard aggregates, shipments, branches and bills from the
  courier backend REST API
- Normalize every payload through integrations.adapters
- Surface failures as ApiError so callers can keep their last snapshot

Requirements:
• Never hardcode API tokens (use os.getenv via courier_ops.config)
• Timeout protection on every request
• No retries here: freshness comes from the sync coordinator's
  redundant triggers
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from courier_ops import config
from courier_ops.core.models import BillRecord, Branch, DashboardSnapshot, ShipmentRecord
from courier_ops.integrations.adapters import (
    normalize_bills,
    normalize_branches,
    normalize_dashboard,
    normalize_shipments,
)
from courier_ops.security.viewer_scope import ViewerScope

logger = logging.getLogger(__name__)

DASHBOARD_PERIODS = ("week", "month", "year")


class ApiError(Exception):
    """Raised when a backend read fails (network, HTTP status, or envelope)."""
    pass


class CourierApiClient:
    """
    Thin requests wrapper over the backend read endpoints.

    One instance per viewer session; the session carries the bearer token.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or config.COURIER_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.API_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

        token = token if token is not None else config.COURIER_API_TOKEN
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    # ==================================================
    # TRANSPORT
    # ==================================================

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        params = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            logger.info(f"GET {path} {params}")
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()

        except requests.exceptions.Timeout as e:
            logger.error(f"Courier API timeout on {path}")
            raise ApiError(f"Timeout calling {path}") from e

        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            logger.error(f"Courier API HTTP error {status} on {path}")
            raise ApiError(f"HTTP {status} calling {path}") from e

        except requests.exceptions.RequestException as e:
            logger.error(f"Courier API error on {path}: {str(e)}")
            raise ApiError(f"Unable to reach the courier API ({path})") from e

        except ValueError as e:
            logger.error(f"Courier API returned non-JSON body on {path}")
            raise ApiError(f"Invalid JSON from {path}") from e

        return self._unwrap(body, path)

    @staticmethod
    def _unwrap(body: Any, path: str) -> Any:
        """Accept both {success, data} envelopes and bare payloads."""
        if isinstance(body, dict) and "success" in body:
            if not body.get("success"):
                message = body.get("message") or "request was not successful"
                raise ApiError(f"{path}: {message}")
            return body.get("data")
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    # ==================================================
    # READ OPERATIONS
    # ==================================================

    def fetch_dashboard(
        self,
        period: str = "week",
        branch_id: Optional[str] = None,
    ) -> DashboardSnapshot:
        """
        Fetch summary stats + chart series for a period and scope.

        Args:
            period: "week" | "month" | "year"
            branch_id: Branch filter (admin only; None means all branches)
        """
        if period not in DASHBOARD_PERIODS:
            raise ValueError(f"Unsupported period: {period}")

        data = self._get("/dashboard/stats", {"period": period, "branch_id": branch_id})
        return normalize_dashboard(data, period=period, branch_id=branch_id)

    def fetch_shipments(
        self,
        viewer: Optional[ViewerScope] = None,
        limit: Optional[int] = None,
    ) -> List[ShipmentRecord]:
        """
        Fetch the full shipment feed for the viewer's scope.

        Falls back to the legacy /courier listing when /shipments fails.
        """
        params: Dict[str, Any] = {"per_page": limit or config.SHIPMENT_FETCH_LIMIT}
        if viewer is not None and viewer.branch_id:
            params["branch_id"] = viewer.branch_id

        try:
            data = self._get("/shipments", params)
        except ApiError as e:
            logger.warning(f"/shipments failed ({e}), retrying on /courier")
            data = self._get("/courier", params)

        return normalize_shipments(data if isinstance(data, list) else [])

    def fetch_branches(self, viewer: ViewerScope) -> List[Branch]:
        """Branch directory; only admins get one."""
        if not viewer.is_admin:
            return []
        data = self._get("/branches")
        return normalize_branches(data if isinstance(data, list) else [])

    def fetch_bills(
        self,
        tracking_id: Optional[str] = None,
        bill_id: Optional[str] = None,
        date: Optional[str] = None,
    ) -> List[BillRecord]:
        data = self._get("/billing", {
            "tracking_id": tracking_id or None,
            "bill_id": bill_id or None,
            "date": date or None,
        })
        return normalize_bills(data if isinstance(data, list) else [])
