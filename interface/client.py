"""Client data layer for the optical store API.

``ApiClient`` wraps the REST API with a read cache: every GET is cached under
its endpoint path and every mutation drops the keys whose data it changed.

Invalidation rules:

- a mutation of resource R drops ``/api/R`` and every key below it
- appointments, sales orders and consignments also drop ``/api/dashboard``
- line items also drop their parent order collection, which covers
  ``/api/<order>/{id}/items``

Staleness lasts until the next invalidating mutation or ``refresh()``.
Writes from other clients are not seen until then; last write wins.
"""
import copy
from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from interface.web.resources import RESOURCES_BY_PATH, Resource

DASHBOARD_PATH = "/api/dashboard"


class ApiError(Exception):
    """The API answered with an error status.

    Attributes:
        status_code: HTTP status, or None when no response was received.
        message: The server's ``error`` text.
    """

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class QueryCache:
    """Responses keyed by endpoint path."""

    def __init__(self):
        self._entries: Dict[str, Any] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any:
        return copy.deepcopy(self._entries.get(key))

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = copy.deepcopy(value)

    def invalidate(self, prefix: str) -> int:
        """Drop ``prefix`` and every key below it.

        ``/api/sales-orders`` drops ``/api/sales-orders/3/items`` but not
        ``/api/sales-order-items``.

        Returns:
            Number of keys dropped.
        """
        doomed = [k for k in self._entries
                  if k == prefix or k.startswith(prefix + "/")]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()


class ApiClient:
    """Cached client of the REST API.

    Args:
        base_url: Server root, e.g. ``http://localhost:8080``.
        session: HTTP session; a ``requests.Session`` when None. Anything with
            ``request(method, url, json=..., timeout=...)`` works, including
            FastAPI's ``TestClient``.
        timeout: Request timeout in seconds.
    """

    def __init__(self, base_url: str = "http://localhost:8080",
                 session: Any = None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.cache = QueryCache()

    # ==================== Transport ====================

    def _request(self, method: str, path: str,
                 data: Optional[Dict[str, Any]] = None) -> Any:
        """Send one request and decode the JSON answer (None for 204).

        Raises:
            ApiError: Error status or no response.
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=data,
                                            timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {path}: request failed: {e}")
            raise ApiError(None, str(e)) from e

        if response.status_code >= 400:
            try:
                message = response.json().get("error", response.text)
            except ValueError:
                message = response.text
            logger.warning(f"{method} {path}: {response.status_code} {message}")
            raise ApiError(response.status_code, message)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _cached_get(self, path: str) -> Any:
        if path in self.cache:
            return self.cache.get(path)
        result = self._request("GET", path)
        self.cache.set(path, result)
        return result

    @staticmethod
    def _resource(name: str) -> Resource:
        try:
            return RESOURCES_BY_PATH[name]
        except KeyError:
            raise ValueError(f"Unknown resource: {name}")

    def _invalidate(self, resource: Resource) -> None:
        self.cache.invalidate(resource.url)
        if resource.affects_dashboard:
            self.cache.invalidate(DASHBOARD_PATH)
        if resource.parent:
            self.cache.invalidate(RESOURCES_BY_PATH[resource.parent].url)

    # ==================== Reads ====================

    def list(self, resource: str) -> List[Dict[str, Any]]:
        """All records of a resource (``"products"``, ``"sales-orders"`` ...)."""
        return self._cached_get(self._resource(resource).url)

    def get(self, resource: str, record_id: int) -> Dict[str, Any]:
        return self._cached_get(f"{self._resource(resource).url}/{record_id}")

    def list_items(self, parent_resource: str,
                   parent_id: int) -> List[Dict[str, Any]]:
        """Line items of one sales or purchase order."""
        parent = self._resource(parent_resource)
        if not parent.items:
            raise ValueError(f"{parent_resource} has no line items")
        return self._cached_get(f"{parent.url}/{parent_id}/items")

    def dashboard(self) -> Dict[str, Any]:
        return self._cached_get(DASHBOARD_PATH)

    def refresh(self) -> None:
        """Forget every cached response."""
        self.cache.clear()

    # ==================== Mutations ====================

    def create(self, resource: str, data: Dict[str, Any]) -> Dict[str, Any]:
        res = self._resource(resource)
        record = self._request("POST", res.url, data)
        self._invalidate(res)
        return record

    def update(self, resource: str, record_id: int,
               patch: Dict[str, Any]) -> Dict[str, Any]:
        """Partial update; only the keys in ``patch`` change."""
        res = self._resource(resource)
        record = self._request("PATCH", f"{res.url}/{record_id}", patch)
        self._invalidate(res)
        return record

    def delete(self, resource: str, record_id: int) -> None:
        res = self._resource(resource)
        self._request("DELETE", f"{res.url}/{record_id}")
        self._invalidate(res)
