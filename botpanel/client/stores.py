"""
Client-side entity stores for the dashboard API.

Each :class:`Store` keeps a local cache of one table (``items``) together with
``loading`` and ``error`` state, and writes through to the HTTP API:

    dashboard = Dashboard("http://localhost:8000", email="owner@example.com")
    dashboard.chatbots.fetch()
    bot = dashboard.chatbots.create({"name_chatbot": "Support"})
    dashboard.flows.create({"chatbot_id": bot["id"], "keyword": "hola, hello", ...})
    dashboard.chatbots.update_optimistic(bot["id"], {"is_active": False})
"""
import copy
import logging
from typing import Any, Dict, List, Optional

import requests

from botpanel.utils.text_search import filter_rows

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = (3, 30)


class StoreError(Exception):
    """A store operation failed; carries the HTTP status and server detail."""

    def __init__(self, message: str, status_code: int = 0, detail: Any = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class Store:
    """Cached, write-through view of one owner-scoped table."""

    path: str = ""
    # Priority-ordered tables keep new rows at the end
    append_on_create: bool = False

    def __init__(self, session, base_url: str = "", path: Optional[str] = None, timeout=_DEFAULT_TIMEOUT):
        self.session = session
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        if path is not None:
            self.path = path
        self.items: List[Dict[str, Any]] = []
        self.loading = False
        self.error: Optional[str] = None

    def _url(self, suffix: str = "") -> str:
        return f"{self.base_url}/{self.path.strip('/')}/{suffix}"

    def _handle_response(self, response, operation: str):
        if response.status_code >= 400:
            try:
                data = response.json()
            except ValueError:
                data = {}
            detail = data.get("detail") if isinstance(data, dict) else None
            message = detail if isinstance(detail, str) else (response.text or f"HTTP {response.status_code}")
            logger.error("Store %s %s failed: %s (HTTP %d)", self.path, operation, message, response.status_code)
            raise StoreError(message, status_code=response.status_code, detail=detail)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _call(self, operation: str, method: str, suffix: str = "", **kwargs):
        self.loading = True
        self.error = None
        try:
            try:
                response = self.session.request(method, self._url(suffix), timeout=self.timeout, **kwargs)
            except requests.RequestException as exc:
                raise StoreError(f"{operation} failed: {exc}") from exc
            return self._handle_response(response, operation)
        except StoreError as exc:
            self.error = str(exc)
            raise
        finally:
            self.loading = False

    def _index_of(self, row_id) -> Optional[int]:
        row_id = str(row_id)
        for index, row in enumerate(self.items):
            if str(row.get("id")) == row_id:
                return index
        return None

    def fetch(self, **filters) -> List[Dict[str, Any]]:
        params = {k: v for k, v in filters.items() if v is not None}
        self.items = self._call("fetch", "GET", params=params) or []
        return self.items

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        row = self._call("create", "POST", json=payload)
        if self.append_on_create:
            self.items.append(row)
        else:
            self.items.insert(0, row)
        return row

    def update(self, row_id, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Send ``changes`` and replace the cached row with the server's copy."""
        row = self._call("update", "PATCH", str(row_id), json=changes)
        index = self._index_of(row_id)
        if index is None:
            self.items.append(row)
        else:
            self.items[index] = row
        return row

    def update_optimistic(self, row_id, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Apply ``changes`` locally before the server confirms; revert on failure."""
        index = self._index_of(row_id)
        previous = copy.deepcopy(self.items[index]) if index is not None else None
        if index is not None:
            self.items[index] = {**self.items[index], **changes}
        try:
            row = self._call("update", "PATCH", str(row_id), json=changes)
        except StoreError:
            if index is not None:
                self.items[index] = previous
            raise
        if index is not None:
            self.items[index] = row
        return row

    def toggle(self, row_id) -> Dict[str, Any]:
        row = self._call("toggle", "POST", f"{row_id}/toggle")
        index = self._index_of(row_id)
        if index is not None:
            self.items[index] = row
        return row

    def delete(self, row_id) -> None:
        self._call("delete", "DELETE", str(row_id))
        index = self._index_of(row_id)
        if index is not None:
            del self.items[index]

    def search(self, term: Optional[str]) -> List[Dict[str, Any]]:
        return filter_rows(self.items, term)


class PromptStore(Store):
    def embed(self, row_id) -> Dict[str, Any]:
        row = self._call("embed", "POST", f"{row_id}/embed")
        index = self._index_of(row_id)
        if index is not None:
            self.items[index] = row
        return row


class FlowStore(Store):
    path = "flows"
    append_on_create = True


class BusinessDocumentStore(Store):
    path = "business-documents"
    append_on_create = True


class Dashboard:
    """One store per entity, sharing a session that carries the identity headers."""

    def __init__(
        self,
        base_url: str = "",
        *,
        email: Optional[str] = None,
        user: Optional[str] = None,
        session=None,
        timeout=_DEFAULT_TIMEOUT,
    ):
        self.session = session if session is not None else requests.Session()
        if email:
            self.session.headers.update({"x-auth-request-email": email})
        if user:
            self.session.headers.update({"x-auth-request-user": user})
        self.base_url = base_url
        self.timeout = timeout

        self.chatbots = Store(self.session, base_url, "chatbots", timeout)
        self.flows = FlowStore(self.session, base_url, timeout=timeout)
        self.welcomes = Store(self.session, base_url, "welcomes", timeout)
        self.behavior_prompts = PromptStore(self.session, base_url, "behavior-prompts", timeout)
        self.knowledge_prompts = PromptStore(self.session, base_url, "knowledge-prompts", timeout)
        self.blacklist = Store(self.session, base_url, "blacklist", timeout)
        self.leads = Store(self.session, base_url, "leads", timeout)
        self.products_services = Store(self.session, base_url, "products-services", timeout)
        self.customer_insights = Store(self.session, base_url, "customer-insights", timeout)
        self.business_documents = BusinessDocumentStore(self.session, base_url, timeout=timeout)
        self.client_data = Store(self.session, base_url, "client-data", timeout)
        self.ai_configs = Store(self.session, base_url, "ai-configs", timeout)
        self.conversation_contexts = Store(self.session, base_url, "conversation-contexts", timeout)
        self.welcome_trackings = Store(self.session, base_url, "welcome-trackings", timeout)

    def qr_assignment(self) -> Optional[Dict[str, Any]]:
        """Return the caller's QR assignment, or None when none is assigned."""
        response = self.session.get(f"{self.base_url.rstrip('/')}/qr/", timeout=self.timeout)
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise StoreError(f"QR lookup failed (HTTP {response.status_code})", status_code=response.status_code)
        return response.json()
