"""Notion API adapter - HTTP client for database queries and page creation."""

import logging

import requests

from notical.config import NOTION_API_BASE, NOTION_VERSION, Config
from notical.core.connection import ConnectionConfig

logger = logging.getLogger(__name__)


class NotionError(Exception):
    """Base class for failures talking to Notion."""

    pass


class NotionAPIError(NotionError):
    """Raised when Notion (or the relay) answers with a non-2xx status."""

    def __init__(self, status: int, code: str | None = None, message: str = ""):
        self.status = status
        self.code = code
        self.message = message
        super().__init__(f"API call failed: {status} ({code or 'unknown'})")


class AuthorizationError(NotionAPIError):
    """Raised on 401/403 - the token or the database sharing is wrong."""

    pass


class TransportError(NotionError):
    """Raised when the request never got an HTTP answer."""

    def __init__(self, message: str, via_relay: bool = False):
        self.via_relay = via_relay
        super().__init__(message)


class NotionAdapter:
    """
    Notion API adapter.

    Implements NotionRepository protocol. Talks to Notion directly with the
    user's token, or to the relay which attaches the token itself. No
    business logic - just I/O.
    """

    def __init__(
        self,
        connection: ConnectionConfig,
        relay_url: str = "http://localhost:8787/api/",
        notion_version: str = NOTION_VERSION,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self.connection = connection
        self.base_url = relay_url if connection.use_relay else NOTION_API_BASE
        self.notion_version = notion_version
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, connection: ConnectionConfig, config: Config) -> "NotionAdapter":
        return cls(
            connection,
            relay_url=config.relay_url,
            notion_version=config.notion_version,
            timeout=config.request_timeout,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if not self.connection.use_relay:
            headers["Authorization"] = f"Bearer {self.connection.credential}"
            headers["Notion-Version"] = self.notion_version
        return headers

    def _request(self, method: str, endpoint: str, body: dict | None = None) -> dict:
        """Make an API request and return the decoded JSON body."""
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{method} {url}")

        try:
            resp = self._session.request(
                method,
                url,
                headers=self._headers(),
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {endpoint} failed: {e}")
            raise TransportError(str(e), via_relay=self.connection.use_relay) from e

        if not resp.ok:
            try:
                error_data = resp.json()
            except ValueError:
                error_data = {}
            if not isinstance(error_data, dict):
                error_data = {}
            logger.error(f"Notion API error: {resp.status_code} {error_data}")
            error_cls = AuthorizationError if resp.status_code in (401, 403) else NotionAPIError
            # The relay reports its own failures as {"error": "..."}
            raise error_cls(
                resp.status_code,
                code=error_data.get("code"),
                message=error_data.get("message") or error_data.get("error") or "",
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise NotionAPIError(
                resp.status_code, code="invalid_json", message="Response body is not JSON"
            ) from e

        if not isinstance(data, dict):
            raise NotionAPIError(
                resp.status_code, code="invalid_json", message="Expected a JSON object"
            )
        return data

    def query_database(self, database_id: str, payload: dict) -> dict:
        """Query a database (first page only)."""
        return self._request("POST", f"databases/{database_id}/query", payload)

    def create_page(self, payload: dict) -> dict:
        """Create a page in a database."""
        return self._request("POST", "pages", payload)

    def check_health(self) -> bool:
        """Check that the relay is up. Direct mode has nothing to probe."""
        if not self.connection.use_relay:
            return True
        data = self._request("GET", "health")
        return bool(data.get("ok"))
