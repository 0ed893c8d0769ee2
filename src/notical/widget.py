"""Calendar widget state shared by the browser widget and the CLI.

Holds the connection, the displayed month, the day map, the busy flag and
the current error. Every operation mutates this one container; the web and
CLI layers only render it.
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime

from .adapters.notion_api import (
    AuthorizationError,
    NotionAdapter,
    NotionAPIError,
    NotionError,
    TransportError,
)
from .config import Config, resolve_timezone
from .core.calendar import (
    CalendarEntry,
    DisplayedMonth,
    GridCell,
    build_entry_payload,
    build_grid,
    build_query_payload,
    page_url,
    reduce_results,
)
from .core.connection import ConnectionConfig, ValidationError, validate_connection
from .ports import NotionRepository

logger = logging.getLogger(__name__)

RepoFactory = Callable[[ConnectionConfig], NotionRepository]


def describe_error(error: Exception) -> str:
    """Turn a failure into the single message shown to the user."""
    if isinstance(error, AuthorizationError):
        return (
            f"{error}. Check the token and that the database is shared "
            "with the integration."
        )
    if isinstance(error, NotionAPIError):
        detail = f": {error.message}" if error.message else ""
        return f"{error}{detail}. Check the settings."
    if isinstance(error, TransportError):
        if error.via_relay:
            hint = "Check that the relay is running, or switch to direct mode."
        else:
            hint = "Direct calls are often blocked by the browser; try relay mode."
        return f"Communication error: {error}. {hint}"
    return str(error)


class CalendarWidget:
    """State container for one calendar widget instance."""

    def __init__(
        self,
        config: Config | None = None,
        repo_factory: RepoFactory | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or Config()
        self._tz = resolve_timezone(self.config.timezone)
        self._repo_factory = repo_factory or (
            lambda connection: NotionAdapter.from_config(connection, self.config)
        )
        self._clock = clock or (lambda: datetime.now().astimezone(self._tz))
        self._sleep = sleep
        self._repo: NotionRepository | None = None

        self.connection: ConnectionConfig | None = None
        # Kept across reconfigure so the setup form can be prefilled
        self.last_connection: ConnectionConfig | None = None
        self.month = DisplayedMonth.current(self._clock().date())
        self.entries: dict[int, CalendarEntry] = {}
        self.busy = False
        self.error: str | None = None
        self.setup_visible = True

    @property
    def is_configured(self) -> bool:
        return self.connection is not None

    def now(self) -> datetime:
        return self._clock()

    # ============== Setup ==============

    def configure(self, credential: str | None, database_id: str, use_relay: bool = False) -> bool:
        """Validate and store connection parameters, then load the month."""
        try:
            connection = validate_connection(credential, database_id, use_relay)
        except ValidationError as e:
            self.error = str(e)
            return False

        self.connection = connection
        self.last_connection = connection
        self._repo = self._repo_factory(connection)
        self.setup_visible = False
        self.error = None
        mode = "relay" if use_relay else "direct"
        logger.info(f"Configured database {connection.database_id} ({mode} mode)")
        self.load()
        return True

    def reconfigure(self) -> None:
        """Drop the connection and show the setup form again."""
        self.connection = None
        self._repo = None
        self.entries = {}
        self.setup_visible = True

    # ============== Data ==============

    def load(self) -> None:
        """
        Query the displayed month and rebuild the day map.

        The query is tagged with the month it targeted. If the displayed
        month changed before the answer arrived, the answer is discarded and
        the new month is loaded instead.
        """
        if not self.is_configured or self.busy:
            return

        target = self.month
        self.error = None
        self.busy = True
        data: dict = {}
        failure: NotionError | None = None
        try:
            data = self._repo.query_database(
                self.connection.database_id, build_query_payload(target)
            )
        except NotionError as e:
            failure = e
        finally:
            self.busy = False

        if self.month != target:
            logger.info(f"Discarding stale response for {target.label}")
            self.load()
            return

        if failure is not None:
            self.entries = {}
            self.error = describe_error(failure)
            self.setup_visible = True
            return

        results = data.get("results")
        self.entries = reduce_results(
            results if isinstance(results, list) else [],
            target,
            tz=self._tz,
            fallback_color=self.config.fallback_color,
        )
        logger.debug(f"Loaded {len(self.entries)} entries for {target.label}")

    def next_month(self) -> None:
        self.month = self.month.next()
        self.entries = {}
        self.load()

    def previous_month(self) -> None:
        self.month = self.month.previous()
        self.entries = {}
        self.load()

    def add_entry(self) -> str | None:
        """
        Create a record for today, then re-query the displayed month.

        Returns the new page's URL, or None on failure.
        """
        if not self.is_configured or self.busy:
            return None

        self.busy = True
        self.error = None
        payload = build_entry_payload(
            self.connection.database_id, self.now(), self.config.default_color
        )
        try:
            data = self._repo.create_page(payload)
        except NotionError as e:
            self.error = describe_error(e)
            return None
        finally:
            self.busy = False

        page_id = data.get("id") if isinstance(data, dict) else None
        if not page_id:
            self.error = "Creating the entry failed. Check the Notion settings."
            return None

        logger.info(f"Created page {page_id}")
        # Let Notion's read side catch up before re-querying
        self._sleep(self.config.refresh_delay)
        self.load()
        return page_url(page_id)

    # ============== View ==============

    def grid(self) -> list[GridCell]:
        return build_grid(self.month, self.entries, self.now().date())

    def entry_url(self, day: int) -> str | None:
        entry = self.entries.get(day)
        return page_url(entry.id) if entry else None
