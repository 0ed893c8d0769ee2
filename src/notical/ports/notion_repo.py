"""Notion repository interface."""

from typing import Protocol


class NotionRepository(Protocol):
    """Interface for querying and writing calendar records."""

    def query_database(self, database_id: str, payload: dict) -> dict:
        """Run a database query. Returns the upstream JSON body."""
        ...

    def create_page(self, payload: dict) -> dict:
        """Create a page. Returns the upstream JSON body."""
        ...

    def check_health(self) -> bool:
        """Check that the configured endpoint is reachable."""
        ...
