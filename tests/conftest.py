"""Shared fixtures."""

import pytest

CREATED_ID = "1234abcd-0000-0000-0000-000000000000"


def _record(record_id: str, start: str, color: str = "blue") -> dict:
    return {
        "id": record_id,
        "properties": {
            "Date": {"date": {"start": start}},
            "Color": {"select": {"name": color}},
        },
    }


class FakeRepo:
    """In-memory NotionRepository."""

    def __init__(self, results=None):
        self.results = results or []
        self.queries: list[dict] = []
        self.created: list[dict] = []
        self.query_error: Exception | None = None
        self.create_error: Exception | None = None
        self.on_query = None

    def query_database(self, database_id, payload):
        self.queries.append(payload)
        if self.on_query:
            self.on_query()
        if self.query_error:
            raise self.query_error
        return {"results": list(self.results)}

    def create_page(self, payload):
        self.created.append(payload)
        if self.create_error:
            raise self.create_error
        return {"id": CREATED_ID}

    def check_health(self):
        return True


@pytest.fixture
def make_record():
    """Factory for query result records with Date and Color properties."""
    return _record


@pytest.fixture
def fake_repo():
    """Factory for in-memory repositories."""
    return FakeRepo
