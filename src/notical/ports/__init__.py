"""Ports - interfaces/protocols for external dependencies."""

from .notion_repo import NotionRepository

__all__ = [
    "NotionRepository",
]
