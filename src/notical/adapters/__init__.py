"""Adapters - I/O implementations of ports."""

from .notion_api import (
    AuthorizationError,
    NotionAdapter,
    NotionAPIError,
    NotionError,
    TransportError,
)

__all__ = [
    "AuthorizationError",
    "NotionAdapter",
    "NotionAPIError",
    "NotionError",
    "TransportError",
]
