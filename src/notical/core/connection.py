"""Connection parameter validation - no I/O."""

from dataclasses import dataclass

DATABASE_ID_LENGTH = 32
_ID_GROUPS = (8, 4, 4, 4, 12)


class ValidationError(ValueError):
    """Raised when user-supplied connection parameters are malformed."""

    pass


@dataclass(frozen=True)
class ConnectionConfig:
    """Validated connection parameters, held for the session."""

    credential: str | None
    database_id: str
    use_relay: bool = False


def strip_separators(raw: str) -> str:
    """Remove whitespace and hyphens from a database identifier."""
    return raw.strip().replace("-", "")


def normalize_database_id(raw: str) -> str:
    """
    Canonicalize a database identifier to hyphenated UUID form.

    Identifiers that are not 32 characters after stripping separators are
    returned stripped but otherwise unmodified.

    >>> normalize_database_id("f6a9e1d80b5c4c7a9f0d1e2f3a4b5c6d")
    'f6a9e1d8-0b5c-4c7a-9f0d-1e2f3a4b5c6d'
    """
    compact = strip_separators(raw)
    if len(compact) != DATABASE_ID_LENGTH:
        return compact

    parts = []
    offset = 0
    for size in _ID_GROUPS:
        parts.append(compact[offset : offset + size])
        offset += size
    return "-".join(parts)


def validate_connection(
    credential: str | None,
    database_id: str,
    use_relay: bool = False,
) -> ConnectionConfig:
    """
    Validate connection parameters before any data operation.

    Direct mode needs a credential; relay mode leaves it to the relay.
    Both modes need a 32-character database identifier.
    """
    credential = (credential or "").strip()

    if not use_relay and not credential:
        raise ValidationError(
            "A Notion secret token is required unless the relay is used."
        )

    if len(strip_separators(database_id or "")) != DATABASE_ID_LENGTH:
        raise ValidationError(
            f"The database ID must be {DATABASE_ID_LENGTH} characters "
            "(hyphens optional)."
        )

    return ConnectionConfig(
        credential=credential or None,
        database_id=normalize_database_id(database_id),
        use_relay=use_relay,
    )
