"""Tests for connection parameter validation."""

import pytest

from notical.core.connection import (
    ConnectionConfig,
    ValidationError,
    normalize_database_id,
    validate_connection,
)

RAW_ID = "f6a9e1d80b5c4c7a9f0d1e2f3a4b5c6d"
CANONICAL_ID = "f6a9e1d8-0b5c-4c7a-9f0d-1e2f3a4b5c6d"


class TestNormalizeDatabaseId:
    def test_inserts_hyphens(self):
        assert normalize_database_id(RAW_ID) == CANONICAL_ID

    def test_canonical_is_unchanged(self):
        assert normalize_database_id(CANONICAL_ID) == CANONICAL_ID

    def test_idempotent(self):
        once = normalize_database_id(RAW_ID)
        assert normalize_database_id(once) == once

    @pytest.mark.parametrize(
        "raw",
        [
            RAW_ID,
            CANONICAL_ID,
            "f6a9e1d8-0b5c4c7a-9f0d1e2f3a4b5c6d",
            f"  {CANONICAL_ID}  ",
        ],
    )
    def test_separator_placement_does_not_matter(self, raw):
        assert normalize_database_id(raw) == CANONICAL_ID

    def test_wrong_length_passes_through(self):
        assert normalize_database_id("abc-def") == "abcdef"


class TestValidateConnection:
    def test_direct_mode(self):
        conn = validate_connection("secret_abc", RAW_ID)
        assert conn == ConnectionConfig(
            credential="secret_abc", database_id=CANONICAL_ID, use_relay=False
        )

    def test_direct_mode_requires_credential(self):
        with pytest.raises(ValidationError, match="token"):
            validate_connection("", RAW_ID)

    def test_blank_credential_is_missing(self):
        with pytest.raises(ValidationError):
            validate_connection("   ", RAW_ID)

    def test_relay_mode_without_credential(self):
        conn = validate_connection(None, CANONICAL_ID, use_relay=True)
        assert conn.credential is None
        assert conn.use_relay is True
        assert conn.database_id == CANONICAL_ID

    @pytest.mark.parametrize("use_relay", [False, True])
    def test_rejects_short_id(self, use_relay):
        with pytest.raises(ValidationError, match="32"):
            validate_connection("secret_abc", "f6a9e1d8-0b5c", use_relay=use_relay)

    def test_rejects_long_id(self):
        with pytest.raises(ValidationError):
            validate_connection("secret_abc", RAW_ID + "00")
