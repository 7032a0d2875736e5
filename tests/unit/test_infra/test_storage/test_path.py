"""Unit tests for object key helpers."""

import re
from datetime import UTC, datetime

import pytest

from oss_gateway.infra.storage.path import (
    build_object_url,
    generate_date_key,
    get_file_extension,
)


class TestFileExtension:
    """Test extension extraction."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("report.pdf", ".pdf"),
            ("archive.tar.gz", ".gz"),
            ("README", None),
            (".gitignore", None),
            ("draft.", None),
        ],
    )
    def test_extension(self, name, expected):
        """Test the last suffix is returned with its dot."""
        assert get_file_extension(name) == expected


class TestKeys:
    """Test generated keys and URLs."""

    def test_date_key(self):
        """Test keys are grouped by UTC date."""
        key = generate_date_key(".png", datetime(2024, 12, 31, 23, 59, tzinfo=UTC))

        assert re.fullmatch(r"2024/12/31/[0-9a-f]{32}\.png", key)

    def test_url_without_base(self):
        """Test the bare key is returned when no base URL is configured."""
        assert build_object_url(None, "uploads", "a/b.txt") == "a/b.txt"

    def test_url_with_base(self):
        """Test a base URL is joined with bucket and key."""
        assert (
            build_object_url("https://cdn.example.com/", "uploads", "a/b.txt")
            == "https://cdn.example.com/uploads/a/b.txt"
        )
