"""Unit tests for chunk staging key helpers."""

import re
from datetime import UTC, datetime

import pytest

from oss_gateway.core.exceptions import InvalidArgumentException
from oss_gateway.features.uploads.naming import (
    MIN_PART_SIZE,
    chunk_key,
    completion_marker_key,
    count_chunks,
    digest_of_key,
    final_object_key,
    parse_chunk_index,
    require_extension,
    require_identifier,
    session_prefix,
)


class TestChunkKeys:
    """Test deterministic staging key layout."""

    def test_chunk_key_layout(self):
        """Test chunk keys nest the digest under the session id."""
        assert chunk_key("s1", "abc", 7) == ".chunk-uploads/s1/abc/7.part"

    def test_session_prefix_contains_chunk_keys(self):
        """Test every chunk key of a session lives under its prefix."""
        assert chunk_key("s1", "abc", 0).startswith(session_prefix("s1"))

    def test_completion_marker_sits_under_session_prefix(self):
        """Test the marker is removed by the session cleanup."""
        assert completion_marker_key("s1") == ".chunk-uploads/s1/.completing"

    def test_digest_of_key(self):
        """Test the digest segment is extracted from chunk keys only."""
        assert digest_of_key(".chunk-uploads/s1/abc/3.part") == "abc"
        assert digest_of_key(".chunk-uploads/s1/.completing") is None
        assert digest_of_key("2025/01/01/x.pdf") is None


class TestParseChunkIndex:
    """Test chunk index parsing from object keys."""

    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            (".chunk-uploads/s/d/0.part", 0),
            (".chunk-uploads/s/d/12.part", 12),
            (".chunk-uploads/s/d/-1.part", None),
            (".chunk-uploads/s/d/x.part", None),
            (".chunk-uploads/s/d/3.bin", None),
            (".chunk-uploads/s/d/٣.part", None),
        ],
    )
    def test_parse(self, key, expected):
        """Test only non-negative ASCII integers are accepted."""
        assert parse_chunk_index(key) == expected


class TestValidation:
    """Test identifier and file name validation."""

    @pytest.mark.parametrize("value", ["", "   ", "a/b"])
    def test_require_identifier_rejects(self, value):
        """Test blank identifiers and path separators are rejected."""
        with pytest.raises(InvalidArgumentException):
            require_identifier(value, "upload_session_id")

    def test_require_identifier_strips(self):
        """Test surrounding whitespace is removed."""
        assert require_identifier("  s1 ", "upload_session_id") == "s1"

    @pytest.mark.parametrize("name", ["", "README", ".gitignore", "draft."])
    def test_require_extension_rejects(self, name):
        """Test names without a usable extension are rejected."""
        with pytest.raises(InvalidArgumentException):
            require_extension(name)

    def test_require_extension_keeps_last_suffix(self):
        """Test the extension is taken from the last dot."""
        assert require_extension("archive.tar.gz") == ".gz"


class TestCounting:
    """Test chunk counting and final key generation."""

    def test_count_chunks_rounds_up(self):
        """Test a partial trailing chunk counts as a chunk."""
        assert count_chunks(12_000_000, MIN_PART_SIZE) == 3
        assert count_chunks(2 * MIN_PART_SIZE, MIN_PART_SIZE) == 2
        assert count_chunks(1, MIN_PART_SIZE) == 1

    def test_final_object_key_format(self):
        """Test merged objects get a UTC date path and a hex name."""
        key = final_object_key("report.pdf", datetime(2025, 3, 9, tzinfo=UTC))
        assert re.fullmatch(r"2025/03/09/[0-9a-f]{32}\.pdf", key)

    def test_final_object_keys_are_unique(self):
        """Test two merges of the same name never collide."""
        assert final_object_key("a.txt") != final_object_key("a.txt")
