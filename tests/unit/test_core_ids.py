"""Unit tests for ID, timestamp and chunking utilities."""

from datetime import date, datetime, timedelta, timezone

import pytest

from econf.core.ids import chunk_list, format_iso, generate_id, to_iso_string, utc_now_iso


class TestGenerateId:
    """Tests for document ID generation."""

    def test_length_and_charset(self) -> None:
        doc_id = generate_id()
        assert len(doc_id) == 20
        assert all(c in "0123456789abcdef" for c in doc_id)

    def test_unique(self) -> None:
        assert len({generate_id() for _ in range(200)}) == 200


class TestTimestamps:
    """Tests for fixed-width ISO rendering."""

    def test_format_utc(self) -> None:
        value = datetime(2024, 3, 5, 7, 8, 9, 123456, tzinfo=timezone.utc)
        assert format_iso(value) == "2024-03-05T07:08:09.123Z"

    def test_format_converts_offset_to_utc(self) -> None:
        value = datetime(2024, 3, 5, 9, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_iso(value) == "2024-03-05T07:00:00.000Z"

    def test_naive_datetime_treated_as_utc(self) -> None:
        assert format_iso(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"

    def test_string_order_matches_time_order(self) -> None:
        """Fixed width means string comparison is chronological."""
        early = format_iso(datetime(2024, 1, 1, 9, 59, 59, 999000))
        late = format_iso(datetime(2024, 1, 1, 10, 0, 0))
        assert early < late

    def test_utc_now_iso_shape(self) -> None:
        now = utc_now_iso()
        assert len(now) == 24
        assert now.endswith("Z")

    def test_to_iso_string(self) -> None:
        assert to_iso_string("2024-01-01T00:00:00.000Z") == "2024-01-01T00:00:00.000Z"
        assert to_iso_string(date(2024, 5, 17)) == "2024-05-17T00:00:00.000Z"
        assert to_iso_string(datetime(2024, 5, 17, 12, tzinfo=timezone.utc)) == "2024-05-17T12:00:00.000Z"

    def test_to_iso_string_rejects_other_values(self) -> None:
        assert to_iso_string(None) is None
        assert to_iso_string("") is None
        assert to_iso_string(12345) is None


class TestChunkList:
    """Tests for splitting ID lists into query-sized chunks."""

    def test_exact_multiple(self) -> None:
        assert chunk_list(list(range(20)), 10) == [list(range(10)), list(range(10, 20))]

    def test_remainder(self) -> None:
        chunks = chunk_list(list(range(23)), 10)
        assert [len(c) for c in chunks] == [10, 10, 3]

    def test_empty(self) -> None:
        assert chunk_list([], 10) == []

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError):
            chunk_list([1, 2], 0)
