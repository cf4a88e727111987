"""Tests for search, filter modes, and summary counters."""

import pytest

from participant_tracker.participant import Participant
from participant_tracker.view import (
    FILTER_MODES,
    filter_records,
    matches_search,
    summarize,
)


@pytest.fixture
def records():
    return [
        Participant(id="1", name="Ali bin Ahmad", attended=True, received_stipend=True),
        Participant(id="2", name="Siti", identifier="ALI-77", attended=True),
        Participant(id="3", name="Chong", phone="012-ALI", received_stipend=True),
        Participant(id="4", name="Ravi", notes="brother of Ali"),
        Participant(id="5", name="Nurul", marked_by="Ali"),
    ]


class TestSearch:
    """Case-insensitive substring search."""

    def test_blank_query_matches_everything(self, records):
        assert all(matches_search(r, "   ") for r in records)
        assert len(filter_records(records, "")) == len(records)

    def test_search_covers_name_identifier_phone_and_notes(self, records):
        ids = [r.id for r in filter_records(records, "ali")]
        # marked_by is not searched
        assert ids == ["1", "2", "3", "4"]

    def test_query_is_trimmed(self, records):
        assert [r.id for r in filter_records(records, "  CHONG ")] == ["3"]

    def test_missing_fields_treated_as_empty(self):
        record = Participant(name="Ali")
        assert not matches_search(record, "none")


class TestFilterModes:
    """Single-select filter modes combined with search."""

    @pytest.mark.parametrize(
        "mode,expected",
        [
            ("all", ["1", "2", "3", "4", "5"]),
            ("unpaid", ["2", "4", "5"]),
            ("paid", ["1", "3"]),
            ("attended", ["1", "2"]),
        ],
    )
    def test_modes(self, records, mode, expected):
        assert [r.id for r in filter_records(records, "", mode)] == expected

    def test_search_and_paid(self, records):
        assert [r.id for r in filter_records(records, "ali", "paid")] == ["1", "3"]

    def test_unknown_mode(self, records):
        with pytest.raises(ValueError):
            filter_records(records, "", "everyone")

    def test_modes_constant(self):
        assert FILTER_MODES == ("all", "unpaid", "paid", "attended")


class TestSummary:
    """Counters are computed over the full collection."""

    def test_counts(self, records):
        summary = summarize(records)
        assert summary.total_count == 5
        assert summary.attended_count == 2
        assert summary.paid_count == 2
        assert summary.unpaid_count == 3

    def test_total_is_paid_plus_unpaid(self, records):
        for size in range(len(records) + 1):
            summary = summarize(records[:size])
            assert summary.total_count == summary.paid_count + summary.unpaid_count

    def test_empty(self):
        assert summarize([]).total_count == 0
