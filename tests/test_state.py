"""Tests for the application state reducer."""

import pytest

from participant_tracker.participant import Participant
from participant_tracker.state import (
    AddParticipant,
    AppState,
    Draft,
    ImportRecords,
    RemoveParticipant,
    SetDraft,
    SetField,
    SetFilter,
    SetSearch,
    merge_records,
    records_changed,
    reduce,
)


@pytest.fixture
def state():
    return AppState(
        records=[
            Participant(id="1", name="Ali"),
            Participant(id="2", name="Bob", attended=True),
        ]
    )


class TestAddParticipant:
    """Adding from explicit values or from the form draft."""

    def test_prepends_trimmed_record(self, state):
        new_state = reduce(
            state, AddParticipant(name="  Siti  ", identifier=" IC-9 ", phone="  ")
        )
        added = new_state.records[0]
        assert [r.name for r in new_state.records] == ["Siti", "Ali", "Bob"]
        assert added.identifier == "IC-9"
        assert added.phone is None
        assert added.attended is False
        assert added.received_stipend is False
        assert added.stipend_date is None and added.marked_by is None
        assert added.id not in ("1", "2")

    def test_blank_name_is_ignored(self, state):
        assert reduce(state, AddParticipant(name="   ")) is state

    def test_uses_and_clears_draft(self, state):
        drafted = reduce(state, SetDraft(name="Chong", phone="012"))
        assert drafted.draft == Draft(name="Chong", phone="012")
        added = reduce(drafted, AddParticipant())
        assert added.records[0].name == "Chong"
        assert added.records[0].phone == "012"
        assert added.draft == Draft()

    def test_blank_draft_keeps_draft(self, state):
        drafted = reduce(state, SetDraft(name=" ", identifier="IC-1"))
        assert reduce(drafted, AddParticipant()) is drafted

    def test_ids_are_unique(self):
        state = AppState()
        for _ in range(20):
            state = reduce(state, AddParticipant(name="Same Name"))
        assert len({r.id for r in state.records}) == 20


class TestSetField:
    """Field updates keyed by id."""

    def test_updates_matching_record_only(self, state):
        new_state = reduce(
            state, SetField(participant_id="1", field="receivedStipend", value=True)
        )
        assert new_state.records[0].received_stipend is True
        assert new_state.records[1] is state.records[1]
        assert state.records[0].received_stipend is False

    def test_snake_case_field_name(self, state):
        new_state = reduce(
            state, SetField(participant_id="2", field="marked_by", value="Siti")
        )
        assert new_state.records[1].marked_by == "Siti"

    def test_unknown_id_is_noop(self, state):
        new_state = reduce(
            state, SetField(participant_id="missing", field="name", value="X")
        )
        assert new_state.records == state.records
        assert not records_changed(state, new_state)

    def test_value_is_not_validated(self, state):
        new_state = reduce(
            state, SetField(participant_id="1", field="attended", value="yes")
        )
        assert new_state.records[0].attended == "yes"

    @pytest.mark.parametrize("field", ["id", "unknown"])
    def test_rejects_bad_field_names(self, state, field):
        with pytest.raises(ValueError):
            reduce(state, SetField(participant_id="1", field=field, value="x"))


class TestRemoveAndImport:
    """Removal and CSV import merging."""

    def test_remove(self, state):
        new_state = reduce(state, RemoveParticipant(participant_id="1"))
        assert [r.id for r in new_state.records] == ["2"]

    def test_remove_unknown_is_noop(self, state):
        new_state = reduce(state, RemoveParticipant(participant_id="9"))
        assert not records_changed(state, new_state)

    def test_import_merges_by_id(self, state):
        incoming = [
            Participant(id="3", name="Chong"),
            Participant(id="1", name="Ali Updated", attended=True),
        ]
        new_state = reduce(state, ImportRecords(records=incoming))
        assert [r.id for r in new_state.records] == ["1", "2", "3"]
        assert new_state.records[0].name == "Ali Updated"

    def test_import_replace(self, state):
        incoming = [Participant(id="9", name="Zed")]
        new_state = reduce(state, ImportRecords(records=incoming, replace=True))
        assert [r.id for r in new_state.records] == ["9"]

    def test_duplicate_ids_keep_last(self):
        merged = merge_records(
            [],
            [
                Participant(id="1", name="First"),
                Participant(id="2", name="Other"),
                Participant(id="1", name="Second"),
            ],
        )
        assert [(r.id, r.name) for r in merged] == [("1", "Second"), ("2", "Other")]


class TestViewState:
    """Search, filter, and draft updates do not touch records."""

    def test_search_and_filter(self, state):
        new_state = reduce(reduce(state, SetSearch(text="ali")), SetFilter(mode="paid"))
        assert new_state.search == "ali"
        assert new_state.filter_mode == "paid"
        assert not records_changed(state, new_state)

    def test_unknown_filter(self, state):
        with pytest.raises(ValueError):
            reduce(state, SetFilter(mode="everyone"))

    def test_unsupported_action(self, state):
        with pytest.raises(TypeError):
            reduce(state, "add")

    def test_input_state_is_untouched(self, state):
        before = state.model_copy(deep=True)
        reduce(state, AddParticipant(name="Siti"))
        reduce(state, SetField(participant_id="1", field="notes", value="x"))
        reduce(state, RemoveParticipant(participant_id="2"))
        assert state == before
