from typing import Any

from pydantic import BaseModel, Field

from participant_tracker.participant import Participant
from participant_tracker.utils import clean_optional
from participant_tracker.view import FILTER_MODES


class Draft(BaseModel):
    """Contents of the add-participant form."""

    name: str = ""
    identifier: str = ""
    phone: str = ""


class AppState(BaseModel):
    """
    Complete application state owned by the controller.

    Only `records` is persisted; the rest is per-session view state.
    """

    records: list[Participant] = Field(default_factory=list)
    search: str = ""
    filter_mode: str = "all"
    draft: Draft = Field(default_factory=Draft)


# actions ----------------------------------------------------------------------------------


class AddParticipant(BaseModel):
    """Add a participant from explicit values, or from the draft when omitted."""

    name: str | None = None
    identifier: str | None = None
    phone: str | None = None


class SetField(BaseModel):
    participant_id: str
    field: str
    value: Any = None


class RemoveParticipant(BaseModel):
    participant_id: str


class ImportRecords(BaseModel):
    """Merge decoded records by id; `replace` starts from an empty collection."""

    records: list[Participant]
    replace: bool = False


class SetSearch(BaseModel):
    text: str


class SetFilter(BaseModel):
    mode: str


class SetDraft(BaseModel):
    name: str | None = None
    identifier: str | None = None
    phone: str | None = None


# reducer ----------------------------------------------------------------------------------


def merge_records(existing, incoming) -> list[Participant]:
    """
    Merge `incoming` into `existing` by participant id.

    Matching ids are replaced in place; unseen ids are appended in order.
    When `incoming` repeats an id, the last occurrence wins.
    """
    merged = list(existing)
    positions = {record.id: index for index, record in enumerate(merged)}
    for record in incoming:
        if record.id in positions:
            merged[positions[record.id]] = record
        else:
            positions[record.id] = len(merged)
            merged.append(record)
    return merged


def _add_participant(state: AppState, action: AddParticipant) -> AppState:
    draft = state.draft
    name = action.name if action.name is not None else draft.name
    if not name.strip():
        return state
    identifier = action.identifier if action.name is not None else draft.identifier
    phone = action.phone if action.name is not None else draft.phone

    participant = Participant(
        name=name.strip(),
        identifier=clean_optional(identifier),
        phone=clean_optional(phone),
    )
    return state.model_copy(
        update={"records": [participant, *state.records], "draft": Draft()}
    )


def _set_field(state: AppState, action: SetField) -> AppState:
    records = [
        r.with_field(action.field, action.value) if r.id == action.participant_id else r
        for r in state.records
    ]
    return state.model_copy(update={"records": records})


def reduce(state: AppState, action) -> AppState:
    """
    Apply one action and return the resulting state.

    The input state is never modified.

    Args:
        state: Current state.
        action: One of the action models in this module.

    Returns:
        AppState: New state (may be `state` itself when nothing changes).
    """
    if isinstance(action, AddParticipant):
        return _add_participant(state, action)

    if isinstance(action, SetField):
        return _set_field(state, action)

    if isinstance(action, RemoveParticipant):
        records = [r for r in state.records if r.id != action.participant_id]
        return state.model_copy(update={"records": records})

    if isinstance(action, ImportRecords):
        base = [] if action.replace else state.records
        return state.model_copy(
            update={"records": merge_records(base, action.records)}
        )

    if isinstance(action, SetSearch):
        return state.model_copy(update={"search": action.text})

    if isinstance(action, SetFilter):
        if action.mode not in FILTER_MODES:
            raise ValueError(f"Unknown filter mode: {action.mode}")
        return state.model_copy(update={"filter_mode": action.mode})

    if isinstance(action, SetDraft):
        changes = action.model_dump(exclude_none=True)
        return state.model_copy(update={"draft": state.draft.model_copy(update=changes)})

    raise TypeError(f"Unsupported action: {type(action).__name__}")


def records_changed(previous: AppState, current: AppState) -> bool:
    """True when the persisted part of the state differs."""
    if previous.records is current.records:
        return False
    return previous.records != current.records
