import logging

from participant_tracker import csv_codec
from participant_tracker.config import Config
from participant_tracker.participant import Participant
from participant_tracker.state import (
    AddParticipant,
    AppState,
    ImportRecords,
    RemoveParticipant,
    SetField,
    reduce,
    records_changed,
)
from participant_tracker.store import (
    STORAGE_KEY,
    LocalStorage,
    load_records,
    save_records,
)
from participant_tracker.view import filter_records, summarize

logger = logging.getLogger(__name__)


class Tracker:
    """
    Top-level controller that owns the application state.

    Every action goes through `dispatch`, which reduces the state and writes the
    full record collection back to storage whenever the records changed.

    Attributes:
        storage (LocalStorage): Durable key/value store.
        key (str): Storage key for the record collection.
        state (AppState): Current application state.
    """

    def __init__(self, storage: LocalStorage, key: str = STORAGE_KEY):
        self.storage = storage
        self.key = key
        self.state = AppState(records=load_records(storage, key))
        logger.info("Loaded %d participant(s) from %s", len(self.records), storage)

    def __repr__(self):
        return f"Tracker({self.storage}, {self.key!r})"

    @property
    def records(self) -> list[Participant]:
        return self.state.records

    def dispatch(self, action) -> AppState:
        """Apply an action, then persist the records if they changed."""
        previous = self.state
        self.state = reduce(previous, action)
        if records_changed(previous, self.state):
            save_records(self.storage, self.state.records, self.key)
        return self.state

    # record actions ---------------------------------------------------------------------------

    def add(
        self, name: str, identifier: str | None = None, phone: str | None = None
    ) -> Participant | None:
        """Add a participant; returns None when the name is blank."""
        previous = self.records
        self.dispatch(AddParticipant(name=name, identifier=identifier, phone=phone))
        if self.records is previous:
            return None
        return self.records[0]

    def set_field(self, participant_id: str, field: str, value) -> None:
        self.dispatch(SetField(participant_id=participant_id, field=field, value=value))

    def remove(self, participant_id: str) -> None:
        self.dispatch(RemoveParticipant(participant_id=participant_id))

    def get(self, participant_id: str) -> Participant | None:
        for r in self.records:
            if r.id == participant_id:
                return r
        return None

    def find(self, token: str) -> Participant:
        """
        Look up one participant by id, unique id prefix, or exact name.

        Name matching ignores case and surrounding whitespace.

        Raises:
            ValueError: If nothing matches or the token is ambiguous.
        """
        token = token.strip()
        exact = self.get(token)
        if exact:
            return exact

        candidates = [r for r in self.records if token and r.id.startswith(token)]
        if not candidates:
            candidates = [
                r for r in self.records if r.name.strip().lower() == token.lower()
            ]
        if not candidates:
            raise ValueError(f"No participant matches {token!r}")
        if len(candidates) > 1:
            raise ValueError(
                f"{token!r} matches {len(candidates)} participants; use the id"
            )
        return candidates[0]

    # csv --------------------------------------------------------------------------------------

    def import_csv(self, path, replace: bool = False) -> int:
        """
        Merge participants from a CSV file into the collection.

        Returns:
            int: Number of participants read from the file.
        """
        imported = csv_codec.import_csv(path)
        self.dispatch(ImportRecords(records=imported, replace=replace))
        logger.info("Imported %d participant(s) from %s", len(imported), path)
        return len(imported)

    def export_csv(self, path):
        return csv_codec.export_csv(self.records, path)

    # derived view -----------------------------------------------------------------------------

    def visible_records(self) -> list[Participant]:
        return filter_records(self.records, self.state.search, self.state.filter_mode)

    def summary(self):
        return summarize(self.records)


def load_tracker(config: Config) -> Tracker:
    """Build a Tracker from configuration.

    Args:
        config: Loaded configuration.

    Returns:
        Tracker: Controller with records loaded from storage.
    """
    return Tracker(LocalStorage(config.storage_path), key=config.storage_key)
