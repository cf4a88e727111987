import json
import logging
from pathlib import Path

from pydantic import ValidationError

from participant_tracker.participant import Participant
from participant_tracker.state import merge_records

logger = logging.getLogger(__name__)

STORAGE_KEY = "participant-tracker:v1"


class LocalStorage:
    """
    Key/value text store kept in a single JSON file.

    Every key maps to a string. Reads re-parse the whole file and writes
    replace it wholesale. A missing or unparseable file reads as empty.

    Attributes:
        path (Path): Location of the backing JSON file.
    """

    def __init__(self, path):
        self.path = Path(path)

    def __repr__(self):
        return f"LocalStorage({self.path})"

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: not a key/value map", self.path)
            return {}
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    def get_item(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


def load_records(storage: LocalStorage, key: str = STORAGE_KEY) -> list[Participant]:
    """
    Load the record collection stored under `key`.

    Falls back to an empty collection when the key is absent, the value is
    not valid JSON, the value is not a list, or any entry is not a valid
    participant. Entries sharing an id collapse into one record: the last
    entry wins and keeps the position of the first. Never raises for bad
    content.

    Args:
        storage: Backing key/value store.
        key: Storage key holding the serialized collection.

    Returns:
        list[Participant]: Stored records in collection order.
    """
    raw = storage.get_item(key)
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except ValueError as exc:
        logger.warning("Stored records under %r are not valid JSON: %s", key, exc)
        return []
    if not isinstance(parsed, list):
        logger.warning("Stored records under %r are not a list", key)
        return []
    try:
        records = [Participant.model_validate(item) for item in parsed]
    except ValidationError as exc:
        logger.warning("Stored records under %r failed validation: %s", key, exc)
        return []
    merged = merge_records([], records)
    if len(merged) != len(records):
        logger.warning(
            "Merged %d stored record(s) with a duplicate id under %r",
            len(records) - len(merged),
            key,
        )
    return merged


def save_records(storage: LocalStorage, records, key: str = STORAGE_KEY) -> None:
    """
    Overwrite the stored collection with `records`.

    Write errors are not caught.
    """
    payload = json.dumps(
        [record.to_storage() for record in records], ensure_ascii=False
    )
    storage.set_item(key, payload)
    logger.debug("Saved %d record(s) under %r", len(records), key)
