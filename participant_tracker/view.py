from pydantic import BaseModel

from participant_tracker.participant import Participant

FILTER_MODES = ("all", "unpaid", "paid", "attended")

FILTER_LABELS = {
    "all": "All",
    "unpaid": "Not yet received",
    "paid": "Received",
    "attended": "Attended",
}


class Summary(BaseModel):
    """Aggregate counters over the full, unfiltered collection."""

    total_count: int
    attended_count: int
    paid_count: int
    unpaid_count: int


def matches_search(record: Participant, query: str) -> bool:
    """
    Case-insensitive substring match on name, identifier, phone, and notes.

    A blank query matches every record.
    """
    needle = query.strip().lower()
    if not needle:
        return True
    haystacks = (record.name, record.identifier, record.phone, record.notes)
    return any(needle in (text or "").lower() for text in haystacks)


def passes_filter(record: Participant, mode: str) -> bool:
    if mode == "all":
        return True
    if mode == "unpaid":
        return not record.received_stipend
    if mode == "paid":
        return bool(record.received_stipend)
    if mode == "attended":
        return bool(record.attended)
    raise ValueError(f"Unknown filter mode: {mode}")


def filter_records(records, search: str = "", mode: str = "all") -> list[Participant]:
    """
    Records matching both the search text and the filter mode.

    Args:
        records (Iterable[Participant]): Full collection.
        search: Free-text query.
        mode: One of `FILTER_MODES`.

    Returns:
        list[Participant]: Matching records in collection order.
    """
    if mode not in FILTER_MODES:
        raise ValueError(f"Unknown filter mode: {mode}")
    return [
        r for r in records if matches_search(r, search) and passes_filter(r, mode)
    ]


def summarize(records) -> Summary:
    records = list(records)
    total_count = len(records)
    paid_count = len([r for r in records if r.received_stipend])
    attended_count = len([r for r in records if r.attended])
    return Summary(
        total_count=total_count,
        attended_count=attended_count,
        paid_count=paid_count,
        unpaid_count=total_count - paid_count,
    )
