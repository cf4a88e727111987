import csv
import io
import logging
from pathlib import Path
from urllib.parse import quote

from participant_tracker.participant import (
    CSV_COLUMNS,
    Participant,
    new_participant_id,
)

logger = logging.getLogger(__name__)

UNQUOTED = "unquoted"
QUOTED = "quoted"

# spreadsheet exports on Windows are often not UTF-8
FALLBACK_ENCODING = "cp1252"

# characters left alone by JavaScript's encodeURIComponent besides [A-Za-z0-9_.~-]
URI_COMPONENT_SAFE = "!*'()"


def format_bool(value) -> str:
    return "1" if value else "0"


def parse_bool(raw: str) -> bool:
    """True only for "1" or a case-insensitive "true"."""
    return raw == "1" or raw.lower() == "true"


def _row_values(record: Participant) -> list:
    return [
        record.id,
        record.name,
        record.identifier,
        record.phone,
        format_bool(record.attended),
        format_bool(record.received_stipend),
        record.stipend_date,
        record.marked_by,
        record.notes,
    ]


def to_csv(records) -> str:
    """
    Encode a record collection as CSV text.

    The header row is always present, even when `records` is empty. Fields
    holding a comma, double quote, or line break are quoted with inner quotes
    doubled; None is written as an empty field. Lines are joined with a bare
    newline and there is no trailing newline.

    Args:
        records (Iterable[Participant]): Records in collection order.

    Returns:
        str: CSV text in canonical column order.
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for record in records:
        writer.writerow(_row_values(record))
    return output.getvalue().removesuffix("\n")


def _quote_count(line: str) -> int:
    return line.count('"')


def _is_complete_row(line: str, width: int) -> bool:
    """A line with balanced quotes that scans to exactly `width` fields."""
    return (
        bool(line)
        and _quote_count(line) % 2 == 0
        and len(parse_line(line)) == width
    )


def split_records(text: str) -> list[str]:
    """
    Split CSV text into raw record lines.

    Records end at LF or CRLF. A line that leaves a quote open continues onto
    the following lines until the quote closes, so quoted line breaks stay in
    their field. A continuation stops early at a line that is a complete row
    on its own (balanced quotes, as many fields as the header); the open
    record is then split back into plain lines. A stray quote therefore only
    affects its own row. Empty lines are discarded.

    Args:
        text: Raw CSV text.

    Returns:
        list[str]: Non-empty record lines.
    """
    records = []
    pending = []
    open_quotes = 0
    width = None

    for raw_line in text.split("\n"):
        line = raw_line.removesuffix("\r")
        if pending:
            if not _is_complete_row(line, width):
                pending.append(raw_line)
                open_quotes += _quote_count(raw_line)
                if open_quotes % 2 == 0:
                    records.append("\n".join(pending).removesuffix("\r"))
                    pending = []
                continue
            records.extend(pending_line.removesuffix("\r") for pending_line in pending)
            pending = []

        if not line:
            continue
        if width is None:
            # the header is split on plain commas
            width = len(line.split(","))
            records.append(line)
        elif _quote_count(line) % 2:
            pending = [raw_line]
            open_quotes = _quote_count(line)
        else:
            records.append(line)

    # the text ended inside a quote
    records.extend(pending_line.removesuffix("\r") for pending_line in pending)

    return [record for record in records if record]


def parse_line(line: str) -> list[str]:
    """
    Scan one record line into fields.

    Two states: `unquoted` and `quoted`. Inside quotes a doubled quote is a
    literal quote and a lone quote closes the quote. Outside quotes a comma
    ends the field and a quote opens one. There is no error state; malformed
    input yields whatever was accumulated.

    Args:
        line: A single record line.

    Returns:
        list[str]: Field values in column order.
    """
    fields = []
    current = []
    state = UNQUOTED
    position = 0
    while position < len(line):
        character = line[position]
        if state == QUOTED:
            if character == '"':
                if line[position + 1 : position + 2] == '"':
                    current.append('"')
                    position += 1
                else:
                    state = UNQUOTED
            else:
                current.append(character)
        else:
            if character == '"':
                state = QUOTED
            elif character == ",":
                fields.append("".join(current))
                current = []
            else:
                current.append(character)
        position += 1
    fields.append("".join(current))
    return fields


def from_csv(text: str) -> list[Participant]:
    """
    Decode CSV text into participants.

    The first non-empty line is the header; columns are looked up by name so
    their order may differ from the export order. Missing columns read as
    empty strings. Rows whose name is blank are dropped. Never raises on
    malformed content.

    Args:
        text: CSV text, typically produced by `to_csv` or a spreadsheet.

    Returns:
        list[Participant]: Decoded participants in file order.
    """
    lines = split_records(text)
    if not lines:
        return []

    header = lines[0].split(",")
    column_index = {}
    for position, column in enumerate(header):
        column_index.setdefault(column, position)

    participants = []
    dropped = 0
    for line in lines[1:]:
        fields = parse_line(line)

        def get(column: str) -> str:
            position = column_index.get(column)
            if position is None or position >= len(fields):
                return ""
            return fields[position]

        name = get("name")
        if not name.strip():
            dropped += 1
            continue

        participants.append(
            Participant(
                id=get("id") or new_participant_id(),
                name=name,
                identifier=get("identifier") or None,
                phone=get("phone") or None,
                attended=parse_bool(get("attended")),
                received_stipend=parse_bool(get("receivedStipend")),
                stipend_date=get("stipendDate") or None,
                marked_by=get("markedBy") or None,
                notes=get("notes") or None,
            )
        )

    if dropped:
        logger.debug("Dropped %d CSV row(s) with a blank name", dropped)

    return participants


def to_data_uri(text: str) -> str:
    """Percent-encode text into a downloadable plain-text data URI."""
    return "data:text/plain;charset=utf-8," + quote(text, safe=URI_COMPONENT_SAFE)


def export_csv(records, path) -> Path:
    """
    Write the CSV encoding of `records` to `path`.

    Returns:
        Path: The written file.
    """
    path = Path(path)
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(to_csv(records))
    logger.info("Exported %s", path)
    return path


def read_csv_text(path) -> str:
    """
    Read a CSV file as text.

    UTF-8 is tried first, ignoring a byte order mark. Files that are not valid
    UTF-8 are decoded as Windows-1252, with undecodable bytes replaced.

    Args:
        path: File to read.

    Returns:
        str: File contents with line breaks untouched.
    """
    data = Path(path).read_bytes()
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.warning("%s is not UTF-8; reading it as %s", path, FALLBACK_ENCODING)
        return data.decode(FALLBACK_ENCODING, errors="replace")


def import_csv(path) -> list[Participant]:
    """Read and decode a CSV file."""
    return from_csv(read_csv_text(path))
