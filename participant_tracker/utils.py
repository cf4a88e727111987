from datetime import datetime

TRUE_FLAG_STRINGS = ("1", "true", "yes", "y", "x")
FALSE_FLAG_STRINGS = ("0", "false", "no", "n", "")

CHECK_MARK = "✔"


def clean_optional(value: str | None) -> str | None:
    """
    Trims free-text input, turning blank values into None.

    Args:
        value (str or None): Raw text from a form field or prompt.

    Returns:
        str or None: Trimmed text, or None if nothing remains.
    """
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def parse_flag(value) -> bool:
    """
    Interprets user-entered yes/no text as a boolean.

    Accepts 1/0, true/false, yes/no, y/n, and x (a ticked box), ignoring case.

    Args:
        value: Raw value; booleans pass through unchanged.

    Returns:
        bool: Parsed flag.

    Raises:
        ValueError: If the text is not a recognized flag.
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_FLAG_STRINGS:
        return True
    if text in FALSE_FLAG_STRINGS:
        return False
    raise ValueError(f"Not a yes/no value: {value!r}")


def format_flag(value: bool) -> str:
    return CHECK_MARK if value else ""


def format_stipend_date(value: str | None) -> str:
    """
    Renders a stipend date for display in the local date and time format.

    Text that is not an ISO 8601 timestamp is shown as entered.

    Args:
        value (str or None): Stored stipend date.

    Returns:
        str: Display text; empty for None.
    """
    if not value:
        return ""
    try:
        moment = datetime.fromisoformat(value.strip())
    except ValueError:
        return value
    return moment.strftime("%x %X")


def max_name_length(records, minimum: int = 4) -> int:
    """
    Finds the length of the longest participant name.

    Args:
        records (Iterable[Participant]): Records to measure.
        minimum (int): Floor for the result, so empty tables keep a header width.

    Returns:
        int: Length of the longest name, or `minimum`.
    """
    max_length = minimum
    for r in records:
        max_length = len(r.name) if len(r.name) > max_length else max_length
    return max_length


def sort_key(value):
    """
    Coerces a display value into a sortable key.

    Booleans sort after text so ticked rows group together; None sorts as empty.
    """
    if isinstance(value, bool):
        return (1, str(int(value)))
    return (0, str(value or "").lower())


def sort_records(records, attribute: str, ascending: bool = True) -> list:
    """
    Sorts records by one attribute for display.

    Args:
        records (Iterable[Participant]): Records to sort.
        attribute (str): Participant attribute name.
        ascending (bool): Sort direction. True for ascending, False for descending.

    Returns:
        list: New list sorted by the attribute; ties keep collection order.
    """
    return sorted(
        records,
        key=lambda r: sort_key(getattr(r, attribute, None)),
        reverse=not ascending,
    )
