"""
Slot labels and date keys.

Appointments are stored with a literal calendar day (``DD/MM/YYYY``) and a
half-hour slot label (``H:MM``, 24-hour, hour not zero-padded). Every
comparison between stored values and computed values goes through the
helpers in this module so both sides share one format.
"""

from datetime import date, datetime

SLOT_MINUTES = 30

# Opening hours per weekday: (first hour, closing hour). The closing hour is
# exclusive, so the last slot starts at closing_hour - 1 : 30.
WEEKDAY_HOURS = (9, 19)
SUNDAY_HOURS = (13, 19)

DATE_KEY_FORMAT = "%d/%m/%Y"


def opening_hours(day: date) -> tuple[int, int]:
    """Return the (first hour, closing hour) pair for a calendar day."""
    # date.weekday(): Monday == 0 ... Sunday == 6
    if day.weekday() == 6:
        return SUNDAY_HOURS
    return WEEKDAY_HOURS


def format_time_label(hour: int, minute: int) -> str:
    """Build the canonical slot label, e.g. ``9:00`` or ``13:30``."""
    return f"{hour}:{minute:02d}"


def generate_slots(day: date) -> list[str]:
    """
    Generate the ordered half-hour slot labels offered on a day.

    Sunday runs 13:00-18:30 (12 slots); Monday to Saturday run 9:00-18:30
    (20 slots).

    Args:
        day: Calendar day

    Returns:
        Slot labels in chronological order
    """
    first_hour, closing_hour = opening_hours(day)
    return [
        format_time_label(hour, minute)
        for hour in range(first_hour, closing_hour)
        for minute in range(0, 60, SLOT_MINUTES)
    ]


def parse_time_label(label: str) -> tuple[int, int]:
    """
    Parse an ``H:MM`` or ``HH:MM`` label into (hour, minute).

    Raises:
        ValueError: If the label is malformed or out of range
    """
    parts = label.strip().split(":")
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        raise ValueError(f"Invalid time label: {label!r}")

    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid time label: {label!r}")
    return hour, minute


def normalize_time_label(label: str) -> str:
    """Return the canonical form of a time label (``09:00`` -> ``9:00``)."""
    return format_time_label(*parse_time_label(label))


def time_to_minutes(label: str) -> int:
    """Minutes since midnight for a time label."""
    hour, minute = parse_time_label(label)
    return hour * 60 + minute


def format_date_key(day: date) -> str:
    """Format a calendar day as the stored ``DD/MM/YYYY`` key."""
    return day.strftime(DATE_KEY_FORMAT)


def parse_date_key(value: str) -> date | None:
    """
    Parse a stored date key back into a calendar day.

    ``DD/MM/YYYY`` is the stored form; ISO ``YYYY-MM-DD`` is accepted as a
    fallback. Returns ``None`` when neither matches.
    """
    if not value:
        return None

    text = value.strip()
    try:
        return datetime.strptime(text, DATE_KEY_FORMAT).date()
    except ValueError:
        pass

    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def normalize_date_key(value: str) -> str:
    """Canonical ``DD/MM/YYYY`` form of a stored date; unreadable text is kept as is."""
    parsed = parse_date_key(value)
    return format_date_key(parsed) if parsed is not None else value


def slot_datetime(day: date, label: str) -> datetime:
    """Naive local datetime at which a slot starts."""
    hour, minute = parse_time_label(label)
    return datetime(day.year, day.month, day.day, hour, minute)
