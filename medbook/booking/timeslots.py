import re
from datetime import date, datetime

from medbook.booking.errors import ValidationError

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


def normalize_date(value) -> str:
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value or '').strip()
    if not DATE_PATTERN.match(text):
        raise ValidationError('Date must use the YYYY-MM-DD format.')
    try:
        date.fromisoformat(text)
    except ValueError as exc:
        raise ValidationError(f'{text} is not a valid calendar date.') from exc
    return text


def normalize_time(value, field: str = 'Time') -> str:
    text = str(value or '').strip()
    if not TIME_PATTERN.match(text):
        raise ValidationError(f'{field} must use the 24-hour HH:MM format.')
    return text


def to_minutes(value: str) -> int:
    hours, minutes = value.split(':')
    return int(hours) * 60 + int(minutes)


def windows_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    return to_minutes(start_a) < to_minutes(end_b) and to_minutes(start_b) < to_minutes(end_a)


def validate_slot_window(
    slot_date,
    start_time,
    end_time,
    duration,
    min_duration: int,
    max_duration: int,
) -> tuple[str, str, str, int]:
    """Normalize slot fields or raise ``ValidationError``.

    ``duration`` is advisory and is not compared with the time window.
    """
    normalized_date = normalize_date(slot_date)
    normalized_start = normalize_time(start_time, 'Start time')
    normalized_end = normalize_time(end_time, 'End time')

    if to_minutes(normalized_end) <= to_minutes(normalized_start):
        raise ValidationError('End time must be after start time.')

    if isinstance(duration, bool) or not isinstance(duration, int):
        raise ValidationError('Duration must be a whole number of minutes.')
    if duration < min_duration:
        raise ValidationError(f'Duration must be at least {min_duration} minutes.')
    if duration > max_duration:
        raise ValidationError(f'Duration must be at most {max_duration} minutes.')

    return normalized_date, normalized_start, normalized_end, duration
