from collections import namedtuple

from ..errors import ValidationError

# T = L/3, S = 2L + P/2 - T, C = L + P/2; S is taken from the rounded T
Credits = namedtuple("Credits", "tutorial self_study credits")


def _hours(value, field):
    message = f"{field} must be a non-negative integer"
    if isinstance(value, bool):
        raise ValidationError(message, field=field)
    try:
        hours = int(value)
    except (TypeError, ValueError):
        raise ValidationError(message, field=field)
    if hours != value and str(hours) != str(value).strip():
        raise ValidationError(message, field=field)
    if hours < 0:
        raise ValidationError(message, field=field)
    return hours


def calculate_credits(lecture_hours, practical_hours):
    L = _hours(lecture_hours, "L")
    P = _hours(practical_hours, "P")
    T = round(L / 3, 2)
    S = round(2 * L + P / 2 - T, 2)
    C = round(L + P / 2, 2)
    return Credits(T, S, C)
