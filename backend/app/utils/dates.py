"""Parsing of ``YYYY-MM-DD`` query parameters."""
import re
from datetime import date

from app.core.errors import BadRequestError

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(value: str | None, message: str = "Dates must be in YYYY-MM-DD format") -> date | None:
    if value is None or value == "":
        return None
    if not DATE_PATTERN.match(value):
        raise BadRequestError(message)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise BadRequestError(message, details=f"{value} is not a calendar date")


def parse_date_range(
    start: str | None,
    end: str | None,
    required: bool = False,
) -> tuple[date | None, date | None]:
    """Both bounds or neither; ``required`` makes neither an error too."""
    if not start or not end:
        if required or start or end:
            raise BadRequestError("Start date and end date are required")
        return None, None
    start_date, end_date = parse_date(start), parse_date(end)
    if start_date > end_date:
        raise BadRequestError("Start date must be on or before end date")
    return start_date, end_date
