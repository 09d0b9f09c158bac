from __future__ import annotations

import logging
import re
from datetime import date, datetime, timezone
from typing import Any

from reviewdesk.services.fields import to_number

logger = logging.getLogger(__name__)

NO_DATE = "Нет даты"

# Anything above this is a millisecond timestamp, below it seconds
MS_EPOCH_THRESHOLD = 1_000_000_000_000

_ISO_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DOTTED_DATE_RE = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})$")


def _epoch_number(raw: Any) -> float | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        return None
    return to_number(raw)


def _from_epoch(value: float) -> datetime:
    seconds = value / 1000 if value > MS_EPOCH_THRESHOLD else value
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _parse_iso(raw: str) -> datetime:
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        # fractional seconds longer than fromisoformat accepts
        return datetime.strptime(text[:16], "%Y-%m-%dT%H:%M")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _dmy(value: date) -> str:
    return f"{value.day:02d}.{value.month:02d}.{value.year:04d}"


def _format(raw: Any) -> str:
    if isinstance(raw, datetime):
        return _dmy(_as_utc(raw))
    if isinstance(raw, date):
        return _dmy(raw)

    if isinstance(raw, str) and _ISO_DATETIME_RE.match(raw):
        return _dmy(_as_utc(_parse_iso(raw)))

    number = _epoch_number(raw)
    if number:
        return _dmy(_from_epoch(number))

    if isinstance(raw, str):
        match = _ISO_DATE_RE.match(raw)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return _dmy(date(year, month, day))
        if _DOTTED_DATE_RE.match(raw):
            return raw

    if raw:
        return str(raw)
    return NO_DATE


def format_date(raw: Any) -> str:
    """Render a review date as ``DD.MM.YYYY``.

    Accepts ISO date-times, millisecond and second epochs (numbers or numeric
    strings), ``YYYY-MM-DD`` and ``DD.MM.YYYY``. Other truthy values are
    passed through as strings; empty values and parse failures yield
    ``NO_DATE``.

    Instants are shown as their UTC calendar date, the same value
    ``parse_date`` sorts by. Naive date-times are taken as UTC.
    """
    try:
        return _format(raw)
    except Exception as e:
        logger.debug("Unparseable date %r: %s", raw, e)
        return NO_DATE


def _parse(raw: Any) -> datetime | None:
    if isinstance(raw, datetime):
        return _as_utc(raw)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day, tzinfo=timezone.utc)

    number = _epoch_number(raw)
    if number:
        return _from_epoch(number)

    if not isinstance(raw, str) or not raw.strip():
        return None

    match = _DOTTED_DATE_RE.match(raw.strip())
    if match:
        day, month, year = (int(part) for part in match.groups())
        return datetime(year, month, day, tzinfo=timezone.utc)

    return _as_utc(_parse_iso(raw))


def parse_date(raw: Any) -> datetime | None:
    """Same classification as ``format_date`` but returns an aware UTC datetime."""
    try:
        return _parse(raw)
    except Exception:
        return None
