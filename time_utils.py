import calendar
import datetime
import logging
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytz

from motp_errors import InvalidTimeFormat, InvalidTimezoneFormat

logger = logging.getLogger(__name__)


# C/POSIX locale names, never taken from the host locale.
MONTH_NAMES: Tuple[Tuple[str, str], ...] = (
    ("Jan", "January"),
    ("Feb", "February"),
    ("Mar", "March"),
    ("Apr", "April"),
    ("May", "May"),
    ("Jun", "June"),
    ("Jul", "July"),
    ("Aug", "August"),
    ("Sep", "September"),
    ("Oct", "October"),
    ("Nov", "November"),
    ("Dec", "December"),
)

# Same order as datetime.weekday(): Monday == 0
WEEKDAY_NAMES: Tuple[Tuple[str, str], ...] = (
    ("Mon", "Monday"),
    ("Tue", "Tuesday"),
    ("Wed", "Wednesday"),
    ("Thu", "Thursday"),
    ("Fri", "Friday"),
    ("Sat", "Saturday"),
    ("Sun", "Sunday"),
)

# RFC 822 zone names, offsets in minutes east of UTC
ZONE_NAMES: Dict[str, int] = {
    "UT": 0,
    "UTC": 0,
    "GMT": 0,
    "Z": 0,
    "EST": -5 * 60,
    "EDT": -4 * 60,
    "CST": -6 * 60,
    "CDT": -5 * 60,
    "MST": -7 * 60,
    "MDT": -6 * 60,
    "PST": -8 * 60,
    "PDT": -7 * 60,
}

MAX_EAST_OFFSET_MINUTES = 14 * 60
MAX_WEST_OFFSET_MINUTES = 12 * 60

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=pytz.utc)

_HMS = r"(?P<hour>\d{1,2}):(?P<minute>\d{1,2}):(?P<second>\d{1,2})"
_FLAGS = re.ASCII | re.IGNORECASE

_RFC822_RE = re.compile(
    r"(?P<wday>[a-z]+),\s*(?P<day>\d{1,2})\s+(?P<mon>[a-z]+)\s+(?P<year>\d{4})\s+"
    + _HMS
    + r"\s+(?P<zone>\S+)",
    _FLAGS,
)
_RFC850_RE = re.compile(
    r"(?P<wday>[a-z]+),\s*(?P<day>\d{1,2})-(?P<mon>[a-z]+)-(?P<year>\d{2})\s+"
    + _HMS
    + r"\s+(?P<zone>\S+)",
    _FLAGS,
)
_ASCTIME_RE = re.compile(
    r"(?P<wday>[a-z]+)\s+(?P<mon>[a-z]+)\s+(?P<day>\d{1,2})\s+" + _HMS + r"\s+(?P<year>\d{4})",
    _FLAGS,
)
_PLAIN_RE = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})\s+" + _HMS,
    _FLAGS,
)
_EPOCH_RE = re.compile(r"@(?P<seconds>\d+)", re.ASCII)
_OFFSET_RE = re.compile(r"(?P<sign>[+-])(?P<hours>\d{2})(?P<minutes>\d{2})?", re.ASCII)

Names = Sequence[Tuple[str, str]]
TimeParser = Callable[[str, Names, Names], Optional[datetime.datetime]]


# ---------- Offsets ----------

def _offset_minutes(text: str) -> Optional[int]:
    """Signed minutes for '+HH' / '+HHMM' style offsets, None when invalid."""
    match = _OFFSET_RE.fullmatch(text)
    if not match:
        return None

    hours = int(match.group("hours"))
    minutes = int(match.group("minutes") or 0)
    if minutes >= 60:
        return None

    total = hours * 60 + minutes
    if match.group("sign") == "-":
        if total > MAX_WEST_OFFSET_MINUTES:
            return None
        return -total

    if total > MAX_EAST_OFFSET_MINUTES:
        return None
    return total


def parse_tz_offset(tz: str) -> int:
    """
    Parse an explicit UTC offset.

    Args:
        tz: '+HH', '-HH', '+HHMM' or '-HHMM', between -1200 and +1400

    Returns:
        Offset in minutes east of UTC
    """
    offset = _offset_minutes(tz) if isinstance(tz, str) else None
    if offset is None:
        raise InvalidTimezoneFormat(
            f"Invalid time zone offset {tz!r}: expected +HH, -HH, +HHMM or -HHMM "
            f"between -1200 and +1400 with minutes below 60"
        )
    return offset


# ---------- Time string parsers ----------

def _lookup_name(token: str, names: Names) -> Optional[int]:
    token = token.lower()
    for index, (abbr, full) in enumerate(names):
        if token == abbr.lower() or token == full.lower():
            return index
    return None


def _civil(year, month, day, hour, minute, second, tzinfo=None) -> Optional[datetime.datetime]:
    try:
        civil = datetime.datetime(year, month, day, hour, minute, second, tzinfo=tzinfo)
        if tzinfo is not None:
            # UTC form must stay within years 1..9999 as well
            civil.astimezone(pytz.utc)
    except (ValueError, OverflowError):
        return None
    return civil


def _from_named_match(match, year: int, months: Names, weekdays: Names,
                      offset: Optional[int]) -> Optional[datetime.datetime]:
    if _lookup_name(match.group("wday"), weekdays) is None:
        return None
    month = _lookup_name(match.group("mon"), months)
    if month is None:
        return None

    tzinfo = None if offset is None else pytz.FixedOffset(offset)
    return _civil(
        year,
        month + 1,
        int(match.group("day")),
        int(match.group("hour")),
        int(match.group("minute")),
        int(match.group("second")),
        tzinfo,
    )


def _two_digit_year(value: str) -> int:
    # POSIX %y: 69-99 -> 1969-1999, 00-68 -> 2000-2068
    year = int(value)
    return year + 1900 if year >= 69 else year + 2000


def parse_rfc822_named(text: str, months: Names, weekdays: Names) -> Optional[datetime.datetime]:
    match = _RFC822_RE.fullmatch(text)
    if not match:
        return None
    offset = ZONE_NAMES.get(match.group("zone").upper())
    if offset is None:
        return None
    return _from_named_match(match, int(match.group("year")), months, weekdays, offset)


def parse_rfc822_numeric(text: str, months: Names, weekdays: Names) -> Optional[datetime.datetime]:
    match = _RFC822_RE.fullmatch(text)
    if not match:
        return None
    offset = _offset_minutes(match.group("zone"))
    if offset is None:
        return None
    return _from_named_match(match, int(match.group("year")), months, weekdays, offset)


def parse_rfc850_named(text: str, months: Names, weekdays: Names) -> Optional[datetime.datetime]:
    match = _RFC850_RE.fullmatch(text)
    if not match:
        return None
    offset = ZONE_NAMES.get(match.group("zone").upper())
    if offset is None:
        return None
    return _from_named_match(match, _two_digit_year(match.group("year")), months, weekdays, offset)


def parse_rfc850_numeric(text: str, months: Names, weekdays: Names) -> Optional[datetime.datetime]:
    match = _RFC850_RE.fullmatch(text)
    if not match:
        return None
    offset = _offset_minutes(match.group("zone"))
    if offset is None:
        return None
    return _from_named_match(match, _two_digit_year(match.group("year")), months, weekdays, offset)


def parse_asctime(text: str, months: Names, weekdays: Names) -> Optional[datetime.datetime]:
    """ANSI C asctime(); no zone, so the result is naive (local time)."""
    match = _ASCTIME_RE.fullmatch(text)
    if not match:
        return None
    return _from_named_match(match, int(match.group("year")), months, weekdays, None)


def parse_plain(text: str, months: Names, weekdays: Names) -> Optional[datetime.datetime]:
    """YYYY-MM-DD HH:MM:SS, naive (local time)."""
    match = _PLAIN_RE.fullmatch(text)
    if not match:
        return None
    return _civil(*(int(match.group(name)) for name in ("year", "month", "day", "hour", "minute", "second")))


def parse_epoch(text: str, months: Names, weekdays: Names) -> Optional[datetime.datetime]:
    """'@<seconds>' since the Unix epoch, UTC."""
    match = _EPOCH_RE.fullmatch(text)
    if not match:
        return None
    try:
        return _EPOCH + datetime.timedelta(seconds=int(match.group("seconds")))
    except OverflowError:
        return None


# Tried in order, first match wins.
TIME_PARSERS: List[Tuple[str, TimeParser]] = [
    ("HTTP date / RFC 822, zone name", parse_rfc822_named),
    ("HTTP date / RFC 822, numeric zone", parse_rfc822_numeric),
    ("RFC 850, zone name", parse_rfc850_named),
    ("RFC 850, numeric zone", parse_rfc850_numeric),
    ("ANSI C asctime", parse_asctime),
    ("YYYY-MM-DD HH:MM:SS", parse_plain),
    ("@<seconds since the Epoch>", parse_epoch),
]


def resolve_time(time_str: Optional[str] = None,
                 now: Optional[datetime.datetime] = None,
                 months: Names = MONTH_NAMES,
                 weekdays: Names = WEEKDAY_NAMES) -> datetime.datetime:
    """
    Resolve the civil time to use for code generation.

    Without a time string this is `now` (or the current local time, sampled
    once). Naive results mean "local zone implied".
    """
    if time_str is None:
        if now is not None:
            return now
        return datetime.datetime.now().astimezone()

    text = time_str.strip()
    for label, parser in TIME_PARSERS:
        parsed = parser(text, months, weekdays)
        if parsed is not None:
            logger.debug("Time string matched format: %s", label)
            return parsed

    expected = "; ".join(label for label, _ in TIME_PARSERS)
    raise InvalidTimeFormat(f"Unknown time format {time_str!r}, expected one of: {expected}")


# ---------- Zone adjustment and epoch conversion ----------

def to_epoch_seconds(civil: datetime.datetime) -> int:
    try:
        if civil.tzinfo is None:
            civil = civil.astimezone()
        return calendar.timegm(civil.utctimetuple())
    except (OverflowError, OSError):
        raise InvalidTimeFormat(f"Time {civil.isoformat()} is outside the supported range")


def apply_tz_offset(civil: datetime.datetime, tz: Optional[str]) -> datetime.datetime:
    """
    Re-anchor `civil` to an explicit UTC offset.

    The offset replaces whatever zone the time carried: the absolute instant
    is shifted by the offset and expressed as a UTC wall clock.
    """
    if tz is None:
        return civil

    offset = parse_tz_offset(tz)
    shifted = to_epoch_seconds(civil) + offset * 60
    try:
        return _EPOCH + datetime.timedelta(seconds=shifted)
    except OverflowError:
        raise InvalidTimezoneFormat(
            f"Time zone offset {tz!r} moves {civil.isoformat()} outside the supported range"
        )


def format_asctime(civil: datetime.datetime,
                   months: Names = MONTH_NAMES,
                   weekdays: Names = WEEKDAY_NAMES) -> str:
    """Locale independent asctime(), e.g. 'Sun Nov  6 08:49:37 1994'."""
    return "%s %s%3d %02d:%02d:%02d %d" % (
        weekdays[civil.weekday()][0],
        months[civil.month - 1][0],
        civil.day,
        civil.hour,
        civil.minute,
        civil.second,
        civil.year,
    )
