"""
Clock Service - Time source resolution and formatting
Turns a timezone plus an optional authoritative timestamp into a wall-clock
reading, and a reading into display fields
"""
import logging
import os
from datetime import datetime, timezone as dt_timezone
from pathlib import Path
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .models import ClockFrame, DayPeriod, ReadingSource, WallClockReading

logger = logging.getLogger(__name__)

WEEKDAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']
MONTHS = ['January', 'February', 'March', 'April', 'May', 'June', 'July',
          'August', 'September', 'October', 'November', 'December']


def load_zone(zone: Optional[str]) -> Optional[ZoneInfo]:
    """
    Look up a timezone in the system database.

    Args:
        zone: IANA timezone string (e.g., 'Europe/London')

    Returns:
        ZoneInfo, or None if the identifier is empty or unknown
    """
    if not zone:
        return None
    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError, TypeError, OSError) as e:
        logger.debug(f"Unknown timezone '{zone}': {e}")
        return None


def machine_timezone() -> Optional[str]:
    """
    Best-effort IANA name of the machine's own timezone.

    Checks $TZ, then /etc/timezone, then where /etc/localtime points.

    Returns:
        Zone identifier, or None if it cannot be determined
    """
    env_tz = os.environ.get('TZ', '').lstrip(':')
    if env_tz and load_zone(env_tz) is not None:
        return env_tz

    try:
        name = Path('/etc/timezone').read_text().strip()
        if name and load_zone(name) is not None:
            return name
    except OSError:
        pass

    try:
        target = str(Path('/etc/localtime').resolve())
    except OSError:
        return None
    if 'zoneinfo/' in target:
        name = target.split('zoneinfo/', 1)[1]
        if load_zone(name) is not None:
            return name
    return None


def _utc_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(dt_timezone.utc)
    if now.tzinfo is None:
        return now.astimezone()
    return now


def local_reading(now: Optional[datetime] = None, zone: Optional[str] = None) -> WallClockReading:
    """Machine's own current time, unmodified"""
    return WallClockReading(_utc_now(now).astimezone(), ReadingSource.LOCAL_FALLBACK, zone)


def resolve_time(zone: Optional[str], cached_timestamp: Optional[int] = None,
                 now: Optional[datetime] = None) -> WallClockReading:
    """
    Produce the current wall-clock reading for a zone.

    A cached authoritative timestamp always wins and is rendered as-is; the
    caller advances it between calls. Without one the zone's time of day is
    taken from the timezone database and paired with the local machine's
    calendar date. Any failure yields the local machine's time.

    Args:
        zone: IANA timezone string, or None
        cached_timestamp: Authoritative unix seconds, if known
        now: Override for the ambient clock (aware or naive local datetime)

    Returns:
        WallClockReading tagged with the source that produced it
    """
    tz = load_zone(zone)

    if cached_timestamp is not None:
        try:
            if tz is not None:
                moment = datetime.fromtimestamp(int(cached_timestamp), tz)
            else:
                moment = datetime.fromtimestamp(int(cached_timestamp), dt_timezone.utc).astimezone()
            return WallClockReading(moment, ReadingSource.AUTHORITATIVE, zone)
        except (OverflowError, OSError, ValueError, TypeError) as e:
            logger.debug(f"Cannot render timestamp {cached_timestamp!r}: {e}")
            return local_reading(now, zone)

    if tz is None:
        return local_reading(now, zone)

    current = _utc_now(now)
    zone_now = current.astimezone(tz)
    local_now = current.astimezone()
    # Local calendar date with the zone's time of day; wrong across the date line.
    moment = datetime(local_now.year, local_now.month, local_now.day,
                      zone_now.hour, zone_now.minute, zone_now.second, tzinfo=tz)
    return WallClockReading(moment, ReadingSource.ZONE_RULES, zone)


def hour_in_zone(zone: Optional[str], now: Optional[datetime] = None) -> int:
    """
    Current hour (0-23) in a zone, or the local hour if the zone is unusable.
    """
    tz = load_zone(zone)
    current = _utc_now(now)
    if tz is None:
        return current.astimezone().hour
    return current.astimezone(tz).hour


def to_12_hour(hour: int) -> Tuple[int, str]:
    """
    Convert a 24-hour clock hour to 12-hour form.

    Args:
        hour: Hour 0-23

    Returns:
        Tuple of (hour 1-12, 'AM' or 'PM')
    """
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be between 0 and 23, got {hour}")
    return (hour % 12 or 12, 'PM' if hour >= 12 else 'AM')


def to_24_hour(hour: int, ampm: str) -> int:
    """
    Convert a 12-hour clock hour and day half back to 0-23.

    Args:
        hour: Hour 1-12
        ampm: 'AM' or 'PM' (case-insensitive)

    Returns:
        Hour 0-23
    """
    if not 1 <= hour <= 12:
        raise ValueError(f"12-hour clock hour must be between 1 and 12, got {hour}")
    half = ampm.strip().upper()
    if half == 'AM':
        return 0 if hour == 12 else hour
    if half == 'PM':
        return hour if hour == 12 else hour + 12
    raise ValueError(f"Expected AM or PM, got {ampm!r}")


def hour_to_period(hour: int) -> DayPeriod:
    """
    Map hour of day to its theme band.

    05-07 sunrise, 08-17 day, 18-19 sunset, everything else night.
    """
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be between 0 and 23, got {hour}")
    if 5 <= hour <= 7:
        return DayPeriod.SUNRISE
    if 8 <= hour <= 17:
        return DayPeriod.DAY
    if 18 <= hour <= 19:
        return DayPeriod.SUNSET
    return DayPeriod.NIGHT


def format_frame(reading: WallClockReading, is_24_hour: bool = False,
                 show_seconds: bool = True) -> ClockFrame:
    """
    Format a reading into the fields the display writes.

    Args:
        reading: Reading to format
        is_24_hour: 24-hour clock instead of 12-hour with AM/PM
        show_seconds: Whether seconds are visible

    Returns:
        ClockFrame
    """
    moment = reading.moment
    if is_24_hour:
        hours = f"{moment.hour:02d}"
        ampm = None
    else:
        hour_12, ampm = to_12_hour(moment.hour)
        hours = f"{hour_12:02d}"

    return ClockFrame(
        hours=hours,
        minutes=f"{moment.minute:02d}",
        seconds=f"{moment.second:02d}",
        ampm=ampm,
        show_seconds=show_seconds,
        weekday=WEEKDAYS[moment.weekday()],
        day=f"{moment.day:02d}",
        month=MONTHS[moment.month - 1],
        year=str(moment.year),
        period=hour_to_period(moment.hour),
        source=reading.source,
    )


class ClockService:
    """
    Resolver bound to the currently selected timezone.
    """

    def __init__(self, timezone: Optional[str] = None):
        """
        Initialize clock service with timezone.

        Args:
            timezone: IANA timezone string, or None for the machine's zone
        """
        self._timezone: Optional[str] = None
        self.set_timezone(timezone)

    def set_timezone(self, timezone: Optional[str]) -> bool:
        """
        Change timezone.

        An unknown identifier is still stored; readings for it fall back to
        the machine's local time.

        Args:
            timezone: IANA timezone string

        Returns:
            True if the zone exists in the timezone database
        """
        self._timezone = timezone or None
        if self._timezone is None:
            return False
        if load_zone(self._timezone) is None:
            logger.warning(f"Timezone '{self._timezone}' not found, readings will use local time")
            return False
        return True

    def resolve(self, cached_timestamp: Optional[int] = None,
                now: Optional[datetime] = None) -> WallClockReading:
        """Reading for the configured zone, see resolve_time()"""
        return resolve_time(self._timezone, cached_timestamp, now)

    def current_period(self, now: Optional[datetime] = None) -> DayPeriod:
        return hour_to_period(hour_in_zone(self._timezone, now))

    @property
    def timezone(self) -> Optional[str]:
        """Get current timezone string"""
        return self._timezone
