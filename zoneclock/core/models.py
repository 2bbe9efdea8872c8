"""
Models - Clock state, timezone entries, readings and sync outcomes
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ReadingSource(str, Enum):
    """Where a wall-clock reading came from."""
    AUTHORITATIVE = 'authoritative'
    ZONE_RULES = 'zone_rules'
    LOCAL_FALLBACK = 'local_fallback'


class DayPeriod(str, Enum):
    """Hour-of-day band used for theming."""
    SUNRISE = 'sunrise'
    DAY = 'day'
    SUNSET = 'sunset'
    NIGHT = 'night'


@dataclass(frozen=True)
class TimezoneEntry:
    """One selectable timezone as served by /api/timezones."""
    zone: str
    name: str = ''
    code: str = ''
    flag: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TimezoneEntry':
        """
        Build an entry from an API payload item.

        Args:
            data: Dictionary with 'zone' and optionally 'name', 'code', 'flag'

        Returns:
            TimezoneEntry

        Raises:
            ValueError: If the item has no usable zone identifier
        """
        if not isinstance(data, dict):
            raise ValueError(f"Timezone entry must be an object, got {type(data).__name__}")
        zone = data.get('zone')
        if not isinstance(zone, str) or not zone.strip():
            raise ValueError(f"Timezone entry has no zone: {data!r}")
        return cls(
            zone=zone.strip(),
            name=str(data.get('name') or ''),
            code=str(data.get('code') or ''),
            flag=str(data.get('flag') or ''),
        )

    def to_dict(self) -> Dict[str, str]:
        return {'zone': self.zone, 'name': self.name, 'code': self.code, 'flag': self.flag}

    @property
    def label(self) -> str:
        """Visible name, prefixed with the flag glyph when there is one"""
        text = self.name or self.zone
        return f"{self.flag} {text}" if self.flag else text


FALLBACK_TIMEZONES: List[TimezoneEntry] = [
    TimezoneEntry('Asia/Kolkata', 'India', 'IN', '🇮🇳'),
    TimezoneEntry('America/New_York', 'United States (NY)', 'US', '🇺🇸'),
    TimezoneEntry('Europe/London', 'United Kingdom', 'GB', '🇬🇧'),
    TimezoneEntry('Asia/Tokyo', 'Japan', 'JP', '🇯🇵'),
    TimezoneEntry('Australia/Sydney', 'Australia (Sydney)', 'AU', '🇦🇺'),
]


@dataclass(frozen=True)
class WallClockReading:
    """A civil time together with the source that produced it."""
    moment: datetime
    source: ReadingSource
    zone: Optional[str] = None

    @property
    def is_authoritative(self) -> bool:
        return self.source is ReadingSource.AUTHORITATIVE


@dataclass(frozen=True)
class SyncOutcome:
    """Result of one attempt to fetch the authoritative time for a zone."""
    zone: str
    timestamp: Optional[int] = None
    gmt_offset: Optional[int] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.timestamp is not None and self.error is None


@dataclass(frozen=True)
class ClockFrame:
    """Formatted fields for one rendered tick."""
    hours: str
    minutes: str
    seconds: str
    ampm: Optional[str]
    show_seconds: bool
    weekday: str
    day: str
    month: str
    year: str
    period: DayPeriod
    source: ReadingSource

    @property
    def time_text(self) -> str:
        text = f"{self.hours}:{self.minutes}"
        if self.show_seconds:
            text += f":{self.seconds}"
        return text

    @property
    def date_text(self) -> str:
        return f"{self.weekday}, {self.day} {self.month} {self.year}"


@dataclass
class ClockState:
    """
    Mutable state owned by the render loop.

    When authoritative_timestamp is set it is the ground truth for the next
    tick and is advanced by one second per tick until a resync replaces it.
    """
    selected_zone: Optional[str] = None
    selected_label: str = ''
    authoritative_timestamp: Optional[int] = None
    is_24_hour: bool = False
    show_seconds: bool = True
    sound_enabled: bool = False
    timezones: List[TimezoneEntry] = field(default_factory=list)

    @property
    def synced(self) -> bool:
        return self.authoritative_timestamp is not None

    def find_entry(self, zone: str) -> Optional[TimezoneEntry]:
        for entry in self.timezones:
            if entry.zone == zone:
                return entry
        return None
