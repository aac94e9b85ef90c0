"""Timezone normalization — canonical IANA names, legacy aliases, wall-clock → UTC.

The registry is built explicitly (once per application, see ``main.py``) and
handed to the services; nothing here is cached at module level. Call
``refresh()`` after upgrading pytz or changing the alias settings.

DST handling in ``local_to_utc``:
- a wall-clock time inside a spring-forward gap does not exist; it is shifted
  forward by the size of the gap (02:30 on a 02:00→03:00 night becomes 03:30).
- a wall-clock time inside a fall-back overlap occurs twice; the first
  occurrence (the daylight-saving offset, i.e. the earlier instant) wins.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Mapping, Optional, Union

import pytz

logger = logging.getLogger(__name__)

# Legacy name -> canonical IANA name
LEGACY_ALIASES: dict[str, str] = {
    "Asia/Calcutta": "Asia/Kolkata",
    "Calcutta": "Asia/Kolkata",
    "Asia/Saigon": "Asia/Ho_Chi_Minh",
    "Asia/Katmandu": "Asia/Kathmandu",
    "Asia/Rangoon": "Asia/Yangon",
    "Asia/Dacca": "Asia/Dhaka",
    "Europe/Kiev": "Europe/Kyiv",
    "America/Buenos_Aires": "America/Argentina/Buenos_Aires",
    "America/Indianapolis": "America/Indiana/Indianapolis",
}

_WHITESPACE = re.compile(r"\s+")


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are read as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_wall_clock(value: Union[str, datetime]) -> datetime:
    """Parse ISO-8601 date-time text such as ``2025-11-10T14:30``.

    Raises ``ValueError`` for anything that is not a date-time.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not a date-time string: {value!r}")
    return datetime.fromisoformat(value.strip())


class TimezoneRegistry:
    """Lookup service for canonical zone names and their legacy aliases."""

    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        self._extra_aliases = dict(aliases or {})
        self._names: frozenset[str] = frozenset()
        self._aliases: dict[str, str] = {}
        self.refresh()

    @classmethod
    def from_settings(cls, settings) -> "TimezoneRegistry":
        return cls(aliases=settings.TIMEZONE_ALIASES)

    def refresh(self) -> None:
        """Reload canonical names from pytz and rebuild the alias table."""
        names = frozenset(pytz.common_timezones)
        aliases: dict[str, str] = {}
        for legacy, canonical in {**LEGACY_ALIASES, **self._extra_aliases}.items():
            if canonical not in names:
                logger.warning("Ignoring timezone alias %s -> %s: target is not a known zone", legacy, canonical)
                continue
            aliases[legacy] = canonical
        self._names = names
        self._aliases = aliases
        logger.info("Timezone registry loaded %d zones and %d aliases", len(names), len(aliases))

    @property
    def names(self) -> frozenset[str]:
        return self._names

    def is_valid(self, tz: Optional[str]) -> bool:
        """True for a canonical name, a known alias or a name with spaces for
        underscores. Surrounding whitespace is ignored, matching ``normalize``.
        """
        if not tz or not isinstance(tz, str):
            return False
        candidate = tz.strip()
        if candidate in self._names or candidate in self._aliases:
            return True
        return _WHITESPACE.sub("_", candidate) in self._names

    def normalize(self, tz: Optional[str]) -> Optional[str]:
        """Map ``tz`` to its canonical name.

        Falls back to the trimmed input when nothing matches, so callers must
        check ``is_valid`` first.
        """
        if not tz:
            return tz
        trimmed = tz.strip()
        if trimmed in self._names:
            return trimmed
        if trimmed in self._aliases:
            return self._aliases[trimmed]
        underscored = _WHITESPACE.sub("_", trimmed)
        if underscored in self._names:
            return underscored
        return trimmed

    def zone(self, tz: Optional[str]):
        """Return the pytz zone for ``tz`` or None when it does not resolve."""
        name = self.normalize(tz)
        if name not in self._names:
            return None
        return pytz.timezone(name)

    def local_to_utc(self, local: Union[str, datetime], tz: str) -> datetime:
        """Interpret ``local`` as wall-clock time in ``tz`` and return the UTC instant.

        Values carrying their own UTC offset are already absolute and are only
        converted to UTC. An unknown zone is logged and the parsed value is
        returned unconverted.
        """
        wall = parse_wall_clock(local)
        if wall.tzinfo is not None:
            return wall.astimezone(timezone.utc)

        zone = self.zone(tz)
        if zone is None:
            logger.warning("Cannot convert %s: unknown timezone %r", wall.isoformat(), tz)
            return wall

        try:
            aware = zone.localize(wall, is_dst=None)
        except pytz.exceptions.AmbiguousTimeError:
            aware = zone.localize(wall, is_dst=True)
        except pytz.exceptions.NonExistentTimeError:
            aware = zone.normalize(zone.localize(wall, is_dst=False))
        return aware.astimezone(timezone.utc)

    def utc_to_local(self, instant: datetime, tz: str) -> datetime:
        """Render a UTC instant as wall-clock time in ``tz``."""
        zone = self.zone(tz)
        if zone is None:
            return as_utc(instant)
        return as_utc(instant).astimezone(zone)
