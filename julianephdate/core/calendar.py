# julianephdate/core/calendar.py
# -----------------------------------------------------------------------------
# Civil calendar math (proleptic Gregorian, UTC-referenced)
#
# Public API:
#   CivilTimestamp                     frozen, ordered civil instant (ns resolution)
#   civil_to_jd(t)          -> float   JD(UTC) via the classical Julian Day formula
#   jd_to_civil(jd_utc)     -> CivilTimestamp   inverse Julian Day algorithm
#
# Guarantees:
#   • Classical formulas valid for JD ≥ 2299160.5 (1582-10-15). Earlier values
#     produce undefined fields, never an exception.
#   • jd_to_civil rounds once, at the nanosecond stage; each hour/minute/second
#     stage keeps its floor and carries the exact remainder forward.
#   • A rounded-up nanosecond carries through second → … → year.
#   • Second 60 is not representable; no leap-second labels in civil fields.
# -----------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Tuple
import math

from julianephdate.core.constants import NANOS_PER_DAY, NANOS_PER_SECOND

__all__ = [
    "CivilTimestamp",
    "civil_to_jd",
    "jd_to_civil",
    "is_leap_year",
    "days_in_month",
]

_MONTH_DAYS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    if month == 2 and is_leap_year(year):
        return 29
    return _MONTH_DAYS[month - 1]


# ───────────────────────────── Day-number helpers ─────────────────────────────
# Days since 1970-01-01 for any signed proleptic Gregorian year (400-year eras).

def _days_from_civil(year: int, month: int, day: int) -> int:
    y = year - (1 if month <= 2 else 0)
    era = y // 400
    yoe = y - era * 400
    mp = month - 3 if month > 2 else month + 9
    doy = (153 * mp + 2) // 5 + day - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * 146097 + doe - 719468


def _civil_from_days(days: int) -> Tuple[int, int, int]:
    z = days + 719468
    era = z // 146097
    doe = z - era * 146097
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp = (5 * doy + 2) // 153
    day = doy - (153 * mp + 2) // 5 + 1
    month = mp + 3 if mp < 10 else mp - 9
    year = yoe + era * 400 + (1 if month <= 2 else 0)
    return year, month, day


# ───────────────────────────── Value type ─────────────────────────────

@dataclass(frozen=True, order=True)
class CivilTimestamp:
    """
    A civil UTC instant with nanosecond resolution.

    Field order doubles as chronological order, so instances compare and sort
    directly (the leap-second table bisects on them).
    """
    year: int
    month: int = 1
    day: int = 1
    hour: int = 0
    minute: int = 0
    second: int = 0
    nanosecond: int = 0

    def __post_init__(self) -> None:
        for name in ("year", "month", "day", "hour", "minute", "second", "nanosecond"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise TypeError(f"{name} must be an int, got {type(v).__name__}")
        if not 1 <= self.month <= 12:
            raise ValueError(f"month out of range: {self.month}")
        dim = days_in_month(self.year, self.month)
        if not 1 <= self.day <= dim:
            raise ValueError(f"day out of range for {self.year:04d}-{self.month:02d}: {self.day}")
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour out of range: {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute out of range: {self.minute}")
        if not 0 <= self.second <= 59:
            raise ValueError(f"second out of range (no leap-second labels): {self.second}")
        if not 0 <= self.nanosecond < NANOS_PER_SECOND:
            raise ValueError(f"nanosecond out of range: {self.nanosecond}")

    # ---- alternate constructors ----

    @classmethod
    def normalized(
        cls,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        nanosecond: int = 0,
    ) -> "CivilTimestamp":
        """Build from possibly out-of-range fields, carrying overflow (and underflow)."""
        year, month0 = divmod(year * 12 + (month - 1), 12)
        days = _days_from_civil(year, month0 + 1, 1) + (day - 1)
        ns = ((hour * 60 + minute) * 60 + second) * NANOS_PER_SECOND + nanosecond
        extra_days, ns = divmod(ns, NANOS_PER_DAY)
        return cls.from_epoch_nanos((days + extra_days) * NANOS_PER_DAY + ns)

    @classmethod
    def from_epoch_nanos(cls, nanos: int) -> "CivilTimestamp":
        """Inverse of :meth:`epoch_nanos` (uniform 86400 s days, no leap seconds)."""
        days, ns = divmod(int(nanos), NANOS_PER_DAY)
        year, month, day = _civil_from_days(days)
        secs, nano = divmod(ns, NANOS_PER_SECOND)
        hour, rem = divmod(secs, 3600)
        minute, second = divmod(rem, 60)
        return cls(year, month, day, hour, minute, second, nano)

    @classmethod
    def from_datetime(cls, dt: datetime) -> "CivilTimestamp":
        """
        Naive datetimes are taken as UTC; aware ones are normalized with
        astimezone(UTC). No zone names are interpreted here.
        """
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc)
        return cls(dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second, dt.microsecond * 1000)

    # ---- views ----

    def epoch_nanos(self) -> int:
        """Nanoseconds since 1970-01-01T00:00:00, counting every day as 86400 s."""
        days = _days_from_civil(self.year, self.month, self.day)
        secs = (self.hour * 60 + self.minute) * 60 + self.second
        return days * NANOS_PER_DAY + secs * NANOS_PER_SECOND + self.nanosecond

    @property
    def day_fraction(self) -> float:
        return (
            float(self.hour)
            + float(self.minute) / 60.0
            + (float(self.second) + float(self.nanosecond) / 1e9) / 3600.0
        ) / 24.0

    def to_datetime(self) -> datetime:
        """UTC-aware datetime; sub-microsecond digits are truncated."""
        return datetime(
            self.year, self.month, self.day,
            self.hour, self.minute, self.second,
            self.nanosecond // 1000,
            tzinfo=timezone.utc,
        )

    def isoformat(self) -> str:
        sign = "-" if self.year < 0 else ""
        return (
            f"{sign}{abs(self.year):04d}-{self.month:02d}-{self.day:02d}"
            f"T{self.hour:02d}:{self.minute:02d}:{self.second:02d}.{self.nanosecond:09d}Z"
        )

    def __str__(self) -> str:
        return self.isoformat()


# ───────────────────────────── Julian Day ─────────────────────────────

def civil_to_jd(t: CivilTimestamp) -> float:
    """JD(UTC) for a civil instant (Meeus, Gregorian correction term B)."""
    y = t.year
    m = t.month
    # January/February count as months 13/14 of the previous year
    if m <= 2:
        y -= 1
        m += 12

    a = math.floor(y / 100.0)
    b = 2.0 - a + math.floor(a / 4.0)

    # JD at 0h UT
    jd0 = (
        math.floor(365.25 * (y + 4716))
        + math.floor(30.6001 * (m + 1))
        + t.day + b - 1524.5
    )
    return jd0 + t.day_fraction


def jd_to_civil(jd_utc: float) -> CivilTimestamp:
    """Civil UTC fields for a JD(UTC). Valid for jd_utc ≥ 2299160.5."""
    # Day boundaries at midnight
    z = math.floor(jd_utc + 0.5)
    f = (jd_utc + 0.5) - z

    alpha = math.floor((z - 1867216.25) / 36524.25)
    a = z + 1 + alpha - math.floor(alpha / 4)
    b = a + 1524
    c = math.floor((b - 122.1) / 365.25)
    d = math.floor(365.25 * c)
    e = math.floor((b - d) / 30.6001)

    # b − d − floor(30.6001·e) is integral; f is the fractional day
    day = int(b - d - math.floor(30.6001 * e))
    month = int(e - 1) if e < 14 else int(e - 13)
    year = int(c - 4716) if month > 2 else int(c - 4715)

    hours = f * 24.0
    hour = math.floor(hours)
    minutes = (hours - hour) * 60.0
    minute = math.floor(minutes)
    seconds = (minutes - minute) * 60.0
    second = math.floor(seconds)
    nano = round((seconds - second) * 1e9)

    return CivilTimestamp.normalized(year, month, day, int(hour), int(minute), int(second), int(nano))
