# julianephdate/core/leapseconds.py
from __future__ import annotations

"""
leapseconds.py — immutable TAI−UTC step table.

- Entries are (effective UTC midnight, cumulative TAI−UTC whole seconds).
- Lookup is a binary search; instants before the first entry give 0
  (pre-1972 UTC drift is not modeled).
- Tables are read-only tuples: share them freely between threads. New leap
  seconds are added by building a new table (``extended``) or by editing the
  data file the deployment loads.

Sources:
  BUILTIN_TABLE            static data through 2017-01-01 (ΔAT = 37 s)
  LeapSecondTable.load()   JSON / YAML file: [{"date": "2017-01-01", "tai_minus_utc": 37}, ...]
  LeapSecondTable.from_erfa()  integer steps of pyERFA's bundled table
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Sequence, Tuple, Union
import json
import logging
import os
import re

import erfa  # PyERFA: bundled IERS leap-second table
import yaml

from julianephdate.core.calendar import CivilTimestamp
from julianephdate.core.constants import LEAP_ANNOUNCEMENT_WINDOW_DAYS, NANOS_PER_DAY

log = logging.getLogger(__name__)

__all__ = [
    "LeapSecondEntry",
    "LeapSecondTable",
    "LeapSecondTableError",
    "BUILTIN_TABLE",
]


class LeapSecondTableError(ValueError):
    """Malformed or out-of-order leap-second data."""


@dataclass(frozen=True)
class LeapSecondEntry:
    effective: CivilTimestamp   # UTC midnight the new value takes effect
    tai_minus_utc: int          # cumulative TAI−UTC [s]

    def to_row(self) -> Dict[str, Any]:
        e = self.effective
        return {"date": f"{e.year:04d}-{e.month:02d}-{e.day:02d}", "tai_minus_utc": self.tai_minus_utc}


_DATE_RE = re.compile(r"^\s*(-?\d{4,})-(\d{2})-(\d{2})\s*$")

RowLike = Union[Sequence[int], Mapping[str, Any]]


def _entry_from_row(row: RowLike) -> LeapSecondEntry:
    """Accept (year, month, day, offset) or {"date": "YYYY-MM-DD", "tai_minus_utc": n}."""
    try:
        if isinstance(row, Mapping):
            m = _DATE_RE.match(str(row["date"]))
            if not m:
                raise LeapSecondTableError(f"invalid date {row['date']!r}: expected YYYY-MM-DD")
            year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
            raw = row["tai_minus_utc"]
        else:
            year, month, day, raw = row
        offset = float(raw)
        if offset != int(offset):
            raise LeapSecondTableError(f"tai_minus_utc must be whole seconds, got {raw!r}")
        return LeapSecondEntry(CivilTimestamp(int(year), int(month), int(day)), int(offset))
    except LeapSecondTableError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise LeapSecondTableError(f"bad leap-second row {row!r}: {e}") from e


class LeapSecondTable:
    """Ordered, append-only TAI−UTC table with O(log n) lookup."""

    __slots__ = ("_entries", "_keys", "source")

    def __init__(self, entries: Iterable[LeapSecondEntry], *, source: str = "custom"):
        items: Tuple[LeapSecondEntry, ...] = tuple(entries)
        if not items:
            raise LeapSecondTableError("leap-second table must have at least one entry")
        for prev, cur in zip(items, items[1:]):
            if not prev.effective < cur.effective:
                raise LeapSecondTableError(
                    f"entries must ascend strictly: {cur.effective} follows {prev.effective}"
                )
            if cur.tai_minus_utc < prev.tai_minus_utc:
                raise LeapSecondTableError(
                    f"TAI−UTC decreases at {cur.effective} ({prev.tai_minus_utc} → {cur.tai_minus_utc})"
                )
        self._entries = items
        self._keys = tuple(e.effective for e in items)
        self.source = source
        log.debug("leap-second table '%s': %d entries, latest %s", source, len(items), items[-1].effective)

    # ---- constructors ----

    @classmethod
    def from_rows(cls, rows: Iterable[RowLike], *, source: str = "custom") -> "LeapSecondTable":
        return cls((_entry_from_row(r) for r in rows), source=source)

    @classmethod
    def load(cls, path: str) -> "LeapSecondTable":
        """Load a JSON (``.json``) or YAML (anything else) list of rows."""
        with open(path, "r", encoding="utf-8") as f:
            if os.path.splitext(path)[1].lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        if isinstance(data, Mapping):
            data = data.get("leap_seconds")
        if not isinstance(data, list):
            raise LeapSecondTableError(f"{path}: expected a list of leap-second rows")
        table = cls.from_rows(data, source=f"file:{path}")
        log.info("Loaded %d leap-second entries from %s", len(table), path)
        return table

    @classmethod
    def from_erfa(cls) -> "LeapSecondTable":
        """Integer ΔAT steps (1972 onward) from pyERFA's bundled table."""
        rows = [
            (int(r["year"]), int(r["month"]), 1, float(r["tai_utc"]))
            for r in erfa.leap_seconds.get()
            if int(r["year"]) >= 1972
        ]
        return cls.from_rows(rows, source="erfa")

    # ---- lookup ----

    def offset_at(self, instant: CivilTimestamp) -> int:
        """TAI−UTC [s] in effect at a UTC instant; 0 before the first entry."""
        i = bisect_right(self._keys, instant)
        if i == 0:
            return 0
        return self._entries[i - 1].tai_minus_utc

    @property
    def latest(self) -> LeapSecondEntry:
        return self._entries[-1]

    @property
    def latest_offset(self) -> int:
        return self._entries[-1].tai_minus_utc

    @property
    def transitions(self) -> Tuple[CivilTimestamp, ...]:
        return self._keys

    def is_stale(self, instant: CivilTimestamp, horizon_days: float = LEAP_ANNOUNCEMENT_WINDOW_DAYS) -> bool:
        """
        True once the instant is past the next possible insertion boundary
        after the last entry, i.e. the table may be missing a leap second.
        """
        delta_ns = instant.epoch_nanos() - self.latest.effective.epoch_nanos()
        return delta_ns >= horizon_days * NANOS_PER_DAY

    def nearest_transition(self, instant: CivilTimestamp) -> CivilTimestamp:
        """The table transition closest in time to ``instant``."""
        i = bisect_right(self._keys, instant)
        candidates = self._keys[max(0, i - 1):i + 1]
        ns = instant.epoch_nanos()
        return min(candidates, key=lambda k: abs(k.epoch_nanos() - ns))

    # ---- append-only update ----

    def extended(self, entry: LeapSecondEntry) -> "LeapSecondTable":
        """New table with ``entry`` appended; the receiver is untouched."""
        if not self.latest.effective < entry.effective:
            raise LeapSecondTableError(f"new entry {entry.effective} is not after {self.latest.effective}")
        return LeapSecondTable(self._entries + (entry,), source=self.source)

    # ---- sequence protocol ----

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LeapSecondEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> LeapSecondEntry:
        return self._entries[index]

    def to_rows(self) -> List[Dict[str, Any]]:
        return [e.to_row() for e in self._entries]

    def __repr__(self) -> str:
        return f"LeapSecondTable(source={self.source!r}, entries={len(self)}, latest={self.latest.to_row()})"


# ---- Built-in table ----
# (year, month, day, ΔAT) effective from that date at 00:00 UTC onward.
# 1972-01-01 is where integer leap seconds began, with TAI already 10 s ahead.
_BUILTIN_STEPS: List[Tuple[int, int, int, int]] = [
    (1972, 1, 1, 10), (1972, 7, 1, 11), (1973, 1, 1, 12), (1974, 1, 1, 13),
    (1975, 1, 1, 14), (1976, 1, 1, 15), (1977, 1, 1, 16), (1978, 1, 1, 17),
    (1979, 1, 1, 18), (1980, 1, 1, 19), (1981, 7, 1, 20), (1982, 7, 1, 21),
    (1983, 7, 1, 22), (1985, 7, 1, 23), (1988, 1, 1, 24), (1990, 1, 1, 25),
    (1991, 1, 1, 26), (1992, 7, 1, 27), (1993, 7, 1, 28), (1994, 7, 1, 29),
    (1996, 1, 1, 30), (1997, 7, 1, 31), (1999, 1, 1, 32), (2006, 1, 1, 33),
    (2009, 1, 1, 34), (2012, 7, 1, 35), (2015, 7, 1, 36), (2017, 1, 1, 37),
]

BUILTIN_TABLE = LeapSecondTable.from_rows(_BUILTIN_STEPS, source="builtin-2017-01-01")
