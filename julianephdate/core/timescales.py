# julianephdate/core/timescales.py
# -----------------------------------------------------------------------------
# UTC ⇄ Julian Ephemeris Date (TT)
#
# Public API:
#   ForwardConverter(table).to_jed(t)            -> float (JED)
#   InverseConverter(table, corrections).from_jed(jed) -> CivilTimestamp
#   to_jed(t) / from_jed(jed)                    module-level, BUILTIN_TABLE
#   jed_from_jd_utc / jd_utc_from_jed            raw offset arithmetic
#
# Guarantees:
#   • JED = JD(UTC) + (ΔAT(t) + 32.184) / 86400, with ΔAT looked up at t.
#   • The inverse guesses with the table's latest ΔAT, then runs a bounded
#     number of correction passes (default 2) and stops early once ΔAT is
#     unchanged between passes.
#   • With corrections=1 (guess + one correction) the result is late by the
#     skipped step (1 s; 10 s at the 1972 start of the table) for instants
#     less than (latest ΔAT − ΔAT) seconds after an older transition. Two
#     corrections converge for every instant UTC can label; JEDs inside an
#     inserted leap second land within 1 s of the transition.
#   • Pure functions, no I/O, no shared mutable state.
# -----------------------------------------------------------------------------

from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple, Union

from julianephdate.core.calendar import CivilTimestamp, civil_to_jd, jd_to_civil
from julianephdate.core.constants import SECONDS_PER_DAY, TT_MINUS_TAI_SECONDS
from julianephdate.core.leapseconds import BUILTIN_TABLE, LeapSecondTable

__all__ = [
    "ForwardConverter",
    "InverseConverter",
    "to_jed",
    "from_jed",
    "tt_offset_seconds",
    "jed_from_jd_utc",
    "jd_utc_from_jed",
]

CivilLike = Union[CivilTimestamp, datetime]

DEFAULT_CORRECTIONS = 2


def tt_offset_seconds(tai_minus_utc: int) -> float:
    """TT − UTC [s] for a given TAI − UTC."""
    return float(tai_minus_utc) + TT_MINUS_TAI_SECONDS


def jed_from_jd_utc(jd_utc: float, tai_minus_utc: int) -> float:
    return jd_utc + tt_offset_seconds(tai_minus_utc) / SECONDS_PER_DAY


def jd_utc_from_jed(jed: float, tai_minus_utc: int) -> float:
    return jed - tt_offset_seconds(tai_minus_utc) / SECONDS_PER_DAY


def _as_civil(t: CivilLike) -> CivilTimestamp:
    if isinstance(t, CivilTimestamp):
        return t
    if isinstance(t, datetime):
        return CivilTimestamp.from_datetime(t)
    raise TypeError(f"expected CivilTimestamp or datetime, got {type(t).__name__}")


class ForwardConverter:
    """Civil UTC → JED."""

    def __init__(self, table: Optional[LeapSecondTable] = None):
        self.table = table if table is not None else BUILTIN_TABLE

    def tt_offset_seconds(self, t: CivilLike) -> float:
        return tt_offset_seconds(self.table.offset_at(_as_civil(t)))

    def to_jed(self, t: CivilLike) -> float:
        civil = _as_civil(t)
        return jed_from_jd_utc(civil_to_jd(civil), self.table.offset_at(civil))


class InverseConverter:
    """
    JED → civil UTC.

    ΔAT depends on the UTC instant being solved for, so the inverse starts
    from the latest known ΔAT and corrects it from the candidate instant.
    ``corrections`` bounds the number of correction passes: 1 is the classic
    guess-then-correct pair; 2 is enough for every instant UTC can label.
    """

    def __init__(self, table: Optional[LeapSecondTable] = None, corrections: int = DEFAULT_CORRECTIONS):
        if corrections < 1:
            raise ValueError(f"corrections must be ≥ 1, got {corrections}")
        self.table = table if table is not None else BUILTIN_TABLE
        self.corrections = int(corrections)

    def solve(self, jed: float) -> Tuple[CivilTimestamp, int]:
        """Return (civil instant, ΔAT used for it)."""
        offset = self.table.latest_offset
        civil = jd_to_civil(jd_utc_from_jed(jed, offset))
        for _ in range(self.corrections):
            corrected = self.table.offset_at(civil)
            if corrected == offset:
                break
            offset = corrected
            civil = jd_to_civil(jd_utc_from_jed(jed, offset))
        return civil, offset

    def from_jed(self, jed: float) -> CivilTimestamp:
        return self.solve(jed)[0]


_FORWARD = ForwardConverter(BUILTIN_TABLE)
_INVERSE = InverseConverter(BUILTIN_TABLE)


def to_jed(t: CivilLike) -> float:
    """JED for a civil UTC instant, using the built-in leap-second table."""
    return _FORWARD.to_jed(t)


def from_jed(jed: float) -> CivilTimestamp:
    """Civil UTC instant for a JED, using the built-in leap-second table."""
    return _INVERSE.from_jed(jed)
