# tests/test_timescales.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import assume, given, strategies as st

import julianephdate
from julianephdate.core.calendar import CivilTimestamp, civil_to_jd, days_in_month
from julianephdate.core.leapseconds import BUILTIN_TABLE, LeapSecondTable
from julianephdate.core.timescales import (
    ForwardConverter,
    InverseConverter,
    from_jed,
    jd_utc_from_jed,
    jed_from_jd_utc,
    to_jed,
    tt_offset_seconds,
)

NS = 1_000_000_000
MS = 1_000_000

J2000_UTC = CivilTimestamp(2000, 1, 1, 11, 58, 55, 816_000_000)


def _gap_ns(a: CivilTimestamp, b: CivilTimestamp) -> int:
    return abs(a.epoch_nanos() - b.epoch_nanos())


@st.composite
def civil_timestamps(draw, min_year: int = 1960, max_year: int = 2100) -> CivilTimestamp:
    year = draw(st.integers(min_value=min_year, max_value=max_year))
    month = draw(st.integers(min_value=1, max_value=12))
    day = draw(st.integers(min_value=1, max_value=days_in_month(year, month)))
    return CivilTimestamp(
        year, month, day,
        draw(st.integers(0, 23)),
        draw(st.integers(0, 59)),
        draw(st.integers(0, 59)),
        draw(st.integers(0, NS - 1)),
    )


def _near_transition(t: CivilTimestamp, window_ns: int = 2 * NS) -> bool:
    return _gap_ns(t, BUILTIN_TABLE.nearest_transition(t)) < window_ns


# ─────────────────────────────────────────────────────────────────────────────
# Forward
# ─────────────────────────────────────────────────────────────────────────────

def test_j2000_epoch() -> None:
    jed = to_jed(J2000_UTC)
    assert abs(jed - 2451545.0) < 0.01
    assert abs(jed - 2451545.0) < 1e-8
    assert _gap_ns(from_jed(jed), J2000_UTC) <= MS


def test_j2000_epoch_from_datetime() -> None:
    aware = datetime(2000, 1, 1, 11, 58, 55, 816000, tzinfo=timezone.utc)
    shifted = aware.astimezone(timezone(timedelta(hours=-8)))
    assert to_jed(aware) == to_jed(J2000_UTC)
    assert to_jed(shifted) == to_jed(J2000_UTC)


def test_forward_uses_offset_at_instant() -> None:
    t = CivilTimestamp(1990, 3, 1, 6)
    fwd = ForwardConverter()
    assert fwd.tt_offset_seconds(t) == pytest.approx(25 + 32.184)
    assert fwd.to_jed(t) == civil_to_jd(t) + (25 + 32.184) / 86400.0


def test_forward_before_table_uses_tt_minus_tai_only() -> None:
    t = CivilTimestamp(1965, 5, 5)
    assert to_jed(t) == pytest.approx(civil_to_jd(t) + 32.184 / 86400.0, abs=1e-12)


def test_forward_rejects_unknown_types() -> None:
    with pytest.raises(TypeError):
        to_jed("2000-01-01T12:00:00Z")  # type: ignore[arg-type]


def test_offset_arithmetic_helpers() -> None:
    assert tt_offset_seconds(37) == pytest.approx(69.184)
    jed = jed_from_jd_utc(2457754.5, 37)
    assert jd_utc_from_jed(jed, 37) == pytest.approx(2457754.5, abs=1e-12)


def test_leap_second_step_increases_jed_by_two_seconds() -> None:
    before = CivilTimestamp(2016, 12, 31, 23, 59, 59)
    after = CivilTimestamp(2017, 1, 1)
    # one civil second plus the inserted leap second
    assert (to_jed(after) - to_jed(before)) * 86400.0 == pytest.approx(2.0, abs=1e-4)


@given(a=civil_timestamps(), b=civil_timestamps())
def test_monotonic(a: CivilTimestamp, b: CivilTimestamp) -> None:
    lo, hi = min(a, b), max(a, b)
    assert to_jed(lo) <= to_jed(hi)
    if _gap_ns(lo, hi) >= MS:
        assert to_jed(lo) < to_jed(hi)


# ─────────────────────────────────────────────────────────────────────────────
# Inverse
# ─────────────────────────────────────────────────────────────────────────────

@given(t=civil_timestamps())
def test_round_trip_within_one_millisecond(t: CivilTimestamp) -> None:
    assume(not _near_transition(t))
    assert _gap_ns(from_jed(to_jed(t)), t) <= MS


@pytest.mark.parametrize("entry", list(BUILTIN_TABLE), ids=lambda e: e.to_row()["date"])
def test_boundary_stability(entry) -> None:
    t = entry.effective
    back = from_jed(to_jed(t))
    assert _gap_ns(back, t) <= NS + MS


@pytest.mark.parametrize("entry", list(BUILTIN_TABLE)[1:], ids=lambda e: e.to_row()["date"])
def test_classic_two_pass_boundary_bound(entry) -> None:
    classic = InverseConverter(corrections=1)
    t = entry.effective
    back = classic.from_jed(to_jed(t))
    assert _gap_ns(back, t) <= NS + MS


def test_classic_two_pass_is_one_second_late_after_older_transition() -> None:
    t = CivilTimestamp(2015, 7, 1, 0, 0, 0, 500_000_000)
    jed = to_jed(t)
    classic = InverseConverter(corrections=1)
    back = classic.from_jed(jed)
    assert abs(back.epoch_nanos() - t.epoch_nanos() - NS) <= MS
    assert _gap_ns(from_jed(jed), t) <= MS


def test_classic_two_pass_window_spans_offset_gap() -> None:
    # guess uses ΔAT=37, so anything < 26 s after 1972-07-01 (ΔAT 11) lands before it
    t = CivilTimestamp(1972, 7, 1, 0, 0, 20)
    classic = InverseConverter(corrections=1)
    assert abs(classic.from_jed(to_jed(t)).epoch_nanos() - t.epoch_nanos() - NS) <= MS
    assert _gap_ns(from_jed(to_jed(t)), t) <= MS


def test_classic_two_pass_ten_second_step_in_1972() -> None:
    t = CivilTimestamp(1972, 1, 1, 0, 0, 5)
    classic = InverseConverter(corrections=1)
    assert abs(classic.from_jed(to_jed(t)).epoch_nanos() - t.epoch_nanos() - 10 * NS) <= MS
    assert _gap_ns(from_jed(to_jed(t)), t) <= MS


def test_jed_inside_inserted_leap_second() -> None:
    # TT of 2016-12-31T23:59:60.5 UTC: no civil label exists
    jed = civil_to_jd(CivilTimestamp(2016, 12, 31)) + (86400.5 + 36 + 32.184) / 86400.0
    back = from_jed(jed)
    assert _gap_ns(back, CivilTimestamp(2017, 1, 1)) <= NS // 2 + MS


def test_solve_reports_offset_used() -> None:
    civil, offset = InverseConverter().solve(to_jed(CivilTimestamp(1999, 6, 1)))
    assert offset == 32
    assert _gap_ns(civil, CivilTimestamp(1999, 6, 1)) <= MS


def test_inverse_rejects_zero_corrections() -> None:
    with pytest.raises(ValueError):
        InverseConverter(corrections=0)


def test_substituted_table_changes_both_directions() -> None:
    early = LeapSecondTable(list(BUILTIN_TABLE)[:10], source="to-1980")
    fwd, inv = ForwardConverter(early), InverseConverter(early)
    t = CivilTimestamp(2020, 1, 1, 12)
    assert (to_jed(t) - fwd.to_jed(t)) * 86400.0 == pytest.approx(37 - 19, abs=1e-4)
    assert _gap_ns(inv.from_jed(fwd.to_jed(t)), t) <= MS


def test_before_reform_jed_does_not_raise() -> None:
    assert isinstance(from_jed(2000000.0), CivilTimestamp)


def test_package_level_api() -> None:
    assert julianephdate.to_jed(J2000_UTC) == to_jed(J2000_UTC)
    assert julianephdate.from_jed(2451545.0) == from_jed(2451545.0)
