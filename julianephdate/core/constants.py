# julianephdate/core/constants.py
# -*- coding: utf-8 -*-
"""
Time constants shared by the calendar, leap-second and timescale modules.

Pure-Python, no external dependencies. Safe to import from any core module.
"""

from __future__ import annotations

__all__ = [
    "SECONDS_PER_DAY",
    "NANOS_PER_SECOND",
    "NANOS_PER_DAY",
    "TT_MINUS_TAI_SECONDS",
    "GREGORIAN_REFORM_JD",
    "J2000_JD",
    "LEAP_ANNOUNCEMENT_WINDOW_DAYS",
]

SECONDS_PER_DAY: float = 86400.0
NANOS_PER_SECOND: int = 1_000_000_000
NANOS_PER_DAY: int = 86_400 * NANOS_PER_SECOND

# TT − TAI, fixed by definition
TT_MINUS_TAI_SECONDS: float = 32.184

# 1582-10-15 00:00 UT; calendar algorithms are only valid from here on
GREGORIAN_REFORM_JD: float = 2299160.5

# 2000-01-01 12:00 TT
J2000_JD: float = 2451545.0

# Leap seconds can only be inserted at the end of June or December.
LEAP_ANNOUNCEMENT_WINDOW_DAYS: float = 183.0
