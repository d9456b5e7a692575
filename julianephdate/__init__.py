# julianephdate/__init__.py
"""
Civil UTC ⇄ Julian Ephemeris Date (TT) conversion.

    >>> from julianephdate import CivilTimestamp, to_jed, from_jed
    >>> round(to_jed(CivilTimestamp(2000, 1, 1, 11, 58, 55, 816_000_000)), 6)
    2451545.0

``to_jed`` / ``from_jed`` use the built-in leap-second table; build a
``ForwardConverter`` / ``InverseConverter`` around another ``LeapSecondTable``
to substitute your own data.
"""
from julianephdate.core.calendar import CivilTimestamp, civil_to_jd, jd_to_civil
from julianephdate.core.leapseconds import (
    BUILTIN_TABLE,
    LeapSecondEntry,
    LeapSecondTable,
    LeapSecondTableError,
)
from julianephdate.core.timescales import (
    ForwardConverter,
    InverseConverter,
    from_jed,
    jd_utc_from_jed,
    jed_from_jd_utc,
    to_jed,
    tt_offset_seconds,
)
from julianephdate.version import VERSION

__version__ = VERSION

__all__ = [
    "CivilTimestamp",
    "civil_to_jd",
    "jd_to_civil",
    "BUILTIN_TABLE",
    "LeapSecondEntry",
    "LeapSecondTable",
    "LeapSecondTableError",
    "ForwardConverter",
    "InverseConverter",
    "to_jed",
    "from_jed",
    "tt_offset_seconds",
    "jed_from_jd_utc",
    "jd_utc_from_jed",
]
