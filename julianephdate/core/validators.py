# julianephdate/core/validators.py
from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Tuple, Union

from julianephdate.core.calendar import CivilTimestamp

# ───────────────────────── errors ─────────────────────────

class ValidationError(ValueError):
    """Structured validator error (has .errors() → list of {loc, msg, type})."""
    def __init__(self, details: Union[str, Dict[str, Any], List[Dict[str, Any]]]):
        if isinstance(details, str):
            self._details = [{"loc": [], "msg": details, "type": "value_error"}]
            super().__init__(details)
        elif isinstance(details, dict):
            self._details = [details]
            super().__init__(details.get("msg", "validation_error"))
        else:
            self._details = list(details)
            super().__init__(self._details[0]["msg"] if self._details else "validation_error")

    def errors(self) -> List[Dict[str, Any]]:
        return list(self._details)


def _err(loc: List[str] | str, msg: str, typ: str = "value_error") -> Dict[str, Any]:
    return {"loc": [loc] if isinstance(loc, str) else loc, "msg": msg, "type": typ}


# ───────────────────────── atomic parsers ─────────────────────────

_DATE_RE = re.compile(r"^\s*(?P<y>-?\d{4,})-(?P<mo>\d{2})-(?P<d>\d{2})\s*$")
_TIME_RE = re.compile(r"^\s*(?P<h>\d{1,2}):(?P<m>\d{2})(?::(?P<s>\d{2})(?:\.(?P<f>\d+))?)?\s*$")
_UTC_RE = re.compile(
    r"^\s*(?P<date>-?\d{4,}-\d{2}-\d{2})[Tt ](?P<time>[0-9:.]+)\s*(?P<zone>[Zz]|[+-]\d{2}:?\d{2})?\s*$"
)
_UTC_ZONES = {"z", "+00:00", "+0000", "-00:00", "-0000"}

_MAX_FRACTION_DIGITS = 9


def parse_date(s: str) -> Tuple[int, int, int]:
    m = _DATE_RE.match(s or "")
    if not m:
        raise ValidationError(_err("date", "date must be 'YYYY-MM-DD'", "value_error.date"))
    return int(m.group("y")), int(m.group("mo")), int(m.group("d"))


def parse_time(s: str) -> Tuple[int, int, int, int, List[str]]:
    """
    Accept 'HH:MM', 'HH:MM:SS' or 'HH:MM:SS.frac'. Return (h, m, s, ns, warnings).
    Leap-second labels (SS == 60) have no civil representation and are refused.
    Fractions beyond nanoseconds are truncated with a warning.
    """
    m = _TIME_RE.match(s or "")
    if not m:
        raise ValidationError(_err("time", "time must be 'HH:MM' or 'HH:MM:SS[.frac]'", "value_error.time"))
    hh = int(m.group("h")); mm = int(m.group("m")); ss = int(m.group("s") or 0)
    if ss == 60:
        raise ValidationError(_err("time", "leap-second label :60 is not a civil UTC time", "value_error.time"))
    if not (0 <= hh <= 23 and 0 <= mm <= 59 and 0 <= ss <= 59):
        raise ValidationError(_err("time", "time fields out of range", "value_error.time"))
    frac = m.group("f") or ""
    warnings: List[str] = []
    if len(frac) > _MAX_FRACTION_DIGITS:
        warnings.append("nanosecond_precision_clamped")
        frac = frac[:_MAX_FRACTION_DIGITS]
    ns = int(frac.ljust(_MAX_FRACTION_DIGITS, "0")) if frac else 0
    return hh, mm, ss, ns, warnings


def _build(y: int, mo: int, d: int, hh: int, mm: int, ss: int, ns: int) -> CivilTimestamp:
    try:
        return CivilTimestamp(y, mo, d, hh, mm, ss, ns)
    except ValueError as e:
        raise ValidationError(_err("date", str(e), "value_error.date")) from e


def parse_utc(s: str) -> Tuple[CivilTimestamp, List[str]]:
    """
    Parse 'YYYY-MM-DDTHH:MM[:SS[.frac]]' with an optional 'Z' / '+00:00'.
    Any other offset is refused: callers normalize to UTC first.
    """
    if not isinstance(s, str):
        raise ValidationError(_err("utc", "required string", "type_error.str"))
    m = _UTC_RE.match(s)
    if not m:
        raise ValidationError(_err("utc", "utc must be 'YYYY-MM-DDTHH:MM:SS[.frac][Z]'", "value_error.utc"))
    zone = (m.group("zone") or "z").lower()
    if zone not in _UTC_ZONES:
        raise ValidationError(_err("utc", f"only UTC timestamps are accepted (got offset {m.group('zone')})", "value_error.utc"))
    y, mo, d = parse_date(m.group("date"))
    hh, mm, ss, ns, warnings = parse_time(m.group("time"))
    return _build(y, mo, d, hh, mm, ss, ns), warnings


def parse_jed(v: Any) -> float:
    if isinstance(v, bool) or v is None:
        raise ValidationError(_err("jed", "jed must be a number", "type_error.float"))
    try:
        x = float(v)
    except (TypeError, ValueError):
        raise ValidationError(_err("jed", "jed must be a number", "type_error.float"))
    if not math.isfinite(x):
        raise ValidationError(_err("jed", "jed must be finite", "value_error.float"))
    return x


# ───────────────────────── payloads ─────────────────────────

def parse_civil_payload(body: Any) -> Tuple[CivilTimestamp, List[str]]:
    """
    Normalize the civil-instant inputs of /api/jed:
      {"utc": "2000-01-01T11:58:55.816Z"}  or  {"date": "2000-01-01", "time": "11:58:55.816"}
    """
    if not isinstance(body, dict):
        raise ValidationError("payload must be an object")
    if "utc" in body:
        return parse_utc(body["utc"])

    date_s = body.get("date")
    time_s = body.get("time")
    if not isinstance(date_s, str) or not date_s.strip():
        raise ValidationError(_err("date", "required string (or provide 'utc')", "value_error"))
    if not isinstance(time_s, str) or not time_s.strip():
        raise ValidationError(_err("time", "required string (or provide 'utc')", "value_error"))
    y, mo, d = parse_date(date_s)
    hh, mm, ss, ns, warnings = parse_time(time_s)
    return _build(y, mo, d, hh, mm, ss, ns), warnings


def parse_jed_payload(body: Any) -> float:
    if not isinstance(body, dict):
        raise ValidationError("payload must be an object")
    if "jed" not in body:
        raise ValidationError(_err("jed", "field required", "value_error.missing"))
    return parse_jed(body["jed"])
