from __future__ import annotations

import copy
import os
import yaml

DEFAULTS = {
    "leap_seconds": {
        "source": "builtin",   # builtin | erfa | file
        "file": None,
    },
    "inverse": {
        "corrections": 2,
    },
    "log_level": "INFO",
}


class AttrDict(dict):
    """Dict that also supports attribute access: cfg.inverse and cfg['inverse'] both work."""
    def __getattr__(self, item):
        try:
            return self[item]
        except KeyError as e:
            raise AttributeError(item) from e
    def __setattr__(self, key, value):
        self[key] = value


def _to_attr(obj):
    if isinstance(obj, dict):
        return AttrDict({k: _to_attr(v) for k, v in obj.items()})
    if isinstance(obj, list):
        return [_to_attr(x) for x in obj]
    return obj


def _merge(base, override):
    out = dict(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: str | None = None):
    """
    Load YAML config from `path` (default: $JED_CONFIG or config/defaults.yaml)
    over the built-in DEFAULTS. A missing file leaves the defaults in place.
    Env overrides:
      - JED_LEAP_SECONDS_SOURCE   (builtin | erfa | file)
      - JED_LEAP_SECONDS_FILE     (implies source=file)
      - JED_INVERSE_CORRECTIONS   (int ≥ 1)
      - LOG_LEVEL
    Returns an AttrDict for convenient access.
    """
    path = path or os.getenv("JED_CONFIG", "config/defaults.yaml")
    data = {}
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: top-level YAML must be a mapping")
    data = _merge(copy.deepcopy(DEFAULTS), data)

    src = os.getenv("JED_LEAP_SECONDS_SOURCE")
    if src:
        data["leap_seconds"]["source"] = src.strip().lower()
    leap_file = os.getenv("JED_LEAP_SECONDS_FILE")
    if leap_file:
        data["leap_seconds"]["file"] = leap_file
        data["leap_seconds"]["source"] = "file"

    corrections = os.getenv("JED_INVERSE_CORRECTIONS")
    if corrections:
        data["inverse"]["corrections"] = int(corrections)

    log_level = os.getenv("LOG_LEVEL")
    if log_level:
        data["log_level"] = log_level

    return _to_attr(data)
