# tests/conftest.py
from __future__ import annotations

"""
Pytest configuration for the julianephdate suite.

- Registers Hypothesis profiles for local dev and CI.
- Provides isolated_config_env so config-driven tests never
  pick up a developer's config/defaults.yaml edits or JED_* env vars.
- Sanity-checks pyERFA availability (used as an independent reference).
"""

import os
import pytest
from hypothesis import settings, HealthCheck


# ──────────────────────────────────────────────────────────────────────────────
# Hypothesis profiles
# ──────────────────────────────────────────────────────────────────────────────
settings.register_profile(
    "dev",
    settings(
        deadline=None,
        max_examples=100,
        suppress_health_check=[HealthCheck.too_slow],
    ),
)
settings.register_profile(
    "ci",
    settings(
        deadline=None,
        max_examples=500,
        suppress_health_check=[HealthCheck.too_slow],
    ),
)

_profile = (
    "ci"
    if (os.getenv("CI") or os.getenv("GITHUB_ACTIONS"))
    else os.getenv("HYPOTHESIS_PROFILE", "dev")
)
settings.load_profile(_profile)


def pytest_report_header(config: pytest.Config) -> str:
    return f"Hypothesis profile: '{_profile}'"


# ──────────────────────────────────────────────────────────────────────────────
# Global fixtures
# ──────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def isolated_config_env(monkeypatch, tmp_path):
    """Keep developer config files and JED_* env vars out of config-driven tests."""
    monkeypatch.setenv("JED_CONFIG", str(tmp_path / "absent.yaml"))
    for name in ("JED_LEAP_SECONDS_SOURCE", "JED_LEAP_SECONDS_FILE", "JED_INVERSE_CORRECTIONS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture(scope="session")
def ensure_erfa():
    """
    Fail early if pyERFA isn't importable or missing key functions.
    """
    import erfa  # pyERFA exposes the ERFA namespace as 'erfa'
    assert hasattr(erfa, "dat"), "ERFA.dat not available"
    assert hasattr(erfa, "dtf2d"), "ERFA.dtf2d not available"
    assert hasattr(erfa, "leap_seconds"), "erfa.leap_seconds not available"
    return erfa
