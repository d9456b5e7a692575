# julianephdate/main.py
from __future__ import annotations

import logging
import os
import traceback
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from julianephdate.core.calendar import civil_to_jd
from julianephdate.core.constants import GREGORIAN_REFORM_JD, NANOS_PER_SECOND
from julianephdate.core.leapseconds import BUILTIN_TABLE, LeapSecondTable
from julianephdate.core.timescales import ForwardConverter, InverseConverter, tt_offset_seconds
from julianephdate.core.validators import ValidationError, parse_civil_payload, parse_jed_payload
from julianephdate.utils.config import load_config
from julianephdate.version import VERSION

# ───────────────────────── helpers: logging & errors ─────────────────────────
def _configure_logging(app: Flask, level: str) -> None:
    gerr = logging.getLogger("gunicorn.error")
    if gerr.handlers:
        app.logger.handlers = gerr.handlers
        app.logger.setLevel(gerr.level)
    else:
        logging.basicConfig(level=level.upper())

def _register_errors(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        app.logger.info("validation failed at %s %s: %s", request.method, request.path, e)
        return jsonify(
            ok=False,
            error="validation_error",
            message=str(e),
            details=e.errors(),
            path=request.path,
        ), 400

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        app.logger.warning("HTTP %s at %s %s: %s", e.code, request.method, request.path, e.description)
        return jsonify(
            ok=False,
            error="http_error",
            code=e.code,
            name=e.name,
            message=e.description,
            path=request.path,
        ), e.code

    @app.errorhandler(Exception)
    def _any(e: Exception):
        tb = traceback.format_exc()
        app.logger.error("UNHANDLED %s at %s %s\n%s", type(e).__name__, request.method, request.path, tb)
        return jsonify(
            ok=False,
            error="internal_error",
            type=type(e).__name__,
            message=str(e),
            path=request.path,
        ), 500

# ───────────────────────── health ─────────────────────────
def _register_health(app: Flask) -> None:
    @app.route("/", methods=["GET"])
    def root():
        return jsonify(ok=True, service="julianephdate", version=VERSION, health="/health"), 200

    @app.route("/health", methods=["GET"])
    @app.route("/healthz", methods=["GET"])
    def health():
        return jsonify(ok=True, status="ok"), 200


def _body_json() -> Dict[str, Any]:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise ValidationError("JSON body must be an object")
    return data

# ───────────────────────── leap-second table selection ─────────────────────────
def table_from_config(cfg) -> LeapSecondTable:
    source = str(cfg.leap_seconds.source or "builtin").lower()
    if source == "builtin":
        return BUILTIN_TABLE
    if source == "erfa":
        return LeapSecondTable.from_erfa()
    if source == "file":
        path = cfg.leap_seconds.file
        if not path:
            raise ValueError("leap_seconds.source=file requires leap_seconds.file")
        return LeapSecondTable.load(path)
    raise ValueError(f"unknown leap_seconds.source '{source}' (expected builtin|erfa|file)")

# ───────────────────────── conversion endpoints ─────────────────────────
def _register_core_api(app: Flask, table: LeapSecondTable, forward: ForwardConverter, inverse: InverseConverter) -> None:
    def _jed_handler():
        civil, warnings = parse_civil_payload(_body_json())
        offset = table.offset_at(civil)
        warnings = list(warnings)
        if offset == 0:
            warnings.append("leap_seconds_not_modeled_before_table")
        if table.is_stale(civil):
            warnings.append("leap_table_stale")
        return jsonify({
            "ok": True,
            "utc": civil.isoformat(),
            "jed": forward.to_jed(civil),
            "jd_utc": civil_to_jd(civil),
            "tai_minus_utc": offset,
            "tt_offset_seconds": tt_offset_seconds(offset),
            "warnings": warnings,
        }), 200

    def _stdtime_handler():
        jed = parse_jed_payload(_body_json())
        civil, offset = inverse.solve(jed)
        warnings: List[str] = []
        if jed < GREGORIAN_REFORM_JD:
            warnings.append("before_gregorian_reform")
        if table.is_stale(civil):
            warnings.append("leap_table_stale")
        edge = table.nearest_transition(civil)
        if abs(civil.epoch_nanos() - edge.epoch_nanos()) <= NANOS_PER_SECOND:
            warnings.append("near_leap_second_transition")
        return jsonify({
            "ok": True,
            "jed": jed,
            "utc": civil.isoformat(),
            "fields": asdict(civil),
            "tai_minus_utc": offset,
            "warnings": warnings,
        }), 200

    def _leapseconds_handler():
        return jsonify({
            "ok": True,
            "source": table.source,
            "count": len(table),
            "latest": table.latest.to_row(),
            "entries": table.to_rows(),
        }), 200

    app.add_url_rule("/api/jed", "jed", _jed_handler, methods=["POST"])
    app.add_url_rule("/api/stdtime", "stdtime", _stdtime_handler, methods=["POST"])
    app.add_url_rule("/api/leapseconds", "leapseconds", _leapseconds_handler, methods=["GET"])

# ───────────────────────── app factory ─────────────────────────
def create_app(cfg: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.json.sort_keys = False
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore

    cfg = cfg if cfg is not None else load_config()
    _configure_logging(app, str(cfg.log_level))

    table = table_from_config(cfg)
    forward = ForwardConverter(table)
    inverse = InverseConverter(table, corrections=int(cfg.inverse.corrections))
    app.config["JED_CONFIG"] = cfg
    app.config["JED_TABLE"] = table

    _register_health(app)
    _register_errors(app)
    _register_core_api(app, table, forward, inverse)

    app.logger.info(
        "App initialized; leap_table=%s (%d entries, latest %s); inverse_corrections=%d",
        table.source, len(table), table.latest.effective, inverse.corrections,
    )
    return app

# ───────────────────────── app instance ─────────────────────────
app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
