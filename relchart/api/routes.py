# relchart/api/routes.py
"""
Relationship API routes
- Full analysis (synastry + composite + compatibility + dynamics + summary)
- Synastry only / composite only
- Ops: /api/health, /api/relationship/info, /api/relationship/self-check

Request body for the POST routes:
    {"chart1": {...}, "chart2": {...}, "options": {"parallel": bool, "houseSystem": "whole-sign"|"equal"}}
Options fall back to the app config (config/defaults.yaml).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, current_app, jsonify, request
from prometheus_client import Counter
from werkzeug.exceptions import BadRequest

from relchart.core.composite import generate_composite_chart
from relchart.core.relationship import (
    RelationshipChartSystem,
    get_system_info,
    validate_system,
)
from relchart.core.synastry import generate_synastry_chart
from relchart.core.validators import CalculationError, ValidationError
from relchart.utils.config import truthy, default_config
from relchart.version import VERSION

log = logging.getLogger(__name__)
api = Blueprint("relationship", __name__)

_ANALYSES = Counter("relchart_analyses_total", "Relationship computations", ["kind", "outcome"])


# ───────────────────────── helpers ─────────────────────────
def _json_error(code: str, details: Any = None, http: int = 400):
    out: Dict[str, Any] = {"ok": False, "error": code}
    if details is not None:
        out["details"] = details
    return jsonify(out), http


def _body_json() -> Dict[str, Any]:
    data = request.get_json(force=True, silent=False)
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object")
    return data


def _cfg():
    return getattr(current_app, "cfg", None) or default_config()


def _options(body: Dict[str, Any]) -> Dict[str, Any]:
    """Merge request options over the app config."""
    cfg = _cfg()
    opts = body.get("options") or {}
    if not isinstance(opts, dict):
        raise ValidationError(
            {"loc": ["options"], "msg": "options must be an object", "type": "type_error.dict"}, received=opts
        )
    parallel = opts.get("parallel", cfg.get("parallel_stages", False))
    return {
        "parallel": truthy(parallel),
        "house_system": opts.get("houseSystem", opts.get("house_system", cfg.get("composite_house_system", "whole-sign"))),
        "max_recommendations": int(cfg.get("max_recommendations", 5)),
    }


def _charts(body: Dict[str, Any]) -> Tuple[Any, Any]:
    return body.get("chart1"), body.get("chart2")


def _run(kind: str, fn):
    """Execute one computation and map domain errors to JSON responses."""
    try:
        payload = fn()
    except ValidationError as e:
        _ANALYSES.labels(kind=kind, outcome="invalid").inc()
        log.info("%s rejected: %s", kind, e)
        return _json_error("validation_error", e.errors(), 400)
    except CalculationError as e:
        _ANALYSES.labels(kind=kind, outcome="error").inc()
        log.error("%s failed in %s: %s", kind, e.operation, e)
        return _json_error("calculation_error", e.as_dict(), 422)
    _ANALYSES.labels(kind=kind, outcome="ok").inc()
    return jsonify({"ok": True, **payload}), 200


# ───────────────────────── health / ops ─────────────────────────
@api.get("/api/health")
def health():
    return jsonify({"ok": True, "status": "up", "version": VERSION}), 200


@api.get("/api/relationship/info")
def system_info():
    info = get_system_info()
    cfg = _cfg()
    info["defaults"] = {
        "compositeHouseSystem": cfg.get("composite_house_system"),
        "parallelStages": bool(cfg.get("parallel_stages")),
        "maxRecommendations": cfg.get("max_recommendations"),
    }
    return jsonify({"ok": True, **info}), 200


@api.get("/api/relationship/self-check")
def self_check():
    report = validate_system()
    return jsonify(report), (200 if report.get("ok") else 500)


# ───────────────────────── relationship ─────────────────────────
@api.post("/api/relationship/analysis")
def relationship_analysis():
    body = _body_json()

    def _go() -> Dict[str, Any]:
        chart1, chart2 = _charts(body)
        system = RelationshipChartSystem(chart1, chart2, **_options(body))
        return system.generate_relationship_analysis().to_dict()

    return _run("analysis", _go)


@api.post("/api/relationship/synastry")
def synastry():
    body = _body_json()
    return _run("synastry", lambda: generate_synastry_chart(*_charts(body)).to_dict())


@api.post("/api/relationship/composite")
def composite():
    body = _body_json()

    def _go() -> Dict[str, Any]:
        opts = _options(body)
        return generate_composite_chart(*_charts(body), house_system=opts["house_system"]).to_dict()

    return _run("composite", _go)
