"""JSON API for the mortgage simulator.

Exposes the baseline plan and the what-if simulation of a stored mortgage,
plus the few write operations the engine needs around it: importing a
mortgage, appending a terms change or a payment, and purging a mortgage with
its whole history. Run it with ``flask --app mortgage_sim_web.app run``.
"""

from __future__ import annotations

from typing import Optional, Tuple

from flask import Flask, jsonify, request
from loguru import logger

from mortgage_sim.config import Settings, load_settings
from mortgage_sim.errors import (
    DuplicateMortgage,
    DuplicateTerms,
    IncomparableHorizons,
    InvalidHorizon,
    InvalidPeriod,
    InvalidRequest,
    InvalidScenario,
    MortgageSimError,
    NoTermsForPeriod,
    NotFound,
)
from mortgage_sim.log import setup_logging
from mortgage_sim.payloads import (
    mortgage_from_payload,
    payment_from_payload,
    scenario_from_payload,
    terms_from_payload,
)
from mortgage_sim.service import clamp_months, get_plan, simulate
from mortgage_sim.store import MortgageStore, create_store_from_env
from mortgage_sim.utils import parse_period_key

ERROR_STATUS = (
    (NotFound, 404),
    (DuplicateMortgage, 409),
    (DuplicateTerms, 409),
    (NoTermsForPeriod, 422),
    (InvalidPeriod, 400),
    (InvalidHorizon, 400),
    (InvalidScenario, 400),
    (InvalidRequest, 400),
    (IncomparableHorizons, 400),
)


def _status_for(exc: MortgageSimError) -> int:
    for kind, status in ERROR_STATUS:
        if isinstance(exc, kind):
            return status
    return 500


def _error(message: str, status: int, kind: str) -> Tuple[object, int]:
    return jsonify({"message": message, "error": kind}), status


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise InvalidRequest("Request body must be a JSON object")
    return body


def create_app(settings: Optional[Settings] = None, store: Optional[MortgageStore] = None) -> Flask:
    settings = settings or load_settings()
    setup_logging(settings.log_level, settings.log_file)
    store = store or create_store_from_env(settings.database_url)

    app = Flask(__name__)
    app.config["MORTGAGE_SIM_SETTINGS"] = settings

    @app.errorhandler(MortgageSimError)
    def handle_sim_error(exc: MortgageSimError):
        status = _status_for(exc)
        if status >= 500:
            logger.exception("Unhandled simulator error")
        return _error(str(exc), status, type(exc).__name__)

    @app.errorhandler(ValueError)
    def handle_value_error(exc: ValueError):
        return _error(str(exc), 400, "InvalidRequest")

    @app.get("/api/mortgages")
    def list_mortgages():
        return jsonify({"rows": store.list_mortgages()})

    @app.post("/api/mortgages")
    def import_mortgage():
        mortgage = mortgage_from_payload(_json_body(), settings.day_basis)
        mortgage_id = store.add_mortgage(mortgage)
        return jsonify({"id": mortgage_id}), 201

    @app.post("/api/mortgages/<mortgage_id>/terms")
    def add_terms(mortgage_id: str):
        store.add_terms(mortgage_id, terms_from_payload(_json_body(), settings.day_basis))
        return jsonify({"id": mortgage_id}), 201

    @app.post("/api/mortgages/<mortgage_id>/payments")
    def add_payment(mortgage_id: str):
        store.add_payment(mortgage_id, payment_from_payload(_json_body()))
        return jsonify({"id": mortgage_id}), 201

    @app.get("/api/mortgages/<mortgage_id>/plan")
    def plan(mortgage_id: str):
        from_period = request.args.get("from", "").strip()
        months = clamp_months(request.args.get("months"), settings)
        result = get_plan(store, mortgage_id, from_period, months, settings)
        return jsonify(result.to_payload())

    @app.post("/api/mortgages/<mortgage_id>/simulate")
    def run_simulation(mortgage_id: str):
        body = _json_body()
        from_period = str(body.get("from") or "").strip()
        months = clamp_months(body.get("months"), settings)
        # A bad "from" is a request error, not a scenario error.
        parse_period_key(from_period)
        scenario = scenario_from_payload(body.get("scenario") or {}, from_period)
        result = simulate(store, mortgage_id, from_period, months, scenario, settings)
        return jsonify(result.to_payload())

    @app.delete("/api/mortgages/<mortgage_id>/hard")
    def hard_delete(mortgage_id: str):
        store.purge(mortgage_id)
        return "", 204

    @app.delete("/api/mortgages/purge-all")
    def purge_all():
        if settings.is_production:
            return _error("Disabled in production", 403, "Forbidden")
        if request.headers.get("X-Confirm-Purge", "") != "PURGE":
            return _error("Missing X-Confirm-Purge: PURGE", 400, "InvalidRequest")
        return jsonify({"deleted": store.purge_all()})

    return app


if __name__ == "__main__":
    print("Starting mortgage simulator API...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
