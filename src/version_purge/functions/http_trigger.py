"""HTTP trigger blueprint — health check, manual purge and last run endpoints."""

import dataclasses
import json
import logging
from typing import Any

import azure.functions as func

from version_purge import __version__
from version_purge.config import load_config
from version_purge.orchestration.runner import purge_runner_from_config
from version_purge.reporting.store import report_store_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


def _json_response(payload: dict[str, Any], status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(payload), status_code=status_code, mimetype="application/json"
    )


@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint — returns service status and version."""
    logger.info("[health_check] health check requested")

    try:
        return _json_response({"status": "ok", "version": __version__})

    except Exception:
        logger.error("[health_check] health check failed", exc_info=True)
        return _json_response({"status": "error", "message": "Internal server error"}, 500)


@bp.route(route="purge", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def manual_purge(req: func.HttpRequest) -> func.HttpResponse:
    """Manual trigger endpoint — runs a purge on demand.

    Requires a function key. An optional JSON body ``{"dry_run": true}``
    overrides the configured dry-run setting. Returns the run summary.
    """
    logger.info("[manual_purge] manual purge requested")

    try:
        body = req.get_json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        return _json_response({"status": "error", "message": "Body must be a JSON object"}, 400)
    dry_run = body.get("dry_run")
    if dry_run is not None and not isinstance(dry_run, bool):
        return _json_response({"status": "error", "message": "dry_run must be a boolean"}, 400)

    runner = None
    try:
        config = load_config()
        if dry_run is not None:
            config = dataclasses.replace(config, dry_run=dry_run)
        runner = purge_runner_from_config(config)
        report = runner.run()
        logger.info(
            "[manual_purge] purge complete; versions_removed:%d;errors:%d",
            report["versions_removed"],
            report["errors"],
        )
        return _json_response(report)

    except Exception:
        logger.error("[manual_purge] manual purge failed", exc_info=True)
        report = runner.report if runner is not None else None
        return _json_response(
            {"status": "error", "message": "Internal server error", "report": report}, 500
        )


@bp.route(route="runs/latest", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def latest_run(req: func.HttpRequest) -> func.HttpResponse:
    """Return the summary of the most recent stored purge run."""
    logger.info("[latest_run] latest run requested")

    try:
        store = report_store_from_config(load_config())
        report = store.load_latest() if store is not None else None
        if report is None:
            return _json_response({"status": "not_found", "message": "No run recorded"}, 404)
        return _json_response(report)

    except Exception:
        logger.error("[latest_run] latest run lookup failed", exc_info=True)
        return _json_response({"status": "error", "message": "Internal server error"}, 500)
