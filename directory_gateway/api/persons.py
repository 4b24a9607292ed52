"""Directory record endpoints.

Every route authenticates the bearer token, then hands the operation to the
gate in ``directory_gateway.core.rbac``, which checks the caller's capability
before the directory client is touched.

Security:
    - Read operations (lookups, list) require the USER capability
    - Write operations (create, update, role change, delete) require ADMIN
"""

from __future__ import annotations
import logging

from flask import Blueprint, abort, current_app, jsonify, request

from directory_gateway.api.decorators import current_identity, require_identity
from directory_gateway.api.errors import failure_response
from directory_gateway.core.directory import DirectoryClient
from directory_gateway.core.models import DirectoryRecord, Role, UpdateRequest
from directory_gateway.core.outcome import FailureKind, Outcome
from directory_gateway.core.rbac import Capability, authorize, denial, dispatch

bp = Blueprint("persons", __name__)

logger = logging.getLogger(__name__)


def get_directory_client() -> DirectoryClient:
    """Return the process-wide directory client created by create_app()."""
    return current_app.extensions["directory_client"]


def _run(operation: str, *args):
    """Dispatch ``operation`` for the current caller; return the outcome."""
    return dispatch(current_identity(), operation, get_directory_client(), *args)


def _invalid_input(operation: str, message: str, field: str | None = None):
    """Render bad input, but never reveal more than 403 to an unauthorized caller."""
    if not authorize(current_identity(), operation):
        return failure_response(denial(current_identity(), operation))
    return failure_response(Outcome.failure(FailureKind.VALIDATION_FAILED, message, field=field))


def _json_body() -> dict | None:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else None


# ─────────────────────────────────────────────────────────────────────────────
# Greetings
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/hello/user", methods=["GET"])
@require_identity
def hello_user():
    identity = current_identity()
    if not identity.has(Capability.USER):
        abort(403)
    return (f"Hello user {identity.principal}!", 200, {"Content-Type": "text/plain"})


@bp.route("/hello/admin", methods=["GET"])
@require_identity
def hello_admin():
    identity = current_identity()
    if not identity.has(Capability.ADMIN):
        abort(403)
    logger.info(f"Admin greeting for {identity.principal}")
    return (f"Hello admin {identity.principal}!", 200, {"Content-Type": "text/plain"})


# ─────────────────────────────────────────────────────────────────────────────
# Directory operations
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("", methods=["POST"])
@require_identity
def create():
    """Create a record. Returns the directory's copy with its assigned id."""
    payload = _json_body()
    if payload is None:
        return _invalid_input("create", "Request body must be a JSON object")
    try:
        candidate = DirectoryRecord.from_json(payload)
    except ValueError as exc:
        return _invalid_input("create", str(exc))

    outcome = _run("create", candidate)
    if not outcome.ok:
        return failure_response(outcome)
    return jsonify(outcome.value.to_json()), 201


@bp.route("/all", methods=["GET"])
@require_identity
def find_all():
    outcome = _run("list_all")
    if not outcome.ok:
        return failure_response(outcome)
    return jsonify([record.to_json() for record in outcome.value])


@bp.route("/<int:record_id>", methods=["GET"])
@require_identity
def get_by_id(record_id: int):
    outcome = _run("get_by_id", record_id)
    if not outcome.ok:
        return failure_response(outcome)
    return jsonify(outcome.value.to_json())


@bp.route("/email/<path:email>", methods=["GET"])
@require_identity
def get_by_email(email: str):
    outcome = _run("get_by_email", email)
    if not outcome.ok:
        return failure_response(outcome)
    return jsonify(outcome.value.to_json())


@bp.route("/<int:record_id>", methods=["PUT"])
@require_identity
def update(record_id: int):
    """Merge the supplied fields into the record; blank fields keep their value."""
    payload = _json_body()
    if payload is None:
        return _invalid_input("update", "Request body must be a JSON object")
    try:
        update_request = UpdateRequest.from_json(payload)
    except ValueError as exc:
        return _invalid_input("update", str(exc))

    outcome = _run("update", record_id, update_request)
    if not outcome.ok:
        return failure_response(outcome)
    return jsonify(outcome.value.to_json())


@bp.route("/<int:record_id>/role", methods=["PUT"])
@require_identity
def update_role(record_id: int):
    try:
        role = Role.parse(request.args.get("role", ""))
    except ValueError as exc:
        return _invalid_input("update_role", str(exc), field="role")

    outcome = _run("update_role", record_id, role)
    if not outcome.ok:
        return failure_response(outcome)
    return jsonify(outcome.value.to_json())


@bp.route("/<int:record_id>", methods=["DELETE"])
@require_identity
def delete(record_id: int):
    outcome = _run("remove", record_id)
    if not outcome.ok:
        return failure_response(outcome)
    return (outcome.value, 200, {"Content-Type": "text/plain"})
