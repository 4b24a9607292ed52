"""Liveness and readiness probes for the gateway process."""
from flask import Blueprint, current_app

bp = Blueprint("health", __name__)


@bp.route("/health")
def health_check():
    """Liveness: the process is up and serving requests."""
    return ("ok", 200, {"Content-Type": "text/plain"})


@bp.route("/ready")
def readiness_check():
    """Readiness: a directory client is wired in.

    The directory itself is not called.
    """
    if current_app.extensions.get("directory_client") is None:
        return ("directory client not configured", 503, {"Content-Type": "text/plain"})
    return ("ready", 200, {"Content-Type": "text/plain"})
