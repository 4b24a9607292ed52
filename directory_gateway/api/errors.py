"""Error handlers and outcome rendering for the application."""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from directory_gateway.core.outcome import FailureKind, Outcome

logger = logging.getLogger(__name__)

# HTTP status per failure kind
STATUS_BY_KIND = {
    FailureKind.VALIDATION_FAILED: 400,
    FailureKind.UNAUTHORIZED: 403,
    FailureKind.NOT_FOUND: 404,
    FailureKind.UPSTREAM_REJECTED: 422,
    FailureKind.UPSTREAM_UNAVAILABLE: 503,
}

TITLE_BY_KIND = {
    FailureKind.VALIDATION_FAILED: "Validation Failed",
    FailureKind.UNAUTHORIZED: "Forbidden",
    FailureKind.NOT_FOUND: "Not Found",
    FailureKind.UPSTREAM_REJECTED: "Upstream Rejected",
    FailureKind.UPSTREAM_UNAVAILABLE: "Upstream Unavailable",
}


def failure_response(outcome: Outcome):
    """Render a failed Outcome as a (JSON response, status) tuple."""
    body = {"error": TITLE_BY_KIND[outcome.kind], "message": outcome.detail}
    if outcome.field:
        body["field"] = outcome.field
    return jsonify(body), STATUS_BY_KIND[outcome.kind]


def register_error_handlers(app):
    """Register JSON error handlers with the Flask app."""

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        return jsonify({"error": "Bad Request", "message": error.description}), 400

    @app.errorhandler(401)
    def unauthorized(error):
        """Handle 401 Unauthorized errors."""
        return jsonify({"error": "Unauthorized", "message": "Authentication required"}), 401

    @app.errorhandler(403)
    def forbidden(error):
        """Handle 403 Forbidden errors."""
        return jsonify({"error": "Forbidden", "message": "Insufficient permissions"}), 403

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        return jsonify({"error": "Not Found", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method Not Allowed", "message": error.description}), 405

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server Error."""
        logger.error(f"Internal error: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return error

        logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500
