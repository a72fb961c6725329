"""Error handlers for the application."""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from app.core.errors import IdentityError

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(IdentityError)
    def identity_error(error):
        """Map the identity error taxonomy to JSON responses."""
        if error.status >= 500:
            logger.error(f"{type(error).__name__}: {error} ({error.detail or 'no detail'})")
        else:
            logger.info(f"{type(error).__name__} on request: {error}")
        return jsonify(error.to_dict()), error.status

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors (e.g. malformed JSON)."""
        return jsonify({"error": "Bad Request", "message": "Malformed request"}), 400

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        return jsonify({"error": "Not Found", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method Not Allowed", "message": str(error.description)}), 405

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return error

        # ALWAYS log the full error (even in production) - logs are secure
        logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500
