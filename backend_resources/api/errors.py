"""Error handlers for the application."""
from flask import jsonify
from werkzeug.exceptions import HTTPException

from backend_resources.core.exceptions import BackendResourcesError, ValidationError

PLAIN_TEXT = {"Content-Type": "text/plain; charset=utf-8"}


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(ValidationError)
    def invalid_argument(error):
        """Handle payload validation failures with a field -> message map."""
        app.logger.info(f"Validation failed: {error.errors}")
        return jsonify(error.errors), 400

    @app.errorhandler(BackendResourcesError)
    def backend_error(error):
        """Handle provider failures as plain text."""
        app.logger.error(f"Backend resources error: {error.message}")
        return (error.message, error.status, PLAIN_TEXT)

    @app.errorhandler(HTTPException)
    def http_error(error):
        """Handle 4xx/5xx raised by Flask or abort()."""
        return jsonify({"error": error.name, "message": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return ("Internal Server Error", 500, PLAIN_TEXT)
