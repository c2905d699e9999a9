# ticketeer/error_handlers.py
import logging
import traceback

from flask import jsonify, request

from ticketeer.errors import DomainError

logger = logging.getLogger(__name__)


def _error_response(error, message, status_code):
    return jsonify({
        "error": error,
        "message": message,
        "path": request.path,
    }), status_code


def register_error_handlers(app):
    """Register all error handlers for the application"""

    @app.errorhandler(DomainError)
    def handle_domain_error(error):
        log = logger.error if error.status_code >= 500 else logger.warning
        log(f"{error.__class__.__name__}: {error.message} - Path: {request.path}")
        response = jsonify({
            "error": error.__class__.__name__,
            "message": error.message,
            "path": request.path,
            **(error.payload or {}),
        })
        response.status_code = error.status_code
        return response

    @app.errorhandler(400)
    def bad_request(e):
        logger.warning(f"Bad request: {str(e)} - Path: {request.path}")
        return _error_response(
            "Bad request",
            "The request could not be understood or was missing required parameters.",
            400,
        )

    @app.errorhandler(401)
    def unauthorized(e):
        logger.warning(f"Unauthorized: {str(e)} - Path: {request.path}")
        return _error_response(
            "Unauthorized",
            "Authentication is required and has failed or has not been provided.",
            401,
        )

    @app.errorhandler(403)
    def forbidden(e):
        logger.warning(f"Forbidden: {str(e)} - Path: {request.path}")
        return _error_response(
            "Forbidden",
            "You don't have permission to access this resource.",
            403,
        )

    @app.errorhandler(404)
    def not_found(e):
        logger.info(f"Not found: {request.path}")
        return _error_response(
            "Not found",
            "The requested resource was not found on the server.",
            404,
        )

    @app.errorhandler(405)
    def method_not_allowed(e):
        logger.warning(f"Method not allowed: {request.method} {request.path}")
        return _error_response(
            "Method not allowed",
            f"The {request.method} method is not supported for this endpoint.",
            405,
        )

    @app.errorhandler(409)
    def conflict(e):
        logger.warning(f"Conflict: {str(e)} - Path: {request.path}")
        return _error_response(
            "Conflict",
            "The request could not be completed due to a conflict with the current state of the resource.",
            409,
        )

    @app.errorhandler(413)
    def payload_too_large(e):
        logger.warning(f"Payload too large - Path: {request.path}")
        return _error_response(
            "Payload too large",
            "Uploaded files must be 5MB or smaller.",
            413,
        )

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f"Server error: {str(e)} - Path: {request.path}")
        if app.config.get("DEBUG", False):
            logger.error(f"Traceback: {traceback.format_exc()}")
        return _error_response(
            "Server error",
            "An internal server error occurred. Please try again later.",
            500,
        )
