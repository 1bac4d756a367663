from werkzeug.exceptions import HTTPException

from .utils.responses import err


class StoreError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    status_code = 400


class ConflictError(StoreError):
    status_code = 400


class NotFoundError(StoreError):
    status_code = 404


class AuthError(StoreError):
    status_code = 401


def register_error_handlers(app):
    @app.errorhandler(StoreError)
    def handle_store_error(e: StoreError):
        if e.status_code >= 500:
            app.logger.error("store failure: %s", e.message)
            return err("Internal server error", 500)
        return err(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return err(e.description or e.name, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        app.logger.exception("unhandled error: %s", e)
        return err("Internal server error", 500)
