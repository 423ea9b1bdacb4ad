from flask import jsonify, request
from pydantic import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException

from .extensions import db


class ApiError(Exception):
    status_code = 400
    message = "Bad request"

    def __init__(self, message=None, errors=None):
        self.message = message or self.message
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self):
        if self.errors:
            return {"errors": self.errors}
        return {"error": self.message}


class ValidationError(ApiError):
    message = "Invalid input"


class InvalidAmount(ValidationError):
    message = "Invalid amount"


class InvalidDate(ValidationError):
    message = "Invalid date"


class InvalidRange(ValidationError):
    message = "End date must be after start date"


class NotFound(ApiError):
    status_code = 404
    message = "Resource not found"


class BusinessRuleViolation(ApiError):
    message = "Request violates a business rule"


class DuplicateName(BusinessRuleViolation):
    message = "Category with this name already exists"


class OverlappingBudget(BusinessRuleViolation):
    message = "An overlapping budget already exists for this category"


class LastCategory(BusinessRuleViolation):
    message = "At least one category is required"


class HasDependents(BusinessRuleViolation):
    message = "Cannot delete category with existing expenses. Please reassign or delete expenses first."


class Unauthorized(ApiError):
    status_code = 401
    message = "Authentication required"


class InternalError(ApiError):
    status_code = 500
    message = "Internal server error"


def schema_errors(exc):
    """Flatten a pydantic error into ``[{"field", "message"}]`` entries."""
    return [
        {"field": ".".join(str(part) for part in err["loc"]) or "body", "message": err["msg"]}
        for err in exc.errors()
    ]


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err):
        db.session.rollback()
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(SchemaValidationError)
    def handle_schema_error(err):
        return jsonify({"errors": schema_errors(err)}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({"error": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err):
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        failure = InternalError()
        return jsonify(failure.to_dict()), failure.status_code
