from flask import jsonify


class PortalError(Exception):
    """Base exception for the AIMS portal."""
    status_code = 400
    reason = "ERROR"

    def __init__(self, message, field=None, **extra):
        super().__init__(message)
        self.message = message
        self.field = field
        self.extra = extra

    def to_dict(self):
        detail = {"error": self.reason, "message": self.message}
        if self.field:
            detail["field"] = self.field
        detail.update(self.extra)
        return detail


class ValidationError(PortalError):
    """Malformed input."""
    reason = "VALIDATION_ERROR"


class InvalidMarks(ValidationError):
    reason = "INVALID_MARKS"

    def __init__(self, message="Marks must be a number between 0 and 100"):
        super().__init__(message, field="marks")


class NotFoundError(PortalError):
    status_code = 404
    reason = "NOT_FOUND"


class StateConflictError(PortalError):
    """A precondition on current status or ownership does not hold."""
    status_code = 409
    reason = "STATE_CONFLICT"


class Forbidden(StateConflictError):
    status_code = 403
    reason = "FORBIDDEN"


class NotApproved(StateConflictError):
    status_code = 400
    reason = "NOT_APPROVED"

    def __init__(self, message="Course offering is not approved yet"):
        super().__init__(message)


class NotEligible(StateConflictError):
    status_code = 403
    reason = "NOT_ELIGIBLE"


class SlotConflict(StateConflictError):
    reason = "SLOT_CONFLICT"

    def __init__(self, slot, conflicting_course):
        super().__init__(
            f"Slot conflict: you already have a course in slot {slot}",
            conflictingCourse=conflicting_course,
        )
        self.slot = slot
        self.conflicting_course = conflicting_course


class AlreadyActive(StateConflictError):
    reason = "ALREADY_ACTIVE"

    def __init__(self, message="You already have a pending request for this course"):
        super().__init__(message)


class AlreadyEnrolled(StateConflictError):
    reason = "ALREADY_ENROLLED"

    def __init__(self, message="You are already enrolled in this course"):
        super().__init__(message)


class RequestRejected(StateConflictError):
    reason = "REQUEST_REJECTED"

    def __init__(self, message="Your request for this course was rejected"):
        super().__init__(message)


class AlreadyDropped(StateConflictError):
    status_code = 400
    reason = "ALREADY_DROPPED"

    def __init__(self, message="Course already dropped"):
        super().__init__(message)


class InvalidState(StateConflictError):
    status_code = 400
    reason = "INVALID_STATE"


class NotEnrolled(StateConflictError):
    status_code = 400
    reason = "NOT_ENROLLED"

    def __init__(self, message="Student is not enrolled in this course"):
        super().__init__(message)


class NotificationError(Exception):
    """Delivery failed. Never surfaced to API callers."""


def register_error_handlers(app):
    @app.errorhandler(PortalError)
    def handle_portal_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(403)
    def handle_forbidden(err):
        return jsonify({"error": "FORBIDDEN", "message": "Insufficient permissions"}), 403

    @app.errorhandler(404)
    def handle_not_found(err):
        return jsonify({"error": "NOT_FOUND", "message": "Resource not found"}), 404
