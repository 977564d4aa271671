from flask import current_app

from .enrollment import EnrollmentService
from .grades import GradeService


def get_notifier():
    return current_app.extensions.get("aims_notifier")


def enrollment_service(session):
    return EnrollmentService(session, get_notifier())


__all__ = ["EnrollmentService", "GradeService", "enrollment_service", "get_notifier"]
