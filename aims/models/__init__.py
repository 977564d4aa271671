from ..extensions import db
from .people import Student, Teacher
from .course import CourseOffering, TimetableEntry
from .enrollment import EnrollmentRequest, EnrollmentStatus, Grade
from .user import User

__all__ = [
    "Student", "Teacher", "CourseOffering", "TimetableEntry",
    "EnrollmentRequest", "EnrollmentStatus", "Grade", "User",
]
