import enum

from ..extensions import db
from .base import utcnow

class EnrollmentStatus(str, enum.Enum):
    PENDING_INSTRUCTOR_APPROVAL = "PENDING_INSTRUCTOR_APPROVAL"
    PENDING_ADVISOR_APPROVAL = "PENDING_ADVISOR_APPROVAL"
    ENROLLED = "ENROLLED"
    REJECTED = "REJECTED"
    DROPPED = "DROPPED"

PENDING_STATUSES = (EnrollmentStatus.PENDING_INSTRUCTOR_APPROVAL,
                    EnrollmentStatus.PENDING_ADVISOR_APPROVAL)
ACTIVE_STATUSES = (EnrollmentStatus.ENROLLED,) + PENDING_STATUSES

def _iso(value):
    return value.isoformat() if value else None

class EnrollmentRequest(db.Model):
    __tablename__ = "enrollment_request"
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("student.id"), nullable=False)
    course_offering_id = db.Column(db.Integer, db.ForeignKey("course_offering.id"), nullable=False)
    status = db.Column(db.Enum(EnrollmentStatus, native_enum=False, length=32),
                       nullable=False, default=EnrollmentStatus.PENDING_INSTRUCTOR_APPROVAL)
    requested_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    instructor_approved_at = db.Column(db.DateTime)
    advisor_approved_at = db.Column(db.DateTime)
    enrolled_at = db.Column(db.DateTime)
    dropped_at = db.Column(db.DateTime)
    __table_args__ = (
        db.UniqueConstraint("student_id", "course_offering_id", name="uq_student_offering"),
    )

    student = db.relationship("Student", back_populates="enrollments")
    course_offering = db.relationship("CourseOffering", back_populates="enrollment_requests")

    def to_dict(self, with_student=False, with_course=True):
        data = {
            "id": self.id,
            "studentId": self.student_id,
            "courseOfferingId": self.course_offering_id,
            "status": self.status.value,
            "requestedAt": _iso(self.requested_at),
            "instructorApprovedAt": _iso(self.instructor_approved_at),
            "advisorApprovedAt": _iso(self.advisor_approved_at),
            "enrolledAt": _iso(self.enrolled_at),
            "droppedAt": _iso(self.dropped_at),
        }
        if with_student:
            data["student"] = self.student.to_dict()
        if with_course:
            data["courseOffering"] = self.course_offering.to_dict()
        return data

class Grade(db.Model):
    __tablename__ = "grade"
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("student.id"), nullable=False)
    course_offering_id = db.Column(db.Integer, db.ForeignKey("course_offering.id"), nullable=False)
    teacher_id = db.Column(db.Integer, db.ForeignKey("teacher.id"), nullable=False)
    grade = db.Column(db.String(8))
    marks = db.Column(db.Float)
    is_published = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow,
                           onupdate=utcnow)
    __table_args__ = (
        db.UniqueConstraint("student_id", "course_offering_id", name="uq_grade_student_offering"),
        db.CheckConstraint("marks IS NULL OR (marks >= 0 AND marks <= 100)", name="ck_marks_0_100"),
    )

    student = db.relationship("Student", back_populates="grades")
    course_offering = db.relationship("CourseOffering", back_populates="grades")
    teacher = db.relationship("Teacher")

    def to_dict(self, with_student=False):
        data = {
            "id": self.id,
            "studentId": self.student_id,
            "courseOfferingId": self.course_offering_id,
            "courseCode": self.course_offering.course_code,
            "courseTitle": self.course_offering.course_title,
            "grade": self.grade,
            "marks": self.marks,
            "isPublished": self.is_published,
            "updatedAt": _iso(self.updated_at),
        }
        if with_student:
            data["student"] = self.student.to_dict()
        return data
