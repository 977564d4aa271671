from ..extensions import db
from .base import utcnow

SEMESTERS = ("SPRING_2025", "FALL_2025")
COURSE_TYPES = ("CORE", "PROGRAM_ELECTIVE", "OPEN_ELECTIVE",
                "SCIENCE_MATH_ELECTIVE", "HS_ELECTIVE")
SLOTS = ("PC1", "PC2", "PC3", "PC4", "PCE1", "PCE2", "PCE3",
         "HSME", "HSPE", "PEOE", "PCPE", "PCDE", "PHSME")

class CourseOffering(db.Model):
    __tablename__ = "course_offering"
    id = db.Column(db.Integer, primary_key=True)
    course_code = db.Column(db.String(32), nullable=False)
    course_title = db.Column(db.String(128), nullable=False)
    department = db.Column(db.String(64), nullable=False)
    semester = db.Column(db.String(16), nullable=False)
    course_type = db.Column(db.String(32), nullable=False)
    slot = db.Column(db.String(16), nullable=False, index=True)
    # an empty list means no restriction on that dimension
    allowed_branches = db.Column(db.JSON, nullable=False, default=list)
    allowed_years = db.Column(db.JSON, nullable=False, default=list)
    lecture_hours = db.Column(db.Integer, nullable=False, default=0)     # L
    practical_hours = db.Column(db.Integer, nullable=False, default=0)   # P
    tutorial_hours = db.Column(db.Float, nullable=False, default=0.0)    # T
    self_study_hours = db.Column(db.Float, nullable=False, default=0.0)  # S
    credits = db.Column(db.Float, nullable=False, default=0.0)           # C
    syllabus = db.Column(db.Text)
    instructor_id = db.Column(db.Integer, db.ForeignKey("teacher.id"), nullable=False)
    is_approved = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow,
                           onupdate=utcnow)
    __table_args__ = (
        db.CheckConstraint("lecture_hours >= 0 AND practical_hours >= 0",
                           name="ck_hours_non_negative"),
    )

    instructor = db.relationship("Teacher", back_populates="offerings")
    enrollment_requests = db.relationship("EnrollmentRequest", back_populates="course_offering",
                                          cascade="all, delete-orphan")
    grades = db.relationship("Grade", back_populates="course_offering",
                             cascade="all, delete-orphan")

    def to_dict(self, with_instructor=True):
        data = {
            "id": self.id,
            "courseCode": self.course_code,
            "courseTitle": self.course_title,
            "department": self.department,
            "semester": self.semester,
            "courseType": self.course_type,
            "slot": self.slot,
            "allowedBranches": list(self.allowed_branches or []),
            "allowedYears": list(self.allowed_years or []),
            "L": self.lecture_hours, "P": self.practical_hours,
            "T": self.tutorial_hours, "S": self.self_study_hours, "C": self.credits,
            "syllabus": self.syllabus,
            "isApproved": self.is_approved,
        }
        if with_instructor:
            data["instructor"] = self.instructor.to_dict() if self.instructor else None
        return data

class TimetableEntry(db.Model):
    __tablename__ = "timetable_entry"
    id = db.Column(db.Integer, primary_key=True)
    day = db.Column(db.Integer, nullable=False)     # 0=Mon ... 5=Sat
    period = db.Column(db.Integer, nullable=False)  # 0=8:00 ... 10=18:00, 5 is lunch
    slot = db.Column(db.String(16), nullable=False, index=True)
    __table_args__ = (
        db.UniqueConstraint("day", "period", name="uq_day_period"),
    )
