import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..errors import Forbidden, InvalidMarks, NotEnrolled, NotFoundError
from ..models import CourseOffering, EnrollmentRequest, EnrollmentStatus, Grade, Student

logger = logging.getLogger(__name__)

UNSET = object()


def normalize_grade(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_marks(value):
    """Blank means no marks; anything else must be a number in [0, 100]."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise InvalidMarks()
    try:
        marks = float(value)
    except (TypeError, ValueError):
        raise InvalidMarks()
    if not 0 <= marks <= 100:
        raise InvalidMarks()
    return marks


class GradeService:
    def __init__(self, session):
        self.session = session

    def _owned_offering(self, course_offering_id, teacher, action="assign grades"):
        offering = self.session.get(CourseOffering, course_offering_id)
        if offering is None:
            raise NotFoundError("Course offering not found")
        if offering.instructor_id != teacher.id:
            raise Forbidden(f"You can only {action} for your own courses")
        return offering

    def _owned_grade(self, grade_id, teacher, action):
        record = self.session.get(Grade, grade_id)
        if record is None:
            raise NotFoundError("Grade not found")
        if record.course_offering.instructor_id != teacher.id:
            raise Forbidden(f"You can only {action} for your own courses")
        return record

    def assign_or_update(self, student_id, course_offering_id, teacher,
                         grade=None, marks=None):
        offering = self._owned_offering(course_offering_id, teacher)
        enrolled = self.session.execute(
            select(EnrollmentRequest).filter_by(student_id=student_id,
                                                course_offering_id=offering.id,
                                                status=EnrollmentStatus.ENROLLED)
        ).scalar_one_or_none()
        if enrolled is None:
            raise NotEnrolled()

        letter = normalize_grade(grade)
        score = parse_marks(marks)

        record = self._find(student_id, offering.id)
        if record is None:
            record = Grade(student_id=student_id, course_offering_id=offering.id,
                           teacher_id=teacher.id)
            self.session.add(record)
        record.grade, record.marks, record.is_published = letter, score, False
        try:
            self.session.commit()
        except IntegrityError:
            # lost an insert race for the same (student, offering); update the winner
            self.session.rollback()
            record = self._find(student_id, offering.id)
            record.grade, record.marks, record.is_published = letter, score, False
            self.session.commit()
        logger.info("Grade for student %s in %s saved by teacher %s",
                    student_id, offering.course_code, teacher.id)
        return record

    def _find(self, student_id, course_offering_id):
        return self.session.execute(
            select(Grade).filter_by(student_id=student_id, course_offering_id=course_offering_id)
        ).scalar_one_or_none()

    def update(self, grade_id, teacher, grade=UNSET, marks=UNSET):
        record = self._owned_grade(grade_id, teacher, "update grades")
        score = parse_marks(marks) if marks is not UNSET else record.marks
        if grade is not UNSET:
            record.grade = normalize_grade(grade)
        record.marks = score
        record.is_published = False
        self.session.commit()
        return record

    def publish(self, grade_id, teacher):
        record = self._owned_grade(grade_id, teacher, "publish grades")
        record.is_published = True
        self.session.commit()
        logger.info("Grade %s published", record.id)
        return record

    def student_grades(self, student_id):
        stmt = (select(Grade)
                .where(Grade.student_id == student_id, Grade.is_published.is_(True))
                .order_by(Grade.updated_at.desc(), Grade.id.desc()))
        return self.session.execute(stmt).scalars().all()

    def course_grades(self, course_offering_id, teacher):
        offering = self._owned_offering(course_offering_id, teacher, "view grades")
        stmt = (select(Grade)
                .join(Student)
                .where(Grade.course_offering_id == offering.id)
                .order_by(Student.roll_no))
        return self.session.execute(stmt).scalars().all()
