"""Enrollment approval chain.

A student's relationship to a course offering moves through::

    (none) -> PENDING_INSTRUCTOR_APPROVAL -> PENDING_ADVISOR_APPROVAL -> ENROLLED

Either pending state may be REJECTED; any active state may be DROPPED, and a
DROPPED request may be re-enrolled, which resets the same row. Every
transition is a compare-and-set on the status that was read, so two
concurrent approvals cannot both advance a request.
"""
import logging

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError

from ..errors import (
    AlreadyActive, AlreadyDropped, AlreadyEnrolled, Forbidden, InvalidState,
    NotApproved, NotFoundError, RequestRejected, SlotConflict, ValidationError,
)
from ..models import CourseOffering, EnrollmentRequest, Student
from ..models.base import utcnow
from ..models.enrollment import ACTIVE_STATUSES, PENDING_STATUSES, EnrollmentStatus as S
from .eligibility import check_eligibility
from .notifier import notify_safely

logger = logging.getLogger(__name__)

ENROLL = "enroll"
APPROVE_INSTRUCTOR = "approve_instructor"
APPROVE_ADVISOR = "approve_advisor"
REJECT = "reject"
DROP = "drop"

# (action, current status) -> next status; None stands for "no record yet"
TRANSITIONS = {
    (ENROLL, None): S.PENDING_INSTRUCTOR_APPROVAL,
    (ENROLL, S.DROPPED): S.PENDING_INSTRUCTOR_APPROVAL,
    (APPROVE_INSTRUCTOR, S.PENDING_INSTRUCTOR_APPROVAL): S.PENDING_ADVISOR_APPROVAL,
    (APPROVE_ADVISOR, S.PENDING_ADVISOR_APPROVAL): S.ENROLLED,
    (REJECT, S.PENDING_INSTRUCTOR_APPROVAL): S.REJECTED,
    (REJECT, S.PENDING_ADVISOR_APPROVAL): S.REJECTED,
    (DROP, S.PENDING_INSTRUCTOR_APPROVAL): S.DROPPED,
    (DROP, S.PENDING_ADVISOR_APPROVAL): S.DROPPED,
    (DROP, S.ENROLLED): S.DROPPED,
}

_INVALID_MESSAGES = {
    APPROVE_INSTRUCTOR: "Enrollment is not pending instructor approval",
    APPROVE_ADVISOR: "Enrollment is not pending advisor approval",
    REJECT: "Cannot reject this enrollment",
    DROP: "Cannot drop this enrollment",
    ENROLL: "Cannot enroll from the current state",
}


def next_status(action, current):
    try:
        return TRANSITIONS[(action, current)]
    except KeyError:
        raise InvalidState(_INVALID_MESSAGES[action], status=getattr(current, "value", current))


class EnrollmentService:
    def __init__(self, session, notifier=None):
        self.session = session
        self.notifier = notifier

    # ---------- lookups ----------
    def get(self, enrollment_id):
        record = self.session.get(EnrollmentRequest, enrollment_id)
        if record is None:
            raise NotFoundError("Enrollment request not found")
        return record

    def find(self, student_id, course_offering_id):
        stmt = select(EnrollmentRequest).filter_by(
            student_id=student_id, course_offering_id=course_offering_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def slot_conflict(self, student_id, offering):
        """First active request of the student holding ``offering``'s slot."""
        stmt = (select(EnrollmentRequest)
                .join(CourseOffering)
                .where(EnrollmentRequest.student_id == student_id,
                       EnrollmentRequest.status.in_(ACTIVE_STATUSES),
                       CourseOffering.slot == offering.slot,
                       CourseOffering.id != offering.id)
                .order_by(EnrollmentRequest.id))
        return self.session.execute(stmt).scalars().first()

    # ---------- transitions ----------
    def _transition(self, record, action, **values):
        current = record.status
        target = next_status(action, current)
        stmt = (update(EnrollmentRequest)
                .where(EnrollmentRequest.id == record.id,
                       EnrollmentRequest.status == current)
                .values(status=target, **values)
                .execution_options(synchronize_session=False))
        result = self.session.execute(stmt)
        if result.rowcount != 1:
            self.session.rollback()
            raise InvalidState("Enrollment was modified concurrently, please retry",
                               status=current.value)
        self.session.commit()
        self.session.refresh(record)
        logger.info("Enrollment %s: %s -> %s", record.id, current.value, target.value)
        return record

    def _notify_student(self, record, status):
        student, course = record.student, record.course_offering
        notify_safely(self.notifier, student.email, student.name,
                      course.course_code, course.course_title, status, "STUDENT")

    def enroll(self, student, offering):
        if not offering.is_approved:
            raise NotApproved()
        check_eligibility(offering, student)

        existing = self.find(student.id, offering.id)
        if existing is not None:
            if existing.status == S.ENROLLED:
                raise AlreadyEnrolled()
            if existing.status in PENDING_STATUSES:
                raise AlreadyActive()
            if existing.status == S.REJECTED:
                raise RequestRejected()

        conflict = self.slot_conflict(student.id, offering)
        if conflict is not None:
            raise SlotConflict(offering.slot, conflict.course_offering.course_code)

        now = utcnow()
        if existing is None:
            record = EnrollmentRequest(student_id=student.id, course_offering_id=offering.id,
                                       status=next_status(ENROLL, None), requested_at=now)
            self.session.add(record)
            try:
                self.session.commit()
            except IntegrityError:
                self.session.rollback()
                raise AlreadyActive()
            logger.info("Enrollment %s created for student %s in %s",
                        record.id, student.id, offering.course_code)
        else:
            # re-enrollment after a drop restarts the approval chain on the same row
            record = self._transition(existing, ENROLL, requested_at=now,
                                      instructor_approved_at=None, advisor_approved_at=None,
                                      enrolled_at=None, dropped_at=None)

        self._notify_student(record, S.PENDING_INSTRUCTOR_APPROVAL)
        return record

    def approve_by_instructor(self, enrollment_id, teacher):
        record = self.get(enrollment_id)
        if record.course_offering.instructor_id != teacher.id:
            raise Forbidden("You can only approve enrollments for your own courses")
        record = self._transition(record, APPROVE_INSTRUCTOR,
                                  instructor_approved_at=utcnow())

        self._notify_student(record, S.PENDING_ADVISOR_APPROVAL)
        advisor = record.student.advisor
        if advisor is not None:
            course = record.course_offering
            notify_safely(self.notifier, advisor.email, advisor.name, course.course_code,
                          course.course_title, S.PENDING_ADVISOR_APPROVAL, "ADVISOR")
        return record

    def approve_by_advisor(self, enrollment_id, teacher):
        record = self.get(enrollment_id)
        if record.student.advisor_id is None or record.student.advisor_id != teacher.id:
            raise Forbidden("You can only approve enrollments for students assigned to you")
        if record.status == S.PENDING_ADVISOR_APPROVAL:
            clash = self._enrolled_in_slot(record)
            if clash is not None:
                logger.warning("Enrollment %s approved while student %s is already enrolled "
                               "in %s for slot %s", record.id, record.student_id,
                               clash.course_offering.course_code, record.course_offering.slot)
        now = utcnow()
        record = self._transition(record, APPROVE_ADVISOR,
                                  advisor_approved_at=now, enrolled_at=now)
        self._notify_student(record, S.ENROLLED)
        return record

    def _enrolled_in_slot(self, record):
        stmt = (select(EnrollmentRequest)
                .join(CourseOffering)
                .where(EnrollmentRequest.student_id == record.student_id,
                       EnrollmentRequest.status == S.ENROLLED,
                       CourseOffering.slot == record.course_offering.slot,
                       EnrollmentRequest.id != record.id))
        return self.session.execute(stmt).scalars().first()

    def reject(self, enrollment_id, actor_role, teacher=None):
        record = self.get(enrollment_id)
        if actor_role == "teacher":
            if teacher is None or record.course_offering.instructor_id != teacher.id:
                raise Forbidden("You can only reject enrollments for your own courses")
        elif actor_role != "admin":
            raise Forbidden("Only the instructor or an admin can reject enrollments")
        record = self._transition(record, REJECT)
        self._notify_student(record, S.REJECTED)
        return record

    def drop(self, enrollment_id, student):
        record = self.get(enrollment_id)
        if record.student_id != student.id:
            raise Forbidden("You can only drop your own enrollments")
        if record.status == S.DROPPED:
            raise AlreadyDropped()
        record = self._transition(record, DROP, dropped_at=utcnow())
        self._notify_student(record, S.DROPPED)
        return record

    # ---------- read side ----------
    def for_student(self, student_id, statuses=None):
        stmt = select(EnrollmentRequest).where(EnrollmentRequest.student_id == student_id)
        if statuses:
            stmt = stmt.where(EnrollmentRequest.status.in_(statuses))
        stmt = stmt.order_by(EnrollmentRequest.requested_at.desc(), EnrollmentRequest.id.desc())
        return self.session.execute(stmt).scalars().all()

    def instructor_queue(self, teacher_id, status=None):
        stmt = (select(EnrollmentRequest)
                .join(CourseOffering)
                .where(CourseOffering.instructor_id == teacher_id))
        if status:
            try:
                status = S(status)
            except ValueError:
                raise ValidationError(f"Unknown enrollment status '{status}'", field="status")
            stmt = stmt.where(EnrollmentRequest.status == status)
        stmt = stmt.order_by(EnrollmentRequest.requested_at.desc())
        return self.session.execute(stmt).scalars().all()

    def advisor_queue(self, teacher_id):
        stmt = (select(EnrollmentRequest)
                .join(Student)
                .where(Student.advisor_id == teacher_id,
                       EnrollmentRequest.status == S.PENDING_ADVISOR_APPROVAL)
                .order_by(EnrollmentRequest.requested_at.desc()))
        return self.session.execute(stmt).scalars().all()

    def student_counts(self, student_id):
        stmt = (select(EnrollmentRequest.status, func.count(EnrollmentRequest.id))
                .where(EnrollmentRequest.student_id == student_id)
                .group_by(EnrollmentRequest.status))
        by_status = dict(self.session.execute(stmt).all())
        return {
            "enrolledCourses": by_status.get(S.ENROLLED, 0),
            "pendingApprovals": sum(by_status.get(s, 0) for s in PENDING_STATUSES),
        }

    def pending_instructor_count(self, teacher_id):
        stmt = (select(func.count(EnrollmentRequest.id))
                .join(CourseOffering)
                .where(CourseOffering.instructor_id == teacher_id,
                       EnrollmentRequest.status == S.PENDING_INSTRUCTOR_APPROVAL))
        return self.session.execute(stmt).scalar_one()
