import logging

from sqlalchemy import select

from ..errors import Forbidden, InvalidState, NotFoundError, ValidationError
from ..models import CourseOffering
from ..models.course import COURSE_TYPES, SEMESTERS, SLOTS
from .credits import calculate_credits

logger = logging.getLogger(__name__)


def _required(payload, key):
    value = payload.get(key)
    if value is None or not str(value).strip():
        raise ValidationError(f"{key} is required", field=key)
    return str(value).strip()


def _choice(payload, key, choices):
    value = _required(payload, key)
    if value not in choices:
        raise ValidationError(f"Valid {key} is required", field=key)
    return value


def _branches(payload):
    raw = payload.get("allowedBranches") or []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [b.strip().upper() for b in raw if b and b.strip()]


def _years(payload):
    raw = payload.get("allowedYears") or []
    if isinstance(raw, (str, int)):
        raw = str(raw).split(",")
    try:
        return [int(str(y).strip()) for y in raw if str(y).strip()]
    except ValueError:
        raise ValidationError("allowedYears must be a list of years", field="allowedYears")


def offering_fields(payload):
    """Validate a create/update payload into CourseOffering column values."""
    credits = calculate_credits(payload.get("L"), payload.get("P"))
    return {
        "course_code": _required(payload, "courseCode").upper(),
        "course_title": _required(payload, "courseTitle"),
        "department": _required(payload, "department"),
        "semester": _choice(payload, "semester", SEMESTERS),
        "course_type": _choice(payload, "courseType", COURSE_TYPES),
        "slot": _choice(payload, "slot", SLOTS),
        "allowed_branches": _branches(payload),
        "allowed_years": _years(payload),
        "lecture_hours": int(payload.get("L")),
        "practical_hours": int(payload.get("P")),
        "tutorial_hours": credits.tutorial,
        "self_study_hours": credits.self_study,
        "credits": credits.credits,
        "syllabus": (payload.get("syllabus") or None),
    }


def get_offering(session, offering_id):
    offering = session.get(CourseOffering, offering_id)
    if offering is None:
        raise NotFoundError("Course offering not found")
    return offering


def create_offering(session, teacher, payload):
    offering = CourseOffering(instructor_id=teacher.id, is_approved=False,
                              **offering_fields(payload))
    session.add(offering)
    session.commit()
    logger.info("Offering %s (%s) created by teacher %s",
                offering.id, offering.course_code, teacher.id)
    return offering


def update_offering(session, offering_id, teacher, payload):
    offering = get_offering(session, offering_id)
    if offering.instructor_id != teacher.id:
        raise Forbidden("You can only update your own course offerings")
    if offering.is_approved:
        raise InvalidState("Cannot update approved course offering")
    for key, value in offering_fields(payload).items():
        setattr(offering, key, value)
    session.commit()
    return offering


def approve_offering(session, offering_id):
    offering = get_offering(session, offering_id)
    if offering.is_approved:
        raise InvalidState("Course is already approved")
    offering.is_approved = True
    session.commit()
    logger.info("Offering %s (%s) approved", offering.id, offering.course_code)
    return offering


def reject_offering(session, offering_id):
    offering = get_offering(session, offering_id)
    if offering.is_approved:
        raise InvalidState("Cannot reject an approved course")
    session.delete(offering)
    session.commit()
    logger.info("Offering %s rejected and removed", offering_id)


def list_offerings(session, approved=None, semester=None, instructor_id=None):
    stmt = select(CourseOffering)
    if approved is not None:
        stmt = stmt.where(CourseOffering.is_approved.is_(approved))
    if semester:
        stmt = stmt.where(CourseOffering.semester == semester)
    if instructor_id is not None:
        stmt = stmt.where(CourseOffering.instructor_id == instructor_id)
    return session.execute(stmt.order_by(CourseOffering.course_code)).scalars().all()
