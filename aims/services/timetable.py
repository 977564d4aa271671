from sqlalchemy import delete, select

from ..models import CourseOffering, EnrollmentRequest, EnrollmentStatus, TimetableEntry

DAY_NAMES = {0: "Mon", 1: "Tue", 2: "Wed", 3: "Thu", 4: "Fri", 5: "Sat"}
PERIOD_TIMES = {
    0: "08:00-08:50", 1: "09:00-09:50", 2: "10:00-10:50", 3: "11:00-11:50",
    4: "12:00-12:50", 5: "12:50-14:00", 6: "14:00-14:50", 7: "15:00-15:50",
    8: "16:00-16:50", 9: "17:00-17:50", 10: "18:00-18:50",
}
LUNCH = None

# one row per day, one column per period
WEEKLY_GRID = (
    ("PCPE", "PC1", "PC2", "PC3", "PC4", LUNCH, "HSME", "PCPE", "HSPE", "PHSME", "PEOE"),
    ("HSPE", "PC1", "PC2", "PC3", "PC4", LUNCH, "PCDE", "PEOE", "HSPE", "PHSME", "PEOE"),
    ("PCDE", "PC1", "PC2", "PC3", "PC4", LUNCH, "PCE1", "PCE2", "PCE3", "PHSME", "HSME"),
    ("PHSME", "PCPE", "HSME", "PCDE", "PEOE", LUNCH, "PCE1", "PCE2", "PCE3", "HSME", "PC4"),
    ("PEOE", "PCPE", "HSME", "PCDE", "PEOE", LUNCH, "PCE1", "PCE2", "PCE3", "HSPE", "PCDE"),
    (),
)


def seed_timetable(session):
    """Replace the stored grid with ``WEEKLY_GRID``; returns the row count."""
    session.execute(delete(TimetableEntry))
    rows = [TimetableEntry(day=day, period=period, slot=slot)
            for day, periods in enumerate(WEEKLY_GRID)
            for period, slot in enumerate(periods)
            if slot is not LUNCH]
    session.add_all(rows)
    session.commit()
    return len(rows)


def slot_schedule(session, offerings):
    by_slot = {}
    for o in sorted(offerings, key=lambda o: o.course_code):
        by_slot.setdefault(o.slot, []).append(o)
    if not by_slot:
        return []
    entries = session.execute(
        select(TimetableEntry)
        .where(TimetableEntry.slot.in_(list(by_slot)))
        .order_by(TimetableEntry.day, TimetableEntry.period)
    ).scalars().all()
    return [{
        "day": e.day,
        "dayName": DAY_NAMES.get(e.day, str(e.day)),
        "period": e.period,
        "time": PERIOD_TIMES.get(e.period),
        "slot": e.slot,
        "courseCode": o.course_code,
        "courseTitle": o.course_title,
        "semester": o.semester,
    } for e in entries for o in by_slot[e.slot]]


def student_timetable(session, student_id):
    offerings = session.execute(
        select(CourseOffering)
        .join(EnrollmentRequest)
        .where(EnrollmentRequest.student_id == student_id,
               EnrollmentRequest.status == EnrollmentStatus.ENROLLED)
    ).scalars().all()
    return slot_schedule(session, offerings)


def teacher_timetable(session, teacher_id):
    offerings = session.execute(
        select(CourseOffering)
        .where(CourseOffering.instructor_id == teacher_id,
               CourseOffering.is_approved.is_(True))
    ).scalars().all()
    return slot_schedule(session, offerings)
