from flask import request, jsonify
from ...extensions import db
from flask_login import login_required
from aims.blueprints.auth.routes import role_required, get_current_student
from ...errors import NotFoundError
from ...models.enrollment import ACTIVE_STATUSES, PENDING_STATUSES
from ...services import enrollment_service
from ...services.eligibility import student_may_take, visible_offerings
from ...services.offerings import get_offering, list_offerings
from ...services.timetable import student_timetable
from . import bp

@bp.get("/offerings")
@login_required
@role_required("student")
def list_visible_offerings():
    stu = get_current_student()
    semester = (request.args.get("semester") or "").strip()
    kw = (request.args.get("q") or "").strip().lower()

    offerings = visible_offerings(list_offerings(db.session, approved=True, semester=semester),
                                  branch=stu.branch, entry_year=stu.entry_year)
    if kw:
        offerings = [o for o in offerings
                     if kw in o.course_code.lower() or kw in o.course_title.lower()]

    mine = {e.course_offering_id: e for e in enrollment_service(db.session).for_student(stu.id)}
    items = []
    for o in offerings:
        item = o.to_dict()
        e = mine.get(o.id)
        item["myEnrollment"] = {"id": e.id, "status": e.status.value} if e else None
        items.append(item)
    return jsonify(items)

@bp.get("/offerings/<int:offering_id>")
@login_required
@role_required("student")
def offering_detail(offering_id):
    stu = get_current_student()
    o = get_offering(db.session, offering_id)
    # restricted or unapproved offerings are hidden from students outside the allow-lists
    if not o.is_approved or not student_may_take(o, stu):
        raise NotFoundError("Course offering not found")
    return jsonify(o.to_dict())

@bp.get("/dashboard")
@login_required
@role_required("student")
def dashboard():
    stu = get_current_student()
    return jsonify({"student": stu.to_dict(),
                    "stats": enrollment_service(db.session).student_counts(stu.id)})

@bp.get("/courses")
@login_required
@role_required("student")
def my_courses():
    stu = get_current_student()
    records = enrollment_service(db.session).for_student(stu.id, ACTIVE_STATUSES)
    return jsonify([r.to_dict() for r in records])

@bp.get("/approvals")
@login_required
@role_required("student")
def pending_approvals():
    stu = get_current_student()
    records = enrollment_service(db.session).for_student(stu.id, PENDING_STATUSES)
    return jsonify([r.to_dict() for r in records])

@bp.get("/timetable")
@login_required
@role_required("student")
def my_timetable():
    stu = get_current_student()
    return jsonify(student_timetable(db.session, stu.id))
