from flask import request, jsonify
from ...extensions import db
from flask_login import login_required
from aims.blueprints.auth.routes import role_required, request_data, get_current_teacher
from ...services import enrollment_service
from ...services.offerings import create_offering, list_offerings, update_offering
from ...services.timetable import teacher_timetable
from . import bp

@bp.get("/offerings")
@login_required
@role_required("teacher")
def my_offerings():
    t = get_current_teacher()
    items = []
    for o in list_offerings(db.session, instructor_id=t.id):
        item = o.to_dict(with_instructor=False)
        item["enrollmentRequests"] = [e.to_dict(with_student=True, with_course=False)
                                      for e in o.enrollment_requests]
        items.append(item)
    return jsonify(items)

@bp.post("/offerings")
@login_required
@role_required("teacher")
def offer_course():
    t = get_current_teacher()
    o = create_offering(db.session, t, request_data())
    return jsonify({"message": "Course offering created. Awaiting admin approval.",
                    "courseOffering": o.to_dict()}), 201

@bp.put("/offerings/<int:offering_id>")
@login_required
@role_required("teacher")
def edit_offering(offering_id):
    t = get_current_teacher()
    o = update_offering(db.session, offering_id, t, request_data())
    return jsonify({"message": "Course offering updated", "courseOffering": o.to_dict()})

@bp.get("/dashboard")
@login_required
@role_required("teacher")
def dashboard():
    t = get_current_teacher()
    return jsonify({
        "teacher": t.to_dict(),
        "stats": {
            "courseCount": len(t.offerings),
            "pendingEnrollments": enrollment_service(db.session).pending_instructor_count(t.id),
            "advisedStudents": len(t.advisees),
        },
    })

@bp.get("/enrollments")
@login_required
@role_required("teacher")
def enrollment_requests():
    t = get_current_teacher()
    status = (request.args.get("status") or "").strip()
    svc = enrollment_service(db.session)
    return jsonify({
        "instructorEnrollments": [e.to_dict(with_student=True)
                                  for e in svc.instructor_queue(t.id, status or None)],
        "advisorEnrollments": [e.to_dict(with_student=True) for e in svc.advisor_queue(t.id)],
    })

@bp.get("/timetable")
@login_required
@role_required("teacher")
def my_timetable():
    t = get_current_teacher()
    return jsonify(teacher_timetable(db.session, t.id))
