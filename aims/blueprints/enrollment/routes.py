from flask import jsonify
from flask_login import login_required, current_user
from ...extensions import db
from aims.blueprints.auth.routes import (
    role_required, request_data, require_field, get_current_student, get_current_teacher,
)
from ...services import enrollment_service
from ...services.offerings import get_offering
from . import bp

@bp.post("/enroll")
@login_required
@role_required("student")
def enroll():
    stu = get_current_student()
    offering = get_offering(db.session, require_field(request_data(), "courseOfferingId", int))
    record = enrollment_service(db.session).enroll(stu, offering)
    return jsonify({
        "message": "Enrollment request submitted. Awaiting instructor approval.",
        "enrollmentRequest": record.to_dict(),
    }), 201

@bp.post("/drop/<int:enroll_id>")
@login_required
@role_required("student")
def drop(enroll_id):
    stu = get_current_student()
    record = enrollment_service(db.session).drop(enroll_id, stu)
    return jsonify({"message": "Course dropped successfully",
                    "enrollmentRequest": record.to_dict()})

@bp.get("/my")
@login_required
@role_required("student")
def my_enrollments():
    stu = get_current_student()
    records = enrollment_service(db.session).for_student(stu.id)
    return jsonify([r.to_dict() for r in records])

@bp.post("/approve/instructor/<int:enroll_id>")
@login_required
@role_required("teacher")
def approve_instructor(enroll_id):
    t = get_current_teacher()
    record = enrollment_service(db.session).approve_by_instructor(enroll_id, t)
    return jsonify({"message": "Enrollment approved. Awaiting advisor approval.",
                    "enrollmentRequest": record.to_dict()})

@bp.post("/approve/advisor/<int:enroll_id>")
@login_required
@role_required("teacher")
def approve_advisor(enroll_id):
    t = get_current_teacher()
    record = enrollment_service(db.session).approve_by_advisor(enroll_id, t)
    return jsonify({"message": "Enrollment confirmed. Student is now enrolled.",
                    "enrollmentRequest": record.to_dict()})

@bp.post("/reject/<int:enroll_id>")
@login_required
@role_required("teacher", "admin")
def reject(enroll_id):
    t = get_current_teacher() if current_user.role == "teacher" else None
    record = enrollment_service(db.session).reject(enroll_id, current_user.role, teacher=t)
    return jsonify({"message": "Enrollment rejected",
                    "enrollmentRequest": record.to_dict()})
