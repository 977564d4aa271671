from flask import jsonify
from flask_login import login_required
from ...extensions import db
from aims.blueprints.auth.routes import (
    role_required, request_data, require_field, get_current_student, get_current_teacher,
)
from ...services.grades import GradeService, UNSET
from . import bp

@bp.post("")
@login_required
@role_required("teacher")
def assign_grade():
    t = get_current_teacher()
    data = request_data()
    record = GradeService(db.session).assign_or_update(
        require_field(data, "studentId", int),
        require_field(data, "courseOfferingId", int),
        t,
        grade=data.get("grade"),
        marks=data.get("marks"),
    )
    return jsonify({"message": "Grade assigned successfully",
                    "grade": record.to_dict(with_student=True)}), 201

@bp.put("/<int:grade_id>")
@login_required
@role_required("teacher")
def update_grade(grade_id):
    t = get_current_teacher()
    data = request_data()
    record = GradeService(db.session).update(
        grade_id, t,
        grade=data["grade"] if "grade" in data else UNSET,
        marks=data["marks"] if "marks" in data else UNSET,
    )
    return jsonify({"message": "Grade updated successfully",
                    "grade": record.to_dict(with_student=True)})

@bp.post("/<int:grade_id>/publish")
@login_required
@role_required("teacher")
def publish_grade(grade_id):
    t = get_current_teacher()
    record = GradeService(db.session).publish(grade_id, t)
    return jsonify({"message": "Grade published successfully. Students can now view this grade.",
                    "grade": record.to_dict(with_student=True)})

@bp.get("/course/<int:offering_id>")
@login_required
@role_required("teacher")
def course_grades(offering_id):
    t = get_current_teacher()
    grades = GradeService(db.session).course_grades(offering_id, t)
    return jsonify([g.to_dict(with_student=True) for g in grades])

@bp.get("/student")
@login_required
@role_required("student")
def student_grades():
    stu = get_current_student()
    return jsonify([g.to_dict() for g in GradeService(db.session).student_grades(stu.id)])
