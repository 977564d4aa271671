import logging

from flask import current_app, request, jsonify
from ...extensions import db
from aims.blueprints.auth.routes import role_required, request_data, require_field
from flask_login import login_required
from ...errors import NotFoundError, StateConflictError, ValidationError
from ...models import CourseOffering, EnrollmentRequest, Student, Teacher
from ...models.user import User
from ...services import enrollment_service
from ...services.offerings import approve_offering, list_offerings, reject_offering
from ...services.roll_number import parse_student_email
from werkzeug.security import generate_password_hash
from . import bp
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)

def _page_args(default_sort):
    page = max(request.args.get("page", type=int) or 1, 1)
    per  = min(max(request.args.get("per_page", type=int) or 10, 1), 100)
    sort = request.args.get("sort", default_sort)
    order = request.args.get("order", "asc")
    return page, per, sort, order

def _paginate(query, page, per):
    total = query.count()
    items = query.offset((page-1)*per).limit(per).all()
    pages = max(1, (total + per - 1)//per)
    return {"items": [i.to_dict() for i in items], "page": page, "perPage": per,
            "total": total, "pages": pages}

def _default_password():
    return generate_password_hash(current_app.config.get("DEFAULT_PASSWORD", "123456"))

# ---------- Overview ----------
def _counts():
    approved = CourseOffering.query.filter_by(is_approved=True).count()
    pending = CourseOffering.query.filter_by(is_approved=False).count()
    return {
        "totalStudents": Student.query.count(),
        "totalTeachers": Teacher.query.count(),
        "totalCourses": approved + pending,
        "approvedCourses": approved,
        "pendingCourses": pending,
        "totalEnrollments": EnrollmentRequest.query.count(),
    }

@bp.get("/dashboard")
@login_required
@role_required("admin")
def dashboard():
    c = _counts()
    return jsonify({"stats": {
        "pendingCourses": c["pendingCourses"],
        "totalStudents": c["totalStudents"],
        "totalTeachers": c["totalTeachers"],
    }})

@bp.get("/stats")
@login_required
@role_required("admin")
def system_stats():
    return jsonify(_counts())

# ---------- Course approvals ----------
@bp.get("/courses/pending")
@login_required
@role_required("admin")
def pending_courses():
    return jsonify([o.to_dict() for o in list_offerings(db.session, approved=False)])

@bp.post("/courses/<int:cid>/approve")
@login_required
@role_required("admin")
def approve_course(cid):
    o = approve_offering(db.session, cid)
    return jsonify({"message": "Course approved successfully", "courseOffering": o.to_dict()})

@bp.post("/courses/<int:cid>/reject")
@login_required
@role_required("admin")
def reject_course(cid):
    reject_offering(db.session, cid)
    return jsonify({"message": "Course offering rejected"})

@bp.get("/enrollments")
@login_required
@role_required("admin")
def enrollments_overview():
    svc = enrollment_service(db.session)
    sid = request.args.get("student_id", type=int)
    if sid is None:
        raise ValidationError("student_id is required", field="student_id")
    return jsonify([e.to_dict() for e in svc.for_student(sid)])

# ---------- Students ----------
@bp.get("/students")
@login_required
@role_required("admin")
def students():
    q = (request.args.get("q") or "").strip()
    page, per, sort, order = _page_args("roll_no")

    query = Student.query
    if q:
        like = f"%{q}%"
        query = query.filter(or_(
            Student.roll_no.ilike(like),
            Student.name.ilike(like),
            Student.branch.ilike(like),
        ))

    sort_map = {
        "roll_no":  Student.roll_no,
        "name":     Student.name,
        "branch":   Student.branch,
        "year":     Student.entry_year,
    }
    col = sort_map.get(sort, Student.roll_no)
    query = query.order_by(col.desc() if order == "desc" else col.asc())
    return jsonify(_paginate(query, page, per))

@bp.post("/students")
@login_required
@role_required("admin")
def create_student():
    data = request_data()
    email = require_field(data, "email").lower()
    name = require_field(data, "name")
    parsed = parse_student_email(email)
    branch = (data.get("branch") or parsed.branch).strip().upper()
    entry_year = (require_field(data, "entryYear", int)
                  if data.get("entryYear") not in (None, "") else parsed.entry_year)
    s = Student(roll_no=parsed.roll_no, name=name, email=email,
                branch=branch, entry_year=entry_year)
    u = User(username=email, password_hash=_default_password(), role="student", student=s)
    db.session.add_all([s, u])
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise StateConflictError("Student email and roll number must be unique", field="email")
    logger.info("Student %s created", s.roll_no)
    return jsonify({"message": "Student created", "student": s.to_dict()}), 201

@bp.put("/students/<int:sid>")
@login_required
@role_required("admin")
def update_student(sid):
    s = db.session.get(Student, sid)
    if not s:
        raise NotFoundError("Student not found")
    data = request_data()
    s.name   = (data.get("name") or s.name).strip()
    s.branch = (data.get("branch") or s.branch).strip().upper()
    ey       = data.get("entryYear")
    s.entry_year = require_field(data, "entryYear", int) if ey not in (None, "") else s.entry_year
    db.session.commit()
    return jsonify({"message": "Student updated", "student": s.to_dict()})

@bp.delete("/students/<int:sid>")
@login_required
@role_required("admin")
def delete_student(sid):
    s = db.session.get(Student, sid)
    if not s:
        raise NotFoundError("Student not found")
    db.session.delete(s); db.session.commit()
    return jsonify({"message": "Student deleted"})

@bp.post("/students/<int:sid>/advisor")
@login_required
@role_required("admin")
def assign_advisor(sid):
    s = db.session.get(Student, sid)
    if not s:
        raise NotFoundError("Student not found")
    t = db.session.get(Teacher, require_field(request_data(), "advisorId", int))
    if not t:
        raise NotFoundError("Teacher not found")
    s.advisor = t
    db.session.commit()
    logger.info("Teacher %s assigned as advisor of student %s", t.id, s.id)
    return jsonify({"message": "Advisor assigned successfully", "student": s.to_dict()})

# ---------- Teachers ----------
@bp.get("/teachers")
@login_required
@role_required("admin")
def teachers():
    q = (request.args.get("q") or "").strip()
    page, per, sort, order = _page_args("teacher_no")

    query = Teacher.query
    if q:
        like = f"%{q}%"
        query = query.filter(or_(
            Teacher.teacher_no.ilike(like),
            Teacher.name.ilike(like),
            Teacher.dept.ilike(like),
            Teacher.email.ilike(like),
        ))

    sort_map = {
        "teacher_no": Teacher.teacher_no,
        "name":       Teacher.name,
        "dept":       Teacher.dept,
    }
    col = sort_map.get(sort, Teacher.teacher_no)
    query = query.order_by(col.desc() if order == "desc" else col.asc())
    return jsonify(_paginate(query, page, per))

@bp.post("/teachers")
@login_required
@role_required("admin")
def create_teacher():
    data = request_data()
    teacher_no = require_field(data, "teacherNo")
    name       = require_field(data, "name")
    email      = require_field(data, "email").lower()
    dept       = (data.get("department") or "").strip()
    t = Teacher(teacher_no=teacher_no, name=name, email=email, dept=dept)
    u = User(username=email, password_hash=_default_password(), role="teacher", teacher=t)
    db.session.add_all([t, u])
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise StateConflictError("Teacher No. and email must be unique", field="teacherNo")
    return jsonify({"message": "Teacher created", "teacher": t.to_dict()}), 201

@bp.delete("/teachers/<int:tid>")
@login_required
@role_required("admin")
def delete_teacher(tid):
    t = db.session.get(Teacher, tid)
    if not t:
        raise NotFoundError("Teacher not found")
    if t.offerings:
        raise StateConflictError("Teacher still has course offerings")
    for s in t.advisees:
        s.advisor = None
    db.session.delete(t); db.session.commit()
    return jsonify({"message": "Teacher deleted"})
