from flask import request, jsonify, abort
from werkzeug.security import check_password_hash
from flask_login import login_user, logout_user, login_required, current_user
from ...errors import NotFoundError, ValidationError
from ...models.user import User
from . import bp
from functools import wraps

def role_required(*roles):
    def deco(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated or current_user.role not in roles:
                abort(403)
            return f(*args, **kwargs)
        return wrapper
    return deco

def request_data():
    """JSON body if there is one, else the submitted form."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()

def require_field(data, key, cast=None):
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{key} is required", field=key)
    if cast is None:
        return value.strip() if isinstance(value, str) else value
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} is invalid", field=key)

def get_current_student():
    if current_user.student is None:
        raise NotFoundError("Student not found")
    return current_user.student

def get_current_teacher():
    if current_user.teacher is None:
        raise NotFoundError("Teacher not found")
    return current_user.teacher

@bp.post("/login")
def login():
    data = request_data()
    username = (data.get("username") or "").strip().lower()
    password = data.get("password") or ""
    u = User.query.filter_by(username=username).one_or_none()
    if u and check_password_hash(u.password_hash, password):
        login_user(u)
        return jsonify({"message": "Logged in", "user": u.to_dict()})
    return jsonify({"error": "INVALID_CREDENTIALS",
                    "message": "Incorrect username or password"}), 401

@bp.get("/logout")
@login_required
def logout():
    logout_user()
    return jsonify({"message": "Logged out"})

@bp.get("/me")
@login_required
def me():
    return jsonify(current_user.to_dict())
