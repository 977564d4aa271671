from flask_login import UserMixin
from ..extensions import db

class User(UserMixin, db.Model):
    __tablename__ = "user"
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(128), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(16), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey("student.id"))
    teacher_id = db.Column(db.Integer, db.ForeignKey("teacher.id"))

    student = db.relationship("Student", backref=db.backref("auth", uselist=False,
                                                            cascade="all, delete-orphan"))
    teacher = db.relationship("Teacher", backref=db.backref("auth", uselist=False,
                                                            cascade="all, delete-orphan"))

    def to_dict(self):
        data = {"id": self.id, "username": self.username, "role": self.role}
        if self.student:
            data["student"] = self.student.to_dict()
        if self.teacher:
            data["teacher"] = self.teacher.to_dict()
        return data
