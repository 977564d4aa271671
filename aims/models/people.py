from ..extensions import db

class Teacher(db.Model):
    __tablename__ = "teacher"
    id = db.Column(db.Integer, primary_key=True)
    teacher_no = db.Column(db.String(32), unique=True, nullable=False)
    name = db.Column(db.String(64), nullable=False)
    email = db.Column(db.String(128), unique=True, nullable=False)
    dept = db.Column(db.String(64))

    offerings = db.relationship("CourseOffering", back_populates="instructor")
    advisees = db.relationship("Student", back_populates="advisor")

    def to_dict(self):
        return {"id": self.id, "teacherNo": self.teacher_no, "name": self.name,
                "email": self.email, "department": self.dept}

class Student(db.Model):
    __tablename__ = "student"
    id = db.Column(db.Integer, primary_key=True)
    roll_no = db.Column(db.String(32), unique=True, nullable=False)
    name = db.Column(db.String(64), nullable=False)
    email = db.Column(db.String(128), unique=True, nullable=False)
    branch = db.Column(db.String(16), nullable=False)
    entry_year = db.Column(db.Integer, nullable=False)
    advisor_id = db.Column(db.Integer, db.ForeignKey("teacher.id"))

    advisor = db.relationship("Teacher", back_populates="advisees")
    enrollments = db.relationship(
        "EnrollmentRequest", back_populates="student", cascade="all, delete-orphan"
    )
    grades = db.relationship("Grade", back_populates="student", cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id, "rollNumber": self.roll_no, "name": self.name,
            "email": self.email, "branch": self.branch, "entryYear": self.entry_year,
            "advisor": self.advisor.to_dict() if self.advisor else None,
        }
