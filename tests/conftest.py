"""
AIMS Portal - Test Configuration and Fixtures
"""
import pytest
from werkzeug.security import generate_password_hash

from aims import create_app
from aims.errors import NotificationError
from aims.extensions import db
from aims.models import CourseOffering, Student, Teacher
from aims.models.user import User
from aims.services.credits import calculate_credits

PASSWORD = 'secret123'


class RecordingNotifier:
    """Collects notifications instead of sending mail"""

    def __init__(self):
        self.sent = []
        self.fail = False

    def notify(self, recipient_email, recipient_name, course_code, course_title,
               new_status, audience_role='STUDENT'):
        if self.fail:
            raise NotificationError('smtp down')
        self.sent.append({
            'to': recipient_email,
            'course': course_code,
            'status': new_status,
            'role': audience_role,
        })


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def app(notifier):
    app = create_app('config.TestConfig', notifier=notifier)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def client(app):
    return app.test_client()


def _user(person, role):
    return User(username=person.email, role=role,
                password_hash=generate_password_hash(PASSWORD),
                **{role: person})


@pytest.fixture
def instructor(session):
    t = Teacher(teacher_no='T001', name='Ada Instructor', email='ada@iitrpr.ac.in', dept='CSE')
    session.add_all([t, _user(t, 'teacher')])
    session.commit()
    return t


@pytest.fixture
def advisor(session):
    t = Teacher(teacher_no='T002', name='Ben Advisor', email='ben@iitrpr.ac.in', dept='CSE')
    session.add_all([t, _user(t, 'teacher')])
    session.commit()
    return t


@pytest.fixture
def student(session, advisor):
    s = Student(roll_no='2023csb1119', name='Chitra', email='2023csb1119@iitrpr.ac.in',
                branch='CSE', entry_year=2023, advisor=advisor)
    session.add_all([s, _user(s, 'student')])
    session.commit()
    return s


@pytest.fixture
def other_student(session):
    s = Student(roll_no='2022eeb1191', name='Dev', email='2022eeb1191@iitrpr.ac.in',
                branch='EE', entry_year=2022)
    session.add_all([s, _user(s, 'student')])
    session.commit()
    return s


@pytest.fixture
def admin(session):
    u = User(username='admin@iitrpr.ac.in', role='admin',
             password_hash=generate_password_hash(PASSWORD))
    session.add(u)
    session.commit()
    return u


@pytest.fixture
def make_offering(session, instructor):
    counter = {'n': 0}

    def factory(slot='PC1', approved=True, branches=None, years=None, L=3, P=1,
                teacher=None, code=None):
        counter['n'] += 1
        credits = calculate_credits(L, P)
        offering = CourseOffering(
            course_code=code or f'CS{300 + counter["n"]}',
            course_title=f'Course {counter["n"]}',
            department='CSE',
            semester='FALL_2025',
            course_type='CORE',
            slot=slot,
            allowed_branches=branches or [],
            allowed_years=years or [],
            lecture_hours=L,
            practical_hours=P,
            tutorial_hours=credits.tutorial,
            self_study_hours=credits.self_study,
            credits=credits.credits,
            instructor=teacher or instructor,
            is_approved=approved,
        )
        session.add(offering)
        session.commit()
        return offering

    return factory


@pytest.fixture
def login(client):
    def do_login(username):
        resp = client.post('/auth/login', json={'username': username, 'password': PASSWORD})
        assert resp.status_code == 200, resp.get_json()
        return client

    return do_login
