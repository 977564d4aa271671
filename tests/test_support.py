import smtplib
from datetime import datetime, timedelta, timezone

import pytest

from aims.errors import NotificationError, ValidationError
from aims.models.base import utcnow
from aims.services.notifier import EmailNotifier, notify_safely, render_status_email
from aims.services.roll_number import parse_student_email
from aims.services.timetable import seed_timetable, student_timetable, teacher_timetable
from aims.services.enrollment import EnrollmentService


class TestRollNumber:
    def test_parses_roll_branch_year(self):
        assert parse_student_email('2023CSB1119@iitrpr.ac.in') == ('2023csb1119', 'CSE', 2023)

    def test_unknown_branch_code_is_kept(self):
        assert parse_student_email('2021xyz42@iitrpr.ac.in').branch == 'XYZ'

    @pytest.mark.parametrize('email', ['', 'no-at-sign', '@iitrpr.ac.in', 'csb1119@iitrpr.ac.in'])
    def test_malformed(self, email):
        with pytest.raises(ValidationError):
            parse_student_email(email)


class TestEmails:
    def test_advisor_and_student_copies_differ(self):
        student_subject, _ = render_status_email('Chitra', 'CS301', 'Compilers',
                                                 'PENDING_ADVISOR_APPROVAL', 'STUDENT')
        advisor_subject, body = render_status_email('Ben', 'CS301', 'Compilers',
                                                    'PENDING_ADVISOR_APPROVAL', 'ADVISOR')
        assert student_subject.startswith('Instructor Approved')
        assert advisor_subject == 'New Enrollment Request - CS301'
        assert 'CS301 - Compilers' in body

    def test_unconfigured_notifier_skips(self):
        assert EmailNotifier().send('a@b.c', 'subject', 'body') is False

    def test_allowlist_blocks(self, monkeypatch):
        def explode(*args, **kwargs):
            raise AssertionError('SMTP should not be reached')
        monkeypatch.setattr(smtplib, 'SMTP', explode)
        notifier = EmailNotifier(server='smtp.local', allowlist=['ok@x.in'], enforce_allowlist=True)
        assert notifier.send('blocked@x.in', 's', 'b') is False

    def test_transport_failure_raises_notification_error(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise ConnectionRefusedError('down')
        monkeypatch.setattr(smtplib, 'SMTP', refuse)
        with pytest.raises(NotificationError):
            EmailNotifier(server='smtp.local').send('a@b.c', 's', 'b')

    def test_notify_safely_swallows(self, monkeypatch, caplog):
        def refuse(*args, **kwargs):
            raise ConnectionRefusedError('down')
        monkeypatch.setattr(smtplib, 'SMTP', refuse)
        notify_safely(EmailNotifier(server='smtp.local'), 'a@b.c', 'A', 'CS301', 'Compilers',
                      'ENROLLED')
        assert 'Notification of ENROLLED to a@b.c failed' in caplog.text


def test_timetables(session, student, instructor, advisor, make_offering):
    assert seed_timetable(session) == 50
    course = make_offering(slot='PC1', code='CS301')
    svc = EnrollmentService(session)
    record = svc.enroll(student, course)
    assert student_timetable(session, student.id) == []

    svc.approve_by_instructor(record.id, instructor)
    svc.approve_by_advisor(record.id, advisor)
    rows = student_timetable(session, student.id)
    assert [(r['dayName'], r['time']) for r in rows] == [
        ('Mon', '09:00-09:50'), ('Tue', '09:00-09:50'), ('Wed', '09:00-09:50'),
    ]
    assert {r['courseCode'] for r in rows} == {'CS301'}
    assert teacher_timetable(session, instructor.id) == rows
    assert teacher_timetable(session, advisor.id) == []


def test_teacher_timetable_keeps_every_course_in_a_slot(session, instructor, make_offering):
    seed_timetable(session)
    make_offering(slot='PC1', code='CS102')
    make_offering(slot='PC1', code='CS101')
    rows = teacher_timetable(session, instructor.id)
    assert len(rows) == 6
    assert [r['courseCode'] for r in rows[:2]] == ['CS101', 'CS102']
    assert {(r['dayName'], r['courseCode']) for r in rows} == {
        (day, code) for day in ('Mon', 'Tue', 'Wed') for code in ('CS101', 'CS102')
    }


def test_timestamps_are_naive_utc(session, student, make_offering):
    now = utcnow()
    assert now.tzinfo is None
    assert abs(now - datetime.now(timezone.utc).replace(tzinfo=None)) < timedelta(seconds=5)

    record = EnrollmentService(session).enroll(student, make_offering())
    assert record.requested_at.tzinfo is None
    assert abs(record.requested_at - now) < timedelta(seconds=5)
