import pytest

from aims.errors import Forbidden, InvalidMarks, NotEnrolled, NotFoundError
from aims.services.enrollment import EnrollmentService
from aims.services.grades import GradeService, normalize_grade, parse_marks


@pytest.fixture
def grades(session):
    return GradeService(session)


@pytest.fixture
def course(session, student, instructor, advisor, make_offering):
    offering = make_offering()
    svc = EnrollmentService(session)
    record = svc.enroll(student, offering)
    svc.approve_by_instructor(record.id, instructor)
    svc.approve_by_advisor(record.id, advisor)
    return offering


class TestNormalization:
    @pytest.mark.parametrize('raw', [None, '', '   '])
    def test_blank_grade(self, raw):
        assert normalize_grade(raw) is None

    def test_grade_is_trimmed(self):
        assert normalize_grade(' A- ') == 'A-'

    @pytest.mark.parametrize('raw,expected', [(None, None), ('', None), ('87.5', 87.5), (0, 0.0), (100, 100.0)])
    def test_marks(self, raw, expected):
        assert parse_marks(raw) == expected

    @pytest.mark.parametrize('raw', [-1, 100.5, 'abc', True, float('nan')])
    def test_bad_marks(self, raw):
        with pytest.raises(InvalidMarks):
            parse_marks(raw)


def test_publish_gating(grades, student, instructor, course):
    record = grades.assign_or_update(student.id, course.id, instructor, grade='A', marks='91')
    assert record.is_published is False
    assert grades.student_grades(student.id) == []

    grades.publish(record.id, instructor)
    assert [g.id for g in grades.student_grades(student.id)] == [record.id]

    again = grades.assign_or_update(student.id, course.id, instructor, grade='A-', marks=88)
    assert again.id == record.id
    assert again.is_published is False
    assert (again.grade, again.marks) == ('A-', 88.0)
    assert grades.student_grades(student.id) == []


def test_update_keeps_omitted_fields(grades, student, instructor, course):
    record = grades.assign_or_update(student.id, course.id, instructor, grade='B', marks=75)
    grades.publish(record.id, instructor)

    updated = grades.update(record.id, instructor, marks=78)
    assert (updated.grade, updated.marks, updated.is_published) == ('B', 78.0, False)

    updated = grades.update(record.id, instructor, grade='')
    assert (updated.grade, updated.marks) == (None, 78.0)


def test_invalid_update_changes_nothing(grades, session, student, instructor, course):
    record = grades.assign_or_update(student.id, course.id, instructor, grade='B', marks=75)
    with pytest.raises(InvalidMarks):
        grades.update(record.id, instructor, grade='C', marks=140)
    session.rollback()
    session.refresh(record)
    assert (record.grade, record.marks) == ('B', 75.0)


def test_not_enrolled(grades, other_student, instructor, course):
    with pytest.raises(NotEnrolled):
        grades.assign_or_update(other_student.id, course.id, instructor, grade='A')


def test_pending_request_is_not_enough(grades, session, other_student, instructor, make_offering):
    offering = make_offering(slot='PC2')
    EnrollmentService(session).enroll(other_student, offering)
    with pytest.raises(NotEnrolled):
        grades.assign_or_update(other_student.id, offering.id, instructor, grade='A')


def test_wrong_instructor(grades, student, advisor, instructor, course):
    with pytest.raises(Forbidden):
        grades.assign_or_update(student.id, course.id, advisor, grade='A')
    record = grades.assign_or_update(student.id, course.id, instructor, grade='A')
    with pytest.raises(Forbidden):
        grades.publish(record.id, advisor)
    with pytest.raises(Forbidden):
        grades.update(record.id, advisor, grade='B')
    with pytest.raises(Forbidden):
        grades.course_grades(course.id, advisor)


def test_out_of_range_marks(grades, student, instructor, course):
    with pytest.raises(InvalidMarks):
        grades.assign_or_update(student.id, course.id, instructor, marks=101)


def test_missing_records(grades, student, instructor):
    with pytest.raises(NotFoundError):
        grades.assign_or_update(student.id, 404, instructor, grade='A')
    with pytest.raises(NotFoundError):
        grades.publish(404, instructor)


def test_course_grades(grades, student, instructor, course):
    grades.assign_or_update(student.id, course.id, instructor, grade='A')
    listed = grades.course_grades(course.id, instructor)
    assert [g.student_id for g in listed] == [student.id]


def test_concurrent_first_grade_updates_existing_row(grades, monkeypatch, student, instructor,
                                                     course):
    first = grades.assign_or_update(student.id, course.id, instructor, grade='A', marks=90)
    grades.publish(first.id, instructor)

    lookup = grades._find
    calls = []

    def stale_then_fresh(student_id, course_offering_id):
        calls.append(student_id)
        if len(calls) == 1:
            return None
        return lookup(student_id, course_offering_id)

    monkeypatch.setattr(grades, '_find', stale_then_fresh)
    record = grades.assign_or_update(student.id, course.id, instructor, grade='B', marks=80)
    assert len(calls) == 2
    assert record.id == first.id
    assert (record.grade, record.marks, record.is_published) == ('B', 80.0, False)
    assert grades.student_grades(student.id) == []
