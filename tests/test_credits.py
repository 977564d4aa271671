import pytest

from aims.errors import ValidationError
from aims.services.credits import calculate_credits


def test_reference_offering():
    assert calculate_credits(3, 1) == (1.0, 5.5, 3.5)


@pytest.mark.parametrize('L,P', [(0, 0), (1, 0), (2, 3), (4, 2), (7, 5), (10, 9)])
def test_credit_relations(L, P):
    T, S, C = calculate_credits(L, P)
    assert T == round(L / 3, 2)
    assert C == round(L + P / 2, 2)
    assert S == round(2 * L + P / 2 - T, 2)


def test_thirds_are_rounded():
    credits = calculate_credits(2, 0)
    assert credits.tutorial == 0.67
    assert credits.self_study == 3.33
    assert credits.credits == 2.0


def test_numeric_strings_accepted():
    assert calculate_credits('3', '1') == calculate_credits(3, 1)


@pytest.mark.parametrize('L,P,field', [(-1, 0, 'L'), (3, -2, 'P'), ('x', 0, 'L'), (3, 1.5, 'P'), (None, 0, 'L')])
def test_invalid_hours(L, P, field):
    with pytest.raises(ValidationError) as exc:
        calculate_credits(L, P)
    assert exc.value.field == field
