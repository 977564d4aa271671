from types import SimpleNamespace

import pytest

from aims.errors import NotEligible
from aims.services.eligibility import check_eligibility, is_eligible, visible_offerings


def offering(branches=(), years=()):
    return SimpleNamespace(allowed_branches=list(branches), allowed_years=list(years))


@pytest.mark.parametrize('branch,year', [('CSE', 2023), ('EE', 2019), ('', 2030)])
def test_empty_lists_admit_everyone(branch, year):
    assert is_eligible([], [], branch, year)


def test_branch_match_is_case_insensitive():
    assert is_eligible(['cse', 'EE'], [], 'CSE', 2023)
    assert is_eligible(['CSE'], [], 'cse', 2023)


def test_outside_branch_list_is_ineligible():
    assert not is_eligible(['CSE'], [], 'ME', 2023)


def test_year_list():
    assert is_eligible([], [2022, 2023], 'ME', 2023)
    assert not is_eligible([], [2022], 'ME', 2023)


def test_both_dimensions_must_hold():
    assert not is_eligible(['CSE'], [2022], 'CSE', 2023)
    assert not is_eligible(['EE'], [2023], 'CSE', 2023)
    assert is_eligible(['CSE'], [2023], 'CSE', 2023)


def test_check_eligibility_names_dimension():
    student = SimpleNamespace(branch='CSE', entry_year=2023)
    with pytest.raises(NotEligible) as exc:
        check_eligibility(offering(branches=['EE']), student)
    assert exc.value.field == 'branch'
    with pytest.raises(NotEligible) as exc:
        check_eligibility(offering(years=[2021]), student)
    assert exc.value.field == 'entryYear'
    check_eligibility(offering(), student)


def test_visible_offerings_filters():
    open_course = offering()
    cse_only = offering(branches=['CSE'])
    old_batch = offering(years=[2020])
    catalogue = [open_course, cse_only, old_batch]

    assert visible_offerings(catalogue, branch='CSE', entry_year=2023) == [open_course, cse_only]
    assert visible_offerings(catalogue, branch='EE') == [open_course, old_batch]
    assert visible_offerings(catalogue) == catalogue
