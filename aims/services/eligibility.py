from ..errors import NotEligible


def branch_allowed(allowed_branches, branch):
    if not allowed_branches:
        return True
    wanted = (branch or "").strip().upper()
    return any((b or "").strip().upper() == wanted for b in allowed_branches)


def year_allowed(allowed_years, entry_year):
    if not allowed_years:
        return True
    try:
        year = int(entry_year)
    except (TypeError, ValueError):
        return False
    return any(int(y) == year for y in allowed_years)


def is_eligible(allowed_branches, allowed_years, branch, entry_year):
    """An empty allow-list imposes no restriction on its dimension."""
    return branch_allowed(allowed_branches, branch) and year_allowed(allowed_years, entry_year)


def student_may_take(offering, student):
    return is_eligible(offering.allowed_branches, offering.allowed_years,
                       student.branch, student.entry_year)


def check_eligibility(offering, student):
    if not branch_allowed(offering.allowed_branches, student.branch):
        raise NotEligible("You are not eligible for this course (branch restriction)",
                          field="branch")
    if not year_allowed(offering.allowed_years, student.entry_year):
        raise NotEligible("You are not eligible for this course (entry year restriction)",
                          field="entryYear")


def visible_offerings(offerings, branch=None, entry_year=None):
    """Offerings open to ``branch`` and ``entry_year``; a None argument skips that check."""
    result = []
    for offering in offerings:
        if branch is not None and not branch_allowed(offering.allowed_branches, branch):
            continue
        if entry_year is not None and not year_allowed(offering.allowed_years, entry_year):
            continue
        result.append(offering)
    return result
