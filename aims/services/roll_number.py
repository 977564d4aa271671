import re
from collections import namedtuple

from ..errors import ValidationError

BRANCH_CODES = {
    "CS": "CSE", "CSE": "CSE", "CSB": "CSE",
    "EE": "EE", "EEB": "EE",
    "ME": "ME", "MEB": "ME",
    "CE": "CE", "CEB": "CE",
    "CH": "CHE", "CHE": "CHE", "CHB": "CHE",
    "BM": "BME", "BME": "BME",
    "MTH": "MTH", "MC": "MTH", "MCB": "MTH",
    "PH": "PHY", "PHY": "PHY",
    "HS": "HS", "MS": "MS",
}

_ROLL_RE = re.compile(r"^(\d{4})([a-z]+)\d*$")


RollNumber = namedtuple("RollNumber", "roll_no branch entry_year")


def parse_student_email(email):
    """``2023csb1119@iitrpr.ac.in`` -> ``RollNumber('2023csb1119', 'CSE', 2023)``"""
    local, sep, domain = (email or "").strip().partition("@")
    if not sep or not local or not domain:
        raise ValidationError("Invalid email format", field="email")
    roll_no = local.lower()
    match = _ROLL_RE.match(roll_no)
    if not match:
        raise ValidationError("Could not extract entry year and branch from email",
                              field="email")
    code = match.group(2).upper()
    return RollNumber(roll_no, BRANCH_CODES.get(code, code), int(match.group(1)))
