from datetime import date, datetime

import pytest

from fiscalcode.dates import decode_birth_date, encode_birth_date, parse_birth_date, resolve_century
from fiscalcode.errors import InvalidDate, InvalidDay, InvalidMonth, InvalidSex
from fiscalcode.models import Sex


def test_encode_birth_date_day_boundaries():
    assert encode_birth_date("1999-12-31", "F") == "99t71"
    assert encode_birth_date("1999-12-01", "M") == "99t01"
    assert encode_birth_date(date(2005, 6, 9), Sex.FEMALE) == "05h49"


def test_encode_birth_date_month_alphabet():
    letters = [encode_birth_date(date(1980, m, 1), "m")[2] for m in range(1, 13)]
    assert "".join(letters) == "abcdehlmprst"


def test_encode_birth_date_checks_sex_before_date():
    with pytest.raises(InvalidSex):
        encode_birth_date("--", 0)
    with pytest.raises(InvalidSex):
        encode_birth_date("1999-12-13", "X")


@pytest.mark.parametrize("value", ["--", "", "1999-02-30", "1999/12/13", "13-12-1999", "99-12-13"])
def test_encode_birth_date_rejects_invalid_dates(value):
    with pytest.raises(InvalidDate):
        encode_birth_date(value, "M")


def test_parse_birth_date_accepts_date_and_datetime():
    assert parse_birth_date(datetime(2001, 7, 3, 10, 30)) == date(2001, 7, 3)
    assert parse_birth_date(" 2001-07-03 ") == date(2001, 7, 3)


def test_decode_birth_date_sex_from_day():
    assert decode_birth_date("99T71", century_pivot=30) == (date(1999, 12, 31), Sex.FEMALE)
    assert decode_birth_date("99t13", century_pivot=30) == (date(1999, 12, 13), Sex.MALE)
    assert decode_birth_date("05H49", century_pivot=30) == (date(2005, 6, 9), Sex.FEMALE)


def test_decode_birth_date_accepts_omocodia_letters():
    # M=1, N=2, V=9
    assert decode_birth_date("VVTMN", century_pivot=30) == (date(1999, 12, 12), Sex.MALE)


def test_decode_birth_date_errors():
    with pytest.raises(InvalidMonth):
        decode_birth_date("99Z13")
    for day in ("00", "32", "40", "72", "99"):
        with pytest.raises(InvalidDay):
            decode_birth_date("99T" + day)
    with pytest.raises(InvalidDay):
        decode_birth_date("01B30")  # 30 febbraio
    with pytest.raises(InvalidDay):
        decode_birth_date("99TAB")


def test_resolve_century_with_pivot():
    assert resolve_century(99, 30) == 1999
    assert resolve_century(30, 30) == 2030
    assert resolve_century(5, 30) == 2005


def test_resolve_century_defaults_to_current_year():
    today = date(2026, 10, 19)
    assert resolve_century(26, today=today) == 2026
    assert resolve_century(27, today=today) == 1927
