from datetime import date

import pytest

from fiscalcode.errors import InvalidDate, InvalidSex, UnknownPlace
from fiscalcode.models import Person, Sex


def test_sex_parse():
    assert Sex.parse("m") is Sex.MALE
    assert Sex.parse(" F ") is Sex.FEMALE
    assert Sex.parse(Sex.FEMALE) is Sex.FEMALE
    for bad in (0, None, "", "x", "maschio"):
        with pytest.raises(InvalidSex):
            Sex.parse(bad)


def test_person_fiscal_code_reports_errors_in_order(codec):
    # stessa sequenza di errori di una persona compilata un campo alla volta
    with pytest.raises(InvalidSex):
        Person("", "", 0, "", "").fiscal_code(codec)
    with pytest.raises(InvalidDate):
        Person("", "", "m", "", "").fiscal_code(codec)
    with pytest.raises(UnknownPlace):
        Person("", "", "m", "1990-05-17", "").fiscal_code(codec)

    assert Person("", "", "m", "1990-05-17", "Lucca ").fiscal_code(codec)[:11] == "XXXXXX90E17"
    assert Person("Doe", "Jane", "F", "1990-05-17", "Lucca").fiscal_code(codec)[:11] == "DOEJNA90E57"


def test_person_from_fiscal_code(codec):
    person = Person.from_fiscal_code("DOEJHN99T13Z121S", codec)
    assert person.sex is Sex.MALE
    assert person.birth_date == date(1999, 12, 13)
    assert person.birth_place == "Malta"
    assert person.surname == "DOE"
    assert person.given_name == "JHN"
