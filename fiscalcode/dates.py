from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional, Tuple, Union

from .errors import InvalidDate, InvalidDay, InvalidMonth
from .models import Sex
from .omocodia import resolve_digits

# Lettere dei mesi, gennaio..dicembre (non in ordine alfabetico)
MONTHS = "abcdehlmprst"
FEMALE_OFFSET = 40

_ISO_DATE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
_TWO_DIGITS = re.compile(r"[0-9]{2}")


def parse_birth_date(value: Union[date, str]) -> date:
    """Accetta una date o una stringa YYYY-MM-DD; altrimenti InvalidDate."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    m = _ISO_DATE.fullmatch(str(value or "").strip())
    if not m:
        raise InvalidDate(value)
    y, mo, d = map(int, m.groups())
    try:
        return date(y, mo, d)
    except ValueError as exc:
        raise InvalidDate(value) from exc


def encode_birth_date(birth_date: Union[date, str], sex: object) -> str:
    """Anno (2 cifre) + lettera del mese + giorno (+40 per le donne), in minuscolo."""
    sex = Sex.parse(sex)
    d = parse_birth_date(birth_date)
    day = d.day + FEMALE_OFFSET if sex is Sex.FEMALE else d.day
    return f"{d.year % 100:02d}{MONTHS[d.month - 1]}{day:02d}"


def resolve_century(yy: int, pivot: Optional[int] = None, today: Optional[date] = None) -> int:
    """
    Anno a 4 cifre da quello a 2 cifre del codice.
    yy <= pivot -> 2000 + yy, altrimenti 1900 + yy. Senza pivot esplicito si usa
    l'anno corrente, quindi nessuna data di nascita cade nel futuro.
    """
    if pivot is None:
        pivot = (today or date.today()).year % 100
    return 2000 + yy if yy <= pivot else 1900 + yy


def decode_birth_date(
    code: str,
    *,
    century_pivot: Optional[int] = None,
    today: Optional[date] = None,
) -> Tuple[date, Sex]:
    """
    Decodifica i 5 caratteri data/sesso (anno, mese, giorno) in (data, sesso).
    Le lettere di omocodia in anno e giorno sono ammesse.
    """
    code = (code or "").strip()
    if len(code) != 5:
        raise InvalidDate(code)
    year_code = resolve_digits(code[0:2])
    month_code = code[2].lower()
    day_code = resolve_digits(code[3:5])

    month = MONTHS.find(month_code) + 1
    if month < 1:
        raise InvalidMonth(code[2])
    if not _TWO_DIGITS.fullmatch(year_code):
        raise InvalidDate(code[0:2])
    if not _TWO_DIGITS.fullmatch(day_code):
        raise InvalidDay(code[3:5])

    day = int(day_code)
    sex = Sex.MALE
    if day > FEMALE_OFFSET:
        day -= FEMALE_OFFSET
        sex = Sex.FEMALE
    if not 1 <= day <= 31:
        raise InvalidDay(code[3:5])

    year = resolve_century(int(year_code), century_pivot, today)
    try:
        return date(year, month, day), sex
    except ValueError as exc:
        raise InvalidDay(code[3:5]) from exc
