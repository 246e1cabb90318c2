"""Codifica e decodifica del codice fiscale delle persone fisiche.

Formato (16 caratteri):
    RSS MRA 99 T 13 H501 A
    cognome, nome, anno, mese, giorno (+40 donne), luogo, controllo

`encode` compone i campi e verifica il risultato decodificandolo di nuovo;
`decode` controlla la grammatica, risolve l'omocodia, ricostruisce data e
sesso, cerca il luogo e per ultimo verifica il carattere di controllo.
"""
from __future__ import annotations

import re
from datetime import date
from functools import lru_cache
from typing import Optional, Union


from .checksum import compute_check_char
from .dates import MONTHS, decode_birth_date, encode_birth_date
from .errors import ChecksumMismatch, FiscalCodeError, InconsistentEncoding, MalformedCode, UnknownPlace, UnknownPlaceCode
from .logging import get_logger
from .models import CodeFields, Person, Sex
from .names import encode_name, encode_surname
from .omocodia import OMOCODIA, resolve_digits
from .places import PlaceRegistry, load_registry
from .text import compact

log = get_logger(__name__)

_NUM = f"[0-9{OMOCODIA}]"
GRAMMAR = re.compile(
    rf"([A-Z]{{3}})([A-Z]{{3}})({_NUM}{{2}})([{MONTHS.upper()}])({_NUM}{{2}})([A-Z]{_NUM}{{3}})([A-Z])"
)


def clean_code(code: Optional[str]) -> str:
    """Maiuscolo, senza spazi né separatori ("rss-mra 99..." -> "RSSMRA99...")."""
    return compact(code).upper()


def parse_code(code: Optional[str]) -> CodeFields:
    """Scompone il codice nei sette campi; MalformedCode se non rispetta la grammatica."""
    m = GRAMMAR.fullmatch(clean_code(code))
    if not m:
        raise MalformedCode(code)
    return CodeFields(*m.groups())


class FiscalCodeCodec:
    """Codec legato a un registro dei luoghi (immutabile, condivisibile tra thread)."""

    def __init__(self, registry: Optional[PlaceRegistry] = None, century_pivot: Optional[int] = None) -> None:
        self.registry = registry if registry is not None else load_registry()
        self.century_pivot = century_pivot

    def encode(
        self,
        surname: str,
        given_name: str,
        sex: Union[Sex, str],
        birth_date: Union[date, str],
        birth_place: str,
    ) -> str:
        date_code = encode_birth_date(birth_date, sex)
        place_code = self.registry.code_for_place(birth_place)
        if place_code is None:
            raise UnknownPlace(birth_place)
        body = (encode_surname(surname) + encode_name(given_name) + date_code).upper() + place_code
        code = body + compute_check_char(body)
        self._assert_consistent(code, date_code.upper(), place_code)
        return code

    def encode_person(self, person: Person) -> str:
        return self.encode(person.surname, person.given_name, person.sex, person.birth_date, person.birth_place)

    def decode(self, code: str) -> Person:
        fields = parse_code(code)
        birth_date, sex = decode_birth_date(
            fields.year + fields.month + fields.day, century_pivot=self.century_pivot
        )
        place_code = fields.place[0] + resolve_digits(fields.place[1:])
        birth_place = self.registry.place_for_code(place_code)
        if birth_place is None:
            raise UnknownPlaceCode(place_code)
        expected = compute_check_char(fields.body)
        if fields.check != expected:
            raise ChecksumMismatch(fields.check, expected)
        return Person(
            surname=fields.surname,
            given_name=fields.name,
            sex=sex,
            birth_date=birth_date,
            birth_place=birth_place,
        )

    def is_valid(self, code: str) -> bool:
        try:
            self.decode(code)
        except FiscalCodeError:
            return False
        return True

    def _assert_consistent(self, code: str, date_code: str, place_code: str) -> None:
        # Il codice prodotto deve decodificarsi nella stessa data/sesso e nello stesso luogo
        try:
            person = self.decode(code)
        except FiscalCodeError as exc:
            log.error("inconsistent_encoding", code=code, error=str(exc))
            raise InconsistentEncoding(code, str(exc)) from exc
        redecoded = encode_birth_date(person.birth_date, person.sex).upper()
        if redecoded != date_code:
            log.error("inconsistent_encoding", code=code, expected=date_code, got=redecoded)
            raise InconsistentEncoding(code, f"data/sesso '{redecoded}' invece di '{date_code}'")
        expected_place = self.registry.place_for_code(place_code)
        if person.birth_place != expected_place:
            log.error("inconsistent_encoding", code=code, expected=expected_place, got=person.birth_place)
            raise InconsistentEncoding(code, f"luogo '{person.birth_place}' invece di '{expected_place}'")


@lru_cache(maxsize=1)
def default_codec() -> FiscalCodeCodec:
    """Codec sul registro predefinito, creato alla prima chiamata."""
    from .settings import get_settings

    return FiscalCodeCodec(load_registry(), century_pivot=get_settings().CENTURY_PIVOT)


def encode(
    surname: str,
    given_name: str,
    sex: Union[Sex, str],
    birth_date: Union[date, str],
    birth_place: str,
    *,
    codec: Optional[FiscalCodeCodec] = None,
) -> str:
    """Calcola il codice fiscale. birth_date: date o "YYYY-MM-DD"; sex: "M"/"F"."""
    return (codec or default_codec()).encode(surname, given_name, sex, birth_date, birth_place)


def decode(code: str, *, codec: Optional[FiscalCodeCodec] = None) -> Person:
    """Verifica il codice e restituisce la Person corrispondente."""
    return (codec or default_codec()).decode(code)


def is_valid(code: str, *, codec: Optional[FiscalCodeCodec] = None) -> bool:
    return (codec or default_codec()).is_valid(code)
