from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple, Optional, Union

from .errors import InvalidSex

if TYPE_CHECKING:
    from .codec import FiscalCodeCodec


class Sex(str, Enum):
    MALE = "M"
    FEMALE = "F"

    @classmethod
    def parse(cls, value: object) -> "Sex":
        """Accetta un Sex oppure "m"/"f" (qualsiasi maiuscola); altrimenti InvalidSex."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            v = value.strip().upper()
            if v == "M":
                return cls.MALE
            if v == "F":
                return cls.FEMALE
        raise InvalidSex(value)


class CodeFields(NamedTuple):
    """I sette campi di un codice fiscale, così come compaiono nel codice."""
    surname: str    # 3 lettere
    name: str       # 3 lettere
    year: str       # 2 cifre (o lettere di omocodia)
    month: str      # 1 lettera in ABCDEHLMPRST
    day: str        # 2 cifre (+40 per le donne)
    place: str      # lettera + 3 cifre
    check: str      # carattere di controllo

    @property
    def body(self) -> str:
        return "".join(self[:6])

    def __str__(self) -> str:
        return "".join(self)


@dataclass(frozen=True)
class Person:
    surname: str
    given_name: str
    sex: Union[Sex, str]
    birth_date: Union[date, str]    # date oppure "YYYY-MM-DD"
    birth_place: str                # comune italiano o stato estero (in italiano)

    def fiscal_code(self, codec: Optional["FiscalCodeCodec"] = None) -> str:
        """Calcola il codice fiscale della persona."""
        from .codec import default_codec

        return (codec or default_codec()).encode_person(self)

    @classmethod
    def from_fiscal_code(cls, code: str, codec: Optional["FiscalCodeCodec"] = None) -> "Person":
        """Verifica il codice e ne ricava i dati anagrafici (cognome e nome restano le 3 lettere del codice)."""
        from .codec import default_codec

        return (codec or default_codec()).decode(code)
