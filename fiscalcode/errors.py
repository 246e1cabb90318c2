from __future__ import annotations

from typing import Optional


class FiscalCodeError(ValueError):
    """Errore di codifica/decodifica. `value` contiene il valore grezzo che l'ha causato."""

    message = "codice fiscale non valido"

    def __init__(self, value: object = None, message: Optional[str] = None) -> None:
        self.value = value
        if message is None:
            message = f"{self.message} '{value}'" if value is not None else self.message
        super().__init__(message)


class InvalidSex(FiscalCodeError):
    message = "sesso non valido"


class InvalidDate(FiscalCodeError):
    message = "data di nascita non valida"


class InvalidMonth(FiscalCodeError):
    message = "mese non valido"


class InvalidDay(FiscalCodeError):
    message = "giorno non valido"


class MalformedCode(FiscalCodeError):
    message = "formato del codice non valido"


class UnknownPlace(FiscalCodeError):
    message = "luogo di nascita non associato ad alcun codice"


class UnknownPlaceCode(FiscalCodeError):
    message = "codice non associato ad alcun comune o stato estero"


class ChecksumMismatch(FiscalCodeError):
    message = "carattere di controllo errato"

    def __init__(self, found: str, expected: str) -> None:
        self.found = found
        self.expected = expected
        super().__init__(found, f"{self.message}: trovato '{found}', atteso '{expected}'")


class InconsistentEncoding(RuntimeError):
    """Il codice appena generato non supera la propria decodifica."""

    def __init__(self, code: str, reason: str) -> None:
        self.code = code
        super().__init__(f"codice generato incoerente '{code}': {reason}")


class PlaceTableError(RuntimeError):
    """Download o parsing delle tabelle ISTAT non riuscito."""
