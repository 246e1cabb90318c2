"""Omocodia: sostituzione delle cifre con lettere per distinguere codici altrimenti identici."""
from __future__ import annotations

from typing import Iterator

from .checksum import BODY_LENGTH, compute_check_char
from .errors import MalformedCode

OMOCODIA = "LMNPQRSTUV"  # L=0, M=1, ..., V=9

# Posizioni (0-based) che ammettono lettere, nell'ordine in cui vengono sostituite (da destra)
SUBSTITUTION_ORDER = (14, 13, 12, 10, 9, 7, 6)
NUMERIC_POSITIONS = tuple(sorted(SUBSTITUTION_ORDER))

_TO_DIGIT = str.maketrans(OMOCODIA, "0123456789")
_TO_LETTER = str.maketrans("0123456789", OMOCODIA)


def resolve_digits(chars: str) -> str:
    """Sostituisce le lettere di omocodia con le cifre corrispondenti; le cifre restano invariate."""
    return (chars or "").upper().translate(_TO_DIGIT)


def resolve(code: str) -> str:
    """Riporta a cifre anno, giorno e le ultime 3 posizioni del codice del luogo."""
    code = (code or "").upper()
    if len(code) not in (BODY_LENGTH, BODY_LENGTH + 1):
        raise MalformedCode(code)
    chars = list(code)
    for pos in NUMERIC_POSITIONS:
        chars[pos] = resolve_digits(chars[pos])
    return "".join(chars)


def omocodic_variants(code: str) -> Iterator[str]:
    """
    Genera i 7 codici omocodici di `code`, nell'ordine ufficiale: ciascuno
    sostituisce una posizione in più del precedente, partendo dall'ultima cifra
    del luogo. Il carattere di controllo viene ricalcolato ogni volta.
    """
    base = list(resolve(code)[:BODY_LENGTH])
    for pos in SUBSTITUTION_ORDER:
        base[pos] = base[pos].translate(_TO_LETTER)
        body = "".join(base)
        yield body + compute_check_char(body)
