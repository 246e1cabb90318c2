"""Carattere di controllo (CIN) del codice fiscale.

Ogni carattere dei primi 15 ha un valore ordinale ('0'-'9' -> 0-9, 'A'-'Z' -> 0-25).
I caratteri in posizione dispari (1a, 3a, ... 15a) passano per la tabella
ODDS, quelli in posizione pari contribuiscono con il proprio ordinale. La somma
modulo 26 indica la lettera di controllo.
"""
from __future__ import annotations

import re
from typing import Tuple

from .errors import MalformedCode

BODY_LENGTH = 15

# Tabella dei valori dei caratteri in posizione dispari (DM 12/03/1974), indicizzata per ordinale
ODDS: Tuple[int, ...] = (
    1, 0, 5, 7, 9, 13, 15, 17, 19, 21, 2, 4, 18, 20, 11, 3, 6, 8, 12, 14, 16, 10, 22, 25, 24, 23,
)

_BODY_RE = re.compile(r"[A-Z0-9]{15}")


def ordinal(char: str) -> int:
    c = char.upper()
    if c.isdigit():
        return ord(c) - ord("0")
    return ord(c) - ord("A")


def compute_check_char(body: str) -> str:
    """Calcola il 16° carattere a partire dai primi 15."""
    body = (body or "").upper()
    if not _BODY_RE.fullmatch(body):
        raise MalformedCode(body, f"servono 15 caratteri alfanumerici, ricevuto '{body}'")
    total = 0
    for i, ch in enumerate(body):
        if i % 2 == 0:
            total += ODDS[ordinal(ch)]
        else:
            total += ordinal(ch)
    return chr(ord("A") + total % len(ODDS))


def verify(code: str) -> bool:
    """True se il 16° carattere corrisponde a quello calcolato. Non corregge nulla."""
    code = (code or "").upper()
    if len(code) != BODY_LENGTH + 1:
        return False
    try:
        return compute_check_char(code[:BODY_LENGTH]) == code[BODY_LENGTH]
    except MalformedCode:
        return False
