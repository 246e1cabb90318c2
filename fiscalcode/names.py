from __future__ import annotations

from .text import normalize

VOWELS = "aeiou"
CONSONANTS = "bcdfghjklmnpqrstvwxyz"
FILLER = "x"


def _subset(slug: str, alphabet: str) -> str:
    return "".join(ch for ch in slug if ch in alphabet)


def _indicative_chars(consonants: str, vowels: str) -> str:
    """Prime 3 consonanti, poi le vocali, poi riempimento con 'x'."""
    return (consonants + vowels + FILLER * 3)[:3]


def encode_surname(surname: str) -> str:
    """Tre caratteri (minuscoli) del cognome."""
    slug = normalize(surname)
    return _indicative_chars(_subset(slug, CONSONANTS), _subset(slug, VOWELS))


def encode_name(name: str) -> str:
    """
    Tre caratteri (minuscoli) del nome.
    Con più di 3 consonanti si usano la 1a, la 3a e la 4a: la seconda viene scartata.
    """
    slug = normalize(name)
    consonants = _subset(slug, CONSONANTS)
    if len(consonants) > 3:
        consonants = consonants[:1] + consonants[2:]
    return _indicative_chars(consonants, _subset(slug, VOWELS))
