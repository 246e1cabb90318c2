from __future__ import annotations

import re
import unicodedata
from typing import Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize(text: Optional[str], separator: str = "-") -> str:
    """Riduce un testo libero (nomi, comuni, stati) a uno slug ASCII minuscolo.

    Accenti e segni diacritici vengono ricondotti alla lettera base, ogni
    sequenza di caratteri non alfanumerici diventa un solo separatore e i
    separatori in testa/coda vengono eliminati. Non fallisce mai: "" e None
    producono "".
    """
    if text is None:
        return ""
    folded = unicodedata.normalize("NFKD", str(text))
    ascii_only = "".join(ch for ch in folded if not unicodedata.combining(ch))
    ascii_only = ascii_only.encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub(separator, ascii_only.lower()).strip(separator)


def compact(text: Optional[str]) -> str:
    """Slug senza separatori ("rss mra-99" -> "rssmra99")."""
    return normalize(text, separator="")
