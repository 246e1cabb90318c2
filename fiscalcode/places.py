from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

import pandas as pd

from .logging import get_logger
from .text import normalize

log = get_logger(__name__)

BUNDLED_PLACES = Path(__file__).resolve().parent / "data" / "places.csv"

# Nomi colonne accettati (case-insensitive)
CODE_COLUMNS = ("code", "codice", "codice catastale", "codice belfiore")
NAME_COLUMNS = ("name", "nome", "denominazione", "luogo")


class PlaceRegistry:
    """
    Tabelle comuni/stati esteri: codice (4 caratteri) <-> denominazione.
    Costruita una volta e mai modificata: entrambe le mappe sono in sola lettura
    e l'istanza può essere condivisa liberamente tra thread.
    """

    def __init__(self, entries: Union[Mapping[str, str], Iterable[Tuple[str, str]]]) -> None:
        pairs = entries.items() if isinstance(entries, Mapping) else entries
        by_code: Dict[str, str] = {}
        by_slug: Dict[str, str] = {}
        for raw_code, raw_name in pairs:
            code = str(raw_code or "").strip().upper()
            name = str(raw_name or "").strip()
            if not code or not name:
                continue
            by_code[code] = name
            slug = normalize(name)
            if not slug:
                continue
            previous = by_slug.get(slug)
            if previous is not None and previous != code:
                # A parità di nome vince l'ultima riga (gli stati esteri seguono i comuni)
                log.debug("place_name_collision", slug=slug, replaced=previous, code=code)
            by_slug[slug] = code
        self.by_code: Mapping[str, str] = MappingProxyType(by_code)
        self.by_slug: Mapping[str, str] = MappingProxyType(by_slug)

    def code_for_place(self, place: str) -> Optional[str]:
        """Codice del luogo (ricerca esatta sullo slug del nome), None se assente."""
        return self.by_slug.get(normalize(place))

    def place_for_code(self, code: str) -> Optional[str]:
        """Denominazione registrata per il codice, None se assente."""
        return self.by_code.get(str(code or "").strip().upper())

    def __len__(self) -> int:
        return len(self.by_code)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip().upper() in self.by_code

    def __repr__(self) -> str:
        return f"PlaceRegistry({len(self)} places)"

    # ------------------------------------------------------------------
    # Caricamento/salvataggio CSV
    # ------------------------------------------------------------------

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "PlaceRegistry":
        code_col, name_col = _map_columns(df)
        return cls(zip(df[code_col].tolist(), df[name_col].tolist()))

    @classmethod
    def from_csv(cls, path: Union[str, Path]) -> "PlaceRegistry":
        df = pd.read_csv(path, encoding="utf-8-sig", dtype=str, keep_default_na=False)
        registry = cls.from_frame(df)
        log.info("place_registry_loaded", path=str(path), places=len(registry))
        return registry

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            sorted(self.by_code.items()),
            columns=["code", "name"],
        )

    def to_csv(self, path: Union[str, Path]) -> None:
        self.to_frame().to_csv(path, index=False, encoding="utf-8")


def _map_columns(df: pd.DataFrame) -> Tuple[str, str]:
    """Individua le colonne codice e nome. Gestisce BOM e spazi."""
    def norm(col: str) -> str:
        return str(col or "").strip().lstrip("\ufeff").lower()

    code_col: Optional[str] = None
    name_col: Optional[str] = None
    for raw_col in df.columns:
        c = norm(raw_col)
        if code_col is None and c in CODE_COLUMNS:
            code_col = raw_col
        elif name_col is None and c in NAME_COLUMNS:
            name_col = raw_col
    if not (code_col and name_col):
        raise ValueError("La tabella dei luoghi deve contenere le colonne 'code' e 'name'.")
    return code_col, name_col


@lru_cache(maxsize=8)
def _load_cached(path: str) -> PlaceRegistry:
    return PlaceRegistry.from_csv(path)


def load_registry(path: Union[str, Path, None] = None) -> PlaceRegistry:
    """
    Registro dei luoghi, caricato una sola volta per percorso.
    Priorità: argomento esplicito > FISCALCODE_PLACES_PATH > tabella inclusa nel pacchetto.
    """
    if path is None:
        from .settings import get_settings

        path = get_settings().PLACES_PATH or BUNDLED_PLACES
    return _load_cached(os.fspath(Path(path).resolve()))
