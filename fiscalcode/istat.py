"""Costruzione della tabella dei luoghi dai file pubblicati dall'ISTAT.

- Comuni italiani: CSV separato da ';' (latin-1), codice catastale in colonna 18, nome in colonna 5
- Stati esteri: ZIP contenente un CSV, codice in colonna 9, nome in colonna 6

Il risultato è un CSV "code,name" leggibile da PlaceRegistry.from_csv. Qui e solo
qui avviene I/O di rete: il codec lavora sempre sul registro già caricato.
"""
from __future__ import annotations

import io
import re
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import httpx
import pandas as pd

from . import places
from .codec import default_codec
from .errors import PlaceTableError
from .logging import get_logger
from .places import BUNDLED_PLACES, PlaceRegistry
from .settings import Settings, get_settings

log = get_logger(__name__)

MUNICIPALITY_CODE_COL = 18
MUNICIPALITY_NAME_COL = 5
COUNTRY_CODE_COL = 9
COUNTRY_NAME_COL = 6

_PLACE_CODE = re.compile(r"[A-Z][0-9]{3}")


def fetch(url: str, client: httpx.Client) -> bytes:
    """Scarica `url` e ne restituisce il contenuto grezzo."""
    try:
        response = client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise PlaceTableError(f"download non riuscito: {url}") from exc
    log.info("istat_downloaded", url=url, size=len(response.content))
    return response.content


def extract_csv(archive: bytes) -> bytes:
    """Primo file .csv contenuto nell'archivio ZIP."""
    try:
        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            for name in zf.namelist():
                if name.lower().endswith(".csv"):
                    return zf.read(name)
    except zipfile.BadZipFile as exc:
        raise PlaceTableError("archivio ZIP non valido") from exc
    raise PlaceTableError("nessun file CSV degli stati esteri nell'archivio")


def parse_table(body: bytes, code_col: int, name_col: int) -> pd.DataFrame:
    """
    Estrae (code, name) da un CSV ISTAT. Le righe senza un codice valido
    (vuoto, "n.d.", ...) vengono scartate.
    """
    try:
        df = pd.read_csv(
            io.BytesIO(body),
            sep=";",
            encoding="latin-1",
            dtype=str,
            keep_default_na=False,
            header=0,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise PlaceTableError("CSV ISTAT non leggibile") from exc
    if df.shape[1] <= max(code_col, name_col):
        raise PlaceTableError(
            f"CSV ISTAT con {df.shape[1]} colonne: attese almeno {max(code_col, name_col) + 1}"
        )
    out = pd.DataFrame({
        "code": df.iloc[:, code_col].str.strip().str.upper(),
        "name": df.iloc[:, name_col].str.strip(),
    })
    valid = out["code"].str.fullmatch(_PLACE_CODE.pattern) & (out["name"] != "")
    return out[valid].reset_index(drop=True)


def build_table(municipalities: bytes, countries_archive: bytes) -> pd.DataFrame:
    """Comuni seguiti dagli stati esteri (in caso di omonimia prevale lo stato)."""
    comuni = parse_table(municipalities, MUNICIPALITY_CODE_COL, MUNICIPALITY_NAME_COL)
    stati = parse_table(extract_csv(countries_archive), COUNTRY_CODE_COL, COUNTRY_NAME_COL)
    log.info("istat_parsed", municipalities=len(comuni), countries=len(stati))
    return pd.concat([comuni, stati], ignore_index=True)


def refresh(
    path: Union[str, Path, None] = None,
    *,
    settings: Optional[Settings] = None,
    client: Optional[httpx.Client] = None,
) -> PlaceRegistry:
    """
    Scarica le tabelle ISTAT, le scrive in `path` e restituisce il registro.
    Senza `path` si usa FISCALCODE_PLACES_PATH, altrimenti la tabella del pacchetto.
    """
    settings = settings or get_settings()
    target = Path(path or settings.PLACES_PATH or BUNDLED_PLACES)
    own_client = client is None
    if own_client:
        client = httpx.Client(timeout=httpx.Timeout(settings.HTTP_TIMEOUT), follow_redirects=True)
    try:
        municipalities = fetch(settings.ISTAT_MUNICIPALITIES_URL, client)
        countries = fetch(settings.ISTAT_COUNTRIES_URL, client)
    finally:
        if own_client:
            client.close()

    registry = PlaceRegistry.from_frame(build_table(municipalities, countries))
    target.parent.mkdir(parents=True, exist_ok=True)
    registry.to_csv(target)
    # i registri già caricati (e il codec predefinito) devono rileggere la tabella
    places._load_cached.cache_clear()
    default_codec.cache_clear()
    log.info("place_table_written", path=str(target), places=len(registry), created_on=datetime.now().isoformat())
    return registry
