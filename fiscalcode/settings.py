"""Parametri di configurazione del codec.

I valori arrivano dall'ambiente (prefisso ``FISCALCODE_``) o da un file ``.env``
nella directory corrente; ``ENV_FILE`` permette di indicarne uno esplicito.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_FILE_PATH = os.getenv("ENV_FILE") or Path.cwd() / ".env"

ISTAT_MUNICIPALITIES_URL = "https://www.istat.it/storage/codici-unita-amministrative/Elenco-comuni-italiani.csv"
ISTAT_COUNTRIES_URL = (
    "https://www.istat.it/it/files//2011/01/Elenco-codici-e-denominazioni-unita-territoriali-estere.zip"
)


class Settings(BaseSettings):
    """Configurazione caricata da ambiente e .env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_prefix="FISCALCODE_",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    # CSV "code,name" da usare al posto della tabella inclusa nel pacchetto
    PLACES_PATH: Optional[Path] = None
    # anni a due cifre <= pivot -> 2000+, altrimenti 1900+ (None: anno corrente)
    CENTURY_PIVOT: Optional[int] = Field(default=None, ge=0, le=99)
    LOG_LEVEL: str = "WARNING"

    ISTAT_MUNICIPALITIES_URL: str = ISTAT_MUNICIPALITIES_URL
    ISTAT_COUNTRIES_URL: str = ISTAT_COUNTRIES_URL
    HTTP_TIMEOUT: float = 30.0


def get_settings() -> Settings:
    """Costruisce e restituisce la configurazione corrente."""
    return Settings()
