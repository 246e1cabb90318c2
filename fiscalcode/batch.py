"""Elaborazione di molti codici/persone alla volta (colonne pandas e file CSV)."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from .checksum import ODDS
from .codec import FiscalCodeCodec, clean_code, default_codec
from .errors import FiscalCodeError
from .logging import get_logger

log = get_logger(__name__)

_ALNUM16 = re.compile(r"[A-Z0-9]{16}")

# Nomi colonne attesi (case-insensitive, italiano o inglese)
PERSON_COLUMNS: Dict[str, tuple] = {
    "surname": ("cognome", "surname"),
    "given_name": ("nome", "name", "given name", "given_name"),
    "sex": ("sesso", "sex"),
    "birth_date": ("data di nascita", "data nascita", "birth date", "birth_date"),
    "birth_place": ("luogo di nascita", "luogo nascita", "comune di nascita", "birth place", "birth_place"),
}
FISCAL_CODE_COLUMNS = ("codice fiscale", "codice_fiscale", "cf", "fiscal code", "fiscal_code", "code")

DECODED_COLUMNS = ["code", "surname", "given_name", "sex", "birth_date", "birth_place", "error"]


def _norm_col(col: str) -> str:
    x = str(col or "").strip().lstrip("\ufeff").lower()
    x = x.replace("\xa0", " ")
    if x.endswith(":"):
        x = x[:-1]
    return x


def check_chars_valid(codes: Iterable[str]) -> np.ndarray:
    """
    Verifica vettoriale del carattere di controllo.
    Restituisce un array booleano; i codici che non sono 16 caratteri alfanumerici risultano False.
    """
    cleaned = [clean_code(c) for c in codes]
    shape_ok = np.array([bool(_ALNUM16.fullmatch(c)) for c in cleaned], dtype=bool)
    result = np.zeros(len(cleaned), dtype=bool)
    if not shape_ok.any():
        return result

    rows = "".join(c for c, ok in zip(cleaned, shape_ok) if ok)
    chars = np.frombuffer(rows.encode("ascii"), dtype=np.uint8).reshape(-1, 16).astype(np.int64)
    # '0'-'9' -> 0-9, 'A'-'Z' -> 0-25
    ords = np.where(chars >= ord("A"), chars - ord("A"), chars - ord("0"))
    odd_sum = np.asarray(ODDS)[ords[:, 0:15:2]].sum(axis=1)
    even_sum = ords[:, 1:15:2].sum(axis=1)
    expected = (odd_sum + even_sum) % len(ODDS) + ord("A")
    result[shape_ok] = expected == chars[:, 15]
    return result


def decode_series(codes: pd.Series, codec: Optional[FiscalCodeCodec] = None) -> pd.DataFrame:
    """Decodifica una colonna di codici; gli errori vengono riportati riga per riga nella colonna 'error'."""
    codec = codec or default_codec()
    records: List[dict] = []
    for raw in codes.tolist():
        rec = {col: "" for col in DECODED_COLUMNS}
        rec["code"] = clean_code(raw)
        try:
            p = codec.decode(raw)
        except FiscalCodeError as exc:
            rec["error"] = str(exc)
        else:
            rec.update(
                surname=p.surname,
                given_name=p.given_name,
                sex=p.sex.value,
                birth_date=p.birth_date.isoformat(),
                birth_place=p.birth_place,
            )
        records.append(rec)
    out = pd.DataFrame(records, columns=DECODED_COLUMNS, index=codes.index)
    log.info("batch_decoded", rows=len(out), errors=int((out["error"] != "").sum()))
    return out


def _cell(value: object) -> str:
    return "" if pd.isna(value) else str(value)


def _map_person_columns(df: pd.DataFrame) -> Dict[str, str]:
    found: Dict[str, str] = {}
    for raw_col in df.columns:
        norm = _norm_col(raw_col)
        for field, aliases in PERSON_COLUMNS.items():
            if field not in found and norm in aliases:
                found[field] = raw_col
                break
    missing = [f for f in PERSON_COLUMNS if f not in found]
    if missing:
        raise ValueError(
            "Il CSV deve contenere: 'Cognome', 'Nome', 'Sesso', 'Data di nascita' (YYYY-MM-DD) "
            f"e 'Luogo di nascita'. Mancano: {', '.join(missing)}"
        )
    return found


def encode_frame(df: pd.DataFrame, codec: Optional[FiscalCodeCodec] = None) -> pd.DataFrame:
    """Aggiunge a una tabella di persone le colonne 'fiscal_code' ed 'error'."""
    codec = codec or default_codec()
    cols = _map_person_columns(df)
    codes: List[str] = []
    errors: List[str] = []
    for _, row in df.iterrows():
        try:
            code = codec.encode(
                _cell(row[cols["surname"]]),
                _cell(row[cols["given_name"]]),
                _cell(row[cols["sex"]]),
                _cell(row[cols["birth_date"]]).strip(),
                _cell(row[cols["birth_place"]]),
            )
        except FiscalCodeError as exc:
            codes.append("")
            errors.append(str(exc))
        else:
            codes.append(code)
            errors.append("")
    out = df.copy()
    out["fiscal_code"] = codes
    out["error"] = errors
    log.info("batch_encoded", rows=len(out), errors=sum(1 for e in errors if e))
    return out


def _read_csv(path: Union[str, Path]) -> pd.DataFrame:
    return pd.read_csv(path, encoding="utf-8-sig", dtype=str, keep_default_na=False)


def decode_csv(
    path: Union[str, Path],
    column: Optional[str] = None,
    codec: Optional[FiscalCodeCodec] = None,
) -> pd.DataFrame:
    """Legge un CSV e decodifica la colonna dei codici (individuata automaticamente se non indicata)."""
    df = _read_csv(path)
    if column is None:
        column = next((c for c in df.columns if _norm_col(c) in FISCAL_CODE_COLUMNS), None)
        if column is None:
            raise ValueError("Il CSV deve contenere una colonna 'Codice fiscale' (oppure indicare --column).")
    elif column not in df.columns:
        raise ValueError(f"Colonna '{column}' non presente nel CSV.")
    return decode_series(df[column], codec)


def encode_csv(path: Union[str, Path], codec: Optional[FiscalCodeCodec] = None) -> pd.DataFrame:
    return encode_frame(_read_csv(path), codec)
