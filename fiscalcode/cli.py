"""Interfaccia a riga di comando.

    fiscalcode encode Rossi Mario M 1999-12-13 Roma
    fiscalcode decode RSSMRA99T13H501A
    fiscalcode decode-csv clienti.csv --column CF -o decodificati.csv
    fiscalcode refresh-places
"""
from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from .batch import decode_csv, encode_csv
from .codec import FiscalCodeCodec, clean_code
from .errors import FiscalCodeError, PlaceTableError
from .istat import refresh
from .logging import setup_logging
from .omocodia import omocodic_variants
from .places import load_registry
from .settings import get_settings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fiscalcode", description="Codice fiscale delle persone fisiche")
    parser.add_argument("--places", default=None, help="CSV code,name da usare come registro dei luoghi")
    parser.add_argument("--century-pivot", type=int, default=None, help="anni a 2 cifre <= pivot -> 2000+")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("encode", help="calcola il codice fiscale")
    p.add_argument("surname")
    p.add_argument("given_name")
    p.add_argument("sex", help="M oppure F")
    p.add_argument("birth_date", help="YYYY-MM-DD")
    p.add_argument("birth_place", help="comune o stato estero")

    p = sub.add_parser("decode", help="verifica e decodifica un codice")
    p.add_argument("code")
    p.add_argument("--json", action="store_true")

    p = sub.add_parser("check", help="verifica un codice (exit status 0 se valido)")
    p.add_argument("code")

    p = sub.add_parser("variants", help="elenca i codici omocodici")
    p.add_argument("code")

    p = sub.add_parser("decode-csv", help="decodifica una colonna di codici da CSV")
    p.add_argument("path")
    p.add_argument("--column", default=None)
    p.add_argument("-o", "--output", default=None)

    p = sub.add_parser("encode-csv", help="calcola i codici di un CSV di persone")
    p.add_argument("path")
    p.add_argument("-o", "--output", default=None)

    p = sub.add_parser("refresh-places", help="rigenera la tabella dei luoghi dai dati ISTAT")
    p.add_argument("-o", "--output", default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(args.log_level or settings.LOG_LEVEL)

    if args.command == "refresh-places":
        try:
            registry = refresh(args.output, settings=settings)
        except PlaceTableError as exc:
            print(f"errore: {exc}", file=sys.stderr)
            return 1
        print(f"places={len(registry)}")
        return 0

    pivot = args.century_pivot if args.century_pivot is not None else settings.CENTURY_PIVOT
    codec = FiscalCodeCodec(load_registry(args.places), century_pivot=pivot)
    try:
        if args.command == "encode":
            print(codec.encode(args.surname, args.given_name, args.sex, args.birth_date, args.birth_place))
        elif args.command == "decode":
            person = codec.decode(args.code)
            payload = {
                "surname": person.surname,
                "given_name": person.given_name,
                "sex": person.sex.value,
                "birth_date": person.birth_date.isoformat(),
                "birth_place": person.birth_place,
            }
            if args.json:
                print(json.dumps(payload, ensure_ascii=False))
            else:
                for key, value in payload.items():
                    print(f"{key}: {value}")
        elif args.command == "check":
            codec.decode(args.code)
            print(f"{clean_code(args.code)}: valido")
        elif args.command == "variants":
            codec.decode(args.code)
            for variant in omocodic_variants(clean_code(args.code)):
                print(variant)
        elif args.command in ("decode-csv", "encode-csv"):
            if args.command == "decode-csv":
                df = decode_csv(args.path, args.column, codec)
            else:
                df = encode_csv(args.path, codec)
            if args.output:
                df.to_csv(args.output, index=False, encoding="utf-8")
            else:
                df.to_csv(sys.stdout, index=False)
    except FiscalCodeError as exc:
        print(f"errore: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        # colonne CSV mancanti
        print(f"errore: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
