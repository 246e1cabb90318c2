import io
import zipfile

import httpx
import pytest

from fiscalcode.errors import PlaceTableError
from fiscalcode.istat import build_table, extract_csv, fetch, parse_table, refresh
from fiscalcode.places import PlaceRegistry, load_registry
from fiscalcode.settings import Settings

COMUNI_URL = "https://istat.example/comuni.csv"
STATI_URL = "https://istat.example/stati.zip"


def _istat_csv(rows, code_col, name_col, width):
    lines = [";".join(f"col{i}" for i in range(width))]
    for code, name in rows:
        fields = [""] * width
        fields[code_col] = code
        fields[name_col] = name
        lines.append(";".join(fields))
    return ("\n".join(lines) + "\n").encode("latin-1")


def _comuni():
    return _istat_csv([("H501", "Roma"), ("D704", "Forlì"), ("", "Senza codice")], 18, 5, 20)


def _stati_zip(csv_name="Elenco-stati.csv"):
    body = _istat_csv([("Z121", "Malta"), ("n.d.", "Territorio non definito"), ("Z404", "Stati Uniti d'America")], 9, 6, 12)
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("LEGGIMI.txt", "note")
        zf.writestr(csv_name, body)
    return buf.getvalue()


def test_parse_table_keeps_only_valid_codes():
    df = parse_table(_comuni(), 18, 5)
    assert list(df["code"]) == ["H501", "D704"]
    assert list(df["name"]) == ["Roma", "Forlì"]


def test_parse_table_skips_codes_with_letters_after_the_first():
    body = _istat_csv([("Z1L2", "Non valido"), ("E506", "Lecce")], 18, 5, 20)
    assert list(parse_table(body, 18, 5)["code"]) == ["E506"]


def test_parse_table_rejects_too_few_columns():
    with pytest.raises(PlaceTableError):
        parse_table(b"a;b\n1;2\n", 18, 5)


def test_extract_csv_from_archive():
    assert b"Malta" in extract_csv(_stati_zip())
    with pytest.raises(PlaceTableError):
        extract_csv(b"not a zip")
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("LEGGIMI.txt", "note")
    with pytest.raises(PlaceTableError):
        extract_csv(buf.getvalue())


def test_build_table_appends_countries_after_municipalities():
    df = build_table(_comuni(), _stati_zip())
    assert list(df["code"]) == ["H501", "D704", "Z121", "Z404"]
    reg = PlaceRegistry.from_frame(df)
    assert reg.code_for_place("forli") == "D704"
    assert reg.place_for_code("Z404") == "Stati Uniti d'America"


def _client(routes):
    def handler(request: httpx.Request) -> httpx.Response:
        body = routes.get(str(request.url))
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, content=body)

    return httpx.Client(transport=httpx.MockTransport(handler))


def test_fetch_raises_on_http_errors():
    with _client({}) as client:
        with pytest.raises(PlaceTableError):
            fetch(COMUNI_URL, client)


def test_refresh_writes_table(tmp_path):
    settings = Settings(ISTAT_MUNICIPALITIES_URL=COMUNI_URL, ISTAT_COUNTRIES_URL=STATI_URL)
    target = tmp_path / "places.csv"
    with _client({COMUNI_URL: _comuni(), STATI_URL: _stati_zip()}) as client:
        registry = refresh(target, settings=settings, client=client)

    assert len(registry) == 4
    reloaded = PlaceRegistry.from_csv(target)
    assert reloaded.place_for_code("H501") == "Roma"
    assert reloaded.code_for_place("Malta") == "Z121"


def test_refresh_defaults_to_configured_places_path(tmp_path):
    target = tmp_path / "luoghi" / "places.csv"
    settings = Settings(PLACES_PATH=target, ISTAT_MUNICIPALITIES_URL=COMUNI_URL, ISTAT_COUNTRIES_URL=STATI_URL)
    with _client({COMUNI_URL: _comuni(), STATI_URL: _stati_zip()}) as client:
        refresh(settings=settings, client=client)

    assert PlaceRegistry.from_csv(target).place_for_code("D704") == "Forlì"


def test_refresh_invalidates_loaded_registries(tmp_path):
    target = tmp_path / "places.csv"
    target.write_text("code,name\nE506,Lecce\n", encoding="utf-8")
    before = load_registry(target)
    assert before.place_for_code("H501") is None

    settings = Settings(ISTAT_MUNICIPALITIES_URL=COMUNI_URL, ISTAT_COUNTRIES_URL=STATI_URL)
    with _client({COMUNI_URL: _comuni(), STATI_URL: _stati_zip()}) as client:
        refresh(target, settings=settings, client=client)

    after = load_registry(target)
    assert after is not before
    assert after.place_for_code("H501") == "Roma"
    assert after.place_for_code("E506") is None
