import logging

import pytest
import structlog

from fiscalcode.codec import FiscalCodeCodec
from fiscalcode.places import PlaceRegistry

PLACES = {
    "A285": "Andria",
    "E715": "Lucca",
    "F205": "Milano",
    "H501": "Roma",
    "L219": "Torino",
    "Z121": "Malta",
    "Z404": "Stati Uniti d'America",
}


@pytest.fixture
def registry():
    return PlaceRegistry(PLACES)


@pytest.fixture
def codec(registry):
    # pivot fisso: i test non dipendono dalla data corrente
    return FiscalCodeCodec(registry, century_pivot=30)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    structlog.reset_defaults()
    logger = logging.getLogger("fiscalcode")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
