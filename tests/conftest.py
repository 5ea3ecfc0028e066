"""Shared test fixtures for brewguard."""

import tempfile
from pathlib import Path

import pytest

from brewguard.extract.models import CandidateBeer, CandidateBrewery, CanonicalBrewery


@pytest.fixture
def canonical() -> list[CanonicalBrewery]:
    """Small canonical brewery snapshot."""
    return [
        CanonicalBrewery(
            id="b1",
            name="Birrificio Viana",
            website="https://www.birrificioviana.it",
            email="info@birrificioviana.it",
            legal_address="Via Roma 12, 24020 Gorle (BG)",
            products=[{"id": "p1", "name": "Viana Bionda", "style": "Lager"}],
        ),
        CanonicalBrewery(
            id="b2",
            name="Heineken",
            website="https://www.heineken.com/",
            email="contact@heineken.com",
        ),
        CanonicalBrewery(
            id="b3",
            name="Birra Moretti",
            website="https://birramoretti.it",
            legal_address="Viale Monza 98, Milano",
            products=[
                {"id": "p2", "name": "Moretti La Rossa", "style": "Doppelbock"},
                {"id": "p3", "name": "Moretti Baffo d'Oro"},
            ],
        ),
        CanonicalBrewery(id="b4", name="Brewdog", website="https://www.brewdog.com"),
    ]


@pytest.fixture
def rich_brewery() -> CandidateBrewery:
    """A verified, well-documented brewery that is not in the canonical snapshot."""
    return CandidateBrewery.model_validate({
        "id": "c1",
        "labelName": "Birrificio del Ducato",
        "verification": "VERIFIED",
        "confidence": 0.95,
        "verifiedData": {
            "breweryName": "Birrificio del Ducato",
            "breweryWebsite": "https://www.birrificiodelducato.it",
            "breweryEmail": "info@birrificiodelducato.it",
            "breweryPhoneNumber": "+39 0524 573176",
            "breweryLegalAddress": "Via Strada Argine 43, Roncole Verdi (PR)",
            "breweryDescription": "Craft brewery founded near Busseto, known for barrel aged sour beers.",
            "foundingYear": "Dal 2007",
        },
        "webVerification": {
            "dataMatch": "VERIFIED",
            "sourcesFound": ["https://www.birrificiodelducato.it/chi-siamo"],
        },
    })


@pytest.fixture
def simple_beer() -> CandidateBeer:
    """A beer with a name and a little label detail."""
    return CandidateBeer.model_validate({
        "id": "beer1",
        "labelData": {"beerName": "Viæ Emilia"},
        "verifiedData": {"beerName": "Via Emilia", "alcoholContent": "5%", "beerType": "Pils"},
    })


@pytest.fixture
def tmp_dir():
    """Temporary directory that cleans up after test."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)
