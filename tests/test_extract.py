"""Tests for brewguard.extract (models, file I/O, canonical sources)."""

import json

import pytest
import yaml
from pydantic import ValidationError

from brewguard.extract.io import FileCanonicalSource, read_canonical, read_extraction, write_outcome
from brewguard.extract.models import (
    AIExtraction,
    BeerFields,
    BreweryFields,
    CandidateBeer,
    CandidateBrewery,
    CanonicalBrewery,
    WebVerification,
)
from brewguard.extract.sources import StaticCanonicalSource
from brewguard.validate.models import ValidationOutcome

RAW_EXTRACTION = {
    "breweries": [
        {
            "id": 1,
            "labelName": "Birrificio Viana",
            "verification": "verified",
            "confidence": 0.92,
            "verifiedData": {
                "breweryName": "Birrificio Indipendente Viana",
                "breweryWebsite": "https://www.birrificioviana.it",
                "breweryEmail": "",
                "foundingYear": "Dal 1996",
                "brewerySocialMedia": {"facebook": "https://facebook.com/viana", "instagram": ""},
                "breweryProducts": [{"beerName": "Viana Bionda"}, "Viana Rossa", {"beerName": ""}],
            },
            "webVerification": {"dataMatch": "verified", "sourcesFound": ["https://birrificioviana.it"]},
        }
    ],
    "bottles": [
        {
            "labelData": {"beerName": "Bionda", "breweryName": "Birrificio Viana"},
            "verifiedData": {"beerName": "Viana Bionda", "alcoholContent": 5.2, "beerType": "Lager"},
        }
    ],
}


class TestCandidateModels:
    """Test lenient parsing of AI output."""

    def test_camel_case_brewery(self):
        extraction = AIExtraction.model_validate(RAW_EXTRACTION)
        brewery = extraction.breweries[0]
        assert brewery.id == "1"
        assert brewery.verification == "VERIFIED"
        assert brewery.name == "Birrificio Indipendente Viana"
        assert brewery.label_name == "Birrificio Viana"
        fields = brewery.verified_data
        assert fields.email is None
        assert fields.founding_year == 1996
        assert fields.social_links == {"facebook": "https://facebook.com/viana"}
        assert fields.products == ["Viana Bionda", "Viana Rossa"]
        assert brewery.web_verification.data_match == "VERIFIED"

    def test_bottles_alias(self):
        extraction = AIExtraction.model_validate(RAW_EXTRACTION)
        beer = extraction.beers[0]
        assert beer.name == "Viana Bionda"
        assert beer.verified_data.alcohol_content == "5.2"
        assert beer.verified_data.style == "Lager"
        assert beer.claimed_brewery_names() == ["Birrificio Viana"]

    def test_name_falls_back_to_label(self):
        brewery = CandidateBrewery.model_validate({"labelName": "Viana", "verifiedData": {"breweryName": "  "}})
        assert brewery.name == "Viana"
        assert brewery.effective_fields().name == "Viana"
        assert brewery.verified_data.name is None

    def test_missing_verification_is_unverified(self):
        assert CandidateBrewery.model_validate({"verification": None}).verification == "UNVERIFIED"
        assert CandidateBrewery().verification == "UNVERIFIED"

    def test_unknown_verification_rejected(self):
        with pytest.raises(ValidationError):
            CandidateBrewery.model_validate({"verification": "MAYBE"})

    def test_confidence_range(self):
        with pytest.raises(ValidationError):
            CandidateBrewery.model_validate({"confidence": 1.5})

    def test_null_blocks(self):
        beer = CandidateBeer.model_validate({"verifiedData": None, "labelData": None, "webVerification": None})
        assert beer.name is None
        assert beer.claimed_brewery_names() == []

    def test_beer_name_from_label(self):
        beer = CandidateBeer.model_validate({"labelData": {"beerName": "Bionda"}})
        assert beer.effective_fields().name == "Bionda"

    def test_web_verification_defaults(self):
        web = WebVerification.model_validate({"sourcesFound": None})
        assert web.data_match is None
        assert web.sources_found == []

    def test_founding_year_without_year(self):
        assert BreweryFields.model_validate({"foundingYear": "long ago"}).founding_year is None

    def test_beer_fields_snake_case(self):
        fields = BeerFields(name="A", brewery_name="B", volume=33)
        assert fields.volume == "33"

    def test_canonical_mongo_id(self):
        brewery = CanonicalBrewery.model_validate({
            "_id": 42,
            "breweryName": "Heineken",
            "breweryProducts": [{"_id": "p1", "beerName": "Silver", "beerType": "Lager"}],
        })
        assert brewery.id == "42"
        assert brewery.products[0].name == "Silver"
        assert brewery.products[0].style == "Lager"

    def test_canonical_requires_id(self):
        with pytest.raises(ValidationError):
            CanonicalBrewery.model_validate({"name": "Heineken"})


class TestReadExtraction:
    """Test reading extraction files."""

    def test_json(self, tmp_dir):
        path = tmp_dir / "extraction.json"
        path.write_text(json.dumps(RAW_EXTRACTION))
        extraction = read_extraction(path)
        assert len(extraction.breweries) == 1
        assert len(extraction.beers) == 1

    def test_wrapped_payload(self, tmp_dir):
        path = tmp_dir / "response.json"
        path.write_text(json.dumps({"success": True, "data": RAW_EXTRACTION}))
        assert len(read_extraction(path).breweries) == 1

    def test_yaml(self, tmp_dir):
        path = tmp_dir / "extraction.yaml"
        path.write_text(yaml.dump(RAW_EXTRACTION))
        assert read_extraction(path).beers[0].name == "Viana Bionda"

    def test_empty_file(self, tmp_dir):
        path = tmp_dir / "empty.yaml"
        path.write_text("")
        assert read_extraction(path) == AIExtraction()

    def test_missing_file(self, tmp_dir):
        with pytest.raises(FileNotFoundError):
            read_extraction(tmp_dir / "nope.json")


class TestCanonicalSnapshot:
    """Test reading canonical snapshots and sources."""

    def test_list(self, tmp_dir):
        path = tmp_dir / "breweries.json"
        path.write_text(json.dumps([{"id": "b1", "name": "Heineken"}, {"_id": "b2", "breweryName": "Brewdog"}]))
        breweries = read_canonical(path)
        assert [b.name for b in breweries] == ["Heineken", "Brewdog"]

    def test_wrapped(self, tmp_dir):
        path = tmp_dir / "breweries.yaml"
        path.write_text(yaml.dump({"breweries": [{"id": "b1", "name": "Heineken"}]}))
        assert read_canonical(path)[0].id == "b1"

    def test_not_a_list(self, tmp_dir):
        path = tmp_dir / "breweries.json"
        path.write_text(json.dumps("Heineken"))
        with pytest.raises(ValueError, match="list of breweries"):
            read_canonical(path)

    def test_file_source_rereads(self, tmp_dir):
        path = tmp_dir / "breweries.json"
        path.write_text(json.dumps([{"id": "b1", "name": "Heineken"}]))
        source = FileCanonicalSource(path)
        assert len(source.list_breweries()) == 1
        path.write_text(json.dumps([{"id": "b1", "name": "Heineken"}, {"id": "b2", "name": "Brewdog"}]))
        assert len(source.list_breweries()) == 2

    def test_static_source_copies(self, canonical):
        source = StaticCanonicalSource(canonical)
        listed = source.list_breweries()
        listed.clear()
        assert len(source.list_breweries()) == len(canonical)


class TestWriteOutcome:
    """Test writing validation outcomes."""

    def test_json_round_trip(self, tmp_dir):
        outcome = ValidationOutcome(flow="DIRECT_SAVE", message="ok")
        path = tmp_dir / "out" / "outcome.json"
        write_outcome(outcome, path)
        data = json.loads(path.read_text())
        assert data["flow"] == "DIRECT_SAVE"
        assert ValidationOutcome.model_validate(data).flow == "DIRECT_SAVE"

    def test_yaml_without_trace(self, tmp_dir):
        from brewguard.validate.models import TraceEvent

        outcome = ValidationOutcome(trace=[TraceEvent(stage="flow", event="direct_save")])
        path = tmp_dir / "outcome.yaml"
        write_outcome(outcome, path, include_trace=False)
        data = yaml.safe_load(path.read_text())
        assert "trace" not in data
        assert data["flow"] == "REQUIRES_COMPLETION"
