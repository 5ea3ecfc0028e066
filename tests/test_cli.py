"""Tests for the brewguard CLI."""

import json

import pytest
from typer.testing import CliRunner

from brewguard.cli import app

runner = CliRunner()


@pytest.fixture
def files(tmp_dir, monkeypatch):
    """Extraction and canonical snapshot on disk, cwd without project config."""
    monkeypatch.chdir(tmp_dir)
    for var in ("BREWGUARD_STRICT_GROUNDING_MODE", "BREWGUARD_RULES_PATH", "BREWGUARD_CONCURRENCY"):
        monkeypatch.delenv(var, raising=False)

    canonical = tmp_dir / "breweries.json"
    canonical.write_text(json.dumps([
        {"_id": "b1", "breweryName": "Heineken", "breweryWebsite": "https://www.heineken.com"},
        {"_id": "b2", "breweryName": "Birrificio Viana"},
    ]))
    extraction = tmp_dir / "extraction.json"
    extraction.write_text(json.dumps({
        "breweries": [{"labelName": "Heineken", "verification": "VERIFIED"}],
        "bottles": [{"verifiedData": {"beerName": "Heineken Silver"}}],
    }))
    return extraction, canonical


class TestValidateCommand:
    """Test the validate command."""

    def test_direct_save(self, files):
        extraction, canonical = files
        result = runner.invoke(app, ["validate", str(extraction), "-c", str(canonical)])
        assert result.exit_code == 0
        assert "DIRECT_SAVE" in result.output

    def test_json_output(self, files):
        extraction, canonical = files
        result = runner.invoke(app, ["validate", str(extraction), "-c", str(canonical), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["flow"] == "DIRECT_SAVE"
        assert data["verified_breweries"][0]["existing_match"]["id"] == "b1"

    def test_writes_output_file(self, files, tmp_dir):
        extraction, canonical = files
        out = tmp_dir / "outcome.yaml"
        result = runner.invoke(app, ["validate", str(extraction), "-c", str(canonical), "-o", str(out)])
        assert result.exit_code == 0
        assert out.exists()

    def test_missing_extraction(self, files, tmp_dir):
        _, canonical = files
        result = runner.invoke(app, ["validate", str(tmp_dir / "nope.json"), "-c", str(canonical)])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_invalid_extraction(self, files, tmp_dir):
        _, canonical = files
        bad = tmp_dir / "bad.json"
        bad.write_text(json.dumps({"breweries": [{"verification": "MAYBE"}]}))
        result = runner.invoke(app, ["validate", str(bad), "-c", str(canonical)])
        assert result.exit_code == 1
        assert "Invalid extraction" in result.output

    def test_missing_rules_file(self, files, tmp_dir):
        extraction, canonical = files
        result = runner.invoke(
            app, ["validate", str(extraction), "-c", str(canonical), "--rules", str(tmp_dir / "r.yaml")]
        )
        assert result.exit_code == 1


class TestMatchCommand:
    """Test the match command."""

    def test_exact(self, files):
        _, canonical = files
        result = runner.invoke(app, ["match", "heineken", "-c", str(canonical)])
        assert result.exit_code == 0
        assert "EXACT_NAME" in result.output

    def test_by_website(self, files):
        _, canonical = files
        result = runner.invoke(app, ["match", "Qqq", "-c", str(canonical), "--website", "heineken.com"])
        assert result.exit_code == 0
        assert "WEBSITE" in result.output

    def test_ambiguous(self, files):
        _, canonical = files
        result = runner.invoke(app, ["match", "Birrificio Indipendente Viana", "-c", str(canonical)])
        assert result.exit_code == 0
        assert "Disambiguation needed" in result.output

    def test_no_match(self, files):
        _, canonical = files
        result = runner.invoke(app, ["match", "Qwerty Zymurgy", "-c", str(canonical)])
        assert result.exit_code == 0
        assert "No match" in result.output

    def test_name_printed_literally(self, files):
        """Square brackets in the name are not read as markup."""
        _, canonical = files
        result = runner.invoke(app, ["match", "[red]Qwerty Zymurgy", "-c", str(canonical)])
        assert result.exit_code == 0
        assert "'[red]Qwerty Zymurgy'" in result.output


class TestSuggestCommand:
    """Test the suggest command."""

    def test_brewery(self, files):
        _, canonical = files
        result = runner.invoke(app, ["suggest", "viana", "-c", str(canonical)])
        assert result.exit_code == 0
        assert "Birrificio Viana" in result.output

    def test_beer_without_hits(self, files):
        _, canonical = files
        result = runner.invoke(app, ["suggest", "silver", "-c", str(canonical), "--beer"])
        assert result.exit_code == 0
        assert "No suggestions" in result.output

    def test_query_printed_literally(self, files):
        _, canonical = files
        result = runner.invoke(app, ["suggest", "[bold]silver", "-c", str(canonical), "--beer"])
        assert result.exit_code == 0
        assert "No suggestions for '[bold]silver'" in result.output


class TestInfoCommand:
    """Test the info command."""

    def test_info(self, files):
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "Strict Grounding Mode" in result.output
