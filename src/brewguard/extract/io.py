"""Read AI extractions and canonical snapshots, write validation outcomes.

JSON and YAML are both accepted; the format is picked from the file suffix.
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from brewguard.extract.models import AIExtraction, CanonicalBrewery

if TYPE_CHECKING:
    from brewguard.validate.models import ValidationOutcome

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


def _read_data(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in _YAML_SUFFIXES:
        return yaml.safe_load(text)
    return json.loads(text)


def _write_data(data: Any, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() in _YAML_SUFFIXES:
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
    else:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def read_extraction(path: Path) -> AIExtraction:
    """Read one AI extraction result (breweries + bottles/beers)."""
    data = _read_data(path)
    if data is None:
        return AIExtraction()
    # The analysis endpoint wraps the payload in {"data": {...}}
    if isinstance(data, dict) and "data" in data and isinstance(data["data"], dict):
        data = data["data"]
    extraction = AIExtraction.model_validate(data)
    logger.info(
        f"Read extraction from {path}: {len(extraction.breweries)} breweries, {len(extraction.beers)} beers"
    )
    return extraction


def read_canonical(path: Path) -> list[CanonicalBrewery]:
    """Read a canonical brewery snapshot (a list, or {"breweries": [...]})."""
    data = _read_data(path)
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("breweries", [])
    if not isinstance(data, list):
        raise ValueError(f"Canonical snapshot must be a list of breweries: {path}")
    breweries = [CanonicalBrewery.model_validate(item) for item in data]
    logger.info(f"Read {len(breweries)} canonical breweries from {path}")
    return breweries


def write_outcome(outcome: "ValidationOutcome", path: Path, include_trace: bool = True) -> None:
    """Write a ValidationOutcome to JSON or YAML."""
    exclude = None if include_trace else {"trace"}
    data = outcome.model_dump(mode="json", exclude=exclude, exclude_none=True)
    _write_data(data, path)
    logger.info(f"Wrote validation outcome ({outcome.flow}) to {path}")


class FileCanonicalSource:
    """Canonical source backed by a JSON/YAML snapshot file, read on demand."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def list_breweries(self) -> list[CanonicalBrewery]:
        return read_canonical(self.path)
