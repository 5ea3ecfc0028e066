"""Library-usable runner functions.

Each function corresponds to a CLI command but takes explicit parameters
instead of reading from config/CLI args. Use these from scripts, notebooks
or a web handler that already holds the extraction on disk.
"""

import logging
from pathlib import Path
from typing import Literal

from brewguard.extract.io import FileCanonicalSource, read_canonical, read_extraction, write_outcome
from brewguard.matching.matcher import match_entity
from brewguard.matching.models import MatchAux, MatchResult
from brewguard.rules.models import DEFAULT_RULES, Rules
from brewguard.validate.models import ValidationOutcome
from brewguard.validate.pipeline import validate_extraction
from brewguard.validate.suggestions import Suggestion, search_suggestions

logger = logging.getLogger(__name__)


def run_validate(
    extraction_path: Path,
    canonical_path: Path,
    strict_grounding_mode: bool = False,
    rules: Rules = DEFAULT_RULES,
    concurrency: int = 1,
    output_path: Path | None = None,
) -> ValidationOutcome:
    """Validate an AI extraction file against a canonical snapshot file.

    Args:
        extraction_path: JSON/YAML file with the parsed AI result
        canonical_path: JSON/YAML file with canonical breweries
        strict_grounding_mode: Hard-block ungrounded low-quality breweries
        rules: Tuning rules
        concurrency: Candidates validated at once per stage
        output_path: Where to write the outcome (JSON/YAML), if anywhere

    Returns:
        ValidationOutcome
    """
    extraction = read_extraction(extraction_path)
    outcome = validate_extraction(
        extraction,
        FileCanonicalSource(canonical_path),
        strict_grounding_mode=strict_grounding_mode,
        rules=rules,
        concurrency=concurrency,
    )
    if output_path:
        write_outcome(outcome, output_path)
    return outcome


def run_match(
    name: str,
    canonical_path: Path,
    aux: MatchAux | None = None,
    rules: Rules = DEFAULT_RULES,
) -> MatchResult:
    """Match a single brewery name against a canonical snapshot file."""
    canonical = read_canonical(canonical_path)
    return match_entity(name, aux, canonical, rules)


def run_suggest(
    kind: Literal["brewery", "beer"],
    query: str,
    canonical_path: Path,
) -> list[Suggestion]:
    """Completion suggestions for a brewery or beer name."""
    canonical = read_canonical(canonical_path)
    if kind == "brewery":
        return search_suggestions("brewery", canonical, brewery_name=query)
    return search_suggestions("beer", canonical, beer_name=query)
