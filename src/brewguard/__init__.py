"""brewguard: Entity resolution and anti-hallucination checks for brewery data.

Takes untrusted AI extractions of breweries and beers (typically read off a
bottle label), matches them against a canonical brewery store, scores how
complete and grounded each claim is, and decides per entity and per run
whether data can be saved directly or needs a human.
"""

__version__ = "0.1.0"

from brewguard.config import BrewguardConfig
from brewguard.extract.models import AIExtraction, CanonicalBrewery, CandidateBeer, CandidateBrewery
from brewguard.matching.matcher import match_entity
from brewguard.pipeline import run_match, run_suggest, run_validate
from brewguard.rules.loader import load_rules
from brewguard.rules.models import Rules
from brewguard.validate.pipeline import validate_candidates, validate_extraction

__all__ = [
    "__version__",
    "AIExtraction",
    "BrewguardConfig",
    "CandidateBeer",
    "CandidateBrewery",
    "CanonicalBrewery",
    "Rules",
    "load_rules",
    "match_entity",
    "run_match",
    "run_suggest",
    "run_validate",
    "validate_candidates",
    "validate_extraction",
]
