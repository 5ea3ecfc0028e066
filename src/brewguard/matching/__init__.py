"""Entity matching — resolve candidate breweries against canonical records.

Deterministic, no I/O: string similarity primitives and a phased matcher
that prefers asking a human over merging on weak evidence.
"""

from brewguard.matching.matcher import aux_from_fields, match_entity
from brewguard.matching.models import Ambiguity, MatchAux, MatchResult
from brewguard.matching.similarity import has_common_keywords, normalize, similarity

__all__ = [
    "Ambiguity",
    "MatchAux",
    "MatchResult",
    "aux_from_fields",
    "has_common_keywords",
    "match_entity",
    "normalize",
    "similarity",
]
