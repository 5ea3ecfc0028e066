"""Match a candidate brewery against canonical records.

Phases run in order and stop at the first conclusive one:

1. Exact normalized name
2. Fuzzy name (similarity + keyword overlap), possibly ambiguous
3. Website / email / address
4. Partial name tokens (always ambiguous)

False merges are worse than near-duplicates, so every tier that is not
overwhelmingly confident asks a human instead of merging.
"""

import logging
from dataclasses import dataclass

from brewguard.extract.models import BreweryFields, CanonicalBrewery
from brewguard.matching.models import Ambiguity, MatchAux, MatchResult
from brewguard.matching.similarity import (
    clean_url,
    has_common_keywords,
    normalize,
    normalize_address,
    similarity,
)
from brewguard.rules.models import DEFAULT_RULES, Rules

logger = logging.getLogger(__name__)


@dataclass
class _Scored:
    entity: CanonicalBrewery
    similarity: float
    keyword_match: bool


def aux_from_fields(fields: BreweryFields) -> MatchAux:
    """Pick the auxiliary identifying fields out of claimed brewery data."""
    return MatchAux(
        website=fields.website,
        email=fields.email,
        legal_address=fields.legal_address,
        production_address=fields.production_address,
    )


def match_entity(
    name: str | None,
    aux: MatchAux | None,
    canonical: list[CanonicalBrewery],
    rules: Rules = DEFAULT_RULES,
) -> MatchResult:
    """Find the canonical brewery a candidate refers to.

    Args:
        name: Candidate name as read/claimed
        aux: Website, email and addresses claimed for the candidate
        canonical: Snapshot of canonical breweries
        rules: Thresholds and keyword lexicon

    Returns:
        MatchResult with a confident match, ambiguities to resolve, or nothing
    """
    aux = aux or MatchAux()
    if not canonical:
        return MatchResult()

    search_name = normalize(name)

    if search_name:
        result = _match_exact(search_name, canonical)
        if result is not None:
            return result

        result = _match_fuzzy(name or "", canonical, rules)
        if result is not None:
            return result

    result = _match_aux(aux, canonical)
    if result is not None:
        return result

    if search_name:
        result = _match_partial(search_name, canonical, rules)
        if result is not None:
            return result

    logger.debug(f"No canonical match for '{name}' ({len(canonical)} breweries checked)")
    return MatchResult()


def _match_exact(search_name: str, canonical: list[CanonicalBrewery]) -> MatchResult | None:
    for entity in canonical:
        if entity.name and normalize(entity.name) == search_name:
            logger.info(f"Exact name match: '{search_name}' -> {entity.id}")
            return MatchResult(matched=entity, match_type="EXACT_NAME", confidence=1.0)
    return None


def _match_fuzzy(name: str, canonical: list[CanonicalBrewery], rules: Rules) -> MatchResult | None:
    thresholds = rules.match
    keywords = rules.lexicon.keywords

    scored = []
    for entity in canonical:
        if not entity.name:
            continue
        sim = similarity(name, entity.name)
        keyword = has_common_keywords(name, entity.name, keywords, thresholds.token)
        if sim > thresholds.candidate or keyword:
            scored.append(_Scored(entity, sim, keyword))

    if not scored:
        return None

    # Stable sort keeps canonical order among equal similarities
    scored.sort(key=lambda s: s.similarity, reverse=True)
    best = scored[0]
    similar_count = sum(1 for s in scored if s.similarity > thresholds.similar)
    keyword_count = sum(1 for s in scored if s.keyword_match)

    logger.debug(
        f"Fuzzy pass for '{name}': best '{best.entity.name}' "
        f"sim={best.similarity:.2f} keyword={best.keyword_match} "
        f"({len(scored)} candidates, {similar_count} similar, {keyword_count} keyword)"
    )

    if best.similarity > thresholds.high_confidence and best.keyword_match and similar_count <= 1:
        logger.info(f"High-confidence fuzzy match: '{name}' -> {best.entity.id} ({best.similarity:.2f})")
        return MatchResult(
            matched=best.entity,
            match_type="FUZZY_HIGH_CONFIDENCE",
            confidence=best.similarity,
        )

    second_similar = len(scored) > 1 and scored[1].similarity > thresholds.candidate
    if similar_count > 1 or keyword_count > 1 or second_similar:
        ambiguities = [
            Ambiguity(
                entity=s.entity,
                confidence=s.similarity,
                reason="AMBIGUOUS_FUZZY",
                similarity=s.similarity,
                keyword_match=s.keyword_match,
            )
            for s in scored[: thresholds.max_ambiguities]
        ]
        reason = "MULTIPLE_KEYWORD_MATCHES" if keyword_count > 1 else "MULTIPLE_SIMILAR_MATCHES"
        logger.info(f"Ambiguous match for '{name}': {len(ambiguities)} candidates ({reason})")
        return MatchResult(
            match_type="AMBIGUOUS_FUZZY",
            ambiguities=ambiguities,
            needs_disambiguation=True,
            disambiguation_reason=reason,
        )

    if best.similarity > thresholds.similar or best.keyword_match:
        logger.info(f"Single ambiguous match for '{name}': '{best.entity.name}' needs confirmation")
        return MatchResult(
            match_type="AMBIGUOUS_SINGLE",
            ambiguities=[
                Ambiguity(
                    entity=best.entity,
                    confidence=best.similarity,
                    reason="AMBIGUOUS_SINGLE",
                    similarity=best.similarity,
                    keyword_match=best.keyword_match,
                )
            ],
            needs_disambiguation=True,
            disambiguation_reason="SINGLE_AMBIGUOUS_MATCH",
        )

    return None


def _match_aux(aux: MatchAux, canonical: list[CanonicalBrewery]) -> MatchResult | None:
    website = clean_url(aux.website)
    if website:
        for entity in canonical:
            if clean_url(entity.website) == website:
                logger.info(f"Website match: {website} -> {entity.id}")
                return MatchResult(matched=entity, match_type="WEBSITE", confidence=1.0)

    email = (aux.email or "").strip().lower()
    if email:
        for entity in canonical:
            if entity.email and entity.email.strip().lower() == email:
                logger.info(f"Email match: {email} -> {entity.id}")
                return MatchResult(matched=entity, match_type="EMAIL", confidence=1.0)

    addresses = [normalize_address(a) for a in (aux.legal_address, aux.production_address)]
    addresses = [a for a in addresses if a]
    for address in addresses:
        for entity in canonical:
            for known in (entity.legal_address, entity.production_address):
                known = normalize_address(known)
                if known and (address in known or known in address):
                    logger.info(f"Address match: '{address}' -> {entity.id}")
                    return MatchResult(matched=entity, match_type="ADDRESS", confidence=1.0)

    return None


def _match_partial(search_name: str, canonical: list[CanonicalBrewery], rules: Rules) -> MatchResult | None:
    thresholds = rules.match
    parts = [p for p in search_name.split() if len(p) > 2]
    if not parts:
        return None

    best: tuple[float, CanonicalBrewery, list[str]] | None = None
    for entity in canonical:
        if not entity.name:
            continue
        known = normalize(entity.name)
        matching = [p for p in parts if p in known]
        ratio = len(matching) / len(parts)
        if ratio >= thresholds.partial_ratio and (best is None or ratio > best[0]):
            best = (ratio, entity, matching)

    if best is None:
        return None

    ratio, entity, matching = best
    logger.info(f"Partial name match: '{search_name}' ~ '{entity.name}' ({ratio:.2f})")
    confidence = ratio * thresholds.partial_confidence_factor
    return MatchResult(
        match_type="PARTIAL_AMBIGUOUS",
        confidence=confidence,
        ambiguities=[
            Ambiguity(
                entity=entity,
                confidence=confidence,
                reason="PARTIAL_AMBIGUOUS",
                matching_parts=matching,
            )
        ],
        needs_disambiguation=True,
        disambiguation_reason="PARTIAL_NAME_MATCH",
    )
