"""Completeness and plausibility scores for claimed fields.

Scores are independent of matching: they only look at what the AI claims
about the candidate itself. A brewery needs a name plus at least one
identifier (website, address or a real description) to score above the
name-only floor; contact fields only count when they are plausible.
"""

import re

from brewguard.extract.models import BeerFields, BreweryFields
from brewguard.matching.similarity import domains_match, email_domain, url_domain
from brewguard.rules.models import DEFAULT_RULES, Rules
from brewguard.validate.models import MissingField

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_plausible_email(email: str | None, website: str | None = None) -> bool:
    """Valid-looking address whose domain matches the website when one is claimed."""
    if not email or not _EMAIL_RE.match(email.strip()):
        return False
    if website:
        return domains_match(email_domain(email), url_domain(website))
    return True


def is_plausible_phone(phone: str | None, min_digits: int = 7) -> bool:
    if not phone:
        return False
    return sum(ch.isdigit() for ch in phone) >= min_digits


def social_link_count(links: dict[str, str], social_domains: tuple[str, ...]) -> int:
    """Number of links pointing at a known social network."""
    count = 0
    for url in links.values():
        domain = url_domain(url)
        if domain and any(domain == d or domain.endswith("." + d) for d in social_domains):
            count += 1
    return count


def assess_brewery(
    fields: BreweryFields,
    confidence: float | None = None,
    rules: Rules = DEFAULT_RULES,
) -> float:
    """Score a brewery's claimed fields in [0, 1].

    Args:
        fields: Claimed brewery fields
        confidence: The AI's self-reported confidence, if any
        rules: Score weights

    Returns:
        0.0 when the name is missing; otherwise raw points over
        `brewery_max`, capped at the no-identifier cap when the brewery
        has neither website, address nor a long description.
    """
    w = rules.quality
    if not fields.name:
        return 0.0

    raw = w.name
    has_description = bool(fields.description) and len(fields.description) > w.min_description_length
    has_identifier = bool(fields.website or fields.legal_address or has_description)

    if fields.website:
        raw += w.website
    if fields.legal_address:
        raw += w.address
    if has_description:
        raw += w.description

    if is_plausible_email(fields.email, fields.website):
        raw += w.email
    if is_plausible_phone(fields.phone, w.min_phone_digits):
        raw += w.phone

    if fields.founding_year:
        raw += w.founding_year
    if fields.products:
        raw += w.products
    if social_link_count(fields.social_links, rules.lexicon.social_domains):
        raw += w.social_links
    if confidence is not None and confidence >= w.ai_confidence_threshold:
        raw += w.ai_confidence

    score = min(1.0, raw / w.brewery_max)
    if not has_identifier:
        score = min(score, w.no_identifier_cap)
    return max(0.0, score)


def assess_beer(fields: BeerFields, rules: Rules = DEFAULT_RULES) -> float:
    """Score a beer's claimed fields in [0, 1].

    The bar is much lower than for breweries: a name alone is enough,
    most descriptive detail lives on the brewery record.
    """
    w = rules.quality
    if not fields.name:
        return 0.0

    score = w.beer_name
    if fields.alcohol_content:
        score += w.beer_alcohol
    if fields.style:
        score += w.beer_style
    if fields.volume:
        score += w.beer_volume
    if fields.description:
        score += w.beer_description
    return max(0.0, min(1.0, score))


def find_missing_fields(fields: BreweryFields, rules: Rules = DEFAULT_RULES) -> list[MissingField]:
    """List required (high priority) and optional (low priority) fields that are absent."""
    lexicon = rules.lexicon
    missing = []
    for field in lexicon.required_fields:
        if not getattr(fields, field, None):
            missing.append(MissingField(field=field, label=lexicon.label_for(field), priority="high"))
    for field in lexicon.optional_fields:
        if not getattr(fields, field, None):
            missing.append(MissingField(field=field, label=lexicon.label_for(field), priority="low"))
    return missing
