"""Grounding check for AI-claimed identifiers.

A claimed website or email is only trusted when the AI's own web search
turned up evidence for it: at least one source URL, the website's domain
among the source domains, and an email on the same domain as the website.
"""

import logging

from pydantic import BaseModel, Field

from brewguard.extract.models import BreweryFields, WebVerification
from brewguard.matching.similarity import domains_match, email_domain, url_domain

logger = logging.getLogger(__name__)


class GroundingReport(BaseModel):
    """Grounding decision plus the reasons it failed, if it did."""

    grounded: bool
    sources: int = 0
    reasons: list[str] = Field(default_factory=list)


def grounding_report(
    fields: BreweryFields,
    web_verification: WebVerification | None,
) -> GroundingReport:
    """Check claimed website/email against the evidence sources.

    Args:
        fields: Claimed brewery fields
        web_verification: Evidence block from the AI web search, if any

    Returns:
        GroundingReport; `grounded` is False with reasons when unsupported
    """
    sources = [s for s in (web_verification.sources_found if web_verification else []) if s]
    reasons = []

    if not sources:
        reasons.append("no_sources_found")
        return GroundingReport(grounded=False, sources=0, reasons=reasons)

    website_domain = url_domain(fields.website)
    if fields.website:
        source_domains = [url_domain(s) for s in sources]
        if not website_domain or not any(domains_match(website_domain, d) for d in source_domains):
            reasons.append("website_not_in_sources")

    if fields.email and fields.website:
        if not domains_match(email_domain(fields.email), website_domain):
            reasons.append("email_domain_mismatch")

    grounded = not reasons
    if not grounded:
        logger.debug(f"Not grounded ({len(sources)} sources): {', '.join(reasons)}")
    return GroundingReport(grounded=grounded, sources=len(sources), reasons=reasons)


def is_grounded(fields: BreweryFields, web_verification: WebVerification | None) -> bool:
    """True when claimed identifiers are corroborated by the evidence sources."""
    return grounding_report(fields, web_verification).grounded
