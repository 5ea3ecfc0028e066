"""Completion suggestions for a user filling in a brewery or beer by hand."""

import logging
from typing import Literal

from pydantic import BaseModel, Field

from brewguard.extract.models import CanonicalBrewery

logger = logging.getLogger(__name__)

MAX_DATABASE_SUGGESTIONS = 10
MIN_SUGGESTIONS = 5


class Suggestion(BaseModel):
    """A name the user may pick, from the canonical store or generated."""

    type: Literal["brewery", "beer"]
    name: str
    id: str | None = None
    brewery_name: str | None = None
    style: str | None = None
    address: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    source: Literal["database", "generated"]


def search_suggestions(
    kind: Literal["brewery", "beer"],
    canonical: list[CanonicalBrewery],
    brewery_name: str | None = None,
    beer_name: str | None = None,
) -> list[Suggestion]:
    """Suggest names matching what the user typed.

    Breweries: canonical names containing the query, padded with generated
    "<name> Brewery" / "Birrificio <name>" forms when there are few hits.
    Beers: canonical products containing the query.
    """
    suggestions: list[Suggestion] = []

    if kind == "brewery" and brewery_name:
        query = brewery_name.strip().lower()
        for brewery in canonical:
            if brewery.name and query in brewery.name.lower():
                suggestions.append(Suggestion(
                    type="brewery",
                    id=brewery.id,
                    name=brewery.name,
                    address=brewery.legal_address,
                    confidence=0.8,
                    source="database",
                ))
                if len(suggestions) >= MAX_DATABASE_SUGGESTIONS:
                    break

        if len(suggestions) < MIN_SUGGESTIONS:
            suggestions.append(Suggestion(
                type="brewery", name=f"{brewery_name.strip()} Brewery", confidence=0.6, source="generated",
            ))
            suggestions.append(Suggestion(
                type="brewery", name=f"Birrificio {brewery_name.strip()}", confidence=0.5, source="generated",
            ))

    if kind == "beer" and beer_name:
        query = beer_name.strip().lower()
        for brewery in canonical:
            for product in brewery.products:
                if product.name and query in product.name.lower():
                    suggestions.append(Suggestion(
                        type="beer",
                        id=product.id,
                        name=product.name,
                        brewery_name=brewery.name,
                        style=product.style,
                        confidence=0.8,
                        source="database",
                    ))

    logger.debug(f"{len(suggestions)} {kind} suggestions for '{brewery_name or beer_name}'")
    return suggestions
