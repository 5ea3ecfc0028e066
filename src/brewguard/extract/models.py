"""Pydantic models for AI extraction results and canonical records.

Candidates are what the upstream vision/LLM step claims to have read off a
photo; nothing in them is trusted yet. Keys are accepted both in
snake_case and in the camelCase used by the AI output (`labelName`,
`verifiedData.breweryWebsite`, ...). Blank strings are treated as absent.
"""

import re
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

_YEAR_RE = re.compile(r"\b(1[0-9]{3}|20[0-9]{2})\b")

VerificationStatus = Literal["VERIFIED", "UNVERIFIED", "PARTIAL", "CONFLICTING"]
DataMatch = Literal["VERIFIED", "UNVERIFIED", "CONFLICTING"]
EntityKind = Literal["brewery", "beer"]


class _InputModel(BaseModel):
    """Base for extraction payloads: lenient keys, blank strings dropped."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_strings(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for key, value in data.items():
            if isinstance(value, str):
                value = value.strip()
                if not value:
                    continue
            cleaned[key] = value
        return cleaned


# ============================================================================
# Claimed fields
# ============================================================================


class BreweryFields(_InputModel):
    """Brewery fields claimed by the AI."""

    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "breweryName"))
    website: str | None = Field(default=None, validation_alias=AliasChoices("website", "breweryWebsite"))
    email: str | None = Field(default=None, validation_alias=AliasChoices("email", "breweryEmail"))
    phone: str | None = Field(
        default=None, validation_alias=AliasChoices("phone", "breweryPhoneNumber", "phoneNumber")
    )
    legal_address: str | None = Field(
        default=None, validation_alias=AliasChoices("legal_address", "breweryLegalAddress", "legalAddress")
    )
    production_address: str | None = Field(
        default=None,
        validation_alias=AliasChoices("production_address", "breweryProductionAddress", "productionAddress"),
    )
    description: str | None = Field(
        default=None, validation_alias=AliasChoices("description", "breweryDescription")
    )
    founding_year: int | None = Field(
        default=None, validation_alias=AliasChoices("founding_year", "foundingYear")
    )
    social_links: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("social_links", "brewerySocialMedia", "socialLinks"),
    )
    products: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("products", "breweryProducts", "mainProducts")
    )
    awards: list[str] = Field(default_factory=list)

    @field_validator("social_links", mode="before")
    @classmethod
    def _drop_empty_links(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {k: str(u).strip() for k, u in v.items() if u and str(u).strip()}
        return v

    @field_validator("founding_year", mode="before")
    @classmethod
    def _parse_year(cls, v: Any) -> Any:
        # "Dal 1996", "1996", 1996
        if isinstance(v, str):
            found = _YEAR_RE.search(v)
            return int(found.group(1)) if found else None
        return v

    @field_validator("products", "awards", mode="before")
    @classmethod
    def _coerce_names(cls, v: Any) -> Any:
        # Products arrive either as plain names or as {"beerName": ...} dicts
        if v is None:
            return []
        if isinstance(v, list):
            names = []
            for item in v:
                if isinstance(item, dict):
                    item = item.get("beerName") or item.get("name") or ""
                item = str(item).strip()
                if item:
                    names.append(item)
            return names
        return v


class BeerFields(_InputModel):
    """Beer fields claimed by the AI."""

    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "beerName"))
    brewery_name: str | None = Field(
        default=None, validation_alias=AliasChoices("brewery_name", "breweryName")
    )
    alcohol_content: str | None = Field(
        default=None, validation_alias=AliasChoices("alcohol_content", "alcoholContent")
    )
    style: str | None = Field(default=None, validation_alias=AliasChoices("style", "beerType", "beerStyle"))
    volume: str | None = None
    description: str | None = None

    @field_validator("alcohol_content", "volume", mode="before")
    @classmethod
    def _number_to_str(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class LabelData(_InputModel):
    """Beer and brewery names as read directly off the label."""

    beer_name: str | None = Field(default=None, validation_alias=AliasChoices("beer_name", "beerName"))
    brewery_name: str | None = Field(
        default=None, validation_alias=AliasChoices("brewery_name", "breweryName")
    )


class WebVerification(_InputModel):
    """Evidence block produced by the AI's web search step."""

    data_match: DataMatch | None = Field(
        default=None, validation_alias=AliasChoices("data_match", "dataMatch")
    )
    sources_found: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("sources_found", "sourcesFound")
    )
    search_queries: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("search_queries", "searchQueries")
    )
    conflicting_data: list[Any] = Field(
        default_factory=list, validation_alias=AliasChoices("conflicting_data", "conflictingData")
    )

    @field_validator("data_match", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("sources_found", "search_queries", "conflicting_data", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v


# ============================================================================
# Candidates
# ============================================================================


class _Candidate(_InputModel):
    id: str | None = None
    label_name: str | None = Field(default=None, validation_alias=AliasChoices("label_name", "labelName"))
    verification: VerificationStatus = "UNVERIFIED"
    web_verification: WebVerification | None = Field(
        default=None, validation_alias=AliasChoices("web_verification", "webVerification")
    )
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)

    @field_validator("verification", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        if v is None:
            return "UNVERIFIED"
        return v.upper() if isinstance(v, str) else v

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class CandidateBrewery(_Candidate):
    """A brewery as claimed by the AI extraction step."""

    kind: Literal["brewery"] = "brewery"
    verified_data: BreweryFields = Field(
        default_factory=BreweryFields, validation_alias=AliasChoices("verified_data", "verifiedData")
    )
    suggested_actions: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("suggested_actions", "suggestedActions")
    )

    @field_validator("verified_data", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def name(self) -> str | None:
        """Verified name, falling back to what was read off the label."""
        return self.verified_data.name or self.label_name

    def effective_fields(self) -> BreweryFields:
        """Claimed fields with the name filled in from the label when missing."""
        if self.verified_data.name or not self.label_name:
            return self.verified_data
        return self.verified_data.model_copy(update={"name": self.label_name})


class CandidateBeer(_Candidate):
    """A beer as claimed by the AI extraction step."""

    kind: Literal["beer"] = "beer"
    verified_data: BeerFields = Field(
        default_factory=BeerFields, validation_alias=AliasChoices("verified_data", "verifiedData")
    )
    label_data: LabelData = Field(
        default_factory=LabelData, validation_alias=AliasChoices("label_data", "labelData")
    )
    brewery_ref: str | None = Field(
        default=None, validation_alias=AliasChoices("brewery_ref", "breweryRef", "breweryId")
    )

    @field_validator("verified_data", "label_data", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def name(self) -> str | None:
        return self.verified_data.name or self.label_data.beer_name or self.label_name

    def claimed_brewery_names(self) -> list[str]:
        """Brewery names this beer claims, label first."""
        names = [self.label_data.brewery_name, self.verified_data.brewery_name]
        return [n for n in names if n]

    def effective_fields(self) -> BeerFields:
        if self.verified_data.name or not self.name:
            return self.verified_data
        return self.verified_data.model_copy(update={"name": self.name})


class AIExtraction(_InputModel):
    """Complete parsed output of one AI analysis."""

    breweries: list[CandidateBrewery] = Field(default_factory=list)
    beers: list[CandidateBeer] = Field(
        default_factory=list, validation_alias=AliasChoices("beers", "bottles")
    )

    @field_validator("breweries", "beers", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v


# ============================================================================
# Canonical records
# ============================================================================


class CanonicalProduct(_InputModel):
    """A beer already listed under a canonical brewery."""

    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "beerName"))
    style: str | None = Field(default=None, validation_alias=AliasChoices("style", "beerType"))


class CanonicalBrewery(_InputModel):
    """A brewery already persisted in the store."""

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "breweryName"))
    website: str | None = Field(default=None, validation_alias=AliasChoices("website", "breweryWebsite"))
    email: str | None = Field(default=None, validation_alias=AliasChoices("email", "breweryEmail"))
    legal_address: str | None = Field(
        default=None, validation_alias=AliasChoices("legal_address", "breweryLegalAddress", "legalAddress")
    )
    production_address: str | None = Field(
        default=None,
        validation_alias=AliasChoices("production_address", "breweryProductionAddress", "productionAddress"),
    )
    social_links: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("social_links", "brewerySocialMedia", "socialLinks"),
    )
    products: list[CanonicalProduct] = Field(
        default_factory=list, validation_alias=AliasChoices("products", "breweryProducts")
    )

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("social_links", mode="before")
    @classmethod
    def _drop_empty_links(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {k: str(u) for k, u in v.items() if u}
        return v

    @field_validator("products", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v
