"""Builders for the user actions the pipeline emits."""

from brewguard.extract.models import CandidateBeer, CandidateBrewery
from brewguard.matching.models import MatchResult
from brewguard.rules.models import DEFAULT_RULES, Rules
from brewguard.validate.models import MissingField, UserAction
from brewguard.validate.quality import find_missing_fields


def generate_search_queries(name: str | None, rules: Rules = DEFAULT_RULES) -> list[str]:
    """Web search queries a human can use to check a brewery."""
    if not name:
        return []
    return [template.format(name=name) for template in rules.lexicon.search_templates]


def _missing(missing: list[MissingField]) -> list[dict]:
    return [m.model_dump() for m in missing]


def brewery_action(candidate: CandidateBrewery, rules: Rules = DEFAULT_RULES) -> UserAction | None:
    """Action for a brewery the AI itself could not fully verify.

    Returns None for VERIFIED candidates, which are handled by the caller.
    """
    name = candidate.name
    display = name or "unknown brewery"
    fields = candidate.effective_fields()
    data = {
        "label_name": candidate.label_name,
        "missing_fields": _missing(find_missing_fields(fields, rules)),
        "search_queries": generate_search_queries(name, rules),
    }

    if candidate.verification == "UNVERIFIED":
        data["suggested_actions"] = list(candidate.suggested_actions)
        return UserAction(
            type="MANUAL_VERIFICATION",
            title=f'Verify brewery "{display}"',
            description="This brewery was not found online. Check that it really exists.",
            data=data,
            priority="high",
            candidate_id=candidate.id,
        )
    if candidate.verification == "CONFLICTING":
        conflicts = candidate.web_verification.conflicting_data if candidate.web_verification else []
        data["conflicts"] = list(conflicts)
        data["verified_data"] = fields.model_dump(exclude_none=True)
        return UserAction(
            type="RESOLVE_CONFLICTS",
            title=f'Resolve conflicts for "{display}"',
            description="The label and the online search disagree about this brewery.",
            data=data,
            priority="medium",
            candidate_id=candidate.id,
        )
    if candidate.verification == "PARTIAL":
        data["partial_data"] = fields.model_dump(exclude_none=True)
        return UserAction(
            type="COMPLETE_DATA",
            title=f'Complete data for "{display}"',
            description="Brewery found, but some important details are missing.",
            data=data,
            priority="low",
            candidate_id=candidate.id,
        )
    return None


def completion_action(
    candidate: CandidateBrewery,
    reason: str,
    rules: Rules = DEFAULT_RULES,
) -> UserAction:
    """Ask the user to complete a verified brewery whose data is too thin."""
    fields = candidate.effective_fields()
    return UserAction(
        type="COMPLETE_DATA",
        title=f'Complete data for "{candidate.name or "unknown brewery"}"',
        description=reason,
        data={
            "label_name": candidate.label_name,
            "partial_data": fields.model_dump(exclude_none=True),
            "missing_fields": _missing(find_missing_fields(fields, rules)),
            "search_queries": generate_search_queries(candidate.name, rules),
        },
        priority="low",
        candidate_id=candidate.id,
    )


def grounding_action(
    candidate: CandidateBrewery,
    reasons: list[str],
    quality_score: float,
    rules: Rules = DEFAULT_RULES,
) -> UserAction:
    fields = candidate.effective_fields()
    return UserAction(
        type="GROUNDING_REQUIRED",
        title=f'Confirm details for "{candidate.name}"',
        description=(
            "The AI's claims about this brewery are not backed by the sources it found. "
            "Confirm or complete them before saving."
        ),
        data={
            "label_name": candidate.label_name,
            "quality_score": quality_score,
            "grounding_failures": list(reasons),
            "missing_fields": _missing(find_missing_fields(fields, rules)),
            "search_queries": generate_search_queries(candidate.name, rules),
        },
        priority="high",
        candidate_id=candidate.id,
    )


def disambiguation_action(candidate: CandidateBrewery, match: MatchResult) -> UserAction:
    """Ask the user which canonical brewery, if any, the candidate is."""
    return UserAction(
        type="DISAMBIGUATION",
        title=f'Which brewery is "{candidate.name}"?',
        description="Several existing breweries could match. Pick one or confirm it is new.",
        data={
            "label_name": candidate.label_name,
            "reason": match.disambiguation_reason,
            "options": [
                {
                    "id": a.entity.id,
                    "name": a.entity.name,
                    "confidence": round(a.confidence, 4),
                    "match_type": a.reason,
                    "keyword_match": a.keyword_match,
                }
                for a in match.ambiguities
            ],
        },
        priority="high",
        candidate_id=candidate.id,
    )


def brewery_required_action(candidate: CandidateBeer) -> UserAction:
    name = candidate.name or "unknown beer"
    return UserAction(
        type="BREWERY_REQUIRED",
        title=f'Verify the brewery of "{name}" first',
        description="This beer can only be added once its brewery has been verified.",
        data={
            "beer_name": candidate.name,
            "brewery_names": candidate.claimed_brewery_names(),
        },
        priority="high",
        candidate_id=candidate.id,
    )


def beer_action(candidate: CandidateBeer, conflicting: bool) -> UserAction:
    name = candidate.name or "unknown beer"
    web = candidate.web_verification
    if conflicting:
        return UserAction(
            type="RESOLVE_BEER_CONFLICTS",
            title=f'Resolve conflicts for "{name}"',
            description="Conflicting data was found for this beer.",
            data={
                "beer_name": candidate.name,
                "conflicts": list(web.conflicting_data) if web else [],
                "label_data": candidate.label_data.model_dump(exclude_none=True),
                "verified_data": candidate.verified_data.model_dump(exclude_none=True),
            },
            priority="medium",
            candidate_id=candidate.id,
        )
    return UserAction(
        type="MANUAL_BEER_VERIFICATION",
        title=f'Verify beer "{name}"',
        description="This beer was not found in the brewery's online catalogue.",
        data={
            "beer_name": candidate.name,
            "brewery_name": candidate.label_data.brewery_name or candidate.verified_data.brewery_name,
            "label_data": candidate.label_data.model_dump(exclude_none=True),
            "search_queries": list(web.search_queries) if web else [],
        },
        priority="medium",
        candidate_id=candidate.id,
    )


def retry_action(kind: str, name: str | None, candidate_id: str | None = None) -> UserAction:
    target = f'{kind} "{name}"' if name else kind
    return UserAction(
        type="RETRY",
        title=f"Retry verification of {target}",
        description="A technical problem interrupted the check. Try again.",
        priority="high",
        candidate_id=candidate_id,
    )
