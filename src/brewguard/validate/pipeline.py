"""Validation pipeline — decide what happens to each AI-extracted entity.

Stages run strictly in order:

1. Breweries: match against the canonical snapshot, score quality, check
   grounding. Each brewery ends up verified (save / update) or unverified
   with exactly one user action.
2. Beers: only against the breweries verified in stage 1. A beer never
   outranks its brewery's trust level.
3. Flow: one terminal decision for the caller.

Candidates within a stage are independent and may be validated
concurrently (`concurrency > 1`). Nothing is persisted here.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import TypeVar

from brewguard.extract.models import AIExtraction, CandidateBeer, CandidateBrewery, CanonicalBrewery
from brewguard.extract.sources import CanonicalSource
from brewguard.matching.matcher import aux_from_fields, match_entity
from brewguard.matching.similarity import normalize
from brewguard.rules.models import DEFAULT_RULES, Rules
from brewguard.validate.actions import (
    beer_action,
    brewery_action,
    brewery_required_action,
    completion_action,
    disambiguation_action,
    grounding_action,
    retry_action,
)
from brewguard.validate.grounding import grounding_report
from brewguard.validate.models import (
    EntityValidation,
    Flow,
    TraceEvent,
    UserAction,
    ValidationOutcome,
    ValidationSummary,
)
from brewguard.validate.quality import assess_beer, assess_brewery

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

_Result = tuple[EntityValidation, list[TraceEvent]]


# ============================================================================
# Brewery stage
# ============================================================================


def validate_brewery(
    candidate: CandidateBrewery,
    canonical: list[CanonicalBrewery],
    strict_grounding_mode: bool = False,
    rules: Rules = DEFAULT_RULES,
    trace: list[TraceEvent] | None = None,
) -> EntityValidation:
    """Validate one brewery candidate against the canonical snapshot.

    Args:
        candidate: Brewery as claimed by the AI
        canonical: Canonical breweries fetched for this run
        strict_grounding_mode: Block low-quality, ungrounded breweries
            instead of only flagging them
        rules: Thresholds, weights and lexicon
        trace: Optional list that receives this candidate's trace events

    Returns:
        EntityValidation; unverified results carry exactly one user action
    """
    events = trace if trace is not None else []
    name = candidate.name
    fields = candidate.effective_fields()
    limits = rules.pipeline

    validation = EntityValidation(
        kind="brewery",
        candidate_id=candidate.id,
        name=name,
        candidate=candidate,
    )

    if not name:
        # Nothing to match or score without a name, whatever the aux fields say
        validation.quality_score = 0.0
        validation.issues.append("Brewery name is missing")
        events.append(TraceEvent(
            stage="brewery", event="missing_name", candidate=candidate.id,
            detail={"verification": candidate.verification},
        ))
        logger.info(f"Brewery candidate {candidate.id} without a name rejected")
        return _require(validation, completion_action(candidate, "The brewery name is missing.", rules))

    aux = aux_from_fields(fields)
    match = match_entity(candidate.label_name or name, aux, canonical, rules)
    verified_name = candidate.verified_data.name
    if (
        not match.found
        and candidate.label_name
        and verified_name
        and normalize(verified_name) != normalize(candidate.label_name)
    ):
        # The label may show a brand line; the verified legal name can still hit
        by_name = match_entity(verified_name, aux, canonical, rules)
        if by_name.found or not match.needs_disambiguation:
            match = by_name
    validation.match = match
    events.append(TraceEvent(
        stage="brewery", event="matched", candidate=name,
        detail={
            "match_type": match.match_type,
            "confidence": round(match.confidence, 4),
            "needs_disambiguation": match.needs_disambiguation,
        },
    ))

    if candidate.verification != "VERIFIED":
        action = brewery_action(candidate, rules)
        validation.issues.append(f"AI verification status is {candidate.verification}")
        if match.found:
            validation.existing_match = match.matched
        events.append(TraceEvent(
            stage="brewery", event="unverified", candidate=name,
            detail={"verification": candidate.verification, "action": action.type},
        ))
        logger.info(f"Brewery '{name}' needs user action ({candidate.verification} -> {action.type})")
        return _require(validation, action)

    if match.found:
        validation.is_valid = True
        validation.action = "UPDATE_EXISTING"
        validation.confidence = limits.update_existing_confidence
        validation.existing_match = match.matched
        events.append(TraceEvent(
            stage="brewery", event="update_existing", candidate=name,
            detail={"existing_id": match.matched.id, "match_type": match.match_type},
        ))
        logger.info(f"Verified brewery '{name}' matches existing {match.matched.id} ({match.match_type})")
        return validation

    if match.needs_disambiguation:
        validation.issues.append(
            f"{len(match.ambiguities)} existing breweries could match ({match.disambiguation_reason})"
        )
        events.append(TraceEvent(
            stage="brewery", event="ambiguous", candidate=name,
            detail={
                "reason": match.disambiguation_reason,
                "options": [a.entity.id for a in match.ambiguities],
            },
        ))
        logger.info(f"Verified brewery '{name}' is ambiguous: {match.disambiguation_reason}")
        return _require(validation, disambiguation_action(candidate, match))

    score = assess_brewery(fields, candidate.confidence, rules)
    validation.quality_score = score
    events.append(TraceEvent(
        stage="brewery", event="quality", candidate=name, detail={"score": round(score, 4)},
    ))

    if score >= limits.brewery_quality:
        validation.is_valid = True
        validation.action = "SAVE_DIRECTLY"
        validation.confidence = score
        events.append(TraceEvent(stage="brewery", event="save_directly", candidate=name))
        logger.info(f"New verified brewery '{name}' can be saved (quality {score:.2f})")
        return validation

    validation.confidence = score
    validation.issues.append("Insufficient data quality despite AI verification")

    if strict_grounding_mode:
        report = grounding_report(fields, candidate.web_verification)
        events.append(TraceEvent(
            stage="brewery", event="grounding", candidate=name,
            detail={"grounded": report.grounded, "sources": report.sources, "reasons": report.reasons},
        ))
        if report.grounded:
            validation.is_valid = True
            validation.action = "SAVE_DIRECTLY"
            validation.confidence = limits.grounded_confidence
            validation.issues.clear()
            logger.info(f"Brewery '{name}' saved on grounding (quality {score:.2f}, {report.sources} sources)")
            return validation
        validation.issues.append("Claimed data is not grounded in the sources found")
        logger.warning(f"Brewery '{name}' blocked: low quality ({score:.2f}) and not grounded")
        return _require(validation, grounding_action(candidate, report.reasons, score, rules))

    logger.info(f"Brewery '{name}' has low quality ({score:.2f}), completion needed")
    return _require(
        validation,
        completion_action(candidate, "Brewery verified but important details are missing.", rules),
    )


# ============================================================================
# Beer stage
# ============================================================================


def find_beer_brewery(
    candidate: CandidateBeer,
    verified_breweries: list[EntityValidation],
    sole_beer: bool = False,
) -> tuple[EntityValidation | None, str]:
    """Locate the verified brewery a beer belongs to.

    Tries the explicit brewery reference, then the brewery names on the
    label and in the verified data. When nothing matches, a lone beer is
    attached to the only verified brewery (the single-bottle photo case).

    Returns:
        (brewery validation or None, how it was found)
    """
    if candidate.brewery_ref:
        for brewery in verified_breweries:
            if brewery.candidate_id and brewery.candidate_id == candidate.brewery_ref:
                return brewery, "reference"

    claimed = {normalize(n) for n in candidate.claimed_brewery_names()} - {""}
    if claimed:
        for brewery in verified_breweries:
            if claimed & _brewery_names(brewery):
                return brewery, "name"

    if sole_beer and len(verified_breweries) == 1:
        return verified_breweries[0], "sole_brewery"
    return None, "none"


def _brewery_names(brewery: EntityValidation) -> set[str]:
    names = {brewery.name}
    if isinstance(brewery.candidate, CandidateBrewery):
        names.add(brewery.candidate.label_name)
        names.add(brewery.candidate.verified_data.name)
    if brewery.existing_match is not None:
        names.add(brewery.existing_match.name)
    return {normalize(n) for n in names if n} - {""}


def validate_beer(
    candidate: CandidateBeer,
    verified_breweries: list[EntityValidation],
    sole_beer: bool = False,
    rules: Rules = DEFAULT_RULES,
    trace: list[TraceEvent] | None = None,
) -> EntityValidation:
    """Validate one beer candidate against the verified breweries.

    Args:
        candidate: Beer as claimed by the AI
        verified_breweries: Brewery validations that are valid (save or update)
        sole_beer: True when this is the only beer in the extraction
        rules: Thresholds and weights
        trace: Optional list that receives this candidate's trace events

    Returns:
        EntityValidation; SAVE_DIRECTLY only when the brewery was verified
    """
    events = trace if trace is not None else []
    name = candidate.name
    validation = EntityValidation(
        kind="beer",
        candidate_id=candidate.id,
        name=name,
        candidate=candidate,
    )

    brewery, how = find_beer_brewery(candidate, verified_breweries, sole_beer)
    events.append(TraceEvent(
        stage="beer", event="brewery_lookup", candidate=name,
        detail={"found": brewery is not None, "via": how, "brewery": brewery.name if brewery else None},
    ))
    if brewery is None:
        validation.issues.append("Brewery not verified, the beer cannot be validated")
        logger.info(f"Beer '{name}' has no verified brewery")
        return _require(validation, brewery_required_action(candidate))

    validation.brewery_name = brewery.name

    data_match = candidate.web_verification.data_match if candidate.web_verification else None
    if data_match in ("UNVERIFIED", "CONFLICTING"):
        conflicting = data_match == "CONFLICTING"
        validation.issues.append(f"Web verification reported {data_match}")
        events.append(TraceEvent(stage="beer", event="web_unverified", candidate=name, detail={"data_match": data_match}))
        logger.info(f"Beer '{name}' needs user action (web verification {data_match})")
        return _require(validation, beer_action(candidate, conflicting))

    score = assess_beer(candidate.effective_fields(), rules)
    validation.quality_score = score
    events.append(TraceEvent(stage="beer", event="quality", candidate=name, detail={"score": round(score, 4)}))

    if score >= rules.pipeline.beer_quality:
        validation.is_valid = True
        validation.action = "SAVE_DIRECTLY"
        validation.confidence = score
        logger.info(f"Beer '{name}' of '{brewery.name}' can be saved (quality {score:.2f})")
        return validation

    validation.confidence = score
    validation.issues.append("Insufficient beer data")
    logger.info(f"Beer '{name}' has low quality ({score:.2f})")
    return _require(validation, beer_action(candidate, conflicting=False))


def _require(validation: EntityValidation, action: UserAction) -> EntityValidation:
    validation.is_valid = False
    validation.action = "NONE"
    validation.requires_user_action = True
    validation.user_action = action
    return validation


# ============================================================================
# Flow
# ============================================================================


def classify_flow(
    summary: ValidationSummary,
    user_actions: list[UserAction],
    error_messages: list[str],
) -> tuple[Flow, str]:
    """Pick the single flow the caller should follow.

    Returns:
        (flow, human-readable message)
    """
    if (
        summary.verified_breweries > 0
        and summary.unverified_breweries == 0
        and summary.verified_beers > 0
        and summary.unverified_beers == 0
    ):
        return "DIRECT_SAVE", (
            f"Analysis complete: {summary.verified_breweries} breweries and "
            f"{summary.verified_beers} beers verified. Ready to save."
        )

    if summary.verified_breweries > 0 and summary.verified_beers > 0 and user_actions:
        return "REQUIRES_CONFIRMATION", (
            f"Found {summary.verified_breweries} verified breweries and {summary.verified_beers} "
            f"verified beers, but {len(user_actions)} items need your review."
        )

    if summary.verified_breweries == 0 or summary.verified_beers == 0:
        if summary.total_breweries == 0:
            return "REQUIRES_COMPLETION", "No brewery identified in the image."
        return "REQUIRES_COMPLETION", (
            "Breweries and beers could not be verified automatically. "
            "Your help is needed to complete the analysis."
        )

    if error_messages:
        return "BLOCKED", error_messages[0]

    return "REQUIRES_COMPLETION", "Analysis complete, but it needs your review before saving."


# ============================================================================
# Runs
# ============================================================================


async def _arun_stage(func: Callable[[T], R], items: list[T], concurrency: int) -> list[R]:
    """Run func over items in worker threads, at most `concurrency` at a time."""
    sem = asyncio.Semaphore(concurrency)

    async def _bounded(item: T) -> R:
        async with sem:
            return await asyncio.to_thread(func, item)

    return list(await asyncio.gather(*(_bounded(item) for item in items)))


def _safe_brewery(
    candidate: CandidateBrewery,
    canonical: list[CanonicalBrewery],
    strict_grounding_mode: bool,
    rules: Rules,
) -> _Result:
    events: list[TraceEvent] = []
    try:
        return validate_brewery(candidate, canonical, strict_grounding_mode, rules, events), events
    except Exception as e:
        logger.error(f"Brewery validation failed for '{candidate.name}': {e}")
        events.append(TraceEvent(stage="brewery", event="error", candidate=candidate.name, detail={"error": str(e)}))
        failed = EntityValidation(
            kind="brewery", candidate_id=candidate.id, name=candidate.name, candidate=candidate,
            issues=[f"Technical error: {e}"],
        )
        return _require(failed, retry_action("brewery", candidate.name, candidate.id)), events


def _safe_beer(
    candidate: CandidateBeer,
    verified_breweries: list[EntityValidation],
    sole_beer: bool,
    rules: Rules,
) -> _Result:
    events: list[TraceEvent] = []
    try:
        return validate_beer(candidate, verified_breweries, sole_beer, rules, events), events
    except Exception as e:
        logger.error(f"Beer validation failed for '{candidate.name}': {e}")
        events.append(TraceEvent(stage="beer", event="error", candidate=candidate.name, detail={"error": str(e)}))
        failed = EntityValidation(
            kind="beer", candidate_id=candidate.id, name=candidate.name, candidate=candidate,
            issues=[f"Technical error: {e}"],
        )
        return _require(failed, retry_action("beer", candidate.name, candidate.id)), events


async def avalidate_candidates(
    breweries: list[CandidateBrewery],
    beers: list[CandidateBeer],
    canonical: list[CanonicalBrewery],
    strict_grounding_mode: bool = False,
    rules: Rules = DEFAULT_RULES,
    concurrency: int = 4,
) -> ValidationOutcome:
    """Async implementation — validates each stage's candidates concurrently."""
    concurrency = max(1, concurrency)
    outcome = ValidationOutcome(
        summary=ValidationSummary(total_breweries=len(breweries), total_beers=len(beers)),
    )

    brewery_results = await _arun_stage(
        lambda c: _safe_brewery(c, canonical, strict_grounding_mode, rules), breweries, concurrency
    )
    _collect_breweries(outcome, brewery_results)

    verified = list(outcome.verified_breweries)
    sole_beer = len(beers) == 1
    beer_results = await _arun_stage(
        lambda c: _safe_beer(c, verified, sole_beer, rules), beers, concurrency
    )
    _collect_beers(outcome, beer_results)

    return _finish(outcome)


def validate_candidates(
    breweries: list[CandidateBrewery],
    beers: list[CandidateBeer],
    canonical: list[CanonicalBrewery],
    strict_grounding_mode: bool = False,
    rules: Rules = DEFAULT_RULES,
    concurrency: int = 1,
) -> ValidationOutcome:
    """Run the full pipeline over one canonical snapshot.

    Args:
        breweries: Brewery candidates from the AI extraction
        beers: Beer candidates from the AI extraction
        canonical: Canonical breweries, fetched once by the caller
        strict_grounding_mode: Hard-block low-quality ungrounded breweries
        rules: Thresholds, weights and lexicon
        concurrency: Validate up to this many candidates per stage at once

    Returns:
        ValidationOutcome with one flow decision
    """
    if concurrency > 1:
        return asyncio.run(
            avalidate_candidates(breweries, beers, canonical, strict_grounding_mode, rules, concurrency)
        )

    outcome = ValidationOutcome(
        summary=ValidationSummary(total_breweries=len(breweries), total_beers=len(beers)),
    )
    _collect_breweries(
        outcome, [_safe_brewery(c, canonical, strict_grounding_mode, rules) for c in breweries]
    )

    verified = list(outcome.verified_breweries)
    sole_beer = len(beers) == 1
    _collect_beers(outcome, [_safe_beer(c, verified, sole_beer, rules) for c in beers])

    return _finish(outcome)


def validate_extraction(
    extraction: AIExtraction,
    source: CanonicalSource,
    strict_grounding_mode: bool = False,
    rules: Rules = DEFAULT_RULES,
    concurrency: int = 1,
) -> ValidationOutcome:
    """Fetch the canonical snapshot once, then validate an AI extraction.

    A failing lookup blocks the whole run with a single RETRY action rather
    than validating against missing data.
    """
    logger.info(
        f"Validating extraction: {len(extraction.breweries)} breweries, {len(extraction.beers)} beers"
    )
    try:
        canonical = source.list_breweries()
    except Exception as e:
        logger.error(f"Canonical brewery lookup failed: {e}")
        return blocked_outcome(extraction, f"Validation error: {e}")

    outcome = validate_candidates(
        extraction.breweries,
        extraction.beers,
        canonical,
        strict_grounding_mode=strict_grounding_mode,
        rules=rules,
        concurrency=concurrency,
    )
    outcome.trace.insert(0, TraceEvent(stage="fetch", event="canonical_loaded", detail={"breweries": len(canonical)}))
    return outcome


def blocked_outcome(extraction: AIExtraction, error: str) -> ValidationOutcome:
    """Outcome for a run that could not start at all."""
    return ValidationOutcome(
        flow="BLOCKED",
        message=error,
        error_messages=[error],
        user_actions=[
            UserAction(
                type="RETRY",
                title="Retry the analysis",
                description="A technical error occurred. Try again, possibly with another image.",
                priority="high",
            )
        ],
        summary=ValidationSummary(
            total_breweries=len(extraction.breweries), total_beers=len(extraction.beers)
        ),
        trace=[TraceEvent(stage="fetch", event="error", detail={"error": error})],
    )


def _collect_breweries(outcome: ValidationOutcome, results: list[_Result]) -> None:
    for validation, events in results:
        outcome.trace.extend(events)
        if validation.is_valid:
            outcome.verified_breweries.append(validation)
            outcome.summary.verified_breweries += 1
        else:
            outcome.unverified_breweries.append(validation)
            outcome.summary.unverified_breweries += 1
            if validation.user_action is not None:
                outcome.user_actions.append(validation.user_action)


def _collect_beers(outcome: ValidationOutcome, results: list[_Result]) -> None:
    for validation, events in results:
        outcome.trace.extend(events)
        if validation.is_valid:
            outcome.verified_beers.append(validation)
            outcome.summary.verified_beers += 1
        else:
            outcome.unverified_beers.append(validation)
            outcome.summary.unverified_beers += 1
            if validation.user_action is not None:
                outcome.user_actions.append(validation.user_action)


def _finish(outcome: ValidationOutcome) -> ValidationOutcome:
    flow, message = classify_flow(outcome.summary, outcome.user_actions, outcome.error_messages)
    outcome.flow = flow
    outcome.message = message
    outcome.trace.append(TraceEvent(
        stage="flow", event=flow.lower(),
        detail={"user_actions": len(outcome.user_actions), **outcome.summary.model_dump()},
    ))
    logger.info(
        f"Validation complete: {flow} "
        f"({outcome.summary.verified_breweries}/{outcome.summary.total_breweries} breweries, "
        f"{outcome.summary.verified_beers}/{outcome.summary.total_beers} beers, "
        f"{len(outcome.user_actions)} user actions)"
    )
    return outcome
