#!/usr/bin/env python3
"""
Opinion Engine
==============
Produces a conservative GREEN / YELLOW / RED clearance opinion from
namespace checks, classified findings and variant sets.

Tiering (first match wins):
    RED     any exact_conflict or phonetic_conflict, or confusable risk
            overlapping a taken namespace (2+, or 1+ when conservative)
    YELLOW  unknown checks, near_conflict, coverage_gap, variant_taken,
            or minor confusable risk
    GREEN   everything available, nothing found

The score breakdown, top factors, narrative and actions explain the tier;
they never change it. All text comes from templates.py.

Usage:
    from nameclear.scoring.opinion import score_opinion

    opinion = score_opinion(checks, findings, variant_sets)
    print(opinion.tier.value, opinion.summary)
"""

import logging
import re
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from nameclear.models import (
    Alternative,
    CheckStatus,
    ClosestConflict,
    Coverage,
    Evidence,
    Finding,
    FindingKind,
    NamespaceCheck,
    NextAction,
    Opinion,
    RecommendedAction,
    RiskTolerance,
    Severity,
    Tier,
    TopFactor,
    VariantSet,
    parse_findings,
)
from nameclear.numeric import encode_uri_component, percent
from nameclear.settings import get_setting, require_setting

from .findings import MARKET_NAMESPACE, is_market_signal
from .templates import (
    ACTION_TEMPLATES,
    ALL_CLEAR_PADDING,
    DISCLAIMER,
    FACTOR_TEMPLATES,
    FactorWeight,
    narrative_for,
)
from .weights import compute_score_breakdown

logger = logging.getLogger(__name__)

DEFAULT_CHANNELS = list(require_setting("opinion.default_channels"))
TOP_FACTORS_MIN = int(require_setting("scoring.top_factors.min"))
TOP_FACTORS_MAX = int(require_setting("scoring.top_factors.max"))
RESERVATION_LINKS = require_setting("reservation_links")
FALLBACK_TLDS = list(get_setting("reservation_links.fallback_tlds", ["com"]))

_NAMESPACE_RE = re.compile(r'in (\S+)$')
_NAME_RE = re.compile(r'Name "([^"]+)"')
_VARIANT_RE = re.compile(r'variant "([^"]+)"')
_QUOTED_RE = re.compile(r"'([^']+)'")


def _match(pattern: re.Pattern, text: str, default: str) -> str:
    found = pattern.search(text or "")
    return found.group(1) if found else default


def _of_kind(findings: Sequence[Finding], kind: FindingKind) -> List[Finding]:
    return [f for f in findings if f.kind is kind]


# =============================================================================
# Top factors / narrative / next actions
# =============================================================================

def _factor(factor_name: str, **ctx) -> TopFactor:
    template = FACTOR_TEMPLATES[factor_name]
    return TopFactor(
        factor=factor_name,
        statement=template.render(**ctx),
        weight=template.weight.value,
        category=template.category,
    )


def extract_top_factors(checks: Sequence[NamespaceCheck],
                        findings: Sequence[Finding],
                        tier: Tier,
                        candidate_name: str) -> List[TopFactor]:
    """
    The 3-5 factors that drove the tier, most important first.

    Sorted by weight bucket (critical > major > moderate > minor), then by
    factor name. Green opinions are padded to the minimum with all-clear
    entries.
    """
    factors = []

    for f in _of_kind(findings, FindingKind.EXACT_CONFLICT):
        factors.append(_factor(
            "namespace_collision",
            name=candidate_name,
            namespace=_match(_NAMESPACE_RE, f.summary, "a namespace"),
        ))

    for f in _of_kind(findings, FindingKind.PHONETIC_CONFLICT):
        factors.append(_factor(
            "phonetic_overlap",
            conflict_mark=_match(_NAME_RE, f.summary, "unknown"),
            pct=f.score or 0,
        ))

    confusables = _of_kind(findings, FindingKind.CONFUSABLE_RISK)
    if confusables:
        factors.append(_factor("confusable_variants", count=len(confusables)))

    for f in _of_kind(findings, FindingKind.VARIANT_TAKEN):
        factors.append(_factor(
            "fuzzy_squatting_risk",
            variant=_match(_VARIANT_RE, f.summary, "unknown"),
            namespace=_match(_NAMESPACE_RE, f.summary, "a namespace"),
        ))

    for f in _of_kind(findings, FindingKind.NEAR_CONFLICT):
        factors.append(_factor(
            "near_miss",
            mark=_match(_NAME_RE, f.summary, "unknown"),
            pct=f.score or 0,
        ))

    unknown_count = sum(1 for c in checks if c.status is CheckStatus.UNKNOWN)
    if unknown_count:
        factors.append(_factor("coverage_gap", count=unknown_count))

    if tier is Tier.GREEN and not factors:
        available_count = sum(1 for c in checks if c.status is CheckStatus.AVAILABLE)
        factors.append(_factor("all_clear", count=available_count))

    factors.sort(key=lambda f: (FactorWeight(f.weight).rank, f.factor))

    if len(factors) > TOP_FACTORS_MAX:
        return factors[:TOP_FACTORS_MAX]
    if tier is Tier.GREEN:
        while len(factors) < TOP_FACTORS_MIN:
            factors.append(TopFactor(
                factor="all_clear",
                statement=ALL_CLEAR_PADDING,
                weight=FactorWeight.MINOR.value,
                category="all_clear",
            ))
    return factors


def generate_risk_narrative(tier: Tier, top_factors: Sequence[TopFactor], candidate_name: str) -> str:
    """Pick the narrative for the tier and the dominant (first) top factor."""
    dominant = top_factors[0] if top_factors else None
    category = dominant.category if dominant else "all_clear"
    conflict_mark = _match(_QUOTED_RE, dominant.statement if dominant else "", "unknown")
    return narrative_for(tier, category).render(name=candidate_name, conflict_mark=conflict_mark)


def _action(tier: Tier, kind: str, url: Optional[str] = None, **ctx) -> NextAction:
    template = ACTION_TEMPLATES[tier][kind]
    return NextAction(
        type=kind,
        label=template.label.format(**ctx),
        reason=template.reason.format(**ctx),
        urgency=template.urgency,
        url=url,
    )


def build_next_actions(checks: Sequence[NamespaceCheck],
                       tier: Tier,
                       candidate_name: str,
                       safer_alternatives: Optional[Sequence[Alternative]] = None,
                       claim_links: Sequence[str] = (),
                       domain_links: Sequence[str] = ()) -> List[NextAction]:
    """
    Coaching actions for the tier.

    Distinct from recommended actions (reservation links): these tell the
    user what to do next and how urgently.
    """
    safer_alternatives = list(safer_alternatives or [])
    available = [c for c in checks if c.status is CheckStatus.AVAILABLE and not c.query.is_variant]
    top_alternatives = ", ".join(a.name for a in safer_alternatives[:2]) or "none generated"
    actions = []

    if tier is Tier.GREEN:
        namespaces = ", ".join(dict.fromkeys(c.namespace for c in available))
        actions.append(_action(
            tier, "claim_now",
            url=claim_links[0] if claim_links else None,
            name=candidate_name,
            available_count=len(available),
            available_namespaces=namespaces or "available namespaces",
        ))
        domains = [c.query.value for c in available if c.namespace == "domain" and c.query.value]
        if any(c.namespace == "domain" for c in available):
            actions.append(_action(
                tier, "register_domain",
                url=domain_links[0] if domain_links else None,
                available_domains=", ".join(domains) or "available domains",
            ))
    elif tier is Tier.YELLOW:
        actions.append(_action(tier, "recheck_soon"))
        if safer_alternatives:
            actions.append(_action(tier, "try_alternative", top_alternatives=top_alternatives))
        actions.append(_action(tier, "consult_counsel"))
    else:
        actions.append(_action(tier, "try_alternative", top_alternatives=top_alternatives))
        actions.append(_action(tier, "consult_counsel"))

    return actions


# =============================================================================
# Coverage / reservation links
# =============================================================================

def compute_coverage(checks: Iterable[Any], channels: Optional[Sequence[str]] = None) -> Coverage:
    """
    Share of primary (non-variant) checks that returned a definite answer.

    Args:
        checks: Namespace checks (records or dicts)
        channels: Requested channels, named in the disclaimer

    Returns:
        Coverage with score, sorted unique unchecked namespaces and the
        static disclaimer
    """
    checks = [NamespaceCheck.from_dict(c) for c in checks]
    channels = list(channels) if channels else list(DEFAULT_CHANNELS)

    primary = [c for c in checks if not c.query.is_variant]
    successful = sum(1 for c in primary if c.status is not CheckStatus.UNKNOWN)
    coverage_score = percent(successful, len(primary) or 1)
    unchecked = sorted({c.namespace for c in primary if c.status is CheckStatus.UNKNOWN})

    return Coverage(
        coverage_score=coverage_score,
        unchecked_namespaces=unchecked,
        disclaimer=DISCLAIMER.format(channels=", ".join(channels), coverage_score=coverage_score),
    )


def build_reservation_links(candidate_name: str, checks: Iterable[Any]) -> Tuple[List[str], List[str]]:
    """
    Search/registration links for available namespaces. Never purchases.

    Returns:
        ``(claim_links, domain_links)`` in check order
    """
    claim_links = []
    domain_links = []
    encoded = encode_uri_component(candidate_name)

    for check in (NamespaceCheck.from_dict(c) for c in checks):
        if check.status is not CheckStatus.AVAILABLE or check.query.is_variant:
            continue
        template = RESERVATION_LINKS.get(check.namespace)
        if not isinstance(template, str):
            continue
        if check.namespace == "domain":
            fqdn = check.query.value or f"{candidate_name}.com"
            domain_links.append(template.format(fqdn=encode_uri_component(fqdn)))
        else:
            claim_links.append(template.format(name=encoded))

    return claim_links, domain_links


def _fallback_domain_links(candidate_name: str) -> List[str]:
    template = RESERVATION_LINKS["domain"]
    encoded = encode_uri_component(candidate_name)
    return [template.format(fqdn=f"{encoded}.{tld}") for tld in FALLBACK_TLDS]


# =============================================================================
# Opinion
# =============================================================================

def _recommended_actions(tier: Tier, candidate_name: str, checks: Sequence[NamespaceCheck],
                         claim_links: List[str], domain_links: List[str]) -> List[RecommendedAction]:
    available = sum(1 for c in checks if c.status is CheckStatus.AVAILABLE)
    unknown = sum(1 for c in checks if c.status is CheckStatus.UNKNOWN)
    has_domain_checks = any(c.namespace == "domain" for c in checks)
    actions = []

    if tier is Tier.GREEN:
        actions.append(RecommendedAction(
            type="claim_handles",
            label="Claim namespace handles now",
            details=f"All {available} namespaces are available. Reserve them before someone else does.",
            links=claim_links,
        ))
        if not has_domain_checks:
            actions.append(RecommendedAction(
                type="reserve_domain",
                label="Consider reserving a domain",
                details="Domain availability was not checked. Consider registering a matching domain.",
                links=_fallback_domain_links(candidate_name),
            ))
        elif domain_links:
            actions.append(RecommendedAction(
                type="reserve_domain",
                label="Reserve available domains",
                details="Some domains are available for registration.",
                links=domain_links,
            ))
    elif tier is Tier.YELLOW:
        if unknown:
            actions.append(RecommendedAction(
                type="expand_search_coverage",
                label="Re-run checks for unavailable namespaces",
                details=f"{unknown} check(s) failed. Re-run when network is available.",
            ))
        actions.append(RecommendedAction(
            type="consult_counsel",
            label="Review near-conflicts with counsel",
            details="Some potential conflicts were detected. A trademark professional can assess risk.",
        ))
    else:
        actions.append(RecommendedAction(
            type="pick_variant",
            label="Consider alternative names",
            details="The candidate name has direct conflicts. Evaluate variant forms or choose a different name.",
        ))
        actions.append(RecommendedAction(
            type="consult_counsel",
            label="Consult trademark counsel before proceeding",
            details="Strong conflicts detected. Professional legal review is strongly recommended.",
        ))

    return actions


def _limitations(checks: Sequence[NamespaceCheck], evidence: Sequence[Evidence]) -> List[str]:
    limitations = ["This engine does not check trademark databases (USPTO, EUIPO, etc.)."]
    if not any(c.namespace == "domain" for c in checks):
        limitations.append("Domain name availability is not checked in this version.")

    unknown = sum(1 for c in checks if c.status is CheckStatus.UNKNOWN)
    if unknown:
        limitations.append(f"{unknown} namespace(s) could not be checked due to network errors.")

    has_market = any(
        is_market_signal(c) or (c.namespace == MARKET_NAMESPACE and c.source)
        for c in checks
    )
    has_corpus = any(e.source_system == "user_corpus" for e in evidence)
    if has_market:
        limitations.append(
            "Collision radar results are indicative market-usage signals, not trademark searches."
        )
    if has_corpus:
        limitations.append(
            "Corpus comparison is against user-provided marks only, not an exhaustive trademark database."
        )
    if not has_market and not has_corpus:
        limitations.append(
            "No market-usage signal search was performed. Supply market search results to enable."
        )
    return limitations


def score_opinion(checks: Iterable[Any],
                  findings: Iterable[Any],
                  variant_sets: Iterable[Any] = (),
                  risk_tolerance: Any = RiskTolerance.CONSERVATIVE,
                  intake_channels: Optional[Sequence[str]] = None,
                  channels: Optional[Sequence[str]] = None,
                  evidence: Iterable[Any] = (),
                  safer_alternatives: Optional[Sequence[Alternative]] = None) -> Opinion:
    """
    Score a clearance opinion.

    Args:
        checks: Namespace checks (records or dicts)
        findings: Classified findings (records or dicts)
        variant_sets: Variant sets; the first names the candidate
        risk_tolerance: conservative (default), balanced or aggressive
        intake_channels: Channels the caller asked to check (DuPont overlap)
        channels: Channels named in the coverage disclaimer
        evidence: Evidence records, used to detect corpus comparison
        safer_alternatives: Suggestions offered in yellow/red next actions

    Returns:
        Fully populated Opinion, even for empty inputs
    """
    checks = [NamespaceCheck.from_dict(c) for c in checks]
    findings = parse_findings(findings)
    variant_sets = [VariantSet.from_dict(v) for v in variant_sets]
    evidence = [Evidence.from_dict(e) for e in evidence]
    tolerance = RiskTolerance.coerce(risk_tolerance)

    taken = [c for c in checks if c.status is CheckStatus.TAKEN]
    available = [c for c in checks if c.status is CheckStatus.AVAILABLE]
    unknown = [c for c in checks if c.status is CheckStatus.UNKNOWN]

    exact = _of_kind(findings, FindingKind.EXACT_CONFLICT)
    phonetic = _of_kind(findings, FindingKind.PHONETIC_CONFLICT)
    confusable = _of_kind(findings, FindingKind.CONFUSABLE_RISK)
    near = _of_kind(findings, FindingKind.NEAR_CONFLICT)
    gaps = _of_kind(findings, FindingKind.COVERAGE_GAP)
    variant_taken = _of_kind(findings, FindingKind.VARIANT_TAKEN)

    reasons = []
    closest_conflicts = []

    if exact:
        reasons.append(f"Exact conflict: {len(exact)} namespace(s) already taken with this exact name")
        for f in exact:
            closest_conflicts.append(ClosestConflict(
                mark=f.candidate_mark,
                why=[f"Exact name match in namespace: {f.summary}"],
                severity=Severity.HIGH.value,
                evidence_refs=list(f.evidence_refs),
            ))

    if phonetic:
        reasons.append(f"Phonetic conflict: {len(phonetic)} name(s) sound similar to existing taken names")
        for f in phonetic:
            closest_conflicts.append(ClosestConflict(
                mark=f.candidate_mark,
                why=[f"Phonetic similarity: {f.summary}"],
                severity=Severity.HIGH.value,
                evidence_refs=list(f.evidence_refs),
            ))

    # Confusables only block when a taken namespace exists to be confused with
    confusable_with_taken = [f for f in confusable if f.severity is Severity.HIGH and taken]
    confusable_blocks = len(confusable_with_taken) >= 2 or (
        tolerance is RiskTolerance.CONSERVATIVE and len(confusable_with_taken) >= 1
    )
    if confusable_blocks:
        reasons.append(
            f"Confusable risk: {len(confusable_with_taken)} homoglyph/confusable variant(s) "
            f"overlap with taken namespaces"
        )

    is_red = bool(exact or phonetic or confusable_blocks)

    if unknown:
        reasons.append(f"{len(unknown)} namespace check(s) returned unknown (network issues)")
    if near:
        reasons.append(f"Near conflict: {len(near)} similar name(s) found")
    if gaps:
        reasons.append(f"Coverage gap: {len(gaps)} namespace(s) not checked")
    if confusable and not confusable_blocks:
        reasons.append(f"Confusable risk: {len(confusable)} minor homoglyph variant(s) detected")
    if variant_taken:
        reasons.append(f"Variant taken: {len(variant_taken)} fuzzy variant(s) found in registries")

    is_yellow = not is_red and bool(
        unknown or near or gaps or variant_taken or (confusable and not confusable_blocks)
    )

    if is_red:
        tier = Tier.RED
    elif is_yellow:
        tier = Tier.YELLOW
    else:
        tier = Tier.GREEN
        reasons.append(f"All {len(available)} namespace check(s) returned available with no conflicts")

    logger.debug(
        f"Tier {tier.value}: exact={len(exact)} phonetic={len(phonetic)} "
        f"confusable={len(confusable)} near={len(near)} unknown={len(unknown)}"
    )

    candidate_name = variant_sets[0].candidate_mark if variant_sets else "unknown"
    candidate_names = ", ".join(v.candidate_mark for v in variant_sets) or "unknown"

    claim_links, domain_links = build_reservation_links(candidate_name, checks)

    if tier is Tier.GREEN:
        summary = f'All namespaces available for "{candidate_names}". No conflicts detected. Safe to proceed with claims.'
    elif tier is Tier.YELLOW:
        summary = (
            f'Some concerns found for "{candidate_names}". '
            f'{len(reasons)} issue(s) need review before proceeding.'
        )
    else:
        summary = (
            f'Conflicts detected for "{candidate_names}". '
            f'{len(reasons)} blocking issue(s) found. Name change recommended.'
        )

    top_factors = extract_top_factors(checks, findings, tier, candidate_name)
    coverage = compute_coverage(checks, channels)

    return Opinion(
        tier=tier,
        summary=summary,
        reasons=reasons,
        assumptions=[
            "Namespace availability is checked at a point in time and may change.",
            "This opinion covers digital namespace availability only, not trademark registration.",
        ],
        limitations=_limitations(checks, evidence),
        recommended_actions=_recommended_actions(tier, candidate_name, checks, claim_links, domain_links),
        closest_conflicts=closest_conflicts,
        score_breakdown=compute_score_breakdown(checks, findings, tolerance, intake_channels),
        top_factors=top_factors,
        risk_narrative=generate_risk_narrative(tier, top_factors, candidate_name),
        next_actions=build_next_actions(
            checks, tier, candidate_name,
            safer_alternatives=safer_alternatives,
            claim_links=claim_links,
            domain_links=domain_links,
        ),
        coverage_score=coverage.coverage_score,
        unchecked_namespaces=coverage.unchecked_namespaces,
        disclaimer=coverage.disclaimer,
        safer_alternatives=list(safer_alternatives) if safer_alternatives is not None else None,
    )
