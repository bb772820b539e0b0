#!/usr/bin/env python3
"""
Explainable Score Breakdown
===========================
Weighted sub-scores for the "why this tier?" view of an opinion.

The tier itself is decided by rules in opinion.py (an exact conflict is
always red, whatever the score). The breakdown is explanation only and
never overrides the tier.

Sub-scores (0-100):
- namespaceAvailability: share of non-domain checks that are available
- coverageCompleteness: share of the core namespaces that were checked
- conflictSeverity: 100 minus per-finding deductions, clamped at 0
- domainAvailability: share of domain checks available (50 if none)

DuPont-lite factors are deterministic proxies loosely modelled on the
likelihood-of-confusion factors (similarity of marks, channels, fame,
intent). They are signals, not legal conclusions.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from nameclear.models import (
    DupontFactor,
    DupontFactors,
    Finding,
    FindingKind,
    NamespaceCheck,
    RiskTolerance,
    ScoreBreakdown,
    SubScore,
    parse_findings,
)
from nameclear.numeric import round_half_up
from nameclear.settings import require_setting

from .findings import is_market_signal

logger = logging.getLogger(__name__)

SUBSCORE_KEYS = (
    "namespace_availability",
    "coverage_completeness",
    "conflict_severity",
    "domain_availability",
)


def _load_weight_profiles() -> Dict[RiskTolerance, Dict[str, int]]:
    raw = require_setting("scoring.weight_profiles")
    profiles = {}
    for tolerance in RiskTolerance:
        profile = raw.get(tolerance.value)
        if not profile:
            raise ValueError(f"scoring.weight_profiles.{tolerance.value} must be set in app.yaml")
        weights = {key: int(profile.get(key, 0)) for key in SUBSCORE_KEYS}
        total = sum(weights.values())
        if total != 100:
            raise ValueError(
                f"scoring.weight_profiles.{tolerance.value} must sum to 100 (got {total})"
            )
        profiles[tolerance] = weights
    return profiles


def _load_tier_thresholds() -> Dict[RiskTolerance, Dict[str, int]]:
    raw = require_setting("scoring.tier_thresholds")
    thresholds = {}
    for tolerance in RiskTolerance:
        entry = raw.get(tolerance.value)
        if not entry or "green" not in entry or "yellow" not in entry:
            raise ValueError(f"scoring.tier_thresholds.{tolerance.value} must be set in app.yaml")
        thresholds[tolerance] = {"green": int(entry["green"]), "yellow": int(entry["yellow"])}
    return thresholds


WEIGHT_PROFILES = _load_weight_profiles()
TIER_THRESHOLDS = _load_tier_thresholds()

COVERAGE_NAMESPACES = tuple(require_setting("scoring.coverage_namespaces"))
CONFLICT_DEDUCTIONS = {
    FindingKind(kind): int(points)
    for kind, points in require_setting("scoring.conflict_deductions").items()
}
UNCHECKED_DOMAIN_SCORE = int(require_setting("scoring.unchecked_domain_score"))

_DUPONT = require_setting("scoring.dupont")
FAME_THRESHOLD = float(_DUPONT["fame_threshold"])
FAME_STEP = int(_DUPONT["fame_step"])
INTENT_STEP = int(_DUPONT["intent_step"])


def get_weight_profile(risk_tolerance: Any = None) -> Dict[str, int]:
    """Weights for a risk tolerance; unknown values get the conservative profile."""
    return dict(WEIGHT_PROFILES[RiskTolerance.coerce(risk_tolerance)])


def _plural(count: int, word: str) -> str:
    return f"{word}{'' if count == 1 else 's'}"


# =============================================================================
# Sub-scores
# =============================================================================

def _namespace_availability(checks: List[NamespaceCheck]) -> tuple:
    ns_checks = [c for c in checks if c.namespace != "domain"]
    available = sum(1 for c in ns_checks if c.status.value == "available")
    score = round_half_up(available / len(ns_checks) * 100) if ns_checks else 100
    return score, f"{available}/{len(ns_checks)} {_plural(len(ns_checks), 'namespace')} available"


def _coverage_completeness(checks: List[NamespaceCheck]) -> tuple:
    checked = {c.namespace for c in checks}
    checked_count = sum(1 for ns in COVERAGE_NAMESPACES if ns in checked)
    total = len(COVERAGE_NAMESPACES)
    score = round_half_up(checked_count / total * 100) if total else 100
    unchecked = [ns for ns in COVERAGE_NAMESPACES if ns not in checked]
    details = f"{checked_count}/{total} channels checked"
    if unchecked:
        details += f" ({', '.join(unchecked)} not checked)"
    return score, details


def _conflict_severity(findings: List[Finding]) -> tuple:
    score = 100
    for finding in findings:
        score -= CONFLICT_DEDUCTIONS.get(finding.kind, 0)
    score = max(0, min(100, score))
    if not findings:
        return score, "No conflicts detected"
    return score, f"{len(findings)} {_plural(len(findings), 'finding')} detected (score deducted)"


def _domain_availability(checks: List[NamespaceCheck]) -> tuple:
    domain_checks = [c for c in checks if c.namespace == "domain"]
    if not domain_checks:
        return UNCHECKED_DOMAIN_SCORE, "Domain not checked"

    available = sum(1 for c in domain_checks if c.status.value == "available")
    taken = sum(1 for c in domain_checks if c.is_taken)
    score = round_half_up(available / len(domain_checks) * 100)
    details = f"{available}/{len(domain_checks)} {_plural(len(domain_checks), 'domain')} available"
    if taken:
        details += f" ({taken} taken)"
    return score, details


# =============================================================================
# Public API
# =============================================================================

def compute_dupont_factors(checks: Iterable[Any],
                           findings: Iterable[Any],
                           intake_channels: Optional[List[str]] = None) -> DupontFactors:
    """
    DuPont-lite proxy factors.

    Args:
        checks: Namespace checks (records or dicts)
        findings: Classified findings (records or dicts)
        intake_channels: Channels the caller asked to check; the channel
            overlap denominator (1 when empty)
    """
    checks = [NamespaceCheck.from_dict(c) for c in checks]
    findings = parse_findings(findings)
    market = [c for c in checks if is_market_signal(c)]

    # Similarity of marks: strongest market match, first one wins ties
    best = None
    best_check = None
    for check in market:
        sim = check.similarity
        if sim.overall > (best.overall if best else 0):
            best, best_check = sim, check
    if best is not None:
        similarity_score = round_half_up(best.overall * 100)
        similarity_rationale = (
            f"Highest similarity: {similarity_score}% ({best.looks.label} visual, "
            f"{best.sounds.label} phonetic) against '{best_check.query.value or 'unknown'}'"
        )
    else:
        similarity_score = 0
        similarity_rationale = "No similar marks detected in market search"

    # Channel overlap: distinct taken registries over requested channels
    total_channels = len(intake_channels or []) or 1
    taken_namespaces = {c.namespace for c in checks if c.is_taken and not is_market_signal(c)}
    overlap_score = min(round_half_up(len(taken_namespaces) / total_channels * 100), 100)
    overlap_rationale = f"{len(taken_namespaces)} of {total_channels} channel(s) have conflicts"

    high_sim_count = sum(1 for c in market if c.similarity.overall >= FAME_THRESHOLD)
    fame_score = min(high_sim_count * FAME_STEP, 100)
    if high_sim_count:
        fame_rationale = f"{high_sim_count} high-similarity result(s) in market search suggest an established mark"
    else:
        fame_rationale = "No high-similarity results found in market search"

    variant_count = sum(1 for f in findings if f.kind is FindingKind.VARIANT_TAKEN)
    intent_score = min(variant_count * INTENT_STEP, 100)
    if variant_count:
        intent_rationale = f"{variant_count} edit-distance=1 variant(s) taken, possible typosquatting risk"
    else:
        intent_rationale = "No typosquatting indicators detected"

    return DupontFactors(
        similarity_of_marks=DupontFactor(similarity_score, similarity_rationale),
        channel_overlap=DupontFactor(overlap_score, overlap_rationale),
        fame_proxy=DupontFactor(fame_score, fame_rationale),
        intent_proxy=DupontFactor(intent_score, intent_rationale),
    )


def compute_score_breakdown(checks: Iterable[Any],
                            findings: Iterable[Any],
                            risk_tolerance: Any = None,
                            intake_channels: Optional[List[str]] = None) -> ScoreBreakdown:
    """
    Compute the four weighted sub-scores and the overall score.

    Args:
        checks: Namespace checks (records or dicts)
        findings: Classified findings (records or dicts)
        risk_tolerance: conservative (default), balanced or aggressive
        intake_channels: Requested channels, for the DuPont channel overlap

    Returns:
        ScoreBreakdown with overallScore = round(sum(score * weight) / sum(weight))
    """
    checks = [NamespaceCheck.from_dict(c) for c in checks]
    findings = parse_findings(findings)
    tolerance = RiskTolerance.coerce(risk_tolerance)
    weights = WEIGHT_PROFILES[tolerance]

    parts = {
        "namespace_availability": _namespace_availability(checks),
        "coverage_completeness": _coverage_completeness(checks),
        "conflict_severity": _conflict_severity(findings),
        "domain_availability": _domain_availability(checks),
    }
    subscores = {
        key: SubScore(score=score, weight=weights[key], details=details)
        for key, (score, details) in parts.items()
    }

    total_weight = sum(weights.values())
    weighted = sum(s.score * s.weight for s in subscores.values())
    overall = round_half_up(weighted / total_weight)
    logger.debug(f"Score breakdown ({tolerance.value}): overall={overall}")

    return ScoreBreakdown(
        namespace_availability=subscores["namespace_availability"],
        coverage_completeness=subscores["coverage_completeness"],
        conflict_severity=subscores["conflict_severity"],
        domain_availability=subscores["domain_availability"],
        overall_score=overall,
        tier_thresholds=dict(TIER_THRESHOLDS[tolerance]),
        dupont_factors=compute_dupont_factors(checks, findings, intake_channels),
    )
