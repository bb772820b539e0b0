#!/usr/bin/env python3
"""
Finding Classifier
==================
Turns namespace check results and variant warnings into typed findings.

Rules, applied to checks in input order:
1. Taken, authoritative lookup          -> exact_conflict (high, 100)
2. Taken, market signal with similarity -> phonetic_conflict / near_conflict
3. Taken fuzzy-variant query            -> variant_taken (medium, 60)
4. Homoglyph warnings                   -> confusable_risk, only when any
                                           check in the run is taken

Caller findings (coverage gaps, corpus matches) are appended unchanged.
"""

import logging
from typing import Any, Iterable, List, Sequence

from nameclear.ids import finding_id
from nameclear.models import (
    Finding,
    FindingKind,
    NamespaceCheck,
    Severity,
    VariantSet,
    WarningSeverity,
    parse_findings,
)
from nameclear.numeric import format_fixed, round_half_up
from nameclear.settings import require_setting
from nameclear.variants import HOMOGLYPH_WARNING_CODE

logger = logging.getLogger(__name__)

PHONETIC_THRESHOLD = float(require_setting("findings.phonetic_threshold"))
HIGH_SIMILARITY_THRESHOLD = float(require_setting("findings.high_similarity_threshold"))
EXACT_SCORE = int(require_setting("findings.exact_score"))
VARIANT_TAKEN_SCORE = int(require_setting("findings.variant_taken_score"))
CONFUSABLE_SCORES = require_setting("findings.confusable_scores")
MARKET_NAMESPACE = str(require_setting("findings.market_namespace"))


def is_market_signal(check: NamespaceCheck) -> bool:
    """
    True for checks that came from a cross-ecosystem search rather than a
    direct registry lookup: they carry a similarity payload and are either
    in the market namespace or marked indicative.
    """
    if check.similarity is None:
        return False
    return check.namespace == MARKET_NAMESPACE or check.authority.value == "indicative"


def _evidence_refs(check: NamespaceCheck) -> List[str]:
    return [check.evidence_ref] if check.evidence_ref else []


def _market_finding(check: NamespaceCheck, idx: int) -> Finding:
    comparison = check.similarity
    source = check.source or "unknown"

    if comparison.sounds.score >= PHONETIC_THRESHOLD:
        kind, severity = FindingKind.PHONETIC_CONFLICT, Severity.HIGH
    elif comparison.overall >= HIGH_SIMILARITY_THRESHOLD:
        kind, severity = FindingKind.NEAR_CONFLICT, Severity.HIGH
    else:
        kind, severity = FindingKind.NEAR_CONFLICT, Severity.MEDIUM

    return Finding(
        id=finding_id(kind.value, check.namespace, idx, sanitize=False),
        candidate_mark=check.query.candidate_mark or "unknown",
        kind=kind,
        summary=(
            f'Name "{check.query.value}" is in use ({source}), '
            f'similarity: {format_fixed(comparison.overall)}'
        ),
        severity=severity,
        score=round_half_up(comparison.overall * 100),
        why=list(comparison.why) + [f"Market usage signal from {source}"],
        evidence_refs=_evidence_refs(check),
    )


def _exact_finding(check: NamespaceCheck, idx: int) -> Finding:
    return Finding(
        id=finding_id(FindingKind.EXACT_CONFLICT.value, check.namespace, idx, sanitize=False),
        candidate_mark=check.query.candidate_mark or "unknown",
        kind=FindingKind.EXACT_CONFLICT,
        summary=f'Name "{check.query.value}" is taken in {check.namespace}',
        severity=Severity.HIGH,
        score=EXACT_SCORE,
        why=[f'{check.namespace} returned status "{check.status.value}" for "{check.query.value}"'],
        evidence_refs=_evidence_refs(check),
    )


def _variant_finding(check: NamespaceCheck, idx: int) -> Finding:
    value = check.query.value
    return Finding(
        id=finding_id(FindingKind.VARIANT_TAKEN.value, check.namespace, idx, sanitize=False),
        candidate_mark=check.query.original_candidate or check.query.candidate_mark or "unknown",
        kind=FindingKind.VARIANT_TAKEN,
        summary=f'Fuzzy variant "{value}" is taken in {check.namespace}',
        severity=Severity.MEDIUM,
        score=VARIANT_TAKEN_SCORE,
        why=[
            f'Edit-distance=1 variant "{value}" exists in {check.namespace}',
            "Typosquatting or confusion risk",
        ],
        evidence_refs=_evidence_refs(check),
    )


def classify_findings(checks: Iterable[Any],
                      variant_sets: Iterable[Any],
                      extra_findings: Sequence[Any] = ()) -> List[Finding]:
    """
    Classify namespace checks and variant warnings into findings.

    Args:
        checks: NamespaceCheck records or their dict form
        variant_sets: VariantSet records or their dict form
        extra_findings: Caller findings (e.g. coverage_gap) passed through
            after the classified ones

    Returns:
        Findings in classification order. Ids carry a running index shared
        across all classified findings.
    """
    checks = [NamespaceCheck.from_dict(c) for c in checks]
    variant_sets = [VariantSet.from_dict(v) for v in variant_sets]

    findings = []
    idx = 0

    for check in checks:
        if not check.is_taken or check.query.is_variant:
            continue
        if is_market_signal(check):
            finding = _market_finding(check, idx)
        else:
            finding = _exact_finding(check, idx)
        logger.debug(f"{check.namespace}: {check.query.value!r} -> {finding.kind.value}")
        findings.append(finding)
        idx += 1

    # Homoglyph risk stays a warning unless something in the run is taken
    if any(c.is_taken for c in checks):
        for variant_set in variant_sets:
            for warning in variant_set.warnings:
                if warning.code != HOMOGLYPH_WARNING_CODE:
                    continue
                high = warning.severity is WarningSeverity.HIGH
                findings.append(Finding(
                    id=finding_id(FindingKind.CONFUSABLE_RISK.value, variant_set.canonical, idx, sanitize=False),
                    candidate_mark=variant_set.candidate_mark,
                    kind=FindingKind.CONFUSABLE_RISK,
                    summary=warning.message,
                    severity=Severity.HIGH if high else Severity.LOW,
                    score=int(CONFUSABLE_SCORES["high" if high else "warn"]),
                    why=["Homoglyph substitution variants exist that could cause confusion with taken names"],
                    evidence_refs=[],
                ))
                idx += 1

    for check in checks:
        if check.is_taken and check.query.is_variant:
            findings.append(_variant_finding(check, idx))
            idx += 1

    findings.extend(parse_findings(extra_findings))

    logger.debug(f"Classified {len(findings)} finding(s) from {len(checks)} check(s)")
    return findings
