#!/usr/bin/env python3
"""
Analysis Pipeline
=================
In-memory composition of the whole engine for one candidate:

    variants -> classify findings -> corpus comparison -> opinion
             -> safer alternatives / collision cards (optional)

The caller supplies namespace checks (from whatever adapters it runs);
nothing here touches the network or the clock, so identical inputs give
an identical AnalysisResult, run id included.

Usage:
    from nameclear.pipeline import analyze

    result = analyze("MyCoolTool", checks, risk_tolerance="balanced")
    print(result.opinion.tier.value)
    print(json.dumps(result.to_dict(), indent=2))
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from nameclear.corpus import CorpusMark, compare_against_corpus
from nameclear.ids import hash_object
from nameclear.models import (
    Evidence,
    Finding,
    NamespaceCheck,
    Opinion,
    RiskTolerance,
    VariantSet,
    parse_findings,
)
from nameclear.scoring.alternatives import generate_alternatives
from nameclear.scoring.collision_cards import build_collision_cards
from nameclear.scoring.findings import classify_findings
from nameclear.scoring.opinion import DEFAULT_CHANNELS, score_opinion
from nameclear.variants import generate_variants

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0.0"


@dataclass
class AnalysisResult:
    """Everything one analysis produced, in contract shape via to_dict()."""
    run_id: str
    inputs_sha256: str
    intake: Dict[str, Any]
    variants: List[VariantSet]
    checks: List[NamespaceCheck]
    findings: List[Finding]
    evidence: List[Evidence] = field(default_factory=list)
    opinion: Optional[Opinion] = None

    @property
    def tier(self) -> Optional[str]:
        return self.opinion.tier.value if self.opinion else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schemaVersion": SCHEMA_VERSION,
            "run": {"runId": self.run_id, "inputsSha256": self.inputs_sha256},
            "intake": dict(self.intake),
            "variants": {"items": [v.to_dict() for v in self.variants]},
            "checks": [c.to_dict() for c in self.checks],
            "findings": [f.to_dict() for f in self.findings],
            "evidence": [e.to_dict() for e in self.evidence],
            "opinion": self.opinion.to_dict() if self.opinion else None,
        }


def analyze(candidate: str,
            checks: Iterable[Any] = (),
            risk_tolerance: Any = RiskTolerance.CONSERVATIVE,
            corpus: Optional[Sequence[CorpusMark]] = None,
            intake_channels: Optional[Sequence[str]] = None,
            extra_findings: Sequence[Any] = (),
            evidence: Iterable[Any] = (),
            suggest: bool = False,
            cards: bool = False) -> AnalysisResult:
    """
    Run the full analysis for one candidate.

    Args:
        candidate: The proposed name
        checks: Namespace checks from external adapters (records or dicts)
        risk_tolerance: conservative (default), balanced or aggressive
        corpus: Known marks to compare against offline
        intake_channels: Channels the caller checked (coverage and overlap)
        extra_findings: Caller findings such as coverage_gap, passed through
        evidence: Evidence records from the caller's adapters
        suggest: Attach five safer alternatives to the opinion
        cards: Attach collision cards to the opinion

    Returns:
        AnalysisResult with a run id derived from the inputs
    """
    checks = [NamespaceCheck.from_dict(c) for c in checks]
    evidence = [Evidence.from_dict(e) for e in evidence]
    tolerance = RiskTolerance.coerce(risk_tolerance)
    channels = list(intake_channels) if intake_channels else list(DEFAULT_CHANNELS)

    intake = {
        "candidates": [{"mark": candidate}],
        "channels": channels,
        "riskTolerance": tolerance.value,
    }
    inputs_sha256 = hash_object({
        "intake": intake,
        "checks": [c.to_dict() for c in checks],
        "extraFindings": [f.to_dict() for f in parse_findings(extra_findings)],
        "corpus": [m.to_dict() for m in corpus or []],
        "options": {"suggest": suggest, "cards": cards},
    })
    run_id = f"run.{inputs_sha256[:8]}"
    logger.info(f"Analyzing {candidate!r} ({run_id}, {len(checks)} check(s))")

    variant_set = generate_variants(candidate)
    findings = classify_findings(checks, [variant_set], extra_findings)

    corpus_conflicts = []
    if corpus:
        comparison = compare_against_corpus(candidate, list(corpus))
        findings.extend(comparison.findings)
        evidence.extend(comparison.evidence)
        corpus_conflicts = comparison.closest_conflicts

    alternatives = generate_alternatives(candidate) if suggest else None

    opinion = score_opinion(
        checks,
        findings,
        [variant_set],
        risk_tolerance=tolerance,
        intake_channels=channels,
        channels=channels,
        evidence=evidence,
        safer_alternatives=alternatives,
    )
    opinion.closest_conflicts.extend(corpus_conflicts)
    if cards:
        opinion.collision_cards = build_collision_cards(findings, checks)

    logger.info(f"{candidate!r}: tier={opinion.tier.value} score={opinion.score_breakdown.overall_score}")

    return AnalysisResult(
        run_id=run_id,
        inputs_sha256=inputs_sha256,
        intake=intake,
        variants=[variant_set],
        checks=checks,
        findings=findings,
        evidence=evidence,
        opinion=opinion,
    )
