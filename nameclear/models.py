#!/usr/bin/env python3
"""
Data Model
==========
Typed records passed between the variant, classification and opinion stages.

Every record converts to the published contract shape with ``to_dict()``
(camelCase keys, enum values as plain strings). Records that arrive from
outside the engine (namespace checks, caller findings, similarity payloads)
are built with ``from_dict()``, which fills defaults instead of raising on
missing fields.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# Enumerations
# =============================================================================

class FormKind(Enum):
    """Kind of a spelling variant of the candidate."""
    ORIGINAL = "original"
    LOWER = "lower"
    NOSPACE = "nospace"
    HYPHENATED = "hyphenated"
    UNDERSCORED = "underscored"
    PUNCT_STRIPPED = "punct-stripped"
    PHONETIC = "phonetic"
    HOMOGLYPH_SAFE = "homoglyph-safe"


class WarningSeverity(Enum):
    HIGH = "high"
    WARN = "warn"


class CheckStatus(Enum):
    """Result of a namespace lookup."""
    AVAILABLE = "available"
    TAKEN = "taken"
    UNKNOWN = "unknown"


class Authority(Enum):
    """How much a check result can be trusted."""
    AUTHORITATIVE = "authoritative"   # direct registry lookup
    INDICATIVE = "indicative"         # search signal, network fallback


class FindingKind(Enum):
    EXACT_CONFLICT = "exact_conflict"
    PHONETIC_CONFLICT = "phonetic_conflict"
    CONFUSABLE_RISK = "confusable_risk"
    NEAR_CONFLICT = "near_conflict"
    VARIANT_TAKEN = "variant_taken"
    COVERAGE_GAP = "coverage_gap"


class Severity(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Tier(Enum):
    """Traffic-light opinion tier."""
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class RiskTolerance(Enum):
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"

    @classmethod
    def coerce(cls, value: Any) -> "RiskTolerance":
        """Accept an enum member or its string value; anything else is conservative."""
        if isinstance(value, cls):
            return value
        if value:
            try:
                return cls(str(value).lower())
            except ValueError:
                logger.warning(f"Unknown risk tolerance {value!r}, using conservative")
        return cls.CONSERVATIVE


def _coerce_enum(enum_cls, value: Any, default):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        if value is not None:
            logger.warning(f"Unrecognised {enum_cls.__name__} value {value!r}, using {default.value}")
        return default


# =============================================================================
# Variants
# =============================================================================

@dataclass(frozen=True)
class VariantForm:
    """One spelling form of a candidate."""
    kind: FormKind
    value: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "value": self.value}


@dataclass(frozen=True)
class VariantWarning:
    """A risk warning raised while generating variants."""
    code: str
    message: str
    severity: WarningSeverity

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "severity": self.severity.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VariantWarning":
        return cls(
            code=str(data.get("code", "")),
            message=str(data.get("message", "")),
            severity=_coerce_enum(WarningSeverity, data.get("severity"), WarningSeverity.WARN),
        )


@dataclass(frozen=True)
class VariantSet:
    """All variant forms and warnings for a single candidate."""
    candidate_mark: str
    canonical: str
    forms: List[VariantForm] = field(default_factory=list)
    warnings: List[VariantWarning] = field(default_factory=list)
    fuzzy_variants: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidateMark": self.candidate_mark,
            "canonical": self.canonical,
            "forms": [f.to_dict() for f in self.forms],
            "warnings": [w.to_dict() for w in self.warnings],
            "fuzzyVariants": list(self.fuzzy_variants),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "VariantSet":
        if isinstance(data, cls):
            return data
        forms = []
        for form in data.get("forms") or []:
            kind = form.get("kind", form.get("type"))
            try:
                forms.append(VariantForm(FormKind(kind), str(form.get("value", ""))))
            except ValueError:
                logger.warning(f"Skipping variant form of unknown kind {kind!r}")
        return cls(
            candidate_mark=data.get("candidateMark") or "unknown",
            canonical=data.get("canonical") or "",
            forms=forms,
            warnings=[VariantWarning.from_dict(w) for w in data.get("warnings") or []],
            fuzzy_variants=list(data.get("fuzzyVariants") or []),
        )


# =============================================================================
# Similarity
# =============================================================================

@dataclass(frozen=True)
class SimilarityScore:
    score: float
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "label": self.label}


@dataclass(frozen=True)
class SimilarityResult:
    """Looks-like / sounds-like comparison of two names."""
    a: str
    b: str
    looks: SimilarityScore
    sounds: SimilarityScore
    overall: float
    why: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "a": self.a,
            "b": self.b,
            "looks": self.looks.to_dict(),
            "sounds": self.sounds.to_dict(),
            "overall": self.overall,
            "why": list(self.why),
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["SimilarityResult"]:
        """Build from a loose payload; returns None when there is nothing usable."""
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            return None

        def _score(part) -> SimilarityScore:
            part = part if isinstance(part, dict) else {}
            return SimilarityScore(
                score=float(part.get("score") or 0.0),
                label=str(part.get("label") or "unknown"),
            )

        return cls(
            a=str(data.get("a", "")),
            b=str(data.get("b", "")),
            looks=_score(data.get("looks")),
            sounds=_score(data.get("sounds")),
            overall=float(data.get("overall") or 0.0),
            why=[str(w) for w in data.get("why") or []],
        )


# =============================================================================
# Namespace checks (external input)
# =============================================================================

@dataclass(frozen=True)
class CheckQuery:
    candidate_mark: str
    value: str
    is_variant: bool = False
    original_candidate: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"candidateMark": self.candidate_mark, "value": self.value}
        if self.is_variant:
            data["isVariant"] = True
        if self.original_candidate:
            data["originalCandidate"] = self.original_candidate
        return data


@dataclass(frozen=True)
class NamespaceCheck:
    """Normalized result of one namespace lookup, as returned by an adapter."""
    namespace: str
    query: CheckQuery
    status: CheckStatus
    authority: Authority = Authority.AUTHORITATIVE
    details: Dict[str, Any] = field(default_factory=dict)
    evidence_ref: Optional[str] = None
    id: Optional[str] = None

    @property
    def similarity(self) -> Optional[SimilarityResult]:
        """Similarity payload embedded by cross-ecosystem searches, if any."""
        return SimilarityResult.from_dict((self.details or {}).get("similarity"))

    @property
    def source(self) -> Optional[str]:
        return (self.details or {}).get("source")

    @property
    def is_taken(self) -> bool:
        return self.status is CheckStatus.TAKEN

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        if self.id:
            data["id"] = self.id
        data.update({
            "namespace": self.namespace,
            "query": self.query.to_dict(),
            "status": self.status.value,
            "authority": self.authority.value,
        })
        if self.details:
            details = dict(self.details)
            if isinstance(details.get("similarity"), SimilarityResult):
                details["similarity"] = details["similarity"].to_dict()
            data["details"] = details
        if self.evidence_ref:
            data["evidenceRef"] = self.evidence_ref
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "NamespaceCheck":
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed namespace check {data!r}")
            data = {}
        query = data.get("query")
        if not isinstance(query, dict):
            query = {}
        details = data.get("details")
        if details is not None and not isinstance(details, dict):
            logger.warning(f"Ignoring non-object details on {data.get('namespace')} check")
            details = None
        return cls(
            namespace=str(data.get("namespace") or "unknown"),
            query=CheckQuery(
                candidate_mark=query.get("candidateMark") or "unknown",
                value=str(query.get("value") or ""),
                is_variant=bool(query.get("isVariant", False)),
                original_candidate=query.get("originalCandidate"),
            ),
            status=_coerce_enum(CheckStatus, data.get("status"), CheckStatus.UNKNOWN),
            authority=_coerce_enum(Authority, data.get("authority"), Authority.AUTHORITATIVE),
            details=dict(details or {}),
            evidence_ref=data.get("evidenceRef"),
            id=data.get("id"),
        )


# =============================================================================
# Findings
# =============================================================================

@dataclass(frozen=True)
class Finding:
    """A classified, severity-tagged conflict or risk."""
    id: str
    candidate_mark: str
    kind: FindingKind
    summary: str
    severity: Severity
    score: int
    why: List[str] = field(default_factory=list)
    evidence_refs: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "candidateMark": self.candidate_mark,
            "kind": self.kind.value,
            "summary": self.summary,
            "severity": self.severity.value,
            "score": self.score,
            "why": list(self.why),
            "evidenceRefs": list(self.evidence_refs),
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Finding"]:
        """
        Build from a caller-supplied dict.

        Returns None (with a warning) when ``kind`` is missing or unknown;
        use ``parse_findings`` to drop such records from a list.
        """
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed finding {data!r}")
            return None
        try:
            kind = FindingKind(data.get("kind"))
        except ValueError:
            logger.warning(f"Ignoring finding {data.get('id') or '?'} with unknown kind {data.get('kind')!r}")
            return None
        try:
            score = int(data.get("score") or 0)
        except (TypeError, ValueError):
            score = 0
        return cls(
            id=str(data.get("id") or ""),
            candidate_mark=data.get("candidateMark") or "unknown",
            kind=kind,
            summary=str(data.get("summary") or ""),
            severity=_coerce_enum(Severity, data.get("severity"), Severity.MEDIUM),
            score=score,
            why=[str(w) for w in data.get("why") or []],
            evidence_refs=[str(r) for r in data.get("evidenceRefs") or []],
        )


def parse_findings(items: Any) -> List[Finding]:
    """Findings from records or dicts, skipping entries without a known kind."""
    findings = []
    for item in items or ():
        finding = Finding.from_dict(item)
        if finding is not None:
            findings.append(finding)
    return findings


@dataclass(frozen=True)
class Evidence:
    """Provenance record backing a finding (e.g. a corpus entry hash)."""
    id: str
    type: str
    source_system: str
    sha256: str
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source": {"system": self.source_system},
            "sha256": self.sha256,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Evidence":
        if isinstance(data, cls):
            return data
        source = data.get("source") or {}
        return cls(
            id=str(data.get("id") or ""),
            type=str(data.get("type") or "text"),
            source_system=str(source.get("system") or "unknown"),
            sha256=str(data.get("sha256") or ""),
            notes=str(data.get("notes") or ""),
        )


# =============================================================================
# Score breakdown
# =============================================================================

@dataclass
class SubScore:
    score: int
    weight: int
    details: str

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "weight": self.weight, "details": self.details}


@dataclass
class DupontFactor:
    score: int
    rationale: str

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "rationale": self.rationale}


@dataclass
class DupontFactors:
    """DuPont-lite proxy factors (deterministic, template text only)."""
    similarity_of_marks: DupontFactor
    channel_overlap: DupontFactor
    fame_proxy: DupontFactor
    intent_proxy: DupontFactor

    def to_dict(self) -> Dict[str, Any]:
        return {
            "similarityOfMarks": self.similarity_of_marks.to_dict(),
            "channelOverlap": self.channel_overlap.to_dict(),
            "fameProxy": self.fame_proxy.to_dict(),
            "intentProxy": self.intent_proxy.to_dict(),
        }


@dataclass
class ScoreBreakdown:
    """Weighted sub-scores explaining an opinion. Never overrides the tier."""
    namespace_availability: SubScore
    coverage_completeness: SubScore
    conflict_severity: SubScore
    domain_availability: SubScore
    overall_score: int
    tier_thresholds: Dict[str, int]
    dupont_factors: DupontFactors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespaceAvailability": self.namespace_availability.to_dict(),
            "coverageCompleteness": self.coverage_completeness.to_dict(),
            "conflictSeverity": self.conflict_severity.to_dict(),
            "domainAvailability": self.domain_availability.to_dict(),
            "overallScore": self.overall_score,
            "tierThresholds": dict(self.tier_thresholds),
            "dupontFactors": self.dupont_factors.to_dict(),
        }


# =============================================================================
# Opinion parts
# =============================================================================

@dataclass
class TopFactor:
    factor: str
    statement: str
    weight: str
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factor": self.factor,
            "statement": self.statement,
            "weight": self.weight,
            "category": self.category,
        }


@dataclass
class NextAction:
    """Coaching entry shown after the opinion."""
    type: str
    label: str
    reason: str
    urgency: str
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"type": self.type, "label": self.label, "reason": self.reason, "urgency": self.urgency}
        if self.url:
            data["url"] = self.url
        return data


@dataclass
class RecommendedAction:
    """Reservation-oriented action with links."""
    type: str
    label: str
    details: str
    links: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "label": self.label, "details": self.details, "links": list(self.links)}


@dataclass
class ClosestConflict:
    mark: str
    why: List[str]
    severity: str
    evidence_refs: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mark": self.mark,
            "why": list(self.why),
            "severity": self.severity,
            "evidenceRefs": list(self.evidence_refs),
        }


@dataclass
class Coverage:
    coverage_score: int
    unchecked_namespaces: List[str]
    disclaimer: str


@dataclass
class Alternative:
    """A deterministic safer-name suggestion."""
    name: str
    strategy: str
    checked: bool = False
    summary: str = "Not checked"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "strategy": self.strategy,
            "availability": {"checked": self.checked, "summary": self.summary},
        }


@dataclass
class CollisionCard:
    kind: str
    title: str
    why_it_matters: str
    evidence: List[Dict[str, str]]
    severity: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "title": self.title,
            "whyItMatters": self.why_it_matters,
            "evidence": [dict(e) for e in self.evidence],
            "severity": self.severity,
        }


@dataclass
class Opinion:
    """Final clearance opinion for one run."""
    tier: Tier
    summary: str
    reasons: List[str]
    assumptions: List[str]
    limitations: List[str]
    recommended_actions: List[RecommendedAction]
    closest_conflicts: List[ClosestConflict]
    score_breakdown: ScoreBreakdown
    top_factors: List[TopFactor]
    risk_narrative: str
    next_actions: List[NextAction]
    coverage_score: int
    unchecked_namespaces: List[str]
    disclaimer: str
    safer_alternatives: Optional[List[Alternative]] = None
    collision_cards: Optional[List[CollisionCard]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "tier": self.tier.value,
            "summary": self.summary,
            "reasons": list(self.reasons),
            "assumptions": list(self.assumptions),
            "limitations": list(self.limitations),
            "recommendedActions": [a.to_dict() for a in self.recommended_actions],
            "closestConflicts": [c.to_dict() for c in self.closest_conflicts],
            "scoreBreakdown": self.score_breakdown.to_dict(),
            "topFactors": [f.to_dict() for f in self.top_factors],
            "riskNarrative": self.risk_narrative,
            "nextActions": [a.to_dict() for a in self.next_actions],
            "coverageScore": self.coverage_score,
            "uncheckedNamespaces": list(self.unchecked_namespaces),
            "disclaimer": self.disclaimer,
        }
        if self.safer_alternatives is not None:
            data["saferAlternatives"] = [a.to_dict() for a in self.safer_alternatives]
        if self.collision_cards is not None:
            data["collisionCards"] = [c.to_dict() for c in self.collision_cards]
        return data
