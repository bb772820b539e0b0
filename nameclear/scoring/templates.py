#!/usr/bin/env python3
"""
Static Text Templates
=====================
Every sentence the opinion engine emits comes from these tables. Templates
use ``str.format`` named placeholders; nothing is generated free-form, so
the same inputs always produce the same text.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from nameclear.models import Tier


# =============================================================================
# Top factors
# =============================================================================

class FactorWeight(Enum):
    """Importance bucket of a top factor, most important first."""
    CRITICAL = "critical"
    MAJOR = "major"
    MODERATE = "moderate"
    MINOR = "minor"

    @property
    def rank(self) -> int:
        return list(FactorWeight).index(self)


@dataclass(frozen=True)
class FactorTemplate:
    weight: FactorWeight
    category: str
    text: str

    def render(self, **ctx) -> str:
        return self.text.format(**ctx)


FACTOR_TEMPLATES: Dict[str, FactorTemplate] = {
    "namespace_collision": FactorTemplate(
        FactorWeight.CRITICAL, "exact_conflict",
        "The name '{name}' is already claimed in {namespace}",
    ),
    "phonetic_overlap": FactorTemplate(
        FactorWeight.CRITICAL, "phonetic_conflict",
        "The name sounds like '{conflict_mark}' ({pct}% phonetic match)",
    ),
    "confusable_variants": FactorTemplate(
        FactorWeight.MAJOR, "confusable_risk",
        "{count} homoglyph variant(s) overlap with taken namespaces",
    ),
    "fuzzy_squatting_risk": FactorTemplate(
        FactorWeight.MODERATE, "variant_taken",
        "Edit-distance=1 variant '{variant}' is taken in {namespace}",
    ),
    "near_miss": FactorTemplate(
        FactorWeight.MODERATE, "near_conflict",
        "Similar name '{mark}' found ({pct}% match)",
    ),
    "coverage_gap": FactorTemplate(
        FactorWeight.MODERATE, "coverage_gap",
        "{count} namespace check(s) could not be completed",
    ),
    "all_clear": FactorTemplate(
        FactorWeight.MINOR, "all_clear",
        "All {count} namespaces available with no conflicts",
    ),
}

ALL_CLEAR_PADDING = "No additional conflicts detected"


# =============================================================================
# Risk narratives
# =============================================================================

class Narrative(Enum):
    RED_EXACT = (
        "If you proceed with '{name}', you will collide with an existing registered name in at least one namespace. "
        "Users searching for your project may land on the existing package instead. "
        "This creates immediate brand confusion and potential takedown risk."
    )
    RED_PHONETIC = (
        "If you proceed with '{name}', users who hear the name may confuse it with '{conflict_mark}'. "
        "Verbal recommendations and word-of-mouth discovery will be unreliable. "
        "Consider choosing a phonetically distinct name."
    )
    RED_CONFUSABLE = (
        "If you proceed with '{name}', homoglyph variants create visual confusion with existing names. "
        "This enables typosquatting attacks and makes visual identification unreliable. "
        "Consider choosing a name with fewer confusable characters."
    )
    YELLOW_NEAR = (
        "Proceeding with '{name}' carries moderate risk. "
        "Similar names exist in the ecosystem that could cause confusion. "
        "Monitor these names and consider establishing your brand early."
    )
    YELLOW_COVERAGE = (
        "Some namespaces could not be checked for '{name}'. "
        "The name may appear safe but unverified channels could harbor conflicts. "
        "Re-run checks when all services are reachable."
    )
    YELLOW_VARIANT = (
        "Edit-distance=1 variants of '{name}' are already taken in some registries. "
        "This suggests the name space is crowded, increasing the risk of confusion or typosquatting. "
        "Consider a more distinctive name."
    )
    GREEN = (
        "No conflicts detected for '{name}'. "
        "The name appears safe to use across all checked namespaces. "
        "Claim handles promptly as namespace availability changes over time."
    )

    def render(self, **ctx) -> str:
        return self.value.format(**ctx)


NARRATIVE_BY_CATEGORY: Dict[Tuple[Tier, str], Narrative] = {
    (Tier.RED, "exact_conflict"): Narrative.RED_EXACT,
    (Tier.RED, "phonetic_conflict"): Narrative.RED_PHONETIC,
    (Tier.RED, "confusable_risk"): Narrative.RED_CONFUSABLE,
    (Tier.YELLOW, "near_conflict"): Narrative.YELLOW_NEAR,
    (Tier.YELLOW, "coverage_gap"): Narrative.YELLOW_COVERAGE,
    (Tier.YELLOW, "variant_taken"): Narrative.YELLOW_VARIANT,
}

NARRATIVE_FALLBACK: Dict[Tier, Narrative] = {
    Tier.RED: Narrative.RED_EXACT,
    Tier.YELLOW: Narrative.YELLOW_NEAR,
    Tier.GREEN: Narrative.GREEN,
}


def narrative_for(tier: Tier, category: Optional[str]) -> Narrative:
    """Narrative keyed by tier and dominant factor category."""
    if tier is Tier.GREEN:
        return Narrative.GREEN
    return NARRATIVE_BY_CATEGORY.get((tier, category), NARRATIVE_FALLBACK[tier])


# =============================================================================
# Next actions
# =============================================================================

@dataclass(frozen=True)
class ActionTemplate:
    urgency: str
    label: str
    reason: str


ACTION_TEMPLATES: Dict[Tier, Dict[str, ActionTemplate]] = {
    Tier.GREEN: {
        "claim_now": ActionTemplate(
            "high",
            "Claim '{name}' now",
            "All {available_count} namespace(s) are available and can be claimed on {available_namespaces} "
            "before someone else does.",
        ),
        "register_domain": ActionTemplate(
            "medium",
            "Register matching domains",
            "Register {available_domains} while available.",
        ),
    },
    Tier.YELLOW: {
        "recheck_soon": ActionTemplate(
            "medium",
            "Re-run with broader coverage",
            "Re-run with market-usage search results included to improve coverage.",
        ),
        "try_alternative": ActionTemplate(
            "medium",
            "Consider safer alternatives",
            "Consider safer alternatives: {top_alternatives}.",
        ),
        "consult_counsel": ActionTemplate(
            "low",
            "Consult a trademark attorney",
            "If this name is business-critical, consult a trademark attorney before committing.",
        ),
    },
    Tier.RED: {
        "try_alternative": ActionTemplate(
            "high",
            "Choose a different name",
            "Choose a different name. Suggested: {top_alternatives}.",
        ),
        "consult_counsel": ActionTemplate(
            "high",
            "Consult a trademark attorney",
            "Consult a trademark attorney before proceeding: direct conflicts exist.",
        ),
    },
}


# =============================================================================
# Disclaimer
# =============================================================================

DISCLAIMER = (
    "This report checks public namespace availability across {channels}. "
    "It does not check trademark databases, common-law marks, or pending applications. "
    "This is not: a trademark search, a legal opinion, a freedom-to-operate analysis, or a guarantee of rights. "
    "Coverage: {coverage_score}% of requested channels. "
    "Consult a trademark attorney for authoritative guidance."
)
