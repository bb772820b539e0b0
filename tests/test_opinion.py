"""
Tests for the Opinion Engine
============================
Tests tiering, score breakdown, DuPont-lite factors, top factors,
narratives, next actions, coverage and reservation links.
"""

import pytest
import sys
from pathlib import Path

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from nameclear.models import Alternative, Finding, FindingKind, RiskTolerance, Severity, Tier
from nameclear.scoring.findings import classify_findings
from nameclear.scoring.opinion import (
    score_opinion,
    extract_top_factors,
    generate_risk_narrative,
    build_next_actions,
    build_reservation_links,
    compute_coverage,
)
from nameclear.scoring.templates import Narrative
from nameclear.scoring.weights import (
    WEIGHT_PROFILES,
    TIER_THRESHOLDS,
    get_weight_profile,
    compute_score_breakdown,
    compute_dupont_factors,
)
from nameclear.models import NamespaceCheck
from nameclear.variants import generate_variants


def check(namespace, status, value="zqxv", candidate="zqxv", **extra):
    data = {
        "namespace": namespace,
        "query": {"candidateMark": candidate, "value": value},
        "status": status,
        "authority": "authoritative",
    }
    data.update(extra)
    return data


def finding(kind, severity="high", summary="", score=0, idx=0):
    return Finding(
        id=f"fd.{kind.replace('_', '-')}.test.{idx}",
        candidate_mark="zqxv",
        kind=FindingKind(kind),
        summary=summary,
        severity=Severity(severity),
        score=score,
    )


def all_available():
    return [
        check("github_repo", "available"),
        check("npm", "available"),
        check("pypi", "available"),
        check("domain", "available", value="zqxv.com"),
    ]


class TestWeightProfiles:
    """Tests for configured weight profiles."""

    def test_profiles_sum_to_100(self):
        """Every profile's four weights sum to exactly 100."""
        for tolerance in RiskTolerance:
            assert sum(WEIGHT_PROFILES[tolerance].values()) == 100

    def test_conservative_profile(self):
        """Conservative weights and thresholds."""
        assert get_weight_profile("conservative") == {
            "namespace_availability": 40,
            "coverage_completeness": 25,
            "conflict_severity": 25,
            "domain_availability": 10,
        }
        assert TIER_THRESHOLDS[RiskTolerance.CONSERVATIVE] == {"green": 80, "yellow": 50}

    def test_aggressive_skews_to_availability(self):
        """Aggressive puts the most weight on raw availability."""
        assert get_weight_profile("aggressive")["namespace_availability"] == 50

    def test_unknown_tolerance_falls_back(self):
        """Unknown tolerances use the conservative profile."""
        assert get_weight_profile("reckless") == get_weight_profile("conservative")


class TestScoreBreakdown:
    """Tests for sub-scores and the overall score."""

    def test_all_available(self):
        """Everything available and checked scores 100."""
        breakdown = compute_score_breakdown(all_available(), [])
        assert breakdown.namespace_availability.score == 100
        assert breakdown.coverage_completeness.score == 100
        assert breakdown.conflict_severity.score == 100
        assert breakdown.domain_availability.score == 100
        assert breakdown.overall_score == 100
        assert breakdown.namespace_availability.details == "3/3 namespaces available"
        assert breakdown.coverage_completeness.details == "4/4 channels checked"

    def test_empty_inputs(self):
        """No checks: full namespace score, no coverage, neutral domain."""
        breakdown = compute_score_breakdown([], [])
        assert breakdown.namespace_availability.score == 100
        assert breakdown.coverage_completeness.score == 0
        assert breakdown.domain_availability.score == 50
        assert breakdown.domain_availability.details == "Domain not checked"
        # (100*40 + 0*25 + 100*25 + 50*10) / 100
        assert breakdown.overall_score == 70

    def test_conflict_severity_clamped(self):
        """Ten exact conflicts leave the conflict score at 0, not below."""
        findings = [finding("exact_conflict", idx=i) for i in range(10)]
        breakdown = compute_score_breakdown([], findings)
        assert breakdown.conflict_severity.score == 0
        assert breakdown.conflict_severity.details == "10 findings detected (score deducted)"

    def test_deductions(self):
        """Each finding kind deducts its configured points."""
        findings = [
            finding("exact_conflict"),
            finding("phonetic_conflict"),
            finding("confusable_risk"),
            finding("near_conflict"),
            finding("variant_taken"),
            finding("coverage_gap"),
        ]
        assert compute_score_breakdown([], findings).conflict_severity.score == 30

    def test_partial_coverage_details(self):
        """Unchecked core namespaces are named."""
        breakdown = compute_score_breakdown([check("npm", "available")], [])
        assert breakdown.coverage_completeness.score == 25
        assert breakdown.coverage_completeness.details == (
            "1/4 channels checked (github_repo, pypi, domain not checked)"
        )

    def test_domain_taken(self):
        """Taken domains are counted in the details."""
        checks = [
            check("domain", "available", value="zqxv.com"),
            check("domain", "taken", value="zqxv.dev"),
        ]
        sub = compute_score_breakdown(checks, []).domain_availability
        assert sub.score == 50
        assert sub.details == "1/2 domains available (1 taken)"

    def test_tolerance_changes_weights(self):
        """The breakdown reports the chosen profile."""
        breakdown = compute_score_breakdown([], [], "aggressive")
        assert breakdown.namespace_availability.weight == 50
        assert breakdown.tier_thresholds == {"green": 60, "yellow": 30}

    def test_to_dict_keys(self):
        """to_dict uses contract keys."""
        data = compute_score_breakdown([], []).to_dict()
        assert set(data) == {
            "namespaceAvailability", "coverageCompleteness", "conflictSeverity",
            "domainAvailability", "overallScore", "tierThresholds", "dupontFactors",
        }
        assert set(data["dupontFactors"]) == {
            "similarityOfMarks", "channelOverlap", "fameProxy", "intentProxy",
        }


class TestDupontFactors:
    """Tests for DuPont-lite proxy factors."""

    def market(self, value, overall):
        return check(
            "custom", "taken", value=value, authority="indicative",
            details={
                "source": "github_search",
                "similarity": {
                    "looks": {"score": overall, "label": "high"},
                    "sounds": {"score": 0.5, "label": "low"},
                    "overall": overall,
                    "why": [],
                },
            },
        )

    def test_defaults_without_signals(self):
        """No similarity payloads and no variants score 0."""
        factors = compute_dupont_factors([], [])
        assert factors.similarity_of_marks.score == 0
        assert factors.similarity_of_marks.rationale == "No similar marks detected in market search"
        assert factors.fame_proxy.score == 0
        assert factors.intent_proxy.score == 0
        assert factors.channel_overlap.rationale == "0 of 1 channel(s) have conflicts"

    def test_similarity_and_fame(self):
        """Strongest market match and high-similarity count."""
        checks = [self.market("zqxvs", 0.9), self.market("zqxa", 0.86), self.market("abc", 0.7)]
        factors = compute_dupont_factors(checks, [])
        assert factors.similarity_of_marks.score == 90
        assert factors.similarity_of_marks.rationale == (
            "Highest similarity: 90% (high visual, low phonetic) against 'zqxvs'"
        )
        assert factors.fame_proxy.score == 50

    def test_channel_overlap(self):
        """Distinct taken registries over intake channels, capped at 100."""
        checks = [check("npm", "taken"), check("pypi", "taken"), self.market("x", 0.9)]
        factors = compute_dupont_factors(checks, [], intake_channels=["npm", "pypi", "github", "domain"])
        assert factors.channel_overlap.score == 50
        capped = compute_dupont_factors(checks, [], intake_channels=["npm"])
        assert capped.channel_overlap.score == 100

    def test_intent_proxy(self):
        """Each taken variant adds 30, capped at 100."""
        findings = [finding("variant_taken", "medium", idx=i) for i in range(4)]
        assert compute_dupont_factors([], findings).intent_proxy.score == 100
        assert compute_dupont_factors([], findings[:1]).intent_proxy.score == 30


class TestTiering:
    """Tests for GREEN/YELLOW/RED decisions."""

    def test_exact_conflict_is_red(self):
        """One exact conflict is red regardless of available checks."""
        checks = [check("npm", "taken", value="taken-tool", candidate="taken-tool")]
        checks += [check(ns, "available") for ns in ("pypi", "github_repo", "cratesio", "dockerhub")]
        findings = classify_findings(checks, [])
        exact = [f for f in findings if f.kind is FindingKind.EXACT_CONFLICT]
        assert len(exact) == 1
        assert exact[0].severity is Severity.HIGH and exact[0].score == 100
        opinion = score_opinion(checks, findings, [generate_variants("taken-tool")])
        assert opinion.tier is Tier.RED

    def test_all_available_is_green(self):
        """All available and no findings is green with an all_clear factor."""
        opinion = score_opinion(all_available(), [], [generate_variants("zqxv")])
        assert opinion.tier is Tier.GREEN
        assert 0 < opinion.score_breakdown.overall_score <= 100
        assert "all_clear" in [f.factor for f in opinion.top_factors]
        assert opinion.reasons == ["All 4 namespace check(s) returned available with no conflicts"]

    def test_unknown_is_yellow(self):
        """One unknown among available checks is yellow."""
        checks = all_available()
        checks[2] = check("pypi", "unknown")
        opinion = score_opinion(checks, [], [generate_variants("zqxv")])
        assert opinion.tier is Tier.YELLOW
        assert any("1 namespace check(s) returned unknown" in r for r in opinion.reasons)

    @pytest.mark.parametrize("kind", ["near_conflict", "coverage_gap", "variant_taken"])
    def test_yellow_findings(self, kind):
        """Near conflicts, coverage gaps and taken variants are yellow."""
        opinion = score_opinion(all_available(), [finding(kind, "medium")], [])
        assert opinion.tier is Tier.YELLOW

    def test_phonetic_conflict_is_red(self):
        """Phonetic conflicts are red."""
        opinion = score_opinion(all_available(), [finding("phonetic_conflict")], [])
        assert opinion.tier is Tier.RED

    def test_confusable_conservative(self):
        """One high confusable with a taken check is red when conservative."""
        checks = all_available() + [check("dockerhub", "taken")]
        findings = [finding("confusable_risk")]
        assert score_opinion(checks, findings, [], risk_tolerance="conservative").tier is Tier.RED
        assert score_opinion(checks, findings, [], risk_tolerance="balanced").tier is Tier.YELLOW

    def test_two_confusables_red_any_tolerance(self):
        """Two high confusables with a taken check are red for every tolerance."""
        checks = all_available() + [check("dockerhub", "taken")]
        findings = [finding("confusable_risk", idx=0), finding("confusable_risk", idx=1)]
        assert score_opinion(checks, findings, [], risk_tolerance="aggressive").tier is Tier.RED

    def test_confusable_without_taken_is_yellow(self):
        """Confusables never block without a taken check."""
        opinion = score_opinion(all_available(), [finding("confusable_risk")], [])
        assert opinion.tier is Tier.YELLOW
        assert "Confusable risk: 1 minor homoglyph variant(s) detected" in opinion.reasons

    def test_empty_inputs(self):
        """Empty inputs still produce a complete opinion."""
        opinion = score_opinion([], [], [])
        assert opinion.tier is Tier.GREEN
        data = opinion.to_dict()
        assert data["summary"].startswith('All namespaces available for "unknown"')
        assert data["coverageScore"] == 0
        assert "saferAlternatives" not in data

    def test_malformed_inputs_still_score(self):
        """Kindless findings and bad details are skipped, not fatal."""
        checks = [check("npm", "available", details="oops")]
        findings = [{"summary": "gap without kind"}, finding("near_conflict", "medium")]
        opinion = score_opinion(checks, findings, [])
        assert opinion.tier is Tier.YELLOW
        assert opinion.score_breakdown.conflict_severity.details == "1 finding detected (score deducted)"


class TestTopFactors:
    """Tests for top factor extraction."""

    def test_exact_conflict_statement(self):
        """Exact conflicts name the namespace from the summary."""
        findings = [finding("exact_conflict", summary='Name "taken-tool" is taken in npm', score=100)]
        factors = extract_top_factors([], findings, Tier.RED, "taken-tool")
        assert factors[0].factor == "namespace_collision"
        assert factors[0].statement == "The name 'taken-tool' is already claimed in npm"
        assert factors[0].weight == "critical"

    def test_sorted_by_weight_then_name(self):
        """Critical before moderate; ties by factor name."""
        findings = [
            finding("near_conflict", "medium", summary='Name "zqx" is in use (s), similarity: 0.75', score=75),
            finding("exact_conflict", summary='Name "zqxv" is taken in npm'),
            finding("variant_taken", "medium", summary='Fuzzy variant "zqx" is taken in pypi'),
        ]
        factors = extract_top_factors([NamespaceCheck.from_dict(check("npm", "unknown"))], findings, Tier.RED, "zqxv")
        assert [f.factor for f in factors] == [
            "namespace_collision", "coverage_gap", "fuzzy_squatting_risk", "near_miss",
        ]
        assert factors[2].statement == "Edit-distance=1 variant 'zqx' is taken in pypi"
        assert factors[3].statement == "Similar name 'zqx' found (75% match)"

    def test_clamped_to_five(self):
        """At most five factors."""
        findings = [finding("exact_conflict", summary=f'Name "x" is taken in ns{i}', idx=i) for i in range(8)]
        assert len(extract_top_factors([], findings, Tier.RED, "x")) == 5

    def test_green_padding(self):
        """Green opinions are padded to three entries."""
        factors = extract_top_factors(
            [NamespaceCheck.from_dict(c) for c in all_available()], [], Tier.GREEN, "zqxv",
        )
        assert len(factors) == 3
        assert factors[0].statement == "All 4 namespaces available with no conflicts"
        assert factors[1].statement == "No additional conflicts detected"

    def test_unmatched_summary_defaults(self):
        """Summaries without the expected pattern fall back to defaults."""
        factors = extract_top_factors([], [finding("exact_conflict", summary="odd")], Tier.RED, "x")
        assert factors[0].statement == "The name 'x' is already claimed in a namespace"


class TestNarrative:
    """Tests for risk narrative selection."""

    def test_green(self):
        """Green uses the green template."""
        text = generate_risk_narrative(Tier.GREEN, [], "zqxv")
        assert text == Narrative.GREEN.render(name="zqxv", conflict_mark="unknown")

    def test_red_phonetic_uses_conflict_mark(self):
        """The phonetic narrative names the conflicting mark."""
        factors = extract_top_factors(
            [], [finding("phonetic_conflict", summary='Name "zeqxv" is in use (s), similarity: 0.90', score=90)],
            Tier.RED, "zqxv",
        )
        text = generate_risk_narrative(Tier.RED, factors, "zqxv")
        assert "may confuse it with 'zeqxv'" in text

    def test_fallbacks(self):
        """Unknown categories fall back per tier."""
        assert generate_risk_narrative(Tier.RED, [], "x").startswith("If you proceed with 'x', you will collide")
        assert generate_risk_narrative(Tier.YELLOW, [], "x").startswith("Proceeding with 'x' carries moderate risk")


class TestNextActions:
    """Tests for coaching actions."""

    def test_green_actions(self):
        """Green: claim now with the first claim link, then domains."""
        checks = [NamespaceCheck.from_dict(c) for c in all_available()]
        actions = build_next_actions(checks, Tier.GREEN, "zqxv", claim_links=["https://x/claim"],
                                     domain_links=["https://x/domain"])
        assert [a.type for a in actions] == ["claim_now", "register_domain"]
        assert actions[0].url == "https://x/claim"
        assert actions[0].label == "Claim 'zqxv' now"
        assert actions[0].urgency == "high"
        assert actions[1].reason == "Register zqxv.com while available."

    def test_yellow_actions(self):
        """Yellow: recheck, alternatives when supplied, counsel."""
        assert [a.type for a in build_next_actions([], Tier.YELLOW, "x")] == ["recheck_soon", "consult_counsel"]
        alts = [Alternative("go-x", "prefix"), Alternative("x-js", "suffix"), Alternative("x-app", "separator")]
        actions = build_next_actions([], Tier.YELLOW, "x", safer_alternatives=alts)
        assert [a.type for a in actions] == ["recheck_soon", "try_alternative", "consult_counsel"]
        assert actions[1].reason == "Consider safer alternatives: go-x, x-js."
        assert actions[2].urgency == "low"

    def test_red_actions(self):
        """Red: try an alternative and consult counsel, both high."""
        actions = build_next_actions([], Tier.RED, "x")
        assert [a.type for a in actions] == ["try_alternative", "consult_counsel"]
        assert all(a.urgency == "high" for a in actions)
        assert actions[0].reason == "Choose a different name. Suggested: none generated."


class TestCoverageAndLinks:
    """Tests for coverage math and reservation links."""

    def test_coverage(self):
        """Unknown primary checks reduce coverage; variants are ignored."""
        checks = all_available()
        checks[2] = check("pypi", "unknown")
        checks.append(check("npm", "unknown", value="zqx"))
        checks[-1]["query"]["isVariant"] = True
        coverage = compute_coverage(checks, ["github", "npm", "pypi", "domain"])
        assert coverage.coverage_score == 75
        assert coverage.unchecked_namespaces == ["pypi"]
        assert "across github, npm, pypi, domain." in coverage.disclaimer
        assert "Coverage: 75% of requested channels." in coverage.disclaimer

    def test_coverage_empty(self):
        """No checks means zero coverage."""
        assert compute_coverage([]).coverage_score == 0

    def test_reservation_links(self):
        """Available namespaces get claim or registrar links."""
        checks = [
            check("npm", "available"),
            check("pypi", "available"),
            check("github_repo", "taken"),
            check("domain", "available", value="zqxv.dev"),
        ]
        claim, domain = build_reservation_links("zqxv", checks)
        assert claim == ["https://www.npmjs.com/package/zqxv", "https://pypi.org/project/zqxv/"]
        assert domain == ["https://www.namecheap.com/domains/registration/results/?domain=zqxv.dev"]

    def test_links_encode_names(self):
        """Names are percent-encoded."""
        claim, _ = build_reservation_links("@scope/pkg", [check("npm", "available")])
        assert claim == ["https://www.npmjs.com/package/%40scope%2Fpkg"]

    def test_green_opinion_without_domain_checks(self):
        """Without domain checks the opinion suggests .com and .dev."""
        checks = [check("npm", "available")]
        opinion = score_opinion(checks, [], [generate_variants("zqxv")])
        reserve = [a for a in opinion.recommended_actions if a.type == "reserve_domain"][0]
        assert reserve.links == [
            "https://www.namecheap.com/domains/registration/results/?domain=zqxv.com",
            "https://www.namecheap.com/domains/registration/results/?domain=zqxv.dev",
        ]
        assert "Domain name availability is not checked in this version." in opinion.limitations


class TestDeterminism:
    """Tests for repeatable output."""

    def test_identical_inputs_identical_output(self):
        """Two calls with the same inputs give identical dicts."""
        checks = all_available() + [check("dockerhub", "taken")]
        variants = [generate_variants("zqxv")]
        findings = classify_findings(checks, variants)
        first = score_opinion(checks, findings, variants, "balanced").to_dict()
        second = score_opinion(checks, findings, variants, "balanced").to_dict()
        assert first == second
