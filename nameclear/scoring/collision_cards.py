#!/usr/bin/env python3
"""
Collision cards: one user-facing explanation per collision type.

Cards are built from findings, deduplicated by (kind, conflicting name),
sorted by severity then key, and capped. Exact conflicts and coverage gaps
get no card; the opinion already explains those.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from nameclear.models import CollisionCard, Finding, FindingKind, NamespaceCheck, Severity, parse_findings
from nameclear.settings import require_setting

MAX_CARDS = int(require_setting("collision_cards.max_cards"))

SEVERITY_ORDER = {"critical": 0, "major": 1, "moderate": 2, "minor": 3}


@dataclass(frozen=True)
class CardTemplate:
    title: str
    why_it_matters: str


CARD_TEMPLATES: Dict[str, CardTemplate] = {
    "variant_taken": CardTemplate(
        'Fuzzy variant "{name}" is taken on {namespace}',
        "Users who mistype the name will land on an existing package, creating confusion and typosquatting risk.",
    ),
    "looks_like": CardTemplate(
        'Visually similar to "{name}"',
        "At a glance, users may confuse the two names. Marketing materials, URLs, and package listings "
        "become ambiguous.",
    ),
    "sounds_like": CardTemplate(
        'Sounds like "{name}"',
        "Verbal recommendations become unreliable. Listeners may install the wrong package.",
    ),
    "confusable_chars": CardTemplate(
        'Confusable characters overlap with "{name}"',
        "Homoglyph substitution makes visual identification unreliable and enables impersonation attacks.",
    ),
    "market_signal": CardTemplate(
        'Market-usage signal: "{name}" on {source}',
        "An existing project uses a similar name. While not an authoritative registry claim, it signals "
        "namespace crowding.",
    ),
}

KIND_MAP = {
    FindingKind.VARIANT_TAKEN: "variant_taken",
    FindingKind.NEAR_CONFLICT: "looks_like",
    FindingKind.PHONETIC_CONFLICT: "sounds_like",
    FindingKind.CONFUSABLE_RISK: "confusable_chars",
}

_QUOTED_RE = re.compile(r'"([^"]+)"')
_TRAILING_NS_RE = re.compile(r'(?:in|on) (\S+)$')


def _card_severity(severity: Severity) -> str:
    if severity is Severity.HIGH:
        return "critical"
    if severity is Severity.MEDIUM:
        return "major"
    return "moderate"


def _conflict_name(finding: Finding) -> str:
    found = _QUOTED_RE.search(finding.summary or "")
    return found.group(1) if found else (finding.candidate_mark or "unknown")


def _check_for(finding: Finding, by_ref: Dict[str, NamespaceCheck]) -> Optional[NamespaceCheck]:
    if finding.evidence_refs:
        return by_ref.get(finding.evidence_refs[0])
    return None


def build_collision_cards(findings: Iterable[Any], checks: Iterable[Any] = ()) -> List[CollisionCard]:
    """
    Build collision explanation cards.

    Args:
        findings: Classified findings (records or dicts)
        checks: Namespace checks, used to resolve evidence refs into
            namespace/name/url evidence entries

    Returns:
        At most MAX_CARDS cards, most severe first
    """
    findings = parse_findings(findings)
    checks = [NamespaceCheck.from_dict(c) for c in checks]

    by_ref = {}
    for check in checks:
        if check.evidence_ref and check.evidence_ref not in by_ref:
            by_ref[check.evidence_ref] = check

    cards = []
    seen = set()

    for finding in findings:
        card_kind = KIND_MAP.get(finding.kind)
        if card_kind is None:
            continue
        if finding.kind is FindingKind.NEAR_CONFLICT and any("Market usage signal" in w for w in finding.why):
            card_kind = "market_signal"

        name = _conflict_name(finding)
        if (card_kind, name) in seen:
            continue
        seen.add((card_kind, name))

        check = _check_for(finding, by_ref)
        if check is not None:
            namespace = check.namespace
        else:
            found = _TRAILING_NS_RE.search(finding.summary or "")
            namespace = found.group(1) if found else "unknown"
        source = (check.source if check is not None else None) or "unknown"

        evidence = []
        for ref in finding.evidence_refs:
            ref_check = by_ref.get(ref)
            if ref_check is None:
                continue
            item = {"namespace": ref_check.namespace, "name": ref_check.query.value or name}
            if ref_check.details.get("url"):
                item["url"] = str(ref_check.details["url"])
            evidence.append(item)
        if not evidence:
            evidence.append({"namespace": namespace, "name": name})

        template = CARD_TEMPLATES[card_kind]
        cards.append(CollisionCard(
            kind=card_kind,
            title=template.title.format(name=name, namespace=namespace, source=source),
            why_it_matters=template.why_it_matters,
            evidence=evidence,
            severity=_card_severity(finding.severity),
        ))

    cards.sort(key=lambda c: (SEVERITY_ORDER.get(c.severity, 99), f"{c.kind}:{c.evidence[0].get('name', '')}"))
    return cards[:MAX_CARDS]
