#!/usr/bin/env python3
"""
Safer alternative name suggestions.

Five deterministic strategies, one suggestion each: prefix, suffix,
separator, abbreviation and compound. Affix pools come from app.yaml.
Suggestions start unchecked; ``summarize_availability`` fills in the
result once a caller has namespace checks for them.
"""

from typing import Any, Iterable, List

from nameclear.models import Alternative, CheckStatus, NamespaceCheck
from nameclear.settings import require_setting
from nameclear.variants.normalize import normalize
from nameclear.variants.tokenize import tokenize

STRATEGY_POOLS = {
    strategy: tuple(require_setting(f"alternatives.{strategy}"))
    for strategy in ("prefix", "suffix", "separator", "compound")
}


def _first_distinct(canonical: str, pool, as_prefix: bool = False):
    for affix in pool:
        alt = f"{affix}{canonical}" if as_prefix else f"{canonical}{affix}"
        if alt != canonical:
            return alt
    return None


def abbreviate(tokens: List[str], canonical: str) -> str:
    """
    Initials for multi-word names; otherwise first three plus last three
    characters, or ``<name>-x`` for names of six characters or fewer.
    """
    if len(tokens) >= 2:
        return "".join(t[0] for t in tokens if t).lower()
    if len(canonical) <= 6:
        return f"{canonical}-x"
    return f"{canonical[:3]}{canonical[-3:]}"


def generate_alternatives(candidate_name: str) -> List[Alternative]:
    """
    Generate safer alternatives for a candidate.

    Examples:
        >>> [a.name for a in generate_alternatives("MyCoolTool")]
        ['go-mycooltool', 'mycooltool-js', 'mycooltool-app', 'mct', 'mycooltool-hub']
    """
    canonical = normalize(candidate_name)
    tokens = tokenize(candidate_name)
    alternatives = []

    for strategy in ("prefix", "suffix", "separator"):
        alt = _first_distinct(canonical, STRATEGY_POOLS[strategy], as_prefix=strategy == "prefix")
        if alt:
            alternatives.append(Alternative(name=alt, strategy=strategy))

    alternatives.append(Alternative(name=abbreviate(tokens, canonical), strategy="abbreviation"))

    alt = _first_distinct(canonical, STRATEGY_POOLS["compound"])
    if alt:
        alternatives.append(Alternative(name=alt, strategy="compound"))

    return alternatives


def summarize_availability(alternative: Alternative, checks: Iterable[Any]) -> Alternative:
    """
    Attach an availability summary from checks run for the alternative.

    Returns:
        A new Alternative marked as checked
    """
    checks = [NamespaceCheck.from_dict(c) for c in checks]
    available = sum(1 for c in checks if c.status is CheckStatus.AVAILABLE)
    taken = sum(1 for c in checks if c.status is CheckStatus.TAKEN)

    if taken == 0 and checks:
        summary = f"All {available} checked namespace(s) available"
    elif taken:
        summary = f"{taken} of {len(checks)} namespace(s) taken"
    else:
        summary = "No namespaces checked"

    return Alternative(name=alternative.name, strategy=alternative.strategy, checked=True, summary=summary)
