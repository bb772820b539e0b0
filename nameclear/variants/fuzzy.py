#!/usr/bin/env python3
"""
Fuzzy edit-distance=1 variant generation.

Generates every single-edit variant (deletion, substitution, insertion)
of a candidate. These represent typosquatting risk: names one keystroke
away from the candidate.

Variants are sorted by the stable tuple (operation, position, replacement,
variant) so the capped list is the same on every run. The cap is a
query-cost control, not a risk ranking.
"""

from typing import List, Optional

from nameclear.settings import require_setting

ALPHABET = str(require_setting("fuzzy.alphabet"))
DEFAULT_MAX_VARIANTS = int(require_setting("fuzzy.max_variants"))
DEFAULT_VARIANT_BUDGET = int(require_setting("fuzzy.variant_budget"))

# Operation names sort lexically: del < ins < sub
OP_DELETE = "del"
OP_INSERT = "ins"
OP_SUBSTITUTE = "sub"


def fuzzy_variants(name: str, max_variants: Optional[int] = None) -> List[str]:
    """
    Generate all edit-distance=1 variants of a name.

    Args:
        name: Name to generate variants for (lowercased first)
        max_variants: Cap on the returned list (default from app.yaml)

    Returns:
        Sorted, deduplicated, capped list of variants. Never contains the
        name itself or the empty string.

    Examples:
        >>> fuzzy_variants("abc")[:3]
        ['bc', 'ac', 'ab']
    """
    max_variants = max_variants or DEFAULT_MAX_VARIANTS
    lower = name.lower()
    raw = []

    for i in range(len(lower)):
        variant = lower[:i] + lower[i + 1:]
        if variant and variant != lower:
            raw.append((OP_DELETE, i, "", variant))

    for i, current in enumerate(lower):
        for ch in ALPHABET:
            if ch == current:
                continue
            variant = lower[:i] + ch + lower[i + 1:]
            if variant != lower:
                raw.append((OP_SUBSTITUTE, i, ch, variant))

    for i in range(len(lower) + 1):
        for ch in ALPHABET:
            variant = lower[:i] + ch + lower[i:]
            if variant != lower:
                raw.append((OP_INSERT, i, ch, variant))

    raw.sort()

    seen = set()
    unique = []
    for _, _, _, variant in raw:
        if variant not in seen:
            seen.add(variant)
            unique.append(variant)

    return unique[:max_variants]


def select_top_n(variants: List[str], n: int = DEFAULT_VARIANT_BUDGET) -> List[str]:
    """First ``n`` variants of a pre-sorted list, to bound registry queries."""
    return list(variants[:n])
