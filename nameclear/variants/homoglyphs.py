#!/usr/bin/env python3
"""
Homoglyph / confusable character detection.

Conservative: only common ASCII confusables from app.yaml. Variants are
single-position substitutions, never combinations across positions.
"""

from types import MappingProxyType
from typing import Dict, List, Tuple

from nameclear.settings import require_setting

CONFUSABLE_MAP = MappingProxyType({
    str(ch): tuple(str(s) for s in subs)
    for ch, subs in require_setting("variants.confusables").items()
})


def homoglyph_variants(name: str) -> List[str]:
    """
    Generate homoglyph variants of a name.

    Args:
        name: Name to generate variants for (lowercased first)

    Returns:
        Sorted, deduplicated confusable forms, excluding the name itself

    Examples:
        >>> homoglyph_variants("go")
        ['6o', '9o', 'g0']
    """
    lower = name.lower()
    variants = set()

    for i, ch in enumerate(lower):
        for sub in CONFUSABLE_MAP.get(ch, ()):
            variant = lower[:i] + sub + lower[i + 1:]
            if variant != lower:
                variants.add(variant)

    return sorted(variants)


def are_confusable(a: str, b: str) -> bool:
    """
    Check if two names are homoglyph-confusable.

    Identical strings are not confusable with each other; a case-only
    difference is.
    """
    if a == b:
        return False
    lower_a = a.lower()
    lower_b = b.lower()
    if lower_a == lower_b:
        return True
    return lower_b in homoglyph_variants(lower_a)


def confusable_map() -> Dict[str, Tuple[str, ...]]:
    """Copy of the substitution table, for reporting."""
    return dict(CONFUSABLE_MAP)
