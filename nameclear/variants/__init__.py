#!/usr/bin/env python3
"""
Variant Generation
==================
Combines normalization, tokenization, phonetic encoding, homoglyph and
fuzzy generation into one deterministic VariantSet per candidate.

Usage:
    from nameclear.variants import generate_variants

    variant_set = generate_variants("MyCoolTool")
    print(variant_set.canonical)          # mycooltool
    for form in variant_set.forms:
        print(form.kind.value, form.value)
"""

from typing import Iterable, List

from nameclear.models import FormKind, VariantForm, VariantSet, VariantWarning, WarningSeverity
from nameclear.settings import require_setting

from .normalize import normalize, strip_all
from .tokenize import tokenize
from .phonetic import metaphone, phonetic_variants, phonetic_signature
from .homoglyphs import homoglyph_variants, are_confusable, confusable_map
from .fuzzy import fuzzy_variants, select_top_n

HOMOGLYPH_WARNING_CODE = str(require_setting("variants.homoglyph_warning_code"))
HOMOGLYPH_HIGH_COUNT = int(require_setting("variants.homoglyph_high_count"))
HOMOGLYPH_PREVIEW = int(require_setting("variants.homoglyph_preview"))


def _homoglyph_warning(homoglyphs: List[str]) -> VariantWarning:
    preview = ", ".join(homoglyphs[:HOMOGLYPH_PREVIEW])
    more = "..." if len(homoglyphs) > HOMOGLYPH_PREVIEW else ""
    severity = WarningSeverity.HIGH if len(homoglyphs) >= HOMOGLYPH_HIGH_COUNT else WarningSeverity.WARN
    return VariantWarning(
        code=HOMOGLYPH_WARNING_CODE,
        message=f"{len(homoglyphs)} confusable variant(s) detected: {preview}{more}",
        severity=severity,
    )


def generate_variants(candidate_mark: str, include_fuzzy: bool = True) -> VariantSet:
    """
    Generate all variant forms for a candidate name.

    Forms come in a fixed order (original, lower, nospace, hyphenated,
    underscored, punct-stripped, phonetic when non-empty, homoglyph-safe)
    and are deduplicated by (kind, value).

    Args:
        candidate_mark: The proposed name
        include_fuzzy: Also compute the capped edit-distance=1 list

    Returns:
        VariantSet for the candidate
    """
    normalized = normalize(candidate_mark)
    stripped = strip_all(candidate_mark)
    tokens = tokenize(candidate_mark)
    phonetic = phonetic_variants(tokens)
    homoglyphs = homoglyph_variants(normalized)

    candidates = [
        VariantForm(FormKind.ORIGINAL, candidate_mark),
        VariantForm(FormKind.LOWER, candidate_mark.lower()),
        VariantForm(FormKind.NOSPACE, stripped),
        VariantForm(FormKind.HYPHENATED, normalized),
        VariantForm(FormKind.UNDERSCORED, normalized.replace('-', '_')),
        VariantForm(FormKind.PUNCT_STRIPPED, stripped),
    ]
    if phonetic:
        candidates.append(VariantForm(FormKind.PHONETIC, " ".join(phonetic)))
    # The normalized form is the homoglyph-safe form
    candidates.append(VariantForm(FormKind.HOMOGLYPH_SAFE, normalized))

    forms = []
    seen = set()
    for form in candidates:
        key = (form.kind, form.value)
        if key not in seen:
            seen.add(key)
            forms.append(form)

    warnings = [_homoglyph_warning(homoglyphs)] if homoglyphs else []

    return VariantSet(
        candidate_mark=candidate_mark,
        canonical=normalized,
        forms=forms,
        warnings=warnings,
        fuzzy_variants=fuzzy_variants(normalized) if include_fuzzy and normalized else [],
    )


def generate_all_variants(candidates: Iterable[str], include_fuzzy: bool = True) -> List[VariantSet]:
    """Generate a VariantSet for each candidate, in input order."""
    return [generate_variants(c, include_fuzzy=include_fuzzy) for c in candidates]


__all__ = [
    'generate_variants',
    'generate_all_variants',
    'normalize',
    'strip_all',
    'tokenize',
    'metaphone',
    'phonetic_variants',
    'phonetic_signature',
    'homoglyph_variants',
    'are_confusable',
    'confusable_map',
    'fuzzy_variants',
    'select_top_n',
    'HOMOGLYPH_WARNING_CODE',
]
