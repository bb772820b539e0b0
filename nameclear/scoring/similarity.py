#!/usr/bin/env python3
"""
Similarity Scoring
==================
"Looks like" and "sounds like" similarity between two names, modelled on
the appearance and sound prongs of a trademark likelihood-of-confusion
analysis.

Algorithms:
- Jaro / Jaro-Winkler: character similarity with a common-prefix bonus
- Metaphone signature: the same Jaro-Winkler applied to phonetic codes

Both axes are blended into one ``overall`` score (default 60% looks,
40% sounds) rounded half-up to 3 decimals.

Reference:
- In re E.I. Du Pont de Nemours & Co., 476 F.2d 1357 (CCPA 1973)
"""

from typing import Any, Iterable, List, Optional, Tuple

from nameclear.models import SimilarityResult, SimilarityScore
from nameclear.numeric import format_fixed, round_to
from nameclear.settings import require_setting
from nameclear.variants.normalize import normalize
from nameclear.variants.phonetic import phonetic_signature
from nameclear.variants.tokenize import tokenize

LOOK_WEIGHT = float(require_setting("similarity.look_weight"))
SOUND_WEIGHT = float(require_setting("similarity.sound_weight"))
WINKLER_PREFIX = int(require_setting("similarity.winkler_prefix"))
WINKLER_SCALING = float(require_setting("similarity.winkler_scaling"))
DEFAULT_THRESHOLD = float(require_setting("similarity.threshold"))

_LABELS = require_setting("similarity.labels")
VERY_HIGH = float(_LABELS["very_high"])
HIGH = float(_LABELS["high"])
MEDIUM = float(_LABELS["medium"])


# =============================================================================
# Jaro / Jaro-Winkler
# =============================================================================

def jaro(a: str, b: str) -> float:
    """
    Classic Jaro similarity.

    Returns:
        1.0 for equal strings, 0.0 when either is empty or nothing matches.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    window = max(max(len(a), len(b)) // 2 - 1, 0)
    a_matched = [False] * len(a)
    b_matched = [False] * len(b)
    matches = 0

    for i, ch in enumerate(a):
        start = max(0, i - window)
        end = min(i + window + 1, len(b))
        for j in range(start, end):
            if b_matched[j] or ch != b[j]:
                continue
            a_matched[i] = True
            b_matched[j] = True
            matches += 1
            break

    if matches == 0:
        return 0.0

    transpositions = 0
    k = 0
    for i, ch in enumerate(a):
        if not a_matched[i]:
            continue
        while not b_matched[k]:
            k += 1
        if ch != b[k]:
            transpositions += 1
        k += 1

    return (
        matches / len(a)
        + matches / len(b)
        + (matches - transpositions / 2) / matches
    ) / 3


def jaro_winkler(a: str, b: str) -> float:
    """
    Jaro-Winkler similarity, case-insensitive.

    Up to WINKLER_PREFIX common leading characters add
    ``prefix * WINKLER_SCALING * (1 - jaro)``.
    """
    if not isinstance(a, str) or not isinstance(b, str):
        return 0.0

    a_lower = a.lower()
    b_lower = b.lower()
    score = jaro(a_lower, b_lower)

    prefix = 0
    for i in range(min(WINKLER_PREFIX, len(a_lower), len(b_lower))):
        if a_lower[i] != b_lower[i]:
            break
        prefix += 1

    return score + prefix * WINKLER_SCALING * (1 - score)


def similarity_label(score: float) -> str:
    """Map a 0-1 score to 'very high', 'high', 'medium' or 'low'."""
    if score >= VERY_HIGH:
        return "very high"
    if score >= HIGH:
        return "high"
    if score >= MEDIUM:
        return "medium"
    return "low"


# =============================================================================
# Pair comparison
# =============================================================================

def compare_pair(a: str, b: str,
                 look_weight: Optional[float] = None,
                 sound_weight: Optional[float] = None) -> SimilarityResult:
    """
    Compare a candidate mark with a known mark.

    Args:
        a: Candidate mark
        b: Known mark
        look_weight: Weight of the appearance score (default 0.6)
        sound_weight: Weight of the phonetic score (default 0.4)

    Returns:
        SimilarityResult with both axes, the blended overall score and two
        human-readable ``why`` lines.
    """
    look_weight = LOOK_WEIGHT if look_weight is None else look_weight
    sound_weight = SOUND_WEIGHT if sound_weight is None else sound_weight

    norm_a = normalize(a)
    norm_b = normalize(b)
    looks = jaro_winkler(norm_a, norm_b)

    sig_a = phonetic_signature(tokenize(norm_a))
    sig_b = phonetic_signature(tokenize(norm_b))
    sounds = jaro_winkler(sig_a, sig_b) if sig_a and sig_b else 0.0

    total = look_weight + sound_weight
    overall = round_to((look_weight * looks + sound_weight * sounds) / total, 3) if total > 0 else 0

    looks_label = similarity_label(looks)
    sounds_label = similarity_label(sounds)

    return SimilarityResult(
        a=a,
        b=b,
        looks=SimilarityScore(looks, looks_label),
        sounds=SimilarityScore(sounds, sounds_label),
        overall=overall,
        why=[
            f'Looks like "{b}" (Jaro-Winkler: {format_fixed(looks)}, {looks_label})',
            f'Sounds like "{b}" (Metaphone: {format_fixed(sounds)}, {sounds_label})',
        ],
    )


def _mark_of(entry: Any) -> Optional[str]:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        return entry.get("mark")
    return getattr(entry, "mark", None)


def find_similar_marks(candidate: str, marks: Iterable[Any],
                       threshold: Optional[float] = None,
                       look_weight: Optional[float] = None,
                       sound_weight: Optional[float] = None) -> List[Tuple[str, SimilarityResult]]:
    """
    Find known marks at or above a similarity threshold.

    Args:
        candidate: Candidate mark
        marks: Strings, ``{"mark": ...}`` dicts or objects with a ``mark`` attribute
        threshold: Minimum ``overall`` score (default 0.70)

    Returns:
        ``(mark, comparison)`` tuples sorted by overall score descending,
        ties broken by mark name.
    """
    threshold = DEFAULT_THRESHOLD if threshold is None else threshold
    results = []

    for entry in marks:
        mark = _mark_of(entry)
        if not mark:
            continue
        comparison = compare_pair(candidate, mark, look_weight=look_weight, sound_weight=sound_weight)
        if comparison.overall >= threshold:
            results.append((mark, comparison))

    results.sort(key=lambda r: (-r[1].overall, r[0]))
    return results
