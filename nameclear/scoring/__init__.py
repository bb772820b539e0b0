#!/usr/bin/env python3
"""
Scoring
=======
Similarity, finding classification and the clearance opinion.

Modules
-------
    nameclear.scoring.similarity      - Jaro-Winkler looks/sounds comparison
    nameclear.scoring.findings        - Checks + variants -> typed findings
    nameclear.scoring.weights         - Weighted score breakdown, DuPont-lite factors
    nameclear.scoring.opinion         - GREEN/YELLOW/RED opinion
    nameclear.scoring.templates       - Static text tables
    nameclear.scoring.collision_cards - Per-collision explanation cards
    nameclear.scoring.alternatives    - Safer name suggestions
"""

from .similarity import (
    jaro,
    jaro_winkler,
    similarity_label,
    compare_pair,
    find_similar_marks,
)
from .findings import classify_findings, is_market_signal
from .weights import (
    WEIGHT_PROFILES,
    TIER_THRESHOLDS,
    get_weight_profile,
    compute_score_breakdown,
    compute_dupont_factors,
)
from .opinion import (
    score_opinion,
    extract_top_factors,
    generate_risk_narrative,
    build_next_actions,
    build_reservation_links,
    compute_coverage,
)
from .collision_cards import build_collision_cards
from .alternatives import generate_alternatives, summarize_availability

__all__ = [
    'jaro',
    'jaro_winkler',
    'similarity_label',
    'compare_pair',
    'find_similar_marks',
    'classify_findings',
    'is_market_signal',
    'WEIGHT_PROFILES',
    'TIER_THRESHOLDS',
    'get_weight_profile',
    'compute_score_breakdown',
    'compute_dupont_factors',
    'score_opinion',
    'extract_top_factors',
    'generate_risk_narrative',
    'build_next_actions',
    'build_reservation_links',
    'compute_coverage',
    'build_collision_cards',
    'generate_alternatives',
    'summarize_availability',
]
