#!/usr/bin/env python3
"""
nameclear - Name Collision Analysis
===================================

Turns a candidate project/product name plus namespace check results into
spelling variants, looks/sounds similarity scores, classified conflict
findings and an explainable GREEN/YELLOW/RED clearance opinion.

Checks namespace availability signals only. It is not a trademark search
and gives no legal opinion.

Quick Start
-----------
    from nameclear import analyze

    checks = [
        {"namespace": "npm", "query": {"candidateMark": "MyCoolTool", "value": "mycooltool"},
         "status": "taken", "authority": "authoritative"},
    ]
    result = analyze("MyCoolTool", checks)
    print(result.opinion.tier.value)   # red

Modules
-------
    nameclear.variants - Normalization, tokens, Metaphone, homoglyphs, fuzzy variants
    nameclear.scoring  - Similarity, findings, score breakdown, opinion
    nameclear.corpus   - Offline comparison against known marks
    nameclear.pipeline - End-to-end analysis in memory
    nameclear.models   - Typed records and enums

CLI Usage
---------
    python -m nameclear variants "MyCoolTool"
    python -m nameclear compare "MyCoolTool" "MyKoolTool"
    python -m nameclear analyze "MyCoolTool" --checks checks.json
"""

__version__ = "0.1.0"

import sys
from pathlib import Path

# Ensure parent directory is in path for imports
_parent = Path(__file__).parent.parent
if str(_parent) not in sys.path:
    sys.path.insert(0, str(_parent))

# =============================================================================
# Public API
# =============================================================================

from .models import (
    FormKind,
    CheckStatus,
    Authority,
    FindingKind,
    Severity,
    Tier,
    RiskTolerance,
    VariantForm,
    VariantSet,
    SimilarityResult,
    NamespaceCheck,
    Finding,
    Evidence,
    ScoreBreakdown,
    Opinion,
)
from .variants import generate_variants, generate_all_variants
from .scoring import (
    compare_pair,
    find_similar_marks,
    classify_findings,
    compute_score_breakdown,
    score_opinion,
    build_collision_cards,
    generate_alternatives,
)
from .corpus import CorpusError, load_corpus, compare_against_corpus
from .pipeline import AnalysisResult, analyze

__all__ = [
    '__version__',
    'FormKind',
    'CheckStatus',
    'Authority',
    'FindingKind',
    'Severity',
    'Tier',
    'RiskTolerance',
    'VariantForm',
    'VariantSet',
    'SimilarityResult',
    'NamespaceCheck',
    'Finding',
    'Evidence',
    'ScoreBreakdown',
    'Opinion',
    'generate_variants',
    'generate_all_variants',
    'compare_pair',
    'find_similar_marks',
    'classify_findings',
    'compute_score_breakdown',
    'score_opinion',
    'build_collision_cards',
    'generate_alternatives',
    'CorpusError',
    'load_corpus',
    'compare_against_corpus',
    'AnalysisResult',
    'analyze',
]
