#!/usr/bin/env python3
"""
Known-Marks Corpus
==================
Offline comparison of a candidate against a user-supplied list of known
marks (competitors, own portfolio, an avoid-list).

Corpus file format (JSON):
    {"marks": [{"mark": "ReactJS", "class": 9, "registrant": "Meta"}, ...]}

Matches at or above the threshold become phonetic_conflict or
near_conflict findings, each backed by an evidence record holding the
sha256 of the matched entry.

Usage:
    from nameclear.corpus import load_corpus, compare_against_corpus

    corpus = load_corpus("corpus.json")
    result = compare_against_corpus("MyCoolTool", corpus)
    for finding in result.findings:
        print(finding.summary)
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from nameclear.ids import finding_id, hash_object
from nameclear.models import ClosestConflict, Evidence, Finding, FindingKind, Severity
from nameclear.numeric import format_fixed, round_half_up
from nameclear.scoring.findings import HIGH_SIMILARITY_THRESHOLD, PHONETIC_THRESHOLD
from nameclear.scoring.similarity import find_similar_marks, similarity_label
from nameclear.settings import require_setting

logger = logging.getLogger(__name__)

CORPUS_ERROR_CODE = "NAMECLEAR.CORPUS.INVALID"
DEFAULT_THRESHOLD = float(require_setting("corpus.threshold"))


class CorpusError(ValueError):
    """Raised when a corpus file cannot be read or is malformed."""

    def __init__(self, message: str):
        super().__init__(message)
        self.code = CORPUS_ERROR_CODE


@dataclass(frozen=True)
class CorpusMark:
    mark: str
    nice_class: Optional[int] = None
    registrant: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"mark": self.mark}
        if self.nice_class is not None:
            data["class"] = self.nice_class
        if self.registrant:
            data["registrant"] = self.registrant
        return data

    @property
    def notes(self) -> str:
        text = f'Corpus entry: "{self.mark}"'
        if self.nice_class:
            text += f" (Nice class {self.nice_class})"
        if self.registrant:
            text += f" by {self.registrant}"
        return text


@dataclass
class CorpusComparison:
    findings: List[Finding] = field(default_factory=list)
    evidence: List[Evidence] = field(default_factory=list)
    closest_conflicts: List[ClosestConflict] = field(default_factory=list)


def parse_corpus(data: Any, origin: str = "corpus") -> List[CorpusMark]:
    """Validate an already-decoded corpus document."""
    if not isinstance(data, dict) or not isinstance(data.get("marks"), list):
        raise CorpusError(f'Corpus file must have a "marks" array: {origin}')

    marks = []
    for i, entry in enumerate(data["marks"]):
        if not isinstance(entry, dict) or not isinstance(entry.get("mark"), str) or not entry["mark"]:
            raise CorpusError(f'Corpus entry {i} must have a non-empty "mark" string')
        nice_class = entry.get("class")
        marks.append(CorpusMark(
            mark=entry["mark"],
            nice_class=int(nice_class) if isinstance(nice_class, (int, float)) else None,
            registrant=entry.get("registrant") or None,
        ))
    return marks


def load_corpus(path: Union[str, Path]) -> List[CorpusMark]:
    """
    Load and validate a corpus file.

    Raises:
        CorpusError: unreadable file, invalid JSON, missing ``marks`` array
            or an entry without a non-empty ``mark`` string
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CorpusError(f"Cannot read corpus file: {path} ({e})") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorpusError(f"Corpus file is not valid JSON: {path}") from e

    marks = parse_corpus(data, origin=str(path))
    logger.info(f"Loaded {len(marks)} corpus mark(s) from {path}")
    return marks


def compare_against_corpus(candidate_mark: str,
                           corpus: List[CorpusMark],
                           threshold: Optional[float] = None) -> CorpusComparison:
    """
    Compare a candidate against every corpus mark.

    Args:
        candidate_mark: The proposed name
        corpus: Marks from load_corpus() or parse_corpus()
        threshold: Minimum overall similarity (default 0.70)

    Returns:
        CorpusComparison with findings, evidence and closest conflicts,
        strongest match first
    """
    threshold = DEFAULT_THRESHOLD if threshold is None else threshold
    by_mark = {}
    for entry in corpus:
        by_mark.setdefault(entry.mark, entry)

    result = CorpusComparison()
    matches = find_similar_marks(candidate_mark, corpus, threshold=threshold)

    for i, (mark, comparison) in enumerate(matches):
        entry = by_mark.get(mark, CorpusMark(mark))

        if comparison.sounds.score >= PHONETIC_THRESHOLD:
            kind, severity = FindingKind.PHONETIC_CONFLICT, Severity.HIGH
        elif comparison.overall >= HIGH_SIMILARITY_THRESHOLD:
            kind, severity = FindingKind.NEAR_CONFLICT, Severity.HIGH
        else:
            kind, severity = FindingKind.NEAR_CONFLICT, Severity.MEDIUM

        ev_id = f"ev.corpus.{i}"
        result.evidence.append(Evidence(
            id=ev_id,
            type="text",
            source_system="user_corpus",
            sha256=hash_object(entry.to_dict()),
            notes=entry.notes,
        ))

        impression = (
            f'Commercial impression: Looks like "{mark}" ({similarity_label(comparison.looks.score)}), '
            f'sounds like "{mark}" ({similarity_label(comparison.sounds.score)})'
        )
        overall_text = format_fixed(comparison.overall)

        result.findings.append(Finding(
            id=finding_id(kind.value, f"corpus-{candidate_mark}-{mark}", i),
            candidate_mark=candidate_mark,
            kind=kind,
            summary=f'Candidate "{candidate_mark}" is similar to known mark "{mark}" (overall: {overall_text})',
            severity=severity,
            score=round_half_up(comparison.overall * 100),
            why=list(comparison.why) + [impression],
            evidence_refs=[ev_id],
        ))

        axis = "Phonetic" if kind is FindingKind.PHONETIC_CONFLICT else "Visual"
        result.closest_conflicts.append(ClosestConflict(
            mark=mark,
            why=[f"{axis} similarity: {overall_text} ({similarity_label(comparison.overall)})", impression],
            severity=severity.value,
            evidence_refs=[ev_id],
        ))

    logger.debug(f"Corpus comparison for {candidate_mark!r}: {len(matches)} match(es)")
    return result
