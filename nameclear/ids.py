#!/usr/bin/env python3
"""
Deterministic identifiers.

ID prefixes:
    chk.*  namespace checks
    ev.*   evidence records
    fd.*   findings
    run.*  analysis runs

Same inputs always give the same ID.
"""

import hashlib
import json
import re


def sanitize_segment(text: str) -> str:
    """Lowercase, map anything outside [a-z0-9.-] to '-', collapse and trim hyphens."""
    text = re.sub(r'[^a-z0-9.\-]', '-', str(text).lower())
    text = re.sub(r'-+', '-', text)
    return text.strip('-')


def check_id(namespace: str, name: str) -> str:
    """e.g. ``chk.npm.my-cool-tool``"""
    return f"chk.{sanitize_segment(namespace)}.{sanitize_segment(name)}"


def evidence_id(parent_check_id: str, idx: int) -> str:
    """e.g. ``ev.chk.npm.my-cool-tool.0``"""
    return f"ev.{parent_check_id}.{idx}"


def finding_id(kind: str, slug: str, idx: int, sanitize: bool = True) -> str:
    """
    e.g. ``fd.exact-conflict.npm.0``

    With ``sanitize=False`` the slug is used as given (namespace names such
    as ``github_repo`` keep their underscore).
    """
    kind_segment = kind.replace('_', '-')
    if sanitize:
        kind_segment = sanitize_segment(kind_segment)
        slug = sanitize_segment(slug)
    return f"fd.{kind_segment}.{slug}.{idx}"


def canonical_json(value) -> str:
    """JSON with recursively sorted keys and no whitespace."""
    return json.dumps(value, sort_keys=True, separators=(',', ':'), ensure_ascii=False)


def hash_string(text: str) -> str:
    return hashlib.sha256(text.encode('utf-8')).hexdigest()


def hash_object(value) -> str:
    """sha256 of the canonical JSON of ``value``."""
    return hash_string(canonical_json(value))
