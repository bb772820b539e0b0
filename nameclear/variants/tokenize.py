#!/usr/bin/env python3
"""
Name tokenization.

Splits a name into lowercase word tokens on explicit separators
(hyphen, underscore, dot, whitespace) and on case boundaries.
"""

import re
from typing import List

_SEPARATORS = re.compile(r'[-_.\s]+')
_LOWER_UPPER = re.compile(r'([a-z])([A-Z])')
_UPPER_RUN_TITLE = re.compile(r'([A-Z]+)([A-Z][a-z])')
_MARK = '\0'


def tokenize(name: str) -> List[str]:
    """
    Tokenize a name into component words.

    Examples:
        >>> tokenize("myCoolTool")
        ['my', 'cool', 'tool']
        >>> tokenize("HTMLParser")
        ['html', 'parser']
        >>> tokenize("foo_bar-baz")
        ['foo', 'bar', 'baz']
    """
    tokens = []
    for part in _SEPARATORS.split(name):
        if not part:
            continue
        marked = _LOWER_UPPER.sub(r'\1' + _MARK + r'\2', part)
        marked = _UPPER_RUN_TITLE.sub(r'\1' + _MARK + r'\2', marked)
        tokens.extend(piece.lower() for piece in marked.split(_MARK) if piece)
    return tokens
