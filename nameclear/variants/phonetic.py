#!/usr/bin/env python3
"""
Phonetic Encoding
=================
Metaphone-style consonant skeleton used for "sounds like" comparison.

The encoder is a single left-to-right scan with one or two characters of
lookahead. Each letter is handled by one branch; a branch may consume the
following letter (CH, PH, SH, TH, ...). Lookahead past the end of the word
is the empty string, and the empty string counts as a member of every
letter class, so a word-final C encodes as S and a word-final G as J.

Examples:
    >>> metaphone("phone") == metaphone("fone")
    True
    >>> metaphone("Knight")
    'NT'
"""

import re
from functools import lru_cache
from typing import List

from nameclear.settings import require_setting

MAX_CODE_LENGTH = int(require_setting("phonetic.max_code_length"))

VOWELS = "AEIOU"
FRONT_VOWELS = "EIY"
SILENT_INITIALS = ("AE", "GN", "KN", "PN", "WR")

_NON_ALPHA = re.compile(r'[^A-Z]')

# Letters that always map to one code letter
_DIRECT = {
    'F': 'F', 'J': 'J', 'L': 'L', 'M': 'M', 'N': 'N', 'R': 'R',
    'Q': 'K', 'V': 'F', 'X': 'KS', 'Z': 'S',
}


def _at(word: str, idx: int) -> str:
    return word[idx] if 0 <= idx < len(word) else ""


@lru_cache(maxsize=4096)
def metaphone(word: str) -> str:
    """
    Compute the Metaphone code for a single word.

    Args:
        word: A single word; non-letters are ignored.

    Returns:
        Uppercase code of at most MAX_CODE_LENGTH characters ("" for no letters).
        The digit ``0`` stands for the "th" sound.
    """
    if not word or not isinstance(word, str):
        return ""

    w = _NON_ALPHA.sub('', word.upper())
    if not w:
        return ""

    if w[:2] in SILENT_INITIALS:
        w = w[1:]

    code = ""
    i = 0
    length = len(w)

    while i < length and len(code) < MAX_CODE_LENGTH:
        c = w[i]
        nxt = _at(w, i + 1)
        after = _at(w, i + 2)
        prev = _at(w, i - 1)

        # Doubled letters encode once (CC is significant: "accent")
        if c == prev and c != 'C':
            i += 1
            continue

        if c in VOWELS:
            if i == 0:
                code += c

        elif c == 'B':
            # MB at the end of a word: silent B
            if prev != 'M' or i != length - 1:
                code += 'B'

        elif c == 'C':
            if nxt == 'H':
                code += 'X'
                i += 1
            elif nxt in FRONT_VOWELS:
                code += 'S'
            else:
                code += 'K'

        elif c == 'D':
            if nxt == 'G' and after in FRONT_VOWELS:
                code += 'J'
                i += 1
            else:
                code += 'T'

        elif c == 'G':
            if nxt == 'H' and i + 2 < length and after not in VOWELS:
                # GH not before a vowel is silent
                i += 1
            elif i > 0 and nxt == 'N' and i + 2 >= length:
                # terminal GN: silent G
                pass
            elif prev == 'G':
                pass
            elif nxt in FRONT_VOWELS:
                code += 'J'
            else:
                code += 'K'

        elif c == 'H':
            if nxt in VOWELS and prev not in "CSPTG":
                code += 'H'

        elif c == 'K':
            if prev != 'C':
                code += 'K'

        elif c == 'P':
            if nxt == 'H':
                code += 'F'
                i += 1
            else:
                code += 'P'

        elif c == 'S':
            if nxt == 'H' or (nxt == 'I' and after in "AO"):
                code += 'X'
                if nxt == 'H':
                    i += 1
            elif nxt == 'C' and after == 'H':
                code += 'SK'
                i += 2
            else:
                code += 'S'

        elif c == 'T':
            if nxt == 'H':
                code += '0'
                i += 1
            elif nxt == 'I' and after in "AO":
                code += 'X'
            else:
                code += 'T'

        elif c in ('W', 'Y'):
            if nxt in VOWELS:
                code += c

        elif c in _DIRECT:
            code += _DIRECT[c]

        i += 1

    return code[:MAX_CODE_LENGTH]


def phonetic_variants(tokens: List[str]) -> List[str]:
    """Metaphone code per token, dropping tokens that encode to nothing."""
    return [code for code in (metaphone(t) for t in tokens) if code]


def phonetic_signature(tokens: List[str]) -> str:
    """Space-separated Metaphone codes for a token list."""
    return " ".join(phonetic_variants(tokens))
