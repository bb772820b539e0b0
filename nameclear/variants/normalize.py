#!/usr/bin/env python3
"""
Name normalization.

Produces the canonical comparable form of a name: lowercase, anything
outside ``[a-z0-9-]`` turned into a hyphen, hyphen runs collapsed, no
leading or trailing hyphen.
"""

import re

_NON_CANONICAL = re.compile(r'[^a-z0-9-]')
_HYPHEN_RUN = re.compile(r'-+')
_NON_ALNUM = re.compile(r'[^a-z0-9]')


def normalize(name: str) -> str:
    """
    Normalize a name to its canonical lowercase form.

    Examples:
        >>> normalize("My Cool_Tool")
        'my-cool-tool'
        >>> normalize("--Foo..Bar--")
        'foo-bar'
    """
    text = _NON_CANONICAL.sub('-', name.lower())
    text = _HYPHEN_RUN.sub('-', text)
    return text.strip('-')


def strip_all(name: str) -> str:
    """
    Strip everything except lowercase letters and digits.

    Used for aggressive matching ("MyCoolTool" -> "mycooltool").
    """
    return _NON_ALNUM.sub('', name.lower())
