# src/wordwise/core/clean.py
"""
Split a token into its matchable core and the decoration around it.

    ", Hello, World，大家！!*•-&"  →  core "Hello, World，大家！", prefix ", ", suffix "!*•-&"

Only characters in DECORATION are ever stripped. Full-width punctuation,
letters and digits of any script stay in the core.

Tokens taken from (X)HTML source can also carry character references at
their edges ("&ldquo;versatile&rdquo;"); with entities=True those are
stripped as decoration too and kept verbatim in prefix/suffix.
"""

import re
import string


DECORATION = frozenset(" " + string.punctuation + "•·“”‘’–—…«»")

_REFERENCE = r"&(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);"
_LEADING_REFERENCE_RE = re.compile(_REFERENCE)
_TRAILING_REFERENCE_RE = re.compile(_REFERENCE + r"\Z")


def clean_token(token: str, lowercase: bool = True, entities: bool = False) -> tuple[str, str, str]:
    """Return (core, prefix, suffix) with prefix + core + suffix == token."""
    start = 0
    end = len(token)
    while start < end:
        if entities:
            m = _LEADING_REFERENCE_RE.match(token, start, end)
            if m:
                start = m.end()
                continue
        if token[start] not in DECORATION:
            break
        start += 1
    while end > start:
        if entities:
            m = _TRAILING_REFERENCE_RE.search(token, start, end)
            if m:
                end = m.start()
                continue
        if token[end - 1] not in DECORATION:
            break
        end -= 1

    core = token[start:end]
    if lowercase:
        core = core.lower()
    return core, token[:start], token[end:]
