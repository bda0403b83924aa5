"""Deterministic Keyword Deriver.

Turns a free-text feature description into a short, ranked keyword list.

Rules
-----
- NO LLM calls
- NO external API calls
- Pure transformation: same input → same output
"""

from __future__ import annotations

import re
from typing import List

from ..constants import KEYWORD_STOPWORDS, MAX_KEYWORDS

_PUNCTUATION_RE = re.compile(r"[^\w\s]", re.ASCII)


def _tokenise(text: str) -> List[str]:
    """Lowercase *text*, blank out punctuation, split on whitespace.

    Only tokens longer than 2 characters survive.
    """
    cleaned = _PUNCTUATION_RE.sub(" ", text.lower())
    return [t for t in cleaned.split() if len(t) > 2]


def derive_keywords(text: str, max_keywords: int = MAX_KEYWORDS) -> List[str]:
    """Derive up to *max_keywords* keywords from *text*.

    Longer tokens rank first; equal lengths fall back to lexical order.
    Returns an empty list when nothing qualifies; callers that need at
    least one keyword raise ``EmptyInputError`` themselves.
    """
    if not text:
        return []

    unique = {t for t in _tokenise(text) if t not in KEYWORD_STOPWORDS}
    ranked = sorted(unique, key=lambda t: (-len(t), t))
    return ranked[:max(0, max_keywords)]
