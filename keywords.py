"""Trend keyword extraction over recent cast text (no LLM calls)."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable

from aggregates import rank_top
from models import FarcasterTrendKeyword

MIN_TOKEN_LENGTH = 3

_URL_RE = re.compile(r"https?://\S+")
# \w keeps underscores here; the token pattern below does not.
_PUNCTUATION_RE = re.compile(r"[^\w$#\s]")
_TOKEN_RE = re.compile(r"[#$]?[a-z0-9]{3,}")
_NUMERIC_RE = re.compile(r"^[0-9]+$")

# Filler words common in casts that carry no topical signal.
KEYWORD_STOPWORDS: frozenset[str] = frozenset({
    "about",
    "after",
    "also",
    "been",
    "before",
    "build",
    "check",
    "from",
    "have",
    "just",
    "like",
    "maybe",
    "more",
    "need",
    "only",
    "that",
    "this",
    "their",
    "them",
    "they",
    "what",
    "when",
    "where",
    "which",
    "with",
    "would",
    "your",
})


def tokenize(text: str) -> list[str]:
    """Lowercase, strip URLs and punctuation, and keep eligible tokens.

    Hashtags and cashtags keep their ``#``/``$`` prefix. Tokens shorter than
    three characters, purely numeric tokens and stopwords are dropped.
    """
    normalized = _PUNCTUATION_RE.sub(" ", _URL_RE.sub(" ", text.lower()))

    tokens: list[str] = []
    for token in _TOKEN_RE.findall(normalized):
        term = token.strip()
        if len(term) < MIN_TOKEN_LENGTH or term in KEYWORD_STOPWORDS or _NUMERIC_RE.match(term):
            continue
        tokens.append(term)
    return tokens


def extract_trend_keywords(texts: Iterable[str], limit: int = 6) -> list[FarcasterTrendKeyword]:
    """Most frequent terms across ``texts``; ties keep first-seen order."""
    counts: Counter[str] = Counter()
    for text in texts:
        counts.update(tokenize(text))

    keywords = [FarcasterTrendKeyword(term=term, mentions=n) for term, n in counts.items()]
    return rank_top(keywords, lambda k: k.mentions, limit)
