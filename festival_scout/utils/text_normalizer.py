"""Artist-name normalization and match scoring.

Two concerns live here:

1. **Normalization** -- :func:`normalize_name` folds a display name to a
   canonical comparison key: diacritics stripped, punctuation dropped,
   lower-cased, whitespace collapsed.  "Beyoncé!" and "beyonce" normalize
   to the same key.  :func:`slugify_name` turns that key into an id-safe
   slug.

2. **Scoring** -- :func:`match_score` is the single word-overlap scorer used
   by identity resolution and act linking.  Callers never re-implement it.
   :func:`fuzzy_match` (rapidfuzz ``token_sort_ratio``) is reserved for
   looking names up in our own store, where word order may differ.
"""

import re
import unicodedata

from rapidfuzz import fuzz, process

# Minimum match_score for a catalog candidate or stored artist to count as
# the same artist. Shared by identity resolution and act linking.
MATCH_ACCEPT_THRESHOLD = 0.3

_COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")
_DISALLOWED_CHARS = re.compile(r"[^a-zA-Z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Normalize an artist or festival name for comparison.

    Decomposes to NFD, strips combining marks, removes every character that
    is not an ASCII letter, digit, whitespace or hyphen, lower-cases, then
    collapses and trims whitespace.  Idempotent.

    Args:
        name: Raw display name.

    Returns:
        The normalized comparison key (possibly empty).
    """
    if not name:
        return ""
    decomposed = unicodedata.normalize("NFD", name)
    stripped = _COMBINING_MARKS.sub("", decomposed)
    cleaned = _DISALLOWED_CHARS.sub("", stripped)
    return _WHITESPACE.sub(" ", cleaned.lower()).strip()


def slugify_name(name: str) -> str:
    """Return :func:`normalize_name` with spaces replaced by hyphens."""
    return normalize_name(name).replace(" ", "-")


def match_score(query: str, candidate: str) -> float:
    """Score how well *candidate* matches *query*, in ``[0.0, 1.0]``.

    Both inputs are normalized first.  Equal keys score 1.0; otherwise the
    score is the number of query words present in the candidate's word set
    divided by the larger of the two word counts.  Either side empty after
    normalization scores 0.0.

    Args:
        query: The name being searched for.
        candidate: A name returned by a catalog or stored locally.

    Returns:
        The match score.
    """
    norm_query = normalize_name(query)
    norm_candidate = normalize_name(candidate)
    if not norm_query or not norm_candidate:
        return 0.0
    if norm_query == norm_candidate:
        return 1.0

    query_words = norm_query.split(" ")
    candidate_words = norm_candidate.split(" ")
    candidate_set = set(candidate_words)
    hits = sum(1 for word in query_words if word in candidate_set)
    return hits / max(len(query_words), len(candidate_words))


def fuzzy_match(
    query: str,
    candidates: list[str],
    threshold: float = 0.9,
) -> tuple[str, float] | None:
    """Find the best fuzzy match for *query* among *candidates*.

    Uses rapidfuzz ``token_sort_ratio`` on normalized keys so "Cox Carl"
    still finds "Carl Cox".

    Args:
        query: The string to match.
        candidates: Candidate strings to match against.
        threshold: Minimum similarity (0.0--1.0) to accept a match.

    Returns:
        A ``(best_match, score)`` tuple if a match meets the threshold,
        else ``None``.  ``best_match`` is the original candidate string.
    """
    if not candidates or not normalize_name(query):
        return None

    result = process.extractOne(
        query,
        candidates,
        scorer=fuzz.token_sort_ratio,
        processor=normalize_name,
        score_cutoff=threshold * 100,
    )
    if result is None:
        return None

    match_str, score, _ = result
    return (match_str, score / 100.0)
