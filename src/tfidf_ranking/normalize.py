"""
Term normalization.

Maps raw whitespace-delimited tokens to canonical terms:

    1. lowercase
    2. strip a trailing possessive "'s"
    3. strip one trailing "s" (naive singularization, "bus" -> "bu")
    4. joining characters (space & _ = + :) become "-"
    5. drop everything that is not an ASCII alphanumeric or "-"
    6. collapse "--" into "-"
    7. strip a trailing "-" and trailing ","

Steps 6 and 7 are single passes, so a result may still contain "--" or
end in "-" ("a---b" -> "a--b", "x---" -> "x-"). Leading hyphens are never
stripped ("-cat" stays "-cat").

The empty string is a valid term: a token made only of punctuation
normalizes to "" and is indexed like any other term.

Usage:
    from tfidf_ranking.normalize import normalize, tokenize

    terms = [normalize(token) for token in tokenize("The cat's toys")]
    # ['the', 'cat', 'toy']
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_SEPARATORS = re.compile(r"[ &_=+:]")
# POSIX [:alnum:] is ASCII-only
_ILLEGAL = re.compile(r"[^A-Za-z0-9-]")


def tokenize(text: str) -> list[str]:
    """Split text into raw tokens on runs of whitespace, preserving order."""
    return text.split()


def normalize(token: str) -> str:
    """Normalize a single raw token into a term."""
    term = token.lower()
    term = term.removesuffix("'s")
    term = term.removesuffix("s")
    term = _SEPARATORS.sub("-", term)
    term = _ILLEGAL.sub("", term)
    term = term.replace("--", "-")
    term = term.removesuffix("-")
    return term.rstrip(",")


def normalize_tokens(tokens: Iterable[str]) -> list[str]:
    return [normalize(token) for token in tokens]
