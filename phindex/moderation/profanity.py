# phindex/moderation/profanity.py
"""
Word-level profanity check for comments and nicknames.

Each listed word is matched as a whole token, case-insensitively, with
common look-alike characters ("sh1t", "$hit"), stretched letters
("fuuuck") and a few inflection suffixes ("fucking", "bitches").
"""
from __future__ import annotations

import re

BAD_WORDS = frozenset({
    "ass",
    "asshole",
    "bastard",
    "bitch",
    "cunt",
    "dick",
    "fuck",
    "motherfucker",
    "piss",
    "shit",
    "slut",
    "whore",
})

LOOKALIKES = {
    "a": "a@4",
    "e": "e3",
    "i": "i1!",
    "l": "l1",
    "o": "o0",
    "s": "s$5",
    "t": "t7",
}

SUFFIXES = r"(?:s|es|ed|er|ers|ing|y)?"


def _word_pattern(word: str) -> str:
    return "".join(f"[{re.escape(LOOKALIKES.get(ch, ch))}]+" for ch in word)


# longest first so "motherfucker" wins over "fuck"
_PROFANITY_RE = re.compile(
    r"(?<![^\W_])("
    + "|".join(_word_pattern(w) for w in sorted(BAD_WORDS, key=len, reverse=True))
    + r")" + SUFFIXES + r"(?![^\W_])",
    re.IGNORECASE | re.UNICODE,
)


def contains_profanity(text: str) -> str | None:
    """Return the first offending token as written, or None."""
    m = _PROFANITY_RE.search(text or "")
    return m.group(0) if m else None


def ensure_clean(text: str, what: str = "Comment") -> None:
    hit = contains_profanity(text)
    if hit:
        raise ValueError(f"{what} contains inappropriate language: “{hit}”.")
