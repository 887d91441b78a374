"""Canned safety phrases ranked for type-ahead suggestion."""

from typing import List, Optional

PHRASE_LIBRARY: List[str] = [
    "Can you stay on call with me for a few minutes?",
    "I'm sharing my live location now.",
    "If I stop replying, please check on me.",
    "I'm moving to a well-lit area.",
    "Can you meet me at a nearby public place?",
    "Please call me when you can.",
    "I'm not sure this route is safe—I'm taking another path.",
    "If needed, can you contact campus security for me?",
    "I'm feeling uncomfortable and want to be extra careful.",
]

DEFAULT_SUGGESTIONS = 6
MAX_SUGGESTIONS = 8


def suggest(prefix: Optional[str]) -> List[str]:
    """
    Rank library phrases for a typed prefix, case-insensitively.

    Phrases starting with the prefix come first, then phrases merely
    containing it, each group in library order. An empty prefix returns the
    first six phrases.
    """
    needle = (prefix or "").strip().lower()
    if not needle:
        return PHRASE_LIBRARY[:DEFAULT_SUGGESTIONS]

    starts = [p for p in PHRASE_LIBRARY if p.lower().startswith(needle)]
    contains = [p for p in PHRASE_LIBRARY if p not in starts and needle in p.lower()]
    return (starts + contains)[:MAX_SUGGESTIONS]
