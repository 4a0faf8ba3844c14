"""Comparison functions for ranking tracks and albums.

A comparator takes two items and returns ``-1`` when the first ranks
before the second, ``1`` when it ranks after, and ``0`` on a tie.
Comparators compose with :func:`combine`, which gives lexicographic
ranking over several keys.
"""

from __future__ import annotations

import re
from collections import Counter
from functools import cmp_to_key
from typing import Any, Callable, Iterable, List, Optional

from unidecode import unidecode

Comparator = Callable[[Any, Any], int]
Scorer = Callable[[Any], Any]

ALBUM_TYPE_RANKINGS = {
    "album": 4,
    "single": 3,
    "appears_on": 2,
    "compilation": 1,
}


def identity(value: Any) -> Any:
    return value


def ascending(score: Optional[Scorer] = None) -> Comparator:
    """Comparator ranking lower scores first."""
    score = score or identity

    def compare(a: Any, b: Any) -> int:
        x = score(a)
        y = score(b)
        if x < y:
            return -1
        if x > y:
            return 1
        return 0

    return compare


def descending(score: Optional[Scorer] = None) -> Comparator:
    """Comparator ranking higher scores first."""
    score = score or identity

    def compare(a: Any, b: Any) -> int:
        x = score(a)
        y = score(b)
        if x < y:
            return 1
        if x > y:
            return -1
        return 0

    return compare


def combine(*comparators: Comparator) -> Comparator:
    """Chain comparators left to right.

    The result of the first comparator is returned unless it is ``0``,
    in which case the next one decides, and so on.
    """
    if not comparators:
        raise ValueError("combine() needs at least one comparator")

    def compare(a: Any, b: Any) -> int:
        for comparator in comparators:
            value = comparator(a, b)
            if value != 0:
                return value
        return 0

    return compare


def stable_sort(items: Iterable[Any], cmp: Optional[Comparator] = None) -> List[Any]:
    """Return a new list sorted by ``cmp``, keeping input order among ties.

    Each item is paired with its original index and the index is used as
    the last tie-break, so the result does not depend on the stability
    of the underlying sort.
    """
    cmp = cmp or ascending()
    pairs = list(enumerate(items))
    decorated = combine(
        lambda a, b: cmp(a[1], b[1]),
        ascending(lambda pair: pair[0]),
    )
    pairs.sort(key=cmp_to_key(decorated))
    return [value for _, value in pairs]


def _popularity_score(item: Any) -> int:
    value = getattr(item, "popularity", None)
    if value is None:
        return -1
    return value


def _lastfm_score(item: Any) -> int:
    value = getattr(item, "lastfm", None)
    if value is None:
        return -1
    return value


def _album_type_score(item: Any) -> int:
    kind = getattr(item, "album_group", None) or getattr(item, "album_type", None)
    return ALBUM_TYPE_RANKINGS.get(kind or "", 0)


def _censorship_score(item: Any) -> int:
    return 1 if getattr(item, "explicit", False) else 0


def fold_text(text: str) -> str:
    """Lower-case ASCII rendition of ``text`` with all whitespace removed."""
    return re.sub(r"\s+", "", unidecode(text or "").lower())


def _bigrams(text: str) -> Counter:
    return Counter(text[index:index + 2] for index in range(len(text) - 1))


def similarity_score(candidate: str, query: str) -> float:
    """Dice coefficient over the character bigrams of two folded strings."""
    left = fold_text(candidate)
    right = fold_text(query)
    if left == right:
        return 1.0
    if len(left) < 2 or len(right) < 2:
        return 0.0
    left_pairs = _bigrams(left)
    right_pairs = _bigrams(right)
    shared = sum((left_pairs & right_pairs).values())
    return 2.0 * shared / (sum(left_pairs.values()) + sum(right_pairs.values()))


popularity = descending(_popularity_score)

lastfm = descending(_lastfm_score)

album_type = descending(_album_type_score)

# Proper albums first, then by popularity.
album = combine(album_type, popularity)

censorship = descending(_censorship_score)


def similarity(query: str) -> Comparator:
    """Rank items by how closely their "Title - Artist" matches ``query``."""
    return descending(lambda item: similarity_score(item.full_name, query))


def track(query: str) -> Comparator:
    """Rank search candidates by similarity, then popularity, then explicitness."""
    return combine(similarity(query), popularity, censorship)


__all__ = [
    "ALBUM_TYPE_RANKINGS",
    "album",
    "album_type",
    "ascending",
    "censorship",
    "combine",
    "descending",
    "fold_text",
    "identity",
    "lastfm",
    "popularity",
    "similarity",
    "similarity_score",
    "stable_sort",
    "track",
]
