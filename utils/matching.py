"""
Utility for searching Pokemon names.

This module provides asynchronous wrappers for Python's built-in `difflib`
library plus a ranking helper used by the search box. Because fuzzy
matching on large name lists is CPU-intensive, the difflib work is
offloaded to a separate thread to avoid blocking the event loop.
"""

import asyncio
import difflib
from typing import Iterable, List


def _get_close_matches_sync(
    word: str, possibilities: List[str], n: int = 3, cutoff: float = 0.6
) -> List[str]:
    """
    Synchronous wrapper for `difflib.get_close_matches`.

    Args:
        word: The string to find matches for.
        possibilities: A list of valid strings to search against.
        n: The maximum number of close matches to return.
        cutoff: A float in [0, 1]. Possibilities that don't score at least
            this similar to word are ignored.

    Returns:
        A list of the best matches, sorted by similarity score.
    """
    return difflib.get_close_matches(word, possibilities, n=n, cutoff=cutoff)


async def get_close_matches_async(
    word: str, possibilities: List[str], n: int = 3, cutoff: float = 0.6
) -> List[str]:
    """
    Asynchronous wrapper for fuzzy matching.

    Offloads the CPU-bound `difflib` operation to a thread pool using
    `asyncio.to_thread`.

    Args:
        word: The word to find matches for.
        possibilities: List of valid words.
        n: Maximum number of matches to return.
        cutoff: Similarity threshold (0.0 to 1.0).

    Returns:
        List of matched strings.
    """
    if not possibilities:
        return []

    return await asyncio.to_thread(
        _get_close_matches_sync, word, possibilities, n, cutoff
    )


async def rank_name_matches(
    query: str, names: Iterable[str], n: int = 5, cutoff: float = 0.6
) -> List[str]:
    """
    Rank names for a search query.

    Prefix matches come first, then other substring matches (each group in
    alphabetical order), then fuzzy matches for typos.

    Args:
        query: Raw search text (case and surrounding spaces are ignored).
        names: Candidate names; duplicates are ignored.
        n: Maximum number of results.
        cutoff: Similarity threshold for the fuzzy pass.

    Returns:
        Up to `n` lower-cased names.
    """
    needle = query.strip().lower()
    candidates = sorted({name.lower() for name in names})
    if not needle or not candidates:
        return []

    prefix = [name for name in candidates if name.startswith(needle)]
    contains = [name for name in candidates if needle in name and name not in prefix]
    ranked = prefix + contains

    if len(ranked) < n:
        remaining = [name for name in candidates if name not in ranked]
        fuzzy = await get_close_matches_async(
            needle, remaining, n=n - len(ranked), cutoff=cutoff
        )
        ranked.extend(fuzzy)

    return ranked[:n]
