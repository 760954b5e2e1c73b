"""
Description similarity scoring.

Bank feed descriptions and ledger memos rarely agree verbatim, so the score
takes the best of a character-level ratio, a word-order-insensitive ratio and
token overlap.
"""

from difflib import SequenceMatcher

# Ceiling for strings that are not identical
MAX_NON_IDENTICAL_SCORE = 0.99


def _ratio(first: str, second: str) -> float:
    # SequenceMatcher is order sensitive, so compare in a canonical order
    first, second = sorted((first, second))
    return SequenceMatcher(None, first, second, autojunk=False).ratio()


def _token_overlap(first_tokens: set[str], second_tokens: set[str]) -> float:
    union = first_tokens | second_tokens
    if not union:
        return 0.0
    return len(first_tokens & second_tokens) / len(union)


def description_similarity(first: str, second: str) -> float:
    """
    Score how alike two normalized descriptions are.

    Args:
        first: Normalized description
        second: Normalized description

    Returns:
        Score between 0.0 and 1.0. Identical strings score 1.0, strings
        sharing no characters score 0.0.
    """
    if first == second:
        return 1.0
    if not first or not second:
        return 0.0

    first_tokens = first.split()
    second_tokens = second.split()

    score = max(
        _ratio(first, second),
        _ratio(" ".join(sorted(first_tokens)), " ".join(sorted(second_tokens))),
        _token_overlap(set(first_tokens), set(second_tokens)),
    )
    return min(score, MAX_NON_IDENTICAL_SCORE)
