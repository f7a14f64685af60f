"""String similarity used to suggest fixes for broken references."""

from typing import Iterable, List


def levenshtein_distance(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """1.0 for identical strings, falling towards 0.0 with edit distance."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1 - levenshtein_distance(a, b) / longest


def similar_ids(target: str, candidates: Iterable[str], *, threshold: float = 0.6, limit: int = 3) -> List[str]:
    scored = [(similarity(c, target), c) for c in candidates]
    ranked = sorted((pair for pair in scored if pair[0] > threshold), key=lambda pair: (-pair[0], pair[1]))
    return [candidate for _, candidate in ranked[:limit]]
