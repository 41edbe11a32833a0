from __future__ import annotations


def levenshtein_distance(a: str, b: str) -> int:
    """Return the classic edit distance (insert, delete, substitute) between a and b."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    current[j - 1] + 1,
                    previous[j] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def closest_matches(value: str, candidates: list[str], limit: int = 3) -> list[str]:
    """Return up to `limit` candidates ordered by edit distance to value.

    Comparison is on uppercase strings. Ties keep the order of `candidates`
    (sorted() is stable).
    """
    target = value.upper()
    ranked = sorted(candidates, key=lambda c: levenshtein_distance(target, c.upper()))
    return ranked[:limit]


def is_line_crossing(origin_area: str, destination_area: str) -> bool:
    """Return True when a route crosses between the Western and Central lines.

    Either direction counts: western origin to central destination, or
    central origin to western destination.
    """
    origin = origin_area.lower()
    destination = destination_area.lower()
    return ("western" in origin and "central" in destination) or (
        "central" in origin and "western" in destination
    )
