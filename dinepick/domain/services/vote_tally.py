"""Vote tally for restaurant candidates.

Approval counting: every participant who liked a candidate adds exactly
one point to it, no matter how many other candidates they liked.

Winner selection:
1. Highest approval count
2. Tie on count -> strictly higher rating
3. Tie on both -> earliest position in the candidate list

The result depends only on the candidate order and the vote contents,
never on mapping or set iteration order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from uuid import UUID

from dinepick.domain.models.plan import RestaurantOption


def count_approvals(
    candidates: Sequence[RestaurantOption],
    votes: Mapping[UUID, Iterable[str]],
) -> dict[str, int]:
    """Count approvals per candidate id.

    Votes for ids outside ``candidates`` are ignored, and a participant
    listing the same id twice still counts once.

    Args:
        candidates: The plan's candidate list.
        votes: Participant id -> liked candidate ids.

    Returns:
        Candidate id -> number of participants who liked it.
    """
    counts = {c.id: 0 for c in candidates}
    for liked in votes.values():
        for candidate_id in set(liked):
            if candidate_id in counts:
                counts[candidate_id] += 1
    return counts


def tally_winner(
    candidates: Sequence[RestaurantOption],
    votes: Mapping[UUID, Iterable[str]],
) -> RestaurantOption | None:
    """Compute the single winning candidate.

    Pure and deterministic: identical input always yields the same
    candidate.

    Args:
        candidates: The plan's candidate list, in creation order.
        votes: Participant id -> liked candidate ids. A participant with
            an empty set contributes nothing.

    Returns:
        The winning candidate, or None if there are no candidates.

    Example:
        >>> r1 = RestaurantOption(id="r1", name="A", rating=4.0)
        >>> r2 = RestaurantOption(id="r2", name="B", rating=4.5)
        >>> tally_winner([r1, r2], {u1: {"r1", "r2"}, u2: {"r1"}}).id
        'r1'
    """
    if not candidates:
        return None

    counts = count_approvals(candidates, votes)

    best = candidates[0]
    best_key = (counts[best.id], best.rating)
    for candidate in candidates[1:]:
        key = (counts[candidate.id], candidate.rating)
        # Strict comparison keeps the earlier candidate on a full tie
        if key > best_key:
            best, best_key = candidate, key
    return best
