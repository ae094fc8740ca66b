"""Vote tallying.

A tally groups the raw vote rows of one profile and one characteristic type
by classification. Shares are ordered by count, highest first; equal counts
keep the order in which each classification first appeared in the input.

The ``apply_*`` helpers compute the optimistic tally a client shows while a
vote write is in flight. They always return a new ``Tally`` so the caller can
keep the previous one as a rollback snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional, Sequence


@dataclass(frozen=True)
class VoteShare:
    classification: str
    count: int
    percentage: float = 0.0


@dataclass(frozen=True)
class Tally:
    votes: list[VoteShare] = field(default_factory=list)
    user_vote: Optional[str] = None

    @property
    def total(self) -> int:
        return sum(v.count for v in self.votes)

    def count_for(self, classification: str) -> int:
        for v in self.votes:
            if v.classification == classification:
                return v.count
        return 0


def _field(row: Any, name: str):
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def with_percentages(shares: Iterable[VoteShare]) -> list[VoteShare]:
    """Recompute percentages over the shares' total and re-sort by count."""
    shares = list(shares)
    total = sum(s.count for s in shares)
    rebuilt = [
        replace(s, percentage=(s.count / total * 100) if total > 0 else 0.0)
        for s in shares
    ]
    # sorted() is stable, so ties keep their current order
    return sorted(rebuilt, key=lambda s: -s.count)


def count_classifications(classifications: Iterable[str]) -> list[VoteShare]:
    counts: dict[str, int] = {}
    for c in classifications:
        counts[c] = counts.get(c, 0) + 1
    return with_percentages(VoteShare(c, n) for c, n in counts.items())


def compute_tally(rows: Iterable[Any], user_id: Optional[str] = None) -> Tally:
    """Tally raw vote rows (ORM objects or dicts with ``classification`` and ``user_id``)."""
    rows = list(rows)
    user_vote = None
    if user_id is not None:
        for row in rows:
            if _field(row, "user_id") == user_id:
                user_vote = _field(row, "classification")
    return Tally(
        votes=count_classifications(_field(r, "classification") for r in rows),
        user_vote=user_vote,
    )


def tally_by_type(rows: Iterable[Any], characteristic_types: Sequence[str]) -> dict[str, list[VoteShare]]:
    grouped: dict[str, list[str]] = {t: [] for t in characteristic_types}
    for row in rows:
        ctype = _field(row, "characteristic_type")
        if ctype in grouped:
            grouped[ctype].append(_field(row, "classification"))
    return {t: count_classifications(grouped[t]) for t in characteristic_types}


def most_voted(rows: Iterable[Any]) -> Optional[str]:
    shares = compute_tally(rows).votes
    return shares[0].classification if shares else None


def apply_cast(tally: Tally, classification: str) -> Tally:
    # Casting is an upsert, so an existing vote gets replaced
    if tally.user_vote is not None:
        return apply_change(tally, classification)

    shares = list(tally.votes)
    for i, s in enumerate(shares):
        if s.classification == classification:
            shares[i] = replace(s, count=s.count + 1)
            break
    else:
        shares.append(VoteShare(classification, 1))

    return Tally(votes=with_percentages(shares), user_vote=classification)


def apply_change(tally: Tally, new_classification: str) -> Tally:
    if tally.user_vote == new_classification:
        return tally

    shares = list(tally.votes)
    if tally.user_vote is not None:
        for i, s in enumerate(shares):
            if s.classification == tally.user_vote:
                shares[i] = replace(s, count=max(0, s.count - 1))
                break

    for i, s in enumerate(shares):
        if s.classification == new_classification:
            shares[i] = replace(s, count=s.count + 1)
            break
    else:
        shares.append(VoteShare(new_classification, 1))

    shares = [s for s in shares if s.count > 0]
    return Tally(votes=with_percentages(shares), user_vote=new_classification)
