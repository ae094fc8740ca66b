from typing import Iterable, Optional, Sequence

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from phindex.models.vote_model import Vote
from phindex.services.tally import compute_tally, most_voted


async def fetch_vote_rows(session: AsyncSession, profile_id: int, characteristic_types: Sequence[str]):
    # ordered by id so tallies break ties by first cast
    result = await session.execute(
        select(Vote.user_id, Vote.characteristic_type, Vote.classification)
        .where(Vote.profile_id == profile_id, Vote.characteristic_type.in_(characteristic_types))
        .order_by(Vote.id)
    )
    return result.mappings().all()


async def tally_for(session: AsyncSession, profile_id: int, characteristic_type: str, user_id: Optional[str] = None):
    rows = await fetch_vote_rows(session, profile_id, [characteristic_type])
    return compute_tally(rows, user_id)


async def find_user_vote(session: AsyncSession, user_id: str, profile_id: int, characteristic_type: str) -> Optional[Vote]:
    return await session.scalar(
        select(Vote).where(
            Vote.user_id == user_id,
            Vote.profile_id == profile_id,
            Vote.characteristic_type == characteristic_type,
        )
    )


async def upsert_vote(session: AsyncSession, user_id: str, profile_id: int, characteristic_type: str, classification: str) -> Vote:
    """Insert the user's vote, or overwrite the classification of the one they hold."""
    existing = await find_user_vote(session, user_id, profile_id, characteristic_type)
    if existing:
        existing.classification = classification
        await session.commit()
        return existing

    vote = Vote(
        user_id=user_id,
        profile_id=profile_id,
        characteristic_type=characteristic_type,
        classification=classification,
    )
    session.add(vote)
    try:
        await session.commit()
    except IntegrityError:
        # a concurrent request inserted first; fall back to updating that row
        await session.rollback()
        logger.debug("Vote insert raced for {}/{}/{}, updating", user_id, profile_id, characteristic_type)
        existing = await find_user_vote(session, user_id, profile_id, characteristic_type)
        if existing is None:
            raise
        existing.classification = classification
        await session.commit()
        return existing
    return vote


async def count_unique_voters(session: AsyncSession, profile_id: int) -> int:
    result = await session.execute(
        select(func.count(func.distinct(Vote.user_id))).where(Vote.profile_id == profile_id)
    )
    return int(result.scalar_one() or 0)


async def most_voted_by_profile(session: AsyncSession, profile_ids: Iterable[int], characteristic_type: str) -> dict[int, Optional[str]]:
    """Most-voted classification of one characteristic for several profiles in a single query."""
    ids = list(profile_ids)
    grouped: dict[int, list] = {pid: [] for pid in ids}
    if not ids:
        return {}

    result = await session.execute(
        select(Vote.profile_id, Vote.classification)
        .where(Vote.profile_id.in_(ids), Vote.characteristic_type == characteristic_type)
        .order_by(Vote.id)
    )
    for row in result.mappings().all():
        grouped[row["profile_id"]].append(row)

    return {pid: most_voted(rows) for pid, rows in grouped.items()}
