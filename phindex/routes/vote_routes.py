from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from phindex.config import VOTE_RATE
from phindex.database import get_async_session
from phindex.limiter import limiter
from phindex.models.account_model import Account
from phindex.models.profile_model import PersonProfile
from phindex.schemas.vote_schemas import (
    GeographicVotesOut,
    PhysicalCharacteristicOut,
    PhysicalOptionOut,
    PhysicalVotesOut,
    TallyOut,
    VoteIn,
    VoterCountOut,
    VoteShareOut,
)
from phindex.services.catalog import (
    CHARACTERISTIC_TYPES,
    GEOGRAPHIC_TYPES,
    PHENOTYPE,
    PHENOTYPE_TYPES,
    PHYSICAL_TYPES,
    is_known_characteristic,
)
from phindex.services.tally import Tally, tally_by_type
from phindex.services.vote_queries import (
    count_unique_voters,
    fetch_vote_rows,
    find_user_vote,
    tally_for,
    upsert_vote,
)
from phindex.utils.token_utils import get_current_user, get_current_user_optional

router = APIRouter(prefix="/votes", tags=["votes"])


async def _get_profile_or_404(session: AsyncSession, profile_id: int) -> PersonProfile:
    profile = await session.get(PersonProfile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


def _check_characteristic(characteristic_type: str) -> None:
    if not is_known_characteristic(characteristic_type):
        raise HTTPException(status_code=400, detail=f"Unknown characteristic type: {characteristic_type}")


def _tally_out(profile_id: int, characteristic_type: str, tally: Tally) -> TallyOut:
    return TallyOut(
        profile_id=profile_id,
        characteristic_type=characteristic_type,
        votes=[VoteShareOut.model_validate(v) for v in tally.votes],
        user_vote=tally.user_vote,
        total=tally.total,
    )


def _clean_vote(payload: VoteIn) -> tuple[str, str]:
    _check_characteristic(payload.characteristic_type)
    classification = payload.classification.strip()
    if not classification:
        raise HTTPException(status_code=400, detail="Classification is required")
    return payload.characteristic_type, classification


@router.get("/{profile_id}", response_model=TallyOut)
async def get_tally(
    profile_id: int,
    characteristic_type: str = Query(PHENOTYPE),
    user: Optional[Account] = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_async_session),
):
    _check_characteristic(characteristic_type)
    await _get_profile_or_404(session, profile_id)

    tally = await tally_for(session, profile_id, characteristic_type, getattr(user, "id", None))
    return _tally_out(profile_id, characteristic_type, tally)


@router.put("/{profile_id}", response_model=TallyOut)
@limiter.limit(VOTE_RATE)
async def cast_vote(
    request: Request,
    profile_id: int,
    payload: VoteIn,
    user: Account = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
):
    characteristic_type, classification = _clean_vote(payload)
    await _get_profile_or_404(session, profile_id)

    await upsert_vote(session, user.id, profile_id, characteristic_type, classification)
    logger.info("Vote cast: user={} profile={} {}={}", user.id, profile_id, characteristic_type, classification)

    tally = await tally_for(session, profile_id, characteristic_type, user.id)
    return _tally_out(profile_id, characteristic_type, tally)


@router.patch("/{profile_id}", response_model=TallyOut)
@limiter.limit(VOTE_RATE)
async def change_vote(
    request: Request,
    profile_id: int,
    payload: VoteIn,
    user: Account = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
):
    characteristic_type, classification = _clean_vote(payload)
    await _get_profile_or_404(session, profile_id)

    vote = await find_user_vote(session, user.id, profile_id, characteristic_type)
    if not vote:
        raise HTTPException(status_code=404, detail="You have not voted on this characteristic yet")

    previous = vote.classification
    vote.classification = classification
    await session.commit()
    logger.info(
        "Vote changed: user={} profile={} {}: {} -> {}",
        user.id, profile_id, characteristic_type, previous, classification,
    )

    tally = await tally_for(session, profile_id, characteristic_type, user.id)
    return _tally_out(profile_id, characteristic_type, tally)


@router.get("/{profile_id}/geographic", response_model=GeographicVotesOut)
async def get_geographic_votes(
    profile_id: int,
    session: AsyncSession = Depends(get_async_session),
):
    await _get_profile_or_404(session, profile_id)

    rows = await fetch_vote_rows(session, profile_id, GEOGRAPHIC_TYPES + PHENOTYPE_TYPES)
    geographic = tally_by_type(rows, GEOGRAPHIC_TYPES)
    phenotype = tally_by_type(rows, PHENOTYPE_TYPES)

    return GeographicVotesOut(
        profile_id=profile_id,
        geographic_votes={
            t: [VoteShareOut.model_validate(v) for v in shares] for t, shares in geographic.items()
        },
        phenotype_votes={
            t: [VoteShareOut.model_validate(v) for v in shares] for t, shares in phenotype.items()
        },
    )


@router.get("/{profile_id}/physical", response_model=PhysicalVotesOut)
async def get_physical_votes(
    profile_id: int,
    user: Optional[Account] = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_async_session),
):
    await _get_profile_or_404(session, profile_id)

    rows = await fetch_vote_rows(session, profile_id, PHYSICAL_TYPES)
    logger.debug("Found {} physical votes for profile {}", len(rows), profile_id)

    characteristics = [
        PhysicalCharacteristicOut(
            name=name,
            votes=[
                PhysicalOptionOut(option=v.classification, count=v.count, percentage=v.percentage)
                for v in shares
            ],
        )
        for name, shares in tally_by_type(rows, PHYSICAL_TYPES).items()
    ]

    user_votes = {}
    if user:
        user_votes = {
            row["characteristic_type"]: row["classification"]
            for row in rows
            if row["user_id"] == user.id
        }

    return PhysicalVotesOut(characteristics=characteristics, user_votes=user_votes)


@router.get("/{profile_id}/mine", response_model=dict)
async def get_my_votes(
    profile_id: int,
    user: Account = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
):
    await _get_profile_or_404(session, profile_id)

    rows = await fetch_vote_rows(session, profile_id, sorted(CHARACTERISTIC_TYPES))
    return {
        row["characteristic_type"]: row["classification"]
        for row in rows
        if row["user_id"] == user.id
    }


@router.get("/{profile_id}/voters", response_model=VoterCountOut)
async def get_unique_voters(
    profile_id: int,
    session: AsyncSession = Depends(get_async_session),
):
    await _get_profile_or_404(session, profile_id)
    return VoterCountOut(profile_id=profile_id, unique_voters=await count_unique_voters(session, profile_id))
