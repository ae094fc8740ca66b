import random
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from phindex.database import get_async_session
from phindex.models.account_model import Account
from phindex.models.game_result_model import GameResult
from phindex.models.profile_model import PersonProfile
from phindex.schemas.game_schemas import (
    AnswerIn,
    AnswerOut,
    Difficulty,
    GameProfileOut,
    GameResultIn,
    GameResultOut,
    GameRoundOut,
    GameStatsOut,
    LeaderboardEntryOut,
)
from phindex.services.catalog import GEOGRAPHIC_TYPES
from phindex.services.game import PROFILE_POOL_SIZE, aggregate_results, build_leaderboard, questions_for
from phindex.services.regions import check_answer
from phindex.services.vote_queries import most_voted_by_profile
from phindex.utils.token_utils import get_current_user

router = APIRouter(tags=["game"])

PRIMARY_GEOGRAPHIC = GEOGRAPHIC_TYPES[0]


@router.get("/game/round", response_model=GameRoundOut)
async def new_round(
    difficulty: Difficulty = Query("medium"),
    session: AsyncSession = Depends(get_async_session),
):
    result = await session.execute(select(PersonProfile).limit(PROFILE_POOL_SIZE))
    pool = list(result.scalars().all())
    if not pool:
        raise HTTPException(status_code=404, detail="There are no profiles to play with yet.")

    selected = random.sample(pool, min(questions_for(difficulty), len(pool)))
    top = await most_voted_by_profile(session, [p.id for p in selected], PRIMARY_GEOGRAPHIC)

    # profiles without votes stay in the round
    return GameRoundOut(
        difficulty=difficulty,
        profiles=[
            GameProfileOut(
                id=p.id,
                name=p.name,
                slug=p.slug,
                front_image_url=p.front_image_url,
                profile_image_url=p.profile_image_url,
                most_voted_phenotype=top.get(p.id),
            )
            for p in selected
        ],
    )


@router.post("/game/answer", response_model=AnswerOut)
async def answer(
    payload: AnswerIn,
    session: AsyncSession = Depends(get_async_session),
):
    if not await session.get(PersonProfile, payload.profile_id):
        raise HTTPException(status_code=404, detail="Profile not found")

    top = await most_voted_by_profile(session, [payload.profile_id], PRIMARY_GEOGRAPHIC)
    correct, correct_region = check_answer(payload.region, top.get(payload.profile_id))
    return AnswerOut(correct=correct, correct_region=correct_region)


@router.post("/game/results", response_model=GameResultOut, status_code=201)
async def save_result(
    payload: GameResultIn,
    user: Account = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
):
    result = GameResult(
        user_id=user.id,
        score=payload.score,
        total_questions=payload.total_questions,
        difficulty=payload.difficulty,
    )
    session.add(result)
    await session.commit()
    await session.refresh(result)
    logger.info("Game result saved: user={} {}/{} ({})", user.id, result.score, result.total_questions, result.difficulty)
    return result


@router.get("/game/stats", response_model=GameStatsOut)
async def my_stats(
    user: Account = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
):
    result = await session.execute(
        select(GameResult.user_id, GameResult.score, GameResult.total_questions)
        .where(GameResult.user_id == user.id)
    )
    stats = aggregate_results(result.mappings().all()).get(user.id)
    if not stats:
        return GameStatsOut()

    return GameStatsOut(
        total_games=stats.total_games,
        total_correct=stats.total_correct,
        total_questions=stats.total_questions,
        accuracy_percentage=stats.accuracy_percentage,
    )


@router.get("/leaderboard", response_model=List[LeaderboardEntryOut])
async def leaderboard(
    limit: int = Query(100, ge=1, le=500),
    session: AsyncSession = Depends(get_async_session),
):
    result = await session.execute(
        select(GameResult.user_id, GameResult.score, GameResult.total_questions).order_by(GameResult.id)
    )
    rows = result.mappings().all()

    user_ids = {r["user_id"] for r in rows}
    nicknames = {}
    if user_ids:
        accounts = await session.execute(select(Account.id, Account.nickname).where(Account.id.in_(user_ids)))
        nicknames = {uid: nick for uid, nick in accounts.all()}

    return build_leaderboard(rows, nicknames)[:limit]
