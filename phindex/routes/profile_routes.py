from typing import List, Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, Response, UploadFile
from loguru import logger
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from phindex.config import PROFILE_UPLOAD_RATE
from phindex.database import get_async_session
from phindex.deps.admin import ensure_owner_or_admin
from phindex.limiter import limiter
from phindex.models.account_model import Account
from phindex.models.comment_model import Comment, CommentLike, Notification
from phindex.models.profile_model import PersonProfile
from phindex.models.vote_model import Vote
from phindex.s3 import delete_from_s3, extract_s3_key, upload_profile_image
from phindex.schemas.profile_schemas import (
    ProfileCreate,
    ProfileCreatorOut,
    ProfileDetailOut,
    ProfileOut,
    ProfileUpdate,
)
from phindex.services.catalog import GEOGRAPHIC_TYPES, category_name
from phindex.services.regions import region_for, region_from_slug
from phindex.services.vote_queries import count_unique_voters, most_voted_by_profile
from phindex.utils.images import validate_profile_image
from phindex.utils.naming import generate_unique_slug
from phindex.utils.token_utils import get_current_user

router = APIRouter(prefix="/profiles", tags=["profiles"])

PRIMARY_GEOGRAPHIC = GEOGRAPHIC_TYPES[0]


async def _read_image(file: UploadFile) -> bytes:
    blob = await file.read()
    validate_profile_image(blob, file.content_type)
    return blob


def _delete_images(urls) -> None:
    for url in urls:
        if not url:
            continue
        try:
            delete_from_s3(extract_s3_key(url))
        except (BotoCoreError, ClientError) as e:
            logger.warning("Failed to delete image from S3 ({}): {!r}", url, e)


@router.post("/", response_model=ProfileOut, status_code=201)
@limiter.limit(PROFILE_UPLOAD_RATE)
async def create_profile(
    request: Request,
    profile: ProfileCreate = Depends(ProfileCreate.as_form),
    front_image: UploadFile = File(...),
    profile_image: Optional[UploadFile] = File(None),
    user: Account = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
):
    # a rollback expires the account, so keep its id
    user_id = user.id

    front_blob = await _read_image(front_image)
    side_blob = await _read_image(profile_image) if profile_image else None

    # a concurrent create can take the slug between lookup and commit; retry once
    for attempt in range(2):
        slug = await generate_unique_slug(session, profile.name)
        front_url = upload_profile_image(
            front_blob, front_image.filename or "upload", front_image.content_type, slug, kind="front"
        )
        side_url = None
        if side_blob is not None:
            side_url = upload_profile_image(
                side_blob, profile_image.filename or "upload", profile_image.content_type, slug, kind="profile"
            )

        new_profile = PersonProfile(
            user_id=user_id,
            name=profile.name,
            slug=slug,
            category=profile.category,
            country=profile.country,
            ancestry=profile.ancestry,
            gender=profile.gender,
            height=profile.height,
            front_image_url=front_url,
            profile_image_url=side_url,
            is_anonymous=profile.is_anonymous,
        )
        session.add(new_profile)
        try:
            await session.commit()
            break
        except IntegrityError:
            await session.rollback()
            _delete_images((front_url, side_url))
            if attempt:
                raise HTTPException(status_code=409, detail="Profile could not be saved, please try again")
            logger.info("Slug {} was taken concurrently, retrying", slug)

    await session.refresh(new_profile)
    logger.info("Profile created: {} ({}) by {}", new_profile.slug, new_profile.id, user_id)
    return new_profile


@router.get("/", response_model=List[ProfileOut])
async def list_profiles(
    category: Optional[str] = Query(None, description="Category slug, e.g. pop-culture"),
    limit: int = Query(24, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_async_session),
):
    stmt = select(PersonProfile)
    if category:
        name = category_name(category)
        if not name:
            raise HTTPException(status_code=404, detail="Category not found")
        stmt = stmt.where(PersonProfile.category == name)

    stmt = stmt.order_by(PersonProfile.created_at.desc(), PersonProfile.id.desc()).offset(offset).limit(limit)
    result = await session.execute(stmt)
    return result.scalars().all()


@router.get("/search", response_model=List[ProfileOut])
async def search_profiles(
    query: str = Query(..., min_length=1, description="Search keyword"),
    limit: int = Query(24, ge=1, le=100),
    session: AsyncSession = Depends(get_async_session),
):
    pattern = f"%{query.strip()}%"
    result = await session.execute(
        select(PersonProfile)
        .where(
            or_(
                PersonProfile.name.ilike(pattern),
                PersonProfile.country.ilike(pattern),
                PersonProfile.category.ilike(pattern),
            )
        )
        .order_by(PersonProfile.created_at.desc(), PersonProfile.id.desc())
        .limit(limit)
    )
    return result.scalars().all()


@router.get("/region/{region_slug}", response_model=List[ProfileOut])
async def list_region_profiles(
    region_slug: str,
    session: AsyncSession = Depends(get_async_session),
):
    region = region_from_slug(region_slug)
    if not region:
        raise HTTPException(status_code=404, detail="Region not found")

    result = await session.execute(
        select(PersonProfile).order_by(PersonProfile.created_at.desc(), PersonProfile.id.desc())
    )
    profiles = result.scalars().all()

    top = await most_voted_by_profile(session, [p.id for p in profiles], PRIMARY_GEOGRAPHIC)
    return [p for p in profiles if region_for(top.get(p.id)) == region]


@router.get("/{slug}", response_model=ProfileDetailOut)
async def get_profile(
    slug: str,
    session: AsyncSession = Depends(get_async_session),
):
    profile = await session.scalar(select(PersonProfile).where(PersonProfile.slug == slug))
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    creator = await session.get(Account, profile.user_id) if profile.user_id else None

    out = ProfileDetailOut.model_validate(profile)
    out.unique_voters = await count_unique_voters(session, profile.id)
    out.creator_nickname = getattr(creator, "nickname", None)
    return out


@router.get("/{profile_id}/creator", response_model=ProfileCreatorOut)
async def get_profile_creator(
    profile_id: int,
    session: AsyncSession = Depends(get_async_session),
):
    profile = await session.get(PersonProfile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    creator = await session.get(Account, profile.user_id) if profile.user_id else None
    return ProfileCreatorOut(
        profile_id=profile.id,
        user_id=profile.user_id,
        nickname=getattr(creator, "nickname", None),
    )


@router.patch("/{profile_id}", response_model=ProfileOut)
async def update_profile(
    profile_id: int,
    payload: ProfileUpdate,
    user: Account = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
):
    profile = await session.get(PersonProfile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    ensure_owner_or_admin(user, profile.user_id)

    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        setattr(profile, field, value.strip() if isinstance(value, str) else value)

    await session.commit()
    await session.refresh(profile)
    return profile


@router.delete("/{profile_id}", status_code=204)
async def delete_profile(
    profile_id: int,
    user: Account = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
):
    profile = await session.get(PersonProfile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    ensure_owner_or_admin(user, profile.user_id)

    _delete_images((profile.front_image_url, profile.profile_image_url))

    # explicit so SQLite (no FK enforcement by default) cleans up too
    comment_ids = select(Comment.id).where(Comment.profile_id == profile_id)
    await session.execute(delete(CommentLike).where(CommentLike.comment_id.in_(comment_ids)))
    await session.execute(delete(Notification).where(Notification.profile_id == profile_id))
    await session.execute(delete(Comment).where(Comment.profile_id == profile_id))
    await session.execute(delete(Vote).where(Vote.profile_id == profile_id))

    await session.delete(profile)
    await session.commit()
    logger.info("Profile {} deleted by {}", profile_id, user.id)
    return Response(status_code=204)
