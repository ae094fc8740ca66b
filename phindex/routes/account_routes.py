from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from phindex.database import get_async_session
from phindex.deps.admin import require_admin
from phindex.models.account_model import Account
from phindex.moderation.profanity import ensure_clean
from phindex.schemas.account_schemas import AccountOut, AccountUpdate, RoleUpdate
from phindex.utils.token_utils import get_current_user

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("/me", response_model=AccountOut)
async def read_me(user: Account = Depends(get_current_user)):
    return user


@router.patch("/me", response_model=AccountOut)
async def update_me(
    payload: AccountUpdate,
    user: Account = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
):
    data = payload.model_dump(exclude_unset=True)

    nickname = (data.pop("nickname", None) or "").strip()
    if nickname and nickname != user.nickname:
        try:
            ensure_clean(nickname, "Nickname")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        taken = await session.scalar(
            select(Account.id).where(func.lower(Account.nickname) == nickname.lower(), Account.id != user.id)
        )
        if taken:
            raise HTTPException(status_code=409, detail="Nickname already taken")
        user.nickname = nickname

    for field, value in data.items():
        setattr(user, field, value)

    await session.commit()
    await session.refresh(user)
    return user


@router.patch("/{account_id}/role", response_model=AccountOut)
async def set_role(
    account_id: str,
    payload: RoleUpdate,
    admin: Account = Depends(require_admin),
    session: AsyncSession = Depends(get_async_session),
):
    account = await session.get(Account, account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")

    account.role = payload.role
    await session.commit()
    await session.refresh(account)
    logger.info("Role of {} set to {} by {}", account_id, payload.role, admin.id)
    return account
