from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from phindex.config import ALGORITHM, AUTH_TOKEN_URL, JWT_AUDIENCE, JWT_SECRET
from phindex.database import get_async_session
from phindex.models.account_model import Account
from phindex.utils.naming import generate_nickname

ACCESS_TOKEN_EXPIRE_MINUTES = 60  # matches the auth provider's default session

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=AUTH_TOKEN_URL)


def _get_secret_key() -> str:
    if not JWT_SECRET:
        # Fail fast with a clear message instead of a generic 500
        raise RuntimeError("JWT_SECRET is not configured in the backend environment")
    if len(JWT_SECRET) < 32:
        raise RuntimeError("JWT_SECRET is too short; use at least 32 characters")
    return JWT_SECRET


def create_access_token(user_id: str, email: Optional[str] = None, role: str = "authenticated") -> str:
    """Mint a token shaped like the auth provider's (used by scripts and tests)."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": user_id,
        "aud": JWT_AUDIENCE,
        "role": role,
        "exp": expire,
    }
    if email:
        to_encode["email"] = email
    try:
        return jwt.encode(to_encode, _get_secret_key(), algorithm=ALGORITHM)
    except JWTError as e:
        raise RuntimeError(f"JWT encode failed: {e}")


def decode_subject(token: str) -> tuple[Optional[str], dict]:
    """Return ``(user_id, claims)``; raises JWTError on a bad token."""
    payload = jwt.decode(token, _get_secret_key(), algorithms=[ALGORITHM], audience=JWT_AUDIENCE)
    return payload.get("sub"), payload


async def _load_or_provision(session: AsyncSession, user_id: str, claims: dict) -> Account:
    account = await session.get(Account, user_id)
    if account:
        return account

    # First request from this identity: mirror it locally
    account = Account(
        id=user_id,
        nickname=generate_nickname(),
        email=claims.get("email"),
        role="user",
    )
    session.add(account)
    await session.commit()
    await session.refresh(account)
    logger.info("Provisioned account {} as {}", user_id, account.nickname)
    return account


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_async_session)
) -> Account:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        user_id, claims = decode_subject(token)
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    return await _load_or_provision(session, user_id, claims)


async def get_current_user_optional(
    request: Request,
    session: AsyncSession = Depends(get_async_session),
) -> Optional[Account]:
    auth = request.headers.get("Authorization")
    if not auth or not auth.lower().startswith("bearer "):
        return None
    token = auth.split(" ", 1)[1].strip()
    try:
        user_id, claims = decode_subject(token)
    except JWTError:
        return None
    if user_id is None:
        return None

    return await _load_or_provision(session, user_id, claims)
