# phindex/deps/admin.py
from fastapi import Depends, HTTPException, status
from phindex.models.account_model import Account
from phindex.utils.token_utils import get_current_user


def is_admin(user: Account) -> bool:
    return (getattr(user, "role", "") or "").lower() == "admin"


def ensure_owner_or_admin(user: Account, owner_id) -> None:
    """Raise 403 unless ``user`` owns the resource or is an admin."""
    if not (is_admin(user) or owner_id == user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed"
        )


async def require_admin(user: Account = Depends(get_current_user)) -> Account:
    """
    Requires the authenticated user to have role=admin.
    Raises 403 if not an admin.
    """
    if not is_admin(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user
