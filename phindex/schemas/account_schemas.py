from pydantic import BaseModel, Field
from typing import Literal, Optional


class AccountOut(BaseModel):
    id: str
    nickname: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str

    model_config = {
        "from_attributes": True
    }


class AccountUpdate(BaseModel):
    nickname: Optional[str] = Field(default=None, min_length=3, max_length=32)
    name: Optional[str] = Field(default=None, max_length=120)
    avatar_url: Optional[str] = None


class RoleUpdate(BaseModel):
    role: Literal["user", "admin"]
