from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class CommentAuthorOut(BaseModel):
    id: str
    nickname: Optional[str] = None


class CommentOut(BaseModel):
    id: int
    profile_id: int
    content: str
    created_at: datetime
    likes_count: int = 0
    parent_comment_id: Optional[int] = None
    user: CommentAuthorOut
    user_votes: Dict[str, str] = Field(default_factory=dict)
    is_liked: bool = False
    replies: List[CommentOut] = Field(default_factory=list)


class CreateCommentIn(BaseModel):
    content: str = Field(min_length=1, max_length=2000)
    parent_comment_id: Optional[int] = None


class LikeToggleOut(BaseModel):
    liked: bool
    count: int


class NotificationOut(BaseModel):
    id: int
    type: str
    message: str
    profile_id: Optional[int] = None
    comment_id: Optional[int] = None
    is_read: bool
    created_at: datetime

    model_config = {
        "from_attributes": True
    }
