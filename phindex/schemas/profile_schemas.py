from datetime import datetime
from fastapi import Form
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field, ValidationError, field_validator
from typing import Optional

from phindex.services.catalog import CATEGORIES


def _not_blank(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


def _check_category(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    # accept either the slug or the stored name
    name = CATEGORIES.get(v.strip().lower(), v.strip())
    if name not in CATEGORIES.values():
        raise ValueError(f"Unknown category: {v}")
    return name


class ProfileCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    category: str
    country: str = Field(min_length=1, max_length=80)
    ancestry: str = Field(min_length=1, max_length=200)
    gender: str = Field(min_length=1, max_length=20)
    height: int = Field(ge=50, le=272)
    is_anonymous: bool = False

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return _check_category(v)

    @field_validator("name", "country", "ancestry", "gender")
    @classmethod
    def strip_text(cls, v):
        return _not_blank(v)

    @classmethod
    def as_form(
            cls,
            name: str = Form(...),
            category: str = Form(...),
            country: str = Form(...),
            ancestry: str = Form(...),
            gender: str = Form(...),
            height: int = Form(...),
            is_anonymous: bool = Form(False),
    ) -> "ProfileCreate":
        try:
            return cls(
                name=name,
                category=category,
                country=country,
                ancestry=ancestry,
                gender=gender,
                height=height,
                is_anonymous=is_anonymous,
            )
        except ValidationError as e:
            # surface as 422 rather than a 500 from inside the dependency
            raise RequestValidationError(e.errors())


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    category: Optional[str] = None
    country: Optional[str] = None
    ancestry: Optional[str] = None
    gender: Optional[str] = None
    height: Optional[int] = Field(default=None, ge=50, le=272)
    is_anonymous: Optional[bool] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return _check_category(v)

    @field_validator("name", "country", "ancestry", "gender")
    @classmethod
    def strip_text(cls, v):
        return _not_blank(v)


class ProfileOut(BaseModel):
    id: int
    user_id: Optional[str] = None
    name: str
    slug: str
    category: str
    country: str
    ancestry: str
    gender: str
    height: int
    front_image_url: str
    profile_image_url: Optional[str] = None
    is_anonymous: bool
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }


class ProfileDetailOut(ProfileOut):
    unique_voters: int = 0
    creator_nickname: Optional[str] = None


class ProfileCreatorOut(BaseModel):
    profile_id: int
    user_id: Optional[str] = None
    nickname: Optional[str] = None
