from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import field_validator, model_validator
from sqlmodel import Field, SQLModel

from promptify.models import (
    Difficulty,
    Prompt,
    PromptCategory,
    PromptStatus,
    PromptType,
    Visibility,
    as_utc,
)


def _split_tags(v: Any) -> Any:
    if isinstance(v, str):
        return [tag.strip() for tag in v.split(",") if tag.strip()]
    return v


def _check_tags(v: Optional[list[str]]) -> Optional[list[str]]:
    if v is None:
        return v
    cleaned = [tag.strip() for tag in v if tag and tag.strip()]
    for tag in cleaned:
        if len(tag) > 30:
            raise ValueError("Each tag cannot exceed 30 characters")
    return cleaned


class PromptCreate(SQLModel):
    title: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=10, max_length=500)
    content: str = Field(min_length=10, max_length=5000)
    category: PromptCategory
    tags: list[str] = Field(default_factory=list)
    is_paid: bool = False
    price: float = 0
    difficulty: Difficulty = Difficulty.BEGINNER
    estimated_time: Optional[str] = Field(default=None, max_length=50)
    visibility: Visibility = Visibility.PUBLIC

    @field_validator("title", "description", "content", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        return _split_tags(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return _check_tags(v)

    @model_validator(mode="after")
    def validate_price(self):
        if self.is_paid and self.price < 0.01:
            raise ValueError("Price must be at least 0.01 for paid prompts")
        return self

    @property
    def effective_type(self) -> PromptType:
        return PromptType.PREMIUM if self.is_paid else PromptType.FREE

    @property
    def effective_price(self) -> float:
        return self.price if self.is_paid else 0


class AdminPromptCreate(PromptCreate):
    status: PromptStatus = PromptStatus.PUBLISHED
    featured: bool = False
    trending: bool = False


class PromptUpdate(SQLModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, min_length=10, max_length=500)
    content: Optional[str] = Field(default=None, min_length=10, max_length=5000)
    category: Optional[PromptCategory] = None
    tags: Optional[list[str]] = None
    is_paid: Optional[bool] = None
    price: Optional[float] = Field(default=None, ge=0)
    difficulty: Optional[Difficulty] = None
    estimated_time: Optional[str] = Field(default=None, max_length=50)
    visibility: Optional[Visibility] = None
    changelog: Optional[str] = Field(default=None, max_length=500)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        return _split_tags(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _check_tags(v)


class PromptModeration(SQLModel):
    status: Optional[PromptStatus] = None
    featured: Optional[bool] = None
    trending: Optional[bool] = None
    rejection_reason: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)


class ReviewCreate(SQLModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=500)


class AuthorSummary(SQLModel):
    id: UUID
    name: str
    avatar: Optional[str] = None


class PromptAnalytics(SQLModel):
    views: int
    downloads: int
    likes: int
    revenue: float
    rating_average: float
    rating_count: int


class PromptVersionPublic(SQLModel):
    version: str
    changelog: Optional[str] = None
    created_at: datetime


class PromptReviewPublic(SQLModel):
    user_id: UUID
    rating: int
    comment: Optional[str] = None
    created_at: datetime


class PromptPublic(SQLModel):
    id: UUID
    title: str
    description: str
    content: Optional[str] = None
    category: PromptCategory
    tags: list[str]
    author: Optional[AuthorSummary] = None
    type: PromptType
    price: float
    status: PromptStatus
    visibility: Visibility
    analytics: PromptAnalytics
    slug: Optional[str] = None
    featured: bool
    trending: bool
    difficulty: Difficulty
    estimated_time: Optional[str] = None
    language: str
    is_admin_created: bool
    rejection_reason: Optional[str] = None
    versions: Optional[list[PromptVersionPublic]] = None
    reviews: Optional[list[PromptReviewPublic]] = None
    created_at: datetime
    updated_at: datetime


def prompt_to_public(
    prompt: Prompt, include_content: bool = True, include_children: bool = False
) -> PromptPublic:
    author = None
    if prompt.author is not None:
        author = AuthorSummary(id=prompt.author.id, name=prompt.author.name, avatar=prompt.author.avatar)
    versions = reviews = None
    if include_children:
        versions = [
            PromptVersionPublic(version=v.version, changelog=v.changelog, created_at=as_utc(v.created_at))
            for v in prompt.versions
        ]
        reviews = [
            PromptReviewPublic(
                user_id=r.user_id, rating=r.rating, comment=r.comment, created_at=as_utc(r.created_at)
            )
            for r in prompt.reviews
        ]
    return PromptPublic(
        id=prompt.id,
        title=prompt.title,
        description=prompt.description,
        content=prompt.content if include_content else None,
        category=prompt.category,
        tags=list(prompt.tags or []),
        author=author,
        type=prompt.type,
        price=prompt.price,
        status=prompt.status,
        visibility=prompt.visibility,
        analytics=PromptAnalytics(
            views=prompt.views,
            downloads=prompt.downloads,
            likes=prompt.likes,
            revenue=prompt.revenue,
            rating_average=prompt.rating_average,
            rating_count=prompt.rating_count,
        ),
        slug=prompt.slug,
        featured=prompt.featured,
        trending=prompt.trending,
        difficulty=prompt.difficulty,
        estimated_time=prompt.estimated_time,
        language=prompt.language,
        is_admin_created=prompt.is_admin_created,
        rejection_reason=prompt.rejection_reason,
        versions=versions,
        reviews=reviews,
        created_at=as_utc(prompt.created_at),
        updated_at=as_utc(prompt.updated_at),
    )
