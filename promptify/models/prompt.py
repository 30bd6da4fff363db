"""Marketplace prompt with version history and reviews."""

import re
import time
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import JSON, String, Text
from sqlmodel import Column, Field, Relationship

from promptify.models.base import (
    BaseModel,
    Difficulty,
    PromptCategory,
    PromptStatus,
    PromptType,
    Visibility,
)

if TYPE_CHECKING:
    from promptify.models.user import User


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", title.lower()).strip()
    slug = re.sub(r"\s+", "-", slug)
    return f"{slug}-{int(time.time() * 1000)}"


class Prompt(BaseModel, table=True):
    __tablename__ = "prompts"

    title: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=10, max_length=500)
    content: str = Field(sa_column=Column(Text, nullable=False))
    category: PromptCategory = Field(sa_type=String(20), index=True)
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    author_id: UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")

    type: PromptType = Field(default=PromptType.FREE, sa_type=String(10), nullable=False)
    price: float = Field(default=0.0, ge=0)
    status: PromptStatus = Field(
        default=PromptStatus.DRAFT, sa_type=String(20), nullable=False, index=True
    )
    visibility: Visibility = Field(default=Visibility.PUBLIC, sa_type=String(10), nullable=False)

    # analytics
    views: int = Field(default=0, nullable=False)
    downloads: int = Field(default=0, nullable=False)
    likes: int = Field(default=0, nullable=False)
    revenue: float = Field(default=0.0, nullable=False)
    rating_average: float = Field(default=0.0, nullable=False)
    rating_count: int = Field(default=0, nullable=False)

    # metadata
    slug: str | None = Field(default=None, unique=True, max_length=200)
    featured: bool = Field(default=False)
    trending: bool = Field(default=False)
    difficulty: Difficulty = Field(
        default=Difficulty.BEGINNER, sa_type=String(20), nullable=False
    )
    estimated_time: str | None = Field(default=None, max_length=50)
    language: str = Field(default="en", max_length=10)

    # moderation
    reviewed_by_id: UUID | None = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    reviewed_at: datetime | None = Field(default=None)
    admin_notes: str | None = Field(default=None, sa_column=Column(Text))
    rejection_reason: str | None = Field(default=None, sa_column=Column(Text))
    is_admin_created: bool = Field(default=False)

    author: "User" = Relationship(
        back_populates="prompts",
        sa_relationship_kwargs={"foreign_keys": "[Prompt.author_id]"},
    )
    versions: list["PromptVersion"] = Relationship(
        back_populates="prompt", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
    reviews: list["PromptReview"] = Relationship(
        back_populates="prompt", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )

    @property
    def is_public_listing(self) -> bool:
        return self.status == PromptStatus.PUBLISHED and self.visibility == Visibility.PUBLIC

    @property
    def average_rating(self) -> float:
        if not self.reviews:
            return 0
        total = sum(review.rating for review in self.reviews)
        return round(total / len(self.reviews), 1)

    def ensure_slug(self) -> None:
        if not self.slug:
            self.slug = slugify(self.title)

    def increment_views(self) -> None:
        self.views += 1

    def increment_downloads(self) -> None:
        self.downloads += 1

    def add_like(self) -> None:
        self.likes += 1

    def remove_like(self) -> None:
        self.likes = max(0, self.likes - 1)

    def refresh_rating(self) -> None:
        self.rating_average = self.average_rating
        self.rating_count = len(self.reviews)


class PromptVersion(BaseModel, table=True):
    __tablename__ = "prompt_versions"

    prompt_id: UUID = Field(foreign_key="prompts.id", index=True, ondelete="CASCADE")
    version: str = Field(max_length=20)
    content: str = Field(sa_column=Column(Text, nullable=False))
    changelog: str | None = Field(default=None, sa_column=Column(Text))

    prompt: Prompt = Relationship(back_populates="versions")


class PromptReview(BaseModel, table=True):
    __tablename__ = "prompt_reviews"

    prompt_id: UUID = Field(foreign_key="prompts.id", index=True, ondelete="CASCADE")
    user_id: UUID = Field(foreign_key="users.id", ondelete="CASCADE")
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=500)

    prompt: Prompt = Relationship(back_populates="reviews")
