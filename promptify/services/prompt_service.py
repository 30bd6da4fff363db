"""Prompt Service - marketplace listing, authoring and moderation."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import String, cast
from sqlmodel import Session, and_, col, func, or_, select

from promptify.core.errors import AuthorizationError, NotFoundError, ValidationError
from promptify.models import (
    Prompt,
    PromptCategory,
    PromptReview,
    PromptStatus,
    PromptType,
    PromptVersion,
    Role,
    User,
    Visibility,
    utc_now,
)
from promptify.schemas import AdminPromptCreate, PromptCreate, PromptModeration, PromptUpdate

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("latest", "popular", "rating", "price_low", "price_high")


def _next_version(versions: list[PromptVersion]) -> str:
    if not versions:
        return "1.0"
    latest = versions[-1].version
    try:
        major, minor = latest.split(".", 1)
        return f"{major}.{int(minor) + 1}"
    except ValueError:
        return f"{len(versions) + 1}.0"


class PromptService:
    """Service for prompt management."""

    def __init__(self, session: Session):
        self.session = session

    def _filters(
        self,
        category: Optional[PromptCategory] = None,
        search: Optional[str] = None,
        prompt_type: Optional[str] = None,
        status: Optional[PromptStatus] = None,
        author_id: Optional[UUID] = None,
    ) -> list:
        conditions = []
        if category:
            conditions.append(Prompt.category == category)
        if search:
            search_term = f"%{search}%"
            conditions.append(
                or_(
                    col(Prompt.title).ilike(search_term),
                    col(Prompt.description).ilike(search_term),
                    cast(Prompt.tags, String).ilike(search_term),
                )
            )
        if prompt_type and prompt_type != "all":
            conditions.append(Prompt.type == PromptType(prompt_type))
        if status:
            conditions.append(Prompt.status == status)
        if author_id:
            conditions.append(Prompt.author_id == author_id)
        return conditions

    def _page(self, conditions: list, order_by: list, skip: int, limit: int) -> tuple[list[Prompt], int]:
        count_statement = select(func.count(Prompt.id))
        statement = select(Prompt)
        if conditions:
            count_statement = count_statement.where(and_(*conditions))
            statement = statement.where(and_(*conditions))
        total_count = self.session.exec(count_statement).one()
        statement = statement.order_by(*order_by).offset(skip).limit(limit)
        return list(self.session.exec(statement).all()), total_count

    def list_marketplace(
        self,
        skip: int = 0,
        limit: int = 12,
        category: Optional[PromptCategory] = None,
        search: Optional[str] = None,
        prompt_type: str = "all",
        sort: str = "latest",
    ) -> tuple[list[Prompt], int]:
        """Published public prompts; every returned prompt counts one view."""
        conditions = [
            Prompt.status == PromptStatus.PUBLISHED,
            Prompt.visibility == Visibility.PUBLIC,
            *self._filters(category=category, search=search, prompt_type=prompt_type),
        ]
        order_by = {
            "popular": [col(Prompt.downloads).desc(), col(Prompt.views).desc()],
            "rating": [col(Prompt.rating_average).desc(), col(Prompt.rating_count).desc()],
            "price_low": [col(Prompt.price).asc()],
            "price_high": [col(Prompt.price).desc()],
        }.get(sort, [col(Prompt.created_at).desc()])

        prompts, total_count = self._page(conditions, order_by, skip, limit)
        for prompt in prompts:
            prompt.increment_views()
            self.session.add(prompt)
        if prompts:
            self.session.commit()
            for prompt in prompts:
                self.session.refresh(prompt)
        return prompts, total_count

    def list_for_author(
        self,
        author_id: UUID,
        skip: int = 0,
        limit: int = 10,
        status: Optional[PromptStatus] = None,
        category: Optional[PromptCategory] = None,
    ) -> tuple[list[Prompt], int]:
        conditions = self._filters(category=category, status=status, author_id=author_id)
        return self._page(conditions, [col(Prompt.created_at).desc()], skip, limit)

    def list_admin(
        self,
        skip: int = 0,
        limit: int = 20,
        status: Optional[PromptStatus] = None,
        category: Optional[PromptCategory] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Prompt], int]:
        conditions = self._filters(category=category, search=search, status=status)
        return self._page(conditions, [col(Prompt.created_at).desc()], skip, limit)

    def get_by_id(self, prompt_id: UUID) -> Prompt | None:
        return self.session.get(Prompt, prompt_id)

    def get_or_404(self, prompt_id: UUID) -> Prompt:
        prompt = self.get_by_id(prompt_id)
        if not prompt:
            raise NotFoundError("Prompt")
        return prompt

    def get_for_viewer(self, prompt_id: UUID, viewer: Optional[User]) -> Prompt:
        """Unpublished or non-public prompts are only visible to their author and admins."""
        prompt = self.get_or_404(prompt_id)
        if not prompt.is_public_listing and not self.can_manage(prompt, viewer):
            raise AuthorizationError("You do not have permission to view this prompt")
        prompt.increment_views()
        self.session.add(prompt)
        self.session.commit()
        self.session.refresh(prompt)
        return prompt

    @staticmethod
    def can_manage(prompt: Prompt, user: Optional[User]) -> bool:
        if user is None:
            return False
        return prompt.author_id == user.id or user.role == Role.ADMIN

    def create(self, author: User, prompt_in: PromptCreate) -> Prompt:
        """Create and publish a prompt; free prompts always cost 0."""
        prompt = Prompt(
            title=prompt_in.title,
            description=prompt_in.description,
            content=prompt_in.content,
            category=prompt_in.category,
            tags=prompt_in.tags,
            author_id=author.id,
            type=prompt_in.effective_type,
            price=prompt_in.effective_price,
            status=PromptStatus.PUBLISHED,
            visibility=prompt_in.visibility,
            difficulty=prompt_in.difficulty,
            estimated_time=prompt_in.estimated_time,
        )
        prompt.ensure_slug()
        prompt.versions = [PromptVersion(version="1.0", content=prompt.content, changelog="Initial version")]
        author.prompts_created += 1
        self.session.add(prompt)
        self.session.add(author)
        self.session.commit()
        self.session.refresh(prompt)
        logger.info(f"Prompt {prompt.id} created by {author.id}")
        return prompt

    def create_as_admin(self, admin: User, prompt_in: AdminPromptCreate) -> Prompt:
        prompt = Prompt(
            title=prompt_in.title,
            description=prompt_in.description,
            content=prompt_in.content,
            category=prompt_in.category,
            tags=prompt_in.tags,
            author_id=admin.id,
            type=prompt_in.effective_type,
            price=prompt_in.effective_price,
            status=prompt_in.status,
            visibility=prompt_in.visibility,
            difficulty=prompt_in.difficulty,
            estimated_time=prompt_in.estimated_time,
            featured=prompt_in.featured,
            trending=prompt_in.trending,
            is_admin_created=True,
            reviewed_by_id=admin.id,
            reviewed_at=utc_now(),
            admin_notes="Created by admin",
        )
        prompt.ensure_slug()
        prompt.versions = [PromptVersion(version="1.0", content=prompt.content, changelog="Initial version")]
        self.session.add(prompt)
        self.session.commit()
        self.session.refresh(prompt)
        return prompt

    def update(self, prompt: Prompt, prompt_in: PromptUpdate) -> Prompt:
        # explicit nulls mean "leave unchanged"
        data = prompt_in.model_dump(exclude_unset=True, exclude_none=True)
        changelog = data.pop("changelog", None)
        is_paid = data.pop("is_paid", None)
        if is_paid is not None:
            data["type"] = PromptType.PREMIUM if is_paid else PromptType.FREE
        if data.get("type", prompt.type) == PromptType.FREE:
            data["price"] = 0
        elif data.get("price", prompt.price) < 0.01:
            raise ValidationError("Price must be at least 0.01 for paid prompts")

        content_changed = "content" in data and data["content"] != prompt.content
        prompt.sqlmodel_update(data)
        if content_changed:
            prompt.versions.append(
                PromptVersion(
                    version=_next_version(prompt.versions),
                    content=prompt.content,
                    changelog=changelog,
                )
            )
        self.session.add(prompt)
        self.session.commit()
        self.session.refresh(prompt)
        return prompt

    def delete(self, prompt: Prompt) -> None:
        self.session.delete(prompt)
        self.session.commit()

    def like(self, prompt: Prompt) -> Prompt:
        prompt.add_like()
        author = self.session.get(User, prompt.author_id)
        if author:
            author.total_likes += 1
            self.session.add(author)
        self.session.add(prompt)
        self.session.commit()
        self.session.refresh(prompt)
        return prompt

    def download(self, prompt: Prompt, user: User) -> Prompt:
        prompt.increment_downloads()
        user.prompts_downloaded += 1
        self.session.add(prompt)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(prompt)
        return prompt

    def add_review(self, prompt: Prompt, user: User, rating: int, comment: str | None) -> Prompt:
        prompt.reviews.append(
            PromptReview(prompt_id=prompt.id, user_id=user.id, rating=rating, comment=comment)
        )
        prompt.refresh_rating()
        self.session.add(prompt)
        self.session.commit()
        self.session.refresh(prompt)
        return prompt

    def moderate(self, prompt: Prompt, admin: User, moderation: PromptModeration) -> Prompt:
        data = moderation.model_dump(exclude_unset=True)
        notes = data.pop("notes", None)
        if notes is not None:
            prompt.admin_notes = notes
        prompt.sqlmodel_update(data)
        prompt.reviewed_by_id = admin.id
        prompt.reviewed_at = utc_now()
        self.session.add(prompt)
        self.session.commit()
        self.session.refresh(prompt)
        logger.info(f"Prompt {prompt.id} moderated by {admin.id}: status={prompt.status}")
        return prompt

    def category_counts(self) -> dict[str, int]:
        statement = (
            select(Prompt.category, func.count(Prompt.id))
            .where(
                Prompt.status == PromptStatus.PUBLISHED,
                Prompt.visibility == Visibility.PUBLIC,
            )
            .group_by(Prompt.category)
        )
        counts = {category.value: 0 for category in PromptCategory}
        for category, count in self.session.exec(statement).all():
            counts[str(category)] = count
        return counts

    def author_stats(self, author_id: UUID) -> dict[str, float]:
        statement = select(
            func.count(Prompt.id),
            func.coalesce(func.sum(Prompt.views), 0),
            func.coalesce(func.sum(Prompt.downloads), 0),
            func.coalesce(func.sum(Prompt.likes), 0),
            func.coalesce(func.sum(Prompt.revenue), 0),
        ).where(Prompt.author_id == author_id)
        total, views, downloads, likes, revenue = self.session.exec(statement).one()
        return {
            "total_prompts": total,
            "total_views": views,
            "total_downloads": downloads,
            "total_likes": likes,
            "total_revenue": float(revenue),
        }
