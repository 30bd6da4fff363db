"""Unit tests for Prompt helpers and the create schema."""
import re

import pytest
from pydantic import ValidationError

from promptify.models import Prompt, PromptCategory, PromptReview, PromptType, slugify
from promptify.schemas import PromptCreate

VALID_PROMPT = {
    "title": "Blog Outline Generator",
    "description": "Creates a structured outline for any blog topic.",
    "content": "Write a detailed blog outline about {topic} with five sections.",
    "category": "writing",
}


class TestSlugify:
    def test_lowercases_strips_symbols_and_appends_timestamp(self):
        slug = slugify("Hello, World! Prompt #1")
        assert re.fullmatch(r"hello-world-prompt-1-\d{13}", slug)


class TestPromptCounters:
    def make_prompt(self, **overrides) -> Prompt:
        fields = {**VALID_PROMPT, "category": PromptCategory.WRITING}
        fields.update(overrides)
        return Prompt(**fields)

    def test_remove_like_never_below_zero(self):
        prompt = self.make_prompt()
        prompt.remove_like()
        assert prompt.likes == 0
        prompt.add_like()
        prompt.add_like()
        prompt.remove_like()
        assert prompt.likes == 1

    def test_average_rating_rounded_to_one_decimal(self):
        prompt = self.make_prompt()
        prompt.reviews = [PromptReview(rating=r) for r in (5, 4, 4)]
        assert prompt.average_rating == 4.3

    def test_average_rating_zero_without_reviews(self):
        assert self.make_prompt().average_rating == 0


# =============================================================================
# CREATE SCHEMA
# =============================================================================

class TestPromptCreate:
    def test_free_prompt_forces_price_zero(self):
        """
        Given: is_paid=false with a client-supplied price
        When: The effective type and price are computed
        Then: type is free and price is 0
        """
        prompt_in = PromptCreate(**VALID_PROMPT, is_paid=False, price=25)
        assert prompt_in.effective_type == PromptType.FREE
        assert prompt_in.effective_price == 0

    def test_paid_prompt_keeps_price(self):
        prompt_in = PromptCreate(**VALID_PROMPT, is_paid=True, price=4.99)
        assert prompt_in.effective_type == PromptType.PREMIUM
        assert prompt_in.effective_price == 4.99

    def test_paid_prompt_requires_minimum_price(self):
        with pytest.raises(ValidationError):
            PromptCreate(**VALID_PROMPT, is_paid=True, price=0)

    def test_tags_accept_comma_string(self):
        prompt_in = PromptCreate(**VALID_PROMPT, tags="blog, outline , ,seo")
        assert prompt_in.tags == ["blog", "outline", "seo"]

    def test_tag_length_limit(self):
        with pytest.raises(ValidationError):
            PromptCreate(**VALID_PROMPT, tags=["x" * 31])

    @pytest.mark.parametrize("field,value", [("title", "ab"), ("description", "short"), ("content", "tiny")])
    def test_length_limits(self, field, value):
        with pytest.raises(ValidationError):
            PromptCreate(**{**VALID_PROMPT, field: value})
