"""Pydantic schemas for the category catalog."""
from unknown_items.models.enums import Category
from unknown_items.schemas.base import CamelModel


class CategoryResponse(CamelModel):
    category: Category
    slug: str
    name: str
    description: str
    posts_count: int = 0
