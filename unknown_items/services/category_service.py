"""Fixed category catalog with live post counts."""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from unknown_items.models.enums import Category
from unknown_items.models.post import Post
from unknown_items.schemas.category import CategoryResponse

CATEGORY_INFO: dict[Category, tuple[str, str]] = {
    Category.UNKNOWN_FACTS: ("Unknown Facts", "Fascinating facts that remain mysteries"),
    Category.INTERNET_MYSTERIES: ("Internet Mysteries", "Digital enigmas and online puzzles"),
    Category.UNIDENTIFIED_OBJECTS: ("Unidentified Objects", "UFOs and mysterious objects"),
    Category.UNEXPLAINED_EVENTS: ("Unexplained Events", "Strange occurrences without clear explanations"),
    Category.HISTORICAL_MYSTERIES: ("Historical Mysteries", "Unsolved puzzles from the past"),
    Category.SCIENTIFIC_ANOMALIES: ("Scientific Anomalies", "Phenomena that challenge current science"),
    Category.CRYPTIDS: ("Cryptids", "Legendary creatures and unknown animals"),
    Category.CONSPIRACIES: ("Conspiracies", "Alternative theories and cover-ups"),
    Category.OTHER: ("Other", "Mysteries that don't fit other categories"),
}


def category_slug(category: Category) -> str:
    return category.value.lower().replace("_", "-")


def category_from_slug(slug: str) -> Category | None:
    try:
        return Category(slug.strip().upper().replace("-", "_"))
    except ValueError:
        return None


async def list_categories(db: AsyncSession) -> list[CategoryResponse]:
    result = await db.execute(
        select(Post.category, func.count(Post.id)).where(Post.published.is_(True)).group_by(Post.category)
    )
    counts = {category: count for category, count in result.all()}
    return [
        CategoryResponse(
            category=category,
            slug=category_slug(category),
            name=name,
            description=description,
            posts_count=counts.get(category, 0),
        )
        for category, (name, description) in CATEGORY_INFO.items()
    ]
