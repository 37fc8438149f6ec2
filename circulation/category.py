"""Closed set of catalog categories with display metadata."""

from enum import Enum

from .errors import InvalidArgumentError


class Category(Enum):
    FICTION = ("Fiction", "Imaginative narratives and stories")
    NON_FICTION = ("Non-Fiction", "Factual and informational books")
    SCIENCE_FICTION = ("Science Fiction", "Futuristic and speculative fiction")
    MYSTERY = ("Mystery", "Crime, detective, and suspenseful stories")
    BIOGRAPHY = ("Biography", "Life stories and memoirs")
    HISTORY = ("History", "Historical events and periods")
    FANTASY = ("Fantasy", "Magical and supernatural worlds")
    ROMANCE = ("Romance", "Love stories and relationships")
    THRILLER = ("Thriller", "Suspenseful and exciting narratives")
    CLASSIC = ("Classic", "Timeless literary works")

    def __init__(self, display_name: str, description: str):
        self.display_name = display_name
        self.description = description

    @classmethod
    def parse(cls, value: str) -> "Category":
        """Look up a category by member name or display name, ignoring case"""
        needle = value.strip().lower().replace("_", "-")
        for category in cls:
            if needle in (category.name.lower().replace("_", "-"), category.display_name.lower()):
                return category
        raise InvalidArgumentError(f"Unknown category: {value!r}")

    def __str__(self) -> str:
        return self.display_name
