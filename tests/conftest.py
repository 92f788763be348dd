import pytest
from mensa.core.tags import Tag
from mensa.models import Meal
from mensa.services.parser_service import QueryParser
from mensa.services.filter_service import RuleSet

@pytest.fixture
def parser_service():
    """Fixture for QueryParser instance."""
    return QueryParser()

@pytest.fixture
def make_meal():
    """Factory for meals with the given tags and category."""
    def _make(meal_id=1, category="Hauptgericht", tags=(), name=None):
        return Meal(
            id=meal_id,
            name=name or f"Meal {meal_id}",
            category=category,
            tags=set(tags)
        )
    return _make

@pytest.fixture
def empty_rules():
    return RuleSet()

@pytest.fixture
def sample_meals(make_meal):
    """A small menu in source order."""
    return [
        make_meal(1, "Vegetarisches Gericht", [Tag.VEGETARIAN, Tag.MILK]),
        make_meal(2, "Fleischgericht", [Tag.PIG]),
        make_meal(3, "Fischgericht", [Tag.FISH, Tag.GLUTEN]),
        make_meal(4, "Veganes Gericht", [Tag.VEGAN]),
        make_meal(5, "Smoothie", [Tag.VEGAN]),
    ]
