import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from mensa.core.rules import EXCLUDE_TAGS, RESTRICTION_TAGS
from mensa.core.tags import Tag
from mensa.models import Classification, ClassifiedMeal, Meal, StructuredQuery
from mensa.core.logging_config import get_logger

logger = get_logger(__name__)


class InvalidPatternError(Exception):
    """A configured rule pattern (category regex or tag name) is unusable."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class Pattern(ABC):
    @abstractmethod
    def matches(self, meal: Meal) -> bool:
        pass


@dataclass(frozen=True)
class TagPattern(Pattern):
    tag: Tag

    @classmethod
    def from_string(cls, raw: str) -> "TagPattern":
        try:
            return cls(Tag.from_str(raw))
        except ValueError as exc:
            raise InvalidPatternError(raw, str(exc)) from exc

    def matches(self, meal: Meal) -> bool:
        return self.tag in meal.tags


@dataclass(frozen=True)
class RegexPattern(Pattern):
    """Searches one text field of a meal with a regular expression."""

    regex: "re.Pattern[str]"

    @classmethod
    def from_string(cls, raw: str) -> "RegexPattern":
        try:
            return cls(re.compile(raw))
        except re.error as exc:
            raise InvalidPatternError(raw, str(exc)) from exc

    @abstractmethod
    def subject(self, meal: Meal) -> str:
        pass

    def matches(self, meal: Meal) -> bool:
        return self.regex.search(self.subject(meal)) is not None


@dataclass(frozen=True)
class CategoryPattern(RegexPattern):
    def subject(self, meal: Meal) -> str:
        return meal.category


@dataclass(frozen=True)
class NamePattern(RegexPattern):
    def subject(self, meal: Meal) -> str:
        return meal.name


@dataclass(frozen=True)
class RuleSet:
    """Allow/deny patterns deciding whether a meal passes.

    A meal passes if the allow list is empty or any allow pattern matches,
    and no deny pattern matches.
    """

    allow: Tuple[Pattern, ...] = ()
    deny: Tuple[Pattern, ...] = ()

    @classmethod
    def from_parts(
        cls,
        allow_tags: Iterable[str] = (),
        deny_tags: Iterable[str] = (),
        allow_categories: Iterable[str] = (),
        deny_categories: Iterable[str] = (),
        allow_names: Iterable[str] = (),
        deny_names: Iterable[str] = (),
    ) -> "RuleSet":
        """Build a rule set from raw tag names and category or meal-name regexes.

        Raises:
            InvalidPatternError: for an unknown tag or a regex that does not compile.
        """
        allow = [TagPattern.from_string(t) for t in allow_tags]
        allow += [CategoryPattern.from_string(c) for c in allow_categories]
        allow += [NamePattern.from_string(n) for n in allow_names]
        deny = [TagPattern.from_string(t) for t in deny_tags]
        deny += [CategoryPattern.from_string(c) for c in deny_categories]
        deny += [NamePattern.from_string(n) for n in deny_names]
        return cls(allow=tuple(allow), deny=tuple(deny))

    @property
    def has_allow(self) -> bool:
        return bool(self.allow)

    @property
    def is_empty(self) -> bool:
        return not self.allow and not self.deny

    def evaluate(self, meal: Meal) -> bool:
        allowed = not self.allow or any(pattern.matches(meal) for pattern in self.allow)
        return allowed and not any(pattern.matches(meal) for pattern in self.deny)

    def joined(self, other: "RuleSet") -> "RuleSet":
        return RuleSet(allow=self.allow + other.allow, deny=self.deny + other.deny)


def rules_for_query(query: StructuredQuery) -> RuleSet:
    """Turn the dietary clauses of a query into a rule set over meal tags."""
    deny = []
    for kind in sorted(query.excludes, key=lambda k: k.value):
        deny.extend(TagPattern(tag) for tag in EXCLUDE_TAGS[kind])
    allow = []
    if query.restriction is not None:
        allow = [TagPattern(tag) for tag in RESTRICTION_TAGS[query.restriction]]
    return RuleSet(allow=tuple(allow), deny=tuple(deny))


class FilterEngine:
    """Classifies meals as visible/hidden and highlighted/normal.

    Visibility requires the filter rules and every extra restriction to pass.
    Highlighting requires the favorite rules to pass through a positive allow
    match, so empty favorites highlight nothing. Favorites made only of
    deny patterns highlight nothing either: a deny list can veto a favorite
    but never creates one. The two classifications are computed
    independently; callers decide what to do with hidden favorites.
    """

    def __init__(self, filter_rules: RuleSet, favorite_rules: RuleSet, restrictions: Sequence[RuleSet] = ()):
        self.filter_rules = filter_rules
        self.favorite_rules = favorite_rules
        self.restrictions = tuple(restrictions)

    def classify(self, meal: Meal) -> Classification:
        visible = self.filter_rules.evaluate(meal) and all(r.evaluate(meal) for r in self.restrictions)
        highlighted = self.favorite_rules.has_allow and self.favorite_rules.evaluate(meal)
        return Classification(visible=visible, highlighted=highlighted)

    def classify_all(self, meals: Iterable[Meal]) -> List[ClassifiedMeal]:
        """Classify meals, keeping the order they were given in."""
        classified = [ClassifiedMeal(meal=meal, classification=self.classify(meal)) for meal in meals]
        hidden = sum(1 for c in classified if not c.classification.visible)
        logger.debug(f"Classified {len(classified)} meals, {hidden} hidden")
        return classified
