import datetime
from enum import Enum
from typing import List, Literal, Optional, Set, Union
from pydantic import BaseModel, ConfigDict, Field

from mensa.core.tags import Tag


class ExcludeKind(str, Enum):
    PIG = "pig"
    FISH = "fish"
    ALCOHOL = "alcohol"


class RestrictionKind(str, Enum):
    VEGAN = "vegan"
    VEGETARIAN = "vegetarian"
    FLEXIBLE = "flexible"


class DateKind(str, Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    EXPLICIT = "explicit"
    WEEKDAY = "weekday"


WEEKDAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class CanteenRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Union[int, Literal["all"]]
    name: str

    @property
    def is_all(self) -> bool:
        return self.id == "all"


class DateSpec(BaseModel):
    """Symbolic date taken from a phrase; turned into a calendar day by `resolve`."""

    model_config = ConfigDict(frozen=True)

    kind: DateKind
    date: Optional[datetime.date] = None
    weekday: Optional[int] = Field(default=None, ge=0, le=6, description="0 = Monday")

    @classmethod
    def today(cls) -> "DateSpec":
        return cls(kind=DateKind.TODAY)

    @classmethod
    def tomorrow(cls) -> "DateSpec":
        return cls(kind=DateKind.TOMORROW)

    @classmethod
    def explicit(cls, day: datetime.date) -> "DateSpec":
        return cls(kind=DateKind.EXPLICIT, date=day)

    @classmethod
    def on_weekday(cls, weekday: int) -> "DateSpec":
        return cls(kind=DateKind.WEEKDAY, weekday=weekday)

    def resolve(self, reference: Optional[datetime.date] = None) -> datetime.date:
        """Resolve against `reference` (default: today).

        A weekday resolves to its next occurrence, counting the reference day itself.
        """
        reference = reference or datetime.date.today()
        if self.kind == DateKind.TODAY:
            return reference
        if self.kind == DateKind.TOMORROW:
            return reference + datetime.timedelta(days=1)
        if self.kind == DateKind.EXPLICIT:
            return self.date
        offset = (self.weekday - reference.weekday()) % 7
        return reference + datetime.timedelta(days=offset)


class StructuredQuery(BaseModel):
    """Parsed search phrase. Absent fields mean the caller's default applies."""

    location: Optional[CanteenRef] = None
    date: Optional[DateSpec] = None
    excludes: Set[ExcludeKind] = Field(default_factory=set)
    restriction: Optional[RestrictionKind] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.location is None
            and self.date is None
            and not self.excludes
            and self.restriction is None
        )


class Prices(BaseModel):
    students: Optional[float] = None
    employees: Optional[float] = None
    pupils: Optional[float] = None
    others: Optional[float] = None


class Meal(BaseModel):
    id: int
    name: str
    category: str = ""
    tags: Set[Tag] = Field(default_factory=set)
    notes: List[str] = Field(default_factory=list)
    prices: Prices = Field(default_factory=Prices)


class Classification(BaseModel):
    visible: bool
    highlighted: bool


class ClassifiedMeal(BaseModel):
    meal: Meal
    classification: Classification


class RuleOverrides(BaseModel):
    allow_tags: List[str] = Field(default_factory=list)
    deny_tags: List[str] = Field(default_factory=list)
    allow_categories: List[str] = Field(default_factory=list, description="Regular expressions")
    deny_categories: List[str] = Field(default_factory=list, description="Regular expressions")
    allow_names: List[str] = Field(default_factory=list, description="Regular expressions over meal names")
    deny_names: List[str] = Field(default_factory=list, description="Regular expressions over meal names")
    overwrite: bool = Field(
        default=False,
        description="Replace the configured rules instead of extending them"
    )


class ParseQueryRequest(BaseModel):
    phrase: str = Field(..., description="Search phrase, e.g. 'at park on tomorrow vegan'")


class ClassifyMealsRequest(BaseModel):
    meals: List[Meal]
    phrase: Optional[str] = Field(
        default=None,
        description="Optional search phrase whose dietary clauses further restrict visibility"
    )
    filter: Optional[RuleOverrides] = None
    favorites: Optional[RuleOverrides] = None


class ClassifyMealsResponse(BaseModel):
    meals: List[ClassifiedMeal]


class MenuRequest(BaseModel):
    phrase: str = Field(default="", description="Search phrase; empty uses the configured defaults")
    include_hidden: bool = Field(default=False, description="Also return meals hidden by the filter")
    filter: Optional[RuleOverrides] = None
    favorites: Optional[RuleOverrides] = None


class CanteenMenu(BaseModel):
    canteen: CanteenRef
    date: datetime.date
    meals: List[ClassifiedMeal]


class MenuResponse(BaseModel):
    query: StructuredQuery
    menus: List[CanteenMenu]
