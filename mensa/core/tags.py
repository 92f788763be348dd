import re
from enum import Enum
from typing import Iterable, List, Set, Tuple, Union


class Tag(str, Enum):
    """A tag describing a meal: allergens, additives and dietary markers."""

    ALCOHOL = "Alcohol"
    ANTIOXIDANT = "Antioxidant"
    BLACKENED = "Blackened"
    COLORING = "Coloring"
    COW = "Cow"
    EGG = "Egg"
    FISH = "Fish"
    FLAVOR_ENHANCER = "FlavorEnhancer"
    GARLIC = "Garlic"
    GLUTEN = "Gluten"
    LUPIN = "Lupin"
    MILK = "Milk"
    MUSTARD = "Mustard"
    NUTS = "Nuts"
    PHOSPHATE = "Phosphate"
    PIG = "Pig"
    POULTRY = "Poultry"
    PRESERVATIVE = "Preservative"
    SELLERY = "Sellery"
    SESAME = "Sesame"
    SOY = "Soy"
    SULFITE = "Sulfite"
    SWEETENER = "Sweetener"
    VEGAN = "Vegan"
    VEGETARIAN = "Vegetarian"

    @property
    def id(self) -> int:
        return _TAG_IDS[self]

    @classmethod
    def from_str(cls, value: Union[str, int]) -> "Tag":
        """Look a tag up by display name (any case) or by numeric id."""
        if isinstance(value, int) or str(value).strip().isdigit():
            index = int(value)
            members = list(cls)
            if 0 <= index < len(members):
                return members[index]
            raise ValueError(f"Unknown tag id: {value}")
        wanted = str(value).strip().lower()
        for tag in cls:
            if tag.value.lower() == wanted:
                return tag
        raise ValueError(f"Unknown tag: {value!r}")

    @classmethod
    def parse_note(cls, raw: str) -> List["Tag"]:
        """Derive all tags mentioned in a raw (German) meal note."""
        return [tag for tag, pattern in TAG_PATTERNS if pattern.search(raw)]

    def is_primary(self) -> bool:
        """Primary tags describe the kind of meal rather than allergy information."""
        return self in PRIMARY_TAGS

    def is_secondary(self) -> bool:
        return not self.is_primary()

    def describe(self) -> str:
        return TAG_DESCRIPTIONS[self]


_TAG_IDS = {tag: index for index, tag in enumerate(Tag)}

PRIMARY_TAGS = frozenset({Tag.COW, Tag.FISH, Tag.PIG, Tag.POULTRY, Tag.VEGAN, Tag.VEGETARIAN})

# Notes published by the canteens are German; order follows the enum.
TAG_PATTERNS: List[Tuple[Tag, "re.Pattern[str]"]] = [
    (tag, re.compile(pattern, re.IGNORECASE))
    for tag, pattern in [
        (Tag.ALCOHOL, r"alkohol"),
        (Tag.ANTIOXIDANT, r"antioxidation"),
        (Tag.BLACKENED, r"geschwärzt"),
        (Tag.COLORING, r"farbstoff"),
        (Tag.COW, r"rind"),
        (Tag.EGG, r"eier"),
        (Tag.FISH, r"fisch"),
        (Tag.FLAVOR_ENHANCER, r"geschmacksverstärker"),
        (Tag.GARLIC, r"knoblauch"),
        (Tag.GLUTEN, r"gluten"),
        (Tag.LUPIN, r"lupine?"),
        (Tag.MILK, r"milch"),
        (Tag.MUSTARD, r"senf"),
        (Tag.NUTS, r"schalenfrüchte|nüsse"),
        (Tag.PHOSPHATE, r"phosphat"),
        (Tag.PIG, r"schwein"),
        (Tag.POULTRY, r"geflügel"),
        (Tag.PRESERVATIVE, r"konservierung"),
        (Tag.SELLERY, r"sellerie"),
        (Tag.SESAME, r"sesam"),
        (Tag.SOY, r"soja"),
        (Tag.SULFITE, r"sulfit|schwefel"),
        (Tag.SWEETENER, r"süßungsmittel"),
        (Tag.VEGAN, r"vegan"),
        (Tag.VEGETARIAN, r"fleischlos|vegetarisch|ohne fleisch"),
    ]
]

TAG_DESCRIPTIONS = {
    Tag.ALCOHOL: "Contains alcohol",
    Tag.ANTIOXIDANT: "Contains an antioxidant",
    Tag.BLACKENED: "Contains ingredients that have been blackened, i.e. blackened olives",
    Tag.COLORING: "Contains food coloring",
    Tag.COW: "Contains meat from cattle",
    Tag.EGG: "Contains egg",
    Tag.FISH: "Contains fish",
    Tag.FLAVOR_ENHANCER: "Contains artificial flavor enhancer",
    Tag.GARLIC: "Contains garlic",
    Tag.GLUTEN: "Contains gluten",
    Tag.LUPIN: "Contains lupin",
    Tag.MILK: "Contains milk",
    Tag.MUSTARD: "Contains mustard",
    Tag.NUTS: "Contains nuts",
    Tag.PHOSPHATE: "Contains phosphate",
    Tag.PIG: "Contains meat from pig",
    Tag.POULTRY: "Contains poultry meat",
    Tag.PRESERVATIVE: "Contains artificial preservatives",
    Tag.SELLERY: "Contains sellery",
    Tag.SESAME: "Contains sesame",
    Tag.SOY: "Contains soy",
    Tag.SULFITE: "Contains sulfite",
    Tag.SWEETENER: "Contains artificial sweetener",
    Tag.VEGAN: "Does not contain any animal produce",
    Tag.VEGETARIAN: "Does not contain any meat",
}


def split_notes(notes: Iterable[str]) -> Tuple[Set[Tag], List[str]]:
    """Split raw notes into recognised tags and free-text descriptions.

    A note that yields at least one tag is consumed as tags; every other note
    is kept verbatim (in order, without duplicates) as a description.
    """
    tags: Set[Tag] = set()
    descriptions: List[str] = []
    for note in notes:
        found = Tag.parse_note(note)
        if found:
            tags.update(found)
        elif note not in descriptions:
            descriptions.append(note)
    return tags, descriptions
