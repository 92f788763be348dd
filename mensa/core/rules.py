from typing import Dict, List, Union

from mensa.core.tags import Tag
from mensa.models import CanteenRef, DateSpec, ExcludeKind, RestrictionKind
from mensa.utils.keyword_matcher import Keyword, Vocabulary

# --- Canteens ---
# Ids follow the Studentenwerk Leipzig location numbering.
CANTEENS: Dict[Union[int, str], str] = {
    153: "Cafeteria Linné",
    127: "Cafeteria Dittrichring",
    118: "Mensa Academica",
    106: "Mensa am Park",
    115: "Mensa am Elsterbecken",
    162: "Mensa Liebigstraße",
    111: "Mensa Peterssteinweg",
    140: "Mensa Schönauer Straße",
    170: "Mensa Tierklinik",
    "all": "Alle Mensen",
}

# OpenMensa numbers canteens on its own. A canteen missing here can only be
# fetched once the configuration maps it ("openmensa_ids").
OPENMENSA_IDS: Dict[int, int] = {
    106: 63,
}


def canteen(canteen_id: Union[int, str]) -> CanteenRef:
    return CanteenRef(id=canteen_id, name=CANTEENS[canteen_id])


# --- Clause keywords ---
KEYWORD_AT = Keyword("at")
KEYWORD_NO = Keyword("no")
KEYWORD_ON = Keyword("on")

# --- Location aliases ---
# Tried top to bottom, first match wins. The physics and chemistry
# nicknames all point at the canteen in the Linnéstraße building.
CANTEEN_ALIASES: Vocabulary[CanteenRef] = Vocabulary("canteen name", [
    (Keyword("cafeteria linné"), canteen(153)),
    (Keyword("linné"), canteen(153)),
    (Keyword("linne"), canteen(153)),
    (Keyword("physics"), canteen(153)),
    (Keyword("physik"), canteen(153)),
    (Keyword("chem", "istry"), canteen(153)),
    (Keyword("chemie"), canteen(153)),
    (Keyword("cafeteria dittrichring"), canteen(127)),
    (Keyword("dittrichring"), canteen(127)),
    (Keyword("mensa academica"), canteen(118)),
    (Keyword("academica"), canteen(118)),
    (Keyword("mensa am park"), canteen(106)),
    (Keyword("am park"), canteen(106)),
    (Keyword("park"), canteen(106)),
    (Keyword("main"), canteen(106)),
    (Keyword("mensa am elsterbecken"), canteen(115)),
    (Keyword("elsterbecken"), canteen(115)),
    (Keyword("mensa liebigstraße"), canteen(162)),
    (Keyword("liebigstraße"), canteen(162)),
    (Keyword("liebigstrasse"), canteen(162)),
    (Keyword("liebig"), canteen(162)),
    (Keyword("mensa peterssteinweg"), canteen(111)),
    (Keyword("peterssteinweg"), canteen(111)),
    (Keyword("mensa schönauer straße"), canteen(140)),
    (Keyword("schönauer straße"), canteen(140)),
    (Keyword("schönauer"), canteen(140)),
    (Keyword("schoenauer"), canteen(140)),
    (Keyword("mensa tierklinik"), canteen(170)),
    (Keyword("tierklinik"), canteen(170)),
    (Keyword("all"), canteen("all")),
    (Keyword("everywhere"), canteen("all")),
])

# --- Dates ---
DATE_WORDS: Vocabulary[DateSpec] = Vocabulary("today or tomorrow", [
    (Keyword("today"), DateSpec.today()),
    (Keyword("tomorrow"), DateSpec.tomorrow()),
])

WEEKDAYS: Vocabulary[DateSpec] = Vocabulary("weekday", [
    (Keyword("mon", "day"), DateSpec.on_weekday(0)),
    (Keyword("tue", "sday"), DateSpec.on_weekday(1)),
    (Keyword("wed", "nesday"), DateSpec.on_weekday(2)),
    (Keyword("thu", "rsday"), DateSpec.on_weekday(3)),
    (Keyword("fri", "day"), DateSpec.on_weekday(4)),
    (Keyword("sat", "urday"), DateSpec.on_weekday(5)),
    (Keyword("sun", "day"), DateSpec.on_weekday(6)),
])

# --- Dietary clauses ---
EXCLUDES: Vocabulary[ExcludeKind] = Vocabulary("pig, fish or alcohol", [
    (Keyword("pig"), ExcludeKind.PIG),
    (Keyword("fish"), ExcludeKind.FISH),
    (Keyword("alcohol"), ExcludeKind.ALCOHOL),
    (Keyword("booze"), ExcludeKind.ALCOHOL),
])

RESTRICTIONS: Vocabulary[RestrictionKind] = Vocabulary("vegan, vegetarian or flexible", [
    (Keyword("vegan"), RestrictionKind.VEGAN),
    (Keyword("vegetarian"), RestrictionKind.VEGETARIAN),
    (Keyword("veggie"), RestrictionKind.VEGETARIAN),
    (Keyword("flexible"), RestrictionKind.FLEXIBLE),
])

# --- Clause to tag mappings ---
# Maps a dietary clause to the meal tags it denies (excludes) or requires (restrictions)
EXCLUDE_TAGS: Dict[ExcludeKind, List[Tag]] = {
    ExcludeKind.PIG: [Tag.PIG],
    ExcludeKind.FISH: [Tag.FISH],
    ExcludeKind.ALCOHOL: [Tag.ALCOHOL],
}

RESTRICTION_TAGS: Dict[RestrictionKind, List[Tag]] = {
    RestrictionKind.VEGAN: [Tag.VEGAN],
    RestrictionKind.VEGETARIAN: [Tag.VEGETARIAN, Tag.VEGAN],
    RestrictionKind.FLEXIBLE: [],
}


def known_canteens() -> List[CanteenRef]:
    """All concrete canteens, in declaration order."""
    return [canteen(canteen_id) for canteen_id in CANTEENS if canteen_id != "all"]
