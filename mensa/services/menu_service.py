import datetime
import time
from typing import List, Optional
from mensa.models import (
    CanteenMenu,
    CanteenRef,
    ClassifyMealsRequest,
    ClassifyMealsResponse,
    MenuRequest,
    MenuResponse,
    RuleOverrides,
    StructuredQuery,
)
from mensa.core import rules
from mensa.core.config import MensaConfig, load_config
from mensa.core.logging_config import get_logger
from mensa.services.filter_service import FilterEngine, RuleSet, rules_for_query
from mensa.services.meal_service import MealService
from mensa.services.sources.openmensa import OpenMensaSource
from mensa.services.parser_service import QueryParser, parser_service

logger = get_logger(__name__)


class CanteenMissingError(Exception):
    def __init__(self):
        super().__init__("No canteen given in the phrase and no default canteen id is configured")


class CanteenUnavailableError(Exception):
    """None of the requested canteens has a known OpenMensa id."""

    def __init__(self, canteens: List[CanteenRef]):
        names = ", ".join(c.name for c in canteens)
        super().__init__(f"No OpenMensa id known for: {names}")
        self.canteens = canteens


class MenuService:
    def __init__(
        self,
        config: Optional[MensaConfig] = None,
        meal_service: Optional[MealService] = None,
        parser: Optional[QueryParser] = None,
    ) -> None:
        self.config = config or load_config()
        self.meal_service = meal_service or MealService(
            sources=[OpenMensaSource(timeout_seconds=self.config.request_timeout_seconds)],
            cache_ttl_seconds=self.config.cache_ttl_seconds
        )
        self.parser = parser or parser_service
        self.openmensa_ids = {**rules.OPENMENSA_IDS, **self.config.openmensa_ids}
        # Built once so a bad configured regex fails at startup, not per meal.
        self.filter_rules = self.config.filter.to_rule_set()
        self.favorite_rules = self.config.favorites.to_rule_set()

    def engine(
        self,
        query: Optional[StructuredQuery] = None,
        filter_overrides: Optional[RuleOverrides] = None,
        favorite_overrides: Optional[RuleOverrides] = None,
    ) -> FilterEngine:
        """Filter engine for one request: configured rules, request overrides and the query's diet."""
        filter_rules = self.filter_rules
        if filter_overrides is not None:
            filter_rules = self.config.filter.with_overrides(filter_overrides).to_rule_set()
        favorite_rules = self.favorite_rules
        if favorite_overrides is not None:
            favorite_rules = self.config.favorites.with_overrides(favorite_overrides).to_rule_set()

        restrictions: List[RuleSet] = []
        if query is not None:
            query_rules = rules_for_query(query)
            if not query_rules.is_empty:
                restrictions.append(query_rules)
        return FilterEngine(filter_rules, favorite_rules, restrictions)

    def resolve_canteens(self, query: StructuredQuery) -> List[CanteenRef]:
        canteen = query.location
        if canteen is None:
            default_id = self.config.default_canteen_id
            if default_id is None:
                raise CanteenMissingError()
            if default_id in rules.CANTEENS:
                canteen = rules.canteen(default_id)
            else:
                canteen = CanteenRef(id=default_id, name=f"Canteen {default_id}")
        if canteen.is_all:
            return rules.known_canteens()
        return [canteen]

    def openmensa_id(self, canteen: CanteenRef) -> Optional[int]:
        """OpenMensa id for a canteen, or None when a known canteen is not mapped.

        Ids outside the canteen table (a configured default) are OpenMensa ids already.
        """
        if canteen.id in self.openmensa_ids:
            return self.openmensa_ids[canteen.id]
        if canteen.id in rules.CANTEENS:
            return None
        return canteen.id

    def resolve_date(self, query: StructuredQuery, today: Optional[datetime.date] = None) -> datetime.date:
        if query.date is None:
            return today or datetime.date.today()
        return query.date.resolve(today)

    def classify_meals(self, request: ClassifyMealsRequest) -> ClassifyMealsResponse:
        query = self.parser.parse(request.phrase) if request.phrase else None
        engine = self.engine(query, request.filter, request.favorites)
        return ClassifyMealsResponse(meals=engine.classify_all(request.meals))

    def lookup(self, request: MenuRequest, today: Optional[datetime.date] = None) -> MenuResponse:
        """Answer a search phrase with the classified menus it asks for.

        Args:
            request: Phrase plus optional rule overrides.
            today: Reference day for relative dates (defaults to the current day).

        Returns:
            MenuResponse with one CanteenMenu per canteen that has an OpenMensa id,
            meals in source order.
        """
        total_start = time.time()
        query = self.parser.parse(request.phrase)
        canteens = self.resolve_canteens(query)
        day = self.resolve_date(query, today)
        engine = self.engine(query, request.filter, request.favorites)
        logger.info(f"🍽️  Looking up {len(canteens)} canteen(s) for {day.isoformat()}")

        targets = [(canteen, self.openmensa_id(canteen)) for canteen in canteens]
        unavailable = [canteen for canteen, source_id in targets if source_id is None]
        if unavailable and len(unavailable) == len(targets):
            raise CanteenUnavailableError(unavailable)
        for canteen in unavailable:
            logger.warning(f"Skipping {canteen.name}: no OpenMensa id configured")

        menus = []
        for canteen, source_id in targets:
            if source_id is None:
                continue
            meals = self.meal_service.get_meals(source_id, day)
            classified = engine.classify_all(meals)
            if not request.include_hidden:
                classified = [c for c in classified if c.classification.visible]
            menus.append(CanteenMenu(canteen=canteen, date=day, meals=classified))

        logger.info(f"⏱️  Menu lookup: {time.time() - total_start:.2f}s")
        return MenuResponse(query=query, menus=menus)
