import datetime
import time
from typing import List, Optional
from mensa.services.sources.base import MealSource
from mensa.services.sources.openmensa import OpenMensaSource
from mensa.models import Meal
from mensa.core.logging_config import get_logger

logger = get_logger(__name__)

class MealSourceError(Exception):
    def __init__(self, sources: List[str], errors: List[str]):
        super().__init__("Failed to fetch meals from sources")
        self.sources = sources
        self.errors = errors

class MealService:
    def __init__(self, sources: Optional[List[MealSource]] = None, cache_ttl_seconds: int = 3600):
        self.sources: List[MealSource] = sources if sources is not None else [OpenMensaSource()]
        self.cache = {}
        self.cache_ttl_seconds = cache_ttl_seconds

    def get_meals(self, canteen_id: int, day: datetime.date) -> List[Meal]:
        """
        Collect the meals for one OpenMensa canteen id and day from every source.
        Responses are cached per (source, canteen, day) for `cache_ttl_seconds`.
        """
        all_meals = []
        errors = []

        now = time.time()
        for source in self.sources:
            cache_key = (source.name, canteen_id, day.isoformat())
            cached = self.cache.get(cache_key)
            if cached and (now - cached["timestamp"] < self.cache_ttl_seconds):
                all_meals.extend(cached["meals"])
                continue
            try:
                meals = source.get_meals(canteen_id, day)
            except Exception as e:
                logger.error(f"Error fetching from source {source.name}: {e}")
                errors.append(f"{source.name}: {e}")
                continue
            self.cache[cache_key] = {
                "timestamp": now,
                "meals": meals
            }
            all_meals.extend(meals)

        if not all_meals and errors:
            raise MealSourceError([source.name for source in self.sources], errors)

        return all_meals
