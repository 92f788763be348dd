import datetime
import time
from typing import Any, Dict, List
import requests
from mensa.services.sources.base import MealSource
from mensa.models import Meal, Prices
from mensa.core.tags import split_notes
from mensa.core.logging_config import get_logger

logger = get_logger(__name__)


class OpenMensaSource(MealSource):
    name = "OpenMensa"
    BASE_URL = "https://openmensa.org/api/v2"

    def __init__(self, timeout_seconds: int = 10, session: requests.Session = None):
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def get_meals(self, canteen_id: int, day: datetime.date) -> List[Meal]:
        """
        Fetch meals from OpenMensa.
        A canteen that is closed on `day` answers 404, which yields no meals.
        """
        url = f"{self.BASE_URL}/canteens/{canteen_id}/days/{day.isoformat()}/meals"
        api_start = time.time()
        res = self.session.get(url, timeout=self.timeout_seconds)
        api_time = time.time() - api_start
        logger.info(f"🌐 OpenMensa API (canteen {canteen_id}, {day}): {res.status_code} in {api_time:.2f}s")

        if res.status_code == 404:
            return []
        res.raise_for_status()
        return [self._adapt(raw) for raw in res.json() or []]

    def _adapt(self, data: Dict[str, Any]) -> Meal:
        tags, descriptions = split_notes(data.get("notes") or [])
        prices = data.get("prices") or {}
        return Meal(
            id=data.get("id"),
            name=data.get("name") or "",
            category=data.get("category") or "",
            tags=tags,
            notes=descriptions,
            prices=Prices(
                students=prices.get("students"),
                employees=prices.get("employees"),
                pupils=prices.get("pupils"),
                others=prices.get("others")
            )
        )
