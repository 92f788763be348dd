import datetime
from abc import ABC, abstractmethod
from typing import List
from mensa.models import Meal

class MealSource(ABC):
    name: str = "Unknown"

    @abstractmethod
    def get_meals(self, canteen_id: int, day: datetime.date) -> List[Meal]:
        """
        Fetch the meals served at a canteen on a given day.
        Must return canonical `Meal` objects in the order the source lists them.
        """
        pass
