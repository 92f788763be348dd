import datetime
import pytest
import requests
from unittest.mock import MagicMock
from mensa.core.tags import Tag
from mensa.services.sources.openmensa import OpenMensaSource

RAW_MEALS = [
    {
        "id": 11,
        "name": "Gebratenes Seelachsfilet",
        "category": "Fischgericht",
        "notes": ["Fisch", "Glutenhaltiges Getreide", "mit Kartoffelpüree"],
        "prices": {"students": 2.6, "employees": 4.1, "pupils": None, "others": 5.0}
    },
    {
        "id": 12,
        "name": "Linsencurry",
        "category": "Veganes Gericht",
        "notes": ["vegan"],
        "prices": {"students": 2.1, "employees": 3.5, "others": 4.4}
    },
]


def make_response(status_code, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


@pytest.fixture
def session():
    return MagicMock()


def test_fetches_and_adapts_meals(session):
    session.get.return_value = make_response(200, RAW_MEALS)
    source = OpenMensaSource(timeout_seconds=5, session=session)

    meals = source.get_meals(106, datetime.date(2024, 1, 3))

    session.get.assert_called_once_with(
        "https://openmensa.org/api/v2/canteens/106/days/2024-01-03/meals",
        timeout=5
    )
    assert [m.id for m in meals] == [11, 12]
    fish = meals[0]
    assert fish.tags == {Tag.FISH, Tag.GLUTEN}
    assert fish.notes == ["mit Kartoffelpüree"]
    assert fish.prices.students == 2.6
    assert fish.prices.pupils is None
    assert meals[1].tags == {Tag.VEGAN}


def test_closed_canteen_returns_no_meals(session):
    session.get.return_value = make_response(404)
    source = OpenMensaSource(session=session)
    assert source.get_meals(106, datetime.date(2024, 1, 6)) == []


def test_server_errors_propagate(session):
    session.get.return_value = make_response(500)
    source = OpenMensaSource(session=session)
    with pytest.raises(requests.HTTPError):
        source.get_meals(106, datetime.date(2024, 1, 3))
