from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import time
import uuid
from typing import List
from mensa.models import (
    CanteenRef,
    ClassifyMealsRequest,
    ClassifyMealsResponse,
    MenuRequest,
    MenuResponse,
    ParseQueryRequest,
    StructuredQuery,
)
from mensa.core import rules
from mensa.services.grammar import QueryParseError
from mensa.services.filter_service import InvalidPatternError
from mensa.services.meal_service import MealSourceError
from mensa.services.menu_service import CanteenMissingError, CanteenUnavailableError, MenuService
from mensa.services.parser_service import parser_service
from mensa.core.logging_config import get_logger

app = FastAPI(title="Mensa Query & Meal Filter API", version="0.1.0")
logger = get_logger(__name__)
menu_service = MenuService()

@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = str(uuid.uuid4())
    start = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000.0
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} "
        f"{duration_ms:.1f}ms request_id={request_id}"
    )
    response.headers["X-Request-ID"] = request_id
    return response

@app.exception_handler(QueryParseError)
async def query_parse_error_handler(request: Request, exc: QueryParseError):
    logger.info(f"Rejected phrase {exc.phrase!r}: {exc}")
    return JSONResponse(
        status_code=400,
        content={
            "error_code": "INVALID_QUERY",
            "message": str(exc),
            "phrase": exc.phrase,
            "position": exc.position,
            "expected": exc.expected
        }
    )

@app.exception_handler(InvalidPatternError)
async def invalid_pattern_error_handler(request: Request, exc: InvalidPatternError):
    return JSONResponse(
        status_code=422,
        content={
            "error_code": "INVALID_PATTERN",
            "message": str(exc),
            "pattern": exc.pattern
        }
    )

@app.exception_handler(CanteenMissingError)
async def canteen_missing_error_handler(request: Request, exc: CanteenMissingError):
    return JSONResponse(
        status_code=400,
        content={
            "error_code": "CANTEEN_ID_MISSING",
            "message": str(exc),
            "suggestion": "Name a canteen, e.g. 'at park', or configure default_canteen_id."
        }
    )

@app.exception_handler(CanteenUnavailableError)
async def canteen_unavailable_error_handler(request: Request, exc: CanteenUnavailableError):
    return JSONResponse(
        status_code=400,
        content={
            "error_code": "CANTEEN_UNAVAILABLE",
            "message": str(exc),
            "canteens": [c.name for c in exc.canteens],
            "suggestion": "Map the canteen to its OpenMensa id under openmensa_ids in the configuration."
        }
    )

@app.exception_handler(MealSourceError)
async def meal_source_error_handler(request: Request, exc: MealSourceError):
    logger.error(f"Meal source failure: {exc.errors}")
    return JSONResponse(
        status_code=502,
        content={
            "error_code": "MEAL_SOURCE_FAILURE",
            "message": "Failed to fetch meals from configured sources.",
            "sources": exc.sources,
            "errors": exc.errors
        }
    )

@app.get("/")
def read_root():
    return {"message": "Welcome to the Mensa Query API. Visit /docs for documentation."}


@app.get("/api/canteens", response_model=List[CanteenRef])
def list_canteens():
    """
    List the canteens a phrase can refer to with `at <name>`.
    """
    return rules.known_canteens()


@app.post("/api/parse-query", response_model=StructuredQuery)
def parse_query(request: ParseQueryRequest):
    """
    Parse a search phrase such as "at park on tomorrow vegan no fish".
    """
    return parser_service.parse(request.phrase)


@app.post("/api/classify-meals", response_model=ClassifyMealsResponse)
def classify_meals(request: ClassifyMealsRequest):
    """
    Classify the given meals as visible/hidden and highlighted, keeping their order.
    """
    return menu_service.classify_meals(request)


@app.post("/api/menu", response_model=MenuResponse)
def lookup_menu(request: MenuRequest):
    """
    Fetch and classify the meals a search phrase asks for.
    """
    return menu_service.lookup(request)
