import datetime
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from mensa.core import rules
from mensa.models import DateSpec
from mensa.utils.keyword_matcher import Keyword, Vocabulary, skip_whitespace

EXPLICIT_DATE = re.compile(r"(\d{4})-(\d{2})-(\d{2})(?!\w)")


class QueryParseError(Exception):
    """The phrase could not be interpreted as a whole.

    `position` is the character offset where the grammar got stuck and
    `expected` lists what would have been accepted there.
    """

    def __init__(self, phrase: str, position: int, expected: List[str]):
        self.phrase = phrase
        self.position = position
        self.expected = expected
        remainder = phrase[position:].split()
        found = f"'{remainder[0]}'" if remainder else "end of input"
        super().__init__(
            f"Unexpected {found} at position {position}; expected {' or '.join(expected)}"
        )


class ClauseKind(str, Enum):
    LOCATION = "location"
    EXCLUDE = "exclude"
    DATE = "date"
    RESTRICTION = "restriction"


@dataclass(frozen=True)
class Clause:
    kind: ClauseKind
    value: Any
    start: int
    end: int


class _Failures:
    """Keeps the furthest position any alternative reached before failing."""

    def __init__(self):
        self.position = -1
        self.expected: List[str] = []

    def record(self, position: int, expected: str) -> None:
        if position > self.position:
            self.position = position
            self.expected = [expected]
        elif position == self.position and expected not in self.expected:
            self.expected.append(expected)


class ClauseGrammar:
    """Ordered-choice grammar for search phrases.

    phrase      := clause*
    clause      := location | exclude | date | restriction
    location    := "at" canteen
    exclude     := "no" ("pig" | "fish" | "alcohol" | "booze")
    date        := "on" ("today" | "tomorrow" | yyyy-mm-dd | weekday)
    restriction := "vegan" | "vegetarian" | "veggie" | "flexible"
    """

    def __init__(self):
        self._alternatives: List[Tuple[ClauseKind, Callable[[str, int, _Failures], Optional[Tuple[Any, int]]]]] = [
            (ClauseKind.LOCATION, self._location),
            (ClauseKind.EXCLUDE, self._exclude),
            (ClauseKind.DATE, self._date),
            (ClauseKind.RESTRICTION, self._restriction),
        ]

    def tokenize(self, phrase: str) -> List[Clause]:
        """Split a phrase into clauses, in the order they appear.

        Raises:
            QueryParseError: if any part of the phrase is not a complete clause.
        """
        clauses: List[Clause] = []
        pos = skip_whitespace(phrase, 0)
        while pos < len(phrase):
            failures = _Failures()
            clause = self._clause(phrase, pos, failures)
            if clause is None:
                raise QueryParseError(phrase, failures.position, failures.expected)
            clauses.append(clause)
            pos = clause.end
        return clauses

    def _clause(self, phrase: str, pos: int, failures: _Failures) -> Optional[Clause]:
        for kind, alternative in self._alternatives:
            matched = alternative(phrase, pos, failures)
            if matched is not None:
                value, end = matched
                return Clause(kind=kind, value=value, start=pos, end=end)
        return None

    @staticmethod
    def _keyword_then(
        keyword: Keyword,
        argument: Callable[[str, int, _Failures], Optional[Tuple[Any, int]]],
        phrase: str,
        pos: int,
        failures: _Failures,
    ) -> Optional[Tuple[Any, int]]:
        after_keyword = keyword.match(phrase, pos)
        if after_keyword is None:
            failures.record(pos, f"'{keyword.literal}'")
            return None
        return argument(phrase, after_keyword, failures)

    @staticmethod
    def _word(vocabulary: Vocabulary, phrase: str, pos: int, failures: _Failures) -> Optional[Tuple[Any, int]]:
        matched = vocabulary.match(phrase, pos)
        if matched is None:
            failures.record(pos, vocabulary.name)
        return matched

    def _location(self, phrase: str, pos: int, failures: _Failures):
        return self._keyword_then(
            rules.KEYWORD_AT,
            lambda text, at, fails: self._word(rules.CANTEEN_ALIASES, text, at, fails),
            phrase, pos, failures,
        )

    def _exclude(self, phrase: str, pos: int, failures: _Failures):
        return self._keyword_then(
            rules.KEYWORD_NO,
            lambda text, at, fails: self._word(rules.EXCLUDES, text, at, fails),
            phrase, pos, failures,
        )

    def _date(self, phrase: str, pos: int, failures: _Failures):
        return self._keyword_then(rules.KEYWORD_ON, self._date_spec, phrase, pos, failures)

    def _date_spec(self, phrase: str, pos: int, failures: _Failures) -> Optional[Tuple[DateSpec, int]]:
        matched = rules.DATE_WORDS.match(phrase, pos)
        if matched is not None:
            return matched

        explicit = EXPLICIT_DATE.match(phrase, pos)
        if explicit is not None:
            year, month, day = (int(part) for part in explicit.groups())
            try:
                date_spec = DateSpec.explicit(datetime.date(year, month, day))
            except ValueError:
                failures.record(pos, "a valid yyyy-mm-dd date")
                return None
            return date_spec, skip_whitespace(phrase, explicit.end())

        matched = rules.WEEKDAYS.match(phrase, pos)
        if matched is None:
            failures.record(pos, "today, tomorrow, yyyy-mm-dd or a weekday")
        return matched

    def _restriction(self, phrase: str, pos: int, failures: _Failures):
        return self._word(rules.RESTRICTIONS, phrase, pos, failures)
