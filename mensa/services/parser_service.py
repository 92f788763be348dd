from typing import List, Optional, Set
from mensa.models import CanteenRef, DateSpec, ExcludeKind, RestrictionKind, StructuredQuery
from mensa.services.grammar import Clause, ClauseGrammar, ClauseKind
from mensa.core.logging_config import get_logger

logger = get_logger(__name__)


class QueryParser:
    def __init__(self, grammar: Optional[ClauseGrammar] = None):
        self.grammar = grammar or ClauseGrammar()

    def parse(self, phrase: str) -> StructuredQuery:
        """Parse a search phrase into a StructuredQuery.

        Args:
            phrase: User input, e.g. "at park on tomorrow vegan no fish".

        Returns:
            StructuredQuery holding only what the phrase mentions.

        Raises:
            QueryParseError: if the phrase is not made up entirely of clauses.
        """
        clauses = self.grammar.tokenize(phrase)
        query = self.build(clauses)
        logger.debug(f"Parsed {phrase!r} into {len(clauses)} clause(s): {query}")
        return query

    def build(self, clauses: List[Clause]) -> StructuredQuery:
        """Fold clauses, in phrase order, into one query.

        - location and date: the first occurrence wins, repeats are ignored
        - exclude: every occurrence is added to the set
        - restriction: the last occurrence wins
        """
        location: Optional[CanteenRef] = None
        date: Optional[DateSpec] = None
        excludes: Set[ExcludeKind] = set()
        restriction: Optional[RestrictionKind] = None

        for clause in clauses:
            if clause.kind == ClauseKind.LOCATION:
                if location is None:
                    location = clause.value
                else:
                    logger.info(f"Ignoring repeated location {clause.value.name!r} at position {clause.start}")
            elif clause.kind == ClauseKind.DATE:
                if date is None:
                    date = clause.value
                else:
                    logger.info(f"Ignoring repeated date clause at position {clause.start}")
            elif clause.kind == ClauseKind.EXCLUDE:
                excludes.add(clause.value)
            elif clause.kind == ClauseKind.RESTRICTION:
                restriction = clause.value

        return StructuredQuery(
            location=location,
            date=date,
            excludes=excludes,
            restriction=restriction
        )

parser_service = QueryParser()
