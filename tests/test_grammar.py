import datetime
import pytest
from mensa.models import DateSpec, ExcludeKind, RestrictionKind
from mensa.services.grammar import ClauseGrammar, ClauseKind, QueryParseError


@pytest.fixture
def grammar():
    return ClauseGrammar()


class TestClauseGrammar:

    def test_empty_phrase_has_no_clauses(self, grammar):
        assert grammar.tokenize("") == []
        assert grammar.tokenize(" \t ") == []

    def test_clauses_in_phrase_order(self, grammar):
        clauses = grammar.tokenize("vegan at park no fish on today")
        assert [c.kind for c in clauses] == [
            ClauseKind.RESTRICTION,
            ClauseKind.LOCATION,
            ClauseKind.EXCLUDE,
            ClauseKind.DATE,
        ]

    def test_clause_offsets(self, grammar):
        clauses = grammar.tokenize("no fish  vegan")
        assert (clauses[0].start, clauses[0].end) == (0, 9)
        assert (clauses[1].start, clauses[1].end) == (9, 14)

    def test_location_aliases(self, grammar):
        for phrase in ["at main", "at Mensa am Park", "at park", "at MENSA AM PARK"]:
            clause, = grammar.tokenize(phrase)
            assert clause.value.id == 106

        clause, = grammar.tokenize("at Tierklinik")
        assert clause.value.id == 170

    def test_department_nicknames_share_a_canteen(self, grammar):
        ids = {grammar.tokenize(f"at {name}")[0].value.id for name in ["physics", "chemistry", "chem", "chemie", "physik"]}
        assert ids == {153}

    def test_location_all(self, grammar):
        clause, = grammar.tokenize("at all")
        assert clause.value.is_all

    def test_excludes(self, grammar):
        values = [c.value for c in grammar.tokenize("no pig no fish no alcohol no booze")]
        assert values == [ExcludeKind.PIG, ExcludeKind.FISH, ExcludeKind.ALCOHOL, ExcludeKind.ALCOHOL]

    def test_restrictions(self, grammar):
        values = [c.value for c in grammar.tokenize("vegan VEGGIe vegetarian flexible")]
        assert values == [
            RestrictionKind.VEGAN,
            RestrictionKind.VEGETARIAN,
            RestrictionKind.VEGETARIAN,
            RestrictionKind.FLEXIBLE,
        ]

    def test_dates(self, grammar):
        assert grammar.tokenize("on today")[0].value == DateSpec.today()
        assert grammar.tokenize("on Tomorrow")[0].value == DateSpec.tomorrow()
        assert grammar.tokenize("on 2024-03-01")[0].value == DateSpec.explicit(datetime.date(2024, 3, 1))
        assert grammar.tokenize("on wed")[0].value == DateSpec.on_weekday(2)
        assert grammar.tokenize("on Wednesday")[0].value == DateSpec.on_weekday(2)
        assert grammar.tokenize("on sun")[0].value == DateSpec.on_weekday(6)

    def test_tabs_between_clauses(self, grammar):
        assert len(grammar.tokenize("\tvegan\tno\tfish\t")) == 2


class TestParseErrors:

    def test_unknown_canteen_reports_alias_offset(self, grammar):
        with pytest.raises(QueryParseError) as exc_info:
            grammar.tokenize("at Nowhereville")
        assert exc_info.value.position == 3
        assert exc_info.value.expected == ["canteen name"]
        assert "Nowhereville" in str(exc_info.value)

    def test_incomplete_clause(self, grammar):
        with pytest.raises(QueryParseError) as exc_info:
            grammar.tokenize("vegan at")
        assert exc_info.value.position == 8
        assert "end of input" in str(exc_info.value)

    def test_unknown_exclude(self, grammar):
        with pytest.raises(QueryParseError) as exc_info:
            grammar.tokenize("no diff")
        assert exc_info.value.position == 3

    def test_unknown_date(self, grammar):
        with pytest.raises(QueryParseError) as exc_info:
            grammar.tokenize("on some other day")
        assert exc_info.value.position == 3

    def test_impossible_calendar_date(self, grammar):
        with pytest.raises(QueryParseError) as exc_info:
            grammar.tokenize("on 2023-02-30")
        assert exc_info.value.position == 3
        assert exc_info.value.expected == ["a valid yyyy-mm-dd date"]

    def test_leftover_word_fails_whole_phrase(self, grammar):
        with pytest.raises(QueryParseError) as exc_info:
            grammar.tokenize("at park vegan please")
        assert exc_info.value.position == 14
        assert exc_info.value.phrase == "at park vegan please"

    def test_glued_words_are_not_clauses(self, grammar):
        with pytest.raises(QueryParseError) as exc_info:
            grammar.tokenize("veganvegan")
        assert exc_info.value.position == 0
