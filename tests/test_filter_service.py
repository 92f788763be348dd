import pytest
from mensa.core.tags import Tag
from mensa.models import ExcludeKind, RestrictionKind, StructuredQuery
from mensa.services.filter_service import (
    CategoryPattern,
    FilterEngine,
    InvalidPatternError,
    NamePattern,
    RuleSet,
    TagPattern,
    rules_for_query,
)


class TestPatterns:

    def test_tag_pattern_matches_any_tag(self, make_meal):
        meal = make_meal(tags=[Tag.FISH, Tag.GLUTEN])
        assert TagPattern(Tag.GLUTEN).matches(meal)
        assert not TagPattern(Tag.PIG).matches(meal)

    def test_tag_pattern_from_name_or_id(self):
        assert TagPattern.from_string("vegan").tag == Tag.VEGAN
        assert TagPattern.from_string(str(Tag.FISH.id)).tag == Tag.FISH

    def test_unknown_tag_is_invalid(self):
        with pytest.raises(InvalidPatternError):
            TagPattern.from_string("Unicorn")

    def test_category_pattern_is_case_sensitive_by_default(self, make_meal):
        meal = make_meal(category="Vegetarisches Gericht")
        assert CategoryPattern.from_string("Vegetarisch").matches(meal)
        assert not CategoryPattern.from_string("vegetarisch").matches(meal)
        assert CategoryPattern.from_string("(?i)vegetarisch").matches(meal)

    def test_name_pattern_searches_meal_name(self, make_meal):
        meal = make_meal(category="Pasta", name="Spaghetti Bolognese")
        assert NamePattern.from_string("(?i)bolognese").matches(meal)
        assert not NamePattern.from_string("Pasta").matches(meal)

    def test_bad_regex_fails_at_construction(self):
        with pytest.raises(InvalidPatternError) as exc_info:
            RuleSet.from_parts(deny_categories=["(unclosed"])
        assert exc_info.value.pattern == "(unclosed"


class TestRuleSet:

    def test_empty_rule_set_permits_everything(self, sample_meals, empty_rules):
        assert all(empty_rules.evaluate(meal) for meal in sample_meals)

    def test_deny_only(self, sample_meals):
        rules = RuleSet.from_parts(deny_tags=["Pig", "Fish"])
        assert [rules.evaluate(m) for m in sample_meals] == [True, False, False, True, True]

    def test_allow_only(self, sample_meals):
        rules = RuleSet.from_parts(allow_tags=["Vegan"])
        assert [rules.evaluate(m) for m in sample_meals] == [False, False, False, True, True]

    def test_deny_wins_over_allow(self, sample_meals):
        rules = RuleSet.from_parts(allow_tags=["Vegan"], deny_categories=["(?i)smoothie"])
        assert [rules.evaluate(m) for m in sample_meals] == [False, False, False, True, False]

    def test_allow_matches_across_pattern_kinds(self, sample_meals):
        rules = RuleSet.from_parts(allow_tags=["Vegetarian"], allow_categories=["^Fisch"])
        assert [rules.evaluate(m) for m in sample_meals] == [True, False, True, False, False]

    def test_name_allow_and_deny(self, make_meal):
        curry = make_meal(1, name="Linsencurry mit Reis")
        schnitzel = make_meal(2, name="Schnitzel mit Pommes")
        salad = make_meal(3, name="Curry-Salat")

        allow = RuleSet.from_parts(allow_names=["(?i)curry"])
        assert [allow.evaluate(m) for m in (curry, schnitzel, salad)] == [True, False, True]

        both = RuleSet.from_parts(allow_names=["(?i)curry"], deny_names=["Salat"])
        assert [both.evaluate(m) for m in (curry, schnitzel, salad)] == [True, False, False]

        deny = RuleSet.from_parts(deny_names=["Schnitzel"])
        assert [deny.evaluate(m) for m in (curry, schnitzel, salad)] == [True, False, True]

    def test_bad_name_regex_is_invalid(self):
        with pytest.raises(InvalidPatternError):
            RuleSet.from_parts(allow_names=["[a-"])

    def test_joined_extends_both_lists(self):
        left = RuleSet.from_parts(allow_tags=["Vegan"])
        right = RuleSet.from_parts(deny_tags=["Pig"])
        joined = left.joined(right)
        assert joined.allow == (TagPattern(Tag.VEGAN),)
        assert joined.deny == (TagPattern(Tag.PIG),)


class TestQueryRules:

    def test_excludes_become_denies(self):
        query = StructuredQuery(excludes={ExcludeKind.FISH, ExcludeKind.PIG})
        rules = rules_for_query(query)
        assert set(rules.deny) == {TagPattern(Tag.FISH), TagPattern(Tag.PIG)}
        assert rules.allow == ()

    def test_vegetarian_allows_vegan_meals(self, make_meal):
        rules = rules_for_query(StructuredQuery(restriction=RestrictionKind.VEGETARIAN))
        assert rules.evaluate(make_meal(tags=[Tag.VEGAN]))
        assert rules.evaluate(make_meal(tags=[Tag.VEGETARIAN]))
        assert not rules.evaluate(make_meal(tags=[Tag.COW]))

    def test_flexible_restricts_nothing(self):
        assert rules_for_query(StructuredQuery(restriction=RestrictionKind.FLEXIBLE)).is_empty


class TestFilterEngine:

    def test_default_permit_and_no_highlight(self, sample_meals, empty_rules):
        engine = FilterEngine(empty_rules, empty_rules)
        for classified in engine.classify_all(sample_meals):
            assert classified.classification.visible
            assert not classified.classification.highlighted

    def test_highlight_is_independent_of_filter(self, sample_meals):
        engine = FilterEngine(
            filter_rules=RuleSet.from_parts(deny_categories=["Smoothie"]),
            favorite_rules=RuleSet.from_parts(allow_tags=["Vegan"])
        )
        results = {c.meal.id: c.classification for c in engine.classify_all(sample_meals)}
        assert results[4].visible and results[4].highlighted
        # A highlight never overrides a filter deny
        assert not results[5].visible
        assert results[5].highlighted
        assert results[1].visible and not results[1].highlighted

    def test_favorites_with_only_denies_highlight_nothing(self, sample_meals, empty_rules):
        engine = FilterEngine(empty_rules, RuleSet.from_parts(deny_categories=["Salat"]))
        assert not any(c.classification.highlighted for c in engine.classify_all(sample_meals))

    def test_name_favorites_highlight(self, make_meal, empty_rules):
        engine = FilterEngine(empty_rules, RuleSet.from_parts(allow_names=["Curry"]))
        assert engine.classify(make_meal(name="Linsencurry")).highlighted is False
        assert engine.classify(make_meal(name="Curry Wurst")).highlighted

    def test_restrictions_narrow_visibility(self, sample_meals, empty_rules):
        query = StructuredQuery(restriction=RestrictionKind.VEGAN)
        engine = FilterEngine(empty_rules, empty_rules, [rules_for_query(query)])
        visible = [c.meal.id for c in engine.classify_all(sample_meals) if c.classification.visible]
        assert visible == [4, 5]

    def test_classify_all_keeps_order_and_length(self, sample_meals):
        engine = FilterEngine(RuleSet.from_parts(allow_tags=["Vegan"]), RuleSet())
        classified = engine.classify_all(sample_meals)
        assert [c.meal.id for c in classified] == [1, 2, 3, 4, 5]

    def test_classification_is_idempotent(self, sample_meals):
        engine = FilterEngine(
            RuleSet.from_parts(deny_tags=["Fish"]),
            RuleSet.from_parts(allow_categories=["Gericht"])
        )
        for meal in sample_meals:
            assert engine.classify(meal) == engine.classify(meal)
