"""
Unit tests for rule and condition validation.
"""

import pytest

from services.rule_validator import validate_condition, validate_rule, validate_rules


def make_rule(condition, **overrides):
    rule = {
        "id": "gold-base",
        "priority": 1,
        "condition": condition,
        "action": {"discountPercent": 10},
    }
    rule.update(overrides)
    return rule


GOLD = {"field": "tier", "operator": "==", "value": "gold"}


class TestRuleShape:

    def test_valid_rule(self):
        assert validate_rule(make_rule(GOLD)) is None

    def test_missing_priority_and_description_are_fine(self):
        assert validate_rule({"id": "r", "condition": GOLD, "action": {}}) is None
        assert validate_rule({"id": "r", "condition": GOLD, "action": {"discountPercent": 0}}) is None

    @pytest.mark.parametrize("rule,message", [
        (None, "Rule is null or undefined"),
        ("gold-base", "Rule must be an object"),
        ({"condition": GOLD, "action": {}}, "Rule must have an id field"),
        ({"id": "", "condition": GOLD, "action": {}}, "Rule must have an id field"),
        ({"id": "r", "action": {"discountPercent": 5}}, "Rule must have a condition field"),
        ({"id": "r", "condition": GOLD}, "Rule must have an action field"),
        ({"id": "r", "condition": GOLD, "action": "10%"}, "Rule action must be an object"),
        ({"id": "r", "condition": GOLD, "action": [10]}, "Rule action must be an object"),
    ])
    def test_shape_errors(self, rule, message):
        assert validate_rule(rule) == message

    def test_checks_short_circuit_in_order(self):
        # both id and condition missing: id is reported first
        assert validate_rule({"action": {}}) == "Rule must have an id field"


class TestConditionTree:

    def test_unknown_operator(self):
        rule = make_rule({"field": "x", "operator": "??", "value": 1})
        assert validate_rule(rule) == "Invalid condition: Unknown operator: ??"

    def test_simple_without_operator(self):
        assert validate_condition({"field": "tier", "value": "gold"}) == "Simple condition must have an operator"

    @pytest.mark.parametrize("operator", ["IN", "NOT_IN"])
    def test_membership_needs_array(self, operator):
        condition = {"field": "tier", "operator": operator, "value": "gold"}
        assert validate_condition(condition) == f"{operator} operator requires an array value"
        condition["value"] = ["gold"]
        assert validate_condition(condition) is None

    @pytest.mark.parametrize("value", [
        None,
        "2025-12-15..2025-12-31",
        {"start": "2025-12-15"},
        {"end": "2025-12-31"},
        {"start": "", "end": "2025-12-31"},
    ])
    def test_date_range_needs_start_and_end(self, value):
        condition = {"field": "booking_date", "operator": "DATE_RANGE", "value": value}
        assert validate_condition(condition) == "DATE_RANGE requires value with start and end properties"

    def test_is_weekend_needs_no_value(self):
        assert validate_condition({"field": "booking_date", "operator": "IS_WEEKEND"}) is None

    def test_compound_needs_array(self):
        assert validate_condition({"operator": "AND"}) == "AND requires a conditions array"
        assert validate_condition({"operator": "OR", "conditions": GOLD}) == "OR requires a conditions array"

    def test_compound_needs_at_least_one_child(self):
        assert validate_condition({"operator": "OR", "conditions": []}) == "OR requires at least one condition"

    def test_neither_shape(self):
        expected = "Condition must have either a field (simple) or operator with conditions (compound)"
        assert validate_condition({"operator": "XOR", "conditions": [GOLD]}) == expected
        assert validate_condition({"value": 3}) == expected

    def test_non_object_condition(self):
        assert validate_condition("tier == gold") == "Condition must be an object"

    def test_nested_error_reports_path_of_indices(self):
        condition = {"operator": "AND", "conditions": [
            GOLD,
            {"operator": "OR", "conditions": [
                {"field": "total_spend", "operator": ">", "value": 5000},
                {"field": "tier", "operator": "IN", "value": "platinum"},
            ]},
        ]}
        assert validate_rule(make_rule(condition)) == (
            "Invalid condition: Condition[1]: Condition[1]: IN operator requires an array value"
        )

    def test_first_failing_child_wins(self):
        condition = {"operator": "AND", "conditions": [
            {"field": "a", "operator": "??"},
            {"field": "b"},
        ]}
        assert validate_condition(condition) == "Condition[0]: Unknown operator: ??"


class TestValidateRules:

    def test_reports_every_invalid_rule(self):
        rules = [
            make_rule(GOLD),
            {"condition": GOLD, "action": {}},
            make_rule({"operator": "AND", "conditions": []}, id="empty-and"),
            None,
        ]
        assert validate_rules(rules) == [
            {"rule_index": 1, "rule_id": "unknown", "error": "Rule must have an id field"},
            {"rule_index": 2, "rule_id": "empty-and",
             "error": "Invalid condition: AND requires at least one condition"},
            {"rule_index": 3, "rule_id": "unknown", "error": "Rule is null or undefined"},
        ]

    def test_all_valid(self):
        assert validate_rules([make_rule(GOLD), make_rule(GOLD, id="other")]) == []
