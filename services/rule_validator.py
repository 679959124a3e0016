# services/rule_validator.py

from typing import Any, Dict, List, Mapping, Optional

from services.conditions import (
    CompoundCondition,
    MalformedCondition,
    Operator,
    VALID_OPERATORS,
    classify_condition,
)


def _is_absent(value: Any) -> bool:
    # empty mappings and lists still count as present
    if isinstance(value, (Mapping, list, tuple)):
        return False
    return not value


def validate_rule(rule: Any) -> Optional[str]:
    """
    Check a rule's shape before the engine trusts it.

    Returns a description of the first problem found, or None when the
    rule is well-formed. Never raises.
    """
    if rule is None:
        return "Rule is null or undefined"

    if not isinstance(rule, Mapping):
        return "Rule must be an object"

    if _is_absent(rule.get("id")):
        return "Rule must have an id field"

    if _is_absent(rule.get("condition")):
        return "Rule must have a condition field"

    if _is_absent(rule.get("action")):
        return "Rule must have an action field"

    if not isinstance(rule["action"], Mapping):
        return "Rule action must be an object"

    condition_error = validate_condition(rule["condition"])
    if condition_error:
        return f"Invalid condition: {condition_error}"

    return None


def validate_condition(condition: Any) -> Optional[str]:
    node = classify_condition(condition)

    if isinstance(node, MalformedCondition):
        return node.reason

    if isinstance(node, CompoundCondition):
        if len(node.conditions) == 0:
            return f"{node.operator} requires at least one condition"

        for index, child in enumerate(node.conditions):
            error = validate_condition(child)
            if error:
                return f"Condition[{index}]: {error}"
        return None

    # SimpleCondition
    if not node.operator:
        return "Simple condition must have an operator"

    if node.operator not in VALID_OPERATORS:
        return f"Unknown operator: {node.operator}"

    operator = Operator(node.operator)

    if operator in (Operator.IN, Operator.NOT_IN) and not isinstance(node.value, (list, tuple)):
        return f"{operator.value} operator requires an array value"

    if operator == Operator.DATE_RANGE:
        value = node.value
        if not isinstance(value, Mapping) or not value.get("start") or not value.get("end"):
            return "DATE_RANGE requires value with start and end properties"

    return None


def validate_rules(rules: List[Any]) -> List[Dict[str, Any]]:
    """Validate a batch; one entry per invalid rule, in input order."""
    errors = []
    for index, rule in enumerate(rules):
        error = validate_rule(rule)
        if error:
            rule_id = rule.get("id") if isinstance(rule, Mapping) else None
            errors.append({
                "rule_index": index,
                "rule_id": rule_id or "unknown",
                "error": error,
            })
    return errors
