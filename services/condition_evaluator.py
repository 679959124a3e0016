# services/condition_evaluator.py

from typing import Any, Callable, Dict, Mapping

from services.coercion import is_number, to_number, to_string
from services.conditions import (
    CompoundCondition,
    Operator,
    SimpleCondition,
    classify_condition,
)
from services.date_utils import is_date_in_range, is_weekend


class _Missing:
    """Marks a field absent from the record, as opposed to one holding null."""

    def __repr__(self):
        return "MISSING"


MISSING = _Missing()


def resolve_field(path: str, record: Mapping, default: Any = None) -> Any:
    """Walk a dotted path like "customer.tier"; default if any segment is missing."""
    if not path or record is None:
        return default

    value: Any = record
    for part in str(path).split("."):
        if isinstance(value, Mapping):
            value = value.get(part, default)
        elif isinstance(value, (list, tuple)) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return default
    return value


def _strict_equals(left: Any, right: Any) -> bool:
    # True must not equal 1, and "1" must not equal 1
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) and is_number(right):
        return left == right
    return type(left) is type(right) and left == right


def _contains(values: Any, item: Any) -> bool:
    return any(_strict_equals(candidate, item) for candidate in values)


def _string_test(test: Callable[[str, str], bool]) -> Callable[[Any, Any], bool]:
    def apply(data_value: Any, value: Any) -> bool:
        if data_value is None or data_value is MISSING:
            return False
        return test(to_string(data_value), to_string(value))
    return apply


def _date_range(data_value: Any, value: Any) -> bool:
    if not isinstance(value, Mapping):
        return False
    return is_date_in_range(data_value, value.get("start"), value.get("end"))


OPERATIONS: Dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQ: _strict_equals,
    Operator.NEQ: lambda data_value, value: not _strict_equals(data_value, value),
    Operator.GT: lambda data_value, value: to_number(data_value) > to_number(value),
    Operator.LT: lambda data_value, value: to_number(data_value) < to_number(value),
    Operator.GTE: lambda data_value, value: to_number(data_value) >= to_number(value),
    Operator.LTE: lambda data_value, value: to_number(data_value) <= to_number(value),
    Operator.IN: lambda data_value, value: isinstance(value, (list, tuple)) and _contains(value, data_value),
    Operator.NOT_IN: lambda data_value, value: isinstance(value, (list, tuple)) and not _contains(value, data_value),
    Operator.CONTAINS: _string_test(lambda text, part: part in text),
    Operator.STARTS_WITH: _string_test(lambda text, part: text.startswith(part)),
    Operator.ENDS_WITH: _string_test(lambda text, part: text.endswith(part)),
    Operator.IS_WEEKEND: lambda data_value, value: is_weekend(data_value),
    Operator.DATE_RANGE: _date_range,
}


def _evaluate_simple(condition: SimpleCondition, data: Mapping) -> bool:
    operation = OPERATIONS.get(condition.operator) if isinstance(condition.operator, str) else None
    if operation is None:
        print(f"[ConditionEvaluator] Unknown operator: {condition.operator}")
        return False

    # MISSING never equals null, so == null only matches an explicit null
    data_value = resolve_field(condition.field, data, default=MISSING)
    return operation(data_value, condition.value)


def evaluate(condition: Any, data: Mapping) -> bool:
    """
    Evaluate a condition tree against a data record.

    An absent condition always matches. Compound nodes short-circuit;
    malformed nodes and unknown operators never match.
    """
    if not condition:
        return True

    node = classify_condition(condition)

    if isinstance(node, CompoundCondition):
        if node.operator == "AND":
            return all(evaluate(cond, data) for cond in node.conditions)
        return any(evaluate(cond, data) for cond in node.conditions)

    if isinstance(node, SimpleCondition):
        return _evaluate_simple(node, data)

    # MalformedCondition
    print(f"[ConditionEvaluator] Skipping malformed condition: {node.reason}")
    return False
