# services/conditions.py

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence, Union


class Operator(str, Enum):
    EQ = "=="
    NEQ = "!="
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="
    IN = "IN"
    NOT_IN = "NOT_IN"
    CONTAINS = "CONTAINS"
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"
    IS_WEEKEND = "IS_WEEKEND"
    DATE_RANGE = "DATE_RANGE"


COMPOUND_OPERATORS = ("AND", "OR")

VALID_OPERATORS = tuple(op.value for op in Operator)


@dataclass(frozen=True)
class SimpleCondition:
    field: str
    operator: Any
    value: Any = None


@dataclass(frozen=True)
class CompoundCondition:
    operator: str
    # children stay raw and are classified lazily while walking the tree
    conditions: Sequence[Any]


@dataclass(frozen=True)
class MalformedCondition:
    raw: Any
    reason: str


Condition = Union[SimpleCondition, CompoundCondition, MalformedCondition]


def classify_condition(node: Any) -> Condition:
    """
    Turn one raw condition node (as parsed from JSON) into its variant.

    Compound shape wins over simple shape, so {"operator": "AND", "field": ...}
    is treated as a compound node. Anything that is neither comes back as
    MalformedCondition carrying a human-readable reason.
    """
    if not isinstance(node, Mapping):
        return MalformedCondition(node, "Condition must be an object")

    operator = node.get("operator")

    if operator in COMPOUND_OPERATORS:
        conditions = node.get("conditions")
        if not isinstance(conditions, (list, tuple)):
            return MalformedCondition(node, f"{operator} requires a conditions array")
        return CompoundCondition(operator=operator, conditions=conditions)

    if node.get("field"):
        return SimpleCondition(
            field=node["field"],
            operator=operator,
            value=node.get("value"),
        )

    return MalformedCondition(
        node,
        "Condition must have either a field (simple) or operator with conditions (compound)",
    )
