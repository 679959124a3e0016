# services/rule_engine.py

import copy
import math
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Dict, List, Mapping, Optional, Tuple

from services.coercion import is_number, to_number, to_string
from services.condition_evaluator import evaluate, resolve_field
from services.rule_validator import validate_rules

DEFAULT_PRIORITY = 999
NO_RULES_MESSAGE = "No rules applied"


def round2(value: float) -> float:
    """Round half away from zero to 2 decimals (1.005 -> 1.01)."""
    # enough digits for any finite float (max ~1.8e308) plus the cents
    with localcontext() as ctx:
        ctx.prec = 400
        return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class AppliedRule:
    rule_id: str
    description: str
    discount_percent: float
    message: str


@dataclass(frozen=True)
class EvaluationResult:
    original_amount: float
    applied_rules: Tuple[AppliedRule, ...] = field(default_factory=tuple)
    total_discount_percent: float = 0
    discount_amount: float = 0.0
    final_amount: float = 0.0
    message: str = NO_RULES_MESSAGE

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["applied_rules"] = [asdict(rule) for rule in self.applied_rules]
        return result


def _priority_of(rule: Mapping) -> float:
    priority = rule.get("priority")
    if not is_number(priority) or not math.isfinite(priority):
        return DEFAULT_PRIORITY
    return priority


def _discount_of(action: Mapping) -> float:
    discount = action.get("discountPercent")
    if not is_number(discount) or not math.isfinite(discount):
        return 0
    return discount


class RuleEngine:
    """
    Holds a rule set and applies it to data records.

    The rule set is an immutable tuple that load_rules replaces with a
    single reference assignment (copy-on-write). apply_rules reads that
    reference once, so an in-flight call keeps the snapshot it started with
    and readers need no lock.
    """

    def __init__(self, rules: Optional[List[dict]] = None, amount_field: str = "total_spend"):
        self.amount_field = amount_field
        self._rules: Tuple[dict, ...] = ()
        self.load_rules(rules or [])

    def load_rules(self, rules: Optional[List[dict]]) -> List[Dict[str, Any]]:
        """
        Replace the rule set. Invalid rules are logged and kept;
        the validation problems are returned rather than raised.
        """
        new_rules = tuple(copy.deepcopy(list(rules or [])))
        problems = validate_rules(list(new_rules))

        for problem in problems:
            print(f"[RuleEngine] Rule validation warning for \"{problem['rule_id']}\": {problem['error']}")

        self._rules = new_rules

        print(f"[RuleEngine] Loaded {len(new_rules)} rules ({len(problems)} with warnings)")
        return problems

    def get_rules(self) -> List[dict]:
        return copy.deepcopy(list(self._rules))

    def apply_rules(self, data: Mapping) -> EvaluationResult:
        rules = self._rules  # single snapshot for the whole call

        # sorted() is stable, equal priorities keep load order
        sorted_rules = sorted(
            (rule for rule in rules if isinstance(rule, Mapping)),
            key=_priority_of,
        )

        original_amount = to_number(resolve_field(self.amount_field, data))
        if not math.isfinite(original_amount):
            original_amount = 0.0

        applied: List[AppliedRule] = []
        applied_ids: List[Any] = []
        total_discount_percent = 0

        for rule in sorted_rules:
            if not evaluate(rule.get("condition"), data):
                continue

            action = rule.get("action")
            if not isinstance(action, Mapping):
                action = {}

            is_stackable = action.get("stackable") is not False
            rule_id = rule.get("id")

            # non-stackable only blocks a repeat of the same rule id
            if not is_stackable and rule_id in applied_ids:
                continue

            discount_percent = _discount_of(action)
            applied.append(AppliedRule(
                rule_id=rule_id,
                description=rule.get("description") or rule_id,
                discount_percent=discount_percent,
                message=action.get("message") or "",
            ))
            total_discount_percent += discount_percent
            applied_ids.append(rule_id)

        discount_amount = round2(original_amount * total_discount_percent / 100)
        final_amount = round2(original_amount - discount_amount)

        if not applied:
            message = NO_RULES_MESSAGE
        elif len(applied) == 1:
            message = applied[0].message
        else:
            message = f"{len(applied)} rules applied for {to_string(total_discount_percent)}% total discount"

        return EvaluationResult(
            original_amount=original_amount,
            applied_rules=tuple(applied),
            total_discount_percent=total_discount_percent,
            discount_amount=discount_amount,
            final_amount=final_amount,
            message=message,
        )
