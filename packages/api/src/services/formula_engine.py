# This project was developed with assistance from AI tools.
"""Custom underwriting formula engine.

Underwriters can replace the built-in offer formulas with their own
arithmetic expressions over a fixed set of named variables, e.g.::

    ARV * (1 - ProfitPct / 100) - Repairs - Holding - TotalClose

Expressions are parsed with :mod:`ast` and walked by a small evaluator that
only understands numbers, variable names, parentheses and the binary
operators ``+ - * / %`` (plus unary sign). Nothing is ever passed to
``eval``.

Evaluation never raises: empty, malformed or non-finite expressions yield 0,
unknown variable names evaluate as 0, and every result is rounded to whole
dollars and floored at zero like the built-in calculator.
"""

import ast
import logging
import math
import operator
import re
from dataclasses import dataclass

from .calculator import floor_offer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormulaVariable:
    id: str
    name: str
    label: str
    description: str
    default_value: float


FORMULA_VARIABLES: tuple[FormulaVariable, ...] = (
    FormulaVariable("arv", "ARV", "After Repair Value", "Expected value after repairs", 0),
    FormulaVariable("repair_costs", "Repairs", "Repair Costs", "Total estimated repair costs", 0),
    FormulaVariable(
        "holding_months", "Months", "Holding Months", "Number of months holding property", 6
    ),
    FormulaVariable(
        "monthly_holding_cost", "Monthly", "Monthly Holding Cost", "Monthly expenses while holding", 1500
    ),
    FormulaVariable(
        "total_holding_costs", "Holding", "Total Holding Costs", "Months x Monthly cost", 9000
    ),
    FormulaVariable(
        "buying_closing_costs", "BuyClose", "Buying Closing Costs", "Costs when purchasing", 5000
    ),
    FormulaVariable(
        "selling_closing_costs", "SellClose", "Selling Closing Costs", "Costs when selling", 0
    ),
    FormulaVariable(
        "total_closing_costs", "TotalClose", "Total Closing Costs", "Buy + Sell closing costs", 0
    ),
    FormulaVariable(
        "target_profit_percent", "ProfitPct", "Target Profit %", "Desired profit percentage", 20
    ),
    FormulaVariable("buy_box_percent", "BuyBoxPct", "Buy Box %", "Investor buy box percentage", 70),
    FormulaVariable("asking_price", "Asking", "Asking Price", "Seller's asking price", 0),
)

VARIABLE_NAMES: frozenset[str] = frozenset(v.name for v in FORMULA_VARIABLES)

DEFAULT_FORMULAS: dict[str, dict] = {
    "mao": {
        "id": "mao",
        "name": "Maximum Allowable Offer",
        "expression": "ARV * (1 - ProfitPct / 100) - Repairs - Holding - TotalClose",
        "description": "MAO = ARV x (1 - profit%) - repairs - holding - closing",
        "is_default": True,
    },
    "rule70": {
        "id": "rule70",
        "name": "70% Rule Offer",
        "expression": "ARV * 0.70 - Repairs",
        "description": "ARV x 70% - repairs",
        "is_default": True,
    },
    "buy_box": {
        "id": "buy_box",
        "name": "Buy Box Offer",
        "expression": "(ARV * BuyBoxPct / 100) - Repairs",
        "description": "(ARV x Buy Box %) - Rehab",
        "is_default": True,
    },
}

_ALLOWED_CHARS = re.compile(r"^[\w\s.+\-*/()%]+$")

MAX_FORMULA_LENGTH = 500

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: operator.mod,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


class FormulaError(ValueError):
    """Raised by the evaluator walk for any unsupported construct."""


def build_formula_context(
    arv: float = 0,
    repair_costs: float = 0,
    holding_months: float = 0,
    monthly_holding_cost: float = 0,
    buying_closing_costs: float = 0,
    selling_closing_costs: float = 0,
    target_profit_percent: float = 0,
    buy_box_percent: float = 0,
    asking_price: float = 0,
) -> dict[str, float]:
    """Map raw inputs to formula variable names, adding the derived totals."""
    return {
        "ARV": arv,
        "Repairs": repair_costs,
        "Months": holding_months,
        "Monthly": monthly_holding_cost,
        "BuyClose": buying_closing_costs,
        "SellClose": selling_closing_costs,
        "ProfitPct": target_profit_percent,
        "BuyBoxPct": buy_box_percent,
        "Asking": asking_price,
        "Holding": holding_months * monthly_holding_cost,
        "TotalClose": buying_closing_costs + selling_closing_costs,
    }


def _eval_node(node: ast.AST, context: dict[str, float]) -> float:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body, context)
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, int | float):
            raise FormulaError(f"Unsupported literal: {node.value!r}")
        return float(node.value)
    if isinstance(node, ast.Name):
        return float(context.get(node.id, 0))
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        left = _eval_node(node.left, context)
        right = _eval_node(node.right, context)
        return _BINARY_OPS[type(node.op)](left, right)
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand, context))
    raise FormulaError(f"Unsupported expression element: {type(node).__name__}")


def _parse(expression: str) -> ast.Expression:
    if len(expression) > MAX_FORMULA_LENGTH:
        raise FormulaError("Formula is too long")
    if not _ALLOWED_CHARS.match(expression):
        raise FormulaError("Invalid characters in formula")
    try:
        return ast.parse(expression.strip(), mode="eval")
    except (SyntaxError, RecursionError, MemoryError) as exc:
        raise FormulaError("Invalid formula syntax") from exc


def evaluate_formula(expression: str | None, context: dict[str, float]) -> int:
    """Evaluate an expression against a variable context. Never raises."""
    if not expression or not expression.strip():
        return 0

    try:
        result = _eval_node(_parse(expression), context)
    except (FormulaError, ArithmeticError, RecursionError, MemoryError) as exc:
        logger.debug("Formula evaluation failed for %r: %s", expression, exc)
        return 0

    if not math.isfinite(result):
        return 0
    return floor_offer(result)


def _check_parentheses(expression: str) -> bool:
    depth = 0
    for char in expression:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if depth < 0:
            return False
    return depth == 0


def validate_formula(expression: str | None) -> tuple[bool, str | None]:
    """Check that an expression is safe to save. Returns ``(valid, error)``."""
    if not expression or not expression.strip():
        return False, "Formula is empty"
    if len(expression) > MAX_FORMULA_LENGTH:
        return False, f"Formula is longer than {MAX_FORMULA_LENGTH} characters"
    if not _ALLOWED_CHARS.match(expression):
        return False, "Invalid characters in formula"
    if not _check_parentheses(expression):
        return False, "Unbalanced parentheses"

    try:
        tree = _parse(expression)
        dummy = {name: 100.0 for name in VARIABLE_NAMES}
        _eval_node(tree, dummy)
    except ZeroDivisionError:
        # A literal division by zero is still a structurally valid formula
        pass
    except (FormulaError, ArithmeticError, RecursionError, MemoryError):
        return False, "Invalid formula syntax"

    unknown = sorted(
        {n.id for n in ast.walk(tree) if isinstance(n, ast.Name)} - VARIABLE_NAMES
    )
    if unknown:
        return False, f"Unknown variables: {', '.join(unknown)}"
    return True, None
