"""
Restricted arithmetic evaluator for plan arguments.

Only numbers, bound variable names, arithmetic operators and a fixed set of
pure math functions are accepted; variables are always passed in explicitly.
"""
import ast
import keyword
import math
import operator
from typing import Callable, Dict, Mapping, Union

Number = Union[int, float]


class ExpressionError(ValueError):
    """An argument expression could not be evaluated."""


_BINARY_OPERATORS: Dict[type, Callable[[Number, Number], Number]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS: Dict[type, Callable[[Number], Number]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

FUNCTIONS: Dict[str, Callable[..., Number]] = {
    "abs": abs,
    "min": min,
    "max": max,
    "round": round,
    "floor": math.floor,
    "ceil": math.ceil,
    "sqrt": math.sqrt,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "atan2": math.atan2,
    "radians": math.radians,
    "degrees": math.degrees,
}

CONSTANTS: Dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
}

# Keeps "2 ** 99999999" from stalling the interpreter
MAX_EXPONENT = 1000


def evaluate(expression: Union[str, Number], variables: Mapping[str, Number] = None) -> float:
    """
    Evaluate an argument expression.

    Args:
        expression: Expression text such as "100 + 10 * i0", or a plain number
        variables: Bound names (loop indices, let-assigned values)

    Returns:
        The numeric value as a float

    Raises:
        ExpressionError: For syntax errors, unbound names, disallowed constructs,
            arithmetic failures, or results that are complex or not finite
    """
    if isinstance(expression, bool):
        raise ExpressionError(f"Not a number: {expression!r}")
    if isinstance(expression, (int, float)):
        return _finite(expression, repr(expression))

    text = str(expression).strip()
    if not text:
        raise ExpressionError("Empty expression")

    try:
        tree = ast.parse(text, mode="eval")
    except SyntaxError as e:
        raise ExpressionError(f"Invalid expression {text!r}: {e.msg}") from e

    try:
        value = _evaluate_node(tree.body, variables or {})
    except (ZeroDivisionError, OverflowError, ValueError, TypeError) as e:
        if isinstance(e, ExpressionError):
            raise
        raise ExpressionError(f"Cannot evaluate {text!r}: {e}") from e
    return _finite(value, repr(text))


def _finite(value: Number, source: str) -> float:
    try:
        value = float(value)
    except OverflowError as e:
        raise ExpressionError(f"{source} is too large") from e
    if not math.isfinite(value):
        raise ExpressionError(f"{source} is not a finite number")
    return value


def _evaluate_node(node: ast.AST, variables: Mapping[str, Number]) -> Number:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
            return node.value
        raise ExpressionError(f"Only numbers are allowed, got {node.value!r}")

    if isinstance(node, ast.Name):
        if node.id in variables:
            return variables[node.id]
        if node.id in CONSTANTS:
            return CONSTANTS[node.id]
        raise ExpressionError(f"Unbound variable '{node.id}'")

    if isinstance(node, ast.BinOp):
        op = _BINARY_OPERATORS.get(type(node.op))
        if op is None:
            raise ExpressionError(f"Operator {type(node.op).__name__} is not allowed")
        left = _evaluate_node(node.left, variables)
        right = _evaluate_node(node.right, variables)
        if isinstance(node.op, ast.Pow) and abs(right) > MAX_EXPONENT:
            raise ExpressionError(f"Exponent {right} is too large")
        result = op(left, right)
        if isinstance(result, complex):
            raise ExpressionError(f"({left}) ** {right} is not a real number")
        return result

    if isinstance(node, ast.UnaryOp):
        op = _UNARY_OPERATORS.get(type(node.op))
        if op is None:
            raise ExpressionError(f"Operator {type(node.op).__name__} is not allowed")
        return op(_evaluate_node(node.operand, variables))

    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.func.id not in FUNCTIONS:
            name = getattr(node.func, "id", type(node.func).__name__)
            raise ExpressionError(f"Function {name} is not allowed")
        if node.keywords:
            raise ExpressionError("Keyword arguments are not allowed")
        args = [_evaluate_node(arg, variables) for arg in node.args]
        return FUNCTIONS[node.func.id](*args)

    raise ExpressionError(f"{type(node).__name__} is not allowed in expressions")


def is_identifier(name: str) -> bool:
    """Whether name can be bound by let (and is not a function or constant)."""
    return (name.isidentifier() and not keyword.iskeyword(name)
            and name not in FUNCTIONS and name not in CONSTANTS)
