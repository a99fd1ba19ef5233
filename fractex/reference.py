"""
Reference evaluation of expression trees with sympy.

This is independent of the GLSL translator: the tree is rebuilt as a sympy
expression and evaluated numerically, which gives an exact complex-analysis
baseline for checking the generated formulas.
"""

from typing import Dict, Optional

import sympy as sp

from .errors import TranslationError
from .logs import debug_print
from .nodes import (
    BinaryNode,
    CallNode,
    ExpressionNode,
    FunctionNode,
    NumberNode,
    SqrtNode,
    VariableNode,
)


SYMPY_FUNCTIONS = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "exp": sp.exp,
    "log": sp.log,
    "sqrt": sp.sqrt,
    "abs": sp.Abs,
}

SYMPY_OPERATORS = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": lambda a, b: a / b,
    "**": lambda a, b: a**b,
}


def to_sympy(node: ExpressionNode) -> sp.Expr:
    if isinstance(node, NumberNode):
        if float(node.value).is_integer():
            return sp.Integer(int(node.value))
        return sp.Float(node.value)
    if isinstance(node, VariableNode):
        if node.name == "i":
            return sp.I
        return sp.Symbol(node.name)
    if isinstance(node, BinaryNode):
        if node.op not in SYMPY_OPERATORS:
            raise TranslationError(f"Unsupported operator '{node.op}'.")
        return SYMPY_OPERATORS[node.op](to_sympy(node.left), to_sympy(node.right))
    if isinstance(node, SqrtNode):
        return sp.sqrt(to_sympy(node.argument))
    if isinstance(node, FunctionNode):
        if node.name not in SYMPY_FUNCTIONS:
            raise TranslationError(f"Unsupported function '{node.name}'.")
        return SYMPY_FUNCTIONS[node.name](to_sympy(node.argument))
    if isinstance(node, CallNode):
        return sp.Function(node.name)(*[to_sympy(arg) for arg in node.args])
    raise TranslationError(
        f"Unknown or unsupported node type for sympy conversion: {type(node)}"
    )


def evaluate(
    node: ExpressionNode,
    z: complex = 0j,
    c: complex = 0j,
    variables: Optional[Dict[str, float]] = None,
) -> complex:
    expr = to_sympy(node)
    subs = {sp.Symbol("z"): sp.sympify(z), sp.Symbol("c"): sp.sympify(c)}
    for name, value in (variables or {}).items():
        subs[sp.Symbol(name)] = sp.sympify(value)

    missing = expr.free_symbols - set(subs)
    if missing:
        names = ", ".join(sorted(str(symbol) for symbol in missing))
        raise TranslationError(f"No value bound for: {names}")

    result = complex(expr.evalf(subs=subs))
    debug_print(f"reference value of {expr} = {result}")
    return result
