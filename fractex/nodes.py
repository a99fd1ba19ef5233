"""
Expression tree produced by the parser and consumed by the translator.

The node kinds form a closed set: every consumer dispatches over exactly
these classes and treats anything else as an internal error.
"""

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class NumberNode:
    value: float


@dataclass(frozen=True)
class VariableNode:
    name: str


@dataclass(frozen=True)
class BinaryNode:
    op: str
    left: "ExpressionNode"
    right: "ExpressionNode"


@dataclass(frozen=True)
class SqrtNode:
    argument: "ExpressionNode"


@dataclass(frozen=True)
class FunctionNode:
    name: str
    argument: "ExpressionNode"


@dataclass(frozen=True)
class CallNode:
    """An unrecognized function-like call, passed through to the output as is."""

    name: str
    args: Tuple["ExpressionNode", ...]


ExpressionNode = Union[
    NumberNode, VariableNode, BinaryNode, SqrtNode, FunctionNode, CallNode
]
