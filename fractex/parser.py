from typing import List, Sequence

from .errors import ParseError
from .logs import debug_print, verbose_print
from .nodes import (
    BinaryNode,
    CallNode,
    ExpressionNode,
    FunctionNode,
    NumberNode,
    SqrtNode,
    VariableNode,
)
from .tokenizer import CLOSE, COMMA, NEGATE, OPEN, TIMES, Token, TokenKind


MISMATCHED_PARENTHESES = (
    "Mismatched parentheses. Ensure every '(' has a corresponding ')' "
    "in your equation."
)


class Parser:
    def __init__(self, tokens: Sequence[Token]):
        self.tokens = list(tokens)
        self.index = 0

    def peek(self):
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def at_operator(self, *values: str) -> bool:
        token = self.peek()
        return (
            token is not None
            and token.kind is TokenKind.OPERATOR
            and token.value in values
        )

    def parse(self) -> ExpressionNode:
        if not self.tokens:
            raise ParseError(
                "Empty expression. Please provide a valid mathematical expression."
            )
        node = self.parse_expression()
        leftover = self.peek()
        if leftover is not None:
            if leftover == CLOSE:
                raise ParseError(MISMATCHED_PARENTHESES, self.index)
            raise ParseError(
                f"Unexpected token '{leftover.value}' after a complete expression.",
                self.index,
            )
        return node

    def parse_expression(self) -> ExpressionNode:
        node = self.parse_term()
        while self.at_operator("+", "-"):
            op = self.tokens[self.index].value
            self.index += 1
            node = BinaryNode(op, node, self.parse_term())
        return node

    def parse_term(self) -> ExpressionNode:
        node = self.parse_factor()
        while self.at_operator("*", "/"):
            op = self.tokens[self.index].value
            self.index += 1
            node = BinaryNode(op, node, self.parse_factor())
        return node

    def parse_factor(self) -> ExpressionNode:
        node = self.parse_exponent()
        while self.at_operator("**"):
            self.index += 1
            node = BinaryNode("**", node, self.parse_exponent())
        return node

    def parse_exponent(self) -> ExpressionNode:
        token = self.peek()
        if token is None:
            previous = self.tokens[self.index - 1].value
            # unary minus was rewritten to '-1 *'
            if self.tokens[max(self.index - 2, 0) : self.index] == [NEGATE, TIMES]:
                previous = "-"
            raise ParseError(
                f"Incomplete expression. An equation cannot end with a "
                f"'{previous}' operator."
            )
        position = self.index
        self.index += 1

        if token == OPEN:
            node = self.parse_expression()
            if self.peek() == COMMA:
                raise ParseError(
                    "Unexpected ',' inside parentheses. Built-in functions take a "
                    "single argument.",
                    self.index,
                )
            if self.peek() != CLOSE:
                raise ParseError(MISMATCHED_PARENTHESES, position)
            self.index += 1
            return node

        if token.kind is TokenKind.FUNCTION:
            argument = self.parse_exponent()
            if token.value == "sqrt":
                return SqrtNode(argument)
            return FunctionNode(token.value, argument)

        if token.kind is TokenKind.VARIABLE:
            if self.peek() == OPEN:
                self.index += 1
                return CallNode(token.value, tuple(self.parse_arguments(token)))
            return VariableNode(token.value)

        if token.kind is TokenKind.NUMBER:
            try:
                return NumberNode(float(token.value))
            except ValueError:
                raise ParseError(f"Invalid number '{token.value}'.", position)

        raise ParseError(
            f"Unexpected token '{token.value}'. It appears you have some invalid "
            "syntax in your equation.",
            position,
        )

    def parse_arguments(self, name: Token) -> List[ExpressionNode]:
        mismatched = ParseError(
            f"Mismatched parentheses in function call for '{name.value}'. Ensure "
            "every '(' has a corresponding ')' in your equation."
        )
        args = []
        if self.peek() == CLOSE:
            self.index += 1
            return args
        while True:
            if self.peek() is None:
                raise mismatched
            args.append(self.parse_expression())
            following = self.peek()
            if following == COMMA:
                self.index += 1
            elif following == CLOSE:
                self.index += 1
                return args
            else:
                raise mismatched


def parse(tokens: Sequence[Token]) -> ExpressionNode:
    verbose_print(f"parsing {len(tokens)} tokens")
    node = Parser(tokens).parse()
    debug_print(f"parsed tree: {node}")
    return node
