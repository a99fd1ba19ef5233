from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterable, List, Optional, Set, Tuple
import string

from .errors import LexError
from .logs import debug_print, verbose_print


KNOWN_FUNCTIONS = ["sqrt", "sin", "cos", "tan", "exp", "log"]
ALLOWED_VARIABLES = ["z", "c", "i"]
KNOWN_CONSTANTS = {
    "pi": "3.141592653589793",
    "e": "2.718281828459045",
    "phi": "1.618033988749895",
    "gamma": "0.5772156649015329",
}

MULTIPLY_COMMANDS = {"cdot", "times"}
SPACING_COMMANDS = {"quad", "qquad"}
SIZED_SPACING_COMMANDS = {"hspace", "vspace"}
SPACING_SYMBOLS = {" ", ",", ";", ":", "!"}
DIGITS = set(string.digits)
LETTERS = set(string.ascii_letters)


class TokenKind(Enum):
    NUMBER = auto()
    VARIABLE = auto()
    FUNCTION = auto()
    OPERATOR = auto()
    PARENTHESIS = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str

    def __str__(self):
        return self.value


OPEN = Token(TokenKind.PARENTHESIS, "(")
CLOSE = Token(TokenKind.PARENTHESIS, ")")
PLUS = Token(TokenKind.OPERATOR, "+")
MINUS = Token(TokenKind.OPERATOR, "-")
TIMES = Token(TokenKind.OPERATOR, "*")
DIVIDE = Token(TokenKind.OPERATOR, "/")
POWER = Token(TokenKind.OPERATOR, "**")
COMMA = Token(TokenKind.OPERATOR, ",")
NEGATE = Token(TokenKind.NUMBER, "-1")
ABS = Token(TokenKind.FUNCTION, "abs")
# only lives between scanning and fraction expansion
FRAC = Token(TokenKind.OPERATOR, "frac")

SIMPLE_OPERATORS = {"+": PLUS, "*": TIMES, "/": DIVIDE, "^": POWER, ",": COMMA}


def _is_unary_position(tokens: List[Token]) -> bool:
    if not tokens:
        return True
    previous = tokens[-1]
    return previous.kind is TokenKind.OPERATOR or previous == OPEN


def _skip_braced_argument(source: str, i: int, command: str) -> int:
    if i >= len(source) or source[i] != "{":
        return i
    depth = 0
    start = i
    while i < len(source):
        if source[i] == "{":
            depth += 1
        elif source[i] == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    raise LexError(f"Unterminated argument of '\\{command}'", start)


def _scan_number(source: str, i: int) -> Tuple[str, int]:
    start = i
    dots = 0
    while i < len(source) and (source[i] in DIGITS or source[i] == "."):
        if source[i] == ".":
            dots += 1
            if dots > 1:
                raise LexError("Invalid number format: multiple decimal points", i)
        i += 1
    literal = source[start:i]
    if literal == ".":
        raise LexError("Invalid number format: '.' is not a number", start)
    return literal, i


def _scan_subscript(source: str, i: int) -> Tuple[str, int]:
    underscore = i
    i += 1
    if i < len(source) and source[i] == "{":
        i += 1
        start = i
        while i < len(source) and source[i] != "}":
            if source[i] not in DIGITS and source[i] not in LETTERS:
                raise LexError(
                    "Invalid character in subscript: subscripts may only contain "
                    "digits or letters",
                    i,
                )
            i += 1
        if i >= len(source):
            raise LexError("Unmatched '{' in subscript", start - 1)
        subscript = source[start:i]
        i += 1
    else:
        start = i
        while i < len(source) and (source[i] in DIGITS or source[i] in LETTERS):
            i += 1
        subscript = source[start:i]
    if not subscript:
        raise LexError(
            "Incomplete subscript: '_' must be followed by digits or letters, "
            "or a braced group",
            underscore,
        )
    return subscript, i


def _letter_run_tokens(
    run: str, subscript: Optional[str], allowed: Set[str], position: int
) -> List[Token]:
    if subscript is None:
        if run in KNOWN_FUNCTIONS:
            return [Token(TokenKind.FUNCTION, run)]
        if run in allowed:
            return [Token(TokenKind.VARIABLE, run)]
        if run in KNOWN_CONSTANTS:
            return [Token(TokenKind.NUMBER, KNOWN_CONSTANTS[run])]
    elif f"{run}_{subscript}" in allowed:
        return [Token(TokenKind.VARIABLE, f"{run}_{subscript}")]

    tokens = []
    for offset, letter in enumerate(run):
        if subscript is not None and offset == len(run) - 1:
            name = f"{letter}_{subscript}"
            if name not in allowed:
                raise LexError.undeclared(name, allowed, position + offset)
            tokens.append(Token(TokenKind.VARIABLE, name))
        elif letter in allowed:
            tokens.append(Token(TokenKind.VARIABLE, letter))
        elif letter == "e":
            tokens.append(Token(TokenKind.NUMBER, KNOWN_CONSTANTS["e"]))
        else:
            raise LexError.undeclared(letter, allowed, position + offset)
    if len(run) > 1:
        debug_print(f"split letter run '{run}' into {[str(t) for t in tokens]}")
    return tokens


def _scan(source: str, allowed: Set[str]) -> List[Token]:
    tokens = []
    delimiters = []

    def open_group(kind: str, position: int):
        delimiters.append((kind, position))
        if kind == "|":
            tokens.append(ABS)
        tokens.append(OPEN)

    def close_group(kind: str, position: int):
        if not delimiters:
            if kind == "|":
                raise LexError(
                    "Unmatched absolute value delimiter '\\right|'", position
                )
            raise LexError("Mismatched parentheses: unmatched ')'", position)
        open_kind, open_position = delimiters[-1]
        if open_kind != kind:
            if open_kind == "|":
                raise LexError(
                    "Unmatched absolute value delimiter '\\left|': "
                    "expected '\\right|'",
                    open_position,
                )
            raise LexError(
                "Mismatched parentheses: '\\right|' closes an open '('", position
            )
        delimiters.pop()
        tokens.append(CLOSE)

    i = 0
    while i < len(source):
        start = i
        char = source[i]

        if char.isspace():
            i += 1
            continue

        if char == "\\":
            i += 1
            if i < len(source) and source[i] in SPACING_SYMBOLS:
                i += 1
                continue
            while i < len(source) and source[i] in LETTERS:
                i += 1
            command = source[start + 1 : i]

            if not command:
                following = source[i] if i < len(source) else ""
                raise LexError(f"Unknown command '\\{following}'", start)
            if command in KNOWN_CONSTANTS:
                tokens.append(Token(TokenKind.NUMBER, KNOWN_CONSTANTS[command]))
            elif command in KNOWN_FUNCTIONS:
                tokens.append(Token(TokenKind.FUNCTION, command))
            elif command in MULTIPLY_COMMANDS:
                tokens.append(TIMES)
            elif command == "frac":
                tokens.append(FRAC)
            elif command in ("left", "right"):
                delimiter = source[i] if i < len(source) else ""
                if delimiter not in ("(", ")", "|"):
                    raise LexError(
                        f"Expected '(', ')' or '|' after '\\{command}'", start
                    )
                i += 1
                if delimiter == "(":
                    open_group("(", start)
                elif delimiter == ")":
                    close_group("(", start)
                elif command == "left":
                    open_group("|", start)
                else:
                    close_group("|", start)
            elif command in SPACING_COMMANDS:
                pass
            elif command in SIZED_SPACING_COMMANDS:
                i = _skip_braced_argument(source, i, command)
            else:
                raise LexError(f"Unknown command '\\{command}'", start)
            continue

        if char in DIGITS or char == ".":
            literal, i = _scan_number(source, i)
            tokens.append(Token(TokenKind.NUMBER, literal))
            continue

        if char in LETTERS:
            while i < len(source) and source[i] in LETTERS:
                i += 1
            run = source[start:i]
            subscript = None
            if i < len(source) and source[i] == "_":
                subscript, i = _scan_subscript(source, i)
            tokens.extend(_letter_run_tokens(run, subscript, allowed, start))
            continue

        if char in "({":
            open_group("(", start)
            i += 1
            continue
        if char in ")}":
            close_group("(", start)
            i += 1
            continue

        if source.startswith("**", i):
            tokens.append(POWER)
            i += 2
            continue
        if char == "-":
            if _is_unary_position(tokens):
                tokens.extend([NEGATE, TIMES])
            else:
                tokens.append(MINUS)
            i += 1
            continue
        if char in SIMPLE_OPERATORS:
            tokens.append(SIMPLE_OPERATORS[char])
            i += 1
            continue

        if char == "=":
            raise LexError(
                "Equality signs are not supported: enter the right-hand side of "
                "the map only, e.g. 'z**2 + c'",
                start,
            )
        if char == "|":
            raise LexError(
                "Absolute value must be written as '\\left| ... \\right|'", start
            )
        raise LexError(f"Invalid character '{char}'", start)

    if delimiters:
        kind, position = delimiters[-1]
        if kind == "|":
            raise LexError("Unmatched absolute value delimiter '\\left|'", position)
        raise LexError("Mismatched parentheses: unmatched '('", position)

    return tokens


def _matching_close(tokens: List[Token], start: int) -> int:
    depth = 0
    for index in range(start, len(tokens)):
        if tokens[index] == OPEN:
            depth += 1
        elif tokens[index] == CLOSE:
            depth -= 1
            if depth == 0:
                return index
    raise LexError("Mismatched parentheses: unmatched '('")


def _fraction_operand(
    tokens: List[Token], start: int, role: str
) -> Tuple[List[Token], int]:
    if start >= len(tokens) or tokens[start] != OPEN:
        raise LexError(f"Expected '{{' after '\\frac' for the {role}")
    end = _matching_close(tokens, start)
    group = _expand_fractions(tokens[start + 1 : end])
    if not group:
        raise LexError(f"Empty {role} in '\\frac'")
    enclosed = group[0] == OPEN and _matching_close(group, 0) == len(group) - 1
    if len(group) > 1 and not enclosed:
        group = [OPEN] + group + [CLOSE]
    return group, end + 1


def _expand_fractions(tokens: List[Token]) -> List[Token]:
    result = []
    i = 0
    while i < len(tokens):
        if tokens[i] != FRAC:
            result.append(tokens[i])
            i += 1
            continue
        numerator, i = _fraction_operand(tokens, i + 1, "numerator")
        denominator, i = _fraction_operand(tokens, i, "denominator")
        result.extend([OPEN, *numerator, DIVIDE, *denominator, CLOSE])
        debug_print("expanded \\frac into a division")
    return result


def _wrap_function_operands(tokens: List[Token]) -> List[Token]:
    result = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        result.append(token)
        i += 1
        if token.kind is not TokenKind.FUNCTION:
            continue
        following = tokens[i] if i < len(tokens) else None
        if following == OPEN:
            continue
        # a unary minus is not a single operand
        if following not in (None, NEGATE) and following.kind in (
            TokenKind.NUMBER,
            TokenKind.VARIABLE,
        ):
            result.extend([OPEN, following, CLOSE])
            i += 1
            continue
        raise LexError(
            f"Function '{token.value}' must be followed by '(' or a single "
            "number or variable"
        )
    return result


def _ends_operand(token: Token) -> bool:
    return token.kind in (TokenKind.NUMBER, TokenKind.VARIABLE) or token == CLOSE


def _starts_operand(token: Token) -> bool:
    return (
        token.kind in (TokenKind.NUMBER, TokenKind.VARIABLE, TokenKind.FUNCTION)
        or token == OPEN
    )


def _insert_implicit_multiplication(tokens: List[Token]) -> List[Token]:
    result = []
    for current, following in zip(tokens, tokens[1:] + [None]):
        result.append(current)
        if following is not None and _ends_operand(current) and _starts_operand(
            following
        ):
            result.append(TIMES)
    return result


def _operand_end(tokens: List[Token], start: int) -> int:
    if start >= len(tokens):
        return start
    token = tokens[start]
    if token == NEGATE and start + 1 < len(tokens) and tokens[start + 1] == TIMES:
        return _operand_end(tokens, start + 2)
    if token == OPEN:
        return _matching_close(tokens, start) + 1
    if token.kind is TokenKind.FUNCTION:
        return _operand_end(tokens, start + 1)
    return start + 1


def _negated_literal(token: Token) -> Token:
    if token.value.startswith("-"):
        return Token(TokenKind.NUMBER, token.value[1:])
    return Token(TokenKind.NUMBER, "-" + token.value)


def _group_negated_exponents(tokens: List[Token]) -> List[Token]:
    result = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        result.append(token)
        i += 1
        if token != POWER or tokens[i : i + 2] != [NEGATE, TIMES]:
            continue
        end = _operand_end(tokens, i + 2)
        if end == i + 2:
            continue
        segment = _group_negated_exponents(tokens[i:end])
        if len(segment) == 3 and segment[2].kind is TokenKind.NUMBER:
            result.append(_negated_literal(segment[2]))
        else:
            result.extend([OPEN, *segment, CLOSE])
        i = end
    return result


def tokenize(source: str, extra_variables: Iterable[str] = ()) -> List[Token]:
    allowed = set(ALLOWED_VARIABLES) | set(extra_variables)
    verbose_print(f"tokenizing: {source}")

    tokens = _scan(source, allowed)
    tokens = _expand_fractions(tokens)
    tokens = _wrap_function_operands(tokens)
    tokens = _insert_implicit_multiplication(tokens)
    tokens = _group_negated_exponents(tokens)

    debug_print(f"tokenized into {len(tokens)} tokens: {[str(t) for t in tokens]}")
    return tokens


def substitute_variables(
    tokens: List[Token], values: Dict[str, Optional[float]]
) -> List[Token]:
    result = []
    for token in tokens:
        value = values.get(token.value) if token.kind is TokenKind.VARIABLE else None
        if value is None:
            result.append(token)
            continue
        literal = Token(TokenKind.NUMBER, repr(float(value)))
        if value < 0:
            result.extend([OPEN, literal, CLOSE])
        else:
            result.append(literal)
        debug_print(f"substituted {token.value} = {literal.value}")
    return result
