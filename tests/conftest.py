import math
import re

import pytest

from fractex import parse, tokenize, translate
from fractex.tokenizer import KNOWN_FUNCTIONS, Token, TokenKind


class Vec2:
    def __init__(self, x, y):
        self.x = float(x)
        self.y = float(y)

    def _pair(self, other):
        if isinstance(other, Vec2):
            return other.x, other.y
        return float(other), float(other)

    def __add__(self, other):
        ox, oy = self._pair(other)
        return Vec2(self.x + ox, self.y + oy)

    def __sub__(self, other):
        ox, oy = self._pair(other)
        return Vec2(self.x - ox, self.y - oy)

    def __mul__(self, other):
        ox, oy = self._pair(other)
        return Vec2(self.x * ox, self.y * oy)

    def __truediv__(self, other):
        ox, oy = self._pair(other)
        return Vec2(self.x / ox, self.y / oy)

    def __neg__(self):
        return Vec2(-self.x, -self.y)


def _atan(y, x=None):
    return math.atan(y) if x is None else math.atan2(y, x)


def _sign(x):
    return (x > 0) - (x < 0)


GLSL_FUNCTIONS = {
    "vec2": Vec2,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "exp": math.exp,
    "log": math.log,
    "sqrt": math.sqrt,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "pow": math.pow,
    "abs": abs,
    "atan": _atan,
    "sign": _sign,
    "length": lambda v: math.hypot(v.x, v.y),
}

STATEMENT = re.compile(r"(?:(vec2|float) )?(\w+) = (.*);")


def run_glsl(code, z=0j, c=0j, target="z", **scalars):
    """Execute a generated snippet with Python floats, checking that each
    declaration produces the type it declares."""
    namespace = dict(GLSL_FUNCTIONS)
    namespace.update(scalars)
    namespace["z"] = Vec2(z.real, z.imag)
    namespace["c"] = Vec2(c.real, c.imag)

    for line in code.splitlines():
        match = STATEMENT.fullmatch(line)
        assert match, f"unexpected GLSL statement: {line}"
        glsl_type, name, expression = match.groups()
        value = eval(expression, {"__builtins__": {}}, namespace)
        if glsl_type == "vec2":
            assert isinstance(value, Vec2), line
        elif glsl_type == "float":
            assert isinstance(value, (int, float)), line
        namespace[name] = value

    result = namespace[target]
    return complex(result.x, result.y)


def token(text):
    if text in ("(", ")"):
        return Token(TokenKind.PARENTHESIS, text)
    if text in ("+", "-", "*", "/", "**", ","):
        return Token(TokenKind.OPERATOR, text)
    if text in KNOWN_FUNCTIONS or text == "abs":
        return Token(TokenKind.FUNCTION, text)
    if re.fullmatch(r"-?[0-9.]+", text):
        return Token(TokenKind.NUMBER, text)
    return Token(TokenKind.VARIABLE, text)


def tokens(*texts):
    return [token(text) for text in texts]


def compile_source(source, extra_variables=()):
    return translate(parse(tokenize(source, extra_variables)))


@pytest.fixture
def glsl():
    return run_glsl
