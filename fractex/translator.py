"""
GLSL code generation for parsed equations.

Complex values are represented as ``vec2(real, imaginary)`` and scalars as
``float``. GLSL has no complex type, so every operator and function picks the
formula matching the complexness of its operands. Each compound formula is
declared once as a temporary, keyed on its exact text, so repeated subterms
are computed a single time.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
import math
import re

from .errors import TranslationError
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


COMPLEX_VARIABLES = {"z", "c"}
IMAGINARY_UNIT = "vec2(0.0, 1.0)"
COMPLEX_ONE = "vec2(1.0, 0.0)"
SUPPORTED_OPERATORS = ("+", "-", "*", "/", "**")
SUPPORTED_FUNCTIONS = ("sin", "cos", "tan", "exp", "log", "sqrt", "abs")
UNDEFINED_MARKERS = re.compile(r"\b(undefined|None|nan|inf)\b")

# keywords, types and the built-ins the generated code calls
GLSL_RESERVED_WORDS = {
    "attribute", "const", "uniform", "varying", "layout", "centroid", "flat",
    "smooth", "break", "continue", "do", "for", "while", "switch", "case",
    "default", "if", "else", "in", "out", "inout", "float", "int", "uint",
    "void", "bool", "true", "false", "invariant", "discard", "return",
    "lowp", "mediump", "highp", "precision", "struct", "main",
    "mat2", "mat3", "mat4", "vec2", "vec3", "vec4", "ivec2", "ivec3", "ivec4",
    "uvec2", "uvec3", "uvec4", "bvec2", "bvec3", "bvec4",
    "sampler2D", "sampler3D", "samplerCube",
    "sin", "cos", "tan", "sinh", "cosh", "exp", "log", "sqrt", "pow", "abs",
    "atan", "sign", "length",
}  # fmt: skip


def is_reserved_glsl_name(name: str) -> bool:
    return name in GLSL_RESERVED_WORDS or name.startswith("gl_") or "__" in name


@dataclass(frozen=True)
class TranslationValue:
    code: str
    is_complex: bool
    literal: Optional[float] = None


def format_float(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value)}.0"
    text = repr(float(value))
    if "e" in text:
        # positional form keeps the decimal point
        text = format(Decimal(text), "f")
    return text


def _fold_literals(op: str, a: float, b: float) -> Optional[float]:
    # pow is never folded
    if op == "+":
        result = a + b
    elif op == "-":
        result = a - b
    elif op == "*":
        result = a * b
    elif op == "/" and b != 0:
        result = a / b
    else:
        return None
    return result if math.isfinite(result) else None


def _promote(value: TranslationValue) -> TranslationValue:
    if value.is_complex:
        return value
    return TranslationValue(f"vec2({value.code}, 0.0)", True)


def _complex_mul(a: str, b: str) -> str:
    return f"vec2({a}.x * {b}.x - {a}.y * {b}.y, {a}.x * {b}.y + {a}.y * {b}.x)"


def _complex_div(a: str, b: str) -> str:
    denominator = f"({b}.x * {b}.x + {b}.y * {b}.y)"
    return (
        f"vec2(({a}.x * {b}.x + {a}.y * {b}.y) / {denominator}, "
        f"({a}.y * {b}.x - {a}.x * {b}.y) / {denominator})"
    )


def _complex_reciprocal(a: str) -> str:
    denominator = f"({a}.x * {a}.x + {a}.y * {a}.y)"
    return f"vec2({a}.x / {denominator}, -{a}.y / {denominator})"


def _complex_exp(a: str) -> str:
    return f"vec2(exp({a}.x) * cos({a}.y), exp({a}.x) * sin({a}.y))"


def _complex_log(a: str) -> str:
    return f"vec2(log(length({a})), atan({a}.y, {a}.x))"


def _complex_sin(a: str) -> str:
    return f"vec2(sin({a}.x) * cosh({a}.y), cos({a}.x) * sinh({a}.y))"


def _complex_cos(a: str) -> str:
    return f"vec2(cos({a}.x) * cosh({a}.y), -sin({a}.x) * sinh({a}.y))"


def _complex_sqrt(a: str) -> str:
    return (
        f"vec2(sqrt((length({a}) + {a}.x) / 2.0), "
        f"sign({a}.y) * sqrt((length({a}) - {a}.x) / 2.0))"
    )


class Translator:
    def __init__(self, temp_prefix: str = "temp_"):
        self.temp_prefix = temp_prefix
        self.declarations: List[str] = []
        self.cache: Dict[str, TranslationValue] = {}

    def cache_expression(self, expression: str, is_complex: bool) -> TranslationValue:
        if expression in self.cache:
            debug_print(f"reusing {self.cache[expression].code} for {expression}")
            return self.cache[expression]

        name = f"{self.temp_prefix}{len(self.declarations)}"
        glsl_type = "vec2" if is_complex else "float"
        value = TranslationValue(name, is_complex)
        self.cache[expression] = value
        self.declarations.append(f"{glsl_type} {name} = {expression};")
        return value

    def process(self, node: ExpressionNode) -> TranslationValue:
        if isinstance(node, NumberNode):
            return TranslationValue(format_float(node.value), False, node.value)
        if isinstance(node, VariableNode):
            return self.process_variable(node)
        if isinstance(node, BinaryNode):
            return self.process_binary(node)
        if isinstance(node, SqrtNode):
            return self.apply_function("sqrt", self.process(node.argument))
        if isinstance(node, FunctionNode):
            return self.apply_function(node.name, self.process(node.argument))
        if isinstance(node, CallNode):
            args = [self.process(arg).code for arg in node.args]
            return self.cache_expression(f"{node.name}({', '.join(args)})", False)
        raise TranslationError(
            f"Unsupported node type '{type(node).__name__}'. This likely "
            "indicates a bug in the parser."
        )

    def process_variable(self, node: VariableNode) -> TranslationValue:
        if node.name in COMPLEX_VARIABLES:
            return TranslationValue(node.name, True)
        if node.name == "i":
            return TranslationValue(IMAGINARY_UNIT, True)
        return TranslationValue(node.name, False)

    def process_binary(self, node: BinaryNode) -> TranslationValue:
        if node.op not in SUPPORTED_OPERATORS:
            raise TranslationError(
                f"Unsupported operator '{node.op}'. Please use only supported "
                f"operators ({', '.join(SUPPORTED_OPERATORS)})."
            )
        left = self.process(node.left)
        right = self.process(node.right)

        if left.literal is not None and right.literal is not None:
            folded = _fold_literals(node.op, left.literal, right.literal)
            if folded is not None:
                return TranslationValue(format_float(folded), False, folded)

        if node.op in ("+", "-"):
            if left.is_complex or right.is_complex:
                left, right = _promote(left), _promote(right)
            return self.cache_expression(
                f"({left.code} {node.op} {right.code})", left.is_complex
            )

        if node.op == "*":
            return self.multiply(left, right)

        if node.op == "/":
            if left.is_complex or right.is_complex:
                a, b = _promote(left).code, _promote(right).code
                return self.cache_expression(_complex_div(a, b), True)
            return self.cache_expression(f"({left.code} / {right.code})", False)

        return self.power(left, right)

    def multiply(self, left: TranslationValue, right: TranslationValue):
        a, b = left.code, right.code
        if left.is_complex and right.is_complex:
            return self.cache_expression(_complex_mul(a, b), True)
        if left.is_complex:
            return self.cache_expression(f"vec2({a}.x * {b}, {a}.y * {b})", True)
        if right.is_complex:
            return self.cache_expression(f"vec2({a} * {b}.x, {a} * {b}.y)", True)
        return self.cache_expression(f"({a} * {b})", False)

    def power(self, base: TranslationValue, exponent: TranslationValue):
        if not base.is_complex and not exponent.is_complex:
            return self.cache_expression(f"pow({base.code}, {exponent.code})", False)

        if (
            base.is_complex
            and exponent.literal is not None
            and float(exponent.literal).is_integer()
        ):
            return self.integer_power(base, int(exponent.literal))

        return self.general_power(_promote(base), exponent)

    def integer_power(self, base: TranslationValue, n: int) -> TranslationValue:
        if n == 0:
            return TranslationValue(COMPLEX_ONE, True)
        if n < 0:
            positive = self.integer_power(base, -n)
            return self.cache_expression(_complex_reciprocal(positive.code), True)

        result = base
        for _ in range(n - 1):
            result = self.cache_expression(_complex_mul(result.code, base.code), True)
        return result

    def general_power(self, base: TranslationValue, exponent: TranslationValue):
        base_log = self.cache_expression(_complex_log(base.code), True)
        if exponent.is_complex:
            scaled = self.cache_expression(
                _complex_mul(exponent.code, base_log.code), True
            )
        else:
            e, log = exponent.code, base_log.code
            scaled = self.cache_expression(f"vec2({e} * {log}.x, {e} * {log}.y)", True)
        return self.cache_expression(_complex_exp(scaled.code), True)

    def apply_function(self, name: str, argument: TranslationValue):
        if name not in SUPPORTED_FUNCTIONS:
            raise TranslationError(
                f"Unsupported function '{name}'. Please use one of the supported "
                f"functions: {', '.join(SUPPORTED_FUNCTIONS)}."
            )
        a = argument.code
        if not argument.is_complex:
            return self.cache_expression(f"{name}({a})", False)

        if name == "sin":
            return self.cache_expression(_complex_sin(a), True)
        if name == "cos":
            return self.cache_expression(_complex_cos(a), True)
        if name == "tan":
            sine = self.cache_expression(_complex_sin(a), True)
            cosine = self.cache_expression(_complex_cos(a), True)
            return self.cache_expression(_complex_div(sine.code, cosine.code), True)
        if name == "exp":
            return self.cache_expression(_complex_exp(a), True)
        if name == "log":
            return self.cache_expression(_complex_log(a), True)
        if name == "sqrt":
            return self.cache_expression(_complex_sqrt(a), True)
        return self.cache_expression(f"length({a})", False)


def translate_value(
    node: ExpressionNode, temp_prefix: str = "temp_"
) -> Tuple[TranslationValue, List[str]]:
    translator = Translator(temp_prefix)
    result = translator.process(node)

    for fragment in [result.code] + translator.declarations:
        if UNDEFINED_MARKERS.search(fragment):
            raise TranslationError(
                "Internal error: undefined value in generated GLSL code. Please "
                "check your expression for mistakes."
            )

    verbose_print(f"translated into {len(translator.declarations)} declarations")
    return result, translator.declarations


def translate(
    node: ExpressionNode, target: str = "z", temp_prefix: str = "temp_"
) -> str:
    result, declarations = translate_value(node, temp_prefix)
    root = result.code if result.is_complex else f"vec2({result.code}, 0.0)"
    return "\n".join(declarations + [f"{target} = {root};"])
