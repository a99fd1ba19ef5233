from .compiler import CompiledEquation, CompilerConfig, compile_equation
from .errors import (
    CompileError,
    LexError,
    ParseError,
    TranslationError,
    undeclared_variable,
)
from .logs import ARGS
from .parser import parse
from .shader import build_fragment_shader
from .tokenizer import Token, TokenKind, substitute_variables, tokenize
from .translator import TranslationValue, translate, translate_value

PROGRAM_VERSION = "1.0.0"
