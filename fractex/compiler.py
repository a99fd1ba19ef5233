from dataclasses import dataclass, field
from typing import Dict, Optional

from .errors import LexError
from .logs import debug_print, verbose_print
from .nodes import ExpressionNode
from .parser import parse
from .tokenizer import ALLOWED_VARIABLES, substitute_variables, tokenize
from .translator import is_reserved_glsl_name, translate


@dataclass
class CompilerConfig:
    # declared parameters; None leaves the name in the output as a uniform
    variables: Dict[str, Optional[float]] = field(default_factory=dict)
    inline_variables: bool = True
    target: str = "z"
    temp_prefix: str = "temp_"

    def __post_init__(self):
        for name in self.variables:
            if name in ALLOWED_VARIABLES:
                raise LexError(f"'{name}' is built in and cannot be declared")
            if self.temp_prefix and name.startswith(self.temp_prefix):
                raise LexError(
                    f"'{name}' cannot be declared: names starting with "
                    f"'{self.temp_prefix}' are used for generated temporaries"
                )
            if is_reserved_glsl_name(name):
                raise LexError(
                    f"'{name}' is a reserved GLSL name and cannot be declared"
                )

    @property
    def uniforms(self):
        if self.inline_variables:
            return sorted(n for n, v in self.variables.items() if v is None)
        return sorted(self.variables)


@dataclass
class CompiledEquation:
    source: str
    tree: ExpressionNode
    code: str


def compile_equation(
    source: str, config: Optional[CompilerConfig] = None
) -> CompiledEquation:
    config = config or CompilerConfig()
    verbose_print(f"compiling equation: {source}")

    tokens = tokenize(source, config.variables)
    if config.inline_variables:
        tokens = substitute_variables(tokens, config.variables)
    tree = parse(tokens)
    code = translate(tree, config.target, config.temp_prefix)

    debug_print(f"generated {len(code.splitlines())} lines of GLSL")
    return CompiledEquation(source=source, tree=tree, code=code)
