import re
from typing import Iterable, Optional


class CompileError(Exception):
    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(
            f"position {position}: {message}" if position is not None else message
        )
        self.position = position


class LexError(CompileError):
    # callers match on this phrase to offer declaring the variable, keep its form
    UNDECLARED_VARIABLE = (
        "Invalid variable '{name}' found: no variable '{name}' has been declared. "
        "Allowed variables are: {allowed}"
    )

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        variable: Optional[str] = None,
    ):
        super().__init__(message, position)
        self.variable = variable

    @classmethod
    def undeclared(
        cls, name: str, allowed: Iterable[str], position: Optional[int] = None
    ) -> "LexError":
        message = cls.UNDECLARED_VARIABLE.format(
            name=name, allowed=", ".join(sorted(allowed))
        )
        return cls(message, position, variable=name)


class ParseError(CompileError):
    pass


class TranslationError(CompileError):
    pass


_UNDECLARED_PATTERN = re.compile(r"Invalid variable '([^']+)'")


def undeclared_variable(error: Exception) -> Optional[str]:
    """Return the variable name an error complains about, if it is the
    undeclared-variable error, else None."""
    match = _UNDECLARED_PATTERN.search(str(error))
    return match.group(1) if match else None
