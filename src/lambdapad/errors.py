from typing import Optional

__all__ = [
    "LambdaError",
    "SimplifyLimitExceeded",
    "ParseError",
    "RedexNotFound",
    "InvalidRedex",
    "VariableNotFound",
    "InvalidStep",
    "UndefinedName",
]


class LambdaError(Exception):
    """Base class of every recoverable error raised by lambdapad."""


class SimplifyLimitExceeded(LambdaError):
    """Normal form not reached within the step bound, the term is likely divergent."""

    def __init__(self, limit: int):
        super().__init__(f"no normal form after {limit} reductions (likely divergent)")
        self.limit = limit


class ParseError(LambdaError):
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        where = f" at line {line}, column {column}" if line is not None else ""
        super().__init__(f"{message}{where}")
        self.message = message
        self.line = line
        self.column = column


class RedexNotFound(LambdaError):
    """The id does not belong to the view it was used with (stale id)."""

    def __init__(self, redex_id: int):
        super().__init__(f"no redex with id {redex_id} in this view")
        self.redex_id = redex_id


class InvalidRedex(LambdaError):
    """The view marks a redex that the term does not reduce."""

    def __init__(self, redex_id: int, term):
        super().__init__(f"redex {redex_id} does not reduce: {term}")
        self.redex_id = redex_id
        self.term = term


class VariableNotFound(LambdaError):
    def __init__(self, alpha_id: int):
        super().__init__(f"no variable with alpha id {alpha_id} in this view")
        self.alpha_id = alpha_id


class InvalidStep(LambdaError):
    def __init__(self, step: int, length: int):
        super().__init__(f"invalid step {step}, history has {length} steps")
        self.step = step
        self.length = length


class UndefinedName(LambdaError):
    def __init__(self, name):
        super().__init__(f"{name} has no definition")
        self.name = name
