"""Error taxonomy shared by the evaluator, the operand stack and the history store."""
from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of failures a calculator request can end with."""

    UNKNOWN_OPERATION = "UnknownOperation"
    ARITY_MISMATCH = "ArityMismatch"
    DIVISION_BY_ZERO = "DivisionByZero"
    NEGATIVE_FACTORIAL = "NegativeFactorial"
    INSUFFICIENT_OPERANDS = "InsufficientOperands"
    UNKNOWN_PERSISTENCE_METHOD = "UnknownPersistenceMethod"
    PERSISTENCE_ERROR = "PersistenceError"


class CalculatorError(Exception):
    """
    Base class of every domain failure.

    Each subclass pins down its :class:`ErrorKind`; the message is the one
    reported to the caller as ``errorMessage``.
    """

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownOperation(CalculatorError):
    kind = ErrorKind.UNKNOWN_OPERATION

    def __init__(self, name) -> None:
        super().__init__(f"Error: unknown operation: {name}")
        self.name = name


class ArityMismatch(CalculatorError):
    kind = ErrorKind.ARITY_MISMATCH

    def __init__(self, name: str, expected: int, actual: int) -> None:
        amount = "Not enough" if actual < expected else "Too many"
        super().__init__(f"Error: {amount} arguments to perform the operation {name}")
        self.expected = expected
        self.actual = actual


class DivisionByZero(CalculatorError):
    kind = ErrorKind.DIVISION_BY_ZERO

    def __init__(self) -> None:
        super().__init__("Error while performing operation Divide: division by 0")


class NegativeFactorial(CalculatorError):
    kind = ErrorKind.NEGATIVE_FACTORIAL

    def __init__(self) -> None:
        super().__init__(
            "Error while performing operation Factorial: not supported for the negative number"
        )


class InsufficientOperands(CalculatorError):
    """Raised when the operand stack holds fewer values than requested."""

    kind = ErrorKind.INSUFFICIENT_OPERANDS

    def __init__(self, message: str, requested: int, available: int) -> None:
        super().__init__(message)
        self.requested = requested
        self.available = available


class UnknownPersistenceMethod(CalculatorError):
    kind = ErrorKind.UNKNOWN_PERSISTENCE_METHOD

    def __init__(self, method=None) -> None:
        super().__init__("Error: unknown persistence method")
        self.method = method


class PersistenceError(CalculatorError):
    """A relational or document store call failed (including timeouts)."""

    kind = ErrorKind.PERSISTENCE_ERROR
