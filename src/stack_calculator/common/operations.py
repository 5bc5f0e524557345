"""Registry of the supported calculator operations."""
from collections.abc import Callable as ABCCallable
from enum import Enum
import math
from typing import Callable, Dict, NamedTuple

from stack_calculator.common.errors import DivisionByZero, NegativeFactorial, UnknownOperation


INT32_MIN: int = -(2 ** 31)
INT32_MAX: int = 2 ** 31 - 1

# Type alias for operation functions (taking one or two ints, returning an int)
OperationFn: ABCCallable[..., int] = Callable[..., int]


def wrap_int32(value: int) -> int:
    """
    Reduce an arbitrary Python int to the signed 32-bit two's-complement range.

    Arithmetic results wrap around exactly like fixed-width integer arithmetic,
    e.g. ``INT32_MAX + 1`` becomes ``INT32_MIN``.

    :param int value: Unbounded integer

    :return: Wrapped 32-bit value
    :rtype: int
    """
    return (value - INT32_MIN) % 2 ** 32 + INT32_MIN


def _saturate_int32(value: float) -> int:
    """Truncate a float toward zero, clamping to the 32-bit range (NaN gives 0)."""
    if math.isnan(value):
        return 0
    if value >= INT32_MAX:
        return INT32_MAX
    if value <= INT32_MIN:
        return INT32_MIN
    return int(value)


def _plus(x: int, y: int) -> int:
    return wrap_int32(x + y)


def _minus(x: int, y: int) -> int:
    return wrap_int32(x - y)


def _times(x: int, y: int) -> int:
    return wrap_int32(x * y)


def _divide(x: int, y: int) -> int:
    if y == 0:
        raise DivisionByZero()
    # Truncate toward zero; Python's // floors instead
    quotient = abs(x) // abs(y)
    if (x < 0) != (y < 0):
        quotient = -quotient
    return wrap_int32(quotient)


def _pow(x: int, y: int) -> int:
    try:
        value = math.pow(x, y)
    except ValueError:
        # 0 raised to a negative power
        value = math.inf
    except OverflowError:
        negative = x < 0 and y % 2 == 1
        value = -math.inf if negative else math.inf
    return _saturate_int32(value)


def _abs(x: int) -> int:
    return wrap_int32(abs(x))


def _fact(x: int) -> int:
    if x < 0:
        raise NegativeFactorial()
    result = 1
    for i in range(2, x + 1):
        result = wrap_int32(result * i)
        # From 34! on the product holds 2**32 as a factor and stays 0
        if result == 0:
            break
    return result


class Operation(str, Enum):
    """Closed set of operation names accepted by the calculator."""

    PLUS = "plus"
    MINUS = "minus"
    TIMES = "times"
    DIVIDE = "divide"
    POW = "pow"
    ABS = "abs"
    FACT = "fact"

    @classmethod
    def parse(cls, name) -> "Operation":
        """
        Resolve a caller supplied operation name, ignoring case.

        :param str name: Operation name as received from the caller

        :return: Matching operation
        :rtype: Operation
        :raises UnknownOperation: If the name is missing or not supported
        """
        if not isinstance(name, str) or not name.strip():
            raise UnknownOperation(name)
        try:
            return cls(name.lower())
        except ValueError:
            raise UnknownOperation(name) from None


class OperationSpec(NamedTuple):
    """Arity and evaluation rule of one operation."""

    arity: int
    function: OperationFn


# Mapping of operations to (arity, function)
OPERATIONS: Dict[Operation, OperationSpec] = {
    Operation.PLUS: OperationSpec(2, _plus),
    Operation.MINUS: OperationSpec(2, _minus),
    Operation.TIMES: OperationSpec(2, _times),
    Operation.DIVIDE: OperationSpec(2, _divide),
    Operation.POW: OperationSpec(2, _pow),
    Operation.ABS: OperationSpec(1, _abs),
    Operation.FACT: OperationSpec(1, _fact),
}

_missing = set(Operation) - set(OPERATIONS)
if _missing:
    raise RuntimeError(f"Operations without evaluation rule: {sorted(op.value for op in _missing)}")


def arity(name) -> int:
    """
    Return the number of operands the named operation consumes.

    :param str name: Operation name, any case

    :return: 1 or 2
    :rtype: int
    :raises UnknownOperation: If the operation is not supported
    """
    return OPERATIONS[Operation.parse(name)].arity
