"""Validate and evaluate a single calculator operation."""
from typing import List, Sequence

from stack_calculator.common.errors import ArityMismatch
from stack_calculator.common.operations import OPERATIONS, Operation


class Evaluator:
    """
    Pure evaluation of the registered operations.

    Overflow behaviour is inherited from fixed-width integer arithmetic:
        - plus, minus, times, abs and fact wrap around at 32 bits
        - pow goes through a floating point intermediate, is truncated toward
          zero and saturates at the 32-bit bounds
        - divide truncates toward zero, ``args[0]`` is the dividend
    """

    @staticmethod
    def evaluate(name: str, args: Sequence[int]) -> int:
        """
        Evaluate the named operation on the given arguments.

        :param str name: Operation name, any case
        :param Sequence[int] args: Operands, ``args[0]`` is ``x`` and ``args[1]`` is ``y``

        :return: Result of the operation
        :rtype: int
        :raises UnknownOperation: If the operation is not supported
        :raises ArityMismatch: If too few or too many arguments are given
        :raises DivisionByZero: If dividing by zero
        :raises NegativeFactorial: If the factorial of a negative number is requested
        """
        operation: Operation = Operation.parse(name)
        spec = OPERATIONS[operation]

        values: List[int] = list(args)
        if len(values) != spec.arity:
            raise ArityMismatch(name, spec.arity, len(values))

        return spec.function(*values)
