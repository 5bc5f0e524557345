"""Operand stack shared by every stack-mode request."""
import threading
from typing import Iterable, List

from stack_calculator.common.errors import InsufficientOperands


class OperandStack:
    """
    LIFO sequence of integers guarded by a single lock.

    One instance lives for the whole process and is shared by all clients.
    Each public method is one logical operation: the size check and the
    mutation happen under the same lock acquisition, so two concurrent
    callers can never interleave their pops.
    """

    def __init__(self) -> None:
        self._values: List[int] = []
        self._lock = threading.Lock()

    def push_all(self, values: Iterable[int]) -> int:
        """
        Push values one at a time, the last one ends on top.

        :param Iterable[int] values: Values to push, may be empty

        :return: Stack size after the push
        :rtype: int
        """
        with self._lock:
            self._values.extend(values)
            return len(self._values)

    def pop_for_operation(self, arity: int, operation: str = "") -> List[int]:
        """
        Pop the operands of an operation, topmost value first.

        :param int arity: Number of operands to pop
        :param str operation: Operation name, only used in the error message

        :return: Popped values, element 0 is the former top
        :rtype: List[int]
        :raises InsufficientOperands: If the stack holds fewer than ``arity`` values
        """
        with self._lock:
            available = len(self._values)
            if available < arity:
                raise InsufficientOperands(
                    f"Error: cannot implement operation {operation}. "
                    f"It requires {arity} arguments and the stack has only {available} arguments",
                    requested=arity,
                    available=available,
                )
            return [self._values.pop() for _ in range(arity)]

    def pop_discard(self, count: int) -> int:
        """
        Remove ``count`` values without returning them.

        Nothing is removed when ``count`` exceeds the size.

        :param int count: Number of values to drop, ``<= 0`` is a no-op

        :return: Stack size after the removal
        :rtype: int
        :raises InsufficientOperands: If ``count`` is larger than the stack
        """
        with self._lock:
            available = len(self._values)
            if count <= 0:
                return available
            if count > available:
                raise InsufficientOperands(
                    f"Error: cannot remove {count} from the stack. It has only {available} arguments",
                    requested=count,
                    available=available,
                )
            del self._values[available - count:]
            return len(self._values)

    def size(self) -> int:
        with self._lock:
            return len(self._values)

    def snapshot(self) -> List[int]:
        """Copy of the content, top first."""
        with self._lock:
            return list(reversed(self._values))
