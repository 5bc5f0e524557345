"""Request flows of the calculator: independent calculation, stack mode and history."""
import logging
from typing import List, Optional, Sequence

from stack_calculator.common.errors import CalculatorError
from stack_calculator.common.evaluator import Evaluator
from stack_calculator.common.logger import independent_logger, stack_logger
from stack_calculator.common.models import Flavor, HistoryEntry, HistoryOutcome, Outcome
from stack_calculator.common.operations import arity
from stack_calculator.persistence.history import HistoryStore
from stack_calculator.server.stack import OperandStack


def _fail(log: logging.Logger, error: CalculatorError) -> Outcome:
    log.error(f"Server encountered an error ! message: {error.message}")
    return Outcome(error=error.kind, error_message=error.message)


def _join(values: Sequence[int]) -> str:
    return ", ".join(str(value) for value in values)


class CalculatorService:
    """
    Orchestrates the evaluator, the shared operand stack and the history store.

    Every method returns a tagged outcome instead of raising: domain errors
    are logged on the logger of their flavor and reported through
    ``error`` / ``error_message``.

    Stack mode pops operands top first and evaluates them in push order, so
    pushing ``[10, 3]`` then operating ``minus`` computes ``10 - 3``. Operands
    popped for an operation are consumed even if evaluation or persistence
    fails afterwards.
    """

    def __init__(self, stack: OperandStack, history: HistoryStore, evaluator: Optional[Evaluator] = None) -> None:
        self.stack = stack
        self.history_store = history
        self.evaluator = evaluator if evaluator is not None else Evaluator()

    def calculate(self, operation: Optional[str], arguments: Sequence[int]) -> Outcome:
        """
        Evaluate an independent operation and record it.

        :param str operation: Operation name, any case
        :param Sequence[int] arguments: Operands in order

        :return: Result or error
        :rtype: Outcome
        """
        args: List[int] = list(arguments)
        try:
            result = self.evaluator.evaluate(operation, args)
            independent_logger.info(f"Performing operation {operation}. Result is {result}")
            independent_logger.debug(f"Performing operation: {operation}({_join(args)}) = {result}")
            entry = HistoryEntry(flavor=Flavor.INDEPENDENT, operation=operation, arguments=args, result=result)
            self.history_store.write(entry)
        except CalculatorError as error:
            return _fail(independent_logger, error)
        return Outcome(result=result)

    def push(self, arguments: Sequence[int]) -> Outcome:
        """Push all arguments on the stack and return the new size."""
        args: List[int] = list(arguments)
        size = self.stack.push_all(args)
        size_before = size - len(args)
        stack_logger.info(f"Adding total of {len(args)} argument(s) to the stack | Stack size: {size}")
        stack_logger.debug(
            f"Adding arguments: {_join(args)} | Stack size before {size_before} | stack size after {size}"
        )
        return Outcome(result=size)

    def operate(self, operation: Optional[str]) -> Outcome:
        """
        Apply an operation to the operands on top of the stack and record it.

        :param str operation: Operation name, any case

        :return: Result or error
        :rtype: Outcome
        """
        try:
            needed = arity(operation)
            op = operation.lower()
            popped = self.stack.pop_for_operation(needed, op)
            args = list(reversed(popped))
            result = self.evaluator.evaluate(operation, args)
            stack_logger.info(
                f"Performing operation {op}. Result is {result} | stack size: {self.stack.size()}"
            )
            stack_logger.debug(f"Performing operation: {op}({_join(args)}) = {result}")
            entry = HistoryEntry(flavor=Flavor.STACK, operation=operation, arguments=args, result=result)
            self.history_store.write(entry)
        except CalculatorError as error:
            return _fail(stack_logger, error)
        return Outcome(result=result)

    def pop(self, count: int) -> Outcome:
        """Drop ``count`` values from the stack and return the new size."""
        try:
            size = self.stack.pop_discard(count)
        except CalculatorError as error:
            return _fail(stack_logger, error)
        if count > 0:
            stack_logger.info(f"Removing total {count} argument(s) from the stack | Stack size: {size}")
        return Outcome(result=size)

    def size(self) -> Outcome:
        size = self.stack.size()
        stack_logger.info(f"Stack size is {size}")
        stack_logger.debug(f"Stack content (first == top): [{_join(self.stack.snapshot())}]")
        return Outcome(result=size)

    def history(self, persistence_method: Optional[str], flavor: Optional[str] = None) -> HistoryOutcome:
        """
        Read the recorded operations from the selected store.

        :param str persistence_method: ``POSTGRES`` or ``MONGO``, required
        :param str flavor: Optional flavor filter, empty means no filter

        :return: Records or error
        :rtype: HistoryOutcome
        """
        flavor = flavor or None
        log = independent_logger if flavor == Flavor.INDEPENDENT else stack_logger
        try:
            records = self.history_store.read(persistence_method, flavor)
        except CalculatorError as error:
            log.error(f"Server encountered an error ! message: {error.message}")
            return HistoryOutcome(error=error.kind, error_message=error.message)

        if flavor in (None, Flavor.STACK):
            stack_count = sum(1 for record in records if record.flavor == Flavor.STACK)
            stack_logger.info(f"History: So far total {stack_count} stack actions")
        if flavor in (None, Flavor.INDEPENDENT):
            independent_count = sum(1 for record in records if record.flavor == Flavor.INDEPENDENT)
            independent_logger.info(f"History: So far total {independent_count} independent actions")
        return HistoryOutcome(result=records)
