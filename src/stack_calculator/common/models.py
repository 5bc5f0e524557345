"""Pydantic models for calculator requests, history entries and outcomes."""
from enum import Enum
import json
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stack_calculator.common.errors import ErrorKind, UnknownPersistenceMethod
from stack_calculator.common.operations import INT32_MAX, INT32_MIN


# Signed 32-bit operand as accepted from callers
Int32 = Annotated[int, Field(ge=INT32_MIN, le=INT32_MAX)]


class Flavor(str, Enum):
    """Calculation mode that produced a history record."""

    INDEPENDENT = "INDEPENDENT"
    STACK = "STACK"


class Backend(str, Enum):
    """Persistence method selectable when reading the history."""

    RELATIONAL = "POSTGRES"
    DOCUMENT = "MONGO"

    @classmethod
    def parse(cls, value) -> "Backend":
        """
        Resolve a persistence method selector.

        :param value: Backend member or its wire value (``POSTGRES`` / ``MONGO``)

        :return: Matching backend
        :rtype: Backend
        :raises UnknownPersistenceMethod: For any other value
        """
        try:
            return cls(value)
        except ValueError:
            raise UnknownPersistenceMethod(value) from None


class CalculateRequest(BaseModel):
    """Body of an independent calculation request."""

    operation: Optional[str] = Field(default=None, description="Operation name, any case")
    arguments: List[Int32] = Field(default_factory=list, description="Operands in order")

    @field_validator("arguments", mode="before")
    def null_arguments_are_empty(cls, v):
        """Treat an explicit null like a missing list, so arity checks report it."""
        return [] if v is None else v


class ArgumentsRequest(BaseModel):
    """Body of a stack push request."""

    arguments: List[Int32] = Field(default_factory=list, description="Values to push, last one ends on top")


class HistoryEntry(BaseModel):
    """In-memory result of one completed operation."""

    model_config = ConfigDict(frozen=True)

    flavor: Flavor = Field(..., description="Mode the operation was performed in")
    operation: str = Field(..., description="Operation name as supplied by the caller")
    arguments: List[int] = Field(..., description="Operands in evaluation order")
    result: int = Field(..., description="Computed result")


class OperationRecord(BaseModel):
    """Persisted form of a history entry, identical in both stores."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: int = Field(..., ge=1, description="Surrogate key shared by both stores")
    flavor: Flavor
    operation: str
    result: int
    arguments: str = Field(..., description="JSON array text of the operands")

    @classmethod
    def from_entry(cls, entry: HistoryEntry, record_id: int) -> "OperationRecord":
        """
        Build the persisted record of an entry.

        :param HistoryEntry entry: Completed operation
        :param int record_id: Surrogate key assigned at write time

        :return: Record ready to be stored
        :rtype: OperationRecord
        """
        return cls(
            id=record_id,
            flavor=entry.flavor,
            operation=entry.operation,
            result=entry.result,
            arguments=json.dumps(entry.arguments, separators=(",", ":")),
        )

    def argument_values(self) -> List[int]:
        """Decode the stored operands."""
        return json.loads(self.arguments)


class Outcome(BaseModel):
    """Tagged result of a calculator operation: either ``result`` or an error."""

    result: Optional[int] = None
    error: Optional[ErrorKind] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class HistoryOutcome(BaseModel):
    """Tagged result of a history query."""

    result: Optional[List[OperationRecord]] = None
    error: Optional[ErrorKind] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
