"""Relational history store backed by SQLAlchemy (PostgreSQL in production)."""
from typing import List

from sqlalchemy import Engine, Integer, String, Text, create_engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from stack_calculator.common.errors import PersistenceError
from stack_calculator.common.logger import logger
from stack_calculator.common.models import Flavor, OperationRecord


class Base(DeclarativeBase):
    pass


class OperationRow(Base):
    """Row of the ``operations`` table; ``rawid`` is assigned by the caller."""

    __tablename__ = "operations"

    rawid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    flavor: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    operation: Mapped[str] = mapped_column(String(64), nullable=False)
    result: Mapped[int] = mapped_column(Integer, nullable=False)
    arguments: Mapped[str] = mapped_column(Text, nullable=False)

    def to_record(self) -> OperationRecord:
        return OperationRecord(
            id=self.rawid,
            flavor=self.flavor,
            operation=self.operation,
            result=self.result,
            arguments=self.arguments,
        )


class RelationalStore:
    """
    History table access: insert with explicit id, max id, scan by flavor.

    Every SQLAlchemy failure (including connection timeouts) is reported as
    :class:`PersistenceError`.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, url: str) -> "RelationalStore":
        return cls(create_engine(url, pool_pre_ping=True))

    def create_schema(self) -> None:
        """Create the ``operations`` table if it does not exist yet."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise self._failure("create schema", exc) from exc

    def max_id(self) -> int:
        """
        Return the highest stored id.

        :return: Current maximum, 0 when the table is empty
        :rtype: int
        :raises PersistenceError: If the query fails
        """
        try:
            with Session(self.engine) as session:
                current = session.scalar(select(func.max(OperationRow.rawid)))
        except SQLAlchemyError as exc:
            raise self._failure("read max id", exc) from exc
        return current or 0

    def insert(self, record: OperationRecord) -> None:
        """
        Insert a record under its own id and commit.

        :param OperationRecord record: Record with an assigned id
        :raises PersistenceError: If the insert or the commit fails
        """
        row = OperationRow(
            rawid=record.id,
            flavor=record.flavor,
            operation=record.operation,
            result=record.result,
            arguments=record.arguments,
        )
        try:
            with self._sessions.begin() as session:
                session.add(row)
        except SQLAlchemyError as exc:
            raise self._failure("insert operation", exc) from exc

    def scan(self, flavor: Flavor) -> List[OperationRecord]:
        """Return every record of one flavor in id order."""
        statement = (
            select(OperationRow)
            .where(OperationRow.flavor == Flavor(flavor).value)
            .order_by(OperationRow.rawid)
        )
        try:
            with Session(self.engine) as session:
                rows = session.scalars(statement).all()
        except SQLAlchemyError as exc:
            raise self._failure("read history", exc) from exc
        return [row.to_record() for row in rows]

    @staticmethod
    def _failure(action: str, exc: SQLAlchemyError) -> PersistenceError:
        logger.error(f"🐘❌ Relational store failed to {action}: {exc}")
        base = getattr(exc, "orig", None)
        if base is not None:
            logger.error(f"🐘❌ Base exception: {base}")
        return PersistenceError(f"Error: relational store failed to {action}: {base or exc}")
