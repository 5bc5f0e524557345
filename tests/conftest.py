"""Shared fixtures: in-memory stores, history store and calculator service."""
import mongomock
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from stack_calculator.persistence.document import DocumentStore
from stack_calculator.persistence.history import HistoryStore
from stack_calculator.persistence.relational import RelationalStore
from stack_calculator.server.service import CalculatorService
from stack_calculator.server.stack import OperandStack


@pytest.fixture
def relational_store() -> RelationalStore:
    """Relational store on a private in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    store = RelationalStore(engine)
    store.create_schema()
    yield store
    engine.dispose()


@pytest.fixture
def document_store() -> DocumentStore:
    """Document store on a mongomock collection."""
    return DocumentStore(mongomock.MongoClient()["calculator"]["calculator"])


@pytest.fixture
def history_store(relational_store: RelationalStore, document_store: DocumentStore) -> HistoryStore:
    return HistoryStore(relational_store, document_store)


@pytest.fixture
def stack() -> OperandStack:
    return OperandStack()


@pytest.fixture
def service(stack: OperandStack, history_store: HistoryStore) -> CalculatorService:
    return CalculatorService(stack, history_store)
