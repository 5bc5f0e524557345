"""Document history store backed by a MongoDB collection."""
from typing import Any, Dict, List

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from stack_calculator.common.errors import PersistenceError
from stack_calculator.common.logger import logger
from stack_calculator.common.models import Flavor, OperationRecord


class DocumentStore:
    """
    History collection access: insert with explicit id, scan by flavor.

    Documents use the shared surrogate key as ``_id``. Every pymongo failure
    (including server selection timeouts) is reported as :class:`PersistenceError`.
    """

    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    @classmethod
    def from_url(cls, url: str, database: str, collection: str, timeout_ms: int = 5000) -> "DocumentStore":
        client: MongoClient = MongoClient(url, serverSelectionTimeoutMS=timeout_ms)
        return cls(client[database][collection])

    def insert(self, record: OperationRecord) -> None:
        """
        Insert a record under its own id.

        :param OperationRecord record: Record with an assigned id
        :raises PersistenceError: If the insert fails
        """
        document: Dict[str, Any] = {
            "_id": record.id,
            "flavor": record.flavor,
            "operation": record.operation,
            "result": record.result,
            "arguments": record.arguments,
        }
        try:
            self.collection.insert_one(document)
        except PyMongoError as exc:
            raise self._failure("insert operation", exc) from exc

    def scan(self, flavor: Flavor) -> List[OperationRecord]:
        """Return every record of one flavor in natural (insertion) order."""
        try:
            documents = list(self.collection.find({"flavor": Flavor(flavor).value}))
        except PyMongoError as exc:
            raise self._failure("read history", exc) from exc
        return [
            OperationRecord(
                id=document["_id"],
                flavor=document["flavor"],
                operation=document["operation"],
                result=document["result"],
                arguments=document["arguments"],
            )
            for document in documents
        ]

    @staticmethod
    def _failure(action: str, exc: PyMongoError) -> PersistenceError:
        logger.error(f"🍃❌ Document store failed to {action}: {exc}")
        return PersistenceError(f"Error: document store failed to {action}: {exc}")
