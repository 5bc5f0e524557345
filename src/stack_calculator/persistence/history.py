"""Dual-store history persistence."""
from typing import List, Optional, Union

from stack_calculator.common.logger import logger
from stack_calculator.common.models import Backend, Flavor, HistoryEntry, OperationRecord
from stack_calculator.persistence.document import DocumentStore
from stack_calculator.persistence.id_allocator import IdAllocator, MaxIdAllocator
from stack_calculator.persistence.relational import RelationalStore


class HistoryStore:
    """
    Write every completed operation to the relational store, then to the document store.

    Write protocol:
        1. Allocate an id (by default relational max + 1)
        2. Insert into the relational store; on failure stop, the document
           store is not written
        3. Insert the same record, same id, into the document store

    The two inserts are not transactional: when step 3 fails the relational
    row stays committed and the error is still reported to the caller.
    """

    def __init__(
        self,
        relational: RelationalStore,
        document: DocumentStore,
        allocator: Optional[IdAllocator] = None,
    ) -> None:
        self.relational = relational
        self.document = document
        self.allocator = allocator if allocator is not None else MaxIdAllocator(relational)

    def write(self, entry: HistoryEntry) -> OperationRecord:
        """
        Persist a completed operation in both stores.

        :param HistoryEntry entry: Completed operation

        :return: Stored record, with its assigned id
        :rtype: OperationRecord
        :raises PersistenceError: If the id lookup or either insert fails
        """
        record = OperationRecord.from_entry(entry, self.allocator.next_id())

        self.relational.insert(record)
        logger.debug(f"🐘 Stored operation #{record.id} ({record.flavor} {record.operation})")

        self.document.insert(record)
        logger.debug(f"🍃 Stored operation #{record.id} ({record.flavor} {record.operation})")
        return record

    def read(
        self,
        backend: Union[Backend, str, None],
        flavor: Union[Flavor, str, None] = None,
    ) -> List[OperationRecord]:
        """
        Read the history back from one of the stores.

        Without a flavor (None or empty) the result is every INDEPENDENT record
        followed by every STACK record, for both backends. A flavor that is
        neither INDEPENDENT nor STACK matches no record.

        :param backend: ``POSTGRES`` (relational) or ``MONGO`` (document)
        :param flavor: Optional flavor filter, ``""`` counts as absent

        :return: Matching records
        :rtype: List[OperationRecord]
        :raises UnknownPersistenceMethod: If the backend is not recognized
        :raises PersistenceError: If the store cannot be read
        """
        selected = Backend.parse(backend)
        store = self.relational if selected is Backend.RELATIONAL else self.document

        if not flavor:
            return store.scan(Flavor.INDEPENDENT) + store.scan(Flavor.STACK)
        try:
            selected_flavor = Flavor(flavor)
        except ValueError:
            # No record carries an unknown flavor
            return []
        return store.scan(selected_flavor)
