"""In-process implementation of ``CaseStoreProtocol``.

Used by tests and the demo script. Records are deep-copied on the way in
and out, so callers cannot mutate stored state by accident. Failures can be
injected per operation to exercise retry handling.
"""

import copy
import uuid
from collections import defaultdict
from typing import Any, Optional

import structlog

from soa_core.exceptions import PersistenceError, TransientStoreError

from .interfaces.base import StoredDocument

logger = structlog.get_logger()


class InMemoryCaseStore:
    """Dictionary-backed case store.

    Example:
        >>> store = InMemoryCaseStore()
        >>> store.add_case("case-1", company_name="Acme Ltd")
        >>> store.add_creditor("case-1", {"creditor_name": "HMRC", "balance_owed": 1200})
        >>> store.fail("create_document", times=2, status_code=429)
    """

    def __init__(self):
        self._cases: dict[str, dict[str, Any]] = {}
        self._creditors: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self._employees: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self._documents: dict[str, StoredDocument] = {}
        self._failures: dict[str, list[int]] = defaultdict(list)
        self.calls: list[str] = []

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    def add_case(
        self,
        case_id: str,
        company_name: str = "",
        shareholders: Optional[list[dict[str, Any]]] = None,
        **fields: Any,
    ) -> None:
        self._cases[case_id] = {
            "id": case_id,
            "company_name": company_name,
            "shareholders": copy.deepcopy(shareholders or []),
            **fields,
        }

    def add_creditor(self, case_id: str, record: dict[str, Any]) -> None:
        self._creditors[case_id].append(copy.deepcopy(record))

    def add_employee(self, case_id: str, record: dict[str, Any]) -> None:
        self._employees[case_id].append(copy.deepcopy(record))

    def put_document(self, record: StoredDocument) -> StoredDocument:
        """Store a record directly, bypassing failure injection."""
        stored = record.model_copy(update={"id": record.id or str(uuid.uuid4())}, deep=True)
        self._documents[stored.id] = stored
        return stored.model_copy(deep=True)

    def documents(self, case_id: str) -> list[StoredDocument]:
        """All stored versions for a case, lowest version first."""
        found = [d for d in self._documents.values() if d.case_id == case_id]
        return [d.model_copy(deep=True) for d in sorted(found, key=lambda d: d.version)]

    def fail(self, operation: str, times: int = 1, status_code: int = 503) -> None:
        """Make the next ``times`` calls to ``operation`` raise ``TransientStoreError``."""
        self._failures[operation].extend([status_code] * times)

    def _enter(self, operation: str, case_id: Optional[str] = None) -> None:
        self.calls.append(operation)
        pending = self._failures.get(operation)
        if pending:
            status_code = pending.pop(0)
            logger.debug("store_failure_injected", operation=operation, status_code=status_code)
            raise TransientStoreError(
                f"{operation} failed with status {status_code}",
                status_code=status_code,
                case_id=case_id,
                operation=operation,
            )

    # -------------------------------------------------------------------------
    # CaseStoreProtocol
    # -------------------------------------------------------------------------

    async def fetch_case(self, case_id: str) -> Optional[dict[str, Any]]:
        self._enter("fetch_case", case_id)
        case = self._cases.get(case_id)
        return copy.deepcopy(case) if case is not None else None

    async def fetch_creditors(self, case_id: str) -> list[dict[str, Any]]:
        self._enter("fetch_creditors", case_id)
        return copy.deepcopy(self._creditors.get(case_id, []))

    async def fetch_employees(self, case_id: str) -> list[dict[str, Any]]:
        self._enter("fetch_employees", case_id)
        return copy.deepcopy(self._employees.get(case_id, []))

    async def latest_document(self, case_id: str) -> Optional[StoredDocument]:
        self._enter("latest_document", case_id)
        versions = self.documents(case_id)
        return versions[-1] if versions else None

    async def find_document(self, case_id: str, version: int) -> Optional[StoredDocument]:
        self._enter("find_document", case_id)
        for document in self.documents(case_id):
            if document.version == version:
                return document
        return None

    async def create_document(self, record: StoredDocument) -> StoredDocument:
        self._enter("create_document", record.case_id)
        for existing in self._documents.values():
            if existing.case_id == record.case_id and existing.version == record.version:
                raise PersistenceError(
                    f"Version {record.version} already exists for case {record.case_id}",
                    case_id=record.case_id,
                    version=record.version,
                    operation="create_document",
                )
        return self.put_document(record.model_copy(update={"id": None}))

    async def update_document(self, record_id: str, record: StoredDocument) -> StoredDocument:
        self._enter("update_document", record.case_id)
        if record_id not in self._documents:
            raise PersistenceError(
                f"No stored document with id {record_id}",
                case_id=record.case_id,
                version=record.version,
                operation="update_document",
            )
        return self.put_document(record.model_copy(update={"id": record_id}))


__all__ = ["InMemoryCaseStore"]
