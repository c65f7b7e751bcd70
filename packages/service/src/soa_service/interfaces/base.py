"""Storage interfaces for the Statement of Affairs service.

The service never talks to a particular database. It depends on
``CaseStoreProtocol``, a structural (duck-typed) contract: any class with
matching async methods can back the service, no inheritance required.

Example Usage:
    ```python
    from soa_service.interfaces.base import CaseStoreProtocol, StoredDocument

    class RestCaseStore:
        '''Adapter for the case-management REST API.'''

        async def latest_document(self, case_id: str) -> Optional[StoredDocument]:
            rows = await self._client.get("/statements", case_id=case_id, order="-version")
            return StoredDocument.model_validate(rows[0]) if rows else None
        ...

    # RestCaseStore is compatible with CaseStoreProtocol without inheriting it
    ```

Adapters raise ``TransientStoreError`` for rate limits and network failures
(those are retried) and ``PersistenceError`` for anything else.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field


# =============================================================================
# RECORD MODELS
# =============================================================================

class StoredDocument(BaseModel):
    """A Statement of Affairs version as held by the store.

    Attributes:
        id: Store-assigned record id
        case_id: The case the statement belongs to
        version: Version number, unique per case
        as_at_date: Date the version was last saved
        data: The schedules in their persisted (camelCase) shape
    """

    id: Optional[str] = Field(default=None, description="Store-assigned record id")
    case_id: str
    version: int = Field(default=1, ge=1)
    as_at_date: Optional[date] = None
    data: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# STORE PROTOCOL
# =============================================================================

@runtime_checkable
class CaseStoreProtocol(Protocol):
    """Contract for the store holding case ledgers and statement versions.

    Ledger methods return raw records as the case system stores them
    (creditor names under ``creditor_name``, addresses as dicts, nominal
    values in pence); the service turns them into ledger models.
    """

    async def fetch_case(self, case_id: str) -> Optional[dict[str, Any]]:
        """Return the case record (company name, register of members), or None."""
        ...

    async def fetch_creditors(self, case_id: str) -> list[dict[str, Any]]:
        """Return the creditor ledger for a case."""
        ...

    async def fetch_employees(self, case_id: str) -> list[dict[str, Any]]:
        """Return the employee ledger for a case."""
        ...

    async def latest_document(self, case_id: str) -> Optional[StoredDocument]:
        """Return the highest version stored for a case, or None."""
        ...

    async def find_document(self, case_id: str, version: int) -> Optional[StoredDocument]:
        """Return the record for one ``(case_id, version)``, or None."""
        ...

    async def create_document(self, record: StoredDocument) -> StoredDocument:
        """Store a new version and return it with its record id."""
        ...

    async def update_document(self, record_id: str, record: StoredDocument) -> StoredDocument:
        """Overwrite an existing record in place."""
        ...


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "StoredDocument",
    "CaseStoreProtocol",
]
