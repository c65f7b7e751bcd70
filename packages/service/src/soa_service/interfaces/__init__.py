"""Storage interfaces.

Available Interfaces:
    CaseStoreProtocol: The async contract any store adapter must satisfy
    StoredDocument: A statement version as held by the store
"""

from soa_service.interfaces.base import (
    CaseStoreProtocol,
    StoredDocument,
)

__all__ = [
    "CaseStoreProtocol",
    "StoredDocument",
]
