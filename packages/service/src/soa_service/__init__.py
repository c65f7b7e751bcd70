"""SoA Service - persistence boundary for the Statement of Affairs engine."""

from soa_service.config import (
    EngineConfig,
    PersistenceConfig,
    SoAConfig,
)
from soa_service.interfaces import CaseStoreProtocol, StoredDocument
from soa_service.memory_store import InMemoryCaseStore
from soa_service.outbox import SaveOutbox
from soa_service.retry import retry_with_backoff
from soa_service.service import LoadedStatement, StatementOfAffairsService

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "PersistenceConfig",
    "SoAConfig",
    "CaseStoreProtocol",
    "StoredDocument",
    "InMemoryCaseStore",
    "SaveOutbox",
    "retry_with_backoff",
    "LoadedStatement",
    "StatementOfAffairsService",
]
