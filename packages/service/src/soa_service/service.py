"""Load, save, version and export Statements of Affairs for a case.

``StatementOfAffairsService`` sits between a ``CaseStoreProtocol`` adapter
and the pure functions in ``soa_core``. Reads are retried on transient store
failures. ``save`` makes a single attempt; use ``outbox()`` for debounced,
retrying saves while a document is being edited.
"""

import asyncio
from datetime import date
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

import structlog
from pydantic import BaseModel

from soa_core.documents import (
    heal_document,
    populate_missing_shareholders,
    seed_document,
    sync_schedule_c,
    sync_schedule_d,
)
from soa_core.exceptions import EntityNotFoundError
from soa_core.models import AuditWarning, CaseLedger, SoADocument, WaterfallResult
from soa_core.report import StatementOfAffairsReport
from soa_core.waterfall import WaterfallCalculator

from .config import SoAConfig
from .interfaces.base import CaseStoreProtocol, StoredDocument
from .outbox import SaveOutbox
from .retry import Sleep, retry_with_backoff

logger = structlog.get_logger()

T = TypeVar("T")


class LoadedStatement(BaseModel):
    """What ``load`` returns for a case.

    Attributes:
        ledger: Live creditor, employee and shareholder ledgers
        document: The working document (healed, or freshly seeded)
        persisted: Whether the document came from the store
        warnings: Repairs made while healing the stored document
    """

    model_config = {"frozen": True}

    ledger: CaseLedger
    document: SoADocument
    persisted: bool = False
    warnings: list[AuditWarning] = []


class StatementOfAffairsService:
    """
    Persistence boundary for the Statement of Affairs engine.

    Example:
        >>> service = StatementOfAffairsService(store)
        >>> loaded = await service.load("case-1")
        >>> result = service.compute(loaded.document, loaded.ledger)
        >>> html = service.export(loaded.document, loaded.ledger)
    """

    def __init__(
        self,
        store: CaseStoreProtocol,
        config: Optional[SoAConfig] = None,
        today: Callable[[], date] = date.today,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize service.

        Args:
            store: Adapter for case records and statement versions
            config: Service configuration (defaults from the environment)
            today: Clock used for ``as_at_date`` on save
            sleep: Awaitable sleep used for retry backoff
        """
        self.store = store
        self.config = config or SoAConfig()
        self._today = today
        self._sleep = sleep
        tolerance = self.config.engine.surplus_tolerance
        self.calculator = WaterfallCalculator(surplus_tolerance=tolerance)
        self.reporter = StatementOfAffairsReport(surplus_tolerance=tolerance)

    async def _call(self, operation_name: str, operation: Callable[[], Awaitable[T]]) -> T:
        return await retry_with_backoff(
            operation,
            config=self.config.persistence,
            operation_name=operation_name,
            sleep=self._sleep,
        )

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    async def fetch_ledger(self, case_id: str) -> CaseLedger:
        """Read the case, creditor and employee records and build a ledger.

        Raises:
            EntityNotFoundError: The case does not exist
        """
        case = await self._call("fetch_case", lambda: self.store.fetch_case(case_id))
        if case is None:
            raise EntityNotFoundError(
                f"Case not found: {case_id}",
                entity_type="case",
                entity_id=case_id,
            )

        creditors = await self._call("fetch_creditors", lambda: self.store.fetch_creditors(case_id))
        employees = await self._call("fetch_employees", lambda: self.store.fetch_employees(case_id))

        ledger = CaseLedger.model_validate(
            {
                "case_id": case_id,
                "company_name": case.get("company_name") or "",
                "creditors": [c for c in creditors if isinstance(c, dict)],
                "employees": [e for e in employees if isinstance(e, dict)],
                "shareholders": [s for s in case.get("shareholders") or [] if isinstance(s, dict)],
            }
        )
        logger.debug(
            "ledger_fetched",
            case_id=case_id,
            creditors=len(ledger.creditors),
            employees=len(ledger.employees),
            shareholders=len(ledger.shareholders),
        )
        return ledger

    async def load(self, case_id: str) -> LoadedStatement:
        """Load the latest stored version of a case's statement.

        A stored document is healed and, if its Schedule D is empty, filled
        from the register of members. A case with no stored document gets a
        seeded draft (version 1) that is not persisted until saved.
        """
        ledger = await self.fetch_ledger(case_id)
        stored = await self._call("latest_document", lambda: self.store.latest_document(case_id))

        if stored is None:
            document = seed_document(ledger)
            logger.info("statement_loaded", case_id=case_id, version=document.version, persisted=False)
            return LoadedStatement(ledger=ledger, document=document, persisted=False)

        raw: dict[str, Any] = dict(stored.data)
        if stored.as_at_date is not None:
            raw["as_at_date"] = stored.as_at_date
        document, warnings = heal_document(raw, case_id, stored.version)
        document = populate_missing_shareholders(document, ledger)

        logger.info(
            "statement_loaded",
            case_id=case_id,
            version=document.version,
            persisted=True,
            repairs=len(warnings),
        )
        return LoadedStatement(ledger=ledger, document=document, persisted=True, warnings=warnings)

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    async def save(self, document: SoADocument) -> SoADocument:
        """Upsert ``document`` by ``(case_id, version)``, stamping today's date.

        One attempt only; transient failures propagate as
        ``TransientStoreError`` for the caller (or an outbox) to retry.

        Returns:
            The document as saved, with ``as_at_date`` set
        """
        saved = document.model_copy(update={"as_at_date": self._today()})
        record = StoredDocument(
            case_id=saved.case_id,
            version=saved.version,
            as_at_date=saved.as_at_date,
            data=saved.to_record(),
        )

        existing = await self.store.find_document(saved.case_id, saved.version)
        if existing is not None and existing.id:
            await self.store.update_document(existing.id, record.model_copy(update={"id": existing.id}))
            logger.info("statement_updated", case_id=saved.case_id, version=saved.version)
        else:
            await self.store.create_document(record)
            logger.info("statement_created", case_id=saved.case_id, version=saved.version)
        return saved

    async def start_new_version(self, document: SoADocument) -> SoADocument:
        """Save a copy of ``document`` as the next version and return it.

        The new version number is one above both the document's own version
        and the highest version already stored, so no stored version is
        overwritten.
        """
        latest = await self._call(
            "latest_document", lambda: self.store.latest_document(document.case_id)
        )
        highest = max(document.version, latest.version if latest else 0)
        new_version = document.model_copy(update={"version": highest + 1})
        logger.info(
            "statement_version_started",
            case_id=document.case_id,
            from_version=document.version,
            to_version=highest + 1,
        )
        return await self._call("save_document", lambda: self.save(new_version))

    def outbox(self) -> SaveOutbox:
        """A debounced, retrying outbox that saves through this service."""
        return SaveOutbox(self.save, config=self.config.persistence, sleep=self._sleep)

    # -------------------------------------------------------------------------
    # Ledger sync
    # -------------------------------------------------------------------------

    async def sync_creditors(self, document: SoADocument) -> SoADocument:
        """Overwrite Schedule C from the live creditor and employee ledgers."""
        ledger = await self.fetch_ledger(document.case_id)
        return sync_schedule_c(document, ledger)

    async def sync_shareholders(self, document: SoADocument) -> SoADocument:
        """Overwrite Schedule D from the register of members."""
        ledger = await self.fetch_ledger(document.case_id)
        return sync_schedule_d(document, ledger)

    # -------------------------------------------------------------------------
    # Calculation and export
    # -------------------------------------------------------------------------

    def compute(self, document: SoADocument, ledger: Optional[CaseLedger] = None) -> WaterfallResult:
        return self.calculator.calculate(document, ledger)

    def export(
        self,
        document: SoADocument,
        ledger: Optional[CaseLedger] = None,
        format: str = "html",
    ) -> Union[str, bytes]:
        """Render the statement as HTML or PDF."""
        result = self.compute(document, ledger)
        return self.reporter.generate(document, ledger, format=format, result=result)


__all__ = ["LoadedStatement", "StatementOfAffairsService"]
