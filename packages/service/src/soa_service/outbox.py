"""Debounced, retrying writes of the document being edited.

Every edit submits the latest document. The outbox waits for a quiet
period (``debounce_seconds``) before writing, so a burst of edits becomes
one save of the final state. Transient store failures are retried with
exponential backoff. When retries run out, or the store rejects the
document outright, the document stays pending,
``SaveFailedError`` is raised from ``flush()``, and a later ``submit`` or
``flush`` tries again.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog

from soa_core.exceptions import PersistenceError, SaveFailedError, TransientStoreError
from soa_core.models import SoADocument

from .config import PersistenceConfig
from .retry import Sleep, retry_with_backoff

logger = structlog.get_logger()

Writer = Callable[[SoADocument], Awaitable[SoADocument]]


class SaveOutbox:
    """
    Hold the most recent unsaved document and write it when edits pause.

    Example:
        >>> outbox = SaveOutbox(service.save)
        >>> outbox.submit(document)      # inside a running event loop
        >>> saved = await outbox.flush()
    """

    def __init__(
        self,
        writer: Writer,
        config: Optional[PersistenceConfig] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize outbox.

        Args:
            writer: Coroutine that persists one document (one attempt)
            config: Debounce and retry settings
            sleep: Awaitable sleep used for retry backoff
        """
        self._writer = writer
        self._config = config or PersistenceConfig()
        self._sleep = sleep
        self._pending: Optional[SoADocument] = None
        self._timer: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        self.last_saved: Optional[SoADocument] = None
        self.last_error: Optional[SaveFailedError] = None

    @property
    def pending(self) -> Optional[SoADocument]:
        """The document waiting to be written, if any."""
        return self._pending

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def submit(self, document: SoADocument) -> None:
        """Queue ``document`` for saving, replacing anything still pending.

        Must be called from within a running event loop.
        """
        self._pending = document
        self._cancel_timer()
        self._timer = asyncio.get_running_loop().create_task(self._save_after_quiet_period())
        logger.debug(
            "save_queued",
            case_id=document.case_id,
            version=document.version,
            debounce_seconds=self._config.debounce_seconds,
        )

    async def flush(self) -> Optional[SoADocument]:
        """Write the pending document now.

        Returns:
            The saved document, or None when nothing was pending

        Raises:
            SaveFailedError: Retries were exhausted or the store rejected the
                document; the document stays pending
        """
        self._cancel_timer()
        return await self._write_pending()

    async def close(self) -> Optional[SoADocument]:
        """Flush before shutting down."""
        return await self.flush()

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _save_after_quiet_period(self) -> None:
        await asyncio.sleep(self._config.debounce_seconds)
        self._timer = None
        try:
            await self._write_pending()
        except SaveFailedError as e:
            # Kept for the caller; the next submit or flush retries
            logger.error(
                "debounced_save_failed",
                case_id=e.case_id,
                version=e.version,
                attempts=e.attempts,
                recoverable=e.recoverable,
            )

    async def _write_pending(self) -> Optional[SoADocument]:
        async with self._lock:
            document = self._pending
            if document is None:
                return None

            try:
                saved = await retry_with_backoff(
                    lambda: self._writer(document),
                    config=self._config,
                    operation_name="save_document",
                    sleep=self._sleep,
                )
            except TransientStoreError as e:
                self.last_error = self._save_failed(document, e, self._config.max_retries + 1)
                raise self.last_error from e
            except PersistenceError as e:
                # Rejected by the store; not retried
                self.last_error = self._save_failed(document, e, 1, recoverable=False)
                raise self.last_error from e

            if self._pending is document:
                self._pending = None
            self.last_saved = saved
            self.last_error = None
            logger.info("document_saved", case_id=saved.case_id, version=saved.version)
            return saved

    @staticmethod
    def _save_failed(
        document: SoADocument,
        cause: PersistenceError,
        attempts: int,
        recoverable: bool = True,
    ) -> SaveFailedError:
        return SaveFailedError(
            f"Could not save statement for case {document.case_id} "
            f"version {document.version}: {cause}",
            attempts=attempts,
            case_id=document.case_id,
            version=document.version,
            recoverable=recoverable,
        )


__all__ = ["SaveOutbox"]
