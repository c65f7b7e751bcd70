"""Tests for the debounced save outbox."""

import asyncio

import pytest

from soa_core.documents import empty_document
from soa_core.editing import set_fixed_charge_surplus
from soa_core.exceptions import PersistenceError, SaveFailedError, TransientStoreError
from soa_core.models import SoADocument
from soa_service.config import PersistenceConfig
from soa_service.outbox import SaveOutbox


class RecordingSleep:
    """Stand-in for asyncio.sleep that records backoff delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class RecordingWriter:
    """Saves documents to a list, failing the first ``failures`` attempts."""

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.attempts = 0
        self.saved: list[SoADocument] = []

    async def __call__(self, document: SoADocument) -> SoADocument:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise TransientStoreError("connection reset", status_code=503)
        self.saved.append(document)
        return document


@pytest.fixture
def document() -> SoADocument:
    return empty_document("case-1")


def edits(document: SoADocument, count: int) -> list[SoADocument]:
    """Successive versions of a document, each with a different surplus."""
    section_id = document.sections[0].id
    return [set_fixed_charge_surplus(document, section_id, str(n * 100)) for n in range(1, count + 1)]


class TestFlush:
    """Tests for explicit flushing."""

    def test_flush_writes_latest_only(self, document):
        writer = RecordingWriter()

        async def scenario():
            outbox = SaveOutbox(writer, config=PersistenceConfig(debounce_seconds=10))
            for edited in edits(document, 3):
                outbox.submit(edited)
            saved = await outbox.flush()
            return outbox, saved

        outbox, saved = asyncio.run(scenario())

        assert len(writer.saved) == 1
        assert saved.sections[0].fixed_charge_surplus == 300
        assert not outbox.has_pending
        assert outbox.last_saved == saved

    def test_flush_with_nothing_pending(self):
        writer = RecordingWriter()

        async def scenario():
            return await SaveOutbox(writer).flush()

        assert asyncio.run(scenario()) is None
        assert writer.attempts == 0

    def test_close_flushes(self, document):
        writer = RecordingWriter()

        async def scenario():
            outbox = SaveOutbox(writer, config=PersistenceConfig(debounce_seconds=10))
            outbox.submit(document)
            await outbox.close()

        asyncio.run(scenario())
        assert writer.saved == [document]


class TestDebounce:
    """Tests for saving once edits pause."""

    def test_burst_saved_once_after_quiet_period(self, document):
        writer = RecordingWriter()

        async def scenario():
            outbox = SaveOutbox(writer, config=PersistenceConfig(debounce_seconds=0.01))
            for edited in edits(document, 5):
                outbox.submit(edited)
            await asyncio.sleep(0.2)
            return outbox

        outbox = asyncio.run(scenario())

        assert len(writer.saved) == 1
        assert writer.saved[0].sections[0].fixed_charge_surplus == 500
        assert not outbox.has_pending

    def test_nothing_written_before_quiet_period(self, document):
        writer = RecordingWriter()

        async def scenario():
            outbox = SaveOutbox(writer, config=PersistenceConfig(debounce_seconds=10))
            outbox.submit(document)
            await asyncio.sleep(0.01)
            pending = outbox.pending
            await outbox.flush()
            return pending

        pending = asyncio.run(scenario())
        assert pending == document
        assert len(writer.saved) == 1


class TestRetries:
    """Tests for transient failures while saving."""

    def test_transient_failures_retried(self, document):
        writer = RecordingWriter(failures=2)
        sleep = RecordingSleep()

        async def scenario():
            outbox = SaveOutbox(writer, config=PersistenceConfig(debounce_seconds=10), sleep=sleep)
            outbox.submit(document)
            return await outbox.flush()

        assert asyncio.run(scenario()) == document
        assert writer.attempts == 3
        assert sleep.delays == [1.0, 2.0]

    def test_exhausted_retries_keep_document_pending(self, document):
        """After four failed attempts the save fails but nothing is lost."""
        writer = RecordingWriter(failures=4)
        sleep = RecordingSleep()

        async def scenario():
            outbox = SaveOutbox(writer, config=PersistenceConfig(debounce_seconds=10), sleep=sleep)
            outbox.submit(document)
            with pytest.raises(SaveFailedError) as exc_info:
                await outbox.flush()
            still_pending = outbox.pending
            retried = await outbox.flush()
            return exc_info.value, still_pending, retried, outbox

        error, still_pending, retried, outbox = asyncio.run(scenario())

        assert error.attempts == 4
        assert error.case_id == "case-1"
        assert error.version == 1
        assert error.recoverable
        assert still_pending == document
        assert retried == document
        assert outbox.last_error is None
        assert sleep.delays == [1.0, 2.0, 4.0]

    def test_debounced_failure_recorded(self, document):
        writer = RecordingWriter(failures=100)

        async def scenario():
            outbox = SaveOutbox(
                writer,
                config=PersistenceConfig(debounce_seconds=0, max_retries=1),
                sleep=RecordingSleep(),
            )
            outbox.submit(document)
            await asyncio.sleep(0.05)
            return outbox

        outbox = asyncio.run(scenario())

        assert isinstance(outbox.last_error, SaveFailedError)
        assert outbox.last_error.attempts == 2
        assert outbox.pending == document


class RejectingWriter:
    """A store that refuses every document."""

    def __init__(self):
        self.attempts = 0

    async def __call__(self, document: SoADocument) -> SoADocument:
        self.attempts += 1
        raise PersistenceError("rejected", case_id=document.case_id)


class TestRejectedSaves:
    """Tests for saves the store refuses outright."""

    def test_debounced_rejection_recorded(self, document):
        writer = RejectingWriter()
        sleep = RecordingSleep()

        async def scenario():
            outbox = SaveOutbox(writer, config=PersistenceConfig(debounce_seconds=0), sleep=sleep)
            outbox.submit(document)
            await asyncio.sleep(0.05)
            return outbox

        outbox = asyncio.run(scenario())

        assert isinstance(outbox.last_error, SaveFailedError)
        assert outbox.last_error.attempts == 1
        assert not outbox.last_error.recoverable
        assert isinstance(outbox.last_error.__cause__, PersistenceError)
        assert outbox.pending == document
        assert writer.attempts == 1
        assert sleep.delays == []

    def test_flush_raises_save_failed(self, document):
        writer = RejectingWriter()

        async def scenario():
            outbox = SaveOutbox(writer, config=PersistenceConfig(debounce_seconds=10))
            outbox.submit(document)
            with pytest.raises(SaveFailedError) as exc_info:
                await outbox.flush()
            return exc_info.value, outbox

        error, outbox = asyncio.run(scenario())

        assert error.case_id == "case-1"
        assert outbox.last_error is error
        assert outbox.has_pending
