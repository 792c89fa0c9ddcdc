"""Fakes for the OCR, image store and repository ports."""

import asyncio

from kycscan.core.errors import PersistenceError
from kycscan.core.interfaces.document_repository import IDocumentRepository
from kycscan.core.interfaces.image_store import IImageStore
from kycscan.core.interfaces.ocr_engine import IOCREngine, OCRResult


class FakeOCREngine(IOCREngine):
    """Returns canned text, or raises the configured error."""

    def __init__(self, text: str = "", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[str] = []

    async def recognize_text(self, image_ref: str) -> OCRResult:
        self.calls.append(image_ref)
        if self.error is not None:
            raise self.error
        return OCRResult(text=self.text, ocr_engine="fake")


class BlockingOCREngine(FakeOCREngine):
    """Holds the OCR call open until `release` is set."""

    def __init__(self, text: str = ""):
        super().__init__(text)
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def recognize_text(self, image_ref: str) -> OCRResult:
        self.calls.append(image_ref)
        self.started.set()
        await self.release.wait()
        return OCRResult(text=self.text, ocr_engine="fake")


class FakeImageStore(IImageStore):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.deleted: list[str] = []

    async def delete(self, image_ref: str) -> None:
        self.deleted.append(image_ref)
        if self.fail:
            raise OSError("storage unreachable")


class FailingRepository(IDocumentRepository):
    async def submit_document(self, user_id, document_type, record):
        raise PersistenceError("service unavailable")

    async def get_documents(self, user_id):
        return []

    async def update_status(self, document_id, status, reason=None):
        raise PersistenceError("service unavailable")
