"""
Adapter: Local Image Store

Keeps captured images in a local directory until OCR is done with them.
"""

import asyncio
import logging
import uuid
from pathlib import Path

from kycscan.core.interfaces.image_store import IImageStore

logger = logging.getLogger(__name__)


class LocalImageStore(IImageStore):
    """
    Image store on the local filesystem.

    Image refs are plain file paths.
    """

    def __init__(self, base_dir: str = "uploads"):
        self._base_dir = Path(base_dir)

    async def save(self, data: bytes, suffix: str = ".jpg") -> str:
        """Write an uploaded image and return its ref."""
        return await asyncio.to_thread(self._save, data, suffix)

    def _save(self, data: bytes, suffix: str) -> str:
        self._base_dir.mkdir(parents=True, exist_ok=True)
        path = self._base_dir / f"{uuid.uuid4().hex}{suffix}"
        path.write_bytes(data)
        return str(path)

    async def delete(self, image_ref: str) -> None:
        await asyncio.to_thread(self._delete, image_ref)

    @staticmethod
    def _delete(image_ref: str) -> None:
        Path(image_ref).unlink(missing_ok=True)
        logger.debug("Captured image deleted")
