"""
Contract: Image Store

Owns captured document images between capture and OCR. Images hold
sensitive identity data and are deleted right after every OCR attempt.
"""

from abc import ABC, abstractmethod


class IImageStore(ABC):
    """
    Port: Image Store
    """

    @abstractmethod
    async def delete(self, image_ref: str) -> None:
        """
        Delete an image. Idempotent: an image that is already gone
        is not an error.
        """
        ...
