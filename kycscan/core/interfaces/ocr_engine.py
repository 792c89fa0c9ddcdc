"""
Contract: OCR Engine

Turns a captured document image into raw multi-line text.
Any engine (PaddleOCR, ML Kit bridge, external API) must implement
this contract and translate its own failures into the two OCR errors.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class TextBlock:
    """A recognized text block with its position on the image."""
    text: str
    confidence: float = 1.0
    bounding_box: list | None = None  # [x1, y1, x2, y2]


@dataclass
class OCRResult:
    """Raw OCR output. `text` joins the blocks with newlines."""
    text: str
    blocks: list[TextBlock] = field(default_factory=list)
    ocr_engine: str = ""


class IOCREngine(ABC):
    """
    Port: OCR Engine

    Raises:
        EnvironmentUnavailable: OCR cannot run in this runtime.
        RecognitionFailed: OCR ran but produced no usable text.
    """

    @abstractmethod
    async def recognize_text(self, image_ref: str) -> OCRResult:
        """
        Recognize text in an image.

        Args:
            image_ref: Reference to the captured image (local path / URI).

        Returns:
            OCRResult with the full text.
        """
        ...
