"""
Adapter: PaddleOCR Engine.

Recognizes text on a captured document image with PaddleOCR and returns
it line by line, top to bottom, so the field extractors can work on
line positions.
"""

import asyncio
import logging
from typing import Any

import numpy as np

from kycscan.core.errors import EnvironmentUnavailable, RecognitionFailed
from kycscan.core.interfaces.ocr_engine import IOCREngine, OCRResult, TextBlock

logger = logging.getLogger(__name__)


class PaddleOCREngine(IOCREngine):
    """
    OCR using PaddleOCR.

    Pipeline:
        1. Read + decode the image (OpenCV)
        2. PaddleOCR detects boxes + text + confidence (worker thread)
        3. Drop low-confidence blocks, sort by reading order, join with newlines
    """

    ENGINE_NAME = "paddleocr"

    def __init__(self, lang: str = "en", use_gpu: bool = False, min_confidence: float = 0.5):
        self._lang = lang
        self._use_gpu = use_gpu
        self._min_confidence = min_confidence
        self._engine = None  # Lazy init (PaddleOCR is heavy)

    def _get_engine(self) -> Any:
        """Initialize PaddleOCR on first use."""
        if self._engine is None:
            try:
                from paddleocr import PaddleOCR
            except ImportError as e:
                raise EnvironmentUnavailable(
                    "PaddleOCR is not installed (pip install 'kycscan[ocr]')"
                ) from e

            self._engine = PaddleOCR(
                use_angle_cls=True,
                lang=self._lang,
                use_gpu=self._use_gpu,
                show_log=False,
            )
            logger.info("PaddleOCR initialized")
        return self._engine

    async def recognize_text(self, image_ref: str) -> OCRResult:
        return await asyncio.to_thread(self._recognize, image_ref)

    def _recognize(self, image_ref: str) -> OCRResult:
        engine = self._get_engine()
        img = self._load_image(image_ref)

        try:
            result = engine.ocr(img, cls=True)
        except Exception as e:
            raise RecognitionFailed(f"PaddleOCR failed: {e}") from e

        if not result or not result[0]:
            raise RecognitionFailed("No text detected")

        # --- Process results ---
        blocks: list[TextBlock] = []
        for line in result[0]:
            bbox = line[0]
            text = line[1][0]
            conf = float(line[1][1])
            if conf < self._min_confidence or not text.strip():
                continue
            blocks.append(TextBlock(
                text=text.strip(),
                confidence=conf,
                bounding_box=[
                    int(bbox[0][0]), int(bbox[0][1]),
                    int(bbox[2][0]), int(bbox[2][1]),
                ],
            ))

        if not blocks:
            raise RecognitionFailed("No text above the confidence threshold")

        blocks.sort(key=lambda b: (b.bounding_box[1], b.bounding_box[0]))
        logger.debug(f"PaddleOCR returned {len(blocks)} text blocks")
        return OCRResult(
            text="\n".join(b.text for b in blocks),
            blocks=blocks,
            ocr_engine=self.ENGINE_NAME,
        )

    @staticmethod
    def _load_image(image_ref: str) -> np.ndarray:
        """Decode the image from disk."""
        import cv2

        try:
            img_array = np.fromfile(image_ref, dtype=np.uint8)
        except OSError as e:
            raise RecognitionFailed(f"Cannot read image: {e}") from e

        img = cv2.imdecode(img_array, cv2.IMREAD_COLOR)
        if img is None:
            raise RecognitionFailed("Invalid image")
        return img
