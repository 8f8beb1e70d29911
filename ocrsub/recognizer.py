"""Text recognition (OCR) on decoded frames: PaddleOCR and Apple Vision."""

import logging
import platform
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import numpy as np

from .exceptions import ConfigurationError, RecognitionError
from .models import Region

logger = logging.getLogger(__name__)

ENGINES = ("auto", "paddle", "vision")

# Language codes accepted by PaddleOCR's `lang` argument.
PADDLE_LANGUAGES = (
    "ch", "en", "chinese_cht", "japan", "korean", "fr", "german", "es", "it",
    "pt", "ru", "uk", "be", "ar", "fa", "ur", "hi", "mr", "ne", "ta", "te",
    "ka", "kn", "latin", "arabic", "cyrillic", "devanagari", "vi", "ms",
    "id", "tr", "pl", "nl", "no", "sv", "da", "cs", "ro", "hu", "hr", "sk",
    "sl", "lt", "lv", "et", "ga", "cy", "af", "sq", "bs", "is", "mt", "mi",
    "oc", "rs_latin", "sw", "tl", "uz", "az", "la",
)


def crop_to_region(frame: np.ndarray, roi: Optional[Region]) -> np.ndarray:
    """
    Crops `frame` to a normalised region whose origin is the bottom-left corner.

    Values outside 0..1 are clipped to the frame; a region that misses the
    frame entirely yields an empty array.
    """
    if roi is None:
        return frame
    height, width = frame.shape[:2]
    left = int(round(roi.x * width))
    right = int(round((roi.x + roi.width) * width))
    top = int(round((1.0 - roi.y - roi.height) * height))
    bottom = int(round((1.0 - roi.y) * height))
    left, right = max(0, left), min(width, right)
    top, bottom = max(0, top), min(height, bottom)
    if right <= left or bottom <= top:
        return frame[0:0, 0:0]
    return frame[top:bottom, left:right]


class TextRecognizer(ABC):
    """Abstract base class for OCR engines."""

    @abstractmethod
    def recognize(self, image: np.ndarray, roi: Optional[Region] = None, language: Optional[str] = None) -> str:
        """
        Recognises the text visible in a BGR image.

        Args:
            image: HxWx3 BGR frame.
            roi: Optional normalised region (bottom-left origin) to restrict recognition to.
            language: Optional language hint for the engine.

        Returns:
            All recognised lines joined by single spaces, or "" if none.

        Raises:
            RecognitionError: If the engine fails on this image.
        """
        pass

    @abstractmethod
    def supported_languages(self) -> List[str]:
        """Returns the language codes this engine accepts as a hint."""
        pass


class PaddleRecognizer(TextRecognizer):
    """Implements recognition using PaddleOCR, one pipeline per language."""

    def __init__(self, default_language: Optional[str] = None):
        """
        Initializes the PaddleRecognizer.

        Args:
            default_language: Language used when no hint is given (defaults to 'en').

        Raises:
            ConfigurationError: If PaddleOCR is not installed.
        """
        try:
            from paddleocr import PaddleOCR
        except ImportError as e:
            msg = "PaddleOCR not found. Please install via `pip install paddlepaddle paddleocr`"
            logger.error(msg)
            raise ConfigurationError(msg) from e
        self._paddle_cls = PaddleOCR
        self.default_language = default_language or "en"
        self._engines: Dict[str, Any] = {}

    def _engine(self, language: Optional[str]) -> Any:
        lang = language or self.default_language
        if lang not in self._engines:
            logger.info(f"Initializing PaddleOCR for language '{lang}'...")
            try:
                self._engines[lang] = self._paddle_cls(use_textline_orientation=True, lang=lang)
            except Exception as e:
                logger.error(f"Failed to initialize PaddleOCR for '{lang}': {e}", exc_info=True)
                raise ConfigurationError(f"PaddleOCR could not be initialized for language '{lang}': {e}") from e
        return self._engines[lang]

    def recognize(self, image: np.ndarray, roi: Optional[Region] = None, language: Optional[str] = None) -> str:
        engine = self._engine(language)
        cropped = crop_to_region(image, roi)
        if cropped.size == 0:
            return ""
        try:
            results = engine.predict(np.ascontiguousarray(cropped))
        except Exception as e:
            raise RecognitionError(f"PaddleOCR failed: {e}") from e

        lines = []
        for result in results or []:
            if not result:
                continue
            for text in result.get("rec_texts", []):
                text = str(text).strip()
                if text:
                    lines.append(text)
        return " ".join(lines)

    def supported_languages(self) -> List[str]:
        return list(PADDLE_LANGUAGES)


class VisionRecognizer(TextRecognizer):
    """Wrapper for Apple's Vision framework OCR (macOS only)."""

    def __init__(self) -> None:
        try:
            import Vision
            from Quartz import CIImage, kCIFormatRGBA8
        except ImportError as e:
            raise ConfigurationError(
                "Apple Vision dependencies not found. "
                "Install with: pip install -e '.[vision_macos]'"
            ) from e

        self.Vision = Vision
        self.CIImage = CIImage
        self.kCIFormatRGBA8 = kCIFormatRGBA8

    def _request(self, roi: Optional[Region] = None, language: Optional[str] = None) -> Any:
        request = self.Vision.VNRecognizeTextRequest.alloc().init()
        request.setRecognitionLevel_(self.Vision.VNRequestTextRecognitionLevelAccurate)
        request.setUsesLanguageCorrection_(True)
        if language:
            request.setRecognitionLanguages_([language])
        if roi is not None:
            # Vision uses the same bottom-left normalised coordinates
            request.setRegionOfInterest_(((roi.x, roi.y), (roi.width, roi.height)))
        return request

    def recognize(self, image: np.ndarray, roi: Optional[Region] = None, language: Optional[str] = None) -> str:
        h, w = image.shape[:2]
        alpha = np.full((h, w, 1), 255, dtype=np.uint8)
        frame_rgba = np.ascontiguousarray(np.concatenate([image[..., ::-1], alpha], axis=2))

        try:
            ci_image = self.CIImage.imageWithBitmapData_bytesPerRow_size_format_colorSpace_(
                frame_rgba.tobytes(), w * 4, (w, h), self.kCIFormatRGBA8, None
            )
            request = self._request(roi, language)
            handler = self.Vision.VNImageRequestHandler.alloc().initWithCIImage_options_(
                ci_image, None
            )
            success, error = handler.performRequests_error_([request], None)
            results = request.results() if success else None
        except Exception as e:
            raise RecognitionError(f"Vision OCR failed: {e}") from e
        if not success:
            raise RecognitionError(f"Vision OCR request failed: {error}")

        lines = []
        for result in results or []:
            candidates = result.topCandidates_(1)
            if candidates:
                lines.append(str(candidates[0].string()))
        return " ".join(lines)

    def supported_languages(self) -> List[str]:
        request = self._request()
        languages, error = request.supportedRecognitionLanguagesAndReturnError_(None)
        if languages is None:
            raise RecognitionError(f"Could not list Vision languages: {error}")
        return [str(language) for language in languages]


def get_recognizer(engine: str = "auto", default_language: Optional[str] = None) -> TextRecognizer:
    """
    Builds the requested OCR engine.

    "auto" prefers Apple Vision on macOS/arm64 and falls back to PaddleOCR.

    Raises:
        ConfigurationError: If the engine name is unknown or its dependencies are missing.
    """
    if engine not in ENGINES:
        raise ConfigurationError(f"Unknown OCR engine '{engine}'. Choose one of: {', '.join(ENGINES)}")

    if engine == "vision":
        logger.info("Initializing Apple Vision OCR...")
        return VisionRecognizer()

    if engine == "auto" and platform.system() == "Darwin" and platform.machine() == "arm64":
        try:
            logger.info("Initializing Apple Vision OCR...")
            return VisionRecognizer()
        except ConfigurationError as e:
            logger.warning(f"Failed to initialize Apple Vision OCR: {e}. Falling back.")

    logger.info("Initializing PaddleOCR...")
    return PaddleRecognizer(default_language=default_language)
