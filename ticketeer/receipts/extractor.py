"""
Receipt text extraction with Tesseract.

One extractor is built per process (web app or Celery worker), started once,
and closed at shutdown. Anything that goes wrong while reading an image is
reported as ExtractionFailure; callers never see engine-specific errors.
"""

import logging
from pathlib import Path

import pytesseract
from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError

from ticketeer.errors import ExtractionFailure

logger = logging.getLogger(__name__)

MIN_OCR_WIDTH = 1000


class TesseractReceiptExtractor:

    def __init__(self, tesseract_cmd=None, language="eng", config="--psm 6"):
        self.tesseract_cmd = tesseract_cmd
        self.language = language
        self.config = config
        self.started = False

    def start(self):
        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd

        try:
            version = pytesseract.get_tesseract_version()
            logger.info("Tesseract OCR ready", extra={"version": str(version), "language": self.language})
        except pytesseract.TesseractNotFoundError:
            logger.warning("Tesseract binary not found; receipt verification will fail open")

        self.started = True
        return self

    def close(self):
        self.started = False

    @staticmethod
    def preprocess(image):
        """
        Improve OCR accuracy on phone screenshots:
        - Convert to grayscale
        - Upscale narrow images
        - Stretch contrast and sharpen
        """
        img = ImageOps.grayscale(image)

        w, h = img.size
        if w < MIN_OCR_WIDTH:
            scale = MIN_OCR_WIDTH / w
            img = img.resize((int(w * scale), int(h * scale)), Image.LANCZOS)

        img = ImageOps.autocontrast(img)
        return img.filter(ImageFilter.SHARPEN)

    def extract(self, image_ref):
        if not self.started:
            self.start()

        path = Path(image_ref)
        try:
            with Image.open(path) as image:
                image.load()
                processed = self.preprocess(image)
        except (OSError, UnidentifiedImageError) as e:
            raise ExtractionFailure(f"Cannot open image {path.name}: {e}") from e

        try:
            text = pytesseract.image_to_string(processed, lang=self.language, config=self.config)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, RuntimeError) as e:
            raise ExtractionFailure(f"OCR engine error: {e}") from e

        logger.debug("Receipt text extracted", extra={"image": path.name, "characters": len(text)})
        return text
