"""Transfer screenshot storage on the local filesystem."""

import logging
import os
import secrets
import time
from pathlib import Path

from werkzeug.utils import secure_filename

from ticketeer.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tif", ".tiff"}


class ScreenshotStorage:

    def __init__(self, upload_dir):
        self.upload_dir = Path(upload_dir)

    def save(self, file_storage):
        """Persist an uploaded image under a unique name. Returns (path, original_name)."""
        if file_storage is None or not file_storage.filename:
            raise ValidationError("Transfer screenshot is required")

        original_name = file_storage.filename
        extension = Path(secure_filename(original_name)).suffix.lower()
        mimetype = file_storage.mimetype or ""
        if extension not in ALLOWED_IMAGE_EXTENSIONS or not mimetype.startswith("image/"):
            raise ValidationError("Only image files are allowed")

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        filename = f"transfer-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"
        path = self.upload_dir / filename
        file_storage.save(path)

        logger.info("Transfer screenshot stored", extra={"path": str(path), "original_name": original_name})
        return str(path), original_name

    def remove(self, path):
        if not path:
            return
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove screenshot {path}: {e}")

    def resolve(self, path):
        """Absolute path of a stored screenshot, or None when the file is gone."""
        if not path:
            return None
        resolved = Path(path).resolve()
        return resolved if resolved.is_file() else None
