"""
Profile photo storage.

Photos are written under ``<image_root>/<image_subdir>/profiles`` and served
back through the ``/media`` route.  Both operations report failure through
their return value and log the cause; they never raise.
"""
import logging
import os
import re
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
PROFILE_DIR = "profiles"
MEDIA_PREFIX = "/media/"


class PhotoStorage:
    def __init__(self, image_root: str, image_subdir: str = "images"):
        self.images_dir = Path(image_root) / image_subdir

    def path_for(self, relative: str) -> Optional[Path]:
        """Resolve a media path, refusing anything outside the images directory."""
        root = self.images_dir.resolve()
        candidate = (root / relative).resolve()
        if root != candidate and root not in candidate.parents:
            return None
        return candidate

    def upload_photo(self, data: bytes, filename: str, owner_id: str) -> Optional[str]:
        """Store ``data`` as the owner's photo and return its public URL, or None."""
        ext = os.path.splitext(os.path.basename(filename or ""))[1].lower()
        if ext not in ALLOWED_EXTENSIONS:
            logger.warning("Rejected photo upload %r: unsupported extension", filename)
            return None
        if not data:
            logger.warning("Rejected photo upload %r: empty file", filename)
            return None
        owner = re.sub(r"[^a-zA-Z0-9_-]", "_", owner_id) or "owner"
        final = f"{owner}-{int(time.time() * 1000)}{ext}"
        target = self.images_dir / PROFILE_DIR
        try:
            target.mkdir(parents=True, exist_ok=True)
            (target / final).write_bytes(data)
        except OSError:
            logger.exception("Error uploading photo for %s", owner_id)
            return None
        return f"{MEDIA_PREFIX}{PROFILE_DIR}/{final}"

    def delete_photo(self, url: str) -> bool:
        if not url or f"{MEDIA_PREFIX}{PROFILE_DIR}/" not in url:
            return False
        relative = url.split(MEDIA_PREFIX, 1)[1]
        path = self.path_for(relative)
        if path is None or not path.is_file():
            return False
        try:
            path.unlink()
        except OSError:
            logger.exception("Error deleting photo %s", url)
            return False
        return True
