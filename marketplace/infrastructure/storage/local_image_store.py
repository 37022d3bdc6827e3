import os
import re
import hashlib
import logging
import tempfile
from typing import Iterable

from ...application.ports.image_store import ImageStore
from ...exceptions import InvalidRequest, NotFound, StorageError
from ...media_utils import create_placeholder_jpeg

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\\/]+")


class LocalImageStore(ImageStore):
    """Content-addressed image files under a single directory.

    Every stored image is named ``<sha256 hex>.jpg`` after its bytes, so an
    identical upload lands on the existing file instead of writing a copy.
    ``default.jpg`` is reserved as the fallback image and is never produced by
    :meth:`store`.
    """

    def __init__(self, image_dir: str, default_image: str = "default.jpg", allowed_suffixes: Iterable[str] = (".jpg", ".jpeg")) -> None:
        self.image_dir = os.path.realpath(image_dir)
        self.default_image = default_image
        self.allowed_suffixes = tuple(s.lower() for s in allowed_suffixes)

    @property
    def default_path(self) -> str:
        return os.path.join(self.image_dir, self.default_image)

    def ensure_default_image(self) -> None:
        """Create the directory and a placeholder default image if missing."""
        try:
            os.makedirs(self.image_dir, exist_ok=True)
            if os.path.exists(self.default_path):
                return
            self._write_atomic(self.default_path, create_placeholder_jpeg())
        except OSError as e:
            logger.error(f"failed to prepare image directory {self.image_dir}: {e}")
            raise StorageError(f"failed to prepare image directory: {e}") from e
        logger.info(f"Created placeholder default image at {self.default_path}")

    def store(self, data: bytes) -> str:
        if not data:
            raise InvalidRequest("image data is empty")
        filename = f"{hashlib.sha256(data).hexdigest()}.jpg"
        path = os.path.join(self.image_dir, filename)
        if os.path.exists(path):
            logger.debug(f"image already stored: {filename}")
            return filename
        try:
            self._write_atomic(path, data)
        except OSError as e:
            logger.error(f"failed to write image file {path}: {e}")
            raise StorageError(f"failed to write image file: {e}") from e
        return filename

    def _write_atomic(self, path: str, data: bytes) -> None:
        # Concurrent writers of the same digest each rename a complete file
        # into place, so readers never see a partial image.
        fd, tmp_path = tempfile.mkstemp(dir=self.image_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def resolve(self, filename: str) -> str:
        if not filename:
            raise InvalidRequest("filename is required")
        if "\x00" in filename or ".." in _SEPARATORS.split(filename) or os.path.isabs(filename):
            raise InvalidRequest(f"invalid image path: {filename}")

        path = os.path.realpath(os.path.join(self.image_dir, filename))
        if path == self.image_dir or os.path.commonpath([self.image_dir, path]) != self.image_dir:
            raise InvalidRequest(f"invalid image path: {filename}")

        if os.path.splitext(filename)[1].lower() not in self.allowed_suffixes:
            raise InvalidRequest(f"image path does not end with {' or '.join(self.allowed_suffixes)}: {filename}")

        if not os.path.isfile(path):
            raise NotFound(f"image not found: {filename}")
        return path
