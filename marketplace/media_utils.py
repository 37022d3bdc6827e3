import io
from typing import Tuple
from PIL import Image, UnidentifiedImageError

from .exceptions import InvalidRequest


def create_placeholder_jpeg(size: Tuple[int, int] = (300, 300), color: Tuple[int, int, int] = (230, 230, 230)) -> bytes:
    """Render a plain JPEG used as the fallback image."""
    img = Image.new('RGB', size, color)
    buf = io.BytesIO()
    img.save(buf, format='JPEG', quality=85, optimize=True)
    return buf.getvalue()


def validate_jpeg(image_data: bytes) -> None:
    """Raise InvalidRequest unless ``image_data`` decodes as a JPEG."""
    try:
        with Image.open(io.BytesIO(image_data)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidRequest(f"invalid image: {e}") from e
    if image_format != 'JPEG':
        raise InvalidRequest(f"only JPEG images are allowed, got {image_format}")
