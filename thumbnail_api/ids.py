"""
Storage ids for thumbnails.

Every thumbnail is stored twice, once per ImageSize, under the MD5 hash of
the original resource url followed by a hyphen and the size name, for
example ``7463a193a468a1ff1a0c0f7d5933e54b-LARGE``.
"""

import hashlib
from enum import Enum
from typing import Optional, Union

from .errors import InvalidInputError


class ImageSize(Enum):
    """Supported thumbnail widths."""

    LARGE = 400
    MEDIUM = 200

    @property
    def width(self) -> int:
        return self.value


def hash_url(url: Optional[str]) -> str:
    """Return the lowercase hex MD5 digest of the url's UTF-8 bytes."""
    if not url:
        raise InvalidInputError("Cannot compute an id for an empty url")
    return hashlib.md5(url.encode('utf-8')).hexdigest()


def size_tag(width: Union[int, ImageSize, None]) -> str:
    """MEDIUM for 200 pixels, LARGE for anything else (including None)."""
    if isinstance(width, ImageSize):
        return width.name
    if width is not None and width == ImageSize.MEDIUM.width:
        return ImageSize.MEDIUM.name
    return ImageSize.LARGE.name


def storage_key(id: str, width: Union[int, ImageSize, None]) -> str:
    """Return the key under which the thumbnail of the given width is stored."""
    return f"{id}-{size_tag(width)}"


def size_from_key(key: str) -> ImageSize:
    """Return the ImageSize encoded in a storage key."""
    if key and key.endswith(ImageSize.MEDIUM.name):
        return ImageSize.MEDIUM
    return ImageSize.LARGE


def width_from_size(size: Optional[str]) -> int:
    """Parse the legacy size parameter (w200 or w400)."""
    if size is not None and size.lower() in ('w200', '200'):
        return ImageSize.MEDIUM.width
    return ImageSize.LARGE.width
