"""
Default images returned by the v2 API when no thumbnail is found.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

IMAGES_DIR = Path(__file__).parent / 'images'

DEFAULT_TYPE = 'IMAGE'
IMAGE_FILES = {
    'IMAGE': 'EU_thumbnails_image.png',
    'SOUND': 'EU_thumbnails_sound.png',
    'VIDEO': 'EU_thumbnails_video.png',
    'TEXT': 'EU_thumbnails_text.png',
    '3D': 'EU_thumbnails_3d.png',
}
CONTENT_TYPE = 'image/png'


class DefaultImages:
    """
    Holds one PNG per media type. All images are read once when the object
    is created.
    """

    def __init__(self, directory: Path = IMAGES_DIR, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._images: Dict[str, bytes] = {}
        for media_type, filename in IMAGE_FILES.items():
            self._images[media_type] = (Path(directory) / filename).read_bytes()
        self.logger.debug(f"Loaded {len(self._images)} default images from {directory}")

    def get(self, media_type: Optional[str]) -> bytes:
        """Return the default image for a media type, IMAGE for unknown types."""
        if media_type:
            image = self._images.get(media_type.strip().upper())
            if image is not None:
                return image
        return self._images[DEFAULT_TYPE]
