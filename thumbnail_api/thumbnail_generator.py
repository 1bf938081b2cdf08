"""
ThumbnailGenerator - resizes uploaded images into WebP thumbnails.
"""

import io
import logging
from typing import Dict, Optional, Tuple

from PIL import Image, UnidentifiedImageError
from PIL.ExifTags import TAGS

from .errors import ImageProcessingError
from .ids import ImageSize

WEBP_CONTENT_TYPE = 'image/webp'


class ThumbnailGenerator:
    """
    Generates a thumbnail of an exact width from original image bytes using
    Pillow. The aspect ratio is preserved, so smaller images are scaled up.
    """

    def __init__(
        self,
        width: int = ImageSize.LARGE.width,
        quality: int = 80,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize thumbnail generator.

        Args:
            width: Width of the generated thumbnail (default: 400)
            quality: WebP quality for output (default: 80)
            logger: Optional logger instance
        """
        self.width = width
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    def generate(self, image_data: bytes) -> Tuple[bytes, str]:
        """
        Generate a thumbnail from image data.

        Args:
            image_data: Original image as bytes

        Returns:
            Tuple of (thumbnail_bytes, content_type)

        Raises:
            ImageProcessingError: if the data can't be decoded as an image
        """
        try:
            with Image.open(io.BytesIO(image_data)) as img:
                img = self._convert_color_mode(img)
                height = max(1, round(img.height * self.width / img.width))
                img = img.resize((self.width, height), Image.Resampling.LANCZOS)

                output = io.BytesIO()
                img.save(output, format='WEBP', quality=self.quality, method=4)
                return output.getvalue(), WEBP_CONTENT_TYPE
        except (UnidentifiedImageError, OSError, ValueError) as e:
            self.logger.error(f"Error generating {self.width}px thumbnail: {e}")
            raise ImageProcessingError(f"Error processing image: {e}") from e

    @staticmethod
    def read_metadata(image_data: bytes) -> Dict[str, str]:
        """Return the EXIF tags of an image as a name -> value mapping."""
        try:
            with Image.open(io.BytesIO(image_data)) as img:
                tags = {'format': str(img.format), 'size': f"{img.width}x{img.height}", 'mode': img.mode}
                for tag_id, value in img.getexif().items():
                    tags[TAGS.get(tag_id, str(tag_id))] = str(value)
        except (UnidentifiedImageError, OSError) as e:
            raise ImageProcessingError(f"Error reading image metadata: {e}") from e
        return tags

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Convert image to a color mode WebP can encode."""
        if img.mode in ('RGB', 'RGBA'):
            return img
        if img.mode in ('LA', 'PA') or (img.mode == 'P' and 'transparency' in img.info):
            return img.convert('RGBA')
        return img.convert('RGB')
