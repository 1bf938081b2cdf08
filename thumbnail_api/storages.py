"""
Storages that thumbnails can be retrieved from.

A storage answers retrieve() with a MediaStream when it holds the requested
thumbnail, and with None when it doesn't. None is a normal outcome that makes
the caller try the next storage in the route; errors are raised.
"""

import io
import logging
import time
from typing import Optional

import urllib3

from .errors import TransportError
from .ids import ImageSize, size_from_key, storage_key
from .iiif import europeana_iiif_thumbnail_url
from .media_stream import MediaStream, ObjectMetadata
from .object_store import ObjectStore
from .thumbnail_generator import ThumbnailGenerator

IIIF_STORAGE_NAME = 'IIIF-IS'
IIIF_TIMEOUT = urllib3.Timeout(connect=5.0, read=20.0)


class MediaStorage:
    """Read access to thumbnails kept in an object store."""

    def __init__(
        self,
        name: str,
        client: ObjectStore,
        legacy: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            name: storage name as used in the route definitions
            client: object store holding the thumbnails
            legacy: True if hits from this storage should be reported for migration tracking
            logger: Optional logger instance
        """
        self.name = name
        self.client = client
        self.legacy = legacy
        self.logger = logger or logging.getLogger(__name__)

    def exists(self, id: str) -> bool:
        """Check if a thumbnail with the given storage key is present."""
        return self.client.exists(id)

    def retrieve(self, id: str, original_url: Optional[str] = None) -> Optional[MediaStream]:
        """
        Open the thumbnail stored under id.

        Args:
            id: storage key (hash plus size)
            original_url: url of the original resource, if known

        Returns:
            An open MediaStream, or None if this storage doesn't have it
        """
        self.logger.debug(f"Retrieving file with id {id}, url = {original_url} from {self.name}")
        obj = self.client.get(id)
        if obj is None:
            return None
        return MediaStream(id, original_url, obj.body, obj.metadata)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class IiifImageServer(MediaStorage):
    """
    Downloads thumbnails from the Europeana IIIF image server.

    Only works when the original url is a full size Europeana IIIF image url;
    for anything else (including v3 requests, which carry no url) retrieve()
    returns None without making a request.
    """

    def __init__(
        self,
        name: str = IIIF_STORAGE_NAME,
        http: Optional[urllib3.PoolManager] = None,
        legacy: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        super().__init__(name, client=None, legacy=legacy, logger=logger)
        self.http = http or urllib3.PoolManager(
            timeout=IIIF_TIMEOUT,
            retries=urllib3.Retry(total=None, connect=0, read=0, status=0, other=0, redirect=5)
        )

    def exists(self, id: str) -> bool:
        """Nothing is stored by key on the image server."""
        return False

    def retrieve(self, id: str, original_url: Optional[str] = None) -> Optional[MediaStream]:
        self.logger.debug(f"Retrieving file from IIIF image server with id {id}, url = {original_url}")
        if not original_url:
            self.logger.debug("No original url provided, skipping retrieval from IIIF image server")
            return None

        width = size_from_key(id).width
        image_url = europeana_iiif_thumbnail_url(original_url, width)
        if image_url is None:
            self.logger.debug("No Europeana IIIF image, skipping retrieval from IIIF image server")
            return None

        try:
            response = self.http.request('GET', image_url)
        except urllib3.exceptions.HTTPError as e:
            raise TransportError(f"Error reading image {image_url} from IIIF image server: {e}") from e

        data = response.data
        if response.status != 200 or not data or data[:200].lower().lstrip().startswith(b'<html'):
            self.logger.debug(f"IIIF image server returned status {response.status} for {image_url}")
            return None

        metadata = ObjectMetadata(
            content_type=response.headers.get('Content-Type'),
            content_length=len(data),
        )
        return MediaStream(id, original_url, io.BytesIO(data), metadata)


class UploadImageStorage(MediaStorage):
    """
    Storage that also accepts uploaded images (organisation logos). Every
    upload is stored as a LARGE and a MEDIUM WebP thumbnail.
    """

    def __init__(
        self,
        name: str,
        client: ObjectStore,
        legacy: bool = False,
        quality: int = 80,
        logger: Optional[logging.Logger] = None
    ):
        super().__init__(name, client, legacy=legacy, logger=logger)
        self.generators = [ThumbnailGenerator(width=size.width, quality=quality, logger=self.logger)
                           for size in (ImageSize.LARGE, ImageSize.MEDIUM)]

    def process(self, id: str, image_data: bytes) -> None:
        """
        Generate the thumbnails for an uploaded image and store them.
        Existing thumbnails with the same id are replaced.

        Raises:
            ImageProcessingError: if the image can't be decoded
            TransportError: if the thumbnails can't be stored
        """
        start = time.time()
        if self.logger.isEnabledFor(logging.DEBUG):
            tags = ThumbnailGenerator.read_metadata(image_data)
            self.logger.debug("Uploaded image metadata:\n" + "\n".join(f"{k}: {v}" for k, v in tags.items()))

        for generator in self.generators:
            self.logger.debug(f"Generating {generator.width}px image for id {id}...")
            data, content_type = generator.generate(image_data)
            key = storage_key(id, generator.width)
            if self.client.exists(key):
                self.logger.warning(f"Replacing object with id {key} in storage {self.name}")
            self.client.put(key, content_type, data)

        self.logger.info(f"Image with id {id} processed in {(time.time() - start) * 1000:.0f} ms")
