"""
MediaStream - a thumbnail retrieved from a storage, plus its metadata.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Iterator, Optional

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ObjectMetadata:
    """
    Metadata of a stored object. Every field is optional because not all
    storages provide it.

    Attributes:
        content_type: MIME type as recorded by the storage
        content_length: size in bytes
        etag: entity tag without surrounding quotes
        last_modified: timezone-aware modification time
    """
    content_type: Optional[str] = None
    content_length: Optional[int] = None
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None


class MediaStream:
    """
    Wraps the open body of a retrieved object.

    The body holds a connection from the storage's pool, so it must be
    closed once on every path: either by iterating over iter_content() until
    the end, or by calling close() when no content is sent.
    """

    def __init__(
        self,
        id: Optional[str],
        original_url: Optional[str],
        body: BinaryIO,
        metadata: Optional[ObjectMetadata] = None
    ):
        """
        Args:
            id: storage key that matched (None for IIIF downloads)
            original_url: url of the original resource, only known for v2 requests
            body: file-like object with read() and close()
            metadata: optional metadata of the object
        """
        self.id = id
        self.original_url = original_url
        self.metadata = metadata
        self._body = body
        self._closed = False

    @property
    def has_metadata(self) -> bool:
        return self.metadata is not None

    @property
    def content_length(self) -> Optional[int]:
        """Size in bytes, or None when the storage didn't report it."""
        if self.has_metadata:
            return self.metadata.content_length
        return None

    @property
    def content_type(self) -> Optional[str]:
        if self.has_metadata:
            return self.metadata.content_type
        return None

    @property
    def etag(self) -> Optional[str]:
        if self.has_metadata:
            return self.metadata.etag
        return None

    @property
    def last_modified(self) -> Optional[datetime]:
        if self.has_metadata:
            return self.metadata.last_modified
        return None

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self) -> bytes:
        """Read the remaining content and close the stream."""
        try:
            return self._body.read()
        finally:
            self.close()

    def iter_content(self, chunk_size: int = CHUNK_SIZE) -> 'ContentIterator':
        """
        Return an iterator over the content in chunks. The stream is closed at
        the end of the content, on a read error, or when the iterator's close()
        is called, even if iteration never started.
        """
        return ContentIterator(self, chunk_size)

    def close(self) -> None:
        """Release the underlying body. Calling this more than once is a no-op."""
        if self._closed:
            return
        self._closed = True
        self._body.close()
        logger.debug(f"Closed stream {self.id}")

    def __enter__(self) -> 'MediaStream':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"MediaStream(id={self.id!r}, original_url={self.original_url!r}, closed={self._closed})"


class ContentIterator:
    """Iterator over the chunks of a MediaStream, with a close() that releases the stream."""

    def __init__(self, media: MediaStream, chunk_size: int = CHUNK_SIZE):
        self.media = media
        self.chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        if self.media.closed:
            raise StopIteration
        try:
            chunk = self.media._body.read(self.chunk_size)
        except Exception:
            self.media.close()
            raise
        if not chunk:
            self.media.close()
            raise StopIteration
        return chunk

    def close(self) -> None:
        self.media.close()
