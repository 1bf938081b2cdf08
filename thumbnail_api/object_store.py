"""
Interface between the storages and the object store clients.
"""

from dataclasses import dataclass
from typing import BinaryIO, Optional, Protocol, runtime_checkable

from .media_stream import ObjectMetadata

__all__ = ["StoredObject", "ObjectStore"]


@dataclass
class StoredObject:
    """An object fetched from an object store. The body must be closed by the caller."""
    body: BinaryIO
    metadata: ObjectMetadata


@runtime_checkable
class ObjectStore(Protocol):
    """Protocol for object store clients (S3, local filesystem)."""

    def exists(self, key: str) -> bool:
        """
        Check if an object is present without retrieving it.

        Raises:
            TransportError: if the store cannot be reached
        """
        ...

    def get(self, key: str) -> Optional[StoredObject]:
        """
        Open an object for reading.

        Returns:
            The open object, or None if no object is stored under key

        Raises:
            TransportError: if the store cannot be reached
        """
        ...

    def put(self, key: str, content_type: str, data: bytes) -> None:
        """Store data under key, replacing any existing object."""
        ...
