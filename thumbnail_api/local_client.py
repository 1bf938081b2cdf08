"""
LocalClient - object store on the local filesystem, for development and tests.
"""

import hashlib
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from .errors import InvalidInputError, TransportError
from .media_stream import ObjectMetadata
from .object_store import StoredObject

META_SUFFIX = '.meta'
DEFAULT_CONTENT_TYPE = 'application/octet-stream'


@dataclass
class LocalConfig:
    """
    Configuration for a filesystem storage.

    Attributes:
        name: storage name as used in the route definitions
        root_path: directory holding the storage
        prefix: subdirectory within root_path
    """
    name: str
    root_path: str
    prefix: str = 'thumbnails'

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty when valid)."""
        errors = []
        if not self.root_path:
            errors.append(f"No root path set for storage {self.name}")
        elif not os.path.isdir(self.root_path):
            errors.append(f"Root path {self.root_path} of storage {self.name} is not a directory")
        return errors


class LocalClient:
    """
    Stores objects as files under <root_path>/<prefix>/<key>.

    The content type given on put() is kept in a sidecar file next to the
    object.
    """

    def __init__(self, config: LocalConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.base_path = os.path.join(config.root_path, config.prefix)

    def _path(self, key: str) -> str:
        if not key or '/' in key or '\\' in key or key.startswith('.'):
            raise InvalidInputError(f"Invalid key: {key!r}")
        return os.path.join(self.base_path, key)

    def exists(self, key: str) -> bool:
        return os.path.isfile(self._path(key))

    def get(self, key: str) -> Optional[StoredObject]:
        path = self._path(key)
        if not os.path.isfile(path):
            return None
        try:
            stat = os.stat(path)
            with open(path, 'rb') as f:
                etag = hashlib.md5(f.read()).hexdigest()
            body = open(path, 'rb')
        except OSError as e:
            raise TransportError(f"Error reading {key} from storage {self.config.name}: {e}") from e

        metadata = ObjectMetadata(
            content_type=self._read_content_type(path),
            content_length=stat.st_size,
            etag=etag,
            last_modified=datetime.fromtimestamp(int(stat.st_mtime), tz=timezone.utc),
        )
        return StoredObject(body=body, metadata=metadata)

    def put(self, key: str, content_type: str, data: bytes) -> None:
        path = self._path(key)
        try:
            os.makedirs(self.base_path, exist_ok=True)
            with open(path, 'wb') as f:
                f.write(data)
            with open(path + META_SUFFIX, 'w') as f:
                json.dump({'content_type': content_type}, f)
        except OSError as e:
            raise TransportError(f"Error writing {key} to storage {self.config.name}: {e}") from e
        self.logger.debug(f"Saved {len(data)} bytes to {path}")

    @staticmethod
    def _read_content_type(path: str) -> str:
        try:
            with open(path + META_SUFFIX) as f:
                return json.load(f).get('content_type') or DEFAULT_CONTENT_TYPE
        except (OSError, ValueError):
            return DEFAULT_CONTENT_TYPE
