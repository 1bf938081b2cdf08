"""
S3Config - connection settings for one S3 storage.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

DEFAULT_MAX_CONNECTIONS = 50


@dataclass
class S3Config:
    """
    Connection settings for a single named S3 (or S3 compatible) storage.

    Attributes:
        name: storage name as used in the route definitions
        bucket: bucket holding the thumbnails
        access_key: access key id
        secret_key: secret access key
        region: region name
        endpoint: endpoint url, None for Amazon S3
        max_connections: size of the connection pool
        verify_ssl: verify the endpoint's certificate
    """
    name: str
    bucket: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: Optional[str] = None
    endpoint: Optional[str] = None
    max_connections: int = DEFAULT_MAX_CONNECTIONS
    verify_ssl: bool = True

    @staticmethod
    def env_prefix(name: str) -> str:
        """Environment variable prefix for a storage, e.g. 'metis-ibm' -> 'METIS_IBM_S3_'."""
        return ''.join(c if c.isalnum() else '_' for c in name).upper() + '_S3_'

    @classmethod
    def from_env(cls, name: str) -> 'S3Config':
        """Read the settings of the named storage from environment variables."""
        prefix = cls.env_prefix(name)
        return cls(
            name=name,
            bucket=os.getenv(prefix + 'BUCKET'),
            access_key=os.getenv(prefix + 'KEY'),
            secret_key=os.getenv(prefix + 'SECRET'),
            region=os.getenv(prefix + 'REGION'),
            endpoint=os.getenv(prefix + 'ENDPOINT') or None,
            max_connections=int(os.getenv(prefix + 'MAX_CONNECTIONS', DEFAULT_MAX_CONNECTIONS)),
            verify_ssl=os.getenv(prefix + 'VERIFY_SSL', 'true').lower() not in ('false', '0', 'no'),
        )

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty when valid)."""
        errors = []
        prefix = self.env_prefix(self.name)
        if not self.bucket:
            errors.append(f"{prefix}BUCKET is not set for storage {self.name}")
        if not self.access_key:
            errors.append(f"{prefix}KEY is not set for storage {self.name}")
        if not self.secret_key:
            errors.append(f"{prefix}SECRET is not set for storage {self.name}")
        if not self.region:
            errors.append(f"{prefix}REGION is not set for storage {self.name}")
        if self.max_connections < 1:
            errors.append(f"{prefix}MAX_CONNECTIONS must be at least 1 for storage {self.name}")
        return errors
