"""
S3Client - S3/IBM Cloud object storage access for one storage.
"""

import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .errors import TransportError
from .media_stream import ObjectMetadata
from .object_store import StoredObject
from .s3_config import S3Config

NOT_FOUND_CODES = ('404', 'NoSuchKey', 'NotFound')


def is_not_found(error: ClientError) -> bool:
    """Return True if a ClientError means the key does not exist."""
    return error.response.get('Error', {}).get('Code') in NOT_FOUND_CODES


class S3Client:
    """
    Wrapper for the S3 operations needed to serve and store thumbnails.

    A missing key is reported as None/False; any other failure is raised
    as a TransportError so it is never mistaken for absence.
    """

    def __init__(self, config: S3Config, logger: Optional[logging.Logger] = None):
        """
        Initialize S3 client.

        Args:
            config: S3 configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

        self._client = boto3.client(
            's3',
            endpoint_url=config.endpoint,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'},
                max_pool_connections=config.max_connections,
            ),
            verify=config.verify_ssl
        )
        self.logger.info(f"S3 client {config.name} created for bucket {config.bucket} "
                         f"(endpoint {config.endpoint or 'AWS'}, max connections {config.max_connections})")

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    def exists(self, key: str) -> bool:
        """Check if an object exists in S3."""
        try:
            self._client.head_object(Bucket=self.config.bucket, Key=key)
            return True
        except ClientError as e:
            if is_not_found(e):
                return False
            raise TransportError(f"Error checking {key} in storage {self.config.name}: {e}") from e
        except BotoCoreError as e:
            raise TransportError(f"Error connecting to storage {self.config.name}: {e}") from e

    def get(self, key: str) -> Optional[StoredObject]:
        """Open an object for streaming, or return None if it doesn't exist."""
        try:
            response = self._client.get_object(Bucket=self.config.bucket, Key=key)
        except ClientError as e:
            if is_not_found(e):
                return None
            raise TransportError(f"Error reading {key} from storage {self.config.name}: {e}") from e
        except BotoCoreError as e:
            raise TransportError(f"Error connecting to storage {self.config.name}: {e}") from e

        etag = response.get('ETag')
        metadata = ObjectMetadata(
            content_type=response.get('ContentType'),
            content_length=response.get('ContentLength'),
            etag=etag.strip('"') if etag else None,
            last_modified=response.get('LastModified'),
        )
        return StoredObject(body=response['Body'], metadata=metadata)

    def put(self, key: str, content_type: str, data: bytes) -> None:
        """Upload an object to S3, replacing any existing object."""
        try:
            self._client.put_object(
                Bucket=self.config.bucket,
                Key=key,
                Body=data,
                ContentType=content_type
            )
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"Error writing {key} to storage {self.config.name}: {e}") from e
