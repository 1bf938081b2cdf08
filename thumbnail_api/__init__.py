"""
Thumbnail API - serves pre-rendered thumbnails from a chain of storages.

Requests are routed by hostname to an ordered list of storages; the first
storage holding the thumbnail answers. Supports S3, the local filesystem and
the Europeana IIIF image server as storages, plus uploads of organisation
logos.
"""

__version__ = "1.0.0"

from .errors import (
    ThumbnailError,
    InvalidInputError,
    ThumbnailNotFoundError,
    UploadAuthenticationError,
    ImageProcessingError,
    TransportError,
    ConfigurationError,
)
from .ids import ImageSize, hash_url, storage_key
from .media_stream import MediaStream, ObjectMetadata
from .s3_config import S3Config
from .s3_client import S3Client
from .local_client import LocalConfig, LocalClient
from .thumbnail_generator import ThumbnailGenerator
from .storages import MediaStorage, IiifImageServer, UploadImageStorage
from .routes import StorageRoutes
from .retrieval import retrieve_thumbnail
from .delivery import Delivery, deliver
from .default_images import DefaultImages
from .web import create_app

__all__ = [
    "ThumbnailError",
    "InvalidInputError",
    "ThumbnailNotFoundError",
    "UploadAuthenticationError",
    "ImageProcessingError",
    "TransportError",
    "ConfigurationError",
    "ImageSize",
    "hash_url",
    "storage_key",
    "MediaStream",
    "ObjectMetadata",
    "S3Config",
    "S3Client",
    "LocalConfig",
    "LocalClient",
    "ThumbnailGenerator",
    "MediaStorage",
    "IiifImageServer",
    "UploadImageStorage",
    "StorageRoutes",
    "retrieve_thumbnail",
    "Delivery",
    "deliver",
    "DefaultImages",
    "create_app",
]
