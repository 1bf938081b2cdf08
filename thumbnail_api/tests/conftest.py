"""
Pytest fixtures for thumbnail_api tests.
"""

import io
from datetime import datetime, timezone

import pytest

URI = 'https://test.europeana.eu/thumbnail.jpg'
URI_HASH = '7463a193a468a1ff1a0c0f7d5933e54b'
URI_HTTP = 'http://test.europeana.eu/thumbnail.jpg'
URI_FTP = 'ftp://test.europeana.eu/thumbnail.jpg'
URI_URN = 'urn:soundcloud:43668849'
INVALID_ID = '.jpg'

LAST_MODIFIED = datetime.fromtimestamp(1600000000, tz=timezone.utc)
LAST_MODIFIED_TEXT = 'Sun, 13 Sep 2020 12:26:40 GMT'
ETAG = '1234test'
ETAG_VALUE = f'"{ETAG}"'

LARGE_CONTENT = (b"This is some dummy text data instead of an actual image file\n"
                 b"It's a large file")
MEDIUM_CONTENT = b"medium-sized test data"


def make_stored_object(content: bytes, etag=ETAG, last_modified=LAST_MODIFIED, content_type=None):
    """Return a StoredObject as an object store would for the given content."""
    from thumbnail_api.media_stream import ObjectMetadata
    from thumbnail_api.object_store import StoredObject

    return StoredObject(
        body=io.BytesIO(content),
        metadata=ObjectMetadata(
            content_type=content_type,
            content_length=len(content),
            etag=etag,
            last_modified=last_modified,
        )
    )


def make_media_stream(content: bytes = LARGE_CONTENT, original_url=URI, **metadata):
    """Return an open MediaStream with the usual test metadata."""
    from thumbnail_api.media_stream import MediaStream, ObjectMetadata

    values = dict(content_length=len(content), etag=ETAG, last_modified=LAST_MODIFIED)
    values.update(metadata)
    return MediaStream(URI_HASH + '-LARGE', original_url, io.BytesIO(content), ObjectMetadata(**values))


@pytest.fixture
def mock_store(mocker):
    """Fixture providing an empty mocked object store."""
    store = mocker.MagicMock()
    store.get.return_value = None
    store.exists.return_value = False
    return store


@pytest.fixture
def thumbnail_store(mocker):
    """Fixture providing a mocked object store holding the LARGE and MEDIUM thumbnail of URI."""
    objects = {
        URI_HASH + '-LARGE': LARGE_CONTENT,
        URI_HASH + '-MEDIUM': MEDIUM_CONTENT,
    }
    store = mocker.MagicMock()
    store.get.side_effect = lambda key: make_stored_object(objects[key]) if key in objects else None
    store.exists.side_effect = lambda key: key in objects
    return store


@pytest.fixture
def local_config(tmp_path):
    """Fixture providing a local storage configuration in a temporary directory."""
    from thumbnail_api.local_client import LocalConfig

    return LocalConfig(name='local-test', root_path=str(tmp_path))


@pytest.fixture
def s3_config():
    """Fixture providing S3 configuration."""
    from thumbnail_api.s3_config import S3Config

    return S3Config(
        name='test-storage',
        endpoint='https://test-endpoint.example.com:9000',
        bucket='test-bucket',
        access_key='test-access-key',
        secret_key='test-secret-key',
        region='eu-central-1',
    )


@pytest.fixture
def sample_image_bytes():
    """Fixture providing sample JPEG image bytes."""
    from PIL import Image

    img = Image.new('RGB', (100, 50), color='red')
    buffer = io.BytesIO()
    img.save(buffer, format='JPEG')
    return buffer.getvalue()


@pytest.fixture
def sample_png_bytes():
    """Fixture providing sample PNG image bytes with transparency."""
    from PIL import Image

    img = Image.new('RGBA', (800, 600), color=(255, 0, 0, 128))
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()
