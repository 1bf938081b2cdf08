"""
Web - bottle application serving thumbnails.

Routes:
    GET|HEAD /api/v2/thumbnail-by-url.json?uri=..&size=..&type=..   (legacy, by url)
    GET|HEAD /thumbnail/v2/url.json?uri=..&size=..&type=..
    GET|HEAD /thumbnail/v3/<size>/<id>                              (by id)
    PUT      /thumbnail/v3/<id>                                     (logo upload)
"""

import json
import logging
import re
import time
from functools import wraps
from typing import Callable, Optional

from bottle import HTTP_CODES, Bottle, HTTPResponse, request, response

from .default_images import CONTENT_TYPE as DEFAULT_IMAGE_CONTENT_TYPE
from .default_images import DefaultImages
from .delivery import deliver
from .errors import (
    ImageProcessingError,
    InvalidInputError,
    ThumbnailError,
    ThumbnailNotFoundError,
    TransportError,
    UploadAuthenticationError,
)
from .ids import hash_url, storage_key, width_from_size
from .retrieval import retrieve_thumbnail
from .routes import StorageRoutes, server_name

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    'Allow': 'GET, HEAD',
    'Cache-Control': 'no-cache',
}
JSON_CONTENT_TYPE = 'application/json'
TEXT_CONTENT_TYPE = 'text/plain; charset=utf-8'

URI_PATTERN = re.compile(r'^(https?|ftp)://.*$')
SIZE_PATTERN = re.compile(r'^(200|400)$')
UPLOAD_ID_PATTERN = re.compile(r'^[a-fA-F0-9]{8,128}$')

INVALID_URL_MESSAGE = "INVALID URL"
SIZE_ERROR_MESSAGE = "Invalid size. Supported values are 200 and 400"
ID_ERROR_MESSAGE = "Invalid or empty id"
URL_ERROR_MESSAGE = "Either Size or Id is missing. Correct url is /v3/{size}/{id}"
EMPTY_FILE_MESSAGE = "Received empty file"
UNSUPPORTED_CONTENT_TYPE_MESSAGE = "Unsupported content type"
PROCESSING_ERROR_MESSAGE = "Error processing image"

SUPPORTED_IMAGE_TYPES = ('image/jpeg', 'image/jpg', 'image/png', 'image/webp',
                         'image/gif', 'image/tiff', 'image/bmp')

Authorizer = Callable[..., None]


def request_server_name() -> str:
    """Return the name used to find the route for the current request."""
    parts = request.urlparts
    port = parts.port
    if port is None:
        server_port = request.environ.get('SERVER_PORT', '')
        port = int(server_port) if server_port.isdigit() else None
    return server_name(parts.hostname or '', port)


def log_error(e: ThumbnailError):
    if not e.do_log:
        return
    if e.log_stacktrace:
        logger.error(f"Caught exception: {e.message}", exc_info=e)
    else:
        logger.info(f"Rejected request {request.method} {request.path}: {e.message}")


def json_response(status: int, body: dict) -> HTTPResponse:
    r = HTTPResponse(body=json.dumps(body), status=status)
    r.set_header('Content-Type', JSON_CONTENT_TYPE)
    return r


def v2_error_body(e: ThumbnailError) -> dict:
    return {
        'message': HTTP_CODES.get(e.status, 'Unknown').upper().replace(' ', '_'),
        'details': [e.message] + e.details,
    }


def v3_error_body(e: ThumbnailError) -> dict:
    return {
        'status': e.status,
        'error': HTTP_CODES.get(e.status, 'Unknown'),
        'message': e.message,
    }


def json_errors(error_body: Callable[[ThumbnailError], dict]):
    """Decorate a view function to turn ThumbnailErrors into JSON error responses."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ThumbnailError as e:
                log_error(e)
                return json_response(e.status, error_body(e))
        return wrapper
    return decorator


def thumbnail_headers(func):
    """Decorate a view function to include the default thumbnail response headers."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            result = func(*args, **kwargs)
        except HTTPResponse as r:
            for name, value in DEFAULT_HEADERS.items():
                r.set_header(name, value)
            raise
        for name, value in DEFAULT_HEADERS.items():
            result.set_header(name, value)
        return result
    return wrapper


def log_duration(func):
    """Decorate a view function to log the processing time at debug level."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not logger.isEnabledFor(logging.DEBUG):
            return func(*args, **kwargs)
        start = time.time()
        result = func(*args, **kwargs)
        status = result.status_code if isinstance(result, HTTPResponse) else '?'
        logger.debug(f"{request.method} {request.path}, status = {status}, "
                     f"processing time = {(time.time() - start) * 1000:.0f} ms")
        return result
    return wrapper


def delivery_response(media, type_hint: Optional[str] = None) -> HTTPResponse:
    """Turn a retrieved thumbnail into a response, honouring conditional request headers."""
    try:
        delivery = deliver(media, request.headers, type_hint)
    except Exception:
        media.close()
        raise
    return HTTPResponse(body=delivery.body if delivery.body is not None else '',
                        status=delivery.status, headers=delivery.headers)


def split_extension(id: str):
    """Split 'abc.jpg' into ('abc', '.jpg'). An id that is only an extension is invalid."""
    i = id.rfind('.')
    if i == 0:
        raise InvalidInputError(ID_ERROR_MESSAGE)
    if i > 0:
        return id[:i], id[i:]
    return id, None


def upload_content_type(content_type: Optional[str]) -> Optional[str]:
    """Strip parameters such as ';charset=UTF-8' from an upload's content type."""
    if content_type and ';' in content_type:
        content_type = content_type[:content_type.index(';')]
    return content_type.strip() if content_type else content_type


def text_response(status: int, body: str = '') -> HTTPResponse:
    r = HTTPResponse(body=body, status=status)
    if body:
        r.set_header('Content-Type', TEXT_CONTENT_TYPE)
    return r


class ThumbnailApp(Bottle):
    """
    Bottle application that keeps the Last-Modified header on 304 responses.
    Bottle drops it from 304 responses by default.
    """

    def wsgi(self, environ, start_response):
        def start_thumbnail_response(status, headerlist, exc_info=None):
            if status.startswith('304'):
                last_modified = response.get_header('Last-Modified')
                if last_modified and all(name != 'Last-Modified' for name, _ in headerlist):
                    headerlist = headerlist + [('Last-Modified', last_modified)]
            return start_response(status, headerlist, exc_info)

        return super().wsgi(environ, start_thumbnail_response)


def create_app(
    storage_routes: StorageRoutes,
    default_images: Optional[DefaultImages] = None,
    authorize: Optional[Authorizer] = None
) -> ThumbnailApp:
    """
    Create the bottle application.

    Args:
        storage_routes: route table used to find the storages for a request
        default_images: images returned by the v2 API for missing thumbnails
        authorize: optional hook called with the request before an upload is
            processed. It raises UploadAuthenticationError to refuse the upload.

    Returns:
        The WSGI application
    """
    app = ThumbnailApp()
    default_images = default_images or DefaultImages()

    def storages():
        return storage_routes.get_storages(request_server_name())

    @app.route('/api/v2/thumbnail-by-url.json')
    @app.route('/thumbnail/v2/url.json')
    @log_duration
    @thumbnail_headers
    @json_errors(v2_error_body)
    def thumbnail_by_url_v2():
        """Thumbnail by original url. Missing thumbnails give the default image for the type."""
        url = request.query.getunicode('uri')
        size = request.query.getunicode('size') or 'w400'
        media_type = request.query.getunicode('type') or 'IMAGE'
        logger.debug(f"Url = {url}, size = {size}, type = {media_type}")
        if not url or not URI_PATTERN.match(url):
            raise InvalidInputError(INVALID_URL_MESSAGE)

        key = storage_key(hash_url(url), width_from_size(size))
        media = retrieve_thumbnail(storages(), key, url)
        if media is None:
            image = default_images.get(media_type)
            return HTTPResponse(body=image, status=200, headers={
                'Content-Type': DEFAULT_IMAGE_CONTENT_TYPE,
                'Content-Length': str(len(image)),
            })
        return delivery_response(media)

    @app.route('/thumbnail/v3/<size>/<id>')
    @log_duration
    @thumbnail_headers
    @json_errors(v3_error_body)
    def thumbnail_by_id_v3(size, id):
        """Thumbnail by id (MD5 hash of the original url), optionally with an extension."""
        logger.debug(f"Thumbnail id = {id}, size = {size}")
        if not SIZE_PATTERN.match(size):
            raise InvalidInputError(SIZE_ERROR_MESSAGE)
        clean_id, extension = split_extension(id)

        media = retrieve_thumbnail(storages(), storage_key(clean_id, int(size)))
        if media is None:
            raise ThumbnailNotFoundError()
        return delivery_response(media, type_hint=extension)

    @app.route('/thumbnail/v3')
    @app.route('/thumbnail/v3/')
    @app.route('/thumbnail/v3//')
    @app.route('/thumbnail/v3//<id>')
    @app.route('/thumbnail/v3/<size>/')
    @thumbnail_headers
    @json_errors(v3_error_body)
    def thumbnail_v3_invalid_url(**kwargs):
        raise InvalidInputError(URL_ERROR_MESSAGE)

    upload_storage = storage_routes.upload_storage
    if upload_storage is None:
        logger.info("Uploading is disabled")
        return app
    logger.warning(f"Uploading is enabled to storage {upload_storage.name} "
                   f"{'with' if authorize else 'without'} authorization!")

    @app.route('/thumbnail/v3/<id>', method='PUT')
    @app.route('/thumbnail/v3/<id>/', method='PUT')
    @app.route('/thumbnail/v3//<id>', method='PUT')
    @app.route('/thumbnail/v3//<id>/', method='PUT')
    @log_duration
    def upload_image_v3(id):
        """
        Upload an image (organisation logo). A LARGE and a MEDIUM thumbnail are
        stored under the given id. Responds 204 on success.
        """
        if authorize is not None:
            try:
                authorize(request)
            except UploadAuthenticationError as e:
                logger.info(f"Upload with id {id} refused: {e.message}")
                return text_response(e.status, e.message)

        logger.debug(f"Received upload PUT request with id {id}")
        if not UPLOAD_ID_PATTERN.match(id):
            logger.info(f"{ID_ERROR_MESSAGE}: {id}")
            return text_response(400, ID_ERROR_MESSAGE)

        upload = request.files.get('file')
        data = upload.file.read() if upload is not None else b''
        if not data:
            logger.error(f"Received file is empty, id {id}, name {upload.raw_filename if upload else None}")
            return text_response(400, EMPTY_FILE_MESSAGE)

        content_type = upload_content_type(upload.content_type)
        if not content_type or content_type.lower() not in SUPPORTED_IMAGE_TYPES:
            logger.error(f"{UNSUPPORTED_CONTENT_TYPE_MESSAGE} {content_type}, id {id}, name {upload.raw_filename}")
            return text_response(400, f"{UNSUPPORTED_CONTENT_TYPE_MESSAGE}: {content_type}\n"
                                      f"Supported types are: [{', '.join(SUPPORTED_IMAGE_TYPES)}]")

        try:
            upload_storage.process(id, data)
        except (ImageProcessingError, TransportError) as e:
            logger.error(f"{PROCESSING_ERROR_MESSAGE} id {id}, name {upload.raw_filename}", exc_info=e)
            return text_response(500, f"{PROCESSING_ERROR_MESSAGE}: {e.message}")
        return text_response(204)

    return app
