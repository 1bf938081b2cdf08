"""
Conditional delivery of a retrieved thumbnail.

Decides between a full 200 response, 304 Not Modified and 412 Precondition
Failed, based on the If-Match, If-None-Match and If-Modified-Since request
headers and the ETag and Last-Modified of the thumbnail.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Optional

from bottle import http_date, parse_date

from .media_stream import CHUNK_SIZE, MediaStream

logger = logging.getLogger(__name__)

OK = 200
NOT_MODIFIED = 304
PRECONDITION_FAILED = 412

ANY = '*'
GZIP_SUFFIX = '-gzip'
WEAK_PREFIX = 'W/'

IMAGE_JPEG = 'image/jpeg'
IMAGE_PNG = 'image/png'


@dataclass(frozen=True)
class Preconditions:
    """Conditional request headers (None when absent or blank)."""
    if_match: Optional[str] = None
    if_none_match: Optional[str] = None
    if_modified_since: Optional[str] = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> 'Preconditions':
        def header(name):
            value = headers.get(name)
            return value if value and value.strip() else None

        return cls(
            if_match=header('If-Match'),
            if_none_match=header('If-None-Match'),
            if_modified_since=header('If-Modified-Since'),
        )


@dataclass
class Delivery:
    """
    Outcome of a conditional request. For 304 and 412 the stream has already
    been closed and body is None. For 200 the body yields the content and
    closes the stream at the end or when its close() is called.
    """
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Iterator[bytes]] = None


def media_type(content_type: Optional[str], url: Optional[str]) -> str:
    """
    Return the Content-Type to send. The stored type wins if it is an image
    type; otherwise PNG for urls ending in .png or .pdf, JPEG for everything
    else (including no url at all).
    """
    if content_type and content_type.lower().startswith('image/'):
        return content_type
    if url:
        url_lower = url.lower()
        if url_lower.endswith('.png') or url_lower.endswith('.pdf'):
            return IMAGE_PNG
    return IMAGE_JPEG


def clean_etag(etag: Optional[str]) -> Optional[str]:
    """Remove the -gzip suffix some storages add to an ETag."""
    if etag and etag.lower().endswith(GZIP_SUFFIX):
        return etag[:-len(GZIP_SUFFIX)]
    return etag


def format_etag(etag: str) -> str:
    """Quote an ETag for use in a response header."""
    if etag.startswith('"') or etag.startswith(WEAK_PREFIX):
        return etag
    return f'"{etag}"'


def _normalize(tag: str) -> str:
    tag = tag.strip()
    if tag.startswith(WEAK_PREFIX):
        tag = tag[len(WEAK_PREFIX):]
    return tag.replace('"', '').lower()


def etag_matches(header: Optional[str], etag: Optional[str]) -> bool:
    """Check if a (comma separated) If-Match/If-None-Match value matches etag."""
    if header is None:
        return False
    if header.strip() == ANY:
        return True
    if not etag:
        return False
    wanted = _normalize(etag)
    return any(_normalize(tag) == wanted for tag in header.split(',') if tag.strip())


def precondition_failed(etag: Optional[str], preconditions: Preconditions) -> bool:
    """True if If-Match is given and matches neither '*' nor the ETag."""
    return preconditions.if_match is not None and not etag_matches(preconditions.if_match, etag)


def not_modified(etag, last_modified, preconditions: Preconditions) -> bool:
    """
    Standard conditional GET check. If-None-Match takes precedence over
    If-Modified-Since. Without an ETag the content is always considered
    modified.
    """
    if not etag:
        return False
    if preconditions.if_none_match is not None:
        return etag_matches(preconditions.if_none_match, etag)
    if last_modified is not None and preconditions.if_modified_since is not None:
        since = parse_date(preconditions.if_modified_since)
        return since is not None and int(last_modified.timestamp()) <= since
    return False


def deliver(
    media: MediaStream,
    request_headers: Mapping[str, str],
    type_hint: Optional[str] = None,
    chunk_size: int = CHUNK_SIZE
) -> Delivery:
    """
    Evaluate the request preconditions against a retrieved thumbnail.

    Args:
        media: the retrieved thumbnail, still open
        request_headers: headers of the request, only the conditional ones are used
        type_hint: url or file extension used to guess the Content-Type when
            the stored type is not an image type. Defaults to the original url.
        chunk_size: size of the chunks the body is streamed in

    Returns:
        The Delivery to send. The caller must send the body (if any) so the
        stream gets closed.
    """
    preconditions = Preconditions.from_headers(request_headers)
    etag = clean_etag(media.etag)
    last_modified = media.last_modified

    if precondition_failed(etag, preconditions):
        logger.info(f"Precondition failed for {media.id}: If-Match {preconditions.if_match}, ETag {etag}")
        media.close()
        return Delivery(PRECONDITION_FAILED)

    headers = {}
    if etag:
        headers['ETag'] = format_etag(etag)
    if last_modified is not None:
        headers['Last-Modified'] = http_date(last_modified)

    if not_modified(etag, last_modified, preconditions):
        logger.debug(f"Not modified: {media.id}")
        media.close()
        return Delivery(NOT_MODIFIED, headers)

    headers['Content-Type'] = media_type(media.content_type, type_hint or media.original_url)
    if media.content_length is not None:
        headers['Content-Length'] = str(media.content_length)
    return Delivery(OK, headers, media.iter_content(chunk_size))
