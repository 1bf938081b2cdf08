"""
Fallback retrieval: try each storage of a route in order until one has the thumbnail.
"""

import logging
from typing import Iterable, Optional

from .media_stream import MediaStream
from .storages import MediaStorage

logger = logging.getLogger(__name__)

# hits from legacy storages go to a separate logger so they can be tracked
# while thumbnails are being migrated
migration_logger = logging.getLogger('thumbnail_api.migration')


def retrieve_thumbnail(
    storages: Iterable[MediaStorage],
    id: str,
    original_url: Optional[str] = None
) -> Optional[MediaStream]:
    """
    Return the thumbnail from the first storage that has it.

    Args:
        storages: storages in order of priority
        id: storage key (hash plus size)
        original_url: url of the original resource, if known (v2 requests)

    Returns:
        An open MediaStream, or None if no storage has the thumbnail.
        Storages after the first hit are not queried. Errors raised by a
        storage are not caught.
    """
    for storage in storages:
        result = storage.retrieve(id, original_url)
        if result is None:
            logger.debug(f"File {id} not present in storage {storage.name}")
            continue

        logger.debug(f"File {id} found in storage {storage.name}")
        if storage.legacy:
            migration_logger.info(f"File {id} served from legacy storage {storage.name}",
                                  extra={'storage': storage.name, 'thumbnail_id': id})
        return result
    return None
