"""
Helpers for images served by the Europeana IIIF image server.
"""

from typing import Optional, Union

IIIF_HOST_NAME = 'iiif.europeana.eu'
FULL_SIZE_TEMPLATE = '/full/full/0/default.'


def is_europeana_iiif_url(url: Optional[str]) -> bool:
    """Check if the url points to an image hosted on iiif.europeana.eu."""
    if url is None:
        return False
    url_lower = url.lower()
    return (url_lower.startswith(f"http://{IIIF_HOST_NAME}")
            or url_lower.startswith(f"https://{IIIF_HOST_NAME}"))


def europeana_iiif_thumbnail_url(url: Optional[str], width: Union[int, str]) -> Optional[str]:
    """
    Convert a full size Europeana IIIF image url into a url for a scaled
    version of the requested width.

    Args:
        url: IIIF image url ending in /full/full/0/default.<extension>
        width: desired width in pixels

    Returns:
        The url of the scaled image, or None if url is not a full size
        Europeana IIIF image url
    """
    if not is_europeana_iiif_url(url) or FULL_SIZE_TEMPLATE not in url:
        return None
    return url.replace(FULL_SIZE_TEMPLATE, f"/full/{width},/0/default.")
