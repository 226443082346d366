"""
Helpers for reading page cursors out of forge API responses.
"""

import logging
from typing import Mapping, Optional
from urllib.parse import parse_qs, urlparse

from requests.utils import parse_header_links

logger = logging.getLogger(__name__)


def page_from_url(url: Optional[str]) -> Optional[int]:
    """
    Extract the ``page`` query parameter from a URL.

    :param url: Absolute or relative URL, e.g. a ``rel="next"`` link.
    :return: The page number, or None if absent or not an integer.
    """
    if not url:
        return None
    values = parse_qs(urlparse(url).query).get("page")
    if not values:
        return None
    try:
        return int(values[0])
    except ValueError:
        logger.warning(f"Ignoring non-numeric page parameter in {url}")
        return None


def next_page_from_link(link_header: Optional[str]) -> Optional[int]:
    """
    Return the page number of the ``rel="next"`` entry of an RFC 8288 Link header.

    GitHub and GitLab omit the ``next`` relation on the last page.
    """
    if not link_header:
        return None
    for link in parse_header_links(link_header):
        if link.get("rel") == "next":
            return page_from_url(link.get("url"))
    return None


def next_page_from_headers(headers: Mapping[str, str]) -> Optional[int]:
    """
    Return the next page number from response headers.

    Prefers the Link header and falls back to GitLab's ``X-Next-Page``, which
    is an empty string on the last page. Lookups are case-insensitive.
    """
    headers_ci = {str(k).lower(): v for k, v in headers.items()}
    next_page = next_page_from_link(headers_ci.get("link"))
    if next_page is not None:
        return next_page
    raw = (headers_ci.get("x-next-page") or "").strip()
    if raw.isdigit():
        return int(raw)
    return None
