"""
Utility modules for connectors.
"""

from .pagination import (next_page_from_headers, next_page_from_link,
                         page_from_url)
from .rest import GitLabRESTClient, RESTClient

__all__ = [
    "next_page_from_headers",
    "next_page_from_link",
    "page_from_url",
    "RESTClient",
    "GitLabRESTClient",
]
