"""
GitHub and GitLab connectors for reading a repository's issue history.

This package provides page-at-a-time connectors for GitHub and GitLab
that list issues and pull requests newest first.
"""

from .base import ForgeConnector, PageFetcher
from .exceptions import (APIException, AuthenticationException,
                         ConnectorException, NotFoundException,
                         PaginationException, PayloadException,
                         RateLimitException)
from .github import GitHubConnector, build_auth
from .gitlab import GitLabConnector
from .models import (Author, Item, ItemCategory, Page, RepositoryScope,
                     parse_timestamp)

__all__ = [
    # Connectors
    "ForgeConnector",
    "GitHubConnector",
    "GitLabConnector",
    "PageFetcher",
    "build_auth",
    # Models
    "Author",
    "Item",
    "ItemCategory",
    "Page",
    "RepositoryScope",
    "parse_timestamp",
    # Exceptions
    "ConnectorException",
    "RateLimitException",
    "AuthenticationException",
    "NotFoundException",
    "PaginationException",
    "APIException",
    "PayloadException",
]
