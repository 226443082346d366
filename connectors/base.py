"""
Base class shared by forge connectors.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable

from connectors.models import ItemCategory, Page, RepositoryScope

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int], Page]

MAX_PER_PAGE = 100


class ForgeConnector(ABC):
    """
    Abstract connector that lists a repository's issues and pull requests.

    Both listings are ordered by creation date, newest first, across all
    states, and are fetched one page per call.
    """

    def __init__(self, per_page: int = MAX_PER_PAGE):
        """
        :param per_page: Number of items per page (1 to 100).
        """
        if not 1 <= per_page <= MAX_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {MAX_PER_PAGE}")
        self.per_page = per_page

    @abstractmethod
    def list_issues_page(self, scope: RepositoryScope, page: int) -> Page:
        """
        Fetch one page of issues.

        :param scope: Repository to read from.
        :param page: Page number, starting at 1.
        :return: Page of issues with the next page number.
        """

    @abstractmethod
    def list_pull_requests_page(self, scope: RepositoryScope, page: int) -> Page:
        """
        Fetch one page of pull requests.

        :param scope: Repository to read from.
        :param page: Page number, starting at 1.
        :return: Page of pull requests with the next page number.
        """

    def page_fetcher(self, category: ItemCategory, scope: RepositoryScope) -> PageFetcher:
        """
        Bind a listing to a scope so it can be driven by page number alone.

        :param category: Which listing to bind.
        :param scope: Repository to read from.
        :return: Callable taking a page number and returning a Page.
        """
        if category is ItemCategory.ISSUE:
            listing = self.list_issues_page
        else:
            listing = self.list_pull_requests_page

        def fetch(page: int) -> Page:
            return listing(scope, page)

        return fetch

    def close(self) -> None:
        """Release any held client resources."""
        logger.debug(f"Closed {type(self).__name__}")
