"""
GitLab connector using the REST API.

This connector lists a project's issues and merge requests one page at a
time, newest first, for the history export.
"""

import logging
from typing import Optional

from connectors.base import MAX_PER_PAGE, ForgeConnector
from connectors.models import Item, ItemCategory, Page, RepositoryScope
from connectors.utils import GitLabRESTClient

logger = logging.getLogger(__name__)


class GitLabConnector(ForgeConnector):
    """
    GitLab connector using the REST API.

    Merge requests are exported under the pull request category.
    """

    def __init__(
        self,
        url: str = "https://gitlab.com",
        private_token: Optional[str] = None,
        per_page: int = MAX_PER_PAGE,
    ):
        """
        Initialize GitLab connector.

        :param url: GitLab instance URL.
        :param private_token: GitLab private token.
        :param per_page: Number of items per page for pagination.
        """
        super().__init__(per_page=per_page)
        self.url = url.rstrip("/")
        self.authenticated = bool(private_token)

        self.rest_client = GitLabRESTClient(
            base_url=f"{self.url}/api/v4",
            private_token=private_token,
        )

    def list_issues_page(self, scope: RepositoryScope, page: int) -> Page:
        data, next_page = self.rest_client.get_issues_page(
            scope.full_name, page=page, per_page=self.per_page
        )
        items = [Item.from_gitlab(payload, ItemCategory.ISSUE) for payload in data]
        logger.debug(f"Fetched {len(items)} issues for {scope.full_name} page {page}")
        return Page(items=items, next_page=next_page)

    def list_pull_requests_page(self, scope: RepositoryScope, page: int) -> Page:
        data, next_page = self.rest_client.get_merge_requests_page(
            scope.full_name, state="all", page=page, per_page=self.per_page
        )
        items = [
            Item.from_gitlab(payload, ItemCategory.PULL_REQUEST) for payload in data
        ]
        logger.debug(
            f"Fetched {len(items)} merge requests for {scope.full_name} page {page}"
        )
        return Page(items=items, next_page=next_page)
