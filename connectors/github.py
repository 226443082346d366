"""
GitHub connector using PyGithub.

This connector lists a repository's issues and pull requests one page at a
time, newest first, for the history export.
"""

import logging
from typing import Any, Dict, Optional

from github import (Auth, BadCredentialsException, Github, GithubException,
                    RateLimitExceededException, UnknownObjectException)

from connectors.base import MAX_PER_PAGE, ForgeConnector
from connectors.exceptions import (APIException, AuthenticationException,
                                   NotFoundException, RateLimitException)
from connectors.models import Item, ItemCategory, Page, RepositoryScope
from connectors.utils import next_page_from_link

logger = logging.getLogger(__name__)

LIST_PARAMS = {"state": "all", "sort": "created", "direction": "desc"}


def build_auth(
    token: Optional[str] = None,
    login: Optional[str] = None,
    password: Optional[str] = None,
) -> Optional[Auth.Auth]:
    """
    Resolve GitHub credentials into a PyGithub auth object.

    A token wins over login/password. Returns None when no complete set of
    credentials is given, in which case requests are made anonymously.
    """
    if token:
        return Auth.Token(token)
    if login and password:
        return Auth.Login(login, password)
    return None


class GitHubConnector(ForgeConnector):
    """
    GitHub connector built on the PyGithub client.

    Pages are requested through the client's requester so the ``Link``
    header is available to drive pagination. PyGithub's own retry is disabled.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        login: Optional[str] = None,
        password: Optional[str] = None,
        base_url: Optional[str] = None,
        per_page: int = MAX_PER_PAGE,
    ):
        """
        Initialize GitHub connector.

        :param token: GitHub personal access token.
        :param login: GitHub username, used with ``password`` when no token is given.
        :param password: GitHub password.
        :param base_url: Optional base URL for GitHub Enterprise.
        :param per_page: Number of items per page for pagination.
        """
        super().__init__(per_page=per_page)

        auth = build_auth(token=token, login=login, password=password)
        self.authenticated = auth is not None

        kwargs: Dict[str, Any] = {"auth": auth, "per_page": per_page, "retry": None}
        if base_url:
            kwargs["base_url"] = base_url
        self.github = Github(**kwargs)

    def _handle_github_exception(self, e: Exception) -> None:
        """
        Handle GitHub API exceptions and convert to connector exceptions.

        :param e: Exception from GitHub API.
        :raises: Appropriate connector exception.
        """
        if isinstance(e, RateLimitExceededException):
            raise RateLimitException(f"GitHub rate limit exceeded: {e}") from e
        elif isinstance(e, BadCredentialsException):
            raise AuthenticationException(f"GitHub authentication failed: {e}") from e
        elif isinstance(e, UnknownObjectException):
            raise NotFoundException(f"GitHub resource not found: {e}") from e
        elif isinstance(e, GithubException):
            if e.status == 401:
                raise AuthenticationException(f"GitHub authentication failed: {e}") from e
            raise APIException(f"GitHub API error: {e}") from e
        else:
            raise APIException(f"Unexpected error: {e}") from e

    def _list_page(
        self,
        path: str,
        category: ItemCategory,
        page: int,
    ) -> Page:
        parameters = {**LIST_PARAMS, "page": page, "per_page": self.per_page}
        try:
            headers, data = self.github.requester.requestJsonAndCheck(
                "GET", path, parameters=parameters
            )
        except Exception as e:
            self._handle_github_exception(e)

        if not isinstance(data, list):
            raise APIException(
                f"Expected list response from {path}, got {type(data).__name__}"
            )

        items = [Item.from_github(payload, category) for payload in data]
        next_page = next_page_from_link((headers or {}).get("link"))
        logger.debug(
            f"Fetched {len(items)} items from {path} page {page} (next: {next_page})"
        )
        return Page(items=items, next_page=next_page)

    def list_issues_page(self, scope: RepositoryScope, page: int) -> Page:
        """
        Fetch one page of issues, newest first.

        GitHub includes pull requests in this listing; they come back with
        ``is_pull_request`` set.
        """
        return self._list_page(
            f"/repos/{scope.full_name}/issues", ItemCategory.ISSUE, page
        )

    def list_pull_requests_page(self, scope: RepositoryScope, page: int) -> Page:
        """Fetch one page of pull requests, newest first."""
        return self._list_page(
            f"/repos/{scope.full_name}/pulls", ItemCategory.PULL_REQUEST, page
        )

    def close(self) -> None:
        """Close the underlying PyGithub connection pool."""
        self.github.close()
        super().close()
