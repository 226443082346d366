"""
REST API helper utilities.

Provides a small page-at-a-time client for forge REST APIs,
particularly for GitLab's REST API.
"""

import logging
import urllib.parse
from typing import Any, Dict, List, Optional, Tuple

import requests

from connectors.exceptions import (APIException, AuthenticationException,
                                   NotFoundException, RateLimitException)
from connectors.utils.pagination import next_page_from_headers

logger = logging.getLogger(__name__)


class RESTClient:
    """
    Generic REST API client that fetches one page per call.

    Errors are translated into connector exceptions and never retried.
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize REST client.

        :param base_url: Base URL for the API.
        :param timeout: Request timeout in seconds.
        :param headers: Optional additional headers.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}

    def get_page(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        """
        Make a GET request expecting a list response.

        :param endpoint: API endpoint (relative to base_url).
        :param params: Optional query parameters, including ``page``.
        :param headers: Optional additional headers.
        :return: The decoded list and the next page number (None on the last page).
        :raises AuthenticationException: If authentication fails.
        :raises NotFoundException: If the endpoint does not exist.
        :raises RateLimitException: If rate limit is exceeded.
        :raises APIException: If the API returns an error or a non-list body.
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        request_headers = {**self.headers, **(headers or {})}

        try:
            response = requests.get(
                url,
                params=params,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise APIException("Request timeout") from e
        except requests.exceptions.RequestException as e:
            raise APIException(f"Request failed: {e}") from e

        # Check for HTTP errors
        if response.status_code == 401:
            raise AuthenticationException("Authentication failed")
        elif response.status_code == 403:
            raise APIException(f"Forbidden: {response.text}")
        elif response.status_code == 429:
            raise RateLimitException("API rate limit exceeded")
        elif response.status_code == 404:
            raise NotFoundException(f"Not found: {endpoint}")
        elif response.status_code != 200:
            raise APIException(f"API error: {response.status_code} - {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise APIException(f"Invalid JSON from {endpoint}: {e}") from e

        if not isinstance(data, list):
            raise APIException(f"Expected list response, got {type(data).__name__}")

        return data, next_page_from_headers(response.headers)


class GitLabRESTClient(RESTClient):
    """
    Specialized REST client for GitLab API.
    """

    def __init__(
        self,
        base_url: str = "https://gitlab.com/api/v4",
        private_token: Optional[str] = None,
        timeout: int = 30,
    ):
        """
        Initialize GitLab REST client.

        :param base_url: GitLab API base URL.
        :param private_token: GitLab private token.
        :param timeout: Request timeout in seconds.
        """
        headers = {}
        if private_token:
            headers["PRIVATE-TOKEN"] = private_token

        super().__init__(base_url=base_url, timeout=timeout, headers=headers)

    @staticmethod
    def project_path(full_name: str) -> str:
        """URL-encode a ``namespace/project`` path for use as a project id."""
        return urllib.parse.quote(full_name, safe="")

    def get_issues_page(
        self,
        full_name: str,
        page: int = 1,
        per_page: int = 100,
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        """
        Get one page of a project's issues, newest first.

        :param full_name: Project path, e.g. ``group/project``.
        :param page: Page number.
        :param per_page: Results per page.
        :return: Issues on the page and the next page number.
        """
        endpoint = f"projects/{self.project_path(full_name)}/issues"
        params = {
            "order_by": "created_at",
            "sort": "desc",
            "page": page,
            "per_page": per_page,
        }

        logger.debug(f"Fetching issues for project {full_name}, page {page}")
        return self.get_page(endpoint, params=params)

    def get_merge_requests_page(
        self,
        full_name: str,
        state: str = "all",
        page: int = 1,
        per_page: int = 100,
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        """
        Get one page of a project's merge requests, newest first.

        :param full_name: Project path, e.g. ``group/project``.
        :param state: State filter ('opened', 'closed', 'merged', 'all').
        :param page: Page number.
        :param per_page: Results per page.
        :return: Merge requests on the page and the next page number.
        """
        endpoint = f"projects/{self.project_path(full_name)}/merge_requests"
        params = {
            "state": state,
            "order_by": "created_at",
            "sort": "desc",
            "page": page,
            "per_page": per_page,
        }

        logger.debug(f"Fetching merge requests for project {full_name}, page {page}")
        return self.get_page(endpoint, params=params)
