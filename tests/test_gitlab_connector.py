"""
Tests for the GitLab connector and its REST client.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from conftest import gitlab_payload, utc
from connectors import (APIException, AuthenticationException,
                        GitLabConnector, ItemCategory, NotFoundException,
                        RateLimitException, RepositoryScope)
from connectors.utils import GitLabRESTClient, RESTClient

SCOPE = RepositoryScope(owner="acme", repo="widgets")


def _response(status=200, data=None, headers=None):
    response = Mock()
    response.status_code = status
    response.json.return_value = [] if data is None else data
    response.headers = headers or {}
    response.text = "error body"
    return response


@pytest.fixture
def mock_get():
    with patch("connectors.utils.rest.requests.get") as get:
        yield get


class TestGitLabRESTClient:
    """Test the page-at-a-time REST client."""

    def test_private_token_header(self, mock_get):
        mock_get.return_value = _response()
        client = GitLabRESTClient(private_token="glpat")

        client.get_page("projects/1/issues")

        headers = mock_get.call_args.kwargs["headers"]
        assert headers["PRIVATE-TOKEN"] == "glpat"
        assert "Authorization" not in headers

    def test_base_client_sends_only_given_headers(self, mock_get):
        mock_get.return_value = _response()
        client = RESTClient(
            "https://forge.example.com/api/", headers={"Accept": "application/json"}
        )

        client.get_page("items")

        args, kwargs = mock_get.call_args
        assert args[0] == "https://forge.example.com/api/items"
        assert kwargs["headers"] == {"Accept": "application/json"}

    def test_base_client_has_no_bearer_token(self):
        with pytest.raises(TypeError):
            RESTClient("https://forge.example.com", token="secret")

    def test_issue_page_request(self, mock_get):
        mock_get.return_value = _response(headers={"X-Next-Page": "3"})
        client = GitLabRESTClient()

        data, next_page = client.get_issues_page("acme/widgets", page=2, per_page=50)

        args, kwargs = mock_get.call_args
        assert args[0] == "https://gitlab.com/api/v4/projects/acme%2Fwidgets/issues"
        assert kwargs["params"] == {
            "order_by": "created_at",
            "sort": "desc",
            "page": 2,
            "per_page": 50,
        }
        assert data == []
        assert next_page == 3

    def test_merge_request_page_request(self, mock_get):
        mock_get.return_value = _response(headers={"X-Next-Page": ""})
        client = GitLabRESTClient()

        _, next_page = client.get_merge_requests_page("acme/widgets")

        args, kwargs = mock_get.call_args
        assert args[0].endswith("/projects/acme%2Fwidgets/merge_requests")
        assert kwargs["params"]["state"] == "all"
        assert next_page is None

    def test_link_header_preferred(self, mock_get):
        mock_get.return_value = _response(
            headers={
                "Link": '<https://gitlab.com/api/v4/projects/1/issues?page=5>; rel="next"',
                "X-Next-Page": "9",
            }
        )

        _, next_page = GitLabRESTClient().get_page("projects/1/issues")

        assert next_page == 5

    @pytest.mark.parametrize(
        "status, expected",
        [
            (401, AuthenticationException),
            (403, APIException),
            (404, NotFoundException),
            (429, RateLimitException),
            (500, APIException),
        ],
    )
    def test_http_errors(self, mock_get, status, expected):
        mock_get.return_value = _response(status=status)

        with pytest.raises(expected):
            GitLabRESTClient().get_page("projects/1/issues")

        assert mock_get.call_count == 1

    def test_transport_errors(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(APIException, match="Request failed"):
            GitLabRESTClient().get_page("projects/1/issues")

    def test_timeout(self, mock_get):
        mock_get.side_effect = requests.exceptions.Timeout()

        with pytest.raises(APIException, match="timeout"):
            GitLabRESTClient().get_page("projects/1/issues")

    def test_invalid_json(self, mock_get):
        response = _response()
        response.json.side_effect = ValueError("no json")
        mock_get.return_value = response

        with pytest.raises(APIException, match="Invalid JSON"):
            GitLabRESTClient().get_page("projects/1/issues")

    def test_non_list_body(self, mock_get):
        mock_get.return_value = _response(data={"message": "odd"})

        with pytest.raises(APIException, match="Expected list"):
            GitLabRESTClient().get_page("projects/1/issues")


class TestGitLabConnector:
    """Test item decoding through the connector."""

    def test_list_issues_page(self, mock_get):
        mock_get.return_value = _response(
            data=[gitlab_payload(4, "2024-02-01T10:00:00.000Z")],
            headers={"X-Next-Page": "2"},
        )
        connector = GitLabConnector(url="https://gitlab.example.com/", private_token="t")

        page = connector.list_issues_page(SCOPE, 1)

        assert mock_get.call_args.args[0].startswith(
            "https://gitlab.example.com/api/v4/projects/"
        )
        assert page.next_page == 2
        item = page.items[0]
        assert item.number == 4
        assert item.url == "https://gitlab.com/acme/widgets/-/issues/4"
        assert item.author.username == "tanuki"
        assert item.created_at == utc(2024, 2, 1, 10)
        assert item.category is ItemCategory.ISSUE
        assert item.is_pull_request is False

    def test_list_merge_requests_page(self, mock_get):
        mock_get.return_value = _response(
            data=[gitlab_payload(9, "2024-01-05T00:00:00Z")]
        )
        connector = GitLabConnector(per_page=20)

        page = connector.list_pull_requests_page(SCOPE, 1)

        assert mock_get.call_args.kwargs["params"]["per_page"] == 20
        assert page.next_page is None
        assert page.items[0].category is ItemCategory.PULL_REQUEST
        assert page.items[0].is_pull_request is True

    def test_authenticated_flag(self):
        assert GitLabConnector(private_token="t").authenticated is True
        assert GitLabConnector().authenticated is False
