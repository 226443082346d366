"""Shared test fixtures for the test suite."""
from datetime import datetime, timezone
from typing import Callable, List, Optional

import pytest

from connectors import Author, ForgeConnector, Item, ItemCategory, Page


class ListSink:
    """Sink that records every accepted item."""

    def __init__(self):
        self.items: List[Item] = []

    def accept(self, item: Item) -> None:
        self.items.append(item)

    @property
    def numbers(self) -> List[int]:
        return [item.number for item in self.items]


class FakeFetcher:
    """Serve a fixed list of items in pages, recording each requested page."""

    def __init__(self, items: List[Item], per_page: int = 2):
        self.pages = [
            items[start : start + per_page] for start in range(0, len(items), per_page)
        ] or [[]]
        self.requested: List[int] = []

    def __call__(self, page: int) -> Page:
        self.requested.append(page)
        index = page - 1
        next_page: Optional[int] = page + 1 if index + 1 < len(self.pages) else None
        return Page(items=list(self.pages[index]), next_page=next_page)


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


@pytest.fixture
def make_item() -> Callable[..., Item]:
    """Return a factory for items created at a given instant."""

    def _make(
        number: int,
        created_at: datetime,
        category: ItemCategory = ItemCategory.ISSUE,
        is_pull_request: bool = False,
        title: Optional[str] = None,
    ) -> Item:
        return Item(
            number=number,
            title=title or f"Item {number}",
            url=f"https://github.com/acme/widgets/issues/{number}",
            created_at=created_at,
            author=Author(username="octocat", url="https://github.com/octocat"),
            category=category,
            is_pull_request=is_pull_request,
        )

    return _make


@pytest.fixture
def sink() -> ListSink:
    return ListSink()


def github_payload(number: int, created_at: str, **extra) -> dict:
    payload = {
        "number": number,
        "title": f"Item {number}",
        "html_url": f"https://github.com/acme/widgets/issues/{number}",
        "created_at": created_at,
        "user": {"login": "octocat", "html_url": "https://github.com/octocat"},
    }
    payload.update(extra)
    return payload


def gitlab_payload(iid: int, created_at: str) -> dict:
    return {
        "id": 1000 + iid,
        "iid": iid,
        "title": f"Item {iid}",
        "web_url": f"https://gitlab.com/acme/widgets/-/issues/{iid}",
        "created_at": created_at,
        "author": {"username": "tanuki", "web_url": "https://gitlab.com/tanuki"},
    }


class StubConnector(ForgeConnector):
    """Connector serving canned items per category."""

    def __init__(self, issues=(), pull_requests=(), per_page=2):
        super().__init__(per_page=per_page)
        self.fetchers = {
            ItemCategory.ISSUE: FakeFetcher(list(issues), per_page=per_page),
            ItemCategory.PULL_REQUEST: FakeFetcher(list(pull_requests), per_page=per_page),
        }
        self.scopes = []
        self.order = []
        self.closed = False
        self.authenticated = True

    def _serve(self, category, scope, page) -> Page:
        self.scopes.append(scope)
        self.order.append(category)
        return self.fetchers[category](page)

    def list_issues_page(self, scope, page):
        return self._serve(ItemCategory.ISSUE, scope, page)

    def list_pull_requests_page(self, scope, page):
        return self._serve(ItemCategory.PULL_REQUEST, scope, page)

    def close(self):
        self.closed = True
