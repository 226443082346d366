import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from connectors import (ForgeConnector, Item, ItemCategory, PageFetcher,
                        PaginationException, RepositoryScope)
from connectors.base import MAX_PER_PAGE

logger = logging.getLogger(__name__)

FIRST_PAGE = 1


class ItemSink(Protocol):
    def accept(self, item: Item) -> None: ...


@dataclass(frozen=True)
class ExportConfig:
    """Settings for one export run, resolved once from the command line."""

    owner: str
    repo: str
    since: datetime
    per_page: int = MAX_PER_PAGE
    include_pull_request_issues: bool = False

    def __post_init__(self) -> None:
        if not self.owner or not self.repo:
            raise ValueError("owner and repo are required")
        if self.since.tzinfo is None:
            raise ValueError("since must be timezone-aware")
        if not 1 <= self.per_page <= MAX_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {MAX_PER_PAGE}")

    @property
    def scope(self) -> RepositoryScope:
        return RepositoryScope(owner=self.owner, repo=self.repo)


@dataclass
class ExportSummary:
    """Number of items handed to the sink per category."""

    issues: int = 0
    pull_requests: int = 0

    @property
    def total(self) -> int:
        return self.issues + self.pull_requests


def traverse_since(fetch_page: PageFetcher, since: datetime, sink: ItemSink) -> int:
    """Feed items newer than ``since`` to ``sink``, newest first.

    Pages must be ordered by creation date, descending. The first item
    created before ``since`` ends the traversal; no further page is fetched.
    Fetch errors propagate and items already accepted stay accepted.

    Returns the number of items traversed (accepted by the cutoff check).
    """
    page_number = FIRST_PAGE
    visited = 0
    while True:
        page = fetch_page(page_number)
        for item in page.items:
            if item.created_at < since:
                logger.debug(
                    f"Stopping at #{item.number} created {item.created_at.isoformat()}"
                )
                return visited
            sink.accept(item)
            visited += 1

        if page.next_page is None:
            return visited
        if page.next_page <= page_number:
            raise PaginationException(
                f"Next page {page.next_page} does not advance past page {page_number}"
            )
        page_number = page.next_page


class _SkipPullRequestIssues:
    """Drop pull requests that a forge lists among its issues."""

    def __init__(self, sink: ItemSink) -> None:
        self.sink = sink
        self.skipped = 0

    def accept(self, item: Item) -> None:
        if item.is_pull_request:
            self.skipped += 1
            return
        self.sink.accept(item)


def export_history(
    connector: ForgeConnector,
    config: ExportConfig,
    sink: ItemSink,
) -> ExportSummary:
    """Export issues, then pull requests, created on or after ``config.since``.

    Raises ConnectorException on the first fetch failure; rows written before
    the failure remain in the sink.
    """
    scope = config.scope
    summary = ExportSummary()

    issue_sink: ItemSink = sink
    skipper: Optional[_SkipPullRequestIssues] = None
    if not config.include_pull_request_issues:
        skipper = _SkipPullRequestIssues(sink)
        issue_sink = skipper

    visited = traverse_since(
        connector.page_fetcher(ItemCategory.ISSUE, scope), config.since, issue_sink
    )
    summary.issues = visited - (skipper.skipped if skipper else 0)
    logger.info(f"Exported {summary.issues} issues for {scope.full_name}")
    if skipper and skipper.skipped:
        logger.debug(f"Skipped {skipper.skipped} pull requests listed as issues")

    summary.pull_requests = traverse_since(
        connector.page_fetcher(ItemCategory.PULL_REQUEST, scope), config.since, sink
    )
    logger.info(
        f"Exported {summary.pull_requests} pull requests for {scope.full_name}"
    )
    return summary
