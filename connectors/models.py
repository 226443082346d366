"""
Typed records decoded from forge API payloads.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from connectors.exceptions import PayloadException


class ItemCategory(str, Enum):
    """Kind of item being exported; the value is the label written to output."""

    ISSUE = "Issue"
    PULL_REQUEST = "Pull Request"


@dataclass(frozen=True)
class RepositoryScope:
    """The (owner, repository) pair identifying one collection."""

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class Author:
    username: str
    url: str


@dataclass(frozen=True)
class Item:
    """An issue or pull request, reduced to the fields the export needs."""

    number: int
    title: str
    url: str
    created_at: datetime
    author: Author
    category: ItemCategory
    is_pull_request: bool = False

    @classmethod
    def from_github(cls, payload: Dict[str, Any], category: ItemCategory) -> "Item":
        """
        Build an item from a GitHub REST issue or pull request payload.

        :param payload: Decoded JSON object for one issue or pull request.
        :param category: Which endpoint the payload came from.
        :return: Validated Item.
        :raises PayloadException: If a required field is missing.
        """
        user = _require(payload, "user")
        return cls(
            number=_require(payload, "number"),
            title=_require(payload, "title"),
            url=_require(payload, "html_url"),
            created_at=parse_timestamp(_require(payload, "created_at")),
            author=Author(
                username=_require(user, "login"),
                url=_require(user, "html_url"),
            ),
            category=category,
            is_pull_request=(
                category is ItemCategory.PULL_REQUEST or "pull_request" in payload
            ),
        )

    @classmethod
    def from_gitlab(cls, payload: Dict[str, Any], category: ItemCategory) -> "Item":
        """
        Build an item from a GitLab REST issue or merge request payload.

        GitLab numbers items per project with ``iid``; ``id`` is global.
        """
        author = _require(payload, "author")
        return cls(
            number=_require(payload, "iid"),
            title=_require(payload, "title"),
            url=_require(payload, "web_url"),
            created_at=parse_timestamp(_require(payload, "created_at")),
            author=Author(
                username=_require(author, "username"),
                url=_require(author, "web_url"),
            ),
            category=category,
            is_pull_request=category is ItemCategory.PULL_REQUEST,
        )


@dataclass
class Page:
    """One page of items plus the number of the page after it, if any."""

    items: List[Item] = field(default_factory=list)
    next_page: Optional[int] = None


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp as returned by forge APIs into an aware UTC datetime.

    :raises PayloadException: If the value is not a valid timestamp.
    """
    if not isinstance(value, str):
        raise PayloadException(f"Invalid timestamp: {value!r}")
    text = value.strip()
    # GitHub and GitLab both use a trailing Z.
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise PayloadException(f"Invalid timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _require(payload: Any, key: str) -> Any:
    if not isinstance(payload, dict):
        raise PayloadException(f"Expected an object while reading '{key}'")
    value = payload.get(key)
    if value is None:
        raise PayloadException(f"Payload is missing required field '{key}'")
    return value
