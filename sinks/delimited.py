from __future__ import annotations

import csv
from datetime import timezone
from typing import List, Sequence, TextIO

from connectors.models import Item

DELIMITERS = {"comma": ",", "tab": "\t"}

TIMESTAMP_FORMAT = "%m/%d/%Y %H:%M:%S"

HEADER = ("Author", "Type", "Number", "Title", "Created")


def hyperlink(label: object, url: str) -> str:
    """Spreadsheet HYPERLINK formula; double quotes are escaped by doubling."""
    safe_url = str(url).replace('"', '""')
    safe_label = str(label).replace('"', '""')
    return f'=HYPERLINK("{safe_url}", "{safe_label}")'


def format_timestamp(item: Item) -> str:
    return item.created_at.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def item_to_row(item: Item) -> List[str]:
    return [
        hyperlink(item.author.username, item.author.url),
        item.category.value,
        hyperlink(item.number, item.url),
        item.title,
        format_timestamp(item),
    ]


class DelimitedRowSink:
    """Write one delimited row per accepted item, flushing after every row.

    Write errors from the underlying stream propagate to the caller.
    """

    def __init__(
        self,
        stream: TextIO,
        delimiter: str = ",",
        header: Sequence[str] | None = None,
    ) -> None:
        if len(delimiter) != 1:
            raise ValueError("delimiter must be a single character")
        self.stream = stream
        self.writer = csv.writer(stream, delimiter=delimiter, lineterminator="\n")
        self.rows_written = 0
        if header:
            self.writer.writerow(list(header))
            self.stream.flush()

    def accept(self, item: Item) -> None:
        self.writer.writerow(item_to_row(item))
        self.stream.flush()
        self.rows_written += 1
