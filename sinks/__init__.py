from .delimited import DELIMITERS, DelimitedRowSink, hyperlink, item_to_row  # noqa: F401

__all__ = [
    "DELIMITERS",
    "DelimitedRowSink",
    "hyperlink",
    "item_to_row",
]
