"""CLI command modules."""

from . import pages

__all__ = [
    "pages",
]
