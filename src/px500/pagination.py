"""Pagination parameter normalization.

Page numbers are 1-based. Items per page default to 20 and are capped at the
server maximum of 100.
"""

import copy
import dataclasses
from typing import TypeVar

__all__ = [
    "DEFAULT_ITEMS_PER_PAGE",
    "MAX_ITEMS_PER_PAGE",
    "normalize_items_per_page",
    "normalize_page_number",
    "normalize_request",
    "page_exceeds",
    "snapshot_request",
]

DEFAULT_ITEMS_PER_PAGE = 20
MAX_ITEMS_PER_PAGE = 100

R = TypeVar("R")


def normalize_page_number(page_number: int) -> int:
    return max(page_number, 1)


def normalize_items_per_page(items_per_page: int) -> int:
    if items_per_page <= 0:
        return DEFAULT_ITEMS_PER_PAGE
    if items_per_page >= MAX_ITEMS_PER_PAGE:
        return MAX_ITEMS_PER_PAGE
    return items_per_page


def normalize_request(request: R) -> R:
    """Return a copy of ``request`` with its pagination fields normalized.

    Applies to any request dataclass with a ``page_number`` and/or an
    ``items_per_page`` field. The input is never modified.
    """
    changes = {}
    if hasattr(request, "page_number"):
        changes["page_number"] = normalize_page_number(request.page_number)
    if hasattr(request, "items_per_page"):
        changes["items_per_page"] = normalize_items_per_page(request.items_per_page)
    return dataclasses.replace(request, **changes)


def snapshot_request(request: R) -> R:
    """Deep, normalized copy of a caller's request.

    Later changes to the caller's object (including its list fields) do not
    reach the copy.
    """
    return normalize_request(copy.deepcopy(request))


def page_exceeds(page_number: int, max_page_number: int) -> bool:
    """True once ``page_number`` reaches a positive ``max_page_number``."""
    if max_page_number <= 0:
        return False
    return page_number >= max_page_number
