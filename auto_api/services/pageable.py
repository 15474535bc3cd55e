from dataclasses import dataclass, field
from typing import Any

from auto_api.config import settings
from auto_api.utils.exceptions import NotFoundException

# LIMIT / OFFSET are signed 64-bit on every supported database
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class Pageable:
    """Page request. size == 0 means "no paging"."""
    number: int = settings.DEFAULT_PAGE_NUMBER
    size:   int = settings.DEFAULT_PAGE_SIZE


@dataclass
class Slice:
    """One page of results plus the size of the whole matching set."""
    content:        list[Any] = field(default_factory=list)
    total_elements: int = 0


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def create_pageable(number: Any = None, size: Any = None) -> Pageable:
    """
    Build a Pageable from raw query-string values.
    Missing, malformed or negative values fall back to the defaults;
    size is capped at MAX_PAGE_SIZE. A page whose offset cannot be
    represented by the database raises NotFoundException.
    """
    page_number = _to_int(number)
    if page_number is None or page_number < 0:
        page_number = settings.DEFAULT_PAGE_NUMBER

    page_size = _to_int(size)
    if page_size is None or page_size < 0:
        page_size = settings.DEFAULT_PAGE_SIZE
    elif page_size > settings.MAX_PAGE_SIZE:
        page_size = settings.MAX_PAGE_SIZE

    if page_number * page_size > MAX_OFFSET:
        raise NotFoundException(f'Invalid page "{page_number}"')

    return Pageable(number=page_number, size=page_size)
