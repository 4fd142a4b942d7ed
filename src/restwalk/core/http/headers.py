"""Response header helpers."""

from __future__ import annotations

from typing import Callable, TypeVar

import httpx

T = TypeVar("T")


def first_header_value(
    headers: httpx.Headers,
    name: str,
    value_type: Callable[..., T] = int,
) -> T:
    """Convert the first value of a header to ``value_type``.

    A missing header and an empty value both yield ``value_type()``, so an
    absent integer header reads as 0, the same as an explicit ``0``.

    Raises:
        ValueError: If the value cannot be converted
    """
    values = headers.get_list(name)
    if not values or not values[0]:
        return value_type()
    return value_type(values[0])
