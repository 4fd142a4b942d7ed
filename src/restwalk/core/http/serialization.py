"""
JSON wire format, backed by pydantic.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar

import pydantic_core
from pydantic import TypeAdapter

T = TypeVar("T")


@lru_cache(maxsize=256)
def _adapter(result_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(result_type)


class JsonSerializer:
    """Serialize payloads to JSON text and validate responses into types.

    Anything pydantic can dump (models, dataclasses, dicts, lists) is
    accepted on the way out; any type a ``TypeAdapter`` accepts
    (``list[Model]``, ``dict[str, int]``, ``Any``...) on the way in.
    """

    def __init__(self, by_alias: bool = True, exclude_none: bool = False):
        self.by_alias = by_alias
        self.exclude_none = exclude_none

    def serialize(self, value: Any) -> str:
        return pydantic_core.to_json(
            value,
            by_alias=self.by_alias,
            exclude_none=self.exclude_none,
        ).decode("utf-8")

    def deserialize(self, text: str | bytes, result_type: type[T]) -> T:
        return _adapter(result_type).validate_json(text)
