from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntFlag
from typing import Any, Iterator


class ErrorType(IntFlag):
    PRIVATE = 1
    PUBLIC = 2
    RENDER = 4
    BIND = 8
    ANY = PRIVATE | PUBLIC | RENDER | BIND


@dataclass
class RequestError:
    err: BaseException | str
    type: ErrorType = ErrorType.PRIVATE
    meta: Any = None

    def is_type(self, flags: ErrorType) -> bool:
        return bool(self.type & flags)

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.meta is not None:
            if isinstance(self.meta, Mapping):
                payload.update(self.meta)
            else:
                payload["meta"] = self.meta
        payload.setdefault("error", str(self.err))
        return payload

    def __str__(self) -> str:
        return str(self.err)


class ErrorList:
    """Errors attached to a single request while it is being handled."""

    def __init__(self, items: list[RequestError] | None = None) -> None:
        self._items: list[RequestError] = list(items or [])

    def add(
        self,
        err: BaseException | str,
        error_type: ErrorType = ErrorType.PRIVATE,
        meta: Any = None,
    ) -> RequestError:
        item = RequestError(err=err, type=error_type, meta=meta)
        self._items.append(item)
        return item

    def by_type(self, flags: ErrorType) -> ErrorList:
        if flags == ErrorType.ANY:
            return ErrorList(self._items)
        return ErrorList([item for item in self._items if item.is_type(flags)])

    def last(self) -> RequestError | None:
        return self._items[-1] if self._items else None

    def to_json(self) -> list[dict[str, Any]]:
        return [item.to_json() for item in self._items]

    def __iter__(self) -> Iterator[RequestError]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __str__(self) -> str:
        lines: list[str] = []
        for i, item in enumerate(self._items, start=1):
            lines.append(f"Error #{i:02d}: {item.err}\n")
            if item.meta is not None:
                lines.append(f"     Meta: {item.meta}\n")
        return "".join(lines)
