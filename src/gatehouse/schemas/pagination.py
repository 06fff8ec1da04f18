"""Cursor pagination over integer primary keys."""

import base64
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from src.gatehouse.core.exceptions import InvalidCursorError

T = TypeVar("T")

MAX_PAGE_SIZE = 1000


class Page(BaseModel, Generic[T]):
    """One page of results ordered by id.

    Cursors are opaque strings. Pass ``end_cursor`` back as ``after`` to move
    forward, or ``start_cursor`` as ``before`` to move backward.
    """

    items: list[T]
    start_cursor: str | None = None
    end_cursor: str | None = None
    has_next_page: bool = False
    has_previous_page: bool = False


class PageRequest(BaseModel):
    """Pagination arguments as received from the transport."""

    after: str | None = None
    before: str | None = None
    first: int | None = Field(default=None, ge=0, le=MAX_PAGE_SIZE)
    last: int | None = Field(default=None, ge=0, le=MAX_PAGE_SIZE)

    @property
    def backwards(self) -> bool:
        return self.last is not None or (self.before is not None and self.first is None)

    @property
    def limit(self) -> int:
        if self.backwards:
            return self.last if self.last is not None else MAX_PAGE_SIZE
        return self.first if self.first is not None else MAX_PAGE_SIZE

    @property
    def skip_id(self) -> int | None:
        cursor = self.before if self.backwards else self.after
        return decode_cursor(cursor) if cursor else None


def encode_cursor(value: int) -> str:
    """Encode an id as an opaque cursor."""
    return base64.urlsafe_b64encode(str(value).encode()).decode()


def decode_cursor(cursor: str) -> int:
    """Decode a cursor back to an id.

    Raises:
        InvalidCursorError: If cursor is invalid
    """
    try:
        return int(base64.urlsafe_b64decode(cursor.encode()).decode())
    except Exception as e:
        raise InvalidCursorError() from e
