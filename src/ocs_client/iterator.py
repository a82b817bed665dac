"""Page through `get_computers_V1` one computer at a time."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from .client import OCSClient

logger = logging.getLogger(__name__)


class ComputerIterator(Iterator[dict[str, Any]]):
    """Lazily fetch pages of computers and yield them one by one.

    The server caps the number of computers returned per call, so the iterator
    asks for page ``offset=0``, then ``offset=1`` and so on whenever its buffer
    runs dry. An empty page ends the iteration for good. Errors raised while
    fetching propagate and leave the offset untouched, so calling `next` again
    retries the same page.

    Instances keep private state and are meant for a single consumer.
    """

    def __init__(self, client: OCSClient, query: Mapping[str, Any] | None = None) -> None:
        self._client = client
        self._query = dict(query or {})
        self._buffer: deque[dict[str, Any]] = deque()
        self._offset = 0
        self._exhausted = False

    @property
    def offset(self) -> int:
        """Offset of the next page to fetch."""
        return self._offset

    def __iter__(self) -> ComputerIterator:
        return self

    def __next__(self) -> dict[str, Any]:
        if not self._buffer and not self._exhausted:
            self._fetch_page()
        if not self._buffer:
            raise StopIteration
        return self._buffer.popleft()

    def _fetch_page(self) -> None:
        logger.debug("Fetching computers page offset=%d", self._offset)
        page = self._client.get_computers(self._query, offset=self._offset)
        self._offset += 1
        if not page:
            self._exhausted = True
            return
        self._buffer.extend(page)
