"""Single-flight cache of parsed document views for one run."""

from __future__ import annotations

import asyncio
import logging
import os

from mdcite.documents.view import ParsedDocumentView
from mdcite.errors import CacheEvictionRace
from mdcite.parsing.base import DocumentTokenizer

logger = logging.getLogger(__name__)


class DocumentCache:
    """Memoize "parse + wrap" per absolute path.

    Concurrent ``resolve`` calls for the same path share one in-flight task,
    so the tokenizer runs at most once per path. A failed parse is evicted
    inside the task itself, before any waiter observes the failure, so the
    next ``resolve`` retries instead of replaying the error.

    Keys are absolute, normalized paths; symlinks are not collapsed.
    """

    def __init__(self, tokenizer: DocumentTokenizer) -> None:
        self._tokenizer = tokenizer
        self._entries: dict[str, asyncio.Task[ParsedDocumentView]] = {}

    @staticmethod
    def normalize_key(path: str | os.PathLike[str]) -> str:
        return os.path.abspath(os.fspath(path))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return self.normalize_key(path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def resolve(self, path: str | os.PathLike[str]) -> ParsedDocumentView:
        key = self.normalize_key(path)
        task = self._entries.get(key)
        if task is None:
            logger.debug("Document cache miss: %s", key)
            task = asyncio.ensure_future(self._load(key))
            self._entries[key] = task
        elif task.done() and not task.cancelled() and task.exception() is not None:
            # Unreachable while _load evicts before waiters resume; a failed entry here means eviction was skipped.
            raise CacheEvictionRace(key)
        else:
            logger.debug("Document cache hit: %s", key)

        # Shielded so one cancelled waiter does not cancel the shared parse.
        return await asyncio.shield(task)

    async def _load(self, key: str) -> ParsedDocumentView:
        try:
            parsed = await asyncio.to_thread(self._tokenizer.parse, key)
        except BaseException:
            self._evict(key)
            raise
        return ParsedDocumentView(parsed)

    def _evict(self, key: str) -> None:
        current = asyncio.current_task()
        if self._entries.get(key) is current:
            del self._entries[key]
            logger.debug("Evicted failed document cache entry: %s", key)
