"""Learned task tags ranked by use, with stale-tag cleanup and completion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Iterator, Optional

MAX_TAG_AGE_DAYS = 30
DEFAULT_RECENT_TAG_COUNT = 5


@dataclass
class TagUsage:
    name: str
    last_used: date
    count: int = 1


class TagLedger:
    """Tags seen on added tasks, most used first.

    Names match case-insensitively; the first spelling seen is kept.
    """

    def __init__(
        self,
        tags: Iterable[TagUsage] = (),
        *,
        on_change: Optional[Callable[[], None]] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._tags: list[TagUsage] = sorted(tags, key=lambda tag: tag.count, reverse=True)
        self._on_change = on_change
        self._now = now_fn or (lambda: datetime.now().astimezone())
        self._logger = logger or logging.getLogger("tasks.tags")

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[TagUsage]:
        return iter(tuple(self._tags))

    def get(self, name: str) -> Optional[TagUsage]:
        key = name.lower()
        for tag in self._tags:
            if tag.name.lower() == key:
                return tag
        return None

    def record_usage(self, names: Iterable[str]) -> None:
        names = [name for name in names if name]
        if not names:
            return
        today = self._today()
        for name in names:
            tag = self.get(name)
            if tag is None:
                self._tags.append(TagUsage(name=name, last_used=today))
            else:
                tag.count += 1
                tag.last_used = today
        # Stable sort keeps first-seen order among equal counts.
        self._tags.sort(key=lambda tag: tag.count, reverse=True)
        self._changed()

    def recent(self, count: int = DEFAULT_RECENT_TAG_COUNT) -> list[str]:
        if count <= 0:
            return []
        return [tag.name for tag in self._tags[:count]]

    def suggest(self, partial: str) -> Optional[str]:
        """Most used tag starting with ``partial``, else one containing it."""
        key = partial.lower()
        if not key:
            return None
        for tag in self._tags:
            if tag.name.lower().startswith(key):
                return tag.name
        for tag in self._tags:
            if key in tag.name.lower():
                return tag.name
        return None

    def cleanup(self, max_age_days: int = MAX_TAG_AGE_DAYS) -> int:
        """Forget tags unused for more than ``max_age_days``; returns how many."""
        cutoff = self._today() - timedelta(days=max_age_days)
        kept = [tag for tag in self._tags if tag.last_used >= cutoff]
        removed = len(self._tags) - len(kept)
        if removed:
            self._tags = kept
            self._logger.info("Forgot %d stale tag(s)", removed)
            self._changed()
        return removed

    def clear(self) -> None:
        self._tags.clear()
        self._changed()

    def _today(self) -> date:
        return self._now().date()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
