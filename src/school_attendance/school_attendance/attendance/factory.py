from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import WriteMode
from .strategies.base import WriteStrategy
from .strategies.insert_strategy import InsertStrategy
from .strategies.update_strategy import UpdateStrategy


def select_write_mode(existing_count: int, update_mode: bool) -> WriteMode:
    """Once any mark exists for the session, every later batch must reconcile per student."""
    if existing_count > 0 or update_mode:
        return WriteMode.UPDATE
    return WriteMode.INSERT


@dataclass
class WriteStrategyFactory:
    """Factory Pattern: choose the persistence strategy for a batch."""

    def for_batch(self, *, existing_count: int, update_mode: bool) -> WriteStrategy:
        if select_write_mode(existing_count, update_mode) == WriteMode.UPDATE:
            return UpdateStrategy()
        return InsertStrategy()
