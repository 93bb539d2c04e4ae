"""
Block Search
============

Client-side filtering of a block list by free text and category, with a
short history of recent search terms. Pure computation, no I/O.
"""

from typing import Any, Callable, Dict, Iterable, List, Union

from ..core.config import CATEGORIES, ALL_CATEGORIES

DEFAULT_HISTORY_LIMIT = 5

BlockSource = Union[Iterable[Dict[str, Any]], Callable[[], Iterable[Dict[str, Any]]]]


def matches_term(block: Dict[str, Any], term: str) -> bool:
    """Case-insensitive substring match on title, description or url"""
    needle = (term or '').strip().lower()
    if not needle:
        return True

    fields = (block.get('title'), block.get('description'), block.get('url'))
    return any(needle in (value or '').lower() for value in fields)


def matches_category(block: Dict[str, Any], category: str) -> bool:
    return category == ALL_CATEGORIES or block.get('category') == category


def filter_blocks(blocks: Iterable[Dict[str, Any]], search_term: str = '',
                  category: str = ALL_CATEGORIES) -> List[Dict[str, Any]]:
    """Blocks matching both the term and the category, input order kept"""
    return [
        block for block in blocks
        if matches_category(block, category) and matches_term(block, search_term)
    ]


class BlockSearch:
    """
    Derived view over a block list.

    Assign `blocks`, `search_term` or `selected_category` and read
    `filtered_blocks`, `total_results` and `has_active_filters`; derived
    values are recomputed on every read.

    `blocks` is either a list, copied once, or a zero-argument callable
    read on every access. Pass `lambda: store.blocks` to follow a
    BlockCollection through its creates, updates and deletes.
    """

    def __init__(self, blocks: BlockSource = (),
                 history_limit: int = DEFAULT_HISTORY_LIMIT):
        if history_limit < 1:
            raise ValueError("history_limit must be at least 1")

        self.history_limit = history_limit
        self.blocks = blocks
        self._search_term = ''
        self._selected_category = ALL_CATEGORIES
        self._history: List[str] = []

    @property
    def blocks(self) -> List[Dict[str, Any]]:
        if self._source is not None:
            return list(self._source())
        return self._blocks

    @blocks.setter
    def blocks(self, blocks: BlockSource):
        if callable(blocks):
            self._source = blocks
            self._blocks = []
        else:
            self._source = None
            self._blocks = list(blocks)

    @property
    def search_term(self) -> str:
        return self._search_term

    @search_term.setter
    def search_term(self, term: str):
        term = term or ''
        self._search_term = term

        committed = term.strip()
        if committed and (not self._history or self._history[0] != committed):
            self._history.insert(0, committed)
            del self._history[self.history_limit:]

    @property
    def selected_category(self) -> str:
        return self._selected_category

    @selected_category.setter
    def selected_category(self, category: str):
        if category != ALL_CATEGORIES and category not in CATEGORIES:
            raise ValueError(f"Unknown category: {category}")
        self._selected_category = category

    @property
    def filtered_blocks(self) -> List[Dict[str, Any]]:
        return filter_blocks(self.blocks, self._search_term, self._selected_category)

    @property
    def total_results(self) -> int:
        return len(self.filtered_blocks)

    @property
    def has_active_filters(self) -> bool:
        return bool(self._search_term.strip()) or self._selected_category != ALL_CATEGORIES

    @property
    def search_history(self) -> List[str]:
        """Most recent first"""
        return list(self._history)

    def clear_history(self):
        self._history = []

    def clear_search(self):
        """Reset both filters; history is kept"""
        self._search_term = ''
        self._selected_category = ALL_CATEGORIES
