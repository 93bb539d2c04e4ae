"""
Smart Blocks Client
===================

Python-side state for views built on the blocks API.
"""

from .collection import BlockCollection, ApiError
from .search import BlockSearch, filter_blocks, DEFAULT_HISTORY_LIMIT

__all__ = ['BlockCollection', 'ApiError', 'BlockSearch', 'filter_blocks', 'DEFAULT_HISTORY_LIMIT']
