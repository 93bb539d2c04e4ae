"""
Block Collection Store
======================

Client-side owner of the block list and its sync status. Each operation is
one HTTP call to the blocks API; the local list only changes when the API
confirms a fetch, create, update, delete or reorder.
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

import requests

from ..core.config import Config

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A failed call to the blocks API, carrying the message to display"""


def _error_message(payload: Dict[str, Any], default: str) -> str:
    error = payload.get('error')
    message = payload.get('message')
    if error and message and message != error:
        return f"{error}: {message}"
    return error or message or default


class BlockCollection:
    """
    Holds `blocks`, `loading`, `error` and `total_blocks` for one view.

    The caller owns the lifecycle: construct it when the view opens and
    call close() (or use it as a context manager) when the view goes away.
    Calls are not serialised; whichever response lands last wins.
    """

    def __init__(self, base_url: str = None, session: requests.Session = None,
                 timeout: float = None, autoload: bool = False):
        self.base_url = (base_url or Config.API_URL).rstrip('/')
        self.session = session or requests.Session()
        self._owns_session = session is None
        self.timeout = timeout

        self.blocks: List[Dict[str, Any]] = []
        self.loading = False
        self.error: Optional[str] = None
        self.total_blocks = 0

        if autoload:
            self.fetch_blocks()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        if self._owns_session:
            self.session.close()

    # ===== Transport =====

    def _request(self, method: str, path: str = '', failure: str = 'Request failed',
                 **kwargs) -> Dict[str, Any]:
        """Send one request and return the decoded envelope, or raise ApiError"""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ApiError(f"{failure}: could not reach the server ({type(e).__name__})") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if not response.ok or not payload.get('success'):
            raise ApiError(_error_message(payload, failure))

        return payload

    def _fail(self, action: str, err: ApiError):
        self.error = str(err)
        logger.error(f"Error {action}: {err}")

    def _load(self, params: Dict[str, Any], failure: str, action: str, paged: bool = True):
        """
        Replace the list with everything the list endpoint returns for params.
        Paged listings are walked page by page until hasMore is false; the
        list is only replaced once every page has arrived.
        """
        self.loading = True
        self.error = None
        try:
            blocks: List[Dict[str, Any]] = []
            total = None
            offset = 0
            while True:
                page_params = dict(params, limit=Config.BLOCKS_MAX_LIMIT, offset=offset) if paged else params
                data = self._request('GET', params=page_params, failure=failure).get('data') or {}
                page = list(data.get('blocks', []))
                blocks.extend(page)
                total = data.get('total', len(blocks))
                if not paged or not data.get('hasMore') or not page:
                    break
                offset += len(page)

            self.blocks = blocks
            self.total_blocks = total
        except ApiError as e:
            self._fail(action, e)
        finally:
            self.loading = False

    # ===== Operations =====

    def fetch_blocks(self, category: str = None):
        """Replace the list with every block, optionally in one category"""
        params = {'category': category} if category else {}
        self._load(params, 'Failed to fetch blocks', 'fetching blocks')

    def search_blocks(self, term: str):
        """Replace the list with the server's matches for term (blank means everything)"""
        term = (term or '').strip()
        if term:
            # Search results come back unpaginated
            self._load({'search': term}, 'Failed to search blocks', 'searching blocks', paged=False)
        else:
            self.fetch_blocks()

    def refresh_blocks(self):
        """Re-fetch without any category or search constraint"""
        self.fetch_blocks()

    def create_block(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Create a block and put it at the front of the list"""
        self.error = None
        try:
            payload = self._request('POST', json=data, failure='Failed to create block')
        except ApiError as e:
            self._fail('creating block', e)
            return None

        block = payload.get('data')
        if not block:
            return None

        self.blocks = [block] + self.blocks
        self.total_blocks += 1
        return block

    def update_block(self, block_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update a block and swap it in at the same position"""
        self.error = None
        try:
            payload = self._request('PUT', f"/{block_id}", json=data, failure='Failed to update block')
        except ApiError as e:
            self._fail(f'updating block {block_id}', e)
            return None

        block = payload.get('data')
        if not block:
            return None

        self.blocks = [block if existing['id'] == block_id else existing for existing in self.blocks]
        return block

    def delete_block(self, block_id: int) -> bool:
        """Delete a block and drop it from the list"""
        self.error = None
        try:
            self._request('DELETE', f"/{block_id}", failure='Failed to delete block')
        except ApiError as e:
            self._fail(f'deleting block {block_id}', e)
            return False

        self.blocks = [block for block in self.blocks if block['id'] != block_id]
        self.total_blocks = max(self.total_blocks - 1, 0)
        return True

    def reorder_blocks(self, ordered_ids: Iterable[int]) -> bool:
        """Persist a new order, then sort the local list to the server's order"""
        self.error = None
        try:
            payload = self._request('POST', '/reorder', json={'order': list(ordered_ids)},
                                    failure='Failed to reorder blocks')
        except ApiError as e:
            self._fail('reordering blocks', e)
            return False

        server_order = (payload.get('data') or {}).get('blocks', [])
        rank = {block['id']: index for index, block in enumerate(server_order)}
        self.blocks = sorted(self.blocks, key=lambda block: rank.get(block['id'], len(rank)))
        return True

    # ===== Derived =====

    @property
    def category_stats(self) -> Dict[str, Any]:
        """Per-category counts of the loaded blocks and the most common category"""
        counts = Counter(block.get('category') for block in self.blocks)
        top = counts.most_common(1)
        return {
            'categories': dict(counts),
            'top_category': {'name': top[0][0], 'count': top[0][1]} if top else None,
        }
