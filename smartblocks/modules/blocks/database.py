"""
Blocks Database
===============

SQLite schema and data access for blocks.
Every function opens its own connection on the configured BLOCKS_DB.
"""

import sqlite3
import logging
from datetime import datetime
from flask import current_app
from ...core.config import Config
from ...core.database import Database

logger = logging.getLogger(__name__)

TABLE = Config.BLOCKS_TABLE

BLOCK_COLUMNS = 'id, title, description, url, color, category, position, created_at, updated_at'

UPDATABLE_FIELDS = ('title', 'description', 'url', 'color', 'category')


class DuplicateUrlError(Exception):
    """Another block already links to this url"""

    def __init__(self, url):
        super().__init__(f"A block with URL {url} already exists")
        self.url = url


def get_db_config():
    """Get the database path from app config, falling back to the framework default"""
    try:
        val = current_app.config.get('BLOCKS_DB')
        if val:
            return val
    except RuntimeError:
        pass
    return Config.BLOCKS_DB


def _now():
    return datetime.now().isoformat(timespec='microseconds')


def _escape_like(term):
    return term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def init_blocks_db():
    """Initialize blocks table"""
    db_path = get_db_config()

    try:
        Database.ensure_dir(db_path)

        with Database.connect(db_path) as conn:
            cursor = conn.cursor()

            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT,
                    url TEXT NOT NULL,
                    color TEXT NOT NULL,
                    category TEXT NOT NULL,
                    position INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            ''')

            # Migration: databases created before ordering was persisted
            cursor.execute(f"PRAGMA table_info({TABLE})")
            columns = [column[1] for column in cursor.fetchall()]
            if 'position' not in columns:
                cursor.execute(f'ALTER TABLE {TABLE} ADD COLUMN position INTEGER NOT NULL DEFAULT 0')

            cursor.execute(f'CREATE UNIQUE INDEX IF NOT EXISTS idx_blocks_url ON {TABLE}(url)')
            cursor.execute(f'CREATE INDEX IF NOT EXISTS idx_blocks_category ON {TABLE}(category)')
            cursor.execute(f'CREATE INDEX IF NOT EXISTS idx_blocks_position ON {TABLE}(position)')
    except Exception as e:
        logger.error(f"Error initializing blocks database: {e}")
        raise


def get_blocks(category=None, limit=None, offset=0):
    """Blocks in display order, optionally filtered by category and paginated"""
    query = f'SELECT {BLOCK_COLUMNS} FROM {TABLE}'
    params = []

    if category:
        query += ' WHERE category = ?'
        params.append(category)

    query += ' ORDER BY position ASC, id DESC LIMIT ? OFFSET ?'
    params.extend([limit if limit is not None else -1, offset or 0])

    try:
        with Database.connect(get_db_config()) as conn:
            return [dict(row) for row in conn.execute(query, params).fetchall()]
    except Exception as e:
        logger.error(f"Error getting blocks: {e}")
        raise


def get_blocks_count(category=None):
    """Total number of blocks, optionally within one category"""
    query = f'SELECT COUNT(*) FROM {TABLE}'
    params = []
    if category:
        query += ' WHERE category = ?'
        params.append(category)

    try:
        with Database.connect(get_db_config()) as conn:
            return conn.execute(query, params).fetchone()[0]
    except Exception as e:
        logger.error(f"Error counting blocks: {e}")
        raise


def get_block_by_id(block_id):
    """Single block or None"""
    try:
        with Database.connect(get_db_config()) as conn:
            row = conn.execute(
                f'SELECT {BLOCK_COLUMNS} FROM {TABLE} WHERE id = ?', (block_id,)
            ).fetchone()
            return dict(row) if row else None
    except Exception as e:
        logger.error(f"Error getting block {block_id}: {e}")
        raise


def search_blocks(term, category=None):
    """
    Case-insensitive substring search over title, description and url.
    Returns every match in display order; no pagination.
    """
    pattern = f'%{_escape_like(term.strip())}%'
    query = f'''
        SELECT {BLOCK_COLUMNS} FROM {TABLE}
        WHERE (title LIKE ? ESCAPE '\\'
               OR COALESCE(description, '') LIKE ? ESCAPE '\\'
               OR url LIKE ? ESCAPE '\\')
    '''
    params = [pattern, pattern, pattern]

    if category:
        query += ' AND category = ?'
        params.append(category)

    query += ' ORDER BY position ASC, id DESC'

    try:
        with Database.connect(get_db_config()) as conn:
            return [dict(row) for row in conn.execute(query, params).fetchall()]
    except Exception as e:
        logger.error(f"Error searching blocks for '{term}': {e}")
        raise


def url_exists(url, exclude_id=None):
    """True when a block (other than exclude_id) already uses this url"""
    query = f'SELECT 1 FROM {TABLE} WHERE url = ?'
    params = [url]
    if exclude_id is not None:
        query += ' AND id != ?'
        params.append(exclude_id)

    with Database.connect(get_db_config()) as conn:
        return conn.execute(query + ' LIMIT 1', params).fetchone() is not None


def create_block(data):
    """Insert a block ahead of every existing one. Returns the stored block."""
    now = _now()

    try:
        with Database.connect(get_db_config()) as conn:
            cursor = conn.cursor()

            cursor.execute(f'SELECT MIN(position) FROM {TABLE}')
            min_position = cursor.fetchone()[0]
            position = (min_position - 1) if min_position is not None else 0

            cursor.execute(f'''
                INSERT INTO {TABLE} (title, description, url, color, category, position, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                data['title'],
                data.get('description'),
                data['url'],
                data['color'],
                data['category'],
                position,
                now,
                now
            ))

            row = cursor.execute(
                f'SELECT {BLOCK_COLUMNS} FROM {TABLE} WHERE id = ?', (cursor.lastrowid,)
            ).fetchone()
            return dict(row)
    except sqlite3.IntegrityError:
        raise DuplicateUrlError(data['url'])
    except Exception as e:
        logger.error(f"Error creating block: {e}")
        raise


def update_block(block_id, data):
    """Apply the given fields to a block. Returns the updated block, or None if it does not exist."""
    set_clauses = []
    values = []

    for field in UPDATABLE_FIELDS:
        if field in data:
            set_clauses.append(f"{field} = ?")
            values.append(data[field])

    if not set_clauses:
        return get_block_by_id(block_id)

    set_clauses.append("updated_at = ?")
    values.append(_now())
    values.append(block_id)

    try:
        with Database.connect(get_db_config()) as conn:
            cursor = conn.cursor()
            cursor.execute(f"UPDATE {TABLE} SET {', '.join(set_clauses)} WHERE id = ?", values)
            if cursor.rowcount == 0:
                return None

            row = cursor.execute(
                f'SELECT {BLOCK_COLUMNS} FROM {TABLE} WHERE id = ?', (block_id,)
            ).fetchone()
            return dict(row)
    except sqlite3.IntegrityError:
        raise DuplicateUrlError(data.get('url'))
    except Exception as e:
        logger.error(f"Error updating block {block_id}: {e}")
        raise


def delete_block(block_id):
    """Delete a block. Returns False when nothing was deleted."""
    try:
        with Database.connect(get_db_config()) as conn:
            cursor = conn.execute(f'DELETE FROM {TABLE} WHERE id = ?', (block_id,))
            return cursor.rowcount > 0
    except Exception as e:
        logger.error(f"Error deleting block {block_id}: {e}")
        raise


def find_missing_ids(block_ids):
    """Subset of block_ids with no stored block, in the order given"""
    if not block_ids:
        return []

    placeholders = ','.join('?' * len(block_ids))
    with Database.connect(get_db_config()) as conn:
        rows = conn.execute(
            f'SELECT id FROM {TABLE} WHERE id IN ({placeholders})', list(block_ids)
        ).fetchall()

    existing = {row[0] for row in rows}
    return [block_id for block_id in block_ids if block_id not in existing]


def reorder_blocks(block_ids):
    """
    Renumber positions densely: the given ids take 0..n-1 in the order given,
    all other blocks follow in their previous relative order.
    """
    try:
        with Database.connect(get_db_config()) as conn:
            cursor = conn.cursor()
            cursor.execute(f'SELECT id FROM {TABLE} ORDER BY position ASC, id DESC')
            listed = set(block_ids)
            remaining = [row[0] for row in cursor.fetchall() if row[0] not in listed]

            for position, block_id in enumerate(list(block_ids) + remaining):
                cursor.execute(f'UPDATE {TABLE} SET position = ? WHERE id = ?', (position, block_id))
            return True
    except Exception as e:
        logger.error(f"Error reordering blocks: {e}")
        raise


def get_category_counts():
    """Mapping of category -> number of blocks, only for categories in use"""
    with Database.connect(get_db_config()) as conn:
        rows = conn.execute(
            f'SELECT category, COUNT(*) AS count FROM {TABLE} GROUP BY category'
        ).fetchall()
    return {row['category']: row['count'] for row in rows}
