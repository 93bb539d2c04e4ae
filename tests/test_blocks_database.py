"""
Persistence gateway tests against a throwaway SQLite file.
"""

import sqlite3

import pytest

from smartblocks.modules.blocks import database as blocks_db
from smartblocks.modules.blocks.database import DuplicateUrlError


def _new(title, category='Technology'):
    return {
        'title': title,
        'description': None,
        'url': f"https://{title.lower()}.example",
        'color': 'bg-green-500',
        'category': category,
    }


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


def _ids(blocks):
    return [block['id'] for block in blocks]


def test_uses_app_configured_path(app, ctx):
    assert blocks_db.get_db_config() == app.config['BLOCKS_DB']


def test_create_assigns_front_position(ctx):
    a = blocks_db.create_block(_new('A'))
    b = blocks_db.create_block(_new('B'))

    assert a['position'] == 0
    assert b['position'] == -1
    assert _ids(blocks_db.get_blocks()) == [b['id'], a['id']]


def test_duplicate_url_raises(ctx):
    blocks_db.create_block(_new('A'))

    with pytest.raises(DuplicateUrlError) as excinfo:
        blocks_db.create_block(_new('A'))

    assert excinfo.value.url == 'https://a.example'
    assert blocks_db.get_blocks_count() == 1


def test_url_exists_excludes_self(ctx):
    a = blocks_db.create_block(_new('A'))

    assert blocks_db.url_exists('https://a.example') is True
    assert blocks_db.url_exists('https://a.example', exclude_id=a['id']) is False
    assert blocks_db.url_exists('https://b.example') is False


def test_pagination_and_count(ctx):
    for title in ['A', 'B', 'C', 'D']:
        blocks_db.create_block(_new(title, 'Finance' if title in ('A', 'C') else 'Health & Fitness'))

    assert len(blocks_db.get_blocks(limit=3)) == 3
    assert len(blocks_db.get_blocks(limit=3, offset=3)) == 1
    assert blocks_db.get_blocks_count() == 4
    assert blocks_db.get_blocks_count('Finance') == 2
    assert [b['title'] for b in blocks_db.get_blocks('Finance')] == ['C', 'A']


def test_search_escapes_wildcards(ctx):
    blocks_db.create_block(dict(_new('Under'), title='snake_case'))
    blocks_db.create_block(_new('Other'))

    assert [b['title'] for b in blocks_db.search_blocks('_')] == ['snake_case']
    assert blocks_db.search_blocks('zzz') == []


def test_search_with_category(ctx):
    blocks_db.create_block(_new('Bank', 'Finance'))
    blocks_db.create_block(_new('Bankless', 'Education'))

    assert [b['title'] for b in blocks_db.search_blocks('bank', 'Finance')] == ['Bank']
    assert len(blocks_db.search_blocks('BANK')) == 2


def test_update_touches_updated_at_only(ctx):
    block = blocks_db.create_block(_new('A'))

    updated = blocks_db.update_block(block['id'], {'title': 'A2', 'unknown': 'ignored'})

    assert updated['title'] == 'A2'
    assert updated['created_at'] == block['created_at']
    assert updated['updated_at'] > block['updated_at']
    assert updated['position'] == block['position']


def test_update_missing_returns_none(ctx):
    assert blocks_db.update_block(99, {'title': 'x'}) is None


def test_update_to_taken_url_raises(ctx):
    blocks_db.create_block(_new('A'))
    b = blocks_db.create_block(_new('B'))

    with pytest.raises(DuplicateUrlError):
        blocks_db.update_block(b['id'], {'url': 'https://a.example'})


def test_delete(ctx):
    block = blocks_db.create_block(_new('A'))

    assert blocks_db.delete_block(block['id']) is True
    assert blocks_db.delete_block(block['id']) is False
    assert blocks_db.get_block_by_id(block['id']) is None


def test_reorder_renumbers_listed_then_rest(ctx):
    a = blocks_db.create_block(_new('A'))
    b = blocks_db.create_block(_new('B'))
    c = blocks_db.create_block(_new('C'))
    d = blocks_db.create_block(_new('D'))
    # display order is now D, C, B, A

    blocks_db.reorder_blocks([b['id'], d['id']])

    blocks = blocks_db.get_blocks()
    assert _ids(blocks) == [b['id'], d['id'], c['id'], a['id']]
    assert [block['position'] for block in blocks] == [0, 1, 2, 3]


def test_find_missing_ids(ctx):
    a = blocks_db.create_block(_new('A'))

    assert blocks_db.find_missing_ids([a['id'], 50, 7]) == [50, 7]
    assert blocks_db.find_missing_ids([]) == []


def test_category_counts(ctx):
    blocks_db.create_block(_new('A', 'Finance'))
    blocks_db.create_block(_new('B', 'Finance'))
    blocks_db.create_block(_new('C', 'Entertainment'))

    assert blocks_db.get_category_counts() == {'Finance': 2, 'Entertainment': 1}


def test_init_migrates_missing_position_column(app, tmp_db_dir):
    path = app.config['BLOCKS_DB']
    conn = sqlite3.connect(path)
    conn.execute('DROP TABLE blocks')
    conn.execute('''
        CREATE TABLE blocks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            description TEXT,
            url TEXT NOT NULL,
            color TEXT NOT NULL,
            category TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    ''')
    conn.commit()
    conn.close()

    with app.app_context():
        blocks_db.init_blocks_db()
        block = blocks_db.create_block(_new('A'))

    assert block['position'] == 0
