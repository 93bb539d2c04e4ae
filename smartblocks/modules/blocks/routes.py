"""
Blocks Routes
=============

JSON API for the link directory. Every response uses the envelope
{success, data?, error?, message?}.

- GET    /api/blocks            - List (category, search, limit, offset)
- POST   /api/blocks            - Create
- GET    /api/blocks/<id>       - Get one
- PUT    /api/blocks/<id>       - Partial update
- DELETE /api/blocks/<id>       - Delete
- GET    /api/blocks/stats      - Per-category counts
- GET    /api/blocks/options    - Categories, colors and color theme
- POST   /api/blocks/reorder    - Persist a new display order
"""

import time
import logging
from flask import request, jsonify, g
from flask_cors import cross_origin
from . import blocks_api_bp
from . import database as blocks_db
from .database import DuplicateUrlError
from .validation import (
    validate_create, validate_update, validate_query_params, validate_order,
    parse_block_id, first_error
)
from ...core.config import Config, CATEGORIES, COLORS, COLOR_THEMES
from ...core.logging_service import LoggingService, db_log

logger = logging.getLogger(__name__)

# Allowed origins for CORS
ALLOWED_ORIGINS = Config.CORS_ORIGINS

LOG_SOURCE = 'blocks'


# ===== Envelope Helpers =====

def success_response(data=None, message=None, status=200):
    body = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    return jsonify(body), status


def error_response(status, error, message):
    return jsonify({'success': False, 'error': error, 'message': message}), status


def _internal_error(action, e):
    logger.error(f"Error trying to {action}: {e}")
    LoggingService.log_error_with_traceback(LOG_SOURCE, e, {'action': action})
    return error_response(500, 'Internal server error', f'Failed to {action}')


def _invalid_id_response():
    return error_response(400, 'Invalid block ID', 'Block ID must be a positive integer')


def _not_found_response(block_id):
    return error_response(404, 'Block not found', f'Block with ID {block_id} does not exist')


def _duplicate_url_response(url):
    return error_response(409, 'Duplicate URL', f'A block with URL {url} already exists')


# ===== Request Hooks =====

@blocks_api_bp.before_request
def _before_request():
    g.blocks_request_started = time.perf_counter()
    if request.method != 'OPTIONS':
        blocks_db.init_blocks_db()


@blocks_api_bp.after_request
def _after_request(response):
    started = g.pop('blocks_request_started', None)
    if started is None or request.method == 'OPTIONS':
        return response

    duration_ms = (time.perf_counter() - started) * 1000
    logger.debug(f"{request.method} {request.path} -> {response.status_code} in {duration_ms:.1f}ms")

    # Reads are only persisted when they fail
    if request.method != 'GET' or response.status_code >= 400:
        LoggingService.log_api_call(
            LOG_SOURCE, request.path, request.method, response.status_code, duration_ms
        )
    return response


# ===== Collection Routes =====

@blocks_api_bp.route('', methods=['GET', 'OPTIONS'])
@cross_origin(origins=ALLOWED_ORIGINS)
def list_blocks():
    """List blocks, or search them when a non-blank search term is given"""
    params, errors = validate_query_params(request.args)
    if errors:
        return error_response(400, 'Invalid query parameters', first_error(errors, 'Validation failed'))

    try:
        if params['search']:
            blocks = blocks_db.search_blocks(params['search'], params['category'])
            return success_response({'blocks': blocks, 'total': len(blocks)})

        blocks = blocks_db.get_blocks(params['category'], params['limit'], params['offset'])
        total = blocks_db.get_blocks_count(params['category'])
        return success_response({
            'blocks': blocks,
            'total': total,
            'limit': params['limit'],
            'offset': params['offset'],
            'hasMore': params['offset'] + len(blocks) < total,
        })
    except Exception as e:
        return _internal_error('fetch blocks', e)


@blocks_api_bp.route('', methods=['POST'])
@cross_origin(origins=ALLOWED_ORIGINS)
def create_block():
    """Create a new block"""
    data, errors = validate_create(request.get_json(silent=True))
    if errors:
        return error_response(400, 'Validation failed', first_error(errors))

    try:
        if blocks_db.url_exists(data['url']):
            return _duplicate_url_response(data['url'])

        block = blocks_db.create_block(data)
        logger.info(f"Block created: {block['id']} ({block['title']})")
        return success_response(block, 'Block created successfully', 201)
    except DuplicateUrlError as e:
        return _duplicate_url_response(e.url)
    except Exception as e:
        return _internal_error('create block', e)


# ===== Dashboard Routes =====

@blocks_api_bp.route('/stats', methods=['GET', 'OPTIONS'])
@cross_origin(origins=ALLOWED_ORIGINS)
def block_stats():
    """Block counts per category plus the most used category"""
    try:
        in_use = blocks_db.get_category_counts()
    except Exception as e:
        return _internal_error('fetch block stats', e)

    categories = {category: in_use.get(category, 0) for category in CATEGORIES}
    total = sum(in_use.values())

    top_category = None
    if total:
        name = max(categories, key=lambda category: categories[category])
        top_category = {'name': name, 'count': categories[name]}

    return success_response({
        'total': total,
        'categories': categories,
        'topCategory': top_category,
    })


@blocks_api_bp.route('/options', methods=['GET', 'OPTIONS'])
@cross_origin(origins=ALLOWED_ORIGINS)
def block_options():
    """Choices for the block form"""
    return success_response({
        'categories': list(CATEGORIES),
        'colors': list(COLORS),
        'theme': COLOR_THEMES,
    })


@blocks_api_bp.route('/reorder', methods=['POST', 'OPTIONS'])
@cross_origin(origins=ALLOWED_ORIGINS)
def reorder_blocks():
    """Persist a new display order"""
    order, errors = validate_order(request.get_json(silent=True))
    if errors:
        return error_response(400, 'Validation failed', first_error(errors))

    try:
        missing = blocks_db.find_missing_ids(order)
        if missing:
            ids = ', '.join(str(block_id) for block_id in missing)
            return error_response(404, 'Block not found', f'No blocks with IDs: {ids}')

        blocks_db.reorder_blocks(order)
        db_log('info', LOG_SOURCE, 'Blocks reordered', {'order': order})
        blocks = blocks_db.get_blocks()
        return success_response({'blocks': blocks, 'total': len(blocks)}, 'Blocks reordered successfully')
    except Exception as e:
        return _internal_error('reorder blocks', e)


# ===== Single Block Routes =====

@blocks_api_bp.route('/<block_id>', methods=['GET', 'OPTIONS'])
@cross_origin(origins=ALLOWED_ORIGINS)
def get_block(block_id):
    """Fetch a single block"""
    parsed_id = parse_block_id(block_id)
    if parsed_id is None:
        return _invalid_id_response()

    try:
        block = blocks_db.get_block_by_id(parsed_id)
    except Exception as e:
        return _internal_error('fetch block', e)

    if not block:
        return _not_found_response(parsed_id)
    return success_response(block)


@blocks_api_bp.route('/<block_id>', methods=['PUT'])
@cross_origin(origins=ALLOWED_ORIGINS)
def update_block(block_id):
    """Update an existing block with any subset of its fields"""
    parsed_id = parse_block_id(block_id)
    if parsed_id is None:
        return _invalid_id_response()

    try:
        if not blocks_db.get_block_by_id(parsed_id):
            return _not_found_response(parsed_id)

        data, errors = validate_update(request.get_json(silent=True))
        if errors:
            return error_response(400, 'Validation failed', first_error(errors))

        if 'url' in data and blocks_db.url_exists(data['url'], exclude_id=parsed_id):
            return _duplicate_url_response(data['url'])

        block = blocks_db.update_block(parsed_id, data)
        if not block:
            # Deleted between the existence check and the update
            return _not_found_response(parsed_id)

        logger.info(f"Block updated: {parsed_id} ({', '.join(sorted(data))})")
        return success_response(block, 'Block updated successfully')
    except DuplicateUrlError as e:
        return _duplicate_url_response(e.url)
    except Exception as e:
        return _internal_error('update block', e)


@blocks_api_bp.route('/<block_id>', methods=['DELETE'])
@cross_origin(origins=ALLOWED_ORIGINS)
def delete_block(block_id):
    """Delete a block"""
    parsed_id = parse_block_id(block_id)
    if parsed_id is None:
        return _invalid_id_response()

    try:
        if not blocks_db.get_block_by_id(parsed_id):
            return _not_found_response(parsed_id)

        if not blocks_db.delete_block(parsed_id):
            return _not_found_response(parsed_id)

        logger.info(f"Block deleted: {parsed_id}")
        db_log('info', LOG_SOURCE, f'Block deleted: {parsed_id}')
        return success_response(message='Block deleted successfully')
    except Exception as e:
        return _internal_error('delete block', e)
