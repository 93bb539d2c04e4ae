"""
Blocks Validation
=================

Payload and query-string validation for the blocks API.
Validators return (clean_data, errors); errors maps field name -> message
and is empty when the input is valid.
"""

from urllib.parse import urlparse
from ...core.config import Config, CATEGORIES, COLORS, ALL_CATEGORIES

TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000


def is_valid_url(value):
    """Absolute URL with a scheme and a network location"""
    if not isinstance(value, str) or not value.strip() or any(c.isspace() for c in value.strip()):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return bool(parsed.scheme) and parsed.scheme[0].isalpha() and bool(parsed.netloc)


def _check_title(value, errors):
    if value is None:
        errors['title'] = 'Title is required'
        return None
    if not isinstance(value, str):
        errors['title'] = 'Title must be text'
        return None
    value = value.strip()
    if not value:
        errors['title'] = 'Title is required'
    elif len(value) > TITLE_MAX_LENGTH:
        errors['title'] = 'Title must be less than 255 characters'
    return value


def _check_description(value, errors):
    # None means "no description"; an empty string is kept as given
    if value is None:
        return None
    if not isinstance(value, str):
        errors['description'] = 'Description must be text'
    elif len(value) > DESCRIPTION_MAX_LENGTH:
        errors['description'] = 'Description must be less than 1000 characters'
    return value


def _check_url(value, errors):
    if not is_valid_url(value):
        errors['url'] = 'Please enter a valid URL'
        return value
    return value.strip()


def _check_color(value, errors):
    if value not in COLORS:
        errors['color'] = 'Please select a valid color'
    return value


def _check_category(value, errors):
    if value not in CATEGORIES:
        errors['category'] = 'Please select a valid category'
    return value


_FIELD_CHECKS = (
    ('title', _check_title),
    ('description', _check_description),
    ('url', _check_url),
    ('color', _check_color),
    ('category', _check_category),
)


def validate_create(payload):
    """Validate a create payload. Every field but description is required."""
    if not isinstance(payload, dict):
        return {}, {'body': 'Request body must be a JSON object'}

    data = {}
    errors = {}
    for field, check in _FIELD_CHECKS:
        data[field] = check(payload.get(field), errors)

    return data, errors


def validate_update(payload):
    """Validate a partial update; only supplied fields are checked and returned"""
    if not isinstance(payload, dict):
        return {}, {'body': 'Request body must be a JSON object'}

    data = {}
    errors = {}
    for field, check in _FIELD_CHECKS:
        if field in payload:
            data[field] = check(payload[field], errors)

    if not data and not errors:
        errors['body'] = 'No fields to update'

    return data, errors


def _is_digits(raw):
    return raw.isascii() and raw.isdigit()


def _parse_int(raw):
    raw = raw.strip()
    if raw.startswith('-') and _is_digits(raw[1:]):
        return int(raw)
    return int(raw) if _is_digits(raw) else None


def validate_query_params(args):
    """
    Validate list query parameters (category, search, limit, offset).
    Missing values get defaults; "All" or empty category means no filter.
    """
    params = {
        'category': None,
        'search': None,
        'limit': Config.BLOCKS_DEFAULT_LIMIT,
        'offset': 0,
    }
    errors = {}

    category = args.get('category')
    if category and category != ALL_CATEGORIES:
        if category in CATEGORIES:
            params['category'] = category
        else:
            errors['category'] = 'Please select a valid category'

    search = args.get('search')
    if search and search.strip():
        params['search'] = search.strip()

    limit = args.get('limit')
    if limit:
        value = _parse_int(limit)
        if value is None or not 1 <= value <= Config.BLOCKS_MAX_LIMIT:
            errors['limit'] = f'Limit must be between 1 and {Config.BLOCKS_MAX_LIMIT}'
        else:
            params['limit'] = value

    offset = args.get('offset')
    if offset:
        value = _parse_int(offset)
        if value is None or value < 0:
            errors['offset'] = 'Offset must be 0 or greater'
        else:
            params['offset'] = value

    return params, errors


def parse_block_id(raw):
    """Positive integer id from a path segment, or None"""
    if not isinstance(raw, str) or not _is_digits(raw):
        return None
    value = int(raw)
    return value if value > 0 else None


def validate_order(payload):
    """Validate a reorder payload {"order": [id, ...]}"""
    if not isinstance(payload, dict):
        return [], {'body': 'Request body must be a JSON object'}

    order = payload.get('order')
    if not isinstance(order, list) or not order:
        return [], {'order': 'Order list required'}

    if any(isinstance(i, bool) or not isinstance(i, int) or i <= 0 for i in order):
        return [], {'order': 'Order must contain positive integer block IDs'}

    if len(set(order)) != len(order):
        return [], {'order': 'Order contains duplicate block IDs'}

    return order, {}


def first_error(errors, default='Invalid input data'):
    """The message to show for a failed validation"""
    return next(iter(errors.values()), default)
