"""
Blocks Module
=============

JSON CRUD API for the link directory ("blocks").

Provides:
- List / search / paginate blocks
- Create, read, update and delete by id
- Category stats, form options and persisted reordering
"""

from flask import Blueprint

blocks_api_bp = Blueprint(
    'blocks_api',
    __name__,
    url_prefix='/api/blocks'
)

from . import routes

__all__ = ['blocks_api_bp']
