"""
Smart Blocks - A Curated Link Directory
=======================================

A Flask extension serving a JSON API for categorized link cards ("blocks"),
plus a Python client store and a client-side search/filter engine:
- CRUD + search API with a uniform response envelope
- Block collection store kept in sync with the API
- Search, category filter and search history over any block list

Usage:
    from flask import Flask
    from smartblocks import SmartBlocks

    app = Flask(__name__)
    SmartBlocks(app)

    from smartblocks.client import BlockCollection, BlockSearch
"""

import os
import logging
from flask import jsonify, request

from .core.config import Config

__version__ = '0.1.0'
__author__ = 'Smart Blocks Contributors'

logger = logging.getLogger(__name__)

DEFAULT_FEATURES = {
    'blocks': True,
}


class SmartBlocks:
    """
    Flask extension wiring the blocks API into an app.

    Config (dict passed at construction, all optional):
        features: {'blocks': bool}
    App config keys honoured: DB_DIR, BLOCKS_DB, LOGS_DB.
    """

    def __init__(self, app=None, config=None):
        self._config = config or {}
        self._registered = []
        self.app = None

        if app is not None:
            self.init_app(app)

    @property
    def features(self):
        features = dict(DEFAULT_FEATURES)
        features.update(self._config.get('features', {}))
        return features

    def init_app(self, app):
        self.app = app
        self._apply_config_defaults(app)
        self._setup_database_dir(app)

        if self.features.get('blocks'):
            self._register_blocks(app)

        app.extensions['smartblocks'] = self
        logger.info(f"Smart Blocks initialised with modules: {', '.join(self._registered) or 'none'}")

    def get_registered_modules(self):
        return list(self._registered)

    def _apply_config_defaults(self, app):
        """Fill in anything the host app did not set from the framework Config"""
        db_dir = app.config.get('DB_DIR') or Config.DB_DIR
        app.config['DB_DIR'] = db_dir
        app.config.setdefault('BLOCKS_DB', os.path.join(db_dir, 'blocks.db'))
        app.config.setdefault('LOGS_DB', os.path.join(db_dir, 'app_logs.db'))
        if not app.config.get('SECRET_KEY') and Config.SECRET_KEY:
            app.config['SECRET_KEY'] = Config.SECRET_KEY

    def _setup_database_dir(self, app):
        os.makedirs(app.config['DB_DIR'], exist_ok=True)

    def _register_blocks(self, app):
        from .modules.blocks import blocks_api_bp
        from .modules.blocks.database import init_blocks_db

        app.register_blueprint(blocks_api_bp)
        with app.app_context():
            init_blocks_db()

        api_prefix = blocks_api_bp.url_prefix

        # Routing errors (unknown path, wrong method) never reach blueprint
        # handlers, so the envelope is applied app-wide for API paths only.
        def api_error(e):
            if not request.path.startswith(api_prefix):
                return e
            return jsonify({
                'success': False,
                'error': e.name,
                'message': e.description,
            }), e.code

        for code in (404, 405, 500):
            app.register_error_handler(code, api_error)

        self._registered.append('blocks')
